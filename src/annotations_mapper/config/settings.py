"""
Configuration settings for the annotations mapper.

Settings are read from the environment using the variable names the service
has always been deployed with (``KAFKA_ADDRESS``, ``WHITELIST_REGEX`` ...).
"""

import re
from typing import Optional, Pattern, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..shared_lib.exceptions import ConfigurationError

APP_SYSTEM_CODE = "pac-annotations-mapper"
APP_NAME = "PAC Annotations Mapper"
APP_DESCRIPTION = "UPP mapper for PAC annotations"


class MapperSettings(BaseSettings):
    """Configuration settings for the annotations mapper."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Service configuration
    app_port: int = Field(default=8080, ge=1, le=65535, description="Port to listen on")
    log_level: str = Field(default="INFO", description="Log level")

    # Kafka configuration
    kafka_address: str = Field(
        default="kafka:9092",
        description="Addresses used by the kafka consumer and producer to connect to MSK",
    )
    consumer_group: str = Field(
        default="pac-annotations-mapper",
        description="Group used to read the messages from the queue",
    )
    consumer_topic: str = Field(
        default="NativeCmsMetadataPublicationEvents",
        description="The topic to read the messages from",
    )
    kafka_lag_tolerance: int = Field(
        default=200, ge=0, description="Consumer offset lag tolerance"
    )
    producer_topic: str = Field(
        default="ConceptAnnotations",
        description="The topic to write the concept annotation to",
    )
    connect_retry_interval: float = Field(
        default=60.0, ge=0.0, description="Seconds between Kafka connection attempts"
    )

    # Message filter
    whitelist_regex: str = Field(
        default=r"http://cmdb\.ft\.com/systems/pac",
        description="The regex to use to filter messages based on Origin-System-Id",
    )

    # Health surface
    health_timeout: float = Field(
        default=10.0, gt=0.0, description="Overall timeout for the health checks"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        level = (value or "INFO").upper()
        if level not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return level


def compile_whitelist(
    pattern: str,
) -> Tuple[Optional[Pattern[str]], Optional[ConfigurationError]]:
    """Compile the origin-system whitelist.

    An invalid pattern is not fatal: the caller gets ``(None, error)`` and is
    expected to surface the error through the health checks.
    """
    try:
        return re.compile(pattern), None
    except re.error as e:
        return None, ConfigurationError(
            f"Invalid whitelist regex: {e}",
            config_key="whitelist_regex",
            details={"pattern": pattern},
        )
