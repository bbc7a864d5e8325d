"""Tests for settings and whitelist compilation."""

import pytest
from pydantic import ValidationError

from annotations_mapper.config.settings import MapperSettings, compile_whitelist
from annotations_mapper.shared_lib.exceptions import ConfigurationError

ENV_VARS = (
    "APP_PORT",
    "LOG_LEVEL",
    "KAFKA_ADDRESS",
    "CONSUMER_GROUP",
    "CONSUMER_TOPIC",
    "KAFKA_LAG_TOLERANCE",
    "WHITELIST_REGEX",
    "PRODUCER_TOPIC",
    "CONNECT_RETRY_INTERVAL",
    "HEALTH_TIMEOUT",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestMapperSettings:
    def test_defaults(self, clean_env):
        settings = MapperSettings(_env_file=None)

        assert settings.app_port == 8080
        assert settings.log_level == "INFO"
        assert settings.kafka_address == "kafka:9092"
        assert settings.consumer_group == "pac-annotations-mapper"
        assert settings.consumer_topic == "NativeCmsMetadataPublicationEvents"
        assert settings.kafka_lag_tolerance == 200
        assert settings.whitelist_regex == r"http://cmdb\.ft\.com/systems/pac"
        assert settings.producer_topic == "ConceptAnnotations"
        assert settings.connect_retry_interval == 60.0

    def test_environment_overrides(self, clean_env):
        clean_env.setenv("APP_PORT", "9090")
        clean_env.setenv("KAFKA_ADDRESS", "broker-1:9092,broker-2:9092")
        clean_env.setenv("WHITELIST_REGEX", "systems/(pac|methode)")
        clean_env.setenv("KAFKA_LAG_TOLERANCE", "50")
        clean_env.setenv("log_level", "debug")

        settings = MapperSettings(_env_file=None)

        assert settings.app_port == 9090
        assert settings.kafka_address == "broker-1:9092,broker-2:9092"
        assert settings.whitelist_regex == "systems/(pac|methode)"
        assert settings.kafka_lag_tolerance == 50
        assert settings.log_level == "DEBUG"

    def test_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("PRODUCER_TOPIC=OtherTopic\n")

        settings = MapperSettings(_env_file=env_file)

        assert settings.producer_topic == "OtherTopic"

    def test_invalid_log_level(self, clean_env):
        with pytest.raises(ValidationError):
            MapperSettings(_env_file=None, log_level="LOUD")

    def test_invalid_port(self, clean_env):
        with pytest.raises(ValidationError):
            MapperSettings(_env_file=None, app_port=0)


class TestCompileWhitelist:
    def test_valid_pattern(self):
        pattern, error = compile_whitelist(r"http://cmdb\.ft\.com/systems/pac")

        assert error is None
        assert pattern.search("http://cmdb.ft.com/systems/pac")

    def test_match_is_unanchored(self):
        pattern, _ = compile_whitelist("systems/pac")

        assert pattern.search("http://cmdb.ft.com/systems/pac-v2")

    def test_invalid_pattern(self):
        pattern, error = compile_whitelist("[")

        assert pattern is None
        assert isinstance(error, ConfigurationError)
        assert error.details == {"pattern": "[", "config_key": "whitelist_regex"}
