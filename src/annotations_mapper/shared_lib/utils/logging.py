"""Structured logging configuration for the mapper service."""

import structlog
import logging.config
from typing import Any, Dict
from .correlation import get_correlation_id


def configure_logging(service_name: str, log_level: str = "INFO") -> None:
    """Configure structured logging for a service."""

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "plain": {
                    "format": "%(message)s",
                },
            },
            "handlers": {
                "default": {
                    "level": log_level,
                    "class": "logging.StreamHandler",
                    "formatter": "plain",
                },
            },
            "loggers": {
                "": {
                    "handlers": ["default"],
                    "level": log_level,
                    "propagate": True,
                },
                # aiokafka is chatty at INFO while the broker is unreachable
                "aiokafka": {
                    "level": "WARNING",
                },
            },
        }
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _service_context(service_name),
            add_correlation_id,
            scrub_sensitive_data,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _service_context(service_name: str):
    def add_service_context(logger, method_name, event_dict):
        """Add service context to log entries."""
        event_dict.setdefault("service", service_name)
        return event_dict

    return add_service_context


def add_correlation_id(logger, method_name, event_dict):
    """Add the current transaction id to log entries that lack one."""
    correlation_id = get_correlation_id()
    if correlation_id and "transaction_id" not in event_dict:
        event_dict["transaction_id"] = correlation_id
    return event_dict


def scrub_sensitive_data(logger, method_name, event_dict):
    """Scrub sensitive data from log entries."""
    sensitive_keys = {
        "password",
        "sasl_password",
        "token",
        "api_key",
        "secret",
        "body",
    }

    def scrub_dict(data: Dict[str, Any]) -> Dict[str, Any]:
        scrubbed = {}
        for key, value in data.items():
            if key.lower() in sensitive_keys:
                scrubbed[key] = "[SCRUBBED]"
            elif isinstance(value, dict):
                scrubbed[key] = scrub_dict(value)
            elif isinstance(value, list):
                scrubbed[key] = [
                    scrub_dict(item) if isinstance(item, dict) else item
                    for item in value
                ]
            else:
                scrubbed[key] = value
        return scrubbed

    return scrub_dict(event_dict)
