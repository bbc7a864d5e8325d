"""Service exceptions for the annotations mapper."""

from .base import (
    BaseServiceException,
    ConfigurationError,
    MessageDecodeError,
    MessageEncodeError,
    NotConnectedError,
    PublishError,
    ServiceUnavailableError,
)

__all__ = [
    "BaseServiceException",
    "ConfigurationError",
    "MessageDecodeError",
    "MessageEncodeError",
    "NotConnectedError",
    "PublishError",
    "ServiceUnavailableError",
]
