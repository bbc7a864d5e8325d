"""Base exceptions for the mapper and its queue transport."""

from typing import Any, Dict, Optional
from datetime import datetime, timezone


class BaseServiceException(Exception):
    """Base exception for all service-related errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        correlation_id: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__.upper()
        self.details = details or {}
        self.correlation_id = correlation_id
        self.timestamp = timestamp or datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "correlation_id": self.correlation_id,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }

    def __str__(self) -> str:
        return f"{self.error_code}: {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message='{self.message}', "
            f"error_code='{self.error_code}', "
            f"correlation_id='{self.correlation_id}'"
            f")"
        )


class ConfigurationError(BaseServiceException):
    """Exception raised for configuration errors."""

    def __init__(
        self,
        message: str = "Configuration error",
        error_code: str = "CONFIGURATION_ERROR",
        details: Optional[Dict[str, Any]] = None,
        correlation_id: Optional[str] = None,
        config_key: Optional[str] = None,
    ):
        super().__init__(message, error_code, details, correlation_id)
        if config_key:
            self.details["config_key"] = config_key


class MessageDecodeError(BaseServiceException):
    """Raised when an inbound message body is not a valid publish event."""

    def __init__(
        self,
        message: str = "Cannot unmarshal message body",
        error_code: str = "MESSAGE_DECODE_ERROR",
        details: Optional[Dict[str, Any]] = None,
        correlation_id: Optional[str] = None,
    ):
        super().__init__(message, error_code, details, correlation_id)


class MessageEncodeError(BaseServiceException):
    """Raised when mapped annotations cannot be serialised."""

    def __init__(
        self,
        message: str = "Error marshalling the concept annotations",
        error_code: str = "MESSAGE_ENCODE_ERROR",
        details: Optional[Dict[str, Any]] = None,
        correlation_id: Optional[str] = None,
    ):
        super().__init__(message, error_code, details, correlation_id)


class ServiceUnavailableError(BaseServiceException):
    """Exception raised when a service is unavailable."""

    def __init__(
        self,
        message: str = "Service unavailable",
        error_code: str = "SERVICE_UNAVAILABLE",
        details: Optional[Dict[str, Any]] = None,
        correlation_id: Optional[str] = None,
        service_name: Optional[str] = None,
    ):
        super().__init__(message, error_code, details, correlation_id)
        if service_name:
            self.details["service_name"] = service_name


class NotConnectedError(ServiceUnavailableError):
    """Raised when a Kafka proxy is used before its session is established."""

    def __init__(
        self,
        message: str = "not connected to Kafka",
        error_code: str = "NOT_CONNECTED",
        details: Optional[Dict[str, Any]] = None,
        correlation_id: Optional[str] = None,
        service_name: Optional[str] = "kafka",
    ):
        super().__init__(message, error_code, details, correlation_id, service_name)


class PublishError(BaseServiceException):
    """Raised when the transport rejects an outbound message."""

    def __init__(
        self,
        message: str = "Error sending message to queue",
        error_code: str = "PUBLISH_ERROR",
        details: Optional[Dict[str, Any]] = None,
        correlation_id: Optional[str] = None,
        topic: Optional[str] = None,
    ):
        super().__init__(message, error_code, details, correlation_id)
        if topic:
            self.details["topic"] = topic
