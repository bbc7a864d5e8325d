"""Shared utilities for logging and request tracing."""

from .correlation import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from .logging import configure_logging

__all__ = [
    "clear_correlation_id",
    "get_correlation_id",
    "set_correlation_id",
    "configure_logging",
]
