"""Message models for the annotations mapper."""

from .models import (
    Concept,
    MappedAnnotation,
    MappedAnnotations,
    PacMetadataAnnotation,
    PacMetadataPublishEvent,
    RawMessage,
)

__all__ = [
    "Concept",
    "MappedAnnotation",
    "MappedAnnotations",
    "PacMetadataAnnotation",
    "PacMetadataPublishEvent",
    "RawMessage",
]
