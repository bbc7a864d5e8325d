"""
Data models for the annotations mapper.

Single responsibility: Pydantic model definitions for the queue contracts.
"""

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RawMessage(BaseModel):
    """A queue message: string headers plus an opaque body."""

    headers: Dict[str, str] = Field(default_factory=dict)
    body: str = ""


class PacMetadataAnnotation(BaseModel):
    """A single annotation as published by PAC."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    predicate: str = Field(..., description="Canonical predicate URI")
    concept_id: str = Field(..., alias="id", description="Annotated concept id")


class PacMetadataPublishEvent(BaseModel):
    """Metadata publish event consumed from the queue."""

    model_config = ConfigDict(extra="ignore")

    uuid: str = Field(..., description="Content uuid")
    annotations: List[PacMetadataAnnotation] = Field(default_factory=list)

    @field_validator("annotations", mode="before")
    @classmethod
    def _null_annotations(cls, value):
        return [] if value is None else value


class Concept(BaseModel):
    """Concept reference within a mapped annotation."""

    id: str
    predicate: str


class MappedAnnotation(BaseModel):
    """Annotation as written to the concept annotations topic."""

    thing: Concept


class MappedAnnotations(BaseModel):
    """Mapped annotations submitted to the writer topic."""

    uuid: str
    annotations: List[MappedAnnotation] = Field(default_factory=list)
