"""Core mapping logic: predicate table, ports and the mapper service."""

from .mapper import AnnotationMapperService, MappingOutcome
from .ports import MessageConsumerPort, MessageProducerPort
from .predicates import PREDICATES, map_predicate

__all__ = [
    "AnnotationMapperService",
    "MappingOutcome",
    "MessageConsumerPort",
    "MessageProducerPort",
    "PREDICATES",
    "map_predicate",
]
