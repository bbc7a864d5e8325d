"""Predicate table: canonical predicate URIs and their short names."""

from types import MappingProxyType
from typing import Mapping, Optional

PREDICATES: Mapping[str, str] = MappingProxyType(
    {
        "http://www.ft.com/ontology/hasBrand": "hasBrand",
        "http://www.ft.com/ontology/classification/isClassifiedBy": "isClassifiedBy",
        "http://www.ft.com/ontology/implicitlyClassifiedBy": "implicitlyClassifiedBy",
        "http://www.ft.com/ontology/annotation/hasAuthor": "hasAuthor",
        "http://www.ft.com/ontology/hasContributor": "hasContributor",
        "http://www.ft.com/ontology/annotation/about": "about",
        "http://www.ft.com/ontology/hasDisplayTag": "hasDisplayTag",
        "http://www.ft.com/ontology/annotation/mentions": "mentions",
    }
)


def map_predicate(predicate_uri: str) -> Optional[str]:
    """Return the short name for ``predicate_uri``, or None if unsupported."""
    return PREDICATES.get(predicate_uri)
