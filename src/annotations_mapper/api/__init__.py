"""HTTP surface of the annotations mapper."""

from .endpoints import router

__all__ = ["router"]
