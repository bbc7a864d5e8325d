"""Command line interface for the annotations mapper."""

from .commands import cli

__all__ = ["cli"]
