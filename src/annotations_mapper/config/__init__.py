"""
Configuration management for the annotations mapper.

Single responsibility: Configuration loading and validation.
"""

from .settings import MapperSettings, compile_whitelist

__all__ = [
    "MapperSettings",
    "compile_whitelist",
]
