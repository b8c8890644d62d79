"""Error types raised by colloc."""

from __future__ import annotations


class CollocError(Exception):
    """Base class for colloc errors."""


class ConfigurationError(CollocError, ValueError):
    """Unsupported n-gram size, measure, method or threshold."""
