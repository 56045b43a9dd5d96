"""Exception taxonomy shared across gridmlp."""

from __future__ import annotations


class GridMLPError(Exception):
    """Base class for all library errors."""


class ConfigError(GridMLPError):
    """The task configuration is missing or cannot be parsed."""


class ShapeMismatch(GridMLPError, ValueError):
    """Vector or matrix sizes disagree with the declared network sizes."""


class FormatError(GridMLPError, ValueError):
    """A model or dataset snapshot is malformed."""


__all__ = ["GridMLPError", "ConfigError", "ShapeMismatch", "FormatError"]
