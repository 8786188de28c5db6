"""Domain-specific errors for builderopts."""

from __future__ import annotations


class BuilderOptsError(Exception):
    """Base error for builderopts."""


class ConfigError(BuilderOptsError):
    """Raised when a run configuration is incomplete or invalid."""


class ParseError(BuilderOptsError):
    """Raised when the definition file is not syntactically valid Go."""


class TypeNotFoundError(BuilderOptsError):
    """Raised when no struct type with the requested name is declared."""


class UnsupportedFieldError(BuilderOptsError):
    """Raised when an embedded or imported-type field is found and may not be skipped."""

    def __init__(self, message: str, *, rule: str, field: str | None = None):
        super().__init__(message)
        self.rule = rule
        self.field = field


class EmptyResultError(BuilderOptsError):
    """Raised when every field was filtered out and nothing is left to generate."""


class RenderError(BuilderOptsError):
    """Raised when synthesized declarations cannot be turned into source text."""
