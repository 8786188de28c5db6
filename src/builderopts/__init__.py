"""builderopts: generate functional-option setters for Go struct types."""

from __future__ import annotations

from . import errors
from .config import RunConfig, parse_skip_fields
from .generator.pipeline import generate, generate_file, generate_source
from .generator.synthesize import SynthesizedOutput

__all__ = [
    "RunConfig",
    "SynthesizedOutput",
    "errors",
    "generate",
    "generate_file",
    "generate_source",
    "parse_skip_fields",
]
