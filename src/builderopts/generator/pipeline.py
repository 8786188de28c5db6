"""Entry points tying the parser, the generator stages and the printer together.

`generate` is pure: it only reads the parsed program and the configuration.
File and process I/O stay with the callers.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..config import RunConfig
from ..errors import ParseError
from ..gosyntax.gofmt import gofmt as run_gofmt
from ..gosyntax.nodes import File
from ..gosyntax.parser import parse_file
from ..gosyntax.printer import render
from .classify import classify_fields
from .locate import find_struct_type
from .synthesize import SynthesizedOutput, synthesize

logger = logging.getLogger(__name__)


def generate(program: File, config: RunConfig) -> SynthesizedOutput:
    spec = find_struct_type(program, config.struct_name)
    classification = classify_fields(spec.type, config)
    return synthesize(spec.name, config, classification.eligible)


def generate_source(
    source: str,
    config: RunConfig,
    *,
    filename: str | None = None,
    gofmt: bool = False,
) -> str:
    """Parse Go `source`, generate setters for `config.struct_name`, and render them."""
    program = parse_file(source, filename=filename)
    output = generate(program, config)
    text = render(output.decls, program.package)
    if gofmt:
        text = run_gofmt(text)
    return text


def generate_file(definition_file: Path, config: RunConfig, *, gofmt: bool = False) -> str:
    path = Path(definition_file)
    logger.info("reading struct definitions from %s", path)
    try:
        source = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(f"{path}: illegal UTF-8 encoding") from e
    return generate_source(source, config, filename=str(path), gofmt=gofmt)
