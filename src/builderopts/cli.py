from __future__ import annotations

import argparse
import importlib.metadata
import logging
import sys
from pathlib import Path

from .config import RunConfig, parse_skip_fields
from .errors import BuilderOptsError

logger = logging.getLogger(__name__)


def setup_logging(verbosity: int) -> None:
    """Configure logging to stderr."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr)


_TRUE = frozenset({"1", "t", "true"})
_FALSE = frozenset({"0", "f", "false"})


class BoolFlag(argparse.Action):
    """Boolean flag accepting `--flag`, `--no-flag` and `--flag=true|false`."""

    def __init__(self, option_strings, dest, default=None, help=None):  # noqa: A002
        opts = []
        for opt in option_strings:
            opts.append(opt)
            if opt.startswith("--"):
                opts.append("--no-" + opt[2:])
        super().__init__(opts, dest, nargs="?", default=default, metavar="BOOL", help=help)

    def __call__(self, parser, namespace, values, option_string=None):  # noqa: ANN001
        if option_string is not None and option_string.startswith("--no-"):
            if values is not None:
                parser.error(f"argument {option_string}: takes no value")
            setattr(namespace, self.dest, False)
            return
        if values is None:
            setattr(namespace, self.dest, True)
            return
        value = values.lower()
        if value not in _TRUE | _FALSE:
            parser.error(f"argument {option_string}: invalid boolean value {values!r}")
        setattr(namespace, self.dest, value in _TRUE)


def _version() -> str:
    try:
        return importlib.metadata.version("go-builder-opts")
    except importlib.metadata.PackageNotFoundError:
        # Running from a source checkout without an installed distribution.
        return "0.0.0"


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="go-builder-opts",
        description="Generate functional-option setter functions for the fields of a Go struct type.",
    )
    parser.add_argument(
        "--definition-file",
        "--definitionFile",
        dest="definition_file",
        required=True,
        help="File where the struct type is defined.",
    )
    parser.add_argument(
        "--out-file",
        "--outFile",
        dest="out_file",
        default=None,
        help="File to write the option functions to (default: stdout).",
    )
    parser.add_argument(
        "--struct-type-name",
        "--structTypeName",
        dest="struct_type_name",
        required=True,
        help="Name of the struct type to generate option functions for.",
    )
    parser.add_argument(
        "--export-option-func-type",
        "--exportOptionFuncType",
        dest="export_fn_type",
        action=BoolFlag,
        default=True,
        help="Export the option function type (default: on).",
    )
    parser.add_argument(
        "--generate-for-unexported-fields",
        "--generateForUnexportedFields",
        dest="generate_for_unexported_fields",
        action=BoolFlag,
        default=False,
        help="Also generate option functions for unexported fields (default: off).",
    )
    parser.add_argument(
        "--ignore-unsupported",
        "--ignoreUnsupported",
        dest="ignore_unsupported",
        action=BoolFlag,
        default=True,
        help="Skip embedded and imported-type fields instead of failing (default: on).",
    )
    parser.add_argument(
        "--skip-struct-fields",
        "--skipStructFields",
        dest="skip_struct_fields",
        default=None,
        help="Comma-separated list of struct fields to ignore (exact match).",
    )
    parser.add_argument(
        "--gofmt",
        action="store_true",
        help="Pipe the output through gofmt (set BUILDEROPTS_GOFMT to override the binary).",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_version()}")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = create_parser().parse_args(argv)
    setup_logging(args.verbose)

    from .generator.pipeline import generate_file

    try:
        config = RunConfig(
            struct_name=args.struct_type_name,
            export_fn_type=args.export_fn_type,
            generate_for_unexported_fields=args.generate_for_unexported_fields,
            ignore_unsupported=args.ignore_unsupported,
            skip_fields=parse_skip_fields(args.skip_struct_fields),
        )
        out = generate_file(Path(args.definition_file), config, gofmt=args.gofmt)
    except (BuilderOptsError, OSError) as e:
        logger.debug("generation failed", exc_info=True)
        raise SystemExit(f"error: {e}") from e

    if args.out_file is None:
        sys.stdout.write(out)
        return

    try:
        Path(args.out_file).write_text(out, encoding="utf-8")
    except OSError as e:
        raise SystemExit(f"error: {e}") from e
    logger.info("wrote %s", args.out_file)
