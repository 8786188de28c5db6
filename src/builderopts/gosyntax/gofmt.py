from __future__ import annotations

import logging
import os
import subprocess

from ..errors import RenderError

logger = logging.getLogger(__name__)


def gofmt_binary() -> str:
    """Return the gofmt executable to run.

    Override with `BUILDEROPTS_GOFMT`.
    """
    return os.environ.get("BUILDEROPTS_GOFMT") or "gofmt"


def gofmt(source: str) -> str:
    """Pipe rendered Go source through gofmt and return the formatted text."""
    prog = gofmt_binary()
    logger.debug("formatting output with %s", prog)
    try:
        proc = subprocess.run(
            [prog],
            input=source,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            check=False,
        )
    except FileNotFoundError as e:
        raise RenderError(
            f"gofmt not found (`{prog}` is missing from PATH). "
            "Install Go, set BUILDEROPTS_GOFMT to the gofmt binary, "
            "or run without --gofmt."
        ) from e
    if proc.returncode != 0:
        raise RenderError(f"gofmt failed\n{proc.stderr}")
    return proc.stdout
