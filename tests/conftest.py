from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture
def write_go(tmp_path: Path):
    """Write Go source lines to a file under tmp_path and return its path."""

    def _write(lines: list[str], name: str = "defs.go") -> Path:
        path = tmp_path / name
        path.write_text("\n".join(lines), encoding="utf-8")
        return path

    return _write
