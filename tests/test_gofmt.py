from __future__ import annotations

import os
import subprocess

import pytest

from builderopts import RunConfig, generate_source
from builderopts.errors import RenderError
from builderopts.gosyntax import gofmt as gofmt_mod


def test_gofmt_pipes_source_through_binary(monkeypatch):
    seen = {}

    def fake_run(*args, **kwargs):  # noqa: ANN001
        seen["cmd"] = args[0]
        seen["input"] = kwargs["input"]
        return subprocess.CompletedProcess(args=args[0], returncode=0, stdout="formatted\n", stderr="")

    monkeypatch.setenv("BUILDEROPTS_GOFMT", "/opt/go/bin/gofmt")
    monkeypatch.setattr(subprocess, "run", fake_run)

    assert gofmt_mod.gofmt("package p\n") == "formatted\n"
    assert seen == {"cmd": ["/opt/go/bin/gofmt"], "input": "package p\n"}


def test_gofmt_binary_defaults_to_path_lookup(monkeypatch):
    monkeypatch.delenv("BUILDEROPTS_GOFMT", raising=False)
    assert gofmt_mod.gofmt_binary() == "gofmt"


def test_missing_gofmt_raises_render_error(monkeypatch):
    def fake_run(*args, **kwargs):  # noqa: ANN001
        raise FileNotFoundError("gofmt")

    monkeypatch.setattr(subprocess, "run", fake_run)

    with pytest.raises(RenderError, match=r"gofmt not found"):
        gofmt_mod.gofmt("package p\n")


def test_gofmt_failure_includes_stderr(monkeypatch):
    def fake_run(*args, **kwargs):  # noqa: ANN001
        return subprocess.CompletedProcess(
            args=args[0], returncode=2, stdout="", stderr="<standard input>:1:1: expected 'package'"
        )

    monkeypatch.setattr(subprocess, "run", fake_run)

    with pytest.raises(RenderError, match=r"gofmt failed\n<standard input>:1:1"):
        gofmt_mod.gofmt("nonsense")


@pytest.mark.skipif(
    os.environ.get("BUILDEROPTS_INTEGRATION") != "1",
    reason="set BUILDEROPTS_INTEGRATION=1 to run integration tests",
)
def test_rendered_output_is_already_gofmt_clean():
    src = "\n".join(
        [
            "package main",
            "",
            "type server struct {",
            "\tAddr    string",
            "\tHandler func(w, r int) error",
            "\tlimits  map[string][]*int",
            "\tDone    <-chan struct{}",
            "}",
            "",
        ]
    )
    cfg = RunConfig("server", generate_for_unexported_fields=True)
    plain = generate_source(src, cfg)
    assert generate_source(src, cfg, gofmt=True) == plain
