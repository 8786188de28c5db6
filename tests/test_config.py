from __future__ import annotations

import pytest

from builderopts import RunConfig, parse_skip_fields
from builderopts.errors import ConfigError


def test_defaults():
    cfg = RunConfig("Opts")
    assert cfg.export_fn_type is True
    assert cfg.generate_for_unexported_fields is False
    assert cfg.ignore_unsupported is True
    assert cfg.skip_fields == frozenset()


def test_skip_fields_normalized_to_frozenset():
    cfg = RunConfig("Opts", skip_fields=["A", "B", "A"])
    assert cfg.skip_fields == frozenset({"A", "B"})


def test_empty_struct_name_rejected():
    with pytest.raises(ConfigError, match=r"struct type name is required"):
        RunConfig("")


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, set()),
        ("", set()),
        ("A", {"A"}),
        ("A,B", {"A", "B"}),
        (" A , b ,", {"A", "b"}),
        (",,", set()),
    ],
)
def test_parse_skip_fields(value, expected):
    assert parse_skip_fields(value) == frozenset(expected)
