from __future__ import annotations

from dataclasses import dataclass, field

from .errors import ConfigError


@dataclass(frozen=True)
class RunConfig:
    """Decisions for one generation run.

    Defaults match the command-line defaults: the option function type is
    exported, unexported fields get no setter, and unsupported fields
    (embedded or imported types) are skipped rather than fatal.
    """

    struct_name: str
    export_fn_type: bool = True
    generate_for_unexported_fields: bool = False
    ignore_unsupported: bool = True
    skip_fields: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if not self.struct_name:
            raise ConfigError("struct type name is required")
        if not isinstance(self.skip_fields, frozenset):
            object.__setattr__(self, "skip_fields", frozenset(self.skip_fields))


def parse_skip_fields(value: str | None) -> frozenset[str]:
    """Parse a comma-separated list of struct field names (exact match)."""
    if not value:
        return frozenset()
    return frozenset(name.strip() for name in value.split(",") if name.strip())
