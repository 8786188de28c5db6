"""Decide which struct fields get a setter.

Field groups are visited in declaration order and names within a group in
order. Rules, per group:

1. Embedded fields are skipped, or rejected unless unsupported fields are ignored.
2. Fields whose type mentions a qualified name (`pkg.T`, anywhere in the type)
   are skipped or rejected the same way. The check is purely syntactic.
3. Names in the configured skip list are skipped.
4. Unexported names are skipped unless setters for unexported fields are wanted.
5. Everything else gets a setter.

A struct that ends up with no setter at all is an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..config import RunConfig
from ..errors import EmptyResultError, UnsupportedFieldError
from ..gosyntax.nodes import Node, SelectorExpr, StructType, walk
from ..gosyntax.printer import format_expr

logger = logging.getLogger(__name__)

GENERATE = "generate"
SKIP = "skip"

REASON_EMBEDDED = "embedded"
REASON_IMPORTED = "imported"
REASON_SKIP_LIST = "skip-list"
REASON_UNEXPORTED = "unexported"


@dataclass(frozen=True)
class FieldDecision:
    name: str | None  # None for an embedded field
    type: Node
    outcome: str
    reason: str | None = None


@dataclass(frozen=True)
class Classification:
    decisions: tuple[FieldDecision, ...]

    @property
    def eligible(self) -> list[tuple[str, Node]]:
        return [(d.name, d.type) for d in self.decisions if d.outcome == GENERATE and d.name is not None]


def references_imported_package(expr: Node) -> bool:
    """Whether a qualified reference appears anywhere in `expr`."""
    return any(isinstance(n, SelectorExpr) for n in walk(expr))


def is_unexported(name: str) -> bool:
    # Only a leading lower-case letter counts; `_x` is treated as exported.
    return name[:1].islower()


def classify_fields(struct: StructType, config: RunConfig) -> Classification:
    decisions: list[FieldDecision] = []

    for group in struct.fields:
        if group.embedded:
            if not config.ignore_unsupported:
                raise UnsupportedFieldError(
                    "embedded fields disallowed",
                    rule=REASON_EMBEDDED,
                    field=format_expr(group.type),
                )
            decisions.append(FieldDecision(name=None, type=group.type, outcome=SKIP, reason=REASON_EMBEDDED))
            continue

        if references_imported_package(group.type):
            if not config.ignore_unsupported:
                raise UnsupportedFieldError(
                    "cannot generate for fields whose type is imported",
                    rule=REASON_IMPORTED,
                    field=group.names[0],
                )
            for name in group.names:
                decisions.append(FieldDecision(name=name, type=group.type, outcome=SKIP, reason=REASON_IMPORTED))
            continue

        for name in group.names:
            if name in config.skip_fields:
                decisions.append(FieldDecision(name=name, type=group.type, outcome=SKIP, reason=REASON_SKIP_LIST))
            elif is_unexported(name) and not config.generate_for_unexported_fields:
                decisions.append(FieldDecision(name=name, type=group.type, outcome=SKIP, reason=REASON_UNEXPORTED))
            else:
                decisions.append(FieldDecision(name=name, type=group.type, outcome=GENERATE))

    for d in decisions:
        label = d.name if d.name is not None else format_expr(d.type)
        if d.outcome == SKIP:
            logger.debug("skipping field %s (%s)", label, d.reason)
        else:
            logger.debug("generating setter for field %s", label)

    result = Classification(decisions=tuple(decisions))
    if not result.eligible:
        raise EmptyResultError("no fields in struct (aside from ignored errors)")
    return result
