from __future__ import annotations

import logging
from dataclasses import dataclass

from ..config import RunConfig
from ..errors import EmptyResultError
from ..gosyntax.nodes import (
    AssignStmt,
    BlockStmt,
    Field,
    FuncDecl,
    FuncLit,
    FuncType,
    GenDecl,
    Ident,
    Node,
    ReturnStmt,
    SelectorExpr,
    StarExpr,
    TypeSpec,
)

logger = logging.getLogger(__name__)

FN_TYPE_SUFFIX = "FieldSetter"
SETTER_PREFIX = "Set"
PARAM_SUFFIX = "Gen"


@dataclass(frozen=True)
class SynthesizedOutput:
    """The option function type followed by one setter per eligible field."""

    fn_type: GenDecl
    setters: tuple[FuncDecl, ...]

    @property
    def decls(self) -> tuple[Node, ...]:
        return (self.fn_type, *self.setters)


def with_first_char_upper(s: str) -> str:
    return s[:1].upper() + s[1:]


def with_first_char_lower(s: str) -> str:
    return s[:1].lower() + s[1:]


def fn_type_name(struct_name: str, export_fn_type: bool) -> str:
    cased = with_first_char_upper(struct_name) if export_fn_type else with_first_char_lower(struct_name)
    return cased + FN_TYPE_SUFFIX


def synthesize(struct_name: str, config: RunConfig, fields: list[tuple[str, Node]]) -> SynthesizedOutput:
    """Build the option function type and a setter for each `(name, type)` in `fields`."""
    if not fields:
        raise EmptyResultError("no fields in struct (aside from ignored errors)")

    fn_ident = Ident(fn_type_name(struct_name, config.export_fn_type))
    param_type = StarExpr(Ident(struct_name))

    fn_type = GenDecl(
        keyword="type",
        specs=(
            TypeSpec(
                name=fn_ident.name,
                type=FuncType(params=(Field(names=(), type=param_type),)),
            ),
        ),
    )
    setters = tuple(
        _setter(struct_name, name, typ, fn_ident=fn_ident, param_type=param_type) for name, typ in fields
    )
    logger.info("synthesized %s and %d setter(s) for %s", fn_ident.name, len(setters), struct_name)
    return SynthesizedOutput(fn_type=fn_type, setters=setters)


def _setter(struct_name: str, field_name: str, field_type: Node, *, fn_ident: Ident, param_type: StarExpr) -> FuncDecl:
    # func SetX(xGen T) SFieldSetter { return func(sGen *S) { sGen.X = xGen } }
    outer = Ident(with_first_char_lower(field_name) + PARAM_SUFFIX)
    inner = Ident(with_first_char_lower(struct_name) + PARAM_SUFFIX)

    assign = AssignStmt(lhs=(SelectorExpr(x=inner, sel=field_name),), tok="=", rhs=(outer,))
    inner_fn = FuncLit(
        type=FuncType(params=(Field(names=(inner.name,), type=param_type),)),
        body=BlockStmt(stmts=(assign,)),
    )
    return FuncDecl(
        name=SETTER_PREFIX + with_first_char_upper(field_name),
        type=FuncType(
            params=(Field(names=(outer.name,), type=field_type),),
            results=(Field(names=(), type=fn_ident),),
        ),
        body=BlockStmt(stmts=(ReturnStmt(results=(inner_fn,)),)),
    )
