"""Render syntax trees back to Go source text.

Layout follows gofmt for trees without position information:
tab indentation, multi-line function bodies, a blank line between
declarations of different kinds and none between consecutive functions.
Struct and interface bodies are column-aligned with spaces, as gofmt leaves
them, rather than with the raw tab-separated cells of `go/printer`.
Binary operators always get single spaces, so gofmt may tighten array-length
expressions such as `[N + 1]T`.
"""

from __future__ import annotations

from typing import Iterable

from ..errors import RenderError
from .nodes import (
    CHAN_RECV,
    CHAN_SEND,
    ArrayType,
    AssignStmt,
    BasicLit,
    BinaryExpr,
    BlockStmt,
    CallExpr,
    ChanType,
    CompositeLit,
    Field,
    File,
    FuncDecl,
    FuncLit,
    FuncType,
    GenDecl,
    Ident,
    ImportSpec,
    IndexExpr,
    InterfaceType,
    KeyValueExpr,
    MapType,
    Node,
    ParenExpr,
    ReturnStmt,
    SelectorExpr,
    StarExpr,
    StructType,
    TypeSpec,
    UnaryExpr,
    ValueSpec,
    Variadic,
)


def render(decls: Iterable[Node], package: str) -> str:
    """Render a package clause followed by `decls`."""
    out = [f"package {package}"]
    prev_kind = None
    for decl in decls:
        kind = _decl_kind(decl)
        out.append("\n\n" if kind != prev_kind else "\n")
        out.append(format_decl(decl))
        prev_kind = kind
    out.append("\n")
    return "".join(out)


def render_file(f: File) -> str:
    return render(f.decls, f.package)


def _decl_kind(decl: Node) -> str:
    if isinstance(decl, GenDecl):
        return decl.keyword
    if isinstance(decl, FuncDecl):
        return "func"
    raise RenderError(f"cannot render {type(decl).__name__} as a top-level declaration")


def format_decl(decl: Node) -> str:
    if isinstance(decl, FuncDecl):
        return _func_decl(decl)
    if not isinstance(decl, GenDecl):
        raise RenderError(f"cannot render {type(decl).__name__} as a top-level declaration")
    if len(decl.specs) == 1:
        return f"{decl.keyword} {_spec(decl.specs[0], 0)}"
    lines = [f"{decl.keyword} ("]
    for spec in decl.specs:
        lines.append("\t" + _spec(spec, 1))
    lines.append(")")
    return "\n".join(lines)


def _spec(spec: Node, indent: int) -> str:
    if isinstance(spec, TypeSpec):
        head = spec.name
        if spec.type_params:
            head += f"[{_fields(spec.type_params, indent)}]"
        sep = " = " if spec.alias else " "
        return head + sep + format_expr(spec.type, indent)
    if isinstance(spec, ImportSpec):
        path = f'"{spec.path}"'
        return path if spec.name is None else f"{spec.name} {path}"
    if isinstance(spec, ValueSpec):
        names = ", ".join(spec.names)
        return names if spec.type is None else f"{names} {format_expr(spec.type, indent)}"
    raise RenderError(f"cannot render {type(spec).__name__} as a declaration spec")


def _func_decl(decl: FuncDecl) -> str:
    head = "func "
    if decl.recv is not None:
        head += f"({_fields((decl.recv,), 0)}) "
    head += decl.name
    if decl.type_params:
        head += f"[{_fields(decl.type_params, 0)}]"
    head += _signature(decl.type, 0)
    if decl.body is None:
        return head
    return head + " " + _block(decl.body, 0)


def _block(block: BlockStmt, indent: int) -> str:
    lines = ["{"]
    for stmt in block.stmts:
        lines.append("\t" * (indent + 1) + format_stmt(stmt, indent + 1))
    lines.append("\t" * indent + "}")
    return "\n".join(lines)


def format_stmt(stmt: Node, indent: int = 0) -> str:
    if isinstance(stmt, ReturnStmt):
        if not stmt.results:
            return "return"
        return "return " + ", ".join(format_expr(r, indent) for r in stmt.results)
    if isinstance(stmt, AssignStmt):
        lhs = ", ".join(format_expr(x, indent) for x in stmt.lhs)
        rhs = ", ".join(format_expr(x, indent) for x in stmt.rhs)
        return f"{lhs} {stmt.tok} {rhs}"
    if isinstance(stmt, BlockStmt):
        return _block(stmt, indent)
    raise RenderError(f"cannot render {type(stmt).__name__} as a statement")


def format_expr(x: Node, indent: int = 0) -> str:
    """Render an expression or type expression; `indent` is the enclosing block depth."""
    if isinstance(x, Ident):
        return x.name
    if isinstance(x, BasicLit):
        return x.value
    if isinstance(x, SelectorExpr):
        return f"{format_expr(x.x, indent)}.{x.sel}"
    if isinstance(x, StarExpr):
        return "*" + format_expr(x.x, indent)
    if isinstance(x, ParenExpr):
        return f"({format_expr(x.x, indent)})"
    if isinstance(x, UnaryExpr):
        return x.op + format_expr(x.x, indent)
    if isinstance(x, BinaryExpr):
        return f"{format_expr(x.x, indent)} {x.op} {format_expr(x.y, indent)}"
    if isinstance(x, CallExpr):
        args = ", ".join(format_expr(a, indent) for a in x.args)
        return f"{format_expr(x.fun, indent)}({args})"
    if isinstance(x, CompositeLit):
        elts = ", ".join(format_expr(e, indent) for e in x.elts)
        typ = "" if x.type is None else format_expr(x.type, indent)
        return f"{typ}{{{elts}}}"
    if isinstance(x, KeyValueExpr):
        return f"{format_expr(x.key, indent)}: {format_expr(x.value, indent)}"
    if isinstance(x, IndexExpr):
        args = ", ".join(format_expr(a, indent) for a in x.indices)
        return f"{format_expr(x.x, indent)}[{args}]"
    if isinstance(x, ArrayType):
        length = "" if x.length is None else format_expr(x.length, indent)
        return f"[{length}]{format_expr(x.elt, indent)}"
    if isinstance(x, MapType):
        return f"map[{format_expr(x.key, indent)}]{format_expr(x.value, indent)}"
    if isinstance(x, ChanType):
        value = format_expr(x.value, indent)
        if x.dir == CHAN_SEND:
            return f"chan<- {value}"
        if x.dir == CHAN_RECV:
            return f"<-chan {value}"
        return f"chan {value}"
    if isinstance(x, Variadic):
        return "..." + format_expr(x.elt, indent)
    if isinstance(x, FuncType):
        return "func" + _signature(x, indent)
    if isinstance(x, FuncLit):
        return "func" + _signature(x.type, indent) + " " + _block(x.body, indent)
    if isinstance(x, StructType):
        return _braced("struct", [_field_cells(f, indent + 1) for f in x.fields], indent)
    if isinstance(x, InterfaceType):
        return _braced("interface", [_interface_elem(e, indent + 1) for e in x.elems], indent)
    raise RenderError(f"cannot render {type(x).__name__} as an expression")


def _signature(ft: FuncType, indent: int) -> str:
    out = f"({_fields(ft.params, indent)})"
    if not ft.results:
        return out
    if len(ft.results) == 1 and not ft.results[0].names:
        return out + " " + format_expr(_strip_parens(ft.results[0].type), indent)
    return out + f" ({_fields(ft.results, indent)})"


def _fields(fields: Iterable[Field], indent: int) -> str:
    parts = []
    for f in fields:
        typ = format_expr(_strip_parens(f.type), indent)
        parts.append(f"{', '.join(f.names)} {typ}" if f.names else typ)
    return ", ".join(parts)


def _strip_parens(x: Node) -> Node:
    # Parameter and result types print without enclosing parentheses.
    while isinstance(x, ParenExpr):
        x = x.x
    return x


def _field_cells(f: Field, indent: int) -> list[str]:
    cells = []
    if f.names:
        cells.append(", ".join(f.names))
    cells.append(format_expr(f.type, indent))
    if f.tag is not None:
        cells.append(f.tag)
    return cells


def _interface_elem(f: Field, indent: int) -> list[str]:
    if f.names and isinstance(f.type, FuncType):
        return [f.names[0] + _signature(f.type, indent)]
    return [format_expr(f.type, indent)]


def _braced(keyword: str, rows: list[list[str]], indent: int) -> str:
    if not rows:
        return keyword + "{}"
    if len(rows) == 1:
        return f"{keyword}{{ {' '.join(rows[0])} }}"
    pad = "\t" * (indent + 1)
    lines = [keyword + " {"]
    lines.extend(pad + line for line in _align(rows))
    lines.append("\t" * indent + "}")
    return "\n".join(lines)


def _align(rows: list[list[str]]) -> list[str]:
    """Align cells column-wise with spaces, like gofmt's tabwriter pass.

    A column is padded across each run of consecutive rows that have a cell in
    that column followed by another cell.
    """
    cells = [list(r) for r in rows]
    for c in range(max(len(r) for r in rows) - 1):
        i = 0
        while i < len(rows):
            if len(rows[i]) <= c + 1:
                i += 1
                continue
            j = i
            while j < len(rows) and len(rows[j]) > c + 1:
                j += 1
            width = max((len(rows[k][c]) for k in range(i, j) if "\n" not in rows[k][c]), default=0)
            for k in range(i, j):
                cells[k][c] = rows[k][c].ljust(width)
            i = j
    return [" ".join(r) for r in cells]
