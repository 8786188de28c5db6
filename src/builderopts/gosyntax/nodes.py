"""Syntax tree for the subset of Go that builderopts reads and writes.

The node set is closed: the parser only produces these variants and the printer
only accepts them. Sequences are tuples so every tree is immutable and can be
shared between the parsed input and the synthesized output.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

CHAN_BOTH = "both"
CHAN_SEND = "send"
CHAN_RECV = "recv"


@dataclass(frozen=True)
class Node:
    def children(self) -> tuple[Node, ...]:
        return ()


# Expressions and type expressions.


@dataclass(frozen=True)
class Ident(Node):
    name: str


@dataclass(frozen=True)
class BasicLit(Node):
    kind: str  # INT | FLOAT | IMAG | CHAR | STRING
    value: str


@dataclass(frozen=True)
class SelectorExpr(Node):
    """Qualified reference `x.sel`; in type position `x` is a package name."""

    x: Node
    sel: str

    def children(self) -> tuple[Node, ...]:
        return (self.x,)


@dataclass(frozen=True)
class StarExpr(Node):
    x: Node

    def children(self) -> tuple[Node, ...]:
        return (self.x,)


@dataclass(frozen=True)
class ParenExpr(Node):
    x: Node

    def children(self) -> tuple[Node, ...]:
        return (self.x,)


@dataclass(frozen=True)
class UnaryExpr(Node):
    op: str
    x: Node

    def children(self) -> tuple[Node, ...]:
        return (self.x,)


@dataclass(frozen=True)
class BinaryExpr(Node):
    x: Node
    op: str
    y: Node

    def children(self) -> tuple[Node, ...]:
        return (self.x, self.y)


@dataclass(frozen=True)
class CallExpr(Node):
    fun: Node
    args: tuple[Node, ...] = ()

    def children(self) -> tuple[Node, ...]:
        return (self.fun, *self.args)


@dataclass(frozen=True)
class CompositeLit(Node):
    """Composite literal `T{a, b}`; `type` is None for an elided element type."""

    type: Node | None
    elts: tuple[Node, ...] = ()

    def children(self) -> tuple[Node, ...]:
        if self.type is None:
            return self.elts
        return (self.type, *self.elts)


@dataclass(frozen=True)
class KeyValueExpr(Node):
    key: Node
    value: Node

    def children(self) -> tuple[Node, ...]:
        return (self.key, self.value)


@dataclass(frozen=True)
class IndexExpr(Node):
    """Generic instantiation `x[a, b]`, or an index expression."""

    x: Node
    indices: tuple[Node, ...]

    def children(self) -> tuple[Node, ...]:
        return (self.x, *self.indices)


@dataclass(frozen=True)
class ArrayType(Node):
    """Array type `[length]elt`, or a slice type when `length` is None."""

    elt: Node
    length: Node | None = None

    def children(self) -> tuple[Node, ...]:
        if self.length is None:
            return (self.elt,)
        return (self.length, self.elt)


@dataclass(frozen=True)
class MapType(Node):
    key: Node
    value: Node

    def children(self) -> tuple[Node, ...]:
        return (self.key, self.value)


@dataclass(frozen=True)
class ChanType(Node):
    value: Node
    dir: str = CHAN_BOTH

    def children(self) -> tuple[Node, ...]:
        return (self.value,)


@dataclass(frozen=True)
class Variadic(Node):
    """Variadic parameter type `...elt`."""

    elt: Node

    def children(self) -> tuple[Node, ...]:
        return (self.elt,)


@dataclass(frozen=True)
class Field(Node):
    """A group of names sharing one type.

    An empty `names` tuple denotes an embedded field (or an unnamed parameter).
    """

    names: tuple[str, ...]
    type: Node
    tag: str | None = None

    @property
    def embedded(self) -> bool:
        return not self.names

    def children(self) -> tuple[Node, ...]:
        return (self.type,)


@dataclass(frozen=True)
class FuncType(Node):
    params: tuple[Field, ...] = ()
    results: tuple[Field, ...] = ()

    def children(self) -> tuple[Node, ...]:
        return (*self.params, *self.results)


@dataclass(frozen=True)
class StructType(Node):
    fields: tuple[Field, ...] = ()

    def children(self) -> tuple[Node, ...]:
        return self.fields


@dataclass(frozen=True)
class InterfaceType(Node):
    """Interface body: methods are named fields with a FuncType, the rest are embedded elements."""

    elems: tuple[Field, ...] = ()

    def children(self) -> tuple[Node, ...]:
        return self.elems


@dataclass(frozen=True)
class FuncLit(Node):
    type: FuncType
    body: BlockStmt

    def children(self) -> tuple[Node, ...]:
        return (self.type, self.body)


# Statements.


@dataclass(frozen=True)
class BlockStmt(Node):
    stmts: tuple[Node, ...] = ()

    def children(self) -> tuple[Node, ...]:
        return self.stmts


@dataclass(frozen=True)
class ReturnStmt(Node):
    results: tuple[Node, ...] = ()

    def children(self) -> tuple[Node, ...]:
        return self.results


@dataclass(frozen=True)
class AssignStmt(Node):
    lhs: tuple[Node, ...]
    tok: str
    rhs: tuple[Node, ...]

    def children(self) -> tuple[Node, ...]:
        return (*self.lhs, *self.rhs)


# Declarations.


@dataclass(frozen=True)
class ImportSpec(Node):
    path: str
    name: str | None = None


@dataclass(frozen=True)
class ValueSpec(Node):
    # Only the declared names are retained; values are not needed downstream.
    names: tuple[str, ...]
    type: Node | None = None

    def children(self) -> tuple[Node, ...]:
        return () if self.type is None else (self.type,)


@dataclass(frozen=True)
class TypeSpec(Node):
    name: str
    type: Node
    type_params: tuple[Field, ...] = ()
    alias: bool = False

    def children(self) -> tuple[Node, ...]:
        return (*self.type_params, self.type)


@dataclass(frozen=True)
class GenDecl(Node):
    keyword: str  # import | type | var | const
    specs: tuple[Node, ...]

    def children(self) -> tuple[Node, ...]:
        return self.specs


@dataclass(frozen=True)
class FuncDecl(Node):
    name: str
    type: FuncType
    body: BlockStmt | None = None
    recv: Field | None = None
    type_params: tuple[Field, ...] = ()

    def children(self) -> tuple[Node, ...]:
        out: list[Node] = []
        if self.recv is not None:
            out.append(self.recv)
        out.extend(self.type_params)
        out.append(self.type)
        if self.body is not None:
            out.append(self.body)
        return tuple(out)


@dataclass(frozen=True)
class File(Node):
    package: str
    decls: tuple[Node, ...] = ()

    @property
    def imports(self) -> list[ImportSpec]:
        return [
            spec
            for decl in self.decls
            if isinstance(decl, GenDecl) and decl.keyword == "import"
            for spec in decl.specs
            if isinstance(spec, ImportSpec)
        ]

    def children(self) -> tuple[Node, ...]:
        return self.decls


def walk(node: Node) -> Iterator[Node]:
    """Yield `node` and every node below it, depth first, in source order."""
    stack = [node]
    while stack:
        cur = stack.pop()
        yield cur
        stack.extend(reversed(cur.children()))
