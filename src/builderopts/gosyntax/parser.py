"""Recursive-descent parser for Go source files.

Only top-level declarations are modelled in detail. Function bodies and the
value expressions of `var`/`const` declarations are consumed by bracket
matching, since nothing downstream needs them. Type expressions are parsed in
full.
"""

from __future__ import annotations

import logging

from ..errors import ParseError
from .lexer import EOF, IDENT, LITERALS, STRING, Token, position, tokenize
from .nodes import (
    CHAN_BOTH,
    CHAN_RECV,
    CHAN_SEND,
    ArrayType,
    BasicLit,
    BinaryExpr,
    BlockStmt,
    CallExpr,
    ChanType,
    CompositeLit,
    Field,
    File,
    FuncDecl,
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
    SelectorExpr,
    StarExpr,
    StructType,
    TypeSpec,
    UnaryExpr,
    ValueSpec,
    Variadic,
)

logger = logging.getLogger(__name__)

# Tokens that can begin a type expression.
_TYPE_START = frozenset({IDENT, "*", "[", "map", "chan", "func", "interface", "struct", "(", "<-"})

# Tokens that, following `[Ident`, mark a type parameter list rather than an array length.
_TYPE_PARAM_FOLLOW = frozenset({IDENT, ",", "~", "[", "map", "chan", "func", "interface", "struct"})

_BINARY_PREC = {
    "||": 1,
    "&&": 2,
    "==": 3,
    "!=": 3,
    "<": 3,
    "<=": 3,
    ">": 3,
    ">=": 3,
    "+": 4,
    "-": 4,
    "|": 4,
    "^": 4,
    "*": 5,
    "/": 5,
    "%": 5,
    "<<": 5,
    ">>": 5,
    "&": 5,
    "&^": 5,
}

_UNARY_OPS = frozenset({"+", "-", "!", "^", "*", "&", "<-"})

_OPEN = {"(": ")", "[": "]", "{": "}"}


def parse_file(source: str, *, filename: str | None = None) -> File:
    """Parse Go source text into a File.

    Raises ParseError (with a `file:line:col:` prefix) on any syntax error.
    """
    tokens = tokenize(source, filename=filename)
    f = _Parser(tokens, filename=filename).parse_file()
    logger.debug("parsed package %s: %d top-level declaration(s)", f.package, len(f.decls))
    return f


class _Parser:
    def __init__(self, tokens: list[Token], *, filename: str | None):
        self.toks = tokens
        self.i = 0
        self.filename = filename

    # Token helpers.

    @property
    def tok(self) -> Token:
        return self.toks[self.i]

    def peek(self, n: int = 1) -> Token:
        return self.toks[min(self.i + n, len(self.toks) - 1)]

    def next(self) -> Token:
        t = self.toks[self.i]
        if t.kind != EOF:
            self.i += 1
        return t

    def error(self, msg: str, tok: Token | None = None) -> ParseError:
        t = tok or self.tok
        return ParseError(f"{position(self.filename, t.line, t.col)}: {msg}")

    def expected(self, what: str) -> ParseError:
        return self.error(f"expected {what}, found {self.tok.describe()}")

    def expect(self, kind: str) -> Token:
        if self.tok.kind != kind:
            raise self.expected(kind if kind == IDENT else f"'{kind}'")
        return self.next()

    def expect_semi(self, closing: str) -> None:
        # A semicolon may be omitted before a closing ")" or "}".
        if self.tok.kind == ";":
            self.next()
        elif self.tok.kind != closing:
            raise self.expected("';'")

    def matching_close(self, start: int) -> int:
        """Index of the token closing the bracket at `start`."""
        depth = 0
        j = start
        while j < len(self.toks):
            k = self.toks[j].kind
            if k in _OPEN:
                depth += 1
            elif k in (")", "]", "}"):
                depth -= 1
                if depth == 0:
                    return j
            elif k == EOF:
                break
            j += 1
        raise self.error("unexpected EOF", self.toks[-1])

    # Source file.

    def parse_file(self) -> File:
        if self.tok.kind != "package":
            raise self.expected("'package'")
        self.next()
        package = self.expect(IDENT).lit
        self.top_level_semi()

        decls: list[Node] = []
        while self.tok.kind == "import":
            decls.append(self.gen_decl(self.import_spec))
            self.top_level_semi()

        while self.tok.kind != EOF:
            k = self.tok.kind
            if k == "type":
                decls.append(self.gen_decl(self.type_spec))
            elif k in ("var", "const"):
                decls.append(self.gen_decl(self.value_spec))
            elif k == "func":
                decls.append(self.func_decl())
            elif k == "import":
                raise self.error("imports must appear before other declarations")
            else:
                raise self.expected("declaration")
            self.top_level_semi()

        return File(package=package, decls=tuple(decls))

    def top_level_semi(self) -> None:
        if self.tok.kind == ";":
            self.next()
        elif self.tok.kind != EOF:
            raise self.expected("';'")

    def gen_decl(self, parse_spec) -> GenDecl:
        keyword = self.next().kind
        specs: list[Node] = []
        if self.tok.kind == "(":
            self.next()
            while self.tok.kind != ")":
                if self.tok.kind == EOF:
                    raise self.expected("')'")
                specs.append(parse_spec())
                self.expect_semi(")")
            self.next()
        else:
            specs.append(parse_spec())
        return GenDecl(keyword=keyword, specs=tuple(specs))

    def import_spec(self) -> ImportSpec:
        name = None
        if self.tok.kind == IDENT:
            name = self.next().lit
        elif self.tok.kind == ".":
            self.next()
            name = "."
        path = self.expect(STRING).lit
        return ImportSpec(path=path[1:-1], name=name)

    def type_spec(self) -> TypeSpec:
        name = self.expect(IDENT).lit
        type_params: tuple[Field, ...] = ()
        if (
            self.tok.kind == "["
            and self.peek().kind == IDENT
            and self.peek(2).kind in _TYPE_PARAM_FOLLOW
        ):
            self.next()
            type_params = self.param_list("]", constraint=True)
            if not type_params:
                raise self.error("empty type parameter list")
        alias = False
        if self.tok.kind == "=":
            self.next()
            alias = True
        return TypeSpec(name=name, type=self.parse_type(), type_params=type_params, alias=alias)

    def value_spec(self) -> ValueSpec:
        names = [self.expect(IDENT).lit]
        while self.tok.kind == ",":
            self.next()
            names.append(self.expect(IDENT).lit)
        typ = None
        if self.tok.kind in _TYPE_START:
            typ = self.parse_type()
        if self.tok.kind == "=":
            self.next()
            self.skip_expression_list()
        return ValueSpec(names=tuple(names), type=typ)

    def skip_expression_list(self) -> None:
        start = self.i
        while self.tok.kind not in (";", ")", EOF):
            if self.tok.kind in _OPEN:
                self.i = self.matching_close(self.i)
            self.next()
        if self.i == start:
            raise self.expected("expression")

    def func_decl(self) -> FuncDecl:
        self.expect("func")
        recv = None
        if self.tok.kind == "(":
            self.next()
            params = self.param_list(")")
            if len(params) != 1 or len(params[0].names) > 1:
                raise self.error("method has multiple receivers")
            recv = params[0]
        name = self.expect(IDENT).lit
        type_params: tuple[Field, ...] = ()
        if self.tok.kind == "[":
            self.next()
            type_params = self.param_list("]", constraint=True)
        sig = self.signature()
        body = None
        if self.tok.kind == "{":
            body = self.skip_block()
        return FuncDecl(name=name, type=sig, body=body, recv=recv, type_params=type_params)

    def skip_block(self) -> BlockStmt:
        self.i = self.matching_close(self.i)
        self.next()
        return BlockStmt()

    # Types.

    def parse_type(self) -> Node:
        k = self.tok.kind
        if k == IDENT:
            return self.type_name()
        if k == "*":
            self.next()
            return StarExpr(self.parse_type())
        if k == "[":
            self.next()
            if self.tok.kind == "]":
                self.next()
                return ArrayType(elt=self.parse_type())
            length = self.parse_expr()
            self.expect("]")
            return ArrayType(elt=self.parse_type(), length=length)
        if k == "map":
            self.next()
            self.expect("[")
            key = self.parse_type()
            self.expect("]")
            return MapType(key=key, value=self.parse_type())
        if k == "chan":
            self.next()
            if self.tok.kind == "<-":
                self.next()
                return ChanType(value=self.parse_type(), dir=CHAN_SEND)
            return ChanType(value=self.parse_type(), dir=CHAN_BOTH)
        if k == "<-":
            self.next()
            self.expect("chan")
            return ChanType(value=self.parse_type(), dir=CHAN_RECV)
        if k == "func":
            self.next()
            return self.signature()
        if k == "interface":
            return self.interface_type()
        if k == "struct":
            return self.struct_type()
        if k == "(":
            self.next()
            inner = self.parse_type()
            self.expect(")")
            return ParenExpr(inner)
        raise self.expected("type")

    def type_name(self) -> Node:
        x: Node = Ident(self.expect(IDENT).lit)
        if self.tok.kind == ".":
            self.next()
            x = SelectorExpr(x=x, sel=self.expect(IDENT).lit)
        if self.tok.kind == "[" and self.peek().kind != "]":
            self.next()
            args = [self.parse_type()]
            while self.tok.kind == ",":
                self.next()
                if self.tok.kind == "]":
                    break
                args.append(self.parse_type())
            self.expect("]")
            x = IndexExpr(x=x, indices=tuple(args))
        return x

    def constraint(self) -> Node:
        x = self.constraint_term()
        while self.tok.kind == "|":
            self.next()
            x = BinaryExpr(x=x, op="|", y=self.constraint_term())
        return x

    def constraint_term(self) -> Node:
        if self.tok.kind == "~":
            self.next()
            return UnaryExpr(op="~", x=self.parse_type())
        return self.parse_type()

    def signature(self) -> FuncType:
        self.expect("(")
        params = self.param_list(")")
        results: tuple[Field, ...] = ()
        if self.tok.kind == "(":
            self.next()
            results = self.param_list(")")
        elif self.tok.kind in _TYPE_START:
            results = (Field(names=(), type=self.parse_type()),)
        return FuncType(params=params, results=results)

    def param_type(self, constraint: bool) -> Node:
        if self.tok.kind == "...":
            self.next()
            return Variadic(self.parse_type())
        if constraint:
            return self.constraint()
        return self.parse_type()

    def param_list(self, closing: str, *, constraint: bool = False) -> tuple[Field, ...]:
        """Parse parameters up to and including `closing`.

        Each entry is either `[name] Type` or a bare identifier whose role (name
        or type) is only known once the whole list has been seen.
        """
        entries: list[tuple[str | None, Node]] = []
        while self.tok.kind != closing:
            if self.tok.kind == IDENT and self.ident_is_param_name(closing):
                name = self.next().lit
                entries.append((name, self.param_type(constraint)))
            else:
                entries.append((None, self.param_type(constraint)))
            if self.tok.kind != ",":
                break
            self.next()
        self.expect(closing)

        if not any(name is not None for name, _ in entries):
            return tuple(Field(names=(), type=t) for _, t in entries)

        fields: list[Field] = []
        pending: list[str] = []
        for name, typ in entries:
            if name is None:
                if not isinstance(typ, Ident):
                    raise self.error("mixed named and unnamed parameters")
                pending.append(typ.name)
                continue
            fields.append(Field(names=(*pending, name), type=typ))
            pending = []
        if pending:
            raise self.error("mixed named and unnamed parameters")
        return tuple(fields)

    def ident_is_param_name(self, closing: str) -> bool:
        nxt = self.peek().kind
        if nxt in (",", closing, ".", "|"):
            return False
        if nxt == "[":
            return self.bracket_starts_type(self.i + 1)
        return True

    def bracket_starts_type(self, open_idx: int) -> bool:
        """Whether `Ident [` starts an array/slice type rather than a generic instantiation."""
        if self.toks[open_idx + 1].kind == "]":
            return True
        after = self.toks[self.matching_close(open_idx) + 1]
        return after.kind in _TYPE_START

    def interface_type(self) -> InterfaceType:
        self.expect("interface")
        self.expect("{")
        elems: list[Field] = []
        while self.tok.kind != "}":
            if self.tok.kind == IDENT and self.peek().kind == "(":
                name = self.next().lit
                elems.append(Field(names=(name,), type=self.signature()))
            else:
                elems.append(Field(names=(), type=self.constraint()))
            self.expect_semi("}")
        self.next()
        return InterfaceType(elems=tuple(elems))

    def struct_type(self) -> StructType:
        self.expect("struct")
        self.expect("{")
        fields: list[Field] = []
        while self.tok.kind != "}":
            fields.append(self.field_decl())
            self.expect_semi("}")
        self.next()
        return StructType(fields=tuple(fields))

    def field_decl(self) -> Field:
        k = self.tok.kind
        if k == "*":
            self.next()
            typ: Node = StarExpr(self.type_name())
            return Field(names=(), type=typ, tag=self.tag())
        if k != IDENT:
            raise self.expected("field name or embedded type")

        nxt = self.peek().kind
        embedded = nxt in (".", ";", "}", STRING) or (
            nxt == "[" and not self.bracket_starts_type(self.i + 1)
        )
        if embedded:
            return Field(names=(), type=self.type_name(), tag=self.tag())

        names = [self.next().lit]
        while self.tok.kind == ",":
            self.next()
            names.append(self.expect(IDENT).lit)
        typ = self.parse_type()
        return Field(names=tuple(names), type=typ, tag=self.tag())

    def tag(self) -> str | None:
        if self.tok.kind == STRING:
            return self.next().lit
        return None

    # Constant expressions (array lengths).

    def parse_expr(self, prec: int = 1) -> Node:
        x = self.unary_expr()
        while True:
            op = self.tok.kind
            op_prec = _BINARY_PREC.get(op, 0)
            if op_prec < prec:
                return x
            self.next()
            x = BinaryExpr(x=x, op=op, y=self.parse_expr(op_prec + 1))

    def unary_expr(self) -> Node:
        if self.tok.kind in _UNARY_OPS:
            op = self.next().kind
            return UnaryExpr(op=op, x=self.unary_expr())
        return self.primary_expr()

    def primary_expr(self) -> Node:
        t = self.tok
        if t.kind == IDENT:
            self.next()
            x: Node = Ident(t.lit)
        elif t.kind in LITERALS:
            self.next()
            x = BasicLit(kind=t.kind, value=t.lit)
        elif t.kind == "(":
            self.next()
            x = ParenExpr(self.parse_expr())
            self.expect(")")
        elif t.kind in ("[", "map", "struct"):
            # Literal type of a composite literal or conversion, e.g. `[4]int{}`.
            x = self.parse_type()
        else:
            raise self.expected("expression")

        while True:
            if self.tok.kind == ".":
                self.next()
                x = SelectorExpr(x=x, sel=self.expect(IDENT).lit)
            elif self.tok.kind == "(":
                self.next()
                args: list[Node] = []
                while self.tok.kind != ")":
                    args.append(self.parse_expr())
                    if self.tok.kind != ",":
                        break
                    self.next()
                self.expect(")")
                x = CallExpr(fun=x, args=tuple(args))
            elif self.tok.kind == "[":
                self.next()
                indices = [self.parse_expr()]
                while self.tok.kind == ",":
                    self.next()
                    indices.append(self.parse_expr())
                self.expect("]")
                x = IndexExpr(x=x, indices=tuple(indices))
            elif self.tok.kind == "{":
                x = self.composite_lit(x)
            else:
                return x

    def composite_lit(self, typ: Node | None) -> CompositeLit:
        self.expect("{")
        elts: list[Node] = []
        while self.tok.kind != "}":
            elts.append(self.element())
            if self.tok.kind != ",":
                break
            self.next()
        self.expect("}")
        return CompositeLit(type=typ, elts=tuple(elts))

    def element(self) -> Node:
        x = self.composite_lit(None) if self.tok.kind == "{" else self.parse_expr()
        if self.tok.kind != ":":
            return x
        self.next()
        value = self.composite_lit(None) if self.tok.kind == "{" else self.parse_expr()
        return KeyValueExpr(key=x, value=value)
