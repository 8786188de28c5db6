"""Tokenizer for Go source text, including automatic semicolon insertion."""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..errors import ParseError

IDENT = "IDENT"
INT = "INT"
FLOAT = "FLOAT"
IMAG = "IMAG"
CHAR = "CHAR"
STRING = "STRING"
EOF = "EOF"

LITERALS = frozenset({INT, FLOAT, IMAG, CHAR, STRING})

KEYWORDS = frozenset(
    {
        "break",
        "case",
        "chan",
        "const",
        "continue",
        "default",
        "defer",
        "else",
        "fallthrough",
        "for",
        "func",
        "go",
        "goto",
        "if",
        "import",
        "interface",
        "map",
        "package",
        "range",
        "return",
        "select",
        "struct",
        "switch",
        "type",
        "var",
    }
)

# Longest first so that prefix operators never shadow longer ones.
OPERATORS = (
    "<<=", ">>=", "&^=", "...",
    "&&", "||", "<-", "++", "--", "==", "!=", "<=", ">=", ":=",
    "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "<<", ">>", "&^",
    "+", "-", "*", "/", "%", "&", "|", "^", "<", ">", "=", "!", "~",
    "(", ")", "[", "]", "{", "}", ",", ";", ".", ":",
)

_SEMI_AFTER_KEYWORD = frozenset({"break", "continue", "fallthrough", "return"})
_SEMI_AFTER_OP = frozenset({"++", "--", ")", "]", "}"})

_DIGITS = "0123456789"
_IDENT_RE = re.compile(r"[^\W\d]\w*")
_NUMBER_RE = re.compile(
    r"""
    (?: 0[xX][0-9a-fA-F_]*(?:\.[0-9a-fA-F_]*)?(?:[pP][+-]?[0-9_]+)?
      | 0[bB][01_]+
      | 0[oO][0-7_]+
      | (?:[0-9][0-9_]*(?:\.[0-9_]*)?|\.[0-9][0-9_]*)(?:[eE][+-]?[0-9_]+)?
    )
    i?
    """,
    re.VERBOSE,
)


@dataclass(frozen=True)
class Token:
    kind: str  # IDENT, a literal kind, a keyword, an operator, or EOF
    lit: str
    offset: int
    line: int
    col: int

    def describe(self) -> str:
        if self.kind == ";" and self.lit == "\n":
            return "newline"
        if self.kind == EOF:
            return "EOF"
        if self.kind in (IDENT, *LITERALS):
            return self.lit
        return f"'{self.kind}'"


def position(filename: str | None, line: int, col: int) -> str:
    if filename:
        return f"{filename}:{line}:{col}"
    return f"{line}:{col}"


def tokenize(source: str, *, filename: str | None = None) -> list[Token]:
    """Split `source` into tokens, ending with a single EOF token."""
    return _Lexer(source, filename=filename).run()


class _Lexer:
    def __init__(self, source: str, *, filename: str | None):
        self.src = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.line_start = 0

    def error(self, msg: str, offset: int | None = None) -> ParseError:
        if offset is None:
            offset = self.pos
        line = self.src.count("\n", 0, offset) + 1
        col = offset - (self.src.rfind("\n", 0, offset) + 1) + 1
        return ParseError(f"{position(self.filename, line, col)}: {msg}")

    def advance(self, n: int) -> None:
        end = self.pos + n
        nl = self.src.rfind("\n", self.pos, end)
        if nl != -1:
            self.line += self.src.count("\n", self.pos, end)
            self.line_start = nl + 1
        self.pos = end

    def token(self, kind: str, lit: str, offset: int) -> Token:
        return Token(kind=kind, lit=lit, offset=offset, line=self.line, col=offset - self.line_start + 1)

    def run(self) -> list[Token]:
        src = self.src
        n = len(src)
        out: list[Token] = []
        semi = False

        while True:
            while self.pos < n and src[self.pos] in " \t\r":
                self.pos += 1

            if self.pos >= n:
                if semi:
                    out.append(self.token(";", "\n", self.pos))
                out.append(self.token(EOF, "", self.pos))
                return out

            start = self.pos
            ch = src[start]

            if ch == "\n":
                if semi:
                    out.append(self.token(";", "\n", start))
                    semi = False
                self.advance(1)
                continue

            if src.startswith("//", start):
                end = src.find("\n", start)
                self.advance((n if end == -1 else end) - start)
                continue

            if src.startswith("/*", start):
                end = src.find("*/", start + 2)
                if end == -1:
                    raise self.error("comment not terminated", start)
                if semi and "\n" in src[start:end]:
                    out.append(self.token(";", "\n", start))
                    semi = False
                self.advance(end + 2 - start)
                continue

            m = _IDENT_RE.match(src, start)
            if m:
                lit = m.group()
                kind = lit if lit in KEYWORDS else IDENT
                out.append(self.token(kind, lit, start))
                semi = kind == IDENT or lit in _SEMI_AFTER_KEYWORD
                self.advance(len(lit))
                continue

            if ch in _DIGITS or (ch == "." and start + 1 < n and src[start + 1] in _DIGITS):
                m = _NUMBER_RE.match(src, start)
                assert m is not None
                lit = m.group()
                out.append(self.token(_number_kind(lit), lit, start))
                semi = True
                self.advance(len(lit))
                continue

            if ch == '"':
                lit = self.quoted('"', "string literal not terminated")
                out.append(self.token(STRING, lit, start))
                semi = True
                self.advance(len(lit))
                continue

            if ch == "'":
                lit = self.quoted("'", "rune literal not terminated")
                out.append(self.token(CHAR, lit, start))
                semi = True
                self.advance(len(lit))
                continue

            if ch == "`":
                end = src.find("`", start + 1)
                if end == -1:
                    raise self.error("raw string literal not terminated", start)
                lit = src[start : end + 1]
                out.append(self.token(STRING, lit, start))
                semi = True
                self.advance(len(lit))
                continue

            for op in OPERATORS:
                if src.startswith(op, start):
                    out.append(self.token(op, op, start))
                    semi = op in _SEMI_AFTER_OP
                    self.advance(len(op))
                    break
            else:
                raise self.error(f"illegal character {ch!r}", start)

    def quoted(self, quote: str, unterminated: str) -> str:
        src = self.src
        i = self.pos + 1
        while i < len(src):
            c = src[i]
            if c == "\\":
                i += 2
                continue
            if c == "\n":
                break
            if c == quote:
                return src[self.pos : i + 1]
            i += 1
        raise self.error(unterminated, self.pos)


def _number_kind(lit: str) -> str:
    if lit.endswith("i"):
        return IMAG
    if lit[:2] in ("0x", "0X"):
        return FLOAT if ("." in lit or "p" in lit or "P" in lit) else INT
    if lit[:2] in ("0b", "0B", "0o", "0O"):
        return INT
    if "." in lit or "e" in lit or "E" in lit:
        return FLOAT
    return INT
