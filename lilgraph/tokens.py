"""Token types, source positions and lexical tokens."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from enum import IntEnum

from .literals import int_value as _parse_int64


class TokenType(IntEnum):
    """Kinds of token the lexer produces and the parser consumes."""

    INVALID = 0
    EOF = 1
    EMPTY = 2
    SEMICOLON = 3
    ID = 4
    LBRACKET = 5
    RBRACKET = 6
    EDGEARROW = 7
    EDGE_ATTR_OPEN = 8
    EDGE_ATTR_CLOSE = 9
    COMMA = 10
    EQUALS = 11
    NUMERIC_LITERAL = 12
    QUOTED_STRING = 13


_NAMES = (
    "INVALID",
    "␚",
    "empty",
    ";",
    "id",
    "[",
    "]",
    "edgearrow",
    "edge_attr_open",
    "edge_attr_close",
    ",",
    "=",
    "numeric_literal",
    "quoted_string",
)

_TYPES = {name: TokenType(index) for index, name in enumerate(_NAMES)}


def token_name(token_type: int) -> str:
    """Return the grammar name of a token type, or "unknown"."""
    index = int(token_type)
    if 0 <= index < len(_NAMES):
        return _NAMES[index]
    return "unknown"


def token_type(name: str) -> TokenType:
    """Return the token type with the given grammar name, or INVALID."""
    return _TYPES.get(name, TokenType.INVALID)


@dataclass(frozen=True)
class Pos:
    """A location in source text; ``source`` names the file, if known."""

    offset: int = 0
    line: int = 0
    column: int = 0
    source: str | None = None

    def __str__(self) -> str:
        if self.source is not None:
            return f"{self.source}:{self.line}:{self.column}"
        return f"Pos(offset={self.offset}, line={self.line}, column={self.column})"


_FLOAT_REJECT = re.compile(r"[\s_]")
_INFINITY_WORDS = re.compile(r"[+-]?(inf|infinity)\Z", re.IGNORECASE)


@dataclass
class Token:
    """A lexical token. Equality compares type and literal, not position."""

    type: TokenType = TokenType.INVALID
    lit: str = ""
    pos: Pos = field(default_factory=Pos, compare=False)

    def __hash__(self) -> int:
        return hash((self.type, self.lit))

    def id_value(self) -> str:
        """The identifier text of the token."""
        return self.lit

    def string_value(self) -> str:
        """The literal with its surrounding delimiters removed."""
        return self.lit[1:-1]

    def char_literal_value(self) -> str:
        """The character literal with its surrounding quotes removed."""
        return self.lit[1:-1]

    def int_value(self) -> int:
        """The literal as a signed 64-bit decimal integer."""
        return _parse_int64(self.lit)

    def float_value(self) -> float:
        """The literal as a floating-point number."""
        if not self.lit or _FLOAT_REJECT.search(self.lit):
            raise ValueError(f"invalid float literal {self.lit!r}")
        value = float(self.lit)
        if math.isinf(value) and not _INFINITY_WORDS.match(self.lit):
            raise ValueError(f"float literal {self.lit!r} out of range")
        return value