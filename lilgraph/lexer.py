"""Table-driven scanner that turns lilgraph source text into tokens."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from .tokens import Pos, Token, TokenType

_NO_STATE = -1
_MAX_RUNE = 0x10FFFF

# Each state maps to (ranges, default): ranges are (low, high, next state);
# default is the next state for any other rune, or None if none applies.
_STRING_BODY = (
    (1, 33, 15),
    (34, 34, 16),
    (35, 91, 15),
    (92, 92, 17),
    (93, 127, 15),
    (128, 65532, 18),
    (65534, _MAX_RUNE, 18),
)
_ESCAPED = (
    (1, 33, 29),
    (34, 34, 30),
    (35, 91, 29),
    (92, 92, 30),
    (93, 127, 29),
    (128, 65532, 31),
    (65534, _MAX_RUNE, 31),
)
_IDENT_TAIL = (
    (48, 57, 27),
    (65, 90, 11),
    (95, 95, 14),
    (97, 122, 11),
)
_NOTHING: tuple[tuple[int, int, int], ...] = ()

_TRANSITIONS: tuple[tuple[tuple[tuple[int, int, int], ...], int | None], ...] = (
    # S0: start of a token
    (
        (
            (9, 9, 1),
            (10, 10, 1),
            (13, 13, 1),
            (32, 32, 1),
            (34, 34, 2),
            (35, 35, 3),
            (44, 44, 4),
            (45, 45, 5),
            (46, 46, 6),
            (47, 47, 7),
            (48, 57, 8),
            (59, 59, 9),
            (61, 61, 10),
            (65, 90, 11),
            (91, 91, 12),
            (93, 93, 13),
            (95, 95, 14),
            (97, 122, 11),
        ),
        None,
    ),
    (_NOTHING, None),  # S1
    (_STRING_BODY, None),  # S2
    (((10, 10, 19),), 3),  # S3
    (_NOTHING, None),  # S4
    (((45, 45, 20), (46, 46, 6), (48, 57, 8), (62, 62, 21), (91, 91, 22)), None),  # S5
    (((48, 57, 23),), None),  # S6
    (((42, 42, 24), (47, 47, 25)), None),  # S7
    (((46, 46, 26), (48, 57, 8)), None),  # S8
    (_NOTHING, None),  # S9
    (_NOTHING, None),  # S10
    (_IDENT_TAIL, None),  # S11
    (_NOTHING, None),  # S12
    (((45, 45, 28),), None),  # S13
    (_IDENT_TAIL, None),  # S14
    (_STRING_BODY, None),  # S15
    (_NOTHING, None),  # S16
    (_ESCAPED, None),  # S17
    (_STRING_BODY, None),  # S18
    (_NOTHING, None),  # S19
    (((45, 45, 20), (62, 62, 21), (91, 91, 22)), None),  # S20
    (_NOTHING, None),  # S21
    (_NOTHING, None),  # S22
    (((48, 57, 23),), None),  # S23
    (((42, 42, 32),), 24),  # S24
    (((10, 10, 19),), 25),  # S25
    (((48, 57, 33),), None),  # S26
    (_IDENT_TAIL, None),  # S27
    (((45, 45, 28), (62, 62, 34)), None),  # S28
    (_STRING_BODY, None),  # S29
    (_STRING_BODY, None),  # S30
    (_STRING_BODY, None),  # S31
    (((42, 42, 32), (47, 47, 35)), 24),  # S32
    (((48, 57, 33),), None),  # S33
    (_NOTHING, None),  # S34
    (_NOTHING, None),  # S35
)

# States whose input is skipped rather than forming part of a token.
_IGNORE = {1: "!whitespace", 19: "!comment", 35: "!comment"}

# Token type recorded on reaching each non-ignoring state.
_ACCEPT = {
    4: TokenType.COMMA,
    8: TokenType.NUMERIC_LITERAL,
    9: TokenType.SEMICOLON,
    10: TokenType.EQUALS,
    11: TokenType.ID,
    12: TokenType.LBRACKET,
    13: TokenType.RBRACKET,
    14: TokenType.ID,
    16: TokenType.QUOTED_STRING,
    21: TokenType.EDGEARROW,
    22: TokenType.EDGE_ATTR_OPEN,
    23: TokenType.NUMERIC_LITERAL,
    27: TokenType.ID,
    33: TokenType.NUMERIC_LITERAL,
    34: TokenType.EDGE_ATTR_CLOSE,
}


def _next_state(state: int, code: int) -> int:
    ranges, default = _TRANSITIONS[state]
    for low, high, target in ranges:
        if low <= code <= high:
            return target
    return _NO_STATE if default is None else default


def _as_text(src: str | bytes | bytearray | None) -> str:
    if src is None:
        return ""
    if isinstance(src, (bytes, bytearray)):
        return bytes(src).decode("utf-8", errors="replace")
    return src


class Lexer:
    """Scans source text into tokens; offsets count characters."""

    def __init__(self, src: str | bytes | bytearray | None, source: str | None = None) -> None:
        self._src = _as_text(src)
        self._pos = 0
        self._line = 1
        self._column = 1
        self.source = source

    def _position(self, offset: int, line: int, column: int) -> Pos:
        return Pos(offset=offset, line=line, column=column, source=self.source)

    def scan(self) -> Token:
        """Return the next token; at end of input, an EOF token every time."""
        src = self._src
        length = len(src)
        if self._pos >= length:
            return Token(TokenType.EOF, "", self._position(self._pos, self._line, self._column))

        start, start_line, start_column, end = self._pos, self._line, self._column, 0
        tok_type = TokenType.INVALID
        state = 0
        while state != _NO_STATE:
            if self._pos >= length:
                state = _NO_STATE
                ch = ""
            else:
                ch = src[self._pos]
                self._pos += 1
                state = _next_state(state, ord(ch))

            if state == _NO_STATE:
                if tok_type == TokenType.INVALID:
                    end = self._pos
                continue

            if ch == "\n":
                self._line += 1
                self._column = 1
            elif ch == "\r":
                self._column = 1
            elif ch == "\t":
                self._column += 4
            else:
                self._column += 1

            if state in _IGNORE:
                start, start_line, start_column = self._pos, self._line, self._column
                state = 0
                if start >= length:
                    tok_type = TokenType.EOF
            else:
                tok_type = _ACCEPT.get(state, TokenType.INVALID)
                end = self._pos

        if end > start:
            self._pos = end
            lit = src[start:end]
        else:
            lit = ""
        return Token(tok_type, lit, self._position(start, start_line, start_column))

    def reset(self) -> None:
        """Rewind to the start of the input; line and column are kept."""
        self._pos = 0

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens up to and including the first EOF token."""
        while True:
            tok = self.scan()
            yield tok
            if tok.type == TokenType.EOF:
                return


def lexer_from_file(path: str | Path) -> Lexer:
    """Create a lexer over a file's contents, naming the file in positions."""
    data = Path(path).read_bytes()
    return Lexer(data, source=str(path))