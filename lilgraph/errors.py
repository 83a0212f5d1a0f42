"""Exceptions raised while lexing, parsing and building graphs."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .tokens import Token, TokenType


class LilgraphError(Exception):
    """Base class for every error this package raises."""

    summary = "lilgraph error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(self.summary if message is None else message)


class InvalidIdError(LilgraphError):
    summary = "invalid node id"


class ParseFailError(LilgraphError):
    summary = "failed parsing"


class LoopError(LilgraphError):
    summary = "cannot create edge from a node to itself"


class BadParseTypeError(LilgraphError):
    summary = "unexpected parser result type"


class TypeChangeError(LilgraphError):
    summary = "nodes cannot be redefined with a different type"


class TypeInAttrsError(LilgraphError):
    summary = "attributes called 'type' aren't allowed to avoid ambiguity"


class CyclicError(LilgraphError):
    summary = "graph is cyclic"


_QUOTE_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\\": "\\\\",
    '"': '\\"',
}


def _quote(text: str) -> str:
    parts = []
    for ch in text:
        code = ord(ch)
        if ch in _QUOTE_ESCAPES:
            parts.append(_QUOTE_ESCAPES[ch])
        elif ch.isprintable():
            parts.append(ch)
        elif code < 0x20 or code == 0x7F:
            parts.append(f"\\x{code:02x}")
        elif code < 0x10000:
            parts.append(f"\\u{code:04x}")
        else:
            parts.append(f"\\U{code:08x}")
    return '"' + "".join(parts) + '"'


def _starts_with_letter(name: str) -> bool:
    # Only the first byte of the UTF-8 form is considered.
    encoded = name.encode("utf-8")
    return bool(encoded) and chr(encoded[0]).isalpha()


def describe_expected(tokens: Sequence[str]) -> str:
    """Describe a list of acceptable tokens in plain English."""
    tokens = list(tokens)
    if not tokens:
        return "unexpected additional tokens"
    if len(tokens) == 1:
        return "expected " + tokens[0]
    if len(tokens) == 2:
        return "expected either " + tokens[0] + " or " + tokens[1]
    if len(tokens) == 3:
        return f"expected one of {tokens[0]}, {tokens[1]} or {tokens[2]}"
    return "expected one of " + ", ".join([*tokens[:-1], "or " + tokens[-1]])


def describe_token(tok: Token) -> str:
    """Describe an offending token for an error message."""
    if tok.type == TokenType.INVALID:
        return f"unknown/invalid token {_quote(tok.lit)}"
    if tok.type == TokenType.EOF:
        return "end-of-file"
    return _quote(tok.lit)


class GrammarError(LilgraphError):
    """The input does not match the grammar at ``error_token``."""

    def __init__(
        self,
        error_token: Token,
        expected_tokens: Iterable[str] = (),
        cause: BaseException | None = None,
        error_symbols: Iterable[object] = (),
        stack_top: int = 0,
    ) -> None:
        self.error_token = error_token
        self.expected_tokens = list(expected_tokens)
        self.cause = cause
        self.error_symbols = list(error_symbols)
        self.stack_top = stack_top
        super().__init__(self._message())

    def _message(self) -> str:
        pos = self.error_token.pos
        text = f"{pos.line}:{pos.column}: error: "
        if pos.source is not None:
            text = pos.source + ":" + text
        if self.cause is not None:
            return text + str(self.cause)
        names = [name if _starts_with_letter(name) else _quote(name) for name in self.expected_tokens]
        return text + describe_expected(names) + f"; got: {describe_token(self.error_token)}"

    def __str__(self) -> str:
        return self._message()

    def describe(self) -> str:
        """A verbose multi-line report of the error and parser state."""
        tok = self.error_token
        lines = ["Error  " + str(self.cause) if self.cause is not None else "Error"]
        lines.append(f"Token: type={int(tok.type)}, lit={tok.lit}")
        lines.append(f"Pos: offset={tok.pos.offset}, line={tok.pos.line}, column={tok.pos.column}")
        expected = "".join(name + " " for name in self.expected_tokens)
        lines.append("Expected one of: " + expected + "ErrorSymbol:")
        lines.extend(str(symbol) for symbol in self.error_symbols)
        return "\n".join(lines) + "\n"