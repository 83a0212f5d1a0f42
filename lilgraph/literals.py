"""Conversion of scanned literal text to values, and runes to display text."""

from __future__ import annotations

import re

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_UINT64_MAX = (1 << 64) - 1
_MAX_RUNE = 0x10FFFF

_SIGNED = re.compile(r"[+-]?[0-9]+\Z")
_UNSIGNED = re.compile(r"[0-9]+\Z")

_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    "'": "'",
}

# escape letter -> (digit count, base, maximum value, digits start offset)
_NUMERIC_ESCAPES = {
    "x": (2, 16, 255, 3),
    "u": (4, 16, _MAX_RUNE, 3),
    "U": (8, 16, _MAX_RUNE, 3),
}

_CONTROL_NAMES = {
    0x07: "'\\a'",
    0x08: "'\\b'",
    0x0C: "'\\f'",
    0x0A: "'\\n'",
    0x0D: "'\\r'",
    0x09: "'\\t'",
    0x0B: "'\\v'",
}


def _as_text(lit: str | bytes) -> str:
    if isinstance(lit, (bytes, bytearray)):
        return bytes(lit).decode("utf-8")
    return lit


def rune_value(lit: str | bytes) -> int:
    """Return the code point denoted by a quoted character literal."""
    text = _as_text(lit)
    if len(text) < 2:
        raise ValueError(f"character literal too short: {text!r}")
    if text[1] == "\\":
        return _escape_char_value(text)
    if len(text) != 3:
        raise ValueError(f"error decoding rune from literal {text!r}")
    return ord(text[1])


def _digit_value(ch: str) -> int:
    if "0" <= ch <= "9":
        return ord(ch) - ord("0")
    if "a" <= ch <= "f":
        return ord(ch) - ord("a") + 10
    if "A" <= ch <= "F":
        return ord(ch) - ord("A") + 10
    return 16


def _escape_char_value(text: str) -> int:
    if len(text) < 3:
        raise ValueError(f"error decoding character literal {text!r}")
    marker = text[2]
    if marker in _SIMPLE_ESCAPES:
        return ord(_SIMPLE_ESCAPES[marker])
    if marker in "01234567":
        count, base, maximum, start = 3, 8, 255, 2
    elif marker in _NUMERIC_ESCAPES:
        count, base, maximum, start = _NUMERIC_ESCAPES[marker]
    else:
        raise ValueError(f"error decoding character literal {text!r}")

    value = 0
    for ch in text[start : len(text) - 1][:count]:
        digit = _digit_value(ch)
        if digit >= base:
            raise ValueError(f"illegal character {ch!r} in escape sequence of {text!r}")
        value = value * base + digit
    if value > maximum or 0xD800 <= value < 0xE000:
        raise ValueError(f"escape sequence in {text!r} is an invalid code point")
    return value


def int_value(lit: str | bytes) -> int:
    """Parse a signed base-10 integer that fits in 64 bits."""
    text = _as_text(lit)
    if not _SIGNED.match(text):
        raise ValueError(f"invalid integer literal {text!r}")
    value = int(text)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"integer literal {text!r} out of range")
    return value


def uint_value(lit: str | bytes) -> int:
    """Parse an unsigned base-10 integer that fits in 64 bits."""
    text = _as_text(lit)
    if not _UNSIGNED.match(text):
        raise ValueError(f"invalid unsigned integer literal {text!r}")
    value = int(text)
    if value > _UINT64_MAX:
        raise ValueError(f"unsigned integer literal {text!r} out of range")
    return value


def rune_to_string(r: int | str) -> str:
    """Render a code point the way the grammar tables display it."""
    if isinstance(r, str):
        r = ord(r)
    if 0x20 <= r < 0x7F:
        return f"'{chr(r)}'"
    if r in _CONTROL_NAMES:
        return _CONTROL_NAMES[r]
    if r < 0x10000:
        return f"\\u{r:04x}"
    return f"\\U{r:08x}"