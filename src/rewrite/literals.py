"""Go string literal helpers shared by the go.mod and Go source parsers."""

from __future__ import annotations

from .errors import ParseError

_SIMPLE_ESCAPES = {
    "a": 0x07,
    "b": 0x08,
    "f": 0x0C,
    "n": 0x0A,
    "r": 0x0D,
    "t": 0x09,
    "v": 0x0B,
    "\\": 0x5C,
    '"': 0x22,
}

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

_HEX_DIGITS = "0123456789abcdefABCDEF"


def unquote(literal: str) -> str:
    """Decode an interpreted (``"..."``) or raw (`` `...` ``) Go string literal.

    Raises:
        ParseError: If the literal is malformed.
    """
    if len(literal) < 2:
        raise ParseError(f"invalid string literal {literal!r}")
    quote = literal[0]
    if quote == "`":
        if literal[-1] != "`" or "`" in literal[1:-1]:
            raise ParseError(f"invalid raw string literal {literal!r}")
        return literal[1:-1].replace("\r", "")
    if quote != '"' or literal[-1] != '"':
        raise ParseError(f"invalid string literal {literal!r}")

    body = literal[1:-1]
    out = bytearray()
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\n" or ch == '"':
            raise ParseError(f"invalid string literal {literal!r}")
        if ch != "\\":
            out += ch.encode("utf-8")
            i += 1
            continue
        if i + 1 >= len(body):
            raise ParseError(f"invalid escape in {literal!r}")
        esc = body[i + 1]
        if esc in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[esc])
            i += 2
        elif esc == "x":
            out.append(_hex_value(body[i + 2:i + 4], 2, literal))
            i += 4
        elif esc in "uU":
            width = 4 if esc == "u" else 8
            code = _hex_value(body[i + 2:i + 2 + width], width, literal)
            if code > 0x10FFFF or 0xD800 <= code <= 0xDFFF:
                raise ParseError(f"invalid unicode escape in {literal!r}")
            out += chr(code).encode("utf-8")
            i += 2 + width
        elif esc in "01234567":
            digits = body[i + 1:i + 4]
            if len(digits) != 3 or any(d not in "01234567" for d in digits):
                raise ParseError(f"invalid octal escape in {literal!r}")
            value = int(digits, 8)
            if value > 0xFF:
                raise ParseError(f"invalid octal escape in {literal!r}")
            out.append(value)
            i += 4
        else:
            raise ParseError(f"invalid escape \\{esc} in {literal!r}")
    try:
        return out.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(f"string literal {literal!r} is not valid UTF-8") from exc


def _hex_value(digits: str, width: int, literal: str) -> int:
    if len(digits) != width or any(d not in _HEX_DIGITS for d in digits):
        raise ParseError(f"invalid hex escape in {literal!r}")
    return int(digits, 16)


def quote(value: str) -> str:
    """Encode value as an interpreted Go string literal."""
    parts = ['"']
    for ch in value:
        if ch in _QUOTE_ESCAPES:
            parts.append(_QUOTE_ESCAPES[ch])
        elif ch.isprintable():
            parts.append(ch)
        elif ord(ch) < 0x80:
            parts.append(f"\\x{ord(ch):02x}")
        elif ord(ch) < 0x10000:
            parts.append(f"\\u{ord(ch):04x}")
        else:
            parts.append(f"\\U{ord(ch):08x}")
    parts.append('"')
    return "".join(parts)


def must_quote(value: str) -> bool:
    """Report whether a go.mod token needs quoting to survive re-parsing."""
    if not value or "//" in value or "/*" in value:
        return True
    for ch in value:
        if ch in " \"'`()[]{},":
            return True
        if not ch.isprintable():
            return True
    return False


def auto_quote(value: str) -> str:
    """Quote value only when it cannot be written as a bare go.mod token."""
    return quote(value) if must_quote(value) else value
