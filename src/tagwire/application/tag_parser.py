"""Application layer - ``inject`` tag parsing.

Tags follow the ``key:"value"`` convention: keys are separated by spaces and
each value is a double quoted string literal with backslash escapes.
"""

import functools
from typing import Optional, Tuple

from tagwire.domain import Tag, TagKind, TagSyntaxError

INJECT_KEY = "inject"

_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    '"': '"',
}
_HEX_ESCAPE_WIDTHS = {"x": 2, "u": 4, "U": 8}
_OCTAL_DIGITS = "01234567"

PLAIN_TAG = Tag(kind=TagKind.PLAIN)
PRIVATE_TAG = Tag(kind=TagKind.PRIVATE)
INLINE_TAG = Tag(kind=TagKind.INLINE)


def unquote(raw: str, quoted: str) -> str:
    """Decode a double quoted string literal.

    Args:
        raw: The full tag, used for error reporting.
        quoted: The literal including its surrounding quotes.

    Returns:
        The decoded value.

    Raises:
        TagSyntaxError: If the literal is not terminated or has a bad escape.
    """
    if len(quoted) < 2 or quoted[0] != '"' or quoted[-1] != '"':
        raise TagSyntaxError(raw, "value is not a quoted string")

    body = quoted[1:-1]
    chars = []
    i = 0
    while i < len(body):
        char = body[i]
        if char == "\n":
            raise TagSyntaxError(raw, "newline in quoted value")
        if char == '"':
            raise TagSyntaxError(raw, "unescaped quote in value")
        if char != "\\":
            chars.append(char)
            i += 1
            continue

        i += 1
        if i >= len(body):
            raise TagSyntaxError(raw, "dangling escape")
        escape = body[i]
        if escape in _SIMPLE_ESCAPES:
            chars.append(_SIMPLE_ESCAPES[escape])
            i += 1
        elif escape in _HEX_ESCAPE_WIDTHS:
            width = _HEX_ESCAPE_WIDTHS[escape]
            digits = body[i + 1 : i + 1 + width]
            if len(digits) != width or any(d not in "0123456789abcdefABCDEF" for d in digits):
                raise TagSyntaxError(raw, f"invalid \\{escape} escape")
            code = int(digits, 16)
            if code > 0x10FFFF or 0xD800 <= code <= 0xDFFF:
                raise TagSyntaxError(raw, f"invalid code point in \\{escape} escape")
            chars.append(chr(code))
            i += 1 + width
        elif escape in _OCTAL_DIGITS:
            digits = body[i : i + 3]
            if len(digits) != 3 or any(d not in _OCTAL_DIGITS for d in digits):
                raise TagSyntaxError(raw, "invalid octal escape")
            code = int(digits, 8)
            if code > 0xFF:
                raise TagSyntaxError(raw, "octal escape out of range")
            chars.append(chr(code))
            i += 3
        else:
            raise TagSyntaxError(raw, f"unknown escape \\{escape}")
    return "".join(chars)


def extract_tag_value(key: str, raw: str) -> Tuple[bool, str]:
    """Find the value stored under ``key`` in a tag string.

    Args:
        key: The key to look for, e.g. ``"inject"``.
        raw: The complete tag string, e.g. ``'json:"a" inject:"private"'``.

    Returns:
        ``(found, value)``; value is empty when the key is absent.

    Raises:
        TagSyntaxError: If the tag does not follow the ``key:"value"`` grammar.

    Example:
        >>> extract_tag_value("inject", 'json:"name" inject:"dev logger"')
        (True, 'dev logger')
    """
    rest = raw
    while rest:
        rest = rest.lstrip(" ")
        if not rest:
            break

        # Scan to the colon ending the key
        i = 0
        while i < len(rest) and rest[i] not in ' :"':
            i += 1
        if i + 1 >= len(rest) or rest[i] != ":" or rest[i + 1] != '"':
            raise TagSyntaxError(raw, "expected key:\"value\"")
        current_key = rest[:i]
        rest = rest[i + 1 :]

        # Scan the quoted value, skipping escaped characters
        i = 1
        while i < len(rest) and rest[i] != '"':
            if rest[i] == "\\":
                i += 1
            i += 1
        if i >= len(rest):
            raise TagSyntaxError(raw, "unterminated quoted value")
        quoted = rest[: i + 1]
        rest = rest[i + 1 :]

        if current_key == key:
            return True, unquote(raw, quoted)
    return False, ""


@functools.lru_cache(maxsize=None)
def parse_tag(raw: str) -> Optional[Tag]:
    """Parse the ``inject`` part of a raw tag string.

    Args:
        raw: The raw tag string of one field.

    Returns:
        None when there is no ``inject`` key, otherwise the parsed Tag.

    Raises:
        TagSyntaxError: If the tag is malformed.
    """
    found, value = extract_tag_value(INJECT_KEY, raw)
    if not found:
        return None
    if value == "":
        return PLAIN_TAG
    if value == TagKind.PRIVATE.value:
        return PRIVATE_TAG
    if value == TagKind.INLINE.value:
        return INLINE_TAG
    return Tag(kind=TagKind.NAMED, name=value)


def quote(value: str) -> str:
    """Encode ``value`` as a double quoted literal understood by ``unquote``."""
    reverse = {v: k for k, v in _SIMPLE_ESCAPES.items()}
    parts = ['"']
    for char in value:
        if char in reverse:
            parts.append("\\" + reverse[char])
        elif char.isprintable():
            parts.append(char)
        elif ord(char) <= 0xFF:
            parts.append(f"\\x{ord(char):02x}")
        elif ord(char) <= 0xFFFF:
            parts.append(f"\\u{ord(char):04x}")
        else:
            parts.append(f"\\U{ord(char):08x}")
    parts.append('"')
    return "".join(parts)


def format_tag(value: str = "") -> str:
    """Build an ``inject`` tag string for ``value``.

    Example:
        >>> format_tag("dev logger")
        'inject:"dev logger"'
    """
    return f"{INJECT_KEY}:{quote(value)}"


def named(name: str) -> str:
    """Build a tag binding a field to the object provided under ``name``."""
    if not name:
        raise ValueError("name must not be empty")
    return format_tag(name)


INJECT = format_tag()
PRIVATE = format_tag(TagKind.PRIVATE.value)
INLINE = format_tag(TagKind.INLINE.value)
