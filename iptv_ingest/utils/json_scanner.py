"""
Allocation-minimal JSON scanning

Extracts typed fields from provider JSON responses without building a parse tree.
Every function works on the full document text plus an optional (start, end) span
and reports positions instead of copying slices, so a catalog of tens of thousands
of objects is decoded with one pass over the array and one key search per field.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Generic, NamedTuple, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1
REPLACEMENT_CHAR = "\ufffd"

_WHITESPACE = " \t\r\n\ufeff"
_STRUCTURAL = re.compile(r'["\\{}\[\]]')
_PLAIN_RUN = re.compile(r'[^"\\]+')
_INTEGER = re.compile(r"-?([0-9]+)")
_HEX4 = re.compile(r"[0-9a-fA-F]{4}")

_SIMPLE_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}


class Span(NamedTuple):
    """Half-open [start, end) range inside a document."""
    start: int
    end: int


class ScanStatus(str, Enum):
    NOT_AN_ARRAY = "not-an-array"
    EMPTY = "empty"
    OBJECTS = "objects"


class FieldError(str, Enum):
    ABSENT = "absent"
    MALFORMED = "malformed"
    OVERFLOW = "overflow"


@dataclass(slots=True, frozen=True)
class Extracted(Generic[T]):
    """Result of reading one value: the value or an error kind, plus the next position."""
    value: T | None = None
    error: FieldError | None = None
    position: int = -1

    @property
    def ok(self) -> bool:
        return self.error is None

    def get(self, default: T) -> T:
        """Return the value, or default when extraction failed."""
        if self.error is None and self.value is not None:
            return self.value
        return default


def _absent(position: int) -> Extracted:
    return Extracted(error=FieldError.ABSENT, position=position)


def _malformed(position: int) -> Extracted:
    return Extracted(error=FieldError.MALFORMED, position=position)


def decode_text(body: bytes | str) -> str:
    """Decode a response body as UTF-8, replacing invalid byte sequences."""
    if isinstance(body, str):
        return body
    return body.decode("utf-8", errors="replace")


def _bounds(text: str, span: Span | tuple[int, int] | None) -> tuple[int, int]:
    if span is None:
        return 0, len(text)
    return span[0], span[1]


def skip_whitespace(text: str, pos: int, end: int) -> int:
    while pos < end and text[pos] in _WHITESPACE:
        pos += 1
    return pos


def _structure(text: str, start: int, end: int) -> Iterator[tuple[int, str]]:
    """Yield structural characters that are outside string literals."""
    in_string = False
    escaped_until = -1
    for match in _STRUCTURAL.finditer(text, start, end):
        index = match.start()
        if index < escaped_until:
            continue
        char = match.group()
        if in_string:
            if char == "\\":
                escaped_until = index + 2
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char != "\\":
            yield index, char


class ArrayScanner:
    """
    Lazily yields the span of every top-level object in a JSON array.

    Braces inside string literals are ignored and nested objects stay part of
    their enclosing span. Scanning stops at the bracket closing the array.

    ``status`` distinguishes a body that is not an array from an empty one; it is
    final once iteration has completed.
    """

    def __init__(self, text: str, span: Span | None = None):
        self.text = text
        start, self._end = _bounds(text, span)
        self._open = skip_whitespace(text, start, self._end)
        self.is_array = self._open < self._end and text[self._open] == "["
        self.objects_found = 0

    @property
    def status(self) -> ScanStatus:
        if not self.is_array:
            return ScanStatus.NOT_AN_ARRAY
        if self.objects_found:
            return ScanStatus.OBJECTS
        return ScanStatus.EMPTY

    def __iter__(self) -> Iterator[Span]:
        if not self.is_array:
            return

        self.objects_found = 0
        depth = 0
        brackets = 0
        object_start = -1

        for index, char in _structure(self.text, self._open, self._end):
            if char == "{":
                if depth == 0:
                    object_start = index
                depth += 1
            elif char == "}":
                if depth == 0:
                    continue
                depth -= 1
                if depth == 0 and object_start >= 0:
                    self.objects_found += 1
                    yield Span(object_start, index + 1)
                    object_start = -1
            elif depth == 0:
                brackets += 1 if char == "[" else -1
                if brackets == 0:
                    break

        if depth:
            logger.debug("JSON array ended inside an unterminated object at offset %s", object_start)


def locate_value(
    text: str,
    key: str,
    span: Span | tuple[int, int] | None = None,
    *,
    strict: bool = True,
) -> int | None:
    """
    Find the position of the value that follows ``"key":``.

    In strict mode the key token only counts when followed by optional whitespace
    and a colon, so a string value spelling the key is skipped. Otherwise the first
    occurrence of the token wins and the next colon after it is used.
    """
    start, end = _bounds(text, span)
    needle = f'"{key}"'
    pos = text.find(needle, start, end)
    while pos != -1:
        after = pos + len(needle)
        if not strict:
            colon = text.find(":", after, end)
            if colon == -1:
                return None
            return skip_whitespace(text, colon + 1, end)

        colon = skip_whitespace(text, after, end)
        if colon < end and text[colon] == ":":
            return skip_whitespace(text, colon + 1, end)
        pos = text.find(needle, after, end)
    return None


def _check_int32(digits: str, negative: bool, position: int) -> Extracted[int]:
    significant = digits.lstrip("0")
    if len(significant) > 10:
        return Extracted(error=FieldError.OVERFLOW, position=position)
    value = int(significant or "0")
    if negative:
        value = -value
    if value < INT32_MIN or value > INT32_MAX:
        return Extracted(error=FieldError.OVERFLOW, position=position)
    return Extracted(value=value, position=position)


def read_int(text: str, pos: int, end: int | None = None) -> Extracted[int]:
    """Read an optionally quoted, optionally negative integer starting at pos."""
    end = len(text) if end is None else end
    pos = skip_whitespace(text, pos, end)
    if pos >= end:
        return _absent(pos)

    # Some providers return numeric fields as strings.
    quoted = text[pos] == '"'
    if quoted:
        pos += 1

    match = _INTEGER.match(text, pos, end)
    if match is None:
        return _malformed(pos)

    next_pos = match.end()
    if quoted and next_pos < end and text[next_pos] == '"':
        next_pos += 1
    return _check_int32(match.group(1), match.group().startswith("-"), next_pos)


def parse_int_text(value: str | None) -> Extracted[int]:
    """Parse a whole string as a base-10 integer without raising."""
    if not value:
        return _absent(0)
    match = _INTEGER.fullmatch(value)
    if match is None:
        return _malformed(0)
    return _check_int32(match.group(1), value.startswith("-"), len(value))


def read_bool(text: str, pos: int, end: int | None = None) -> Extracted[bool]:
    """Read true/false or the single characters 1/0."""
    end = len(text) if end is None else end
    pos = skip_whitespace(text, pos, end)
    if pos >= end:
        return _absent(pos)

    if text.startswith("true", pos, end):
        return Extracted(value=True, position=pos + 4)
    if text.startswith("false", pos, end):
        return Extracted(value=False, position=pos + 5)
    if text[pos] == "1":
        return Extracted(value=True, position=pos + 1)
    if text[pos] == "0":
        return Extracted(value=False, position=pos + 1)
    return _malformed(pos)


def _read_hex4(text: str, pos: int, end: int) -> int | None:
    match = _HEX4.match(text, pos, end)
    if match is None:
        return None
    return int(match.group(), 16)


def _decode_unicode_escape(text: str, pos: int, end: int) -> tuple[str, int]:
    """
    Decode the ``\\uXXXX`` escape whose ``u`` sits at pos.

    Returns the decoded text and the position after the consumed characters. A
    high surrogate directly followed by an escaped low surrogate combines into one
    supplementary code point; any other surrogate becomes U+FFFD. A malformed
    escape yields a literal ``u``.
    """
    unit = _read_hex4(text, pos + 1, end)
    if unit is None:
        return "u", pos + 1
    pos += 5

    if 0xD800 <= unit <= 0xDBFF:
        if text.startswith("\\u", pos, end):
            low = _read_hex4(text, pos + 2, end)
            if low is not None and 0xDC00 <= low <= 0xDFFF:
                code_point = 0x10000 + (((unit - 0xD800) << 10) | (low - 0xDC00))
                return chr(code_point), pos + 6
        return REPLACEMENT_CHAR, pos

    if 0xDC00 <= unit <= 0xDFFF:
        return REPLACEMENT_CHAR, pos

    return chr(unit), pos


def read_string(text: str, pos: int, end: int | None = None) -> Extracted[str]:
    """Read a quoted JSON string starting at pos, decoding escape sequences."""
    end = len(text) if end is None else end
    pos = skip_whitespace(text, pos, end)
    if pos >= end:
        return _absent(pos)
    if text[pos] != '"':
        return _malformed(pos)
    pos += 1

    parts: list[str] = []
    while pos < end:
        run = _PLAIN_RUN.match(text, pos, end)
        if run is not None:
            parts.append(run.group())
            pos = run.end()
            if pos >= end:
                break

        if text[pos] == '"':
            return Extracted(value="".join(parts), position=pos + 1)

        # Backslash: decode the escape that follows it.
        pos += 1
        if pos >= end:
            break
        escape = text[pos]
        if escape == "u":
            decoded, pos = _decode_unicode_escape(text, pos, end)
            parts.append(decoded)
            continue
        parts.append(_SIMPLE_ESCAPES.get(escape, escape))
        pos += 1

    # Unterminated string
    return _malformed(end)


def read_raw(text: str, pos: int, end: int | None = None) -> Extracted[Span]:
    """Return the span of the object or array value starting at pos."""
    end = len(text) if end is None else end
    pos = skip_whitespace(text, pos, end)
    if pos >= end:
        return _absent(pos)

    open_char = text[pos]
    if open_char not in "[{":
        return _malformed(pos)
    close_char = "]" if open_char == "[" else "}"

    depth = 0
    for index, char in _structure(text, pos, end):
        if char == open_char:
            depth += 1
        elif char == close_char:
            depth -= 1
            if depth == 0:
                return Extracted(value=Span(pos, index + 1), position=index + 1)

    return _malformed(end)


def extract_int(text: str, key: str, span: Span | None = None, *, strict: bool = True) -> Extracted[int]:
    """Extract an integer field from the object in span."""
    pos = locate_value(text, key, span, strict=strict)
    if pos is None:
        return _absent(_bounds(text, span)[0])
    return read_int(text, pos, _bounds(text, span)[1])


def extract_bool(text: str, key: str, span: Span | None = None, *, strict: bool = True) -> Extracted[bool]:
    """Extract a boolean field from the object in span."""
    pos = locate_value(text, key, span, strict=strict)
    if pos is None:
        return _absent(_bounds(text, span)[0])
    return read_bool(text, pos, _bounds(text, span)[1])


def extract_string(text: str, key: str, span: Span | None = None, *, strict: bool = True) -> Extracted[str]:
    """Extract and unescape a string field from the object in span."""
    pos = locate_value(text, key, span, strict=strict)
    if pos is None:
        return _absent(_bounds(text, span)[0])
    return read_string(text, pos, _bounds(text, span)[1])


def extract_raw(text: str, key: str, span: Span | None = None, *, strict: bool = True) -> Extracted[Span]:
    """Extract the span of a nested object or array field for a second decoding pass."""
    pos = locate_value(text, key, span, strict=strict)
    if pos is None:
        return _absent(_bounds(text, span)[0])
    return read_raw(text, pos, _bounds(text, span)[1])


__all__ = [
    "Span",
    "ScanStatus",
    "FieldError",
    "Extracted",
    "ArrayScanner",
    "decode_text",
    "skip_whitespace",
    "locate_value",
    "read_int",
    "read_bool",
    "read_string",
    "read_raw",
    "parse_int_text",
    "extract_int",
    "extract_bool",
    "extract_string",
    "extract_raw",
]
