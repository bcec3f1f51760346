"""Reader and writer for the flat `.properties` text format used by index metadata.

The format follows the Java properties file conventions published indexes are
written with: ISO-8859-1 text, `#`/`!` comment lines, `=`, `:` or whitespace
between key and value, backslash line continuations and `\\uXXXX` escapes.
"""

from __future__ import annotations

from datetime import UTC, datetime
import re
from typing import TYPE_CHECKING, BinaryIO

from maven_index_sync.exceptions import CorruptMetadataError


if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping


ENCODING = "latin-1"

_WHITESPACE = " \t\f"
_SEPARATORS = "=:"
_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_ESCAPE = re.compile(r"\\(u[0-9a-fA-F]{4}|u|.)", re.DOTALL)
_UNESCAPED = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_ESCAPED = {"\\": "\\\\", "\t": "\\t", "\n": "\\n", "\r": "\\r", "\f": "\\f"}


def load_properties(stream: BinaryIO) -> dict[str, str]:
    """Read a properties mapping from a byte stream and close the stream.

    The stream is closed whether or not parsing succeeds.

    Raises:
        CorruptMetadataError: If the content is not valid properties text.
    """
    with stream:
        data = stream.read()
    match data:
        case bytes() | bytearray():
            text = bytes(data).decode(ENCODING)
        case str():
            text = data
        case _:
            msg = f"Expected bytes from metadata stream, got {type(data).__name__}"
            raise CorruptMetadataError(msg)
    return loads_properties(text)


def loads_properties(text: str) -> dict[str, str]:
    """Parse properties text into a dict. Later duplicates win."""
    result: dict[str, str] = {}
    for line in _logical_lines(text):
        key, value = _split_entry(line)
        result[_unescape(key)] = _unescape(value)
    return result


def store_properties(
    properties: Mapping[str, str],
    stream: BinaryIO,
    comment: str | None = None,
) -> None:
    """Write a properties mapping to a byte stream (the stream stays open)."""
    stream.write(dumps_properties(properties, comment).encode(ENCODING))


def dumps_properties(properties: Mapping[str, str], comment: str | None = None) -> str:
    """Serialize a mapping to properties text, headed by optional comment and a date line."""
    lines: list[str] = []
    if comment:
        lines.extend(f"#{part}" for part in _LINE_BREAK.split(comment))
    lines.append(f"#{datetime.now(UTC).strftime('%a %b %d %H:%M:%S %Z %Y')}")
    lines.extend(
        f"{_escape(key, is_key=True)}={_escape(value, is_key=False)}"
        for key, value in properties.items()
    )
    return "\n".join(lines) + "\n"


def _logical_lines(text: str) -> Iterator[str]:
    """Join continuation lines, dropping blanks and comments."""
    pending: str | None = None
    for raw in _LINE_BREAK.split(text):
        line = raw.lstrip(_WHITESPACE)
        if pending is None and (not line or line[0] in "#!"):
            continue
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2:
            pending = (pending or "") + line[:-1]
            continue
        yield (pending or "") + line
        pending = None
    if pending:
        yield pending


def _split_entry(line: str) -> tuple[str, str]:
    index = 0
    while index < len(line):
        char = line[index]
        if char == "\\":
            index += 2
            continue
        if char in _SEPARATORS or char in _WHITESPACE:
            break
        index += 1
    key = line[:index]
    rest = line[index:].lstrip(_WHITESPACE)
    if rest and rest[0] in _SEPARATORS:
        rest = rest[1:].lstrip(_WHITESPACE)
    return key, rest


def _unescape(text: str) -> str:
    if "\\" not in text:
        return text

    def replace(match: re.Match[str]) -> str:
        sequence = match.group(1)
        if sequence[0] == "u":
            if len(sequence) != 5:  # noqa: PLR2004
                msg = f"Malformed \\uxxxx encoding in {text!r}"
                raise CorruptMetadataError(msg)
            return chr(int(sequence[1:], 16))
        return _UNESCAPED.get(sequence, sequence)

    unescaped = _ESCAPE.sub(replace, text)
    # \u escapes may encode UTF-16 surrogate pairs
    try:
        return unescaped.encode("utf-16-le", "surrogatepass").decode("utf-16-le")
    except UnicodeDecodeError as e:
        msg = f"Invalid surrogate sequence in {text!r}"
        raise CorruptMetadataError(msg) from e


def _escape(text: str, *, is_key: bool) -> str:
    parts: list[str] = []
    for index, char in enumerate(text):
        code = ord(char)
        if char == " ":
            parts.append("\\ " if is_key or index == 0 else " ")
        elif char in _ESCAPED:
            parts.append(_ESCAPED[char])
        elif char in "=:#!":
            parts.append(f"\\{char}")
        elif code > 0xFFFF:  # noqa: PLR2004
            encoded = char.encode("utf-16-be")
            parts.append(f"\\u{encoded[:2].hex().upper()}\\u{encoded[2:].hex().upper()}")
        elif code < 0x20 or code > 0x7E:  # noqa: PLR2004
            parts.append(f"\\u{code:04X}")
        else:
            parts.append(char)
    return "".join(parts)
