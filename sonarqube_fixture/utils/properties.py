"""
Reading and writing of ``.properties`` configuration files.

The server reads its configuration from ``conf/sonar.properties`` in the
Java properties format: ISO-8859-1 text with backslash escapes and ``\\uXXXX``
sequences for every other character.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime
import logging
from pathlib import Path
import re
import string

logger = logging.getLogger(__name__)

ENCODING = "latin-1"

_ESCAPES = {"\t": "\\t", "\n": "\\n", "\r": "\\r", "\f": "\\f"}
_UNESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_SPECIAL_CHARACTERS = "=:#!\\"
_SEPARATORS = "=:"
_WHITESPACE = " \t\f"


def _escape(text: str, is_key: bool) -> str:
    """Escape a key or value for a properties file."""
    escaped = []
    for index, char in enumerate(text):
        if char == " ":
            # Spaces are significant everywhere in a key but only at the start of a value
            escaped.append("\\ " if is_key or index == 0 else " ")
        elif char in _ESCAPES:
            escaped.append(_ESCAPES[char])
        elif char in _SPECIAL_CHARACTERS:
            escaped.append(f"\\{char}")
        elif char < " " or char > "~":
            encoded = char.encode("utf-16-be")
            for offset in range(0, len(encoded), 2):
                code_unit = int.from_bytes(encoded[offset : offset + 2], "big")
                escaped.append(f"\\u{code_unit:04X}")
        else:
            escaped.append(char)
    return "".join(escaped)


def _escape_comment(text: str) -> str:
    """Escape the characters of a comment line that ISO-8859-1 text cannot hold."""
    return "".join(char if " " <= char <= "~" else f"\\u{ord(char):04X}" for char in text)


def _unescape(text: str) -> str:
    """Resolve backslash escapes in a key or value read from a properties file."""
    chars = []
    index = 0
    while index < len(text):
        char = text[index]
        index += 1
        if char != "\\" or index >= len(text):
            chars.append(char)
            continue

        char = text[index]
        index += 1
        if char == "u":
            code = text[index : index + 4]
            if len(code) != 4 or any(c not in string.hexdigits for c in code):
                raise ValueError(f"Malformed \\uXXXX escape: \\u{code}")
            chars.append(chr(int(code, 16)))
            index += 4
        else:
            chars.append(_UNESCAPES.get(char, char))

    # \\uXXXX pairs may encode a surrogate pair
    return "".join(chars).encode("utf-16", "surrogatepass").decode("utf-16")


def _ends_with_continuation(line: str) -> bool:
    """Check whether a line ends with an odd number of backslashes."""
    trailing = len(line) - len(line.rstrip("\\"))
    return trailing % 2 == 1


def _logical_lines(lines: Iterable[str]) -> Iterable[str]:
    """Join continued lines and drop blank lines and comments."""
    pending = None
    for raw_line in lines:
        line = raw_line.rstrip("\r\n")
        if pending is not None:
            line = pending + line.lstrip(_WHITESPACE)
            pending = None
        else:
            stripped = line.lstrip(_WHITESPACE)
            if not stripped or stripped[0] in "#!":
                continue
            line = stripped

        if _ends_with_continuation(line):
            pending = line[:-1]
            continue
        yield line

    if pending is not None:
        yield pending


def _split_entry(line: str) -> tuple[str, str]:
    """Split a logical line into its raw key and value."""
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


def format_properties(properties: Mapping[str, str], comment: str | None = None) -> str:
    """Render properties in the properties file format.

    Args:
        properties: Mapping of key to value
        comment: Optional comment written above the timestamp line

    Returns:
        File content, terminated by a newline
    """
    lines = []
    if comment:
        lines.extend(f"#{_escape_comment(line)}" for line in comment.splitlines())
    lines.append(f"#{datetime.now().strftime('%a %b %d %H:%M:%S %Y')}")
    for key, value in properties.items():
        lines.append(f"{_escape(str(key), is_key=True)}={_escape(str(value), is_key=False)}")
    return "\n".join(lines) + "\n"


def parse_properties(content: str) -> dict[str, str]:
    """Parse the content of a properties file.

    Args:
        content: File content

    Returns:
        Mapping of key to value; later definitions of a key win

    Raises:
        ValueError: If the content holds a malformed unicode escape
    """
    properties = {}
    for line in _logical_lines(re.split(r"\r\n|\r|\n", content)):
        key, value = _split_entry(line)
        properties[_unescape(key)] = _unescape(value)
    return properties


def write_properties(
    path: str | Path, properties: Mapping[str, str], comment: str | None = None
) -> None:
    """Write a properties file, replacing any previous one.

    The existing file is deleted first; its content is never merged.

    Args:
        path: Destination file
        properties: Mapping of key to value
        comment: Optional header comment

    Raises:
        OSError: If the file cannot be removed or written, e.g. when its
            directory does not exist
    """
    path = Path(path)
    path.unlink(missing_ok=True)
    with path.open("w", encoding=ENCODING, newline="\n") as f:
        f.write(format_properties(properties, comment))
    logger.info(f"Wrote {len(properties)} properties to {path}")


def read_properties(path: str | Path) -> dict[str, str]:
    """Read a properties file.

    Args:
        path: File to read

    Returns:
        Mapping of key to value

    Raises:
        OSError: If the file cannot be read
        ValueError: If the file holds a malformed unicode escape
    """
    path = Path(path)
    with path.open("r", encoding=ENCODING) as f:
        return parse_properties(f.read())
