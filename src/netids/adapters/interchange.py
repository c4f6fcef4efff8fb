"""Network id interchange files.

The format is a narrow, purpose-built subset of JSON::

    {"<id>":"<escaped hierarchy path>", "<id>":"<escaped hierarchy path>"}

It is written and read by hand rather than through ``json`` so that the
exact escaping table below is the contract, and so that files produced by
older exporters (which never escaped keys and relied on the even-backslash
rule to find string ends) keep parsing the same way.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from netids.domain.errors import ParseError
from netids.domain.model.binding import Binding
from netids.domain.model.registry import IdentifierRegistry

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from netids.domain.ports.scene import SceneGraph

log = logging.getLogger(__name__)

_ESCAPES: Final[dict[str, str]] = {
    "\\": "\\\\",
    '"': '\\"',
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}
_UNESCAPES: Final[dict[str, str]] = {
    "\\": "\\",
    '"': '"',
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}
_HEX_DIGITS: Final[frozenset[str]] = frozenset("0123456789abcdefABCDEF")


@dataclass(frozen=True, slots=True)
class InterchangeEntry:
    id: int
    path: str


def escape(text: str) -> str:
    parts: list[str] = []
    for char in text:
        mapped = _ESCAPES.get(char)
        if mapped is not None:
            parts.append(mapped)
        elif ord(char) <= 0x1F or ord(char) == 0x7F:
            parts.append(f"\\u{ord(char):04X}")
        else:
            parts.append(char)
    return "".join(parts)


def unescape(text: str) -> str:
    """Reverse :func:`escape`. Raises ``ParseError`` on a malformed escape."""

    parts: list[str] = []
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char != "\\":
            parts.append(char)
            index += 1
            continue
        if index + 1 >= length:
            raise ParseError("Dangling escape at end of string.", remainder=text[index:])
        code = text[index + 1]
        if code == "u":
            digits = text[index + 2 : index + 6]
            if len(digits) != 4 or not set(digits) <= _HEX_DIGITS:
                raise ParseError(
                    f"Malformed unicode escape {text[index : index + 6]!r}.",
                    remainder=text[index:],
                )
            parts.append(chr(int(digits, 16)))
            index += 6
            continue
        mapped = _UNESCAPES.get(code)
        if mapped is None:
            raise ParseError(f"Unknown escape sequence \\{code}.", remainder=text[index:])
        parts.append(mapped)
        index += 2
    return "".join(parts)


def encode(entries: Iterable[InterchangeEntry]) -> str:
    body = ", ".join(f'"{entry.id}":"{escape(entry.path)}"' for entry in entries)
    return f"{{{body}}}"


def decode(text: str) -> list[InterchangeEntry]:
    """Scan interchange text into entries.

    Any structural problem aborts the whole parse with a ``ParseError`` whose
    ``remainder`` is the unparsed rest of the input.
    """

    stripped = text.strip()
    if not stripped:
        raise ParseError("Interchange text is empty.")
    if not stripped.startswith("{"):
        raise ParseError("Expected '{' at start of text.", remainder=stripped)
    if not stripped.endswith("}"):
        raise ParseError("Expected '}' at end of text.", remainder=stripped)

    body = stripped[1:-1]
    entries: list[InterchangeEntry] = []
    pos = _skip_whitespace(body, 0)
    while pos < len(body):
        if entries:
            if body[pos] != ",":
                raise ParseError("Expected ',' between entries.", remainder=body[pos:])
            pos = _skip_whitespace(body, pos + 1)

        if pos >= len(body) or body[pos] != '"':
            raise ParseError('Could not find opening " of key.', remainder=body[pos:])
        key_end = body.find('"', pos + 1)
        if key_end == -1:
            raise ParseError('Could not find closing " of key.', remainder=body[pos:])
        key = body[pos + 1 : key_end]
        if not (key.isascii() and key.isdigit()):
            raise ParseError(f"Could not parse {key!r} as number.", remainder=body[pos:])

        pos = _skip_whitespace(body, key_end + 1)
        if pos >= len(body) or body[pos] != ":":
            raise ParseError("Expected ':' after key.", remainder=body[pos:])
        pos = _skip_whitespace(body, pos + 1)
        if pos >= len(body) or body[pos] != '"':
            raise ParseError('Could not find opening " of value.', remainder=body[pos:])

        value_end = _closing_quote(body, pos)
        if value_end == -1:
            raise ParseError(
                'Could not find next non-escaped " in text, hit end of text.',
                remainder=body[pos:],
            )
        try:
            path = unescape(body[pos + 1 : value_end])
        except ParseError as exc:
            raise ParseError(exc.message, remainder=body[pos:]) from exc

        entries.append(InterchangeEntry(id=int(key), path=path))
        pos = _skip_whitespace(body, value_end + 1)

    return entries


def export_entries(registry: IdentifierRegistry, scene: SceneGraph) -> list[InterchangeEntry]:
    """Entries for every binding whose node still resolves; the rest are omitted."""

    entries: list[InterchangeEntry] = []
    for binding in registry.non_null():
        node = binding.node
        if node is None:
            continue
        path = scene.hierarchy_path(node)
        if path is None:
            continue
        entries.append(InterchangeEntry(id=binding.id, path=path))
    return entries


def export_registry(registry: IdentifierRegistry, scene: SceneGraph) -> str:
    return encode(export_entries(registry, scene))


def import_registry(text: str, scene: SceneGraph) -> IdentifierRegistry:
    """Parse interchange text and resolve each path against ``scene``."""

    entries = decode(text)
    bindings: list[Binding | None] = []
    unresolved = 0
    for entry in entries:
        node = scene.resolve_path(entry.path)
        if node is None:
            unresolved += 1
        bindings.append(Binding(entry.id, node, source_path=entry.path))
    if unresolved:
        log.warning("%s imported path(s) did not resolve to a scene node", unresolved)
    return IdentifierRegistry(bindings)


def write_interchange_file(path: Path, registry: IdentifierRegistry, scene: SceneGraph) -> int:
    """Write the export to ``path`` and return the number of entries written."""

    entries = export_entries(registry, scene)
    path.write_text(encode(entries), encoding="utf-8")
    count = len(entries)
    log.info("Exported %s network id(s) to %s", count, path)
    return count


def read_interchange_file(path: Path, scene: SceneGraph) -> IdentifierRegistry:
    return import_registry(path.read_text(encoding="utf-8"), scene)


def _skip_whitespace(text: str, pos: int) -> int:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def _closing_quote(text: str, start: int) -> int:
    """Index of the first quote after ``start`` preceded by an even run of backslashes."""

    search = start + 1
    while True:
        candidate = text.find('"', search)
        if candidate == -1:
            return -1
        backslashes = 0
        probe = candidate - 1
        while probe > start and text[probe] == "\\":
            backslashes += 1
            probe -= 1
        if backslashes % 2 == 0:
            return candidate
        search = candidate + 1
