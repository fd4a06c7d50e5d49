"""Dotted-path addressing into Value trees.

A path such as ``user.address.city`` is stored as a tuple of segments
``("user", "address", "city")``. Segments are resolved one at a time:
dicts by key, lists by a non-negative decimal index (``items.0``).

The only reserved segment is ``@index``, which must lead the path and
resolves to the zero-based position of the innermost ``{% for %}`` loop.
"""

from __future__ import annotations

from typing import Any

from tinytemplate.environment.exceptions import UndefinedError

Path = tuple[str, ...]

INDEX_KEYWORD = "@index"


class InvalidPathError(ValueError):
    """Raised by parse_path for text that is not a valid path."""


def parse_path(text: str) -> Path:
    """Split dotted path text into segments.

    Raises:
        InvalidPathError: For empty segments or unknown ``@`` keywords.
    """
    segments = tuple(text.split("."))
    for position, segment in enumerate(segments):
        if not segment:
            if text:
                raise InvalidPathError(f"Empty segment in path '{text}'")
            raise InvalidPathError("Expected a path")
        if segment.startswith("@") and (segment != INDEX_KEYWORD or position > 0):
            raise InvalidPathError(f"Invalid keyword '{segment}' in path '{text}'")
        if any(ch.isspace() for ch in segment):
            raise InvalidPathError(f"Unexpected whitespace in path '{text}'")
    return segments


def format_path(path: Path) -> str:
    return ".".join(path)


def lookup_in(path: Path, value: Any, *, full_path: Path | None = None) -> Any:
    """Resolve ``path`` structurally against ``value``.

    ``full_path`` is the path as written in the template, used only for the
    error message when ``path`` is a suffix of it.

    Raises:
        UndefinedError: If a segment does not exist at its level.
    """
    current = value
    for segment in path:
        if isinstance(current, dict):
            try:
                current = current[segment]
                continue
            except KeyError:
                pass
        elif isinstance(current, list) and segment.isascii() and segment.isdigit():
            index = int(segment)
            if index < len(current):
                current = current[index]
                continue
        raise UndefinedError(
            segment,
            path=format_path(full_path or path),
            available_names=frozenset(str(k) for k in current) if isinstance(current, dict) else None,
        )
    return current
