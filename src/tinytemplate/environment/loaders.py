"""Template loaders.

Loaders supply template source to the Environment for names that were not
registered with ``add_template()``. They implement ``get_source(name)``
returning ``(source, filename)`` and ``list_templates()``.

Built-in Loaders:
- `FileSystemLoader`: Load from filesystem directories
- `DictLoader`: Load from an in-memory dictionary

Custom Loaders:
    ```python
    class DatabaseLoader:
        def get_source(self, name: str) -> tuple[str, str | None]:
            row = db.query("SELECT source FROM templates WHERE name = ?", name)
            if not row:
                raise TemplateNotFoundError(f"Template '{name}' not found")
            return row.source, f"db://{name}"

        def list_templates(self) -> list[str]:
            return [r.name for r in db.query("SELECT name FROM templates")]
    ```
"""

from __future__ import annotations

from difflib import get_close_matches
from pathlib import Path
from typing import Protocol

from tinytemplate.environment.exceptions import TemplateNotFoundError


class Loader(Protocol):
    def get_source(self, name: str) -> tuple[str, str | None]: ...

    def list_templates(self) -> list[str]: ...


def _not_found(name: str, available: list[str], where: str | None = None) -> TemplateNotFoundError:
    msg = f"Template '{name}' not found"
    if where:
        msg += f" in: {where}"
    matches = get_close_matches(name, available, n=1, cutoff=0.6)
    if matches:
        msg += f". Did you mean '{matches[0]}'?"
    elif available:
        msg += f". Available: {', '.join(available[:10])}"
        if len(available) > 10:
            msg += f" ... ({len(available)} total)"
    return TemplateNotFoundError(msg)


class FileSystemLoader:
    """Load templates from one or more directories; the first match wins.

    Template names are paths relative to a search directory, e.g.
    ``FileSystemLoader("templates/").get_source("emails/welcome.txt")``.
    Names that would escape the search directory are not found.
    """

    __slots__ = ("_encoding", "_paths")

    def __init__(
        self,
        paths: str | Path | list[str | Path],
        encoding: str = "utf-8",
    ):
        if isinstance(paths, (str, Path)):
            paths = [paths]
        self._paths = [Path(p) for p in paths]
        self._encoding = encoding

    def get_source(self, name: str) -> tuple[str, str]:
        for base in self._paths:
            path = base / name
            if path.is_file() and path.resolve().is_relative_to(base.resolve()):
                return path.read_text(self._encoding), str(path)

        raise _not_found(
            name,
            self.list_templates(),
            where=", ".join(str(p) for p in self._paths),
        )

    def list_templates(self) -> list[str]:
        templates = set()
        for base in self._paths:
            if base.is_dir():
                for path in base.rglob("*"):
                    if path.is_file():
                        templates.add(path.relative_to(base).as_posix())
        return sorted(templates)


class DictLoader:
    """Load templates from a mapping of name → source.

    Example:
        >>> env = Environment(loader=DictLoader({"greet": "Hi {{ name }}"}))
        >>> env.render("greet", name="Ada")
        'Hi Ada'
    """

    __slots__ = ("_mapping",)

    def __init__(self, mapping: dict[str, str]):
        self._mapping = mapping

    def get_source(self, name: str) -> tuple[str, None]:
        if name not in self._mapping:
            raise _not_found(name, sorted(self._mapping))
        return self._mapping[name], None

    def list_templates(self) -> list[str]:
        return sorted(self._mapping)
