"""Dict-like views over the Environment's formatters and templates."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any

from tinytemplate.environment.exceptions import TemplateNotFoundError

if TYPE_CHECKING:
    from tinytemplate.environment.core import Environment
    from tinytemplate.template import Template


class FormatterRegistry:
    """Mapping interface for formatters.

    Supports:
        - env.formatters['name'] = func
        - env.formatters.update({'name': func})
        - func = env.formatters['name']
        - 'name' in env.formatters

    Mutations replace the underlying dict instead of changing it (copy-on-write),
    so a render that already holds the old dict is never affected.
    """

    __slots__ = ("_attr", "_env")

    def __init__(self, env: Environment, attr: str):
        self._env = env
        self._attr = attr

    def _get_dict(self) -> dict[str, Callable[[Any], str]]:
        return getattr(self._env, self._attr)

    def _set_dict(self, d: dict[str, Callable[[Any], str]]) -> None:
        setattr(self._env, self._attr, d)

    def __getitem__(self, name: str) -> Callable[[Any], str]:
        return self._get_dict()[name]

    def __setitem__(self, name: str, func: Callable[[Any], str]) -> None:
        self.update({name: func})

    def __delitem__(self, name: str) -> None:
        new = self._get_dict().copy()
        del new[name]
        self._set_dict(new)

    def __contains__(self, name: object) -> bool:
        return name in self._get_dict()

    def __iter__(self) -> Iterator[str]:
        return iter(self._get_dict())

    def __len__(self) -> int:
        return len(self._get_dict())

    def get(self, name: str, default: Callable[[Any], str] | None = None) -> Callable[[Any], str] | None:
        return self._get_dict().get(name, default)

    def update(self, mapping: dict[str, Callable[[Any], str]]) -> None:
        new = self._get_dict().copy()
        new.update(mapping)
        self._set_dict(new)

    def copy(self) -> dict[str, Callable[[Any], str]]:
        return self._get_dict().copy()

    def keys(self):
        return self._get_dict().keys()


class TemplateLookup:
    """Read-only mapping that resolves ``{% call %}`` targets through the Environment.

    ``get()`` returns None for unknown names, so the VM reports them as
    UnknownTemplateError rather than a loader error.
    """

    __slots__ = ("_env",)

    def __init__(self, env: Environment):
        self._env = env

    def get(self, name: str, default: Template | None = None) -> Template | None:
        try:
            return self._env.get_template(name)
        except TemplateNotFoundError:
            return default

    def __getitem__(self, name: str) -> Template:
        return self._env.get_template(name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None
