"""Context stack for the template VM.

Lookups walk the stack from the innermost scope outwards:

- ``ObjectScope`` (``{% with x %}`` and the render root) resolves the whole
  path against its value and ends the search, shadowing everything below it.
- ``NamedScope`` (``{% with x as n %}``) and ``IterationScope``
  (``{% for n in xs %}``) only answer paths starting with their name, so
  outer fields stay reachable inside them.

The stack is a short list, bounded by block nesting depth, so a linear scan
is all lookup needs.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from tinytemplate.environment.exceptions import TemplateRuntimeError
from tinytemplate.paths import INDEX_KEYWORD, Path, lookup_in


class ObjectScope:
    __slots__ = ("value",)

    def __init__(self, value: Any) -> None:
        self.value = value


class NamedScope:
    __slots__ = ("name", "value")

    def __init__(self, name: str, value: Any) -> None:
        self.name = name
        self.value = value


class IterationScope:
    """Loop state for one ``{% for %}`` block.

    ``value`` is the current element and ``index`` its zero-based position.
    Both are unset until the first ``advance()``.
    """

    __slots__ = ("_items", "index", "name", "value")

    def __init__(self, name: str, items: list[Any]) -> None:
        self.name = name
        self.value: Any = None
        self.index = -1
        self._items: Iterator[Any] = iter(items)

    def advance(self) -> bool:
        """Move to the next element. Returns False once the list is exhausted."""
        for item in self._items:
            self.value = item
            self.index += 1
            return True
        return False

    def __repr__(self) -> str:
        return f"<IterationScope {self.name} index={self.index}>"


Scope = ObjectScope | NamedScope | IterationScope


class ContextStack:
    """Innermost-last stack of lookup scopes, seeded with the render root."""

    __slots__ = ("_scopes",)

    def __init__(self, root: Any) -> None:
        self._scopes: list[Scope] = [ObjectScope(root)]

    def __len__(self) -> int:
        return len(self._scopes)

    def push(self, scope: Scope) -> None:
        self._scopes.append(scope)

    def pop(self) -> None:
        if len(self._scopes) == 1:
            raise RuntimeError("Attempted to pop the root scope. The program is malformed.")
        self._scopes.pop()

    def innermost_iteration(self) -> IterationScope:
        """The innermost scope, which must be an iteration.

        Raises:
            RuntimeError: If it is not; the compiler never emits such a program.
        """
        scope = self._scopes[-1]
        if not isinstance(scope, IterationScope):
            raise RuntimeError("Iterate executed outside of a for loop. The program is malformed.")
        return scope

    def lookup(self, path: Path) -> Any:
        """Resolve a path against the stack.

        Raises:
            UndefinedError: If a segment is missing.
            TemplateRuntimeError: If ``@index`` is used outside a loop.
        """
        first = path[0]
        if first == INDEX_KEYWORD:
            return lookup_in(path[1:], self.index(), full_path=path)

        for scope in reversed(self._scopes):
            if isinstance(scope, ObjectScope):
                return lookup_in(path, scope.value)
            if scope.name == first:
                return lookup_in(path[1:], scope.value, full_path=path)
        raise RuntimeError("Lookup reached the bottom of the context stack without a root scope.")

    def index(self) -> int:
        """Zero-based index of the innermost active loop."""
        for scope in reversed(self._scopes):
            if isinstance(scope, IterationScope):
                return scope.index
        raise TemplateRuntimeError(
            f"Used {INDEX_KEYWORD} outside of a for block",
            expression=INDEX_KEYWORD,
            suggestion="Move the tag inside {% for item in items %} ... {% endfor %}",
        )
