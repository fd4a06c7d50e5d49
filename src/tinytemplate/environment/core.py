"""Environment: the registry of named templates and formatters.

The Environment compiles and stores templates under names, holds the
formatters available to ``{{ path | name }}`` and renders templates by name.
``{% call name with path %}`` resolves through the same registry, falling
back to the configured loader for names that were never added.

Thread-Safety:
Registries are replaced rather than mutated (copy-on-write), and compiled
templates are immutable, so renders may run concurrently with each other
and with registration.

Example:
    >>> env = Environment()
    >>> env.add_template("item", "- {{ label }}\\n")
    >>> env.add_template("list", "{% for i in items %}{% call item with i %}{% endfor %}")
    >>> env.render("list", items=[{"label": "a"}, {"label": "b"}])
    '- a\\n- b\\n'
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from tinytemplate.environment.exceptions import TemplateNotFoundError
from tinytemplate.environment.formatters import DEFAULT_FORMATTERS
from tinytemplate.environment.loaders import Loader
from tinytemplate.environment.registry import FormatterRegistry, TemplateLookup
from tinytemplate.render_context import DEFAULT_MAX_CALL_DEPTH
from tinytemplate.template import Template
from tinytemplate.values import format_value, to_value

logger = logging.getLogger(__name__)


class Environment:
    """Registry of templates and formatters.

    Attributes:
        loader: Optional source of templates not added with add_template()
        max_call_depth: Limit on nested ``{% call %}`` depth
        default_formatter: Formatter used for plain ``{{ path }}`` tags

    Configuration:
        All options are constructor keywords:

        - ``loader``: DictLoader, FileSystemLoader or any object with
          ``get_source(name)``
        - ``formatters``: Extra formatters, merged over the built-ins
        - ``default_formatter``: Replace the plain value printer, e.g. with
          ``format_html`` to escape every ``{{ path }}``
        - ``max_call_depth``: Default 50
        - ``builtin_formatters``: Set False to start with no formatters
    """

    def __init__(
        self,
        loader: Loader | None = None,
        *,
        formatters: dict[str, Callable[[Any], str]] | None = None,
        default_formatter: Callable[[Any], str] | None = None,
        max_call_depth: int = DEFAULT_MAX_CALL_DEPTH,
        builtin_formatters: bool = True,
    ):
        if max_call_depth < 0:
            raise ValueError("max_call_depth must be >= 0")
        self.loader = loader
        self.max_call_depth = max_call_depth
        self.default_formatter = default_formatter or format_value
        self._formatters: dict[str, Callable[[Any], str]] = (
            dict(DEFAULT_FORMATTERS) if builtin_formatters else {}
        )
        if formatters:
            self._formatters.update(formatters)
        self._templates: dict[str, Template] = {}

    @property
    def formatters(self) -> FormatterRegistry:
        """Dict-like access to registered formatters."""
        return FormatterRegistry(self, "_formatters")

    @property
    def templates(self) -> TemplateLookup:
        """Mapping used to resolve ``{% call %}`` targets."""
        return TemplateLookup(self)

    def add_template(self, name: str, source: str) -> Template:
        """Compile ``source`` and register it as ``name``, replacing any previous one.

        Raises:
            TemplateSyntaxError: If the source is malformed; nothing is registered.
        """
        template = Template.compile(source, name)
        self._templates = {**self._templates, name: template}
        logger.debug("Registered template %s (%d instructions)", name, len(template.instructions))
        return template

    def add_formatter(self, name: str, formatter: Callable[[Any], str]) -> None:
        """Register a formatter for ``{{ path | name }}``."""
        self.formatters[name] = formatter
        logger.debug("Registered formatter %s", name)

    def set_default_formatter(self, formatter: Callable[[Any], str]) -> None:
        """Replace the formatter used for plain ``{{ path }}`` tags."""
        self.default_formatter = formatter

    def from_string(self, source: str, name: str | None = None) -> Template:
        """Compile a template without registering it."""
        return Template.compile(source, name)

    def get_template(self, name: str) -> Template:
        """Return the template registered as ``name``, loading it if needed.

        Raises:
            TemplateNotFoundError: If neither the registry nor the loader has it.
            TemplateSyntaxError: If loaded source fails to compile.
        """
        template = self._templates.get(name)
        if template is not None:
            return template
        if self.loader is None:
            raise TemplateNotFoundError(f"Template '{name}' not found (no loader configured)")

        source, filename = self.loader.get_source(name)
        logger.debug("Loaded template %s from %s", name, filename or "loader")
        return self.add_template(name, source)

    def list_templates(self) -> list[str]:
        """Names of registered templates plus those the loader can provide."""
        names = set(self._templates)
        if self.loader is not None:
            names.update(self.loader.list_templates())
        return sorted(names)

    def render_template(self, template: Template, context: Any = None, /, **kwargs: Any) -> str:
        """Render a Template with this environment's registries."""
        if kwargs:
            base = to_value(context) if context is not None else {}
            if not isinstance(base, dict):
                raise TypeError(
                    f"Keyword context requires a mapping context, got {type(context).__name__}"
                )
            context = {**base, **kwargs}
        return template.render(
            context,
            self.templates,
            self._formatters,
            default_formatter=self.default_formatter,
            max_call_depth=self.max_call_depth,
        )

    def render(self, name: str, context: Any = None, /, **kwargs: Any) -> str:
        """Render the template registered as ``name``.

        Context may be given as a mapping (or any convertible object), as
        keyword arguments, or both; keywords win on conflicts.

        Raises:
            TemplateNotFoundError: If ``name`` is unknown.
            TemplateRuntimeError: If rendering fails.
        """
        return self.render_template(self.get_template(name), context, **kwargs)
