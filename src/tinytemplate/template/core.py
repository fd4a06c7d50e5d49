"""Compiled template object.

A Template owns the instruction tuple produced by the compiler together with
the length of its source, which is kept as a size hint for the output, and
optionally its name and source for error messages. It is immutable after
construction.

Thread-Safety:
- Templates never change after compilation
- ``render()`` creates only local state (context stack, output list,
  RenderContext), so any number of threads may render one Template at once

Example:
    >>> from tinytemplate import Template
    >>> t = Template.compile("Hello {{ name }}!")
    >>> t.render({"name": "World"})
    'Hello World!'
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from tinytemplate.compiler import compile_instructions
from tinytemplate.instructions import Instruction, dump
from tinytemplate.render_context import DEFAULT_MAX_CALL_DEPTH, render_context
from tinytemplate.template.vm import Formatter, render_into
from tinytemplate.values import format_value, to_value


class Template:
    """Compiled template ready for rendering.

    Attributes:
        instructions: The compiled program
        source_len: Length of the source text
        name: Template identifier (for error messages)
        source: Source text (for error snippets)
    """

    __slots__ = ("_instructions", "_name", "_source", "_source_len")

    def __init__(
        self,
        instructions: tuple[Instruction, ...],
        source_len: int,
        *,
        name: str | None = None,
        source: str | None = None,
    ):
        self._instructions = tuple(instructions)
        self._source_len = source_len
        self._name = name
        self._source = source

    @classmethod
    def compile(cls, source: str, name: str | None = None) -> Template:
        """Compile source text.

        Raises:
            TemplateSyntaxError: If the source is malformed.
        """
        return cls(
            compile_instructions(source, name),
            len(source),
            name=name,
            source=source,
        )

    @property
    def instructions(self) -> tuple[Instruction, ...]:
        return self._instructions

    @property
    def source_len(self) -> int:
        return self._source_len

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def source(self) -> str | None:
        return self._source

    def render(
        self,
        context: Any = None,
        templates: Mapping[str, Template] | None = None,
        formatters: Mapping[str, Formatter] | None = None,
        *,
        default_formatter: Formatter | None = None,
        max_call_depth: int = DEFAULT_MAX_CALL_DEPTH,
    ) -> str:
        """Render the template.

        Args:
            context: Host data; converted with ``to_value()`` before rendering
            templates: Templates available to ``{% call %}``
            formatters: Formatters available to ``{{ path | name }}``
            default_formatter: Formatter for plain ``{{ path }}`` tags
            max_call_depth: Limit on nested ``{% call %}`` depth

        Raises:
            TemplateRuntimeError: If rendering fails.
        """
        buf: list[str] = []
        self.render_into(
            buf,
            to_value(context),
            templates,
            formatters,
            default_formatter=default_formatter,
            max_call_depth=max_call_depth,
        )
        return "".join(buf)

    def render_into(
        self,
        output: list[str],
        value: Any,
        templates: Mapping[str, Template] | None = None,
        formatters: Mapping[str, Formatter] | None = None,
        *,
        default_formatter: Formatter | None = None,
        max_call_depth: int = DEFAULT_MAX_CALL_DEPTH,
    ) -> None:
        """Render an already converted value, appending fragments to ``output``."""
        with render_context(
            template_name=self._name,
            source=self._source,
            max_call_depth=max_call_depth,
        ) as ctx:
            render_into(
                self,
                value,
                templates if templates is not None else {},
                formatters if formatters is not None else {},
                output,
                ctx=ctx,
                default_formatter=default_formatter or format_value,
            )

    def dump(self) -> str:
        """Numbered listing of the compiled program."""
        return dump(self._instructions)

    def __repr__(self) -> str:
        return f"<Template {self._name or '<string>'!r} instructions={len(self._instructions)}>"


def compile(source: str, name: str | None = None) -> Template:  # noqa: A001
    """Compile template source into a Template."""
    return Template.compile(source, name)


def render(
    template: Template,
    value: Any,
    templates: Mapping[str, Template] | None = None,
    formatters: Mapping[str, Formatter] | None = None,
) -> str:
    """Render ``template`` against ``value`` with the given registries."""
    return template.render(value, templates, formatters)
