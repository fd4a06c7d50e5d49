"""The template virtual machine.

``render_into()`` executes a compiled instruction tuple with a program
counter and a ContextStack, appending output fragments to a shared list
(StringBuilder pattern: one ``''.join()`` at the very end instead of
repeated concatenation). Every instruction either falls through or sets the
program counter to an absolute target; execution ends when the counter runs
off the end of the program.

``{% call %}`` is the only recursion: the callee runs in a fresh
ContextStack seeded with the looked-up value and appends to the same buffer.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from tinytemplate.environment.exceptions import (
    ErrorCode,
    NotIterableError,
    TemplateError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    UnknownFormatterError,
    UnknownTemplateError,
)
from tinytemplate.instructions import (
    Branch,
    Call,
    FormattedValue,
    Goto,
    Iterate,
    Literal,
    PopContext,
    PushContext,
    PushIterationContext,
    PushNamedContext,
    Value,
)
from tinytemplate.paths import format_path
from tinytemplate.render_context import (
    RenderContext,
    reset_render_context,
    set_render_context,
)
from tinytemplate.template.scopes import (
    ContextStack,
    IterationScope,
    NamedScope,
    ObjectScope,
)
from tinytemplate.values import format_value, is_truthy, type_name

if TYPE_CHECKING:
    from tinytemplate.template.core import Template

logger = logging.getLogger(__name__)

Formatter = Callable[[Any], str]


def apply_formatter(formatter: Formatter, name: str, value: Any) -> str:
    """Run a formatter, normalising its failures to TemplateRuntimeError."""
    try:
        result = formatter(value)
    except TemplateError:
        raise
    except Exception as e:
        raise TemplateRuntimeError(
            f"Formatter '{name}' failed: {type(e).__name__}: {e}",
            code=ErrorCode.FORMATTER_ERROR,
        ) from e
    if not isinstance(result, str):
        raise TemplateRuntimeError(
            f"Formatter '{name}' returned {type(result).__name__}, expected str",
            code=ErrorCode.FORMATTER_ERROR,
        )
    return result


def render_into(
    template: Template,
    value: Any,
    templates: Mapping[str, Template],
    formatters: Mapping[str, Formatter],
    output: list[str],
    *,
    ctx: RenderContext,
    default_formatter: Formatter = format_value,
) -> None:
    """Execute ``template`` against ``value``, appending to ``output``.

    Raises:
        TemplateRuntimeError: Located at the failing instruction.
    """
    instructions = template.instructions
    end = len(instructions)
    stack = ContextStack(value)
    _append = output.append
    pc = 0
    instr = None

    try:
        while pc < end:
            instr = instructions[pc]
            kind = type(instr)
            ctx.line = instr.lineno

            if kind is Literal:
                _append(instr.text)
                pc += 1
            elif kind is Value:
                _append(apply_formatter(default_formatter, "default", stack.lookup(instr.path)))
                pc += 1
            elif kind is Iterate:
                if stack.innermost_iteration().advance():
                    pc += 1
                else:
                    pc = instr.target
            elif kind is Goto:
                pc = instr.target
            elif kind is Branch:
                if is_truthy(stack.lookup(instr.path), format_path(instr.path)):
                    pc += 1
                else:
                    pc = instr.target
            elif kind is FormattedValue:
                target = stack.lookup(instr.path)
                formatter = formatters.get(instr.formatter)
                if formatter is None:
                    raise UnknownFormatterError(
                        instr.formatter, available_names=frozenset(formatters)
                    )
                _append(apply_formatter(formatter, instr.formatter, target))
                pc += 1
            elif kind is PushIterationContext:
                items = stack.lookup(instr.path)
                if not isinstance(items, list):
                    raise NotIterableError(format_path(instr.path), type_name(items))
                stack.push(IterationScope(instr.name, items))
                pc += 1
            elif kind is PopContext:
                stack.pop()
                pc += 1
            elif kind is PushContext:
                stack.push(ObjectScope(stack.lookup(instr.path)))
                pc += 1
            elif kind is PushNamedContext:
                stack.push(NamedScope(instr.name, stack.lookup(instr.path)))
                pc += 1
            elif kind is Call:
                _call(instr, stack, templates, formatters, output, ctx, default_formatter)
                pc += 1
            else:
                raise RuntimeError(f"Unknown instruction {instr!r}")
    except TemplateRuntimeError as e:
        if not e.located and instr is not None:
            path = getattr(instr, "path", None)
            if path is not None and e.expression is None:
                e.expression = format_path(path)
            e.locate(
                template.name,
                instr.lineno,
                source=template.source,
                column=instr.col_offset,
                template_stack=ctx.template_stack,
            )
        raise


def _call(
    instr: Call,
    stack: ContextStack,
    templates: Mapping[str, Template],
    formatters: Mapping[str, Formatter],
    output: list[str],
    ctx: RenderContext,
    default_formatter: Formatter,
) -> None:
    sub_context = stack.lookup(instr.path)
    try:
        callee = templates.get(instr.template)
    except TemplateSyntaxError as e:
        # Loader source that fails to compile surfaces as a render error at the call site.
        raise TemplateRuntimeError(
            f"Template '{instr.template}' failed to compile: {e.message}",
            suggestion=f"Fix the syntax error in '{instr.template}' at line {e.lineno}",
            code=ErrorCode.CALLEE_SYNTAX,
        ) from e
    if callee is None:
        raise UnknownTemplateError(instr.template)

    child = ctx.child_context(callee.name or instr.template, callee.source)
    logger.debug(
        "Calling template %s from %s:%d (depth %d)",
        instr.template,
        ctx.template_name or "<template>",
        ctx.line,
        child.call_depth,
    )
    token = set_render_context(child)
    try:
        render_into(
            callee,
            sub_context,
            templates,
            formatters,
            output,
            ctx=child,
            default_formatter=default_formatter,
        )
    finally:
        reset_render_context(token)
