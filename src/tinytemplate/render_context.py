"""Per-render state for tinytemplate.

Each ``Template.render()`` call creates a RenderContext holding what error
reporting and the ``{% call %}`` depth guard need: the template being
executed, the line of the current instruction and the chain of call sites.
The context is published through a ContextVar so formatters can find out
where they are being invoked from:

    >>> from tinytemplate import get_render_context
    >>> def where(value):
    ...     ctx = get_render_context()
    ...     return f"{value}@{ctx.template_name}:{ctx.line}"

Thread Safety:
    ContextVars are thread-local, and every render creates its own
    RenderContext, so concurrent renders never share this state.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field

from tinytemplate.environment.exceptions import CallDepthError

# Deep enough for any real template composition while stopping a template
# that calls itself long before the interpreter's recursion limit.
DEFAULT_MAX_CALL_DEPTH = 50


@dataclass
class RenderContext:
    """State for one template execution.

    Attributes:
        template_name: Name of the executing template (for error messages)
        source: Template source (for error snippets)
        line: Source line of the instruction being executed
        call_depth: Number of enclosing ``{% call %}`` invocations
        max_call_depth: Limit for call_depth
        template_stack: (template_name, line) of every enclosing call site
    """

    template_name: str | None = None
    source: str | None = None
    line: int = 0
    call_depth: int = 0
    max_call_depth: int = DEFAULT_MAX_CALL_DEPTH
    template_stack: list[tuple[str, int]] = field(default_factory=list)

    def child_context(self, template_name: str, source: str | None = None) -> RenderContext:
        """Create the context for a nested ``{% call %}``.

        Raises:
            CallDepthError: If the call would exceed max_call_depth.
        """
        if self.call_depth >= self.max_call_depth:
            raise CallDepthError(template_name, self.max_call_depth)

        stack = self.template_stack.copy()
        stack.append((self.template_name or "<template>", self.line))
        return RenderContext(
            template_name=template_name,
            source=source,
            call_depth=self.call_depth + 1,
            max_call_depth=self.max_call_depth,
            template_stack=stack,
        )


_render_context: ContextVar[RenderContext | None] = ContextVar(
    "tinytemplate_render_context",
    default=None,
)


def get_render_context() -> RenderContext | None:
    """Current render context, or None outside a render."""
    return _render_context.get()


@contextmanager
def render_context(
    template_name: str | None = None,
    source: str | None = None,
    max_call_depth: int = DEFAULT_MAX_CALL_DEPTH,
) -> Iterator[RenderContext]:
    """Create a RenderContext and make it current for the duration of the block."""
    ctx = RenderContext(
        template_name=template_name,
        source=source,
        max_call_depth=max_call_depth,
    )
    token = _render_context.set(ctx)
    try:
        yield ctx
    finally:
        _render_context.reset(token)


def set_render_context(ctx: RenderContext) -> Token[RenderContext | None]:
    """Make ``ctx`` current and return the token that restores the previous one."""
    return _render_context.set(ctx)


def reset_render_context(token: Token[RenderContext | None]) -> None:
    _render_context.reset(token)
