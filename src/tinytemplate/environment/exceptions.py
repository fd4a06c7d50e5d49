"""Exceptions for the tinytemplate engine.

Exception Hierarchy:
TemplateError (base)
├── TemplateNotFoundError     # Name not registered and not found by the loader
├── TemplateSyntaxError       # Compile-time error
└── TemplateRuntimeError      # Render-time error with location context
    ├── UndefinedError        # Path segment does not exist
    ├── TruthinessError       # Condition value has no truthiness (a dict)
    ├── UnprintableError      # List or dict emitted without a formatter
    ├── NotIterableError      # {% for %} over something that is not a list
    ├── UnknownFormatterError # {{ x | name }} with an unregistered name
    ├── UnknownTemplateError  # {% call name with x %} with an unregistered name
    ├── CallDepthError        # Nested {% call %} depth exceeded
    └── UnsupportedValueError # Host data with no Value representation

Compile-time and render-time errors never overlap: a template that compiled
successfully can only fail with a TemplateRuntimeError.

Example:
    ```
    Runtime Error: Undefined variable 'titl' in path 'post.titl'
      Location: article.txt:5
       |
    > 5 | Title: {{ post.titl }}
       |
      Hint: Did you mean 'title'? Available keys: body, title
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from tinytemplate.environment import terminal

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------


class ErrorCode(Enum):
    """Searchable error codes for tinytemplate errors.

    Format: T-{CATEGORY}-{NUMBER}
    Categories: PAR (compiler), RUN (renderer), TPL (template registry)
    """

    # Compiler errors (T-PAR-xxx)
    UNEXPECTED_CHARACTER = "T-PAR-001"
    UNCLOSED_TAG = "T-PAR-002"
    UNKNOWN_BLOCK = "T-PAR-003"
    MISMATCHED_BLOCK = "T-PAR-004"
    UNCLOSED_BLOCK = "T-PAR-005"
    INVALID_PATH = "T-PAR-006"
    INVALID_PAYLOAD = "T-PAR-007"

    # Runtime errors (T-RUN-xxx)
    UNDEFINED_VARIABLE = "T-RUN-001"
    FORMATTER_ERROR = "T-RUN-002"
    TRUTHINESS = "T-RUN-003"
    UNPRINTABLE = "T-RUN-004"
    NOT_ITERABLE = "T-RUN-005"
    UNKNOWN_FORMATTER = "T-RUN-006"
    UNKNOWN_TEMPLATE = "T-RUN-007"
    CALL_DEPTH = "T-RUN-008"
    UNSUPPORTED_VALUE = "T-RUN-009"
    RUNTIME_ERROR = "T-RUN-010"
    CALLEE_SYNTAX = "T-RUN-011"

    # Template registry errors (T-TPL-xxx)
    TEMPLATE_NOT_FOUND = "T-TPL-001"

    @property
    def category(self) -> str:
        """Error category (e.g., 'compiler', 'runtime', 'template')."""
        prefix = self.value.split("-")[1]
        return {
            "PAR": "compiler",
            "RUN": "runtime",
            "TPL": "template",
        }.get(prefix, "unknown")


# ---------------------------------------------------------------------------
# Source snippets
# ---------------------------------------------------------------------------


def format_template_stack(stack: list[tuple[str, int]] | None) -> str:
    """Format the chain of ``{% call %}`` sites leading to an error.

    Example:
        >>> print(format_template_stack([("page", 3), ("card", 1)]))
        Template stack:
          • page:3
          • card:1
    """
    if not stack:
        return ""

    lines = [terminal.dim_text("Template stack:")]
    for template_name, line_num in stack:
        lines.append(f"  • {terminal.location(f'{template_name}:{line_num}')}")
    return "\n".join(lines)


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Template source lines around an error.

    Attributes:
        lines: Tuple of (line_number, line_content) pairs around the error.
        error_line: The 1-based line number where the error occurred.
        column: Optional column offset for caret pointer.
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int
    column: int | None = None

    def format(self) -> str:
        parts: list[str] = [terminal.dim_text("   |")]
        for lineno, content in self.lines:
            is_error = lineno == self.error_line
            parts.append(terminal.format_source_line(lineno, content, is_error=is_error))
            if is_error and self.column is not None:
                caret = " " * self.column + "^"
                parts.append(f"{terminal.dim_text('   |')} {terminal.error_line(caret)}")
        parts.append(terminal.dim_text("   |"))
        return "\n".join(parts)


def build_source_snippet(
    source: str,
    error_line: int,
    *,
    context_lines: int = 2,
    column: int | None = None,
) -> SourceSnippet:
    """Build a SourceSnippet from template source.

    Args:
        source: Full template source text.
        error_line: 1-based line number of the error.
        context_lines: Number of lines to show before/after the error line.
        column: Optional column offset for caret pointer.
    """
    all_lines = source.splitlines()
    start = max(0, error_line - 1 - context_lines)
    end = min(len(all_lines), error_line + context_lines)
    lines = tuple((i + 1, all_lines[i]) for i in range(start, end))
    return SourceSnippet(lines=lines, error_line=error_line, column=column)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class TemplateError(Exception):
    """Base exception for all tinytemplate errors.

    Attributes:
        code: ErrorCode identifying the kind of failure.
    """

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """Format the error as a short diagnostic prefixed with its code."""
        header = str(self)
        if self.code and self.code.value not in header:
            header = f"{self.code.value}: {header}"
        return header


class TemplateNotFoundError(TemplateError):
    """Template name is neither registered nor provided by the loader."""

    code: ErrorCode | None = ErrorCode.TEMPLATE_NOT_FOUND


class TemplateSyntaxError(TemplateError):
    """Compile-time error in template source.

    When ``source`` and ``lineno`` are provided the message includes the
    offending line, and a caret when ``col_offset`` is known.
    """

    code: ErrorCode | None = ErrorCode.UNEXPECTED_CHARACTER

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        name: str | None = None,
        source: str | None = None,
        col_offset: int | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.lineno = lineno
        self.name = name
        self.source = source
        self.col_offset = col_offset
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    def _location(self) -> str:
        location = self.name or "<template>"
        if self.lineno:
            location += f":{self.lineno}"
            if self.col_offset is not None:
                location += f":{self.col_offset}"
        return location

    def _format_message(self) -> str:
        header = f"Syntax Error: {self.message}\n  --> {self._location()}"

        if self.source and self.lineno:
            lines = self.source.splitlines()
            if 0 < self.lineno <= len(lines):
                snippet = f"\n   |\n{self.lineno:>3} | {lines[self.lineno - 1]}"
                if self.col_offset is not None:
                    snippet += f"\n   | {' ' * self.col_offset}^"
                return header + snippet

        return header

    def format_compact(self) -> str:
        code_prefix = f"{self.code.value}: " if self.code else ""
        return f"{code_prefix}{self.message}\n  --> {self._location()}"


class TemplateRuntimeError(TemplateError):
    """Render-time error.

    The renderer attaches the template name, line and source snippet of the
    failing instruction with ``locate()`` before the error leaves the
    template, so errors raised deep inside lookup code still point at the
    tag that caused them.

    Attributes:
        message: Error description
        expression: Path or tag text that failed
        template_name: Name of the template
        lineno: Line number in template source
        suggestion: Actionable fix suggestion
        template_stack: (template_name, line) pairs of enclosing ``call`` sites
    """

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        template_name: str | None = None,
        lineno: int | None = None,
        suggestion: str | None = None,
        source_snippet: SourceSnippet | None = None,
        template_stack: list[tuple[str, int]] | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.expression = expression
        self.template_name = template_name
        self.lineno = lineno
        self.suggestion = suggestion
        self.source_snippet = source_snippet
        self.template_stack = template_stack or []
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    @property
    def located(self) -> bool:
        return self.lineno is not None

    def locate(
        self,
        template_name: str | None,
        lineno: int,
        *,
        source: str | None = None,
        column: int | None = None,
        template_stack: list[tuple[str, int]] | None = None,
    ) -> None:
        """Attach the position of the failing instruction."""
        self.template_name = template_name
        self.lineno = lineno
        if source:
            self.source_snippet = build_source_snippet(source, lineno, column=column)
        if template_stack:
            self.template_stack = list(template_stack)
        self.args = (self._format_message(),)

    def _format_message(self) -> str:
        parts = [f"Runtime Error: {self.message}"]

        if self.template_name or self.lineno:
            loc = self.template_name or "<template>"
            if self.lineno:
                loc += f":{self.lineno}"
            parts.append(f"  Location: {terminal.location(loc)}")

        if self.source_snippet:
            parts.append(self.source_snippet.format())

        if self.template_stack:
            parts.append("")
            parts.append(format_template_stack(self.template_stack))

        if self.expression:
            parts.append(f"  Expression: {self.expression}")

        if self.suggestion:
            parts.append(f"  {terminal.hint('Hint:')} {self.suggestion}")

        return "\n".join(parts)

    def format_compact(self) -> str:
        loc = self.template_name or "<template>"
        if self.lineno:
            loc += f":{self.lineno}"
        parts = [
            terminal.format_error_header(self.code.value if self.code else None, self.message),
            f"  Location: {terminal.location(loc)}",
        ]
        if self.expression:
            parts.append(f"  Expression: {self.expression}")
        if self.suggestion:
            parts.append(f"  {terminal.hint('Hint:')} {self.suggestion}")
        return "\n".join(parts)


class UndefinedError(TemplateRuntimeError):
    """A path segment does not exist in the value it is looked up in.

    If ``available_names`` is provided, the hint lists the keys that do exist
    at the failing level, with a "Did you mean?" suggestion when one is close.

    Example:
        >>> compile("{{ user.nmae }}").render({"user": {"name": "Ada"}})
        UndefinedError: Undefined variable 'nmae' in path 'user.nmae'
    """

    code: ErrorCode | None = ErrorCode.UNDEFINED_VARIABLE

    def __init__(
        self,
        name: str,
        path: str | None = None,
        available_names: frozenset[str] | None = None,
        **kwargs,
    ):
        self.name = name
        self.path = path or name
        self.available_names = available_names
        super().__init__(
            f"Undefined variable '{name}' in path '{self.path}'",
            expression=self.path,
            suggestion=self._suggest(),
            **kwargs,
        )

    def _suggest(self) -> str | None:
        if not self.available_names:
            return None
        from difflib import get_close_matches

        available = sorted(self.available_names)
        hint = ""
        matches = get_close_matches(self.name, available, n=1, cutoff=0.6)
        if matches:
            hint = f"Did you mean '{terminal.suggestion(matches[0])}'? "
        shown = ", ".join(available[:10])
        if len(available) > 10:
            shown += f" ... ({len(available)} total)"
        return f"{hint}Available keys: {shown}"


class TruthinessError(TemplateRuntimeError):
    """A dict was used where a true/false value is required."""

    code: ErrorCode | None = ErrorCode.TRUTHINESS

    def __init__(self, path: str, **kwargs):
        super().__init__(
            f"Path '{path}' produced a value which could not be checked for truthiness",
            expression=path,
            suggestion="Objects have no truthiness; test one of their fields instead",
            **kwargs,
        )


class UnprintableError(TemplateRuntimeError):
    """A list or dict was emitted without a formatter."""

    code: ErrorCode | None = ErrorCode.UNPRINTABLE

    def __init__(self, type_name: str, path: str | None = None, **kwargs):
        super().__init__(
            f"Expected a printable value but found {type_name}",
            expression=path,
            suggestion="Route the value through a formatter, e.g. {{ value | json }}",
            **kwargs,
        )


class NotIterableError(TemplateRuntimeError):
    """``{% for %}`` target is not a list."""

    code: ErrorCode | None = ErrorCode.NOT_ITERABLE

    def __init__(self, path: str, type_name: str, **kwargs):
        super().__init__(
            f"Expected a list for path '{path}' but found {type_name}",
            expression=path,
            **kwargs,
        )


class UnknownFormatterError(TemplateRuntimeError):
    """Formatter name is not registered."""

    code: ErrorCode | None = ErrorCode.UNKNOWN_FORMATTER

    def __init__(self, name: str, available_names: frozenset[str] | None = None, **kwargs):
        self.name = name
        suggestion = None
        if available_names:
            suggestion = f"Registered formatters: {', '.join(sorted(available_names))}"
        super().__init__(f"No formatter with name '{name}' found", suggestion=suggestion, **kwargs)


class UnknownTemplateError(TemplateRuntimeError):
    """``{% call %}`` target is not a registered template."""

    code: ErrorCode | None = ErrorCode.UNKNOWN_TEMPLATE

    def __init__(self, name: str, **kwargs):
        self.name = name
        super().__init__(f"No template with name '{name}' found", **kwargs)


class CallDepthError(TemplateRuntimeError):
    """Nested ``{% call %}`` depth limit exceeded."""

    code: ErrorCode | None = ErrorCode.CALL_DEPTH

    def __init__(self, name: str, max_depth: int, **kwargs):
        super().__init__(
            f"Maximum call depth exceeded ({max_depth}) when calling '{name}'",
            suggestion="Check for templates that call themselves: A → B → A",
            **kwargs,
        )


class UnsupportedValueError(TemplateRuntimeError):
    """Host data that cannot be represented as a template value."""

    code: ErrorCode | None = ErrorCode.UNSUPPORTED_VALUE

    def __init__(self, value: object, **kwargs):
        type_name = type(value).__name__
        super().__init__(
            f"Cannot use a value of type '{type_name}' in a template context",
            suggestion="Convert it to None, bool, int, float, str, list or dict first",
            **kwargs,
        )
