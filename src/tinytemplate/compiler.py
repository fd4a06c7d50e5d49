"""Template compiler: source text → flat instruction tuple.

The compiler is a single forward scan over the source. Literal text runs up
to the next ``{``; at a ``{`` it expects one of three tag openers:

    {{ path }}   {{ path | formatter }}     value tags
    {% keyword payload %}                   block tags
    {# comment #}                           comments

Tags must close on the line they open on. A ``-`` at the start of a tag body
right-trims the preceding literal; a ``-`` at the end left-trims the next one.

Control Flow:
Forward jumps are emitted with an ``UNKNOWN`` target and backpatched when
the closing tag is reached. Open blocks are tracked on a typed stack so a
closer that does not match the innermost opener (``{% endwith %}`` closing
an ``{% if %}``) is reported instead of silently miscompiled:

    if       Branch(path, ?)            push IF
    else     patch IF → len + 1         push ELSE, Goto(?)
    endif    patch IF/ELSE → len
    for      PushIterationContext       push FOR, Iterate(?)
    endfor   Goto(iterate), patch FOR → len, PopContext
    with     PushContext / PushNamedContext, push WITH
    endwith  PopContext

Thread-Safety:
A TemplateCompiler holds per-compilation state only; create one per call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum

from tinytemplate.environment.exceptions import ErrorCode, TemplateSyntaxError
from tinytemplate.instructions import (
    UNKNOWN,
    Branch,
    Call,
    FormattedValue,
    Goto,
    Instruction,
    Iterate,
    Literal,
    PopContext,
    PushContext,
    PushIterationContext,
    PushNamedContext,
    Value,
)
from tinytemplate.paths import InvalidPathError, Path, parse_path

logger = logging.getLogger(__name__)


class BlockKind(Enum):
    IF = "if"
    ELSE = "else"
    FOR = "for"
    WITH = "with"


@dataclass(slots=True)
class _Block:
    """An open block awaiting its closing tag."""

    kind: BlockKind
    index: int  # instruction to backpatch (IF/ELSE/FOR) or the push (WITH)
    lineno: int
    col_offset: int


# Block keyword → parser method
_BLOCK_PARSERS: dict[str, str] = {
    "if": "_parse_if",
    "else": "_parse_else",
    "endif": "_parse_endif",
    "with": "_parse_with",
    "endwith": "_parse_endwith",
    "for": "_parse_for",
    "endfor": "_parse_endfor",
    "call": "_parse_call",
}

_CLOSERS = {"{{": "}}", "{%": "%}", "{#": "#}"}


class TemplateCompiler:
    """Compile one template source into instructions.

    Example:
        >>> TemplateCompiler("Hello {{ name }}").compile()
        (Literal(text='Hello '), Value(path=('name',)))
    """

    __slots__ = (
        "_blocks",
        "_instructions",
        "_line_start",
        "_lineno",
        "_name",
        "_pos",
        "_source",
        "_tag_col",
        "_tag_lineno",
        "_trim_next",
    )

    def __init__(self, source: str, name: str | None = None):
        self._source = source
        self._name = name
        self._pos = 0
        self._lineno = 1
        self._line_start = 0
        self._tag_lineno = 1
        self._tag_col = 0
        self._instructions: list[Instruction] = []
        self._blocks: list[_Block] = []
        self._trim_next = False

    def compile(self) -> tuple[Instruction, ...]:
        """Compile the whole source.

        Raises:
            TemplateSyntaxError: On any malformed input.
        """
        source = self._source
        while self._pos < len(source):
            self._tag_lineno = self._lineno
            self._tag_col = self._pos - self._line_start
            opener = source[self._pos : self._pos + 2]
            if opener == "{{":
                self._value_tag(self._consume_tag(opener))
            elif opener == "{%":
                self._block_tag(self._consume_tag(opener))
            elif opener == "{#":
                self._tag_body(self._consume_tag(opener))
            elif opener.startswith("{"):
                raise self._error("Unexpected '{'", ErrorCode.UNEXPECTED_CHARACTER)
            else:
                self._literal(self._consume_text())

        if self._blocks:
            block = self._blocks[-1]
            raise self._error(
                f"Unclosed '{{% {block.kind.value} %}}' block",
                ErrorCode.UNCLOSED_BLOCK,
                lineno=block.lineno,
                col_offset=block.col_offset,
            )

        logger.debug(
            "Compiled template %s: %d instructions",
            self._name or "<template>",
            len(self._instructions),
        )
        return tuple(self._instructions)

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def _advance(self, end: int) -> None:
        """Move the scan position to ``end``, keeping line tracking current."""
        source = self._source
        newlines = source.count("\n", self._pos, end)
        if newlines:
            self._lineno += newlines
            self._line_start = source.rfind("\n", self._pos, end) + 1
        self._pos = end

    def _consume_text(self) -> str:
        """Consume literal text up to the next unescaped ``{``."""
        source = self._source
        chunks: list[str] = []
        start = self._pos
        while True:
            brace = source.find("{", start)
            if brace == -1:
                chunks.append(source[start:])
                end = len(source)
                break
            if brace > start and source[brace - 1] == "\\":
                chunks.append(source[start : brace - 1])
                chunks.append("{")
                start = brace + 1
                continue
            chunks.append(source[start:brace])
            end = brace
            break
        self._advance(end)
        return "".join(chunks)

    def _consume_tag(self, opener: str) -> str:
        """Consume a tag on the current line and return the text between its delimiters."""
        closer = _CLOSERS[opener]
        source = self._source
        body_start = self._pos + len(opener)
        line_end = source.find("\n", self._pos)
        limit = len(source) if line_end == -1 else line_end
        close = source.find(closer, body_start, limit)
        if close == -1:
            found = "end-of-text" if line_end == -1 else "end-of-line"
            raise self._error(
                f"Expected a closing '{closer}' but found {found} instead",
                ErrorCode.UNCLOSED_TAG,
            )
        self._advance(close + len(closer))
        return source[body_start:close]

    def _tag_body(self, text: str) -> str:
        """Strip a tag body and apply its ``-`` trim markers."""
        body = text.strip()
        if body.startswith("-"):
            body = body[1:].strip()
            self._trim_previous()
        if body.endswith("-"):
            body = body[:-1].strip()
            self._trim_next = True
        return body

    def _trim_previous(self) -> None:
        if self._instructions and isinstance(self._instructions[-1], Literal):
            last = self._instructions[-1]
            self._instructions[-1] = replace(last, text=last.text.rstrip())

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------

    def _emit(self, cls: type[Instruction], *args: object) -> int:
        index = len(self._instructions)
        self._instructions.append(cls(*args, lineno=self._tag_lineno, col_offset=self._tag_col))
        return index

    def _patch(self, index: int, target: int) -> None:
        self._instructions[index] = replace(self._instructions[index], target=target)

    def _literal(self, text: str) -> None:
        if self._trim_next:
            text = text.lstrip()
            self._trim_next = False
        self._emit(Literal, text)

    def _value_tag(self, text: str) -> None:
        body = self._tag_body(text)
        if "|" in body:
            path_text, formatter = body.split("|", 1)
            formatter = formatter.strip()
            if not formatter or "|" in formatter or any(c.isspace() for c in formatter):
                raise self._error(
                    f"Invalid formatter name '{formatter}'",
                    ErrorCode.INVALID_PAYLOAD,
                )
            self._emit(FormattedValue, self._path(path_text.strip()), formatter)
        else:
            self._emit(Value, self._path(body))

    def _block_tag(self, text: str) -> None:
        body = self._tag_body(text)
        keyword = body.split(maxsplit=1)[0] if body else ""
        method = _BLOCK_PARSERS.get(keyword)
        if method is None:
            raise self._error(f"Unknown block type '{keyword}'", ErrorCode.UNKNOWN_BLOCK)
        getattr(self, method)(body[len(keyword) :].strip())

    # ------------------------------------------------------------------
    # Block parsers
    # ------------------------------------------------------------------

    def _parse_if(self, rest: str) -> None:
        path = self._path(rest)
        self._open(BlockKind.IF, self._emit(Branch, path, UNKNOWN))

    def _parse_else(self, rest: str) -> None:
        self._expect_empty(rest)
        block = self._close("else", BlockKind.IF)
        # Branch skips the Goto emitted below and lands on the else body.
        self._patch(block.index, len(self._instructions) + 1)
        self._open(BlockKind.ELSE, self._emit(Goto, UNKNOWN))

    def _parse_endif(self, rest: str) -> None:
        self._expect_empty(rest)
        block = self._close("endif", BlockKind.IF, BlockKind.ELSE)
        self._patch(block.index, len(self._instructions))

    def _parse_with(self, rest: str) -> None:
        if " as " in rest:
            path_text, name = rest.split(" as ", 1)
            index = self._emit(PushNamedContext, self._path(path_text.strip()), self._name_of(name))
        else:
            index = self._emit(PushContext, self._path(rest))
        self._open(BlockKind.WITH, index)

    def _parse_endwith(self, rest: str) -> None:
        self._expect_empty(rest)
        self._close("endwith", BlockKind.WITH)
        self._emit(PopContext)

    def _parse_for(self, rest: str) -> None:
        if " in " not in rest:
            raise self._error(
                f"Expected '{{% for name in path %}}' but found '{rest}'",
                ErrorCode.INVALID_PAYLOAD,
            )
        name, path_text = rest.split(" in ", 1)
        self._emit(PushIterationContext, self._path(path_text.strip()), self._name_of(name))
        self._open(BlockKind.FOR, self._emit(Iterate, UNKNOWN))

    def _parse_endfor(self, rest: str) -> None:
        self._expect_empty(rest)
        block = self._close("endfor", BlockKind.FOR)
        self._emit(Goto, block.index)
        self._patch(block.index, len(self._instructions))
        self._emit(PopContext)

    def _parse_call(self, rest: str) -> None:
        if " with " not in rest:
            raise self._error(
                f"Expected '{{% call template with path %}}' but found '{rest}'",
                ErrorCode.INVALID_PAYLOAD,
            )
        template, path_text = rest.split(" with ", 1)
        self._emit(Call, self._name_of(template, dotted=True), self._path(path_text.strip()))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _open(self, kind: BlockKind, index: int) -> None:
        self._blocks.append(_Block(kind, index, self._tag_lineno, self._tag_col))

    def _close(self, keyword: str, *kinds: BlockKind) -> _Block:
        """Pop the innermost block, which must be one of ``kinds``."""
        expected = kinds[0].value
        if not self._blocks:
            raise self._error(
                f"Found '{{% {keyword} %}}' without a preceding '{{% {expected} %}}'",
                ErrorCode.MISMATCHED_BLOCK,
            )
        block = self._blocks.pop()
        if block.kind not in kinds:
            raise self._error(
                f"Found '{{% {keyword} %}}' but the innermost open block is "
                f"'{{% {block.kind.value} %}}' from line {block.lineno}",
                ErrorCode.MISMATCHED_BLOCK,
            )
        return block

    def _expect_empty(self, rest: str) -> None:
        if rest:
            raise self._error(f"Unexpected text '{rest}'", ErrorCode.INVALID_PAYLOAD)

    def _path(self, text: str) -> Path:
        try:
            return parse_path(text)
        except InvalidPathError as e:
            raise self._error(str(e), ErrorCode.INVALID_PATH) from None

    def _name_of(self, text: str, *, dotted: bool = False) -> str:
        """Validate a loop variable or scope name, or a template name when ``dotted``."""
        name = text.strip()
        if not name or any(c.isspace() for c in name) or (not dotted and "." in name):
            raise self._error(f"Invalid name '{name}'", ErrorCode.INVALID_PAYLOAD)
        if name.startswith("@"):
            raise self._error(f"Invalid keyword '{name}'", ErrorCode.INVALID_PATH)
        return name

    def _error(
        self,
        message: str,
        code: ErrorCode,
        *,
        lineno: int | None = None,
        col_offset: int | None = None,
    ) -> TemplateSyntaxError:
        return TemplateSyntaxError(
            message,
            lineno=lineno or self._tag_lineno,
            name=self._name,
            source=self._source,
            col_offset=self._tag_col if col_offset is None else col_offset,
            code=code,
        )


def compile_instructions(source: str, name: str | None = None) -> tuple[Instruction, ...]:
    """Compile template source into an instruction tuple."""
    return TemplateCompiler(source, name).compile()
