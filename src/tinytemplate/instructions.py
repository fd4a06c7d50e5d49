"""Instruction set for compiled tinytemplate programs.

A compiled template is a flat tuple of instructions executed by the VM in
``tinytemplate.template.vm``. Control flow is expressed with absolute jump
targets (instruction indexes) that the compiler backpatches once the closing
tag of a block is seen.

Example:
    ``{% if ready %}Go{% else %}Wait{% endif %}`` compiles to::

        0  Branch(path=('ready',), target=3)
        1  Literal(text='Go')
        2  Goto(target=4)
        3  Literal(text='Wait')

Instructions are immutable. Source positions are carried for error reporting
but excluded from equality, so two compilations of the same source compare
equal regardless of where an instruction came from.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from tinytemplate.paths import Path

# Placeholder for a forward jump target not yet resolved by the compiler.
UNKNOWN = -1


@dataclass(frozen=True, slots=True)
class Instruction:
    """Base class for all instructions."""

    lineno: int = field(default=0, compare=False, repr=False, kw_only=True)
    col_offset: int = field(default=0, compare=False, repr=False, kw_only=True)


@dataclass(frozen=True, slots=True)
class Literal(Instruction):
    """Emit fixed text verbatim."""

    text: str


@dataclass(frozen=True, slots=True)
class Value(Instruction):
    """Look up a path and emit its printable form."""

    path: Path


@dataclass(frozen=True, slots=True)
class FormattedValue(Instruction):
    """Look up a path and emit the output of a named formatter."""

    path: Path
    formatter: str


@dataclass(frozen=True, slots=True)
class Branch(Instruction):
    """Fall through when the value at path is truthy, jump to target otherwise."""

    path: Path
    target: int = UNKNOWN


@dataclass(frozen=True, slots=True)
class Goto(Instruction):
    """Unconditional jump."""

    target: int = UNKNOWN


@dataclass(frozen=True, slots=True)
class PushContext(Instruction):
    """Push the value at path as an anonymous lookup scope."""

    path: Path


@dataclass(frozen=True, slots=True)
class PushNamedContext(Instruction):
    """Push the value at path as a scope addressable only through ``name``."""

    path: Path
    name: str


@dataclass(frozen=True, slots=True)
class PushIterationContext(Instruction):
    """Begin iterating the list at path, binding each element to ``name``."""

    path: Path
    name: str


@dataclass(frozen=True, slots=True)
class Iterate(Instruction):
    """Advance the innermost iteration, jumping to target when exhausted."""

    target: int = UNKNOWN


@dataclass(frozen=True, slots=True)
class PopContext(Instruction):
    """Discard the innermost scope."""


@dataclass(frozen=True, slots=True)
class Call(Instruction):
    """Render another template with the value at path as its root context."""

    template: str
    path: Path


def dump(instructions: tuple[Instruction, ...] | list[Instruction]) -> str:
    """Format a program as a numbered listing, one instruction per line."""
    width = len(str(max(len(instructions) - 1, 0)))
    return "\n".join(f"{i:>{width}}  {instr!r}" for i, instr in enumerate(instructions))
