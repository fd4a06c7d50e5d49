"""Compiled templates and the VM that renders them."""

from tinytemplate.template.core import Template, compile, render
from tinytemplate.template.scopes import ContextStack, IterationScope, NamedScope, ObjectScope
from tinytemplate.template.vm import Formatter, render_into

__all__ = [
    "ContextStack",
    "Formatter",
    "IterationScope",
    "NamedScope",
    "ObjectScope",
    "Template",
    "compile",
    "render",
    "render_into",
]
