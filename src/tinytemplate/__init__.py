"""tinytemplate: a minimal template engine with a bytecode compiler.

Templates are compiled into a flat instruction program and executed by a
small stack-based VM against plain data (None, bool, numbers, str, lists,
dicts). The language is deliberately small: values, formatters, if/else,
with, for, call, comments and whitespace trimming. There are no
expressions and no implicit escaping.

Quickstart:
    >>> import tinytemplate
    >>> t = tinytemplate.compile("Hello {{ name }}!")
    >>> t.render({"name": "World"})
    'Hello World!'

Named templates and formatters:
    >>> from tinytemplate import Environment
    >>> env = Environment()
    >>> env.add_template("row", "{{ @index }}: {{ item.name | upper }}\\n")
    >>> env.add_template("table", "{% for item in items %}{% call row with item %}{% endfor %}")

Architecture:
Template Source → TemplateCompiler → tuple[Instruction] → VM (render_into) → str

Syntax:
    {{ path }}                          emit a value
    {{ path | name }}                   emit through a formatter
    {{- path -}}                        trim whitespace around the tag
    {% if path %}…{% else %}…{% endif %}
    {% with path %}…{% endwith %}       anonymous scope
    {% with path as name %}…{% endwith %}
    {% for name in path %}…{% endfor %} binds name and @index
    {% call template with path %}
    {# comment #}

Thread-Safety:
Compilation uses only per-call state and Templates are immutable; every render
owns its context stack and output buffer, so renders may run concurrently.

"""

from tinytemplate.environment import (
    DEFAULT_FORMATTERS,
    CallDepthError,
    DictLoader,
    Environment,
    ErrorCode,
    FileSystemLoader,
    NotIterableError,
    SourceSnippet,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    TruthinessError,
    UndefinedError,
    UnknownFormatterError,
    UnknownTemplateError,
    UnprintableError,
    UnsupportedValueError,
    build_source_snippet,
)
from tinytemplate.render_context import RenderContext, get_render_context
from tinytemplate.template import Template, compile, render
from tinytemplate.values import format_value, to_value

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_FORMATTERS",
    "CallDepthError",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "FileSystemLoader",
    "NotIterableError",
    "RenderContext",
    "SourceSnippet",
    "Template",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "TruthinessError",
    "UndefinedError",
    "UnknownFormatterError",
    "UnknownTemplateError",
    "UnprintableError",
    "UnsupportedValueError",
    "__version__",
    "build_source_snippet",
    "compile",
    "format_value",
    "get_render_context",
    "render",
    "to_value",
]
