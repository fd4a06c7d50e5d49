"""Environment, loaders, formatters and exceptions."""

from tinytemplate.environment.core import Environment
from tinytemplate.environment.exceptions import (
    CallDepthError,
    ErrorCode,
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
from tinytemplate.environment.formatters import DEFAULT_FORMATTERS
from tinytemplate.environment.loaders import DictLoader, FileSystemLoader, Loader

__all__ = [
    "DEFAULT_FORMATTERS",
    "CallDepthError",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "FileSystemLoader",
    "Loader",
    "NotIterableError",
    "SourceSnippet",
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
    "build_source_snippet",
]
