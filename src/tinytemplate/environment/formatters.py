"""Built-in formatters.

A formatter turns a template value into text: ``{{ path | name }}``. Unlike
plain ``{{ path }}``, formatters may accept lists and dicts.

Built-ins:
    - `json`: Compact JSON of any value
    - `html`: HTML-escape the printable form (``&``, ``<``, ``>``, quotes)
    - `upper` / `lower` / `trim`: String transforms of the printable form
    - `length`: Number of items in a string, list or dict

None of these are applied implicitly; output is never escaped unless a
template asks for it.
"""

from __future__ import annotations

import html
import json
from collections.abc import Callable
from typing import Any

from tinytemplate.environment.exceptions import TemplateRuntimeError
from tinytemplate.values import format_value, type_name


def format_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def format_html(value: Any) -> str:
    return html.escape(format_value(value), quote=True)


def format_upper(value: Any) -> str:
    return format_value(value).upper()


def format_lower(value: Any) -> str:
    return format_value(value).lower()


def format_trim(value: Any) -> str:
    return format_value(value).strip()


def format_length(value: Any) -> str:
    if isinstance(value, (str, list, dict)):
        return str(len(value))
    raise TemplateRuntimeError(f"Cannot take the length of a {type_name(value)}")


DEFAULT_FORMATTERS: dict[str, Callable[[Any], str]] = {
    "json": format_json,
    "html": format_html,
    "upper": format_upper,
    "lower": format_lower,
    "trim": format_trim,
    "length": format_length,
}
