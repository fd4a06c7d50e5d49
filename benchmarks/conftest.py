from __future__ import annotations

import pytest
from jinja2 import DictLoader as Jinja2DictLoader
from jinja2 import Environment as Jinja2Environment

from tinytemplate import DictLoader, Environment

# Sources valid in both engines: plain values, if/else and for loops.
TEMPLATES = {
    "minimal.txt": "Hello, {{ name }}!",
    "small.txt": (
        "{{ title }}\n"
        "{% for item in items %}- {{ item }}\n{% endfor %}"
        "{% if footer %}{{ footer }}{% else %}(no footer){% endif %}\n"
    ),
    "large.txt": (
        "{% for row in rows %}"
        "{{ row.id }}: {{ row.name }}{% if row.active %} *{% endif %}\n"
        "{% endfor %}"
    ),
}


@pytest.fixture(scope="session")
def tiny_env() -> Environment:
    return Environment(loader=DictLoader(TEMPLATES))


@pytest.fixture(scope="session")
def jinja2_env() -> Jinja2Environment:
    return Jinja2Environment(loader=Jinja2DictLoader(TEMPLATES), autoescape=False)


@pytest.fixture(scope="session")
def small_context() -> dict[str, object]:
    return {
        "title": "Groceries",
        "items": ["apples", "bread", "cheese", "dates", "eggs"],
        "footer": "",
    }


@pytest.fixture(scope="session")
def large_context() -> dict[str, object]:
    return {
        "rows": [{"id": i, "name": f"row {i}", "active": i % 3 == 0} for i in range(1000)],
    }
