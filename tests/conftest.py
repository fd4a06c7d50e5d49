"""Pytest configuration and fixtures for tinytemplate tests."""

import pytest

from tinytemplate import DictLoader, Environment, Template, format_value
from tinytemplate.environment import terminal


@pytest.fixture(autouse=True)
def plain_terminal(monkeypatch):
    """Keep error messages free of ANSI codes regardless of FORCE_COLOR."""
    monkeypatch.setattr(terminal, "_USE_COLORS", False)


@pytest.fixture
def context():
    """Data shared by most render tests."""
    return {
        "number": 5,
        "string": "test",
        "boolean": True,
        "null": None,
        "array": [1, 2, 3],
        "nested": {"value": 10},
        "escapes": "1:< 2:> 3:& 4:' 5:\"",
    }


def _braced(value):
    return "{" + format_value(value) + "}"


@pytest.fixture
def formatters():
    """Formatter registry with a single formatter wrapping values in braces."""
    return {"my_formatter": _braced}


@pytest.fixture
def templates():
    """Template registry used by {% call %} tests."""
    return {"my_macro": Template.compile("{{value}}", "my_macro")}


@pytest.fixture
def render(context, templates, formatters):
    """Compile and render a one-shot template against the shared context."""

    def _render(source: str, value=None) -> str:
        return Template.compile(source).render(
            context if value is None else value,
            templates,
            formatters,
        )

    return _render


@pytest.fixture
def env():
    """Create a basic Environment."""
    return Environment()


@pytest.fixture
def env_with_loader():
    """Environment backed by a DictLoader with a few composable templates."""
    loader = DictLoader(
        {
            "page.txt": "# {{ title }}\n{% for s in sections %}{% call section.txt with s %}{% endfor %}",
            "section.txt": "## {{ heading }}\n{{ body }}\n",
            "broken.txt": "{% if x %}",
        }
    )
    return Environment(loader=loader)
