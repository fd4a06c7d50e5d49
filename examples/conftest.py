"""Fixtures for the runnable tinytemplate examples.

Every example directory holds an ``app.py`` that builds its templates and
renders ``output`` at import time, plus a test module that checks it. The
``example_app`` fixture executes that ``app.py`` afresh for each test under
the module name ``tinytemplate_examples.<directory>.app``, registered in
``sys.modules`` only while the test runs.
"""

import importlib.util
import sys
from pathlib import Path
from types import ModuleType

import pytest

EXAMPLES_ROOT = Path(__file__).parent


def load_example(directory: Path) -> ModuleType:
    """Execute ``directory/app.py`` and return it as an unregistered module."""
    app_path = directory / "app.py"
    if not app_path.is_file():
        raise FileNotFoundError(f"Example {directory.name!r} has no app.py")
    name = f"tinytemplate_examples.{directory.name}.app"
    spec = importlib.util.spec_from_file_location(name, app_path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load {app_path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def example_app(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch) -> ModuleType:
    directory = Path(request.path).parent
    assert directory.parent == EXAMPLES_ROOT, f"{directory} is not an example directory"
    module = load_example(directory)
    monkeypatch.setitem(sys.modules, module.__name__, module)
    return module
