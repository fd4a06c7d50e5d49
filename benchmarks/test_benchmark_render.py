"""Compile and render benchmarks: tinytemplate vs Jinja2.

Both engines load the same sources from benchmarks/conftest.py.

Template sizes:
- "minimal": Single variable
- "small": Loop over 5 strings plus an if/else
- "large": 1000 loop items with a nested condition

Run with: pytest benchmarks/ --benchmark-only
"""

from __future__ import annotations

import pytest
from jinja2 import Environment as Jinja2Environment
from pytest_benchmark.fixture import BenchmarkFixture

from benchmarks.conftest import TEMPLATES
from tinytemplate import Environment, Template


@pytest.mark.benchmark(group="render:minimal")
def test_render_minimal_tiny(benchmark: BenchmarkFixture, tiny_env: Environment) -> None:
    result = benchmark(tiny_env.render, "minimal.txt", name="Benchmark")
    assert result == "Hello, Benchmark!"


@pytest.mark.benchmark(group="render:minimal")
def test_render_minimal_jinja2(benchmark: BenchmarkFixture, jinja2_env: Jinja2Environment) -> None:
    template = jinja2_env.get_template("minimal.txt")
    benchmark(template.render, name="Benchmark")


@pytest.mark.benchmark(group="render:small")
def test_render_small_tiny(
    benchmark: BenchmarkFixture,
    tiny_env: Environment,
    small_context: dict[str, object],
) -> None:
    template = tiny_env.get_template("small.txt")
    result = benchmark(template.render, small_context)
    assert result.endswith("(no footer)\n")


@pytest.mark.benchmark(group="render:small")
def test_render_small_jinja2(
    benchmark: BenchmarkFixture,
    jinja2_env: Jinja2Environment,
    small_context: dict[str, object],
) -> None:
    template = jinja2_env.get_template("small.txt")
    benchmark(template.render, **small_context)


@pytest.mark.benchmark(group="render:large")
def test_render_large_tiny(
    benchmark: BenchmarkFixture,
    tiny_env: Environment,
    large_context: dict[str, object],
) -> None:
    template = tiny_env.get_template("large.txt")
    result = benchmark(template.render, large_context)
    assert result.count("\n") == 1000


@pytest.mark.benchmark(group="render:large")
def test_render_large_jinja2(
    benchmark: BenchmarkFixture,
    jinja2_env: Jinja2Environment,
    large_context: dict[str, object],
) -> None:
    template = jinja2_env.get_template("large.txt")
    benchmark(template.render, **large_context)


@pytest.mark.benchmark(group="compile")
@pytest.mark.parametrize("name", sorted(TEMPLATES))
def test_compile_tiny(benchmark: BenchmarkFixture, name: str) -> None:
    benchmark(Template.compile, TEMPLATES[name], name)


@pytest.mark.benchmark(group="compile")
@pytest.mark.parametrize("name", sorted(TEMPLATES))
def test_compile_jinja2(benchmark: BenchmarkFixture, name: str) -> None:
    env = Jinja2Environment()
    benchmark(env.from_string, TEMPLATES[name])
