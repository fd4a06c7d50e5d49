"""Test the Environment: registries, loaders, built-in formatters and configuration."""

import logging

import pytest

from tinytemplate import (
    DEFAULT_FORMATTERS,
    CallDepthError,
    DictLoader,
    ErrorCode,
    Environment,
    FileSystemLoader,
    Template,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    UnknownFormatterError,
    UnknownTemplateError,
)
from tinytemplate.environment.formatters import format_html


class TestTemplateRegistry:
    """add_template / get_template / render."""

    def test_add_and_render(self, env):
        env.add_template("hello", "Hello {{ name }}!")
        assert env.render("hello", {"name": "World"}) == "Hello World!"

    def test_add_template_returns_template(self, env):
        template = env.add_template("t", "x")
        assert isinstance(template, Template)
        assert template.name == "t"
        assert env.get_template("t") is template

    def test_replace_template(self, env):
        env.add_template("t", "one")
        env.add_template("t", "two")
        assert env.render("t") == "two"

    def test_syntax_error_registers_nothing(self, env):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            env.add_template("bad", "{% if x %}")
        assert exc_info.value.name == "bad"
        assert "bad" not in env.list_templates()

    def test_syntax_error_keeps_previous_version(self, env):
        env.add_template("t", "ok")
        with pytest.raises(TemplateSyntaxError):
            env.add_template("t", "{{")
        assert env.render("t") == "ok"

    def test_unknown_template(self, env):
        with pytest.raises(TemplateNotFoundError, match="no loader configured"):
            env.render("missing")

    def test_kwargs_context(self, env):
        env.add_template("t", "{{ name }}:{{ title }}")
        assert env.render("t", name="Ada", title="Countess") == "Ada:Countess"

    def test_kwargs_override_context(self, env):
        env.add_template("t", "{{ a }}{{ b }}")
        assert env.render("t", {"a": 1, "b": 2}, b=3) == "13"

    def test_kwargs_require_mapping_context(self, env):
        env.add_template("t", "{{ a }}")
        with pytest.raises(TypeError, match="mapping"):
            env.render("t", [1, 2], a=1)

    def test_from_string_does_not_register(self, env):
        template = env.from_string("{{ x | upper }}", "inline")
        assert env.render_template(template, x="hi") == "HI"
        assert env.list_templates() == []

    def test_call_resolves_through_registry(self, env):
        env.add_template("item", "- {{ label }}\n")
        env.add_template("list", "{% for i in items %}{% call item with i %}{% endfor %}")
        assert env.render("list", items=[{"label": "a"}, {"label": "b"}]) == "- a\n- b\n"

    def test_call_unknown_template(self, env):
        env.add_template("t", "{% call nope with x %}")
        with pytest.raises(UnknownTemplateError):
            env.render("t", x={})

    def test_templates_view(self, env):
        env.add_template("t", "x")
        assert "t" in env.templates
        assert "u" not in env.templates
        assert env.templates.get("u") is None
        assert env.templates["t"].name == "t"

    def test_list_templates(self, env):
        env.add_template("b", "")
        env.add_template("a", "")
        assert env.list_templates() == ["a", "b"]


class TestFormatterRegistry:
    """Formatters and the copy-on-write registry view."""

    def test_builtins_registered(self, env):
        assert set(env.formatters) == set(DEFAULT_FORMATTERS)

    def test_no_builtins(self):
        env = Environment(builtin_formatters=False)
        assert len(env.formatters) == 0
        env.add_template("t", "{{ x | json }}")
        with pytest.raises(UnknownFormatterError):
            env.render("t", x=1)

    def test_add_formatter(self, env):
        env.add_formatter("shout", lambda v: f"{v}!")
        env.add_template("t", "{{ word | shout }}")
        assert env.render("t", word="hey") == "hey!"

    def test_constructor_formatters_override_builtins(self):
        env = Environment(formatters={"upper": lambda v: "U"})
        env.add_template("t", "{{ x | upper }}")
        assert env.render("t", x="a") == "U"

    def test_registry_mapping_interface(self, env):
        def f(value):
            return "f"

        env.formatters["f"] = f
        assert "f" in env.formatters
        assert env.formatters["f"] is f
        assert env.formatters.get("missing") is None
        del env.formatters["f"]
        assert "f" not in env.formatters

    def test_registry_is_copy_on_write(self, env):
        before = env._formatters
        env.formatters.update({"g": lambda v: "g"})
        assert env._formatters is not before
        assert "g" not in before

    def test_copy_is_detached(self, env):
        snapshot = env.formatters.copy()
        env.add_formatter("late", lambda v: "")
        assert "late" not in snapshot
        assert "late" in env.formatters.keys()

    def test_default_formatter(self):
        env = Environment(default_formatter=format_html)
        env.add_template("t", "{{ x }}")
        assert env.render("t", x="<b>") == "&lt;b&gt;"

    def test_set_default_formatter(self, env):
        env.add_template("t", "{{ x }}")
        env.set_default_formatter(lambda v: "*")
        assert env.render("t", x="a") == "*"

    def test_default_formatter_applies_to_called_templates(self):
        env = Environment(default_formatter=format_html)
        env.add_template("inner", "{{ v }}")
        env.add_template("outer", "{% call inner with x %}")
        assert env.render("outer", x={"v": "&"}) == "&amp;"


class TestBuiltinFormatters:
    @pytest.mark.parametrize(
        ("source", "value", "expected"),
        [
            ("{{ x | json }}", {"a": [1, None, True]}, '{"a":[1,null,true]}'),
            ("{{ x | json }}", "é", '"é"'),
            ("{{ x | html }}", "1:< 2:> 3:& 4:' 5:\"", "1:&lt; 2:&gt; 3:&amp; 4:&#x27; 5:&quot;"),
            ("{{ x | upper }}", "abc", "ABC"),
            ("{{ x | lower }}", "ABC", "abc"),
            ("{{ x | trim }}", "  a b  ", "a b"),
            ("{{ x | length }}", [1, 2, 3], "3"),
            ("{{ x | length }}", {"a": 1}, "1"),
            ("{{ x | length }}", "four", "4"),
            ("{{ x | upper }}", True, "TRUE"),
        ],
    )
    def test_formatter(self, env, source, value, expected):
        assert env.render_template(env.from_string(source), x=value) == expected

    def test_length_of_number(self, env):
        with pytest.raises(TemplateRuntimeError, match="length of a number"):
            env.render_template(env.from_string("{{ x | length }}"), x=5)

    def test_upper_of_list(self, env):
        with pytest.raises(TemplateRuntimeError):
            env.render_template(env.from_string("{{ x | upper }}"), x=[1])

    def test_json_rejects_non_finite(self, env):
        with pytest.raises(TemplateRuntimeError) as exc_info:
            env.render_template(env.from_string("{{ x | json }}"), x=float("nan"))
        assert exc_info.value.code is ErrorCode.FORMATTER_ERROR
        assert isinstance(exc_info.value.__cause__, ValueError)


class TestLoaders:
    def test_dict_loader(self, env_with_loader):
        sections = [{"heading": "One", "body": "first"}, {"heading": "Two", "body": "second"}]
        result = env_with_loader.render("page.txt", title="Doc", sections=sections)
        assert result == "# Doc\n## One\nfirst\n## Two\nsecond\n"

    def test_loaded_templates_are_cached(self, env_with_loader):
        first = env_with_loader.get_template("section.txt")
        assert env_with_loader.get_template("section.txt") is first

    def test_loader_syntax_error(self, env_with_loader):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            env_with_loader.get_template("broken.txt")
        assert exc_info.value.name == "broken.txt"

    def test_dict_loader_not_found_suggestion(self, env_with_loader):
        with pytest.raises(TemplateNotFoundError, match="Did you mean 'page.txt'"):
            env_with_loader.get_template("pages.txt")

    def test_dict_loader_not_found_lists_available(self):
        loader = DictLoader({"a": "", "b": ""})
        with pytest.raises(TemplateNotFoundError, match="Available: a, b"):
            loader.get_source("zzzzzz")

    def test_list_templates_includes_loader(self, env_with_loader):
        env_with_loader.add_template("extra", "")
        assert env_with_loader.list_templates() == ["broken.txt", "extra", "page.txt", "section.txt"]

    def test_call_loads_on_demand(self):
        env = Environment(loader=DictLoader({"inner": "<{{ v }}>"}))
        env.add_template("outer", "{% call inner with x %}")
        assert env.render("outer", x={"v": 1}) == "<1>"

    def test_call_to_name_missing_from_loader(self):
        env = Environment(loader=DictLoader({}))
        env.add_template("outer", "{% call inner with x %}")
        with pytest.raises(UnknownTemplateError):
            env.render("outer", x={})

    def test_call_to_loader_source_with_syntax_error(self):
        env = Environment(loader=DictLoader({"bad": "{{ oops", "t": "{% call bad with x %}"}))
        with pytest.raises(TemplateRuntimeError) as exc_info:
            env.render("t", x=1)
        error = exc_info.value
        assert not isinstance(error, TemplateSyntaxError)
        assert error.code is ErrorCode.CALLEE_SYNTAX
        assert error.template_name == "t"
        assert error.lineno == 1
        assert isinstance(error.__cause__, TemplateSyntaxError)
        assert error.__cause__.name == "bad"

    def test_filesystem_loader(self, tmp_path):
        (tmp_path / "emails").mkdir()
        (tmp_path / "emails" / "welcome.txt").write_text("Welcome, {{ name }}!", encoding="utf-8")
        env = Environment(loader=FileSystemLoader(tmp_path))
        assert env.render("emails/welcome.txt", name="Ada") == "Welcome, Ada!"
        assert env.list_templates() == ["emails/welcome.txt"]

    def test_filesystem_loader_search_order(self, tmp_path):
        first = tmp_path / "first"
        second = tmp_path / "second"
        first.mkdir()
        second.mkdir()
        (first / "t.txt").write_text("first", encoding="utf-8")
        (second / "t.txt").write_text("second", encoding="utf-8")
        (second / "only.txt").write_text("only", encoding="utf-8")
        loader = FileSystemLoader([first, str(second)])
        assert loader.get_source("t.txt")[0] == "first"
        assert loader.get_source("only.txt") == ("only", str(second / "only.txt"))

    def test_filesystem_loader_not_found(self, tmp_path):
        loader = FileSystemLoader(tmp_path)
        with pytest.raises(TemplateNotFoundError, match="not found in"):
            loader.get_source("missing.txt")

    def test_filesystem_loader_rejects_escape(self, tmp_path):
        root = tmp_path / "root"
        root.mkdir()
        (tmp_path / "secret.txt").write_text("secret", encoding="utf-8")
        with pytest.raises(TemplateNotFoundError):
            FileSystemLoader(root).get_source("../secret.txt")


class TestConfiguration:
    def test_max_call_depth(self):
        env = Environment(max_call_depth=2)
        env.add_template("r", "{% call r with x %}")
        value: dict = {}
        for _ in range(5):
            value = {"x": value}
        with pytest.raises(CallDepthError, match=r"\(2\)"):
            env.render("r", value)

    def test_negative_call_depth_rejected(self):
        with pytest.raises(ValueError, match="max_call_depth"):
            Environment(max_call_depth=-1)

    def test_zero_call_depth_disables_call(self):
        env = Environment(max_call_depth=0)
        env.add_template("inner", "")
        env.add_template("outer", "{% call inner with x %}")
        with pytest.raises(CallDepthError):
            env.render("outer", x={})


class TestLogging:
    def test_registration_logged(self, env, caplog):
        with caplog.at_level(logging.DEBUG, logger="tinytemplate"):
            env.add_template("t", "{{ a }}")
        assert "Registered template t" in caplog.text

    def test_compile_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="tinytemplate.compiler"):
            Template.compile("x{{ a }}", "named")
        assert "Compiled template named: 2 instructions" in caplog.text

    def test_call_logged(self, env, caplog):
        env.add_template("inner", "")
        env.add_template("outer", "{% call inner with x %}")
        with caplog.at_level(logging.DEBUG, logger="tinytemplate.template.vm"):
            env.render("outer", x={})
        assert "Calling template inner from outer:1 (depth 1)" in caplog.text
