"""DictLoader -- in-memory templates composed with {% call %}.

Templates come from a dictionary; the page calls a row template once per
item. No templates directory needed.

Run:
    python app.py
"""

from tinytemplate import DictLoader, Environment

templates = {
    "page.txt": """\
{{ title }}
{%- for item in nav_items %}
{% call nav_item.txt with item -%}
{% endfor %}
""",
    "nav_item.txt": "  [{{ label }}]({{ url }}){% if current %} <- you are here{% endif %}",
}

env = Environment(loader=DictLoader(templates))

output = env.render(
    "page.txt",
    title="DictLoader Demo",
    nav_items=[
        {"url": "/", "label": "Home", "current": True},
        {"url": "/about", "label": "About", "current": False},
    ],
)


def main() -> None:
    print(output)


if __name__ == "__main__":
    main()
