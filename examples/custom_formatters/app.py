"""Custom formatters -- extending tinytemplate with add_formatter.

A formatter receives the looked-up value and returns text. Formatters are
the only way to print lists and dicts, and the hook for escaping.

Run:
    python app.py
"""

from tinytemplate import Environment, format_value
from tinytemplate.environment.formatters import format_html

env = Environment()


def money(amount: float) -> str:
    """Format amount as currency."""
    return f"${amount:,.2f}"


def csv(values: list) -> str:
    """Join a list of printable values with commas."""
    return ", ".join(format_value(v) for v in values)


env.add_formatter("money", money)
env.add_formatter("csv", csv)

env.add_template(
    "invoice.txt",
    """\
Invoice for {{ customer | html }}
{%- for item in items %}
{{ @index }}. {{ item.name }} x{{ item.qty }} @ {{ item.price | money }}
{%- endfor %}
Tags: {{ tags | csv }}
Total: {{ total | money }}""",
)

output = env.render(
    "invoice.txt",
    customer="Smith & Sons",
    total=1234.56,
    tags=["net30", "priority"],
    items=[
        {"name": "Widget A", "price": 19.99, "qty": 2},
        {"name": "Widget B", "price": 5.00, "qty": 1},
    ],
)

# Escape every plain {{ path }} as well
html_env = Environment(default_formatter=format_html)
html_env.add_template("comment.html", "<p>{{ body }}</p>")
html_output = html_env.render("comment.html", body="<script>alert(1)</script>")


def main() -> None:
    print(output)
    print()
    print(html_output)


if __name__ == "__main__":
    main()
