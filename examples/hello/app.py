"""Hello World -- the simplest tinytemplate example.

Compile a template from a string and render it with a context dict.

Run:
    python app.py
"""

import tinytemplate

template = tinytemplate.compile("Hello, {{ name }}!")

output = template.render({"name": "World"})


def main() -> None:
    print(output)
    print()

    # The compiled program, one instruction per line
    print(template.dump())
    print()

    for name in ["Ada", "Grace", "Python"]:
        print(template.render({"name": name}))


if __name__ == "__main__":
    main()
