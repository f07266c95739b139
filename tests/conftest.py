"""Shared test fixtures for templatebox tests."""

from dataclasses import dataclass
from pathlib import Path

import pytest

LAYOUT = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>{% block title %}Document{% endblock %}</title>
</head>
<body>
  {% block content %}{% endblock %}
</body>
</html>
"""

PAGE_A = '{% block content %}<h1>Page A</h1>{% endblock %}\n'

PAGE_B = '{% block content %}<h1>Page B</h1>{% endblock %}\n'

STATIC = "<p>Plain &amp; static</p>\n"


def expected_layout(content: str, title: str = "Document") -> str:
    """Return LAYOUT with its blocks filled in."""
    return (
        LAYOUT.replace("{% block title %}Document{% endblock %}", title)
        .replace("{% block content %}{% endblock %}", content)
    )


@dataclass(frozen=True, slots=True)
class TemplateTree:
    """Paths for an on-disk template directory."""

    root: Path

    def write(self, name: str, content: str) -> Path:
        path = self.root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        _ = path.write_text(content, encoding="utf-8")
        return path


@pytest.fixture
def template_tree(tmp_path: Path) -> TemplateTree:
    """Create a template directory with a layout and two pages.

    Structure:
        tmp_path/templates/
            layout.html     # defines title and content blocks
            a.html          # fills content
            b.html          # fills content
            static.html     # no template syntax
    """
    tree = TemplateTree(tmp_path / "templates")
    tree.root.mkdir()
    _ = tree.write("layout.html", LAYOUT)
    _ = tree.write("a.html", PAGE_A)
    _ = tree.write("b.html", PAGE_B)
    _ = tree.write("static.html", STATIC)
    return tree
