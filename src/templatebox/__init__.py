r"""Template box: named, compiled Jinja2 template sets rendered by name.

Register page templates once at startup and render any of them by name
during request handling.

Basic usage:
    from templatebox import Box, BoxConfig, FileSet

    box = Box.from_directory("templates", BoxConfig(debug=True))
    box.set_shared_functions({"upper": str.upper})

    # layout.html uses {% block content %}, page.html defines it
    box.add_file_set("page", ["layout.html", "page.html"])
    box.add_file_sets({
        "about": FileSet(["layout.html", "about.html"]),
        "contact": FileSet(["layout.html", "contact.html"]),
    })

    box.render(response, "page", {"title": "Hello"})

From an archive:
    from importlib.resources import files

    box = Box.from_archive(files("myapp"), "templates")

From strings:
    box.add_literal_set(
        "greeting",
        [
            "<p>{% block body %}{% endblock %}</p>",
            "{% block body %}Hello {{ name }}{% endblock %}",
        ],
    )
    html = box.render_string("greeting", {"name": "World"})
"""

from ._box import Box
from ._compile import CompiledSet
from ._config import BoxConfig
from ._logging import LogFormatType, create_logger
from ._render import TextSink, build_context
from ._sources import FileSet, FunctionTable, LiteralSet
from .exceptions import (
    BoxConfigError,
    NoSourcesError,
    TemplateBoxError,
    TemplateCompileError,
    TemplateNotFoundError,
    TemplateRenderError,
)

__all__ = [
    "Box",
    "BoxConfig",
    "BoxConfigError",
    "CompiledSet",
    "FileSet",
    "FunctionTable",
    "LiteralSet",
    "LogFormatType",
    "NoSourcesError",
    "TemplateBoxError",
    "TemplateCompileError",
    "TemplateNotFoundError",
    "TemplateRenderError",
    "TextSink",
    "build_context",
    "create_logger",
]
