"""Tests for template set compilation."""

import os

import pytest

from templatebox import BoxConfig, FileSet, LiteralSet, NoSourcesError
from templatebox._compile import (
    compile_file_set,
    compile_literal_set,
    create_environment,
    resolve_paths,
)


class TestResolvePaths:
    def test_empty_root_returns_paths_verbatim(self) -> None:
        assert resolve_paths("", ["a.html", "/abs/b.html"]) == ["a.html", "/abs/b.html"]

    def test_joins_with_root(self) -> None:
        assert resolve_paths("tpl", ["a.html"]) == [os.path.join("tpl", "a.html")]

    def test_posix_join_for_archives(self) -> None:
        assert resolve_paths("tpl", ["sub/a.html"], posix=True) == ["tpl/sub/a.html"]


class TestCreateEnvironment:
    def test_later_tables_override_earlier(self) -> None:
        env = create_environment(
            BoxConfig(),
            {"t": ""},
            {"f": lambda: "shared", "g": lambda: "g"},
            {"f": lambda: "local"},
        )

        assert env.globals["f"]() == "local"
        assert env.filters["f"]() == "local"
        assert env.globals["g"]() == "g"

    def test_none_tables_are_skipped(self) -> None:
        env = create_environment(BoxConfig(), {"t": ""}, None, None)

        assert "f" not in env.globals

    def test_engine_options_follow_config(self) -> None:
        env = create_environment(
            BoxConfig(autoescape=False, trim_blocks=True, lstrip_blocks=True), {}
        )

        assert env.autoescape is False
        assert env.trim_blocks is True
        assert env.lstrip_blocks is True


class TestCompileFileSet:
    def test_reads_resolved_paths(self) -> None:
        seen: list[str] = []

        def read(path: str) -> str:
            seen.append(path)
            return "x"

        compiled = compile_file_set(
            "k",
            FileSet(["a.html", "b.html"]),
            config=BoxConfig(),
            shared=None,
            read=read,
            root_dir="root",
            posix=True,
        )

        assert seen == ["root/a.html", "root/b.html"]
        assert compiled.name == "a.html"
        assert len(compiled.templates) == 2

    def test_generate_yields_chunks(self) -> None:
        sources = {"a.html": "{% for i in items %}{{ i }}{% endfor %}"}
        compiled = compile_file_set(
            "k",
            FileSet(["a.html"]),
            config=BoxConfig(),
            shared=None,
            read=sources.__getitem__,
            root_dir="",
        )

        chunks = list(compiled.generate({"items": [1, 2, 3]}))

        assert "".join(chunks) == "123"
        assert len(chunks) > 1


class TestCompileLiteralSet:
    def test_compiled_set_named_after_key(self) -> None:
        compiled = compile_literal_set(
            "home", LiteralSet(["a", "b"]), config=BoxConfig(), shared=None
        )

        assert compiled.name == "home"
        assert [t.name for t in compiled.templates] == ["home[0]", "home[1]"]

    def test_last_block_definition_wins(self) -> None:
        compiled = compile_literal_set(
            "k",
            LiteralSet(
                [
                    "{% block x %}0{% endblock %}",
                    "{% block x %}1{% endblock %}",
                    "{% block x %}2{% endblock %}",
                ]
            ),
            config=BoxConfig(),
            shared=None,
        )

        assert "".join(compiled.generate({})) == "2"

    @pytest.mark.parametrize("templates", [[], ()])
    def test_empty_raises(self, templates: list[str]) -> None:
        with pytest.raises(NoSourcesError):
            _ = compile_literal_set(
                "k", LiteralSet(templates), config=BoxConfig(), shared=None
            )
