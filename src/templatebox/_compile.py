"""Compilation of source sets into Jinja2 template sets."""

import os
import posixpath
from pathlib import PurePath
from typing import TYPE_CHECKING

from jinja2 import (
    DictLoader,
    Environment,
    StrictUndefined,
    TemplateError,
    Undefined,
    nodes,
)

from templatebox.exceptions import NoSourcesError, TemplateCompileError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping, Sequence
    from importlib.resources.abc import Traversable

    from jinja2 import Template

    from ._config import BoxConfig
    from ._sources import FileSet, FunctionTable, LiteralSet

    SourceReader = Callable[[str], str]


class CompiledSet:
    """A parsed template set ready to render.

    One template is the render root (the first, unless a later literal
    string has top-level output of its own). Blocks defined by later
    templates override same-named blocks of earlier ones, so a layout can
    reference a block that only a later member of the set defines.

    Attributes:
        name: Diagnostic name given at construction (first file's base name,
            or the registry key for literal sets).
        environment: The set's private Jinja2 environment.
        templates: Parsed templates in source order.
        root: Index of the render root in templates.
    """

    __slots__ = ("environment", "name", "root", "templates")

    def __init__(
        self,
        name: str,
        environment: Environment,
        templates: "Sequence[Template]",
        root: int = 0,
    ) -> None:
        self.name: str = name
        self.environment: Environment = environment
        self.templates: tuple[Template, ...] = tuple(templates)
        self.root: int = root

    def generate(self, context: "Mapping[str, object]") -> "Iterator[str]":
        """Render the set, yielding output chunks as they are produced."""
        root = self.templates[self.root]
        ctx = root.new_context(dict(context))
        # Latest definition first; super() walks towards earlier ones
        blocks: dict[str, list[Callable[..., Iterator[str]]]] = {}
        for template in self.templates:
            for block_name, block in template.blocks.items():
                blocks.setdefault(block_name, []).insert(0, block)
        ctx.blocks.update(blocks)
        try:
            yield from root.root_render_func(ctx)
        except Exception:
            yield root.environment.handle_exception()


def create_environment(
    config: "BoxConfig",
    sources: "Mapping[str, str]",
    *functions: "FunctionTable | None",
) -> Environment:
    """Create a Jinja2 Environment holding one set's sources.

    Function tables are installed as both globals and filters, in order,
    so later tables override earlier ones.

    Args:
        config: Box configuration supplying the engine options.
        sources: Template name to source text for every member of the set.
        *functions: Function tables applied in order. None entries are skipped.

    Returns:
        Configured Jinja2 Environment.
    """
    env = Environment(
        loader=DictLoader(dict(sources)),
        autoescape=config.autoescape,
        trim_blocks=config.trim_blocks,
        lstrip_blocks=config.lstrip_blocks,
        keep_trailing_newline=config.keep_trailing_newline,
        undefined=StrictUndefined if config.strict_undefined else Undefined,
    )
    for table in functions:
        if table:
            env.globals.update(table)
            env.filters.update(table)
    return env


def filesystem_reader() -> "SourceReader":
    """Return a reader for template files on the live filesystem."""

    def read(path: str) -> str:
        with open(path, encoding="utf-8") as f:
            return f.read()

    return read


def archive_reader(archive: "Traversable") -> "SourceReader":
    """Return a reader for template files inside a read-only archive."""

    def read(path: str) -> str:
        parts = [p for p in path.split("/") if p not in {"", "."}]
        return archive.joinpath(*parts).read_text(encoding="utf-8")

    return read


def resolve_paths(
    root_dir: str,
    filenames: "Sequence[str]",
    *,
    posix: bool = False,
) -> list[str]:
    """Join filenames with the root directory unless it is empty."""
    if not root_dir:
        return list(filenames)
    join = posixpath.join if posix else os.path.join
    return [join(root_dir, f) for f in filenames]


def compile_file_set(
    name: str,
    file_set: "FileSet",
    *,
    config: "BoxConfig",
    shared: "FunctionTable | None",
    read: "SourceReader",
    root_dir: str,
    posix: bool = False,
) -> CompiledSet:
    """Read and parse every file of a set into one compiled set.

    Args:
        name: Registry key, used in error messages.
        file_set: Files and per-set functions to compile.
        config: Box configuration.
        shared: Shared function table, applied before the per-set table.
        read: Reader returning the text of a resolved path.
        root_dir: Directory the filenames are relative to ("" for verbatim).
        posix: Join paths with forward slashes (archives).

    Returns:
        The compiled set, named after the first file's base name.

    Raises:
        NoSourcesError: If the set names no files.
        TemplateCompileError: If a file cannot be read or parsed.
    """
    if not file_set.filenames:
        msg = f"add template {name!r} failed: no sources provided"
        raise NoSourcesError(msg, name=name)

    paths = resolve_paths(root_dir, file_set.filenames, posix=posix)
    sources: dict[str, str] = {}
    resolved = zip(file_set.filenames, paths, strict=True)
    for index, (filename, path) in enumerate(resolved):
        try:
            text = read(path)
        except (OSError, UnicodeDecodeError) as e:
            msg = f"add template {name!r} failed: cannot read {path}: {e}"
            raise TemplateCompileError(msg, name=name, index=index, cause=e) from e
        sources[filename] = text
        _ = sources.setdefault(PurePath(filename).name, text)

    env = create_environment(config, sources, shared, file_set.functions)
    templates: list[Template] = []
    for index, filename in enumerate(file_set.filenames):
        try:
            templates.append(env.get_template(filename))
        except TemplateError as e:
            msg = f"add template {name!r} failed: {filename}: {e}"
            raise TemplateCompileError(msg, name=name, index=index, cause=e) from e

    return CompiledSet(PurePath(file_set.filenames[0]).name, env, templates)


def compile_literal_set(
    name: str,
    literal_set: "LiteralSet",
    *,
    config: "BoxConfig",
    shared: "FunctionTable | None",
) -> CompiledSet:
    """Parse template strings in sequence into one compiled set.

    Each string is addressable inside the set as ``"<name>[<index>]"``. The
    last string with top-level output (anything besides blocks, macros,
    imports and whitespace) becomes the render root; the first string is
    the root when no later one has output.

    Raises:
        NoSourcesError: If the set has no template strings.
        TemplateCompileError: If a string fails to parse. The error carries
            the index and the offending source text.
    """
    if not literal_set.templates:
        msg = f"add template {name!r} failed: no sources provided"
        raise NoSourcesError(msg, name=name)

    keys = [f"{name}[{index}]" for index in range(len(literal_set.templates))]
    sources = dict(zip(keys, literal_set.templates, strict=True))
    env = create_environment(config, sources, shared, literal_set.functions)
    templates: list[Template] = []
    root = 0
    pairs = zip(keys, literal_set.templates, strict=True)
    for index, (key, text) in enumerate(pairs):
        try:
            templates.append(env.get_template(key))
            if index and _has_top_level_output(env.parse(text)):
                root = index
        except TemplateError as e:
            msg = (
                f"failed to parse template {name} at index {index}: {e}\n"
                f"Template content:\n{text}"
            )
            raise TemplateCompileError(
                msg, name=name, index=index, source=text, cause=e
            ) from e

    return CompiledSet(name, env, templates, root)


_DEFINITION_NODES = (nodes.Block, nodes.Macro, nodes.Import, nodes.FromImport)


def _has_top_level_output(tree: nodes.Template) -> bool:
    """Tell whether a template body writes anything outside its definitions.

    Whitespace between blocks and macros does not count.
    """
    for node in tree.body:
        if isinstance(node, _DEFINITION_NODES):
            continue
        if isinstance(node, nodes.Output) and all(
            isinstance(child, nodes.TemplateData) and not child.data.strip()
            for child in node.nodes
        ):
            continue
        return True
    return False
