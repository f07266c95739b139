"""Template box: a registry of named, compiled template sets.

A Box is created once at startup, filled with named template sets, and
then rendered by name from any number of threads. Compilation happens
outside the box's locks; only the final map insert is exclusive.

Example:
    >>> from templatebox import Box, FileSet
    >>> box = Box.from_directory("templates")
    >>> box.set_shared_functions({"upper": str.upper})
    >>> box.add_file_set("home", ["layout.html", "home.html"])
    >>> box.render(sys.stdout, "home", {"title": "Welcome"})
"""

import io
import os
from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import TYPE_CHECKING

from templatebox._compile import (
    archive_reader,
    compile_file_set,
    compile_literal_set,
    filesystem_reader,
)
from templatebox._config import DEFAULT_CONFIG, BoxConfig
from templatebox._locks import ReadWriteLock
from templatebox._logging import create_logger
from templatebox._render import TextSink, stream_to
from templatebox._sources import FileSet, FunctionTable, LiteralSet
from templatebox.exceptions import (
    BoxConfigError,
    TemplateCompileError,
    TemplateNotFoundError,
    TemplateRenderError,
)

if TYPE_CHECKING:
    from importlib.resources.abc import Traversable

    from structlog.typing import FilteringBoundLogger

    from templatebox._compile import CompiledSet, SourceReader


class Box:
    """Thread-safe registry of named template sets.

    Sets are stored by registry key; registering a key again replaces the
    previous compiled set. In debug mode a box backed by a live directory
    keeps each file set's description and re-parses it before every
    render, so edits on disk show up without re-registration.

    Use from_directory() or from_archive() to create a box.
    """

    __slots__ = (
        "_archive",
        "_config",
        "_logger",
        "_read",
        "_root_dir",
        "_shared",
        "_sources",
        "_sources_lock",
        "_templates",
        "_templates_lock",
    )

    def __init__(
        self,
        root_dir: str,
        config: BoxConfig | None = None,
        *,
        archive: "Traversable | None" = None,
        logger: "FilteringBoundLogger | None" = None,
    ) -> None:
        """Initialize an empty box.

        Note:
            Performs no validation. Use from_directory() or from_archive().
        """
        self._config: BoxConfig = config if config is not None else DEFAULT_CONFIG
        self._root_dir: str = root_dir
        self._archive: Traversable | None = archive
        self._read: SourceReader = (
            archive_reader(archive) if archive is not None else filesystem_reader()
        )
        self._logger: FilteringBoundLogger = (
            logger if logger is not None else create_logger()
        )
        self._shared: FunctionTable | None = None

        self._templates_lock: ReadWriteLock = ReadWriteLock()
        self._templates: dict[str, CompiledSet] = {}

        # File sets kept for re-parsing before each render (debug, live only)
        self._sources_lock: ReadWriteLock = ReadWriteLock()
        self._sources: dict[str, FileSet] | None = (
            {} if self._config.debug and archive is None else None
        )

    @classmethod
    def from_archive(
        cls,
        archive: "Traversable | None",
        root_dir: str = "",
        config: BoxConfig | None = None,
        *,
        logger: "FilteringBoundLogger | None" = None,
    ) -> "Box":
        """Create a box reading templates from a read-only archive.

        Any Traversable works, e.g. ``importlib.resources.files(package)`` or
        ``zipfile.Path(zip_file)``. Debug mode is accepted but has no effect:
        archive-backed sets are never re-parsed.

        Args:
            archive: The archive to read from.
            root_dir: Directory within the archive that filenames are
                relative to. Empty means filenames are full archive paths.
            config: Box configuration. Defaults to BoxConfig().
            logger: Optional logger. One is created if not given.

        Returns:
            An empty box.

        Raises:
            BoxConfigError: If archive is None or is not a Traversable.
        """
        if archive is None:
            msg = "archive cannot be None"
            raise BoxConfigError(msg, path=root_dir)
        if not callable(getattr(archive, "joinpath", None)):
            msg = f"archive must be a Traversable, got {type(archive).__name__}"
            raise BoxConfigError(msg, path=root_dir)

        box = cls(root_dir, config, archive=archive, logger=logger)
        box._logger.debug("box_created", backing="archive", root_dir=root_dir)
        return box

    @classmethod
    def from_directory(
        cls,
        root_dir: "str | os.PathLike[str]",
        config: BoxConfig | None = None,
        *,
        logger: "FilteringBoundLogger | None" = None,
    ) -> "Box":
        """Create a box reading templates from a directory on disk.

        Args:
            root_dir: Directory that filenames are relative to.
            config: Box configuration. Defaults to BoxConfig().
            logger: Optional logger. One is created if not given.

        Returns:
            An empty box.

        Raises:
            BoxConfigError: If the directory does not exist or cannot be
                stat-ed.
        """
        path = os.fspath(root_dir)
        try:
            _ = os.stat(path)
        except FileNotFoundError as e:
            msg = f"template directory {path} does not exist"
            raise BoxConfigError(msg, path=path) from e
        except OSError as e:
            msg = f"stat of template directory {path} failed: {e}"
            raise BoxConfigError(msg, path=path) from e

        box = cls(path, config, logger=logger)
        box._logger.debug(
            "box_created",
            backing="directory",
            root_dir=path,
            debug=box._config.debug,
        )
        return box

    @property
    def config(self) -> BoxConfig:
        """The active box configuration."""
        return self._config

    @property
    def root_dir(self) -> str:
        """The directory filenames are resolved against ("" for verbatim)."""
        return self._root_dir

    @property
    def shared_functions(self) -> Mapping[str, object]:
        """Read-only view of the shared function table."""
        return MappingProxyType(self._shared or {})

    def set_shared_functions(self, functions: FunctionTable | None) -> None:
        """Replace the shared function table.

        The table is available to every set compiled afterwards. Sets that
        are already compiled keep the table they were compiled with until
        they are registered (or, in debug mode, re-parsed) again.
        """
        self._shared = dict(functions) if functions is not None else None

    def add_file_set(
        self,
        name: str,
        files: FileSet | Sequence[str],
        functions: FunctionTable | None = None,
    ) -> None:
        """Compile template files and register them under name.

        Args:
            name: Registry key. Replaces any set already stored under it.
            files: A FileSet, or a sequence of filenames. The first file is
                the render root.
            functions: Per-set function table. Overrides the FileSet's own
                table when given.

        Raises:
            NoSourcesError: If no filenames are given.
            TemplateCompileError: If a file cannot be read or parsed. The
                box is left unchanged.
        """
        file_set = _as_file_set(files, functions)
        compiled = self._compile_files(name, file_set)
        self._install(name, compiled, file_set)

        self._logger.debug(
            "template_registered",
            name=name,
            kind="files",
            files=list(file_set.filenames),
        )

    def add_file_sets(
        self,
        file_sets: Mapping[str, FileSet | Sequence[str]],
    ) -> None:
        """Register several file sets.

        Sets are registered in mapping order. Registration stops at the first
        failure and that error is raised; sets registered before it stay
        registered.

        Raises:
            NoSourcesError: If a set names no files.
            TemplateCompileError: If a set fails to compile.
        """
        for name, files in file_sets.items():
            self.add_file_set(name, files)

    def add_literal_set(
        self,
        name: str,
        templates: LiteralSet | Sequence[str],
        functions: FunctionTable | None = None,
    ) -> None:
        """Compile template strings and register them under name.

        Later strings may define blocks that earlier strings use. Literal
        sets are never re-parsed in debug mode.

        Args:
            name: Registry key. Replaces any set already stored under it.
            templates: A LiteralSet, or a sequence of template strings.
            functions: Per-set function table. Overrides the LiteralSet's own
                table when given.

        Raises:
            NoSourcesError: If no template strings are given.
            TemplateCompileError: If a string fails to parse. The error
                carries the index and the offending text.
        """
        literal_set = _as_literal_set(templates, functions)
        compiled = compile_literal_set(
            name,
            literal_set,
            config=self._config,
            shared=self._shared,
        )

        # A literal set replaces any file set kept for re-parsing
        self._install(name, compiled, None)

        self._logger.debug(
            "template_registered",
            name=name,
            kind="literal",
            count=len(literal_set.templates),
        )

    def names(self) -> list[str]:
        """Return the registered names, sorted."""
        with self._templates_lock.read():
            return sorted(self._templates)

    def __contains__(self, name: object) -> bool:
        with self._templates_lock.read():
            return name in self._templates

    def render(self, sink: TextSink, name: str, data: object = None) -> None:
        """Render the set registered under name into sink.

        Output is written chunk by chunk. If rendering fails part way, the
        chunks already written remain in the sink.

        Args:
            sink: Object with a write(str) method.
            name: Registry key of the set.
            data: None, a mapping, a Pydantic model or a dataclass instance.
                No structure is enforced; it must match what the templates
                expect.

        Raises:
            TemplateCompileError: If debug re-parsing fails. The previously
                compiled set stays registered.
            TemplateNotFoundError: If nothing is registered under name.
            TemplateRenderError: If the template fails while rendering.
        """
        if self._sources is not None:
            self._recompile(name)

        with self._templates_lock.read():
            compiled = self._templates.get(name)
        if compiled is None:
            msg = f"template {name} not found"
            raise TemplateNotFoundError(msg, name=name)

        try:
            stream_to(sink, compiled, data)
        except Exception as e:
            msg = f"render template {name!r} failed: {e}"
            raise TemplateRenderError(msg, name=name, cause=e) from e

        self._logger.debug("template_rendered", name=name, template=compiled.name)

    def render_string(self, name: str, data: object = None) -> str:
        """Render the set registered under name and return the output.

        Raises the same errors as render().
        """
        buffer = io.StringIO()
        self.render(buffer, name, data)
        return buffer.getvalue()

    def _compile_files(self, name: str, file_set: FileSet) -> "CompiledSet":
        return compile_file_set(
            name,
            file_set,
            config=self._config,
            shared=self._shared,
            read=self._read,
            root_dir=self._root_dir,
            posix=self._archive is not None,
        )

    def _install(
        self,
        name: str,
        compiled: "CompiledSet",
        file_set: FileSet | None,
    ) -> None:
        """Store a compiled set and its kept file set (None drops it).

        Both maps change under the templates write lock, taken before the
        sources lock, so a concurrent debug re-parse sees them in step.
        """
        with self._templates_lock.write():
            self._templates[name] = compiled
            if self._sources is not None:
                with self._sources_lock.write():
                    if file_set is None:
                        _ = self._sources.pop(name, None)
                    else:
                        self._sources[name] = file_set

    def _recompile(self, name: str) -> None:
        """Re-parse a kept file set from disk, if one is kept under name.

        The result is stored only if the kept file set is still the one that
        was compiled; a registration made while parsing wins.
        """
        assert self._sources is not None  # noqa: S101
        with self._sources_lock.read():
            file_set = self._sources.get(name)
        if file_set is None:
            return

        try:
            compiled = self._compile_files(name, file_set)
        except TemplateCompileError as e:
            msg = f"rebuild template {name!r} failed: {e}"
            raise TemplateCompileError(
                msg, name=name, index=e.index, source=e.source, cause=e
            ) from e

        with self._templates_lock.write():
            with self._sources_lock.read():
                current = self._sources.get(name)
            if current is not file_set:
                return
            self._templates[name] = compiled
        self._logger.debug("template_recompiled", name=name)


def _as_file_set(
    files: FileSet | Sequence[str],
    functions: FunctionTable | None,
) -> FileSet:
    if isinstance(files, FileSet):
        if functions is None:
            return files
        return FileSet(files.filenames, functions)
    return FileSet(files, functions)


def _as_literal_set(
    templates: LiteralSet | Sequence[str],
    functions: FunctionTable | None,
) -> LiteralSet:
    if isinstance(templates, LiteralSet):
        if functions is None:
            return templates
        return LiteralSet(templates.templates, functions)
    return LiteralSet(templates, functions)
