"""Source descriptions for template sets."""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

FunctionTable = Mapping[str, Callable[..., Any]]  # pyright: ignore[reportExplicitAny]


@dataclass(slots=True, frozen=True)
class FileSet:
    """A set of template files compiled together.

    The first filename is the render root and names the compiled set for
    diagnostics. Filenames are relative to the box's root directory unless
    the root directory is empty.

    Attributes:
        filenames: Ordered template file paths, stored as a tuple. A single
            string is one filename.
        functions: Optional per-set function table. Entries override shared
            functions of the same name.
    """

    filenames: Sequence[str]
    functions: FunctionTable | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        filenames = self.filenames
        if isinstance(filenames, str):
            filenames = (filenames,)
        object.__setattr__(self, "filenames", tuple(str(f) for f in filenames))


@dataclass(slots=True, frozen=True)
class LiteralSet:
    """A set of template source strings compiled together.

    Attributes:
        templates: Ordered template source strings, stored as a tuple. A
            single string is one template.
        functions: Optional per-set function table.
    """

    templates: Sequence[str]
    functions: FunctionTable | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        templates = self.templates
        if isinstance(templates, str):
            templates = (templates,)
        object.__setattr__(self, "templates", tuple(templates))
