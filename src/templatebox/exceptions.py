"""Template box exceptions."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class TemplateBoxError(Exception):
    """Base exception for template box errors."""


class BoxConfigError(TemplateBoxError):
    """Raised when a box cannot be constructed from its backing store.

    Attributes:
        path: The template directory that could not be used, if any.
    """

    def __init__(self, message: str, *, path: "Path | str | None" = None) -> None:
        """Initialize with error message and optional directory context."""
        super().__init__(message)
        self.path: Path | str | None = path


class NoSourcesError(TemplateBoxError, ValueError):
    """Raised when a template set names no files or template strings."""

    def __init__(self, message: str, *, name: str) -> None:
        """Initialize with error message and the set name."""
        super().__init__(message)
        self.name: str = name


class TemplateCompileError(TemplateBoxError):
    """Raised when a template set cannot be read or parsed.

    Attributes:
        name: Registry key of the set being compiled.
        index: Position of the offending source within the set, if known.
        source: The offending template text (literal sets only).
        cause: The underlying read or syntax error.
    """

    def __init__(
        self,
        message: str,
        *,
        name: str,
        index: int | None = None,
        source: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and compilation context."""
        super().__init__(message)
        self.name: str = name
        self.index: int | None = index
        self.source: str | None = source
        self.cause: Exception | None = cause


class TemplateNotFoundError(TemplateBoxError, KeyError):
    """Raised when rendering a name that was never registered."""

    def __init__(self, message: str, *, name: str) -> None:
        """Initialize with error message and the missing name."""
        super().__init__(message)
        self.name: str = name


class TemplateRenderError(TemplateBoxError):
    """Raised when a compiled set fails while rendering.

    Output written to the sink before the failure is not rolled back.

    Attributes:
        name: Registry key of the set being rendered.
        cause: The underlying engine error.
    """

    def __init__(
        self,
        message: str,
        *,
        name: str,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and render context."""
        super().__init__(message)
        self.name: str = name
        self.cause: Exception | None = cause
