"""Box configuration."""

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _env_flag(environ: "Mapping[str, str]", key: str, *, default: bool) -> bool:
    value = environ.get(key, "").strip().lower()
    if not value:
        return default
    return value in _TRUTHY


@dataclass(slots=True, frozen=True)
class BoxConfig:
    """Configuration for a template box.

    Attributes:
        debug: Re-parse file-sourced sets before every render. Only has an
            effect for boxes backed by a live directory.
        autoescape: HTML-escape expression output (default: True for page
            templates).
        trim_blocks: Remove first newline after a block tag.
        lstrip_blocks: Strip leading whitespace before block tags.
        keep_trailing_newline: Preserve trailing newline in templates.
        strict_undefined: Fail rendering on unresolvable names instead of
            rendering them empty.
    """

    debug: bool = False
    autoescape: bool = True
    trim_blocks: bool = False
    lstrip_blocks: bool = False
    keep_trailing_newline: bool = True
    strict_undefined: bool = False

    @classmethod
    def from_env(cls, environ: "Mapping[str, str] | None" = None) -> "BoxConfig":
        """Build a config from TEMPLATEBOX_* environment variables.

        Recognizes TEMPLATEBOX_DEBUG and TEMPLATEBOX_AUTOESCAPE. Values
        1/true/yes/on (any case) are true; anything else set is false.

        Args:
            environ: Mapping to read from. Defaults to os.environ.

        Returns:
            A BoxConfig with unset variables left at their defaults.
        """
        env = os.environ if environ is None else environ
        return cls(
            debug=_env_flag(env, "TEMPLATEBOX_DEBUG", default=False),
            autoescape=_env_flag(env, "TEMPLATEBOX_AUTOESCAPE", default=True),
        )


DEFAULT_CONFIG = BoxConfig()
