"""Rendering of compiled sets to output sinks."""

import dataclasses
from collections.abc import Mapping
from typing import TYPE_CHECKING, Protocol

from pydantic import BaseModel

if TYPE_CHECKING:
    from ._compile import CompiledSet

DATA_KEY = "data"


class TextSink(Protocol):
    """Anything with a ``write(str)`` method, e.g. a text file or StringIO."""

    def write(self, s: str, /) -> object: ...


def build_context(data: object) -> dict[str, object]:
    """Convert caller data into a template context.

    Mappings, Pydantic models, dataclass instances and plain objects with
    attributes expose their fields as top-level names. Anything else
    (scalars, lists, classes, slotted objects) is bound as ``data``.

    Args:
        data: Any caller data. None renders with an empty context.

    Returns:
        A new context dictionary.
    """
    if data is None:
        return {}
    if isinstance(data, BaseModel):
        return data.model_dump()
    if isinstance(data, Mapping):
        return dict(data)  # pyright: ignore[reportUnknownArgumentType]
    if isinstance(data, type):
        return {DATA_KEY: data}
    if dataclasses.is_dataclass(data):
        return dataclasses.asdict(data)
    if hasattr(data, "__dict__"):
        return dict(vars(data))
    return {DATA_KEY: data}


def stream_to(sink: TextSink, compiled: "CompiledSet", data: object) -> None:
    """Render a compiled set into a sink chunk by chunk.

    Chunks already written stay in the sink if rendering fails part way.
    """
    context = build_context(data)
    for chunk in compiled.generate(context):
        _ = sink.write(chunk)
