"""Tests for render context building."""

from dataclasses import dataclass
from types import MappingProxyType

import pytest
from pydantic import BaseModel

from templatebox import build_context


class Author(BaseModel):
    name: str
    email: str | None = None


@dataclass
class Post:
    title: str
    tags: list[str]


class Draft:
    def __init__(self, title: str, words: int) -> None:
        self.title = title
        self.words = words


class Slotted:
    __slots__ = ()


class TestBuildContext:
    def test_none_is_empty_context(self) -> None:
        assert build_context(None) == {}

    def test_mapping_is_copied(self) -> None:
        data = {"a": 1}

        context = build_context(data)
        context["b"] = 2

        assert data == {"a": 1}

    def test_read_only_mapping(self) -> None:
        assert build_context(MappingProxyType({"a": 1})) == {"a": 1}

    def test_pydantic_model_is_dumped(self) -> None:
        assert build_context(Author(name="Ann")) == {"name": "Ann", "email": None}

    def test_dataclass_instance(self) -> None:
        context = build_context(Post(title="T", tags=["x"]))

        assert context == {"title": "T", "tags": ["x"]}

    def test_plain_object_exposes_attributes(self) -> None:
        assert build_context(Draft("Home", 3)) == {"title": "Home", "words": 3}

    def test_plain_object_attributes_are_copied(self) -> None:
        draft = Draft("Home", 3)

        context = build_context(draft)
        context["title"] = "Other"

        assert draft.title == "Home"

    def test_classes_are_bound_as_data(self) -> None:
        assert build_context(Post) == {"data": Post}

    @pytest.mark.parametrize(
        "data", [42, "text", ["a"], (1, 2), object(), Slotted()]
    )
    def test_objects_without_attributes_are_bound_as_data(self, data: object) -> None:
        assert build_context(data) == {"data": data}
