"""Tests for the default object factory."""
import typing
from typing import Any, List, Literal, Mapping, Optional, Sequence

import pytest

from metaobject import DefaultObjectFactory, ObjectCreationError
from sample_records import Engine, Item


@pytest.fixture
def factory():
    return DefaultObjectFactory()


@pytest.mark.parametrize("declared,expected", [
    (dict, {}),
    (list, []),
    (List[int], []),
    (Sequence[str], []),
    (typing.MutableSequence, []),
    (Mapping, {}),
    (typing.Dict[str, int], {}),
    (typing.Set[int], set()),
    (object, {}),
    (Any, {}),
])
def test_collection_and_untyped_declarations(factory, declared, expected):
    created = factory.create(declared)
    assert created == expected
    assert type(created) is type(expected)


def test_optional_record(factory):
    assert factory.create(Optional[Item]) == Item()


def test_constructor_arguments_are_passed(factory):
    assert factory.create(Item, sku="A-1", price=1.5) == Item(sku="A-1", price=1.5)


def test_constructor_failure_is_wrapped(factory):
    with pytest.raises(ObjectCreationError) as exc_info:
        factory.create(Engine)
    assert exc_info.value.target_type is Engine
    assert isinstance(exc_info.value.__cause__, TypeError)


def test_non_class_declaration_is_rejected(factory):
    with pytest.raises(ObjectCreationError):
        factory.create(Literal["a"])


@pytest.mark.parametrize("declared,expected", [
    (list, True),
    (List[Item], True),
    (dict, True),
    (str, False),
    (Item, False),
])
def test_is_collection(factory, declared, expected):
    assert factory.is_collection(declared) is expected
