"""Tests for property path tokenization."""
from dataclasses import FrozenInstanceError

import pytest

from metaobject import PathSegment, PathSyntaxError, tokenize


def test_single_name():
    segment = tokenize("name")
    assert segment.name == "name"
    assert segment.index is None
    assert segment.indexed_name == "name"
    assert segment.children == ""
    assert not segment.has_next


def test_dotted_path_head_and_children():
    segment = tokenize("order.items[2].price")
    assert segment.name == "order"
    assert segment.children == "items[2].price"
    assert segment.has_next

    child = segment.next()
    assert child.name == "items"
    assert child.index == 2
    assert child.indexed_name == "items[2]"
    assert child.children == "price"


def test_iteration_yields_every_segment():
    parts = [(segment.name, segment.index) for segment in tokenize("a.b[0].c")]
    assert parts == [("a", None), ("b", 0), ("c", None)]


def test_bare_index_segment():
    segment = tokenize("[3].name")
    assert segment.name == ""
    assert segment.index == 3
    assert segment.children == "name"


def test_str_gives_back_remaining_path():
    assert str(tokenize("a.b[1].c")) == "a.b[1].c"
    assert str(tokenize("a.b[1].c").next()) == "b[1].c"


def test_tokenize_passes_segments_through():
    segment = tokenize("x.y")
    assert tokenize(segment) is segment


def test_next_on_last_segment_raises():
    with pytest.raises(ValueError):
        tokenize("leaf").next()


def test_segment_is_immutable():
    segment = PathSegment("a", None, "a")
    with pytest.raises(FrozenInstanceError):
        segment.name = "b"


@pytest.mark.parametrize("path", [
    "", ".", "a.", "a..b", "a[", "a[]", "a[x]", "a[-1]", "a[1]b", "a[0][1]", "a[²]",
])
def test_malformed_paths_raise(path):
    with pytest.raises(PathSyntaxError):
        list(tokenize(path))


def test_path_syntax_error_is_value_error():
    with pytest.raises(ValueError, match="a\\[x\\]"):
        tokenize("a[x]")
