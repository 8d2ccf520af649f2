"""
Property path tokenizer.

Splits a property path such as ``order.items[2].price`` into segments. Each
segment knows its own name, its optional numeric index and the unparsed
remainder of the path, so callers can walk the path one segment at a time:

    >>> segment = tokenize("order.items[2].price")
    >>> segment.name, segment.children
    ('order', 'items[2].price')
    >>> segment.next().index
    2
"""

import re
from dataclasses import dataclass
from typing import Iterator, Optional, Union

from metaobject.exceptions import PathSyntaxError

_SEGMENT_RE = re.compile(r'^(?P<name>[^.\[\]]*)(?:\[(?P<index>[^\[\]]*)\])?$')


@dataclass(frozen=True)
class PathSegment:
    """One ``name[index]`` unit of a property path.

    Attributes:
        name: Property or key name ("" for a bare ``[0]`` segment)
        index: Bracketed integer index, or None when the segment has no brackets
        indexed_name: The segment text as written (``items[2]``)
        children: Everything after the first dot, "" at the last segment
    """
    name: str
    index: Optional[int]
    indexed_name: str
    children: str = ""

    @property
    def has_next(self) -> bool:
        return bool(self.children)

    def next(self) -> 'PathSegment':
        """Tokenize the remainder of the path."""
        if not self.children:
            raise ValueError(f"'{self.indexed_name}' is the last segment of the path")
        return tokenize(self.children)

    def __iter__(self) -> Iterator['PathSegment']:
        segment = self
        while True:
            yield segment
            if not segment.has_next:
                return
            segment = segment.next()

    def __str__(self) -> str:
        return f"{self.indexed_name}.{self.children}" if self.children else self.indexed_name


def tokenize(path: Union[str, PathSegment]) -> PathSegment:
    """Parse the head segment of ``path``.

    Args:
        path: Dotted/bracketed property path, or an already tokenized segment

    Returns:
        PathSegment for the first unit of the path

    Raises:
        PathSyntaxError: Empty path, empty segment, unbalanced or non-numeric brackets
    """
    if isinstance(path, PathSegment):
        return path
    if not isinstance(path, str) or not path:
        raise PathSyntaxError(str(path), "path must be a non-empty string")

    head, dot, children = path.partition('.')
    if dot and not children:
        raise PathSyntaxError(path, "path ends with '.'")

    match = _SEGMENT_RE.match(head)
    if match is None:
        raise PathSyntaxError(path, f"malformed segment '{head}'")

    name = match.group('name')
    index_text = match.group('index')
    index = None
    if index_text is not None:
        if not (index_text.isascii() and index_text.isdigit()):
            raise PathSyntaxError(path, f"index '{index_text}' is not a non-negative integer")
        index = int(index_text)
    elif not name:
        raise PathSyntaxError(path, "empty segment")

    return PathSegment(name=name, index=index, indexed_name=head, children=children)
