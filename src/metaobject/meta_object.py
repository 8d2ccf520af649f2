"""
MetaObject: property-path navigation over records, mappings and sequences.

A MetaObject ties one value to the wrapper for its representation kind and to
the collaborators needed while walking a path (object factory, wrapper
factory). Multi-segment paths are walked recursively: the head segment is
resolved through the wrapper, the intermediate value gets its own MetaObject,
and the remainder of the path is delegated to it.

Reads never create anything: an absent intermediate value makes the whole read
return None. Writes materialize absent intermediates through the wrapper, so
``assign({}, "a.b[0].c", 5)`` leaves ``{"a": {"b": [{"c": 5}]}}``.

MetaObjects are cheap and meant to be created per call:

    >>> order = {"items": [{"price": 3}]}
    >>> resolve(order, "items[0].price")
    3
"""

import logging
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, Iterable, Optional, Set, Union

from metaobject.config import get_reflection_config
from metaobject.exceptions import IndexOutOfRangeError, UnsupportedRepresentationError
from metaobject.object_factory import ObjectFactory
from metaobject.property_tokenizer import PathSegment, tokenize
from metaobject.type_metadata import SCALAR_TYPES, is_record_type
from metaobject.wrapper import (
    BeanWrapper,
    CollectionWrapper,
    MapWrapper,
    ObjectWrapper,
    ObjectWrapperFactory,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, PathSegment]


class RepresentationKind(Enum):
    """The representation kinds a path can navigate through."""
    RECORD = "record"
    MAPPING = "mapping"
    SEQUENCE = "sequence"


def representation_kind(value: Any) -> RepresentationKind:
    """Classify ``value``.

    Raises:
        UnsupportedRepresentationError: Scalars, strings, sets, None, classes,
            functions and modules cannot be navigated into
    """
    if isinstance(value, Mapping):
        return RepresentationKind.MAPPING
    if isinstance(value, Sequence) and not isinstance(value, SCALAR_TYPES):
        return RepresentationKind.SEQUENCE
    if is_record_type(type(value)):
        return RepresentationKind.RECORD
    raise UnsupportedRepresentationError(type(value))


_WRAPPERS = {
    RepresentationKind.RECORD: BeanWrapper,
    RepresentationKind.MAPPING: MapWrapper,
    RepresentationKind.SEQUENCE: CollectionWrapper,
}


class MetaObject:
    """Navigation context for one value."""

    def __init__(self, obj: Any, object_factory: ObjectFactory,
                 object_wrapper_factory: ObjectWrapperFactory):
        self.original_object = obj
        self.object_factory = object_factory
        self.object_wrapper_factory = object_wrapper_factory

        if isinstance(obj, ObjectWrapper):
            self.object_wrapper = obj
        elif object_wrapper_factory.has_wrapper_for(obj):
            self.object_wrapper = object_wrapper_factory.get_wrapper_for(self, obj)
        else:
            self.object_wrapper = _WRAPPERS[representation_kind(obj)](self, obj)

    @classmethod
    def for_object(cls, obj: Any, object_factory: Optional[ObjectFactory] = None,
                   object_wrapper_factory: Optional[ObjectWrapperFactory] = None) -> 'MetaObject':
        """Create a MetaObject, taking unspecified collaborators from the active config."""
        config = get_reflection_config()
        return cls(
            obj,
            object_factory if object_factory is not None else config.object_factory,
            object_wrapper_factory if object_wrapper_factory is not None else config.object_wrapper_factory,
        )

    def for_child(self, value: Any) -> 'MetaObject':
        """MetaObject for an intermediate value, sharing this context's collaborators."""
        return MetaObject(value, self.object_factory, self.object_wrapper_factory)

    # ------------------------------------------------------------------
    # navigation
    # ------------------------------------------------------------------

    def get_value(self, name: PathLike) -> Any:
        """Read the value at a property path; None if any intermediate is absent."""
        segment = tokenize(name)
        if segment.has_next:
            child = self.meta_object_for_property(segment.indexed_name)
            if child is None:
                return None
            return child.get_value(segment.children)
        return self.object_wrapper.get(segment)

    def set_value(self, name: PathLike, value: Any) -> None:
        """Write ``value`` at a property path, creating absent intermediates.

        Writing None through an absent intermediate is a no-op: nothing is
        created just to hold a None.
        """
        segment = tokenize(name)
        if not segment.has_next:
            self.object_wrapper.set(segment, value)
            return

        child = self.meta_object_for_segment(segment)
        if child is None:
            if value is None:
                return
            child = self.object_wrapper.instantiate_property_value(
                str(segment), segment, self.object_factory
            )
        child.set_value(segment.children, value)

    def meta_object_for_segment(self, segment: PathSegment) -> Optional['MetaObject']:
        """Like meta_object_for_property(), but an index past the end counts as absent."""
        try:
            return self.meta_object_for_property(segment.indexed_name)
        except IndexOutOfRangeError:
            if segment.index is None:
                raise
            return None

    def meta_object_for_property(self, name: PathLike) -> Optional['MetaObject']:
        """MetaObject for the value at ``name``, or None if it is absent."""
        value = self.get_value(name)
        if value is None:
            return None
        return self.for_child(value)

    # ------------------------------------------------------------------
    # queries delegated to the wrapper
    # ------------------------------------------------------------------

    def find_property(self, name: str, use_relaxed_casing: Optional[bool] = None) -> Optional[str]:
        if use_relaxed_casing is None:
            use_relaxed_casing = get_reflection_config().relaxed_casing
        return self.object_wrapper.find_property(name, use_relaxed_casing)

    def getter_names(self) -> Set[str]:
        return self.object_wrapper.getter_names()

    def setter_names(self) -> Set[str]:
        return self.object_wrapper.setter_names()

    def getter_type(self, name: str) -> Any:
        return self.object_wrapper.getter_type(name)

    def setter_type(self, name: str) -> Any:
        return self.object_wrapper.setter_type(name)

    def has_getter(self, name: str) -> bool:
        return self.object_wrapper.has_getter(name)

    def has_setter(self, name: str) -> bool:
        return self.object_wrapper.has_setter(name)

    def is_collection(self) -> bool:
        return self.object_wrapper.is_collection()

    def add(self, element: Any) -> None:
        self.object_wrapper.add(element)

    def add_all(self, elements: Iterable[Any]) -> None:
        self.object_wrapper.add_all(elements)

    def __repr__(self):
        return f"MetaObject({type(self.original_object).__name__}, wrapper={type(self.object_wrapper).__name__})"


def meta_object(root: Any, object_factory: Optional[ObjectFactory] = None,
                object_wrapper_factory: Optional[ObjectWrapperFactory] = None) -> MetaObject:
    """Shorthand for MetaObject.for_object()."""
    return MetaObject.for_object(root, object_factory, object_wrapper_factory)


def resolve(root: Any, path: PathLike) -> Any:
    """Read the value at ``path`` inside ``root``."""
    return MetaObject.for_object(root).get_value(path)


def assign(root: Any, path: PathLike, value: Any) -> None:
    """Write ``value`` at ``path`` inside ``root``, creating missing intermediates."""
    logger.debug(f"assign {type(root).__name__}.{path} = {value!r}")
    MetaObject.for_object(root).set_value(path, value)
