"""
Representation wrappers.

A wrapper resolves a single path segment against one value. There is one
wrapper per representation kind:

- BeanWrapper: structured records (dataclasses, plain classes). Properties come
  from TypeMetadata, so an unknown name is an error.
- MapWrapper: mappings. Keys are open-ended, so an unknown key reads as None
  and writing one creates it.
- CollectionWrapper: sequences. Only bare ``[index]`` segments and add/add_all.

Multi-segment paths are never walked here. Whenever a query needs the value
behind a segment, the wrapper asks its MetaObject (the navigation context),
which selects the right wrapper for that value and recurses.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, MutableMapping, MutableSequence, Sequence
from typing import TYPE_CHECKING, Any, Iterable, Optional, Set

from metaobject.exceptions import (
    IndexOutOfRangeError,
    NotASequenceError,
    PropertyInstantiationError,
    ReflectionError,
    UnsupportedOperationError,
)
from metaobject.object_factory import ObjectFactory
from metaobject.property_tokenizer import PathSegment, tokenize
from metaobject.type_metadata import SCALAR_TYPES, TypeMetadata, element_type

if TYPE_CHECKING:
    from metaobject.meta_object import MetaObject

logger = logging.getLogger(__name__)


class ObjectWrapper(ABC):
    """Uniform single-segment access to one wrapped value."""

    @abstractmethod
    def get(self, segment: PathSegment) -> Any:
        """Value behind one segment."""

    @abstractmethod
    def set(self, segment: PathSegment, value: Any) -> None:
        """Store ``value`` behind one segment."""

    @abstractmethod
    def find_property(self, name: str, use_relaxed_casing: bool = False) -> Optional[str]:
        pass

    @abstractmethod
    def getter_names(self) -> Set[str]:
        pass

    @abstractmethod
    def setter_names(self) -> Set[str]:
        pass

    @abstractmethod
    def getter_type(self, name: str) -> Any:
        pass

    @abstractmethod
    def setter_type(self, name: str) -> Any:
        pass

    @abstractmethod
    def has_getter(self, name: str) -> bool:
        pass

    @abstractmethod
    def has_setter(self, name: str) -> bool:
        pass

    @abstractmethod
    def instantiate_property_value(self, name: str, segment: PathSegment,
                                   object_factory: ObjectFactory) -> 'MetaObject':
        """Create the absent value behind ``segment``, store it, and return it wrapped."""

    @abstractmethod
    def is_collection(self) -> bool:
        pass

    @abstractmethod
    def add(self, element: Any) -> None:
        pass

    @abstractmethod
    def add_all(self, elements: Iterable[Any]) -> None:
        pass


class ObjectWrapperFactory(ABC):
    """Hook for supplying custom wrappers for specific values."""

    @abstractmethod
    def has_wrapper_for(self, obj: Any) -> bool:
        pass

    @abstractmethod
    def get_wrapper_for(self, meta_object: 'MetaObject', obj: Any) -> ObjectWrapper:
        pass


class DefaultObjectWrapperFactory(ObjectWrapperFactory):
    """Claims no values; the built-in wrappers handle everything."""

    def has_wrapper_for(self, obj: Any) -> bool:
        return False

    def get_wrapper_for(self, meta_object: 'MetaObject', obj: Any) -> ObjectWrapper:
        raise ReflectionError(
            "DefaultObjectWrapperFactory never provides a wrapper; "
            "has_wrapper_for() should have been checked first"
        )


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, SCALAR_TYPES)


class BaseWrapper(ObjectWrapper):
    """Indexed-access helpers shared by the concrete wrappers."""

    def __init__(self, meta_object: 'MetaObject', obj: Any):
        self.meta_object = meta_object
        self.object = obj

    def _resolve_collection(self, segment: PathSegment) -> Any:
        # A bare "[0]" segment indexes the wrapped value itself
        if not segment.name:
            return self.object
        return self.meta_object.get_value(segment.name)

    def _get_collection_value(self, segment: PathSegment, collection: Any) -> Any:
        if collection is None:
            return None
        if isinstance(collection, Mapping):
            return collection.get(segment.index)
        if _is_sequence(collection):
            if segment.index >= len(collection):
                raise IndexOutOfRangeError(segment.name, segment.index, len(collection))
            return collection[segment.index]
        raise NotASequenceError(segment.name, type(collection))

    def _set_collection_value(self, segment: PathSegment, collection: Any, value: Any) -> None:
        if isinstance(collection, MutableMapping):
            collection[segment.index] = value
        elif isinstance(collection, MutableSequence):
            size = len(collection)
            if segment.index < size:
                collection[segment.index] = value
            elif segment.index == size:
                collection.append(value)
            else:
                raise IndexOutOfRangeError(segment.name, segment.index, size)
        else:
            raise NotASequenceError(segment.name, type(collection))

    def _collection_type(self, segment: PathSegment) -> Any:
        """Type to construct when the collection behind an indexed segment is absent."""
        return list

    def _element_type(self, segment: PathSegment) -> Any:
        """Type to construct for a new element of an indexed segment."""
        return dict

    def _instantiate_element(self, name: str, segment: PathSegment,
                             object_factory: ObjectFactory) -> 'MetaObject':
        """Materialize ``segment.name[segment.index]``, creating the collection too if needed."""
        holder = PathSegment(segment.name, None, segment.name)
        collection = self._resolve_collection(segment)
        target_type = self._collection_type(segment)
        try:
            if collection is None:
                collection = object_factory.create(target_type)
                self.set(holder, collection)
                logger.debug(f"Instantiated collection '{segment.name}' for path '{name}'")
            target_type = self._element_type(segment)
            element = object_factory.create(target_type)
            # Fills a None slot, appends at len(collection), raises past the end
            self._set_collection_value(segment, collection, element)
        except IndexOutOfRangeError:
            raise
        except Exception as e:
            raise PropertyInstantiationError(segment.indexed_name, target_type, e) from e

        logger.debug(f"Instantiated element '{segment.indexed_name}' for path '{name}'")
        return self.meta_object.for_child(element)

    def is_collection(self) -> bool:
        return False

    def add(self, element: Any) -> None:
        raise UnsupportedOperationError(f"{type(self).__name__} does not support add()")

    def add_all(self, elements: Iterable[Any]) -> None:
        raise UnsupportedOperationError(f"{type(self).__name__} does not support add_all()")


class BeanWrapper(BaseWrapper):
    """Wrapper for structured records, backed by cached TypeMetadata."""

    def __init__(self, meta_object: 'MetaObject', obj: Any):
        super().__init__(meta_object, obj)
        self.metadata = TypeMetadata.for_type(type(obj))

    def get(self, segment: PathSegment) -> Any:
        if segment.index is not None:
            collection = self._resolve_collection(segment)
            if collection is None:
                # An unset declared collection has no elements to index
                raise IndexOutOfRangeError(segment.name, segment.index, 0)
            return self._get_collection_value(segment, collection)
        return self.metadata.get_getter_invoker(segment.name).invoke(self.object)

    def set(self, segment: PathSegment, value: Any) -> None:
        if segment.index is not None:
            collection = self._resolve_collection(segment)
            self._set_collection_value(segment, collection, value)
        else:
            self.metadata.get_setter_invoker(segment.name).invoke(self.object, value)

    def find_property(self, name: str, use_relaxed_casing: bool = False) -> Optional[str]:
        return self.metadata.find_property(name, use_relaxed_casing)

    def getter_names(self) -> Set[str]:
        return self.metadata.getter_names()

    def setter_names(self) -> Set[str]:
        return self.metadata.setter_names()

    def getter_type(self, name: str) -> Any:
        segment = tokenize(name)
        if segment.has_next:
            child = self.meta_object.meta_object_for_segment(segment)
            if child is not None:
                return child.getter_type(segment.children)
        return self.metadata.getter_type(name)

    def setter_type(self, name: str) -> Any:
        segment = tokenize(name)
        if segment.has_next:
            child = self.meta_object.meta_object_for_segment(segment)
            if child is not None:
                return child.setter_type(segment.children)
        return self.metadata.setter_type(name)

    def has_getter(self, name: str) -> bool:
        segment = tokenize(name)
        if not segment.has_next:
            return self.metadata.has_getter(name)
        if not self.metadata.has_getter(segment.indexed_name):
            return False
        child = self.meta_object.meta_object_for_segment(segment)
        if child is None:
            return self.metadata.has_getter(name)
        return child.has_getter(segment.children)

    def has_setter(self, name: str) -> bool:
        # Writes are attempted optimistically; an unknown property fails at set time
        return True

    def _collection_type(self, segment: PathSegment) -> Any:
        return self.metadata.setter_type(segment.name)

    def _element_type(self, segment: PathSegment) -> Any:
        return element_type(self.metadata.setter_type(segment.name))

    def instantiate_property_value(self, name: str, segment: PathSegment,
                                   object_factory: ObjectFactory) -> 'MetaObject':
        if segment.index is not None:
            return self._instantiate_element(name, segment, object_factory)
        target_type = self.metadata.setter_type(segment.name)
        try:
            new_object = object_factory.create(target_type)
            self.set(segment, new_object)
        except Exception as e:
            raise PropertyInstantiationError(segment.name, target_type, e) from e
        logger.debug(
            f"Instantiated {type(new_object).__name__} for '{segment.name}' "
            f"on {type(self.object).__name__} (path '{name}')"
        )
        return self.meta_object.for_child(new_object)


class MapWrapper(BaseWrapper):
    """Wrapper for mappings. Absent keys read as None; any key can be written."""

    def get(self, segment: PathSegment) -> Any:
        if segment.index is not None:
            collection = self._resolve_collection(segment)
            return self._get_collection_value(segment, collection)
        return self.object.get(segment.name)

    def set(self, segment: PathSegment, value: Any) -> None:
        if segment.index is not None:
            collection = self._resolve_collection(segment)
            if collection is None:
                collection = []
                self.object[segment.name] = collection
            self._set_collection_value(segment, collection, value)
        else:
            self.object[segment.name] = value

    def find_property(self, name: str, use_relaxed_casing: bool = False) -> Optional[str]:
        return name

    def getter_names(self) -> Set[str]:
        return set(self.object.keys())

    def setter_names(self) -> Set[str]:
        return set(self.object.keys())

    def _current_type(self, segment: PathSegment) -> Any:
        try:
            value = self.get(segment)
        except IndexOutOfRangeError:
            if segment.index is None:
                raise
            return object
        return type(value) if value is not None else object

    def _has_entry(self, segment: PathSegment) -> bool:
        """True if the key exists and, for ``key[i]``, so does element ``i``."""
        if segment.name not in self.object:
            return False
        if segment.index is None:
            return True
        collection = self.object[segment.name]
        if isinstance(collection, Mapping):
            return segment.index in collection
        return _is_sequence(collection) and segment.index < len(collection)

    def getter_type(self, name: str) -> Any:
        segment = tokenize(name)
        if segment.has_next:
            child = self.meta_object.meta_object_for_segment(segment)
            if child is None:
                return object
            return child.getter_type(segment.children)
        return self._current_type(segment)

    def setter_type(self, name: str) -> Any:
        segment = tokenize(name)
        if segment.has_next:
            child = self.meta_object.meta_object_for_segment(segment)
            if child is None:
                return object
            return child.setter_type(segment.children)
        return self._current_type(segment)

    def has_getter(self, name: str) -> bool:
        segment = tokenize(name)
        if not self._has_entry(segment):
            return False
        if not segment.has_next:
            return True
        child = self.meta_object.meta_object_for_segment(segment)
        if child is None:
            return True
        return child.has_getter(segment.children)

    def has_setter(self, name: str) -> bool:
        return True

    def instantiate_property_value(self, name: str, segment: PathSegment,
                                   object_factory: ObjectFactory) -> 'MetaObject':
        if segment.index is not None:
            return self._instantiate_element(name, segment, object_factory)
        new_map = {}
        try:
            self.set(segment, new_map)
        except Exception as e:
            raise PropertyInstantiationError(segment.name, dict, e) from e
        logger.debug(f"Instantiated mapping for key '{segment.name}' (path '{name}')")
        return self.meta_object.for_child(new_map)


class CollectionWrapper(BaseWrapper):
    """Wrapper for sequence roots: bare ``[index]`` segments plus add/add_all."""

    def _require_index(self, segment: PathSegment) -> None:
        if segment.name or segment.index is None:
            raise UnsupportedOperationError(
                f"Sequences only support '[index]' segments, got '{segment.indexed_name}'"
            )

    def get(self, segment: PathSegment) -> Any:
        self._require_index(segment)
        return self._get_collection_value(segment, self.object)

    def set(self, segment: PathSegment, value: Any) -> None:
        self._require_index(segment)
        self._set_collection_value(segment, self.object, value)

    def find_property(self, name: str, use_relaxed_casing: bool = False) -> Optional[str]:
        raise UnsupportedOperationError("Sequences have no named properties")

    def getter_names(self) -> Set[str]:
        raise UnsupportedOperationError("Sequences have no named properties")

    def setter_names(self) -> Set[str]:
        raise UnsupportedOperationError("Sequences have no named properties")

    def getter_type(self, name: str) -> Any:
        raise UnsupportedOperationError("Sequences have no named properties")

    def setter_type(self, name: str) -> Any:
        raise UnsupportedOperationError("Sequences have no named properties")

    def has_getter(self, name: str) -> bool:
        raise UnsupportedOperationError("Sequences have no named properties")

    def has_setter(self, name: str) -> bool:
        raise UnsupportedOperationError("Sequences have no named properties")

    def instantiate_property_value(self, name: str, segment: PathSegment,
                                   object_factory: ObjectFactory) -> 'MetaObject':
        self._require_index(segment)
        return self._instantiate_element(name, segment, object_factory)

    def is_collection(self) -> bool:
        return True

    def add(self, element: Any) -> None:
        if not isinstance(self.object, MutableSequence):
            raise UnsupportedOperationError(f"{type(self.object).__name__} is immutable")
        self.object.append(element)

    def add_all(self, elements: Iterable[Any]) -> None:
        if not isinstance(self.object, MutableSequence):
            raise UnsupportedOperationError(f"{type(self.object).__name__} is immutable")
        self.object.extend(elements)
