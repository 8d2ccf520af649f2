"""Object factories used to materialize absent intermediate values."""

import collections.abc
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict

from metaobject.exceptions import ObjectCreationError
from metaobject.type_metadata import normalize_type, runtime_class

logger = logging.getLogger(__name__)

# Abstract or generic collection types -> concrete class to construct
_CONCRETE_TYPES: Dict[Any, type] = {
    object: dict,
    collections.abc.Iterable: list,
    collections.abc.Collection: list,
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Set: set,
    collections.abc.MutableSet: set,
    collections.abc.Mapping: dict,
    collections.abc.MutableMapping: dict,
}


class ObjectFactory(ABC):
    """Creates new instances of declared types."""

    @abstractmethod
    def create(self, type_: Any, *args, **kwargs) -> Any:
        """Create a new instance of ``type_``."""

    def is_collection(self, type_: Any) -> bool:
        """True if ``type_`` is a (non-string) collection type."""
        cls = runtime_class(type_)
        if not isinstance(cls, type) or issubclass(cls, (str, bytes, bytearray)):
            return False
        return issubclass(cls, collections.abc.Collection)


class DefaultObjectFactory(ObjectFactory):
    """Calls the constructor of the resolved concrete class.

    Generic aliases resolve to their runtime class (``List[Item]`` -> ``list``)
    and abstract collection interfaces to a concrete implementation
    (``Mapping`` -> ``dict``). ``object`` and ``Any`` resolve to ``dict`` so an
    untyped intermediate becomes an open mapping.
    """

    def create(self, type_: Any, *args, **kwargs) -> Any:
        concrete = self.resolve_type(type_)
        try:
            instance = concrete(*args, **kwargs)
        except Exception as e:
            raise ObjectCreationError(concrete, e) from e
        logger.debug(f"Created {concrete.__name__} instance for declared type {type_!r}")
        return instance

    def resolve_type(self, type_: Any) -> type:
        cls = runtime_class(normalize_type(type_))
        cls = _CONCRETE_TYPES.get(cls, cls)
        if not isinstance(cls, type):
            raise ObjectCreationError(type_, TypeError(f"{type_!r} is not a class"))
        return cls
