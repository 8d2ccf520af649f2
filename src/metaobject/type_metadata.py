"""
Per-type property metadata for structured records.

TypeMetadata answers "which properties does this class expose, what are their
declared types and how do I read or write them" using pure stdlib
introspection:

- Dataclasses: dataclasses.fields() (frozen dataclasses expose no setters)
- Plain classes: class annotations, __slots__ and annotated __init__ parameters
- @property descriptors on either (setter only when fset is defined)

Metadata is built once per class and cached in a module-level registry, the same
way lazy classes are cached per base type.
"""

import collections
import collections.abc
import dataclasses
import inspect
import logging
import threading
import types
import typing
from typing import Any, ClassVar, Dict, Optional, Set, Tuple, TypeVar, Union, get_args, get_origin

from metaobject.exceptions import NoSuchPropertyError
from metaobject.property_tokenizer import PathSegment, tokenize

logger = logging.getLogger(__name__)

# Registry of built metadata, keyed by class
_metadata_cache: Dict[type, 'TypeMetadata'] = {}
_metadata_lock = threading.Lock()

# Values of these types are leaves, never navigated into as records
SCALAR_TYPES: Tuple[type, ...] = (
    str, bytes, bytearray, int, float, complex, bool, type(None),
)

_OPAQUE_TYPES: Tuple[type, ...] = (
    type, types.FunctionType, types.BuiltinFunctionType, types.MethodType, types.ModuleType,
)

_SEQUENCE_ORIGINS = (
    list, tuple, set, frozenset, collections.deque,
    collections.abc.Sequence, collections.abc.MutableSequence,
    collections.abc.Set, collections.abc.MutableSet,
    collections.abc.Collection, collections.abc.Iterable,
)

_MAPPING_ORIGINS = (
    dict, collections.OrderedDict, collections.defaultdict,
    collections.abc.Mapping, collections.abc.MutableMapping,
)


def normalize_type(declared: Any) -> Any:
    """Reduce a declared annotation to the type descriptor reported to callers.

    Optional[X] and ``X | None`` unwrap to X. Unresolvable string annotations,
    Any, bare TypeVars and multi-member unions degrade to ``object``.
    """
    if declared is None or declared is Any or isinstance(declared, (str, TypeVar)):
        return object
    origin = get_origin(declared)
    if origin is Union or origin is types.UnionType:
        members = [arg for arg in get_args(declared) if arg is not type(None)]
        if len(members) == 1:
            return normalize_type(members[0])
        return object
    return declared


def element_type(declared: Any) -> Any:
    """Element type of a generic collection annotation (value type for mappings)."""
    declared = normalize_type(declared)
    origin = get_origin(declared)
    args = get_args(declared)
    if origin is None or not args:
        return object
    if origin in _MAPPING_ORIGINS:
        return normalize_type(args[-1]) if len(args) == 2 else object
    if origin in _SEQUENCE_ORIGINS:
        return normalize_type(args[0])
    return object


def runtime_class(declared: Any) -> Any:
    """Class behind a declared type (``List[Item]`` -> ``list``)."""
    declared = normalize_type(declared)
    origin = get_origin(declared)
    return origin if isinstance(origin, type) else declared


def is_record_type(declared: Any) -> bool:
    """True when values of ``declared`` are navigated as structured records."""
    cls = normalize_type(declared)
    if get_origin(cls) is not None or not isinstance(cls, type) or cls is object:
        return False
    if issubclass(cls, SCALAR_TYPES + _OPAQUE_TYPES):
        return False
    return not issubclass(
        cls, (collections.abc.Mapping, collections.abc.Sequence, collections.abc.Set)
    )


def _is_class_var(declared: Any) -> bool:
    if isinstance(declared, str):
        return declared.startswith(('ClassVar', 'typing.ClassVar'))
    return declared is ClassVar or get_origin(declared) is ClassVar


def _resolve_type_hints(owner: Any) -> Dict[str, Any]:
    """get_type_hints() with a raw-annotation fallback for unresolvable forward refs."""
    try:
        return typing.get_type_hints(owner)
    except (NameError, TypeError, AttributeError) as e:
        logger.debug(f"Falling back to raw annotations for {owner!r}: {e}")
    if isinstance(owner, type):
        merged: Dict[str, Any] = {}
        for klass in reversed(owner.__mro__):
            try:
                merged.update(inspect.get_annotations(klass))
            except NameError:
                continue
        return merged
    return dict(getattr(owner, '__annotations__', {}))


def _slot_names(cls: type) -> Set[str]:
    names = set()
    for klass in cls.__mro__:
        slots = klass.__dict__.get('__slots__', ())
        if isinstance(slots, str):
            slots = (slots,)
        names.update(s for s in slots if s not in ('__dict__', '__weakref__'))
    return names


def _init_parameters(cls: type) -> Dict[str, Any]:
    """Annotated __init__ parameters, walking the MRO so subclasses win."""
    result: Dict[str, Any] = {}
    for klass in cls.__mro__:
        if klass is object or '__init__' not in klass.__dict__:
            continue
        init = klass.__dict__['__init__']
        try:
            sig = inspect.signature(init)
        except (ValueError, TypeError):
            continue
        hints = _resolve_type_hints(init)
        for name, param in sig.parameters.items():
            if name in ('self', 'cls') or name in result:
                continue
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue
            if param.annotation is inspect.Parameter.empty and name not in hints:
                continue
            result[name] = hints.get(name, param.annotation)
    return result


def _relaxed_key(name: str) -> str:
    return name.replace('_', '').upper()


class GetterInvoker:
    """Reads one property from a target instance."""

    def __init__(self, name: str, type_: Any, fget=None):
        self.name = name
        self.type = type_
        self._fget = fget

    def invoke(self, target: Any) -> Any:
        if self._fget is not None:
            return self._fget(target)
        # Declared but never assigned attributes read as absent
        return getattr(target, self.name, None)

    def __repr__(self):
        return f"GetterInvoker({self.name!r}, {self.type!r})"


class SetterInvoker:
    """Writes one property on a target instance."""

    def __init__(self, name: str, type_: Any, fset=None):
        self.name = name
        self.type = type_
        self._fset = fset

    def invoke(self, target: Any, value: Any) -> None:
        if self._fset is not None:
            self._fset(target, value)
        else:
            setattr(target, self.name, value)

    def __repr__(self):
        return f"SetterInvoker({self.name!r}, {self.type!r})"


class TypeMetadata:
    """Reflective view of the named properties declared by a class.

    Built through ``TypeMetadata.for_type(cls)`` so each class is introspected
    once. Names passed to the type queries may be full property paths
    (``customer.address.city``); nested segments are resolved through the
    declared types, and an indexed segment (``items[0]``) resolves to the
    element type of the declared collection.
    """

    def __init__(self, cls: type):
        self.type = cls
        self._getters: Dict[str, GetterInvoker] = {}
        self._setters: Dict[str, SetterInvoker] = {}
        self._relaxed_names: Dict[str, str] = {}
        self._discover()
        logger.debug(
            f"Built metadata for {cls.__name__}: getters={sorted(self._getters)}, "
            f"setters={sorted(self._setters)}"
        )

    @classmethod
    def for_type(cls, record_type: type) -> 'TypeMetadata':
        """Get cached metadata for ``record_type``, building it on first use."""
        metadata = _metadata_cache.get(record_type)
        if metadata is not None:
            return metadata
        with _metadata_lock:
            metadata = _metadata_cache.get(record_type)
            if metadata is None:
                metadata = cls(record_type)
                _metadata_cache[record_type] = metadata
        return metadata

    # ------------------------------------------------------------------
    # discovery
    # ------------------------------------------------------------------

    def _discover(self) -> None:
        cls = self.type
        hints = _resolve_type_hints(cls)

        if dataclasses.is_dataclass(cls):
            frozen = cls.__dataclass_params__.frozen
            for f in dataclasses.fields(cls):
                self._add_field(f.name, hints.get(f.name, f.type), writable=not frozen)
        else:
            for name, declared in hints.items():
                if not _is_class_var(declared):
                    self._add_field(name, declared)
            for name in _slot_names(cls):
                if name not in self._getters:
                    self._add_field(name, hints.get(name, object))
            for name, declared in _init_parameters(cls).items():
                if name not in self._getters:
                    self._add_field(name, declared)

        for name, prop in inspect.getmembers(cls, lambda member: isinstance(member, property)):
            self._add_property(name, prop)

    def _add_field(self, name: str, declared: Any, writable: bool = True) -> None:
        if name.startswith('_'):
            return
        declared = normalize_type(declared)
        self._getters[name] = GetterInvoker(name, declared)
        if writable:
            self._setters[name] = SetterInvoker(name, declared)
        self._relaxed_names[_relaxed_key(name)] = name

    def _add_property(self, name: str, prop: property) -> None:
        if name.startswith('_'):
            return
        # A property shadows any field or annotation of the same name
        self._getters.pop(name, None)
        self._setters.pop(name, None)

        getter_type = object
        if prop.fget is not None:
            getter_type = normalize_type(_resolve_type_hints(prop.fget).get('return'))
            self._getters[name] = GetterInvoker(name, getter_type, prop.fget)
        if prop.fset is not None:
            setter_type = getter_type
            hints = _resolve_type_hints(prop.fset)
            try:
                params = list(inspect.signature(prop.fset).parameters)
            except (ValueError, TypeError):
                params = []
            if len(params) >= 2 and params[1] in hints:
                setter_type = normalize_type(hints[params[1]])
            self._setters[name] = SetterInvoker(name, setter_type, prop.fset)
        self._relaxed_names[_relaxed_key(name)] = name

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    def _child_metadata(self, segment: PathSegment) -> Optional['TypeMetadata']:
        """Metadata for the declared type a segment navigates into, if it is a record."""
        declared = self._getter_type_for(segment)
        if not is_record_type(declared):
            return None
        return TypeMetadata.for_type(runtime_class(declared))

    def _getter_type_for(self, segment: PathSegment) -> Any:
        invoker = self._getters.get(segment.name)
        if invoker is None:
            raise NoSuchPropertyError(segment.name, self.type, accessor='getter')
        if segment.index is not None:
            return element_type(invoker.type)
        return invoker.type

    def find_property(self, name: str, relaxed_casing: bool = False) -> Optional[str]:
        """Canonical spelling of a property path, or None if any segment is unknown.

        With ``relaxed_casing`` a segment matches ignoring case and underscores,
        so ``user_name``, ``userName`` and ``USERNAME`` all find ``username``.
        """
        segment = tokenize(name)
        if segment.name in self._getters or segment.name in self._setters:
            canonical = segment.name
        elif relaxed_casing:
            canonical = self._relaxed_names.get(_relaxed_key(segment.name))
        else:
            canonical = None
        if canonical is None:
            return None

        if segment.index is not None:
            canonical = f"{canonical}[{segment.index}]"
        if not segment.has_next:
            return canonical

        resolved = PathSegment(canonical.split('[')[0], segment.index, canonical, segment.children)
        if resolved.name not in self._getters:
            return None
        child = self._child_metadata(resolved)
        if child is None:
            return None
        rest = child.find_property(segment.children, relaxed_casing)
        return f"{canonical}.{rest}" if rest is not None else None

    def has_getter(self, name: str) -> bool:
        segment = tokenize(name)
        if segment.name not in self._getters:
            return False
        if not segment.has_next:
            return True
        child = self._child_metadata(segment)
        return child is not None and child.has_getter(segment.children)

    def has_setter(self, name: str) -> bool:
        segment = tokenize(name)
        if not segment.has_next:
            return segment.name in self._setters
        if segment.name not in self._getters:
            return False
        child = self._child_metadata(segment)
        return child is not None and child.has_setter(segment.children)

    def getter_type(self, name: str) -> Any:
        """Declared read type of a property path; ``object`` past a non-record type."""
        segment = tokenize(name)
        if not segment.has_next:
            return self._getter_type_for(segment)
        child = self._child_metadata(segment)
        if child is None:
            return object
        return child.getter_type(segment.children)

    def setter_type(self, name: str) -> Any:
        """Declared write type of a property path; ``object`` past a non-record type."""
        segment = tokenize(name)
        if segment.has_next:
            child = self._child_metadata(segment)
            if child is None:
                return object
            return child.setter_type(segment.children)
        invoker = self._setters.get(segment.name)
        if invoker is None:
            raise NoSuchPropertyError(segment.name, self.type, accessor='setter')
        if segment.index is not None:
            return element_type(invoker.type)
        return invoker.type

    def get_getter_invoker(self, name: str) -> GetterInvoker:
        invoker = self._getters.get(name)
        if invoker is None:
            raise NoSuchPropertyError(name, self.type)
        return invoker

    def get_setter_invoker(self, name: str) -> SetterInvoker:
        invoker = self._setters.get(name)
        if invoker is None:
            if name in self._getters:
                raise NoSuchPropertyError(name, self.type, accessor='setter')
            raise NoSuchPropertyError(name, self.type)
        return invoker

    def getter_names(self) -> Set[str]:
        return set(self._getters)

    def setter_names(self) -> Set[str]:
        return set(self._setters)

    def __repr__(self):
        return f"TypeMetadata({self.type.__name__})"


def clear_metadata_cache() -> None:
    """Drop all cached metadata (tests, hot reload)."""
    with _metadata_lock:
        _metadata_cache.clear()
