"""
Property-path access over nested records, mappings and sequences.

This package reads and writes values deep inside arbitrary object graphs with a
single path expression such as ``order.items[2].price``, without the caller
knowing whether each step is a dataclass, a plain object, a dict or a list.

Key Features:
- One path syntax for attributes, mapping keys and list indices
- Deep writes create missing intermediates (typed via declared annotations)
- Type queries that work the same on typed records and untyped mappings
- Cached per-class property metadata
- Cache SPI with blocking, LRU, synchronized and token-flushed providers

Quick Start:
    >>> from metaobject import assign, resolve
    >>> doc = {}
    >>> assign(doc, "a.b[0].c", 5)
    >>> doc
    {'a': {'b': [{'c': 5}]}}
    >>> resolve(doc, "a.b[0].c")
    5

Architecture:
    property_tokenizer -> PathSegment (one ``name[index]`` unit at a time)
    type_metadata      -> TypeMetadata (which properties a class declares)
    wrapper            -> BeanWrapper / MapWrapper / CollectionWrapper
    meta_object        -> MetaObject (recursive walk, lazy instantiation)

    Records fail fast on unknown properties (NoSuchPropertyError); mappings
    treat unknown keys as absent and accept any new key.

Modules:
    - property_tokenizer: Path segment parsing
    - type_metadata: Per-class property metadata and invokers
    - object_factory: Instantiation of declared types
    - wrapper: Representation wrappers
    - meta_object: Navigation context and module-level helpers
    - config: Default collaborators and scoped overrides
    - cache, cache_decorators, token_cache: Cache SPI and providers
    - exceptions: Error hierarchy
"""

# Exceptions
from metaobject.exceptions import (
    ReflectionError,
    PathSyntaxError,
    NoSuchPropertyError,
    IndexOutOfRangeError,
    NotASequenceError,
    PropertyInstantiationError,
    UnsupportedOperationError,
    UnsupportedRepresentationError,
    ObjectCreationError,
    CacheError,
)

# Tokenizer
from metaobject.property_tokenizer import PathSegment, tokenize

# Metadata
from metaobject.type_metadata import (
    TypeMetadata,
    GetterInvoker,
    SetterInvoker,
    clear_metadata_cache,
    is_record_type,
)

# Factories
from metaobject.object_factory import ObjectFactory, DefaultObjectFactory

# Wrappers
from metaobject.wrapper import (
    ObjectWrapper,
    BaseWrapper,
    BeanWrapper,
    MapWrapper,
    CollectionWrapper,
    ObjectWrapperFactory,
    DefaultObjectWrapperFactory,
)

# Configuration
from metaobject.config import (
    ReflectionConfig,
    get_reflection_config,
    set_reflection_config,
    reset_reflection_config,
    reflection_context,
)

# Navigation
from metaobject.meta_object import (
    MetaObject,
    RepresentationKind,
    representation_kind,
    meta_object,
    resolve,
    assign,
)

# Cache SPI
from metaobject.cache import (
    Cache,
    CacheKey,
    PerpetualCache,
    get_cache,
    register_cache,
    remove_cache,
    clear_cache_registry,
)
from metaobject.cache_decorators import LruCache, BlockingCache, SynchronizedCache
from metaobject.token_cache import TokenCache

__all__ = [
    # Exceptions
    'ReflectionError',
    'PathSyntaxError',
    'NoSuchPropertyError',
    'IndexOutOfRangeError',
    'NotASequenceError',
    'PropertyInstantiationError',
    'UnsupportedOperationError',
    'UnsupportedRepresentationError',
    'ObjectCreationError',
    'CacheError',
    # Tokenizer
    'PathSegment',
    'tokenize',
    # Metadata
    'TypeMetadata',
    'GetterInvoker',
    'SetterInvoker',
    'clear_metadata_cache',
    'is_record_type',
    # Factories
    'ObjectFactory',
    'DefaultObjectFactory',
    # Wrappers
    'ObjectWrapper',
    'BaseWrapper',
    'BeanWrapper',
    'MapWrapper',
    'CollectionWrapper',
    'ObjectWrapperFactory',
    'DefaultObjectWrapperFactory',
    # Configuration
    'ReflectionConfig',
    'get_reflection_config',
    'set_reflection_config',
    'reset_reflection_config',
    'reflection_context',
    # Navigation
    'MetaObject',
    'RepresentationKind',
    'representation_kind',
    'meta_object',
    'resolve',
    'assign',
    # Cache SPI
    'Cache',
    'CacheKey',
    'PerpetualCache',
    'get_cache',
    'register_cache',
    'remove_cache',
    'clear_cache_registry',
    'LruCache',
    'BlockingCache',
    'SynchronizedCache',
    'TokenCache',
]

__version__ = '1.0.0'
__description__ = 'Property-path access over nested records, mappings and sequences'
