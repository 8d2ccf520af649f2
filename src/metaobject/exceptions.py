"""
Exception hierarchy for property-path access.

Every error raised by the package derives from ReflectionError. Concrete errors
also derive from the closest builtin so callers can catch them the ordinary way
(AttributeError for a missing property, IndexError for a bad index, ...).
"""

from typing import Any, Optional


class ReflectionError(Exception):
    """Base class for all metaobject errors."""


class PathSyntaxError(ReflectionError, ValueError):
    """Raised when a property path cannot be tokenized."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid property path '{path}': {reason}")


class NoSuchPropertyError(ReflectionError, AttributeError):
    """A structured record has no property with the requested name."""

    def __init__(self, property_name: str, owner_type: Optional[type] = None,
                 accessor: Optional[str] = None):
        self.property_name = property_name
        self.owner_type = owner_type
        self.accessor = accessor
        owner = getattr(owner_type, '__name__', owner_type)
        if accessor:
            message = f"There is no {accessor} for property named '{property_name}' in '{owner}'"
        else:
            message = f"There is no property named '{property_name}' in '{owner}'"
        super().__init__(message)


class IndexOutOfRangeError(ReflectionError, IndexError):
    """Indexed access past the end of a sequence."""

    def __init__(self, property_name: str, index: int, size: int):
        self.property_name = property_name
        self.index = index
        self.size = size
        super().__init__(
            f"Index {index} is out of range for property '{property_name}' (size {size})"
        )


class NotASequenceError(ReflectionError, TypeError):
    """Indexed access on a value that cannot be indexed."""

    def __init__(self, property_name: str, value_type: type):
        self.property_name = property_name
        self.value_type = value_type
        super().__init__(
            f"The '{property_name}' property of type {value_type.__name__} "
            f"is not a sequence or mapping"
        )


class PropertyInstantiationError(ReflectionError):
    """An absent intermediate value could not be created or assigned."""

    def __init__(self, property_name: str, target_type: Any, cause: BaseException):
        self.property_name = property_name
        self.target_type = target_type
        self.cause = cause
        type_name = getattr(target_type, '__name__', repr(target_type))
        super().__init__(
            f"Cannot set value of property '{property_name}' because '{property_name}' "
            f"is None and cannot be instantiated as {type_name}. Cause: {cause!r}"
        )


class UnsupportedOperationError(ReflectionError, NotImplementedError):
    """Operation not available for this representation kind."""


class UnsupportedRepresentationError(ReflectionError, TypeError):
    """Value is neither a structured record, a mapping nor a sequence."""

    def __init__(self, value_type: type):
        self.value_type = value_type
        super().__init__(
            f"Cannot navigate into a value of type {value_type.__name__}: "
            f"expected a structured record, a mapping or a sequence"
        )


class ObjectCreationError(ReflectionError):
    """The object factory failed to construct an instance."""

    def __init__(self, target_type: Any, cause: BaseException):
        self.target_type = target_type
        self.cause = cause
        type_name = getattr(target_type, '__name__', repr(target_type))
        super().__init__(f"Error instantiating {type_name}. Cause: {cause!r}")


class CacheError(ReflectionError):
    """Raised by cache providers."""
