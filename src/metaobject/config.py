"""
Reflection configuration.

Holds the collaborators a MetaObject uses when none are passed explicitly:
the object factory, the object wrapper factory and the default casing mode for
find_property(). A process-wide default can be replaced with
set_reflection_config(); reflection_context() overrides it for the current
context only (contextvars, so threads and asyncio tasks stay isolated).

Usage:
    with reflection_context(relaxed_casing=True):
        meta_object(user).find_property("USER_NAME")  # -> "username"
"""

import contextvars
import dataclasses
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Generator, Optional

from metaobject.object_factory import DefaultObjectFactory, ObjectFactory
from metaobject.wrapper import DefaultObjectWrapperFactory, ObjectWrapperFactory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReflectionConfig:
    """Collaborators used by MetaObject navigation."""
    object_factory: ObjectFactory = field(default_factory=DefaultObjectFactory)
    object_wrapper_factory: ObjectWrapperFactory = field(default_factory=DefaultObjectWrapperFactory)
    relaxed_casing: bool = False


_default_config = ReflectionConfig()

# Per-context override, None means "use the process default"
_active_config: contextvars.ContextVar[Optional[ReflectionConfig]] = contextvars.ContextVar(
    'active_reflection_config', default=None
)


def get_reflection_config() -> ReflectionConfig:
    """Active config: the innermost reflection_context(), else the process default."""
    config = _active_config.get()
    return config if config is not None else _default_config


def set_reflection_config(config: ReflectionConfig) -> None:
    """Replace the process-wide default config."""
    global _default_config
    _default_config = config
    logger.debug(f"Default reflection config set: {config}")


def reset_reflection_config() -> None:
    """Restore the built-in defaults."""
    set_reflection_config(ReflectionConfig())


@contextmanager
def reflection_context(**overrides) -> Generator[ReflectionConfig, None, None]:
    """Override config fields for the duration of the block.

    Args:
        **overrides: ReflectionConfig field values (object_factory,
                     object_wrapper_factory, relaxed_casing)
    """
    config = dataclasses.replace(get_reflection_config(), **overrides)
    token = _active_config.set(config)
    try:
        yield config
    finally:
        _active_config.reset(token)
