"""Backing key/value registry.

This module defines :class:`RegistryEntry` (the descriptor for one registered
key) and :class:`Registry` (the key-to-entry store the container registers
into). An entry holds either an already materialized value or a factory that
produces the value on first resolution.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

from .exceptions import (
    ComponentCreationError,
    ComponentNotFoundError,
    ContainerFrozenError,
    DuplicateRegistrationError,
)

_logger = logging.getLogger(__name__)

Factory = Callable[[], Any]

_UNSET = object()


@dataclass
class RegistryEntry:
    """Descriptor for a registered key.

    Attributes:
        key: The registration key.
        factory: Zero-argument callable producing the value, if lazy.
        memoize: Whether the factory result is cached after the first call.
        concrete_class: The component class behind the entry, if known.
    """
    key: str
    factory: Optional[Factory] = None
    memoize: bool = True
    concrete_class: Optional[type] = None
    _value: Any = field(default=_UNSET, repr=False)

    @property
    def materialized(self) -> bool:
        return self._value is not _UNSET


class Registry:
    """Key-to-entry store.

    Every key is registered at most once; registering an existing key is an
    error, so callers check :meth:`has` first.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, RegistryEntry] = {}
        self._frozen = False

    def register(
        self,
        key: str,
        value: Any = _UNSET,
        *,
        factory: Optional[Factory] = None,
        memoize: bool = True,
        concrete_class: Optional[type] = None,
    ) -> RegistryEntry:
        """Register a value or a factory under *key*.

        Args:
            key: The registration key.
            value: An already materialized value.
            factory: A zero-argument callable; mutually exclusive with *value*.
            memoize: Cache the factory result after the first resolution.
            concrete_class: The component class, kept as metadata.

        Raises:
            ContainerFrozenError: If the registry is frozen.
            DuplicateRegistrationError: If *key* is already registered.
        """
        if self._frozen:
            raise ContainerFrozenError(f"register '{key}'")
        if key in self._entries:
            raise DuplicateRegistrationError(key)
        if (value is _UNSET) == (factory is None):
            raise TypeError("register() takes exactly one of value or factory")
        entry = RegistryEntry(key=key, factory=factory, memoize=memoize, concrete_class=concrete_class)
        if factory is None:
            entry._value = value
        self._entries[key] = entry
        _logger.debug("Registered '%s' (%s)", key, "factory" if factory else "value")
        return entry

    def has(self, key: str) -> bool:
        return key in self._entries

    __contains__ = has

    def entry(self, key: str) -> RegistryEntry:
        if key not in self._entries:
            raise ComponentNotFoundError(key)
        return self._entries[key]

    def resolve(self, key: str) -> Any:
        """Return the value for *key*, running its factory on first access.

        Raises:
            ComponentNotFoundError: If *key* is not registered.
            ComponentCreationError: If the factory raises; nothing is cached.
        """
        entry = self.entry(key)
        if entry.materialized:
            return entry._value
        try:
            value = entry.factory()
        except ComponentNotFoundError:
            raise
        except Exception as creation_error:
            raise ComponentCreationError(key, creation_error) from creation_error
        if entry.memoize:
            entry._value = value
        return value

    def keys(self) -> Tuple[str, ...]:
        return tuple(self._entries)

    def items(self):
        return list(self._entries.items())

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __len__(self) -> int:
        return len(self._entries)
