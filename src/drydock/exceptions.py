"""Exception hierarchy for drydock.

All framework-specific exceptions inherit from :class:`DrydockError`, making
it easy to catch any drydock error with a single ``except DrydockError``
clause.
"""

from typing import Any


class DrydockError(Exception):
    """Base exception for all drydock errors."""

    pass


class ConfigurationError(DrydockError):
    """Raised for configuration problems (bad settings, unreadable config files)."""

    def __init__(self, msg: str):
        super().__init__(msg)


class InvalidIdentifierError(ConfigurationError):
    """Raised when an identifier contains characters outside the segment charset.

    Attributes:
        identifier: The offending identifier.
    """

    def __init__(self, identifier: Any, reason: str = "invalid component identifier"):
        super().__init__(f"{reason}: {identifier!r}")
        self.identifier = identifier


class InvalidBootIdentifierError(InvalidIdentifierError):
    """Raised when a boot name is malformed or its boot file is missing."""

    def __init__(self, name: Any):
        super().__init__(name, "component identifier is invalid or boot file is missing")


class ResolutionError(DrydockError):
    """Raised when no load path contains the source file for an identifier.

    Attributes:
        identifier: The identifier that could not be resolved.
    """

    def __init__(self, identifier: Any, msg: str | None = None):
        super().__init__(msg or f"could not resolve source file for '{identifier}'")
        self.identifier = identifier


class ComponentNotFoundError(ResolutionError):
    """Raised when the backing registry has no entry for a key."""

    def __init__(self, key: Any):
        super().__init__(key, f"nothing registered with the key '{key}'")


class DuplicateRegistrationError(DrydockError):
    """Raised when a key is registered twice in the same registry."""

    def __init__(self, key: Any):
        super().__init__(f"there is already an item registered with the key '{key}'")
        self.key = key


class ComponentCreationError(DrydockError):
    """Raised when a factory fails while creating a component.

    Attributes:
        key: The key whose creation failed.
        cause: The original exception that caused the failure.
    """

    def __init__(self, key: Any, cause: Exception):
        super().__init__(f"Failed to create component for key: {key}; cause: {cause.__class__.__name__}: {cause}")
        self.key = key
        self.cause = cause


class ContainerFrozenError(DrydockError):
    """Raised for any mutating call on a finalized container."""

    def __init__(self, operation: str):
        super().__init__(f"cannot {operation}: container is finalized and immutable")
        self.operation = operation


class PluginNotFoundError(DrydockError):
    """Raised when enabling a plugin name that was never registered."""

    def __init__(self, name: Any):
        super().__init__(f"plugin '{name}' is not registered")
        self.name = name


class PluginDependencyMissing(DrydockError):
    """Raised when a declared plugin dependency fails to load.

    Attributes:
        plugin: The name of the plugin being enabled.
        cause: Message of the underlying import failure.
    """

    def __init__(self, plugin: Any, cause: str):
        super().__init__(f"dependency for plugin '{plugin}' could not be loaded ({cause})")
        self.plugin = plugin
        self.cause = cause
