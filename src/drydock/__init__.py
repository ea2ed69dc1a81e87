# drydock/__init__.py
try:
    from ._version import __version__
except Exception:
    __version__ = "0.0.0"

from .config import AppConfig, Settings, load_app_config
from .container import Container
from .exceptions import (
    ComponentCreationError,
    ComponentNotFoundError,
    ConfigurationError,
    ContainerFrozenError,
    DrydockError,
    DuplicateRegistrationError,
    InvalidBootIdentifierError,
    InvalidIdentifierError,
    PluginDependencyMissing,
    PluginNotFoundError,
    ResolutionError,
)
from .identifiers import ComponentDescriptor, DefaultNaming, NamingStrategy, describe
from .injection import PendingImport
from .loader import SourceLoader, default_loader
from .plugins import (
    Plugin,
    PluginRegistry,
    Stateful,
    Stateless,
    default_registry,
    plugin,
    register_plugin,
)
from .registry import Registry

__all__ = [
    "__version__",
    "Container",
    "Settings",
    "AppConfig",
    "load_app_config",
    "Registry",
    "SourceLoader",
    "default_loader",
    "PendingImport",
    "ComponentDescriptor",
    "NamingStrategy",
    "DefaultNaming",
    "describe",
    "Plugin",
    "PluginRegistry",
    "Stateless",
    "Stateful",
    "default_registry",
    "register_plugin",
    "plugin",
    "DrydockError",
    "ConfigurationError",
    "InvalidIdentifierError",
    "InvalidBootIdentifierError",
    "ResolutionError",
    "ComponentNotFoundError",
    "ComponentCreationError",
    "DuplicateRegistrationError",
    "ContainerFrozenError",
    "PluginNotFoundError",
    "PluginDependencyMissing",
]
