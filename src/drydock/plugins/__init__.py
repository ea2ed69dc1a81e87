"""Plugin registry and the container-side ``use`` machinery.

A plugin pairs a name with a behavior and an optional configuration block.
Behaviors are one of two tagged variants:

* :class:`Stateless` wraps a mixin class applied to the container as-is.
* :class:`Stateful` wraps a factory called with the ``use()`` options that
  returns the mixin class to apply.

Plugins are registered process-wide on a :class:`PluginRegistry` and enabled
per container with :meth:`Container.use`.
"""

import importlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..exceptions import PluginDependencyMissing, PluginNotFoundError

if TYPE_CHECKING:
    from ..container import Container

_logger = logging.getLogger(__name__)

ConfigBlock = Callable[["Container"], Any]


@dataclass(frozen=True)
class Stateless:
    """A capability set applied unchanged; ``use()`` options are ignored."""
    mixin: type
    dependencies: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Stateful:
    """A factory turning ``use()`` options into a fresh capability set."""
    factory: Callable[..., type]
    dependencies: Tuple[str, ...] = ()


Behavior = Union[Stateless, Stateful]


@dataclass(frozen=True)
class Plugin:
    name: str
    behavior: Behavior
    block: Optional[ConfigBlock] = None

    @property
    def dependencies(self) -> Tuple[str, ...]:
        return tuple(self.behavior.dependencies)

    def capabilities(self, options: Mapping[str, Any]) -> type:
        if isinstance(self.behavior, Stateful):
            return self.behavior.factory(**options)
        if isinstance(self.behavior, Stateless):
            return self.behavior.mixin
        raise TypeError(f"Unknown plugin behavior: {self.behavior!r}")

    def apply_to(self, container: "Container", options: Mapping[str, Any]) -> "Container":
        container.extend(self.capabilities(options))
        if self.block is not None:
            self.block(container)
        return container


class PluginRegistry:
    """Process-wide plugin table plus the set of already loaded dependencies.

    Populated at import time by :func:`register_plugin`, read by every
    container's ``use()``. Tests swap in a fresh instance with
    :func:`set_default_registry`.
    """

    def __init__(self) -> None:
        self._plugins: Dict[str, Plugin] = {}
        self._loaded_dependencies: Dict[str, None] = {}

    def register(self, name: str, behavior: Union[Behavior, type], block: Optional[ConfigBlock] = None) -> Plugin:
        """Register *behavior* under *name*; the last registration wins.

        A bare class is taken as a :class:`Stateless` behavior, reading
        optional ``dependencies`` from the class.
        """
        if isinstance(behavior, type):
            behavior = Stateless(behavior, tuple(getattr(behavior, "dependencies", ())))
        if not isinstance(behavior, (Stateless, Stateful)):
            raise TypeError(f"Plugin '{name}' behavior must be Stateless, Stateful or a class")
        p = Plugin(name, behavior, block)
        if name in self._plugins:
            _logger.debug("Plugin '%s' re-registered", name)
        self._plugins[name] = p
        return p

    def get(self, name: str) -> Plugin:
        try:
            return self._plugins[name]
        except KeyError:
            raise PluginNotFoundError(name) from None

    def __contains__(self, name: str) -> bool:
        return name in self._plugins

    def names(self) -> Tuple[str, ...]:
        return tuple(self._plugins)

    @property
    def loaded_dependencies(self) -> Tuple[str, ...]:
        return tuple(self._loaded_dependencies)

    def load_dependencies(self, plugin: Plugin) -> None:
        """Import every dependency of *plugin* not imported before.

        Raises:
            PluginDependencyMissing: If a dependency fails to import.
        """
        for dep in plugin.dependencies:
            if dep in self._loaded_dependencies:
                continue
            try:
                importlib.import_module(dep)
            except ImportError as e:
                raise PluginDependencyMissing(plugin.name, str(e)) from e
            self._loaded_dependencies[dep] = None
            _logger.debug("Loaded dependency '%s' for plugin '%s'", dep, plugin.name)


_default_registry = PluginRegistry()


def default_registry() -> PluginRegistry:
    return _default_registry


def set_default_registry(registry: PluginRegistry) -> PluginRegistry:
    """Replace the process-wide registry, returning the previous one."""
    global _default_registry
    previous, _default_registry = _default_registry, registry
    return previous


def register_plugin(name: str, behavior: Union[Behavior, type], block: Optional[ConfigBlock] = None) -> Plugin:
    return _default_registry.register(name, behavior, block)


def plugin(name: str, *, dependencies: Iterable[str] = (), block: Optional[ConfigBlock] = None):
    """Class decorator registering a stateless mixin on the default registry."""
    def dec(cls):
        register_plugin(name, Stateless(cls, tuple(dependencies)), block)
        return cls
    return dec


class _PluginMixin:
    _plugins: PluginRegistry
    _enabled_plugins: List[str]

    def use(self, name: str, **options: Any) -> "Container":
        """Enable plugin *name* on this container.

        A no-op when the plugin is already enabled. Otherwise loads its
        dependencies, applies its behavior, runs its configuration block and
        records it as enabled. On failure the container's behavior set and
        enabled-plugin set are left as they were.
        """
        self._check_mutable(f"use plugin '{name}'")
        if name in self._enabled_plugins:
            return self
        p = self._plugins.get(name)
        self._plugins.load_dependencies(p)

        previous_cls = self.__class__
        previous_enabled = list(self._enabled_plugins)
        try:
            p.apply_to(self, options)
        except BaseException:
            self.__class__ = previous_cls
            self._enabled_plugins[:] = previous_enabled
            raise
        self._enabled_plugins.append(name)
        _logger.debug("Enabled plugin '%s' on %s", name, self.name)
        return self

    def extend(self, mixin: type) -> "Container":
        """Add *mixin* to this container's own behavior set."""
        cls = self.__class__
        if issubclass(cls, mixin):
            return self
        self.__class__ = type(cls.__name__, (mixin, cls), {"__module__": cls.__module__})
        return self

    @property
    def enabled_plugins(self) -> Tuple[str, ...]:
        return tuple(self._enabled_plugins)


from . import builtin  # noqa: E402,F401  registers the built-in plugins
