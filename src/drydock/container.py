# src/drydock/container.py
import contextvars
import logging
from contextlib import contextmanager
from typing import Any, Callable, List, Optional

from .boot import _BootMixin
from .config import Settings, load_app_config
from .container_resolution import _ResolutionMixin
from .exceptions import ContainerFrozenError
from .loader import SourceLoader, default_loader
from .plugins import PluginRegistry, _PluginMixin, default_registry
from .registry import Registry

_logger = logging.getLogger(__name__)


class Container(_ResolutionMixin, _BootMixin, _PluginMixin):
    """A lazy component registry with a boot lifecycle.

    Lifecycle: :meth:`configure` fixes the settings, components are
    registered lazily (:meth:`resolve`, :meth:`register_component`) or
    eagerly (:meth:`auto_register`), and :meth:`finalize_all` boots every
    unit, runs the configured auto-registration and freezes the container.
    Plugins enabled with :meth:`use` extend the container's own behavior.

    Args:
        name: Container name, used in log records.
        registry: Backing registry; a fresh one by default.
        loader: Source loader; the process-wide loader by default.
        plugins: Plugin registry; the process-wide registry by default.
    """

    _current: contextvars.ContextVar[Optional["Container"]] = contextvars.ContextVar("drydock_container", default=None)

    def __init__(
        self,
        name: str = "app",
        *,
        registry: Optional[Registry] = None,
        loader: Optional[SourceLoader] = None,
        plugins: Optional[PluginRegistry] = None,
    ) -> None:
        self.name = name
        self.config = Settings()
        self._registry = registry if registry is not None else Registry()
        self._loader = loader if loader is not None else default_loader()
        self._plugins = plugins if plugins is not None else default_registry()
        self._load_paths: List = []
        self._booted = {}
        self._finalizers = {}
        self._enabled_plugins: List[str] = []
        self._configured = False
        self._frozen = False

    @classmethod
    def current(cls) -> Optional["Container"]:
        """The container currently loading a source file, if any."""
        return cls._current.get()

    def activate(self) -> contextvars.Token:
        return Container._current.set(self)

    def deactivate(self, token: contextvars.Token) -> None:
        Container._current.reset(token)

    @contextmanager
    def as_current(self):
        token = self.activate()
        try:
            yield self
        finally:
            self.deactivate(token)

    @property
    def configured(self) -> bool:
        return self._configured

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_mutable(self, operation: str) -> None:
        if self._frozen:
            raise ContainerFrozenError(operation)

    def _freeze(self) -> None:
        self._frozen = True
        self._registry.freeze()

    def configure(self, block: Optional[Callable[[Settings], Any]] = None, **settings: Any) -> "Container":
        """Apply settings once; later calls are no-ops.

        Keyword settings are applied first, then *block* is called with the
        settings. The application config for the configured env is loaded
        from ``<root>/config`` and the core directory becomes a load path.

        Raises:
            ConfigurationError: On unknown settings or an unreadable config file.
            ContainerFrozenError: If the container is finalized.
        """
        self._check_mutable("configure")
        if self._configured:
            return self
        cfg = self.config.copy()
        cfg.update(**settings)
        if block is not None:
            block(cfg)
        app = load_app_config(cfg.root, cfg.env)
        if app is not None:
            cfg.app = app
        self.config = cfg
        self.add_load_paths(cfg.core_dir)
        self._configured = True
        _logger.debug("Configured %s (env=%s, root=%s)", self.name, cfg.env, cfg.root)
        return self

    def derive(self, name: Optional[str] = None) -> "Container":
        """Create a container sharing this one's behavior and settings.

        The child starts unconfigured, with an empty registry and a copy of
        the enabled-plugin set. Configuration blocks of the inherited
        plugins are replayed against the child.
        """
        child = type(self)(name or self.name, loader=self._loader, plugins=self._plugins)
        child.config = self.config.copy()
        child._enabled_plugins = list(self._enabled_plugins)
        for plugin_name in child._enabled_plugins:
            p = self._plugins.get(plugin_name)
            if p.block is not None:
                p.block(child)
        return child

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else ("configured" if self._configured else "new")
        return f"<{type(self).__name__} {self.name!r} {state} components={len(self._registry)}>"
