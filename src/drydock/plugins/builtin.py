"""Registration of the plugins shipped with drydock."""

from . import PluginRegistry, Stateful, Stateless, default_registry
from .dependency_graph import DependencyGraph
from .env import env_capabilities
from .logger import Logging, register_logger
from .monitoring import Monitoring, enable_monitoring
from .notifications import NotificationsPlugin, register_notifications


def register_builtin_plugins(registry: PluginRegistry) -> PluginRegistry:
    registry.register("env", Stateful(env_capabilities))
    registry.register("logging", Stateless(Logging), register_logger)
    registry.register("notifications", Stateless(NotificationsPlugin), register_notifications)
    registry.register("monitoring", Stateless(Monitoring), enable_monitoring)
    registry.register("dependency_graph", Stateless(DependencyGraph))
    return registry


register_builtin_plugins(default_registry())
