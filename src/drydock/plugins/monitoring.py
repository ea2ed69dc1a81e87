"""``monitoring`` plugin: publish an event for every call of a component method.

Requires the ``notifications`` plugin, which its configuration block enables.
"""

import functools
import inspect
from typing import Any, Callable, Iterable, Optional

MONITORING_EVENT = "monitoring"


def _instrumented(hub, identifier: str, name: str, original: Callable) -> Callable:
    @functools.wraps(original)
    def wrapper(*args, **kwargs):
        with hub.instrument(MONITORING_EVENT, target=identifier, method=name, args=args, kwargs=kwargs):
            return original(*args, **kwargs)
    return wrapper


def _public_methods(target: Any) -> list:
    return [
        name for name, _ in inspect.getmembers(type(target), predicate=inspect.isfunction)
        if not name.startswith("_")
    ]


class Monitoring:
    def monitor(self, identifier: str, methods: Optional[Iterable[str]] = None, callback: Optional[Callable] = None):
        """Instrument the component registered under *identifier*.

        Args:
            methods: Method names to wrap; defaults to every public method.
            callback: Subscribed to the ``monitoring`` event for this component.

        Returns:
            The instrumented component.
        """
        hub = self.notifications
        target = self.resolve(identifier)
        for name in (list(methods) if methods is not None else _public_methods(target)):
            setattr(target, name, _instrumented(hub, identifier, name, getattr(target, name)))
        if callback is not None:
            hub.subscribe(MONITORING_EVENT, callback, where={"target": identifier})
        return target


def enable_monitoring(container) -> None:
    container.use("notifications")
    container.notifications.register_event(MONITORING_EVENT)
