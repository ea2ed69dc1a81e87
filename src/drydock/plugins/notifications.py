"""``notifications`` plugin: a synchronous publish/subscribe hub.

The hub is registered as the ``notifications`` component. Events must be
registered before they can be subscribed to or published.
"""

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ..exceptions import ConfigurationError

NOTIFICATIONS_KEY = "notifications"

Handler = Callable[["Event"], Any]


@dataclass(frozen=True)
class Event:
    id: str
    payload: Mapping[str, Any] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        return self.payload[key]


class Notifications:
    def __init__(self) -> None:
        self._events: Dict[str, Mapping[str, Any]] = {}
        self._subs: Dict[str, List[Tuple[Handler, Mapping[str, Any]]]] = {}

    def register_event(self, event_id: str, **defaults: Any) -> "Notifications":
        self._events.setdefault(event_id, dict(defaults))
        self._subs.setdefault(event_id, [])
        return self

    def has_event(self, event_id: str) -> bool:
        return event_id in self._events

    def _check(self, event_id: str) -> None:
        if event_id not in self._events:
            raise ConfigurationError(f"Event '{event_id}' is not registered")

    def subscribe(self, event_id: str, handler: Optional[Handler] = None, *, where: Optional[Mapping[str, Any]] = None):
        """Subscribe *handler* to *event_id*; usable as a decorator.

        Args:
            where: Only deliver events whose payload matches these items.
        """
        self._check(event_id)
        if handler is None:
            def dec(fn: Handler) -> Handler:
                self.subscribe(event_id, fn, where=where)
                return fn
            return dec
        self._subs[event_id].append((handler, dict(where or {})))
        return handler

    def publish(self, event_id: str, **payload: Any) -> Event:
        self._check(event_id)
        event = Event(event_id, {**self._events[event_id], **payload})
        for handler, where in list(self._subs[event_id]):
            if all(event.payload.get(k) == v for k, v in where.items()):
                handler(event)
        return event

    @contextmanager
    def instrument(self, event_id: str, **payload: Any):
        """Publish *event_id* once the block completes, adding ``time`` in ms."""
        self._check(event_id)
        t0 = time.perf_counter()
        yield payload
        payload["time"] = (time.perf_counter() - t0) * 1000
        self.publish(event_id, **payload)


class NotificationsPlugin:
    @property
    def notifications(self) -> Notifications:
        return self.resolve(NOTIFICATIONS_KEY)


def register_notifications(container) -> None:
    if not container.has(NOTIFICATIONS_KEY):
        container.register(NOTIFICATIONS_KEY, Notifications())
