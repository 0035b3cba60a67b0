"""Registry of subscriber factories keyed by service discovery name."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

from .subscriber import Subscriber, fixed_subscriber_factory

SubscriberFactory = Callable[[Any], Subscriber]


class Register:
    """Service discovery register mapping names to subscriber factories."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._lock = threading.Lock()

    def register(self, name: str, factory: Any) -> None:
        """Store a factory under the given name."""
        with self._lock:
            self._data[name] = factory

    def get(self, name: str) -> SubscriberFactory:
        """Return the factory for a name, or the fixed one when none fits."""
        with self._lock:
            factory = self._data.get(name)
        if not callable(factory):
            return fixed_subscriber_factory
        return factory


_subscriber_factories = Register()


def get_register() -> Register:
    """Return the package register."""
    return _subscriber_factories


def reset_register() -> Register:
    """Replace the package register with an empty one and return it."""
    global _subscriber_factories
    _subscriber_factories = Register()
    return _subscriber_factories


def register_subscriber_factory(name: str, factory: SubscriberFactory) -> None:
    """Register a factory in the package register."""
    _subscriber_factories.register(name, factory)


def get_subscriber(backend: Any) -> Subscriber:
    """Build the subscriber for a backend using its service discovery name."""
    name = getattr(backend, "sd", "") or ""
    return _subscriber_factories.get(name)(backend)