"""Subscribers that keep the set of backend hosts up to date."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator
from typing import Any


class Subscriber(ABC):
    """Source of the current list of backend hosts."""

    @abstractmethod
    def hosts(self) -> list[str]:
        """Return the hosts currently known."""


class SubscriberFunc(Subscriber):
    """Adapter that turns a plain callable into a subscriber."""

    def __init__(self, func: Callable[[], Iterable[str]]) -> None:
        self._func = func

    def hosts(self) -> list[str]:
        return list(self._func())


class FixedSubscriber(Subscriber):
    """Subscriber with a constant set of hosts that never changes."""

    def __init__(self, hosts: Iterable[str] = ()) -> None:
        self._hosts = tuple(hosts)

    def hosts(self) -> list[str]:
        return list(self._hosts)

    def __len__(self) -> int:
        return len(self._hosts)

    def __iter__(self) -> Iterator[str]:
        return iter(self._hosts)

    def __getitem__(self, index: int) -> str:
        return self._hosts[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FixedSubscriber):
            return NotImplemented
        return self._hosts == other._hosts

    def __hash__(self) -> int:
        return hash(self._hosts)

    def __repr__(self) -> str:
        return f"FixedSubscriber({list(self._hosts)!r})"


def fixed_subscriber_factory(backend: Any) -> FixedSubscriber:
    """Build a fixed subscriber from the hosts of a backend definition."""
    return FixedSubscriber(getattr(backend, "host", None) or ())