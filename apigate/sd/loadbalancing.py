"""Balancers that pick the backend host for each request."""

from __future__ import annotations

import random
import threading
from abc import ABC, abstractmethod

from .subscriber import FixedSubscriber, Subscriber


class NoHostsError(Exception):
    """Raised when a balancer has no hosts to choose from."""

    def __init__(self, message: str = "no hosts available") -> None:
        super().__init__(message)


class Balancer(ABC):
    """Strategy selecting the backend host to use."""

    @abstractmethod
    def host(self) -> str:
        """Return the selected host."""


class RoundRobinLB(Balancer):
    """Balancer cycling through the hosts in order."""

    def __init__(self, subscriber: Subscriber) -> None:
        self.subscriber = subscriber
        self._counter = 0
        self._lock = threading.Lock()

    def host(self) -> str:
        hosts = self.subscriber.hosts()
        if not hosts:
            raise NoHostsError()
        with self._lock:
            current = self._counter
            self._counter += 1
        return hosts[current % len(hosts)]


class RandomLB(Balancer):
    """Balancer picking a pseudo-random host."""

    def __init__(self, subscriber: Subscriber, seed: int) -> None:
        self.subscriber = subscriber
        self._rnd = random.Random(seed)
        self._lock = threading.Lock()

    def host(self) -> str:
        hosts = self.subscriber.hosts()
        if not hosts:
            raise NoHostsError()
        with self._lock:
            index = self._rnd.randrange(len(hosts))
        return hosts[index]


class NopBalancer(Balancer):
    """Balancer that always returns the same host."""

    def __init__(self, host: str) -> None:
        self._host = host

    def host(self) -> str:
        return self._host


def _single_host(subscriber: Subscriber) -> str | None:
    if isinstance(subscriber, FixedSubscriber) and len(subscriber) == 1:
        return subscriber[0]
    return None


def new_round_robin_lb(subscriber: Subscriber) -> Balancer:
    """Return a round robin balancer over the subscriber's hosts."""
    single = _single_host(subscriber)
    if single is not None:
        return NopBalancer(single)
    return RoundRobinLB(subscriber)


def new_random_lb(subscriber: Subscriber, seed: int) -> Balancer:
    """Return a pseudo-random balancer over the subscriber's hosts."""
    single = _single_host(subscriber)
    if single is not None:
        return NopBalancer(single)
    return RandomLB(subscriber, seed)