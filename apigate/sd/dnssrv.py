"""DNS SRV based service discovery."""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from typing import Any

import dns.resolver

from .register import register_subscriber_factory
from .subscriber import Subscriber

NAMESPACE = "dns"

# Seconds between two refreshes of the cached hosts.
TTL = 30.0

Lookup = Callable[[str, str, str], "tuple[str, Sequence[tuple[str, int]]]"]


def default_lookup(service: str, proto: str, name: str) -> tuple[str, list[tuple[str, int]]]:
    """Resolve SRV records, returning the canonical name and (target, port) pairs."""
    qname = f"_{service}._{proto}.{name}" if service or proto else name
    answer = dns.resolver.resolve(qname, "SRV")
    records = sorted(answer, key=lambda r: (r.priority, -r.weight))
    cname = str(getattr(answer, "canonical_name", qname))
    return cname, [(str(r.target), int(r.port)) for r in records]


def _join_host_port(host: str, port: int) -> str:
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


class DNSSubscriber(Subscriber):
    """Subscriber caching SRV-resolved hosts and refreshing them every TTL."""

    def __init__(self, name: str, lookup: Lookup, ttl: float) -> None:
        self.name = name
        self.ttl = ttl
        self._lookup = lookup
        self._cache: list[str] = []
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def hosts(self) -> list[str]:
        with self._lock:
            return list(self._cache)

    def close(self) -> None:
        """Stop refreshing the cached hosts."""
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=1.0)

    def __enter__(self) -> DNSSubscriber:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _start(self) -> None:
        self._update()
        self._thread = threading.Thread(target=self._loop, daemon=True)
        self._thread.start()

    def _loop(self) -> None:
        while not self._stop.wait(self.ttl):
            self._update()

    def _update(self) -> None:
        try:
            instances = self._resolve()
        except Exception:
            # A failed resolution keeps the previously cached hosts.
            return
        with self._lock:
            self._cache = instances

    def _resolve(self) -> list[str]:
        _, addrs = self._lookup("", "", self.name)
        return [f"http://{_join_host_port(target, port)}" for target, port in addrs]


def register() -> None:
    """Register the DNS SRV subscriber factory in the package register."""
    register_subscriber_factory(NAMESPACE, subscriber_factory)


def subscriber_factory(backend: Any) -> DNSSubscriber:
    """Build a DNS SRV subscriber for the first host of the backend."""
    return new(backend.host[0])


def new(name: str) -> DNSSubscriber:
    """Create a DNS SRV subscriber with the default lookup and TTL."""
    return new_detailed(name, default_lookup, TTL)


def new_detailed(name: str, lookup: Lookup, ttl: float) -> DNSSubscriber:
    """Create a DNS SRV subscriber with the given lookup and TTL in seconds."""
    subscriber = DNSSubscriber(name, lookup, ttl)
    subscriber._start()
    return subscriber