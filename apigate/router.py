"""Interfaces for the public layer exposed to the users."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Callable

from .transport.server.server import (
    COMPLETE_RESPONSE_HEADER_NAME,
    HEADER_COMPLETE_RESPONSE_VALUE,
    HEADER_INCOMPLETE_RESPONSE_VALUE,
    HEADERS_TO_SEND,
    USER_AGENT_HEADER_VALUE,
    ServerConfig,
    default_to_http_error,
    run_server,
)

__all__ = [
    "COMPLETE_RESPONSE_HEADER_NAME",
    "HEADER_COMPLETE_RESPONSE_VALUE",
    "HEADER_INCOMPLETE_RESPONSE_VALUE",
    "HEADERS_TO_SEND",
    "USER_AGENT_HEADER_VALUE",
    "Router",
    "RouterFactory",
    "RouterFunc",
    "default_to_http_error",
    "run_server",
]


class Router(ABC):
    """Sets up the public layer exposed to the users."""

    @abstractmethod
    def run(self, cfg: ServerConfig) -> None:
        """Start serving with the given configuration."""


class RouterFunc(Router):
    """Adapter that turns a plain callable into a router."""

    def __init__(self, func: Callable[[ServerConfig], None]) -> None:
        self._func = func

    def run(self, cfg: ServerConfig) -> None:
        self._func(cfg)


class RouterFactory(ABC):
    """Creates new routers."""

    @abstractmethod
    def new(self) -> Router:
        """Create a router."""

    @abstractmethod
    def new_with_context(self, stop_event: threading.Event | None) -> Router:
        """Create a router that stops once the event is set."""