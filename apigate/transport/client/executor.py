"""Execution of outgoing HTTP requests."""

from __future__ import annotations

from collections.abc import Callable

import requests

HTTPClientFactory = Callable[[], requests.Session]
HTTPRequestExecutor = Callable[..., requests.Response]

_DEFAULT_CLIENT = requests.Session()


def new_http_client() -> requests.Session:
    """Return the shared default HTTP client."""
    return _DEFAULT_CLIENT


def default_http_request_executor(client_factory: HTTPClientFactory) -> HTTPRequestExecutor:
    """Build an executor that sends requests through a client from the factory."""

    def execute(
        request: requests.Request | requests.PreparedRequest,
        timeout: float | None = None,
    ) -> requests.Response:
        client = client_factory()
        if isinstance(request, requests.Request):
            request = client.prepare_request(request)
        return client.send(request, timeout=timeout)

    return execute