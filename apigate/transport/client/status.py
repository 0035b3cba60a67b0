"""Handling of the status codes returned by backends."""

from __future__ import annotations

from collections.abc import Callable, Collection
from typing import Any

NAMESPACE = "apigate/http"

HTTPStatusHandler = Callable[[Any], Any]

_OK_STATUSES = (200, 201)


class InvalidStatusCodeError(Exception):
    """Raised when a backend answers with a status other than 200 or 201."""

    def __init__(self, message: str = "Invalid status code") -> None:
        super().__init__(message)


class HTTPResponseError(Exception):
    """Backend error carrying its status code, body and a name."""

    def __init__(self, code: int, msg: str, name: str, response: Any = None) -> None:
        super().__init__(msg)
        self.code = code
        self.msg = msg
        self.name = name
        self.response = response

    def __str__(self) -> str:
        return self.msg

    def status_code(self) -> int:
        """Return the status code returned by the backend."""
        return self.code

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"http_status_code": self.code}
        if self.msg:
            data["http_body"] = self.msg
        return data


def _check_status(resp: Any, accepted: Collection[int] | None) -> Any:
    if accepted is not None and resp.status_code not in accepted:
        raise InvalidStatusCodeError()
    return resp


def default_http_status_handler(resp: Any) -> Any:
    """Accept only 200 and 201 responses."""
    return _check_status(resp, _OK_STATUSES)


def noop_http_status_handler(resp: Any) -> Any:
    """Accept every response."""
    return _check_status(resp, None)


def detailed_http_status_handler(next_handler: HTTPStatusHandler, name: str) -> HTTPStatusHandler:
    """Wrap a handler so rejected responses raise an error with their details."""

    def handler(resp: Any) -> Any:
        try:
            return next_handler(resp)
        except Exception:
            pass
        try:
            body = resp.content or b""
        except Exception:
            body = b""
        if isinstance(body, bytes):
            text = body.decode("utf-8", errors="replace")
        else:
            text = str(body)
        raise HTTPResponseError(resp.status_code, text, name, response=resp)

    return handler


def get_http_status_handler(remote: Any) -> HTTPStatusHandler:
    """Pick the detailed handler when the backend asks for error details."""
    extra = getattr(remote, "extra_config", None) or {}
    section = extra.get(NAMESPACE)
    if isinstance(section, dict):
        name = section.get("return_error_details")
        if isinstance(name, str) and name:
            return detailed_http_status_handler(default_http_status_handler, name)
    return default_http_status_handler