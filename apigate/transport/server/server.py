"""HTTP server setup, including the TLS layer."""

from __future__ import annotations

import logging
import ssl
import threading
import warnings
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer

_log = logging.getLogger(__name__)

HEADER_COMPLETE_RESPONSE_VALUE = "true"
HEADER_INCOMPLETE_RESPONSE_VALUE = "false"
COMPLETE_RESPONSE_HEADER_NAME = "X-KrakenD-Completed"
HEADERS_TO_SEND = ["Content-Type"]
USER_AGENT_HEADER_VALUE = ["apigate"]

VERSION_SSL30 = 0x0300
VERSION_TLS10 = 0x0301
VERSION_TLS11 = 0x0302
VERSION_TLS12 = 0x0303

CURVE_P256 = 23
CURVE_P384 = 24
CURVE_P521 = 25

TLS_ECDHE_ECDSA_WITH_AES_128_GCM_SHA256 = 0xC02B
TLS_ECDHE_ECDSA_WITH_AES_256_GCM_SHA384 = 0xC02C
TLS_ECDHE_RSA_WITH_AES_128_GCM_SHA256 = 0xC02F
TLS_ECDHE_RSA_WITH_AES_256_GCM_SHA384 = 0xC030
TLS_ECDHE_RSA_WITH_CHACHA20_POLY1305 = 0xCCA8
TLS_ECDHE_ECDSA_WITH_CHACHA20_POLY1305 = 0xCCA9

DEFAULT_CURVES = (CURVE_P521, CURVE_P384, CURVE_P256)
DEFAULT_CIPHER_SUITES = (
    TLS_ECDHE_RSA_WITH_AES_128_GCM_SHA256,
    TLS_ECDHE_ECDSA_WITH_AES_128_GCM_SHA256,
    TLS_ECDHE_RSA_WITH_AES_256_GCM_SHA384,
    TLS_ECDHE_ECDSA_WITH_AES_256_GCM_SHA384,
    TLS_ECDHE_RSA_WITH_CHACHA20_POLY1305,
    TLS_ECDHE_ECDSA_WITH_CHACHA20_POLY1305,
)

_VERSIONS = {
    "SSL3.0": VERSION_SSL30,
    "TLS10": VERSION_TLS10,
    "TLS11": VERSION_TLS11,
    "TLS12": VERSION_TLS12,
}

_SSL_VERSIONS = {
    VERSION_SSL30: ssl.TLSVersion.SSLv3,
    VERSION_TLS10: ssl.TLSVersion.TLSv1,
    VERSION_TLS11: ssl.TLSVersion.TLSv1_1,
    VERSION_TLS12: ssl.TLSVersion.TLSv1_2,
}

_CURVE_NAMES = {
    CURVE_P256: "prime256v1",
    CURVE_P384: "secp384r1",
    CURVE_P521: "secp521r1",
}

_CIPHER_NAMES = {
    TLS_ECDHE_ECDSA_WITH_AES_128_GCM_SHA256: "ECDHE-ECDSA-AES128-GCM-SHA256",
    TLS_ECDHE_ECDSA_WITH_AES_256_GCM_SHA384: "ECDHE-ECDSA-AES256-GCM-SHA384",
    TLS_ECDHE_RSA_WITH_AES_128_GCM_SHA256: "ECDHE-RSA-AES128-GCM-SHA256",
    TLS_ECDHE_RSA_WITH_AES_256_GCM_SHA384: "ECDHE-RSA-AES256-GCM-SHA384",
    TLS_ECDHE_RSA_WITH_CHACHA20_POLY1305: "ECDHE-RSA-CHACHA20-POLY1305",
    TLS_ECDHE_ECDSA_WITH_CHACHA20_POLY1305: "ECDHE-ECDSA-CHACHA20-POLY1305",
}


class PublicKeyError(Exception):
    """Raised when TLS is enabled but no public key is configured."""

    def __init__(self, message: str = "public key not defined") -> None:
        super().__init__(message)


class PrivateKeyError(Exception):
    """Raised when TLS is enabled but no private key is configured."""

    def __init__(self, message: str = "private key not defined") -> None:
        super().__init__(message)


@dataclass
class TLSConfig:
    """TLS section of the service configuration."""

    is_disabled: bool = False
    public_key: str = ""
    private_key: str = ""
    min_version: str = ""
    max_version: str = ""
    curve_preferences: list[int] = field(default_factory=list)
    prefer_server_cipher_suites: bool = False
    cipher_suites: list[int] = field(default_factory=list)


@dataclass
class ServerConfig:
    """Service settings used to build the HTTP server. Timeouts are seconds."""

    port: int = 0
    tls: TLSConfig | None = None
    read_timeout: float = 0.0
    write_timeout: float = 0.0
    read_header_timeout: float = 0.0
    idle_timeout: float = 0.0


@dataclass(frozen=True)
class TLSSettings:
    """TLS parameters resolved from a TLSConfig."""

    min_version: int
    max_version: int
    curve_preferences: tuple[int, ...]
    prefer_server_cipher_suites: bool
    cipher_suites: tuple[int, ...]


class _QuietHandler(WSGIRequestHandler):
    def log_message(self, format: str, *args: Any) -> None:
        _log.debug("%s - %s", self.address_string(), format % args)


class _Server(WSGIServer):
    tls_settings: TLSSettings | None = None


def default_to_http_error(error: BaseException) -> int:
    """Translate any error into an internal server error status."""
    return int(HTTPStatus.INTERNAL_SERVER_ERROR)


def parse_tls_version(key: str) -> int:
    """Return the protocol version for a name, TLS 1.2 when unknown."""
    return _VERSIONS.get(key, VERSION_TLS12)


def parse_curve_ids(cfg: TLSConfig) -> list[int]:
    """Return the configured curves, or the default ones."""
    if not cfg.curve_preferences:
        return list(DEFAULT_CURVES)
    return [int(curve) for curve in cfg.curve_preferences]


def parse_cipher_suites(cfg: TLSConfig) -> list[int]:
    """Return the configured cipher suites, or the default ones."""
    if not cfg.cipher_suites:
        return list(DEFAULT_CIPHER_SUITES)
    return [int(suite) & 0xFFFF for suite in cfg.cipher_suites]


def parse_tls_config(cfg: TLSConfig | None) -> TLSSettings | None:
    """Resolve the TLS section; None when absent or disabled."""
    if cfg is None or cfg.is_disabled:
        return None
    return TLSSettings(
        min_version=parse_tls_version(cfg.min_version),
        max_version=parse_tls_version(cfg.max_version),
        curve_preferences=tuple(parse_curve_ids(cfg)),
        prefer_server_cipher_suites=cfg.prefer_server_cipher_suites,
        cipher_suites=tuple(parse_cipher_suites(cfg)),
    )


def new_server(cfg: ServerConfig, handler: Any) -> _Server:
    """Return an unbound WSGI server ready to serve the handler."""
    timeout = cfg.read_timeout or cfg.read_header_timeout or None

    class _Handler(_QuietHandler):
        pass

    _Handler.timeout = timeout
    server = _Server(("", cfg.port), _Handler, bind_and_activate=False)
    server.set_app(handler)
    server.tls_settings = parse_tls_config(cfg.tls)
    return server


def _ssl_context(settings: TLSSettings, certfile: str, keyfile: str) -> ssl.SSLContext:
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.load_cert_chain(certfile, keyfile)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", DeprecationWarning)
        try:
            context.minimum_version = _SSL_VERSIONS[settings.min_version]
            context.maximum_version = _SSL_VERSIONS[settings.max_version]
        except (ValueError, ssl.SSLError):
            pass
    names = [_CIPHER_NAMES[s] for s in settings.cipher_suites if s in _CIPHER_NAMES]
    if names:
        context.set_ciphers(":".join(names))
    for curve in settings.curve_preferences:
        name = _CURVE_NAMES.get(curve)
        if name is not None:
            context.set_ecdh_curve(name)
            break
    if settings.prefer_server_cipher_suites:
        context.options |= ssl.OP_CIPHER_SERVER_PREFERENCE
    return context


def _serve_until(server: _Server, stop_event: threading.Event | None) -> None:
    failures: list[BaseException] = []

    def serve() -> None:
        try:
            server.serve_forever(poll_interval=0.05)
        except BaseException as exc:
            failures.append(exc)

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()
    while thread.is_alive():
        if stop_event is None:
            thread.join(0.05)
        elif stop_event.wait(0.05):
            server.shutdown()
            break
    thread.join()
    if failures:
        raise failures[0]


def run_server(cfg: ServerConfig, handler: Any, stop_event: threading.Event | None = None) -> None:
    """Serve the handler until the stop event is set, using TLS when configured."""
    server = new_server(cfg, handler)
    try:
        context = None
        if server.tls_settings is not None:
            tls = cfg.tls
            assert tls is not None
            if not tls.public_key:
                raise PublicKeyError()
            if not tls.private_key:
                raise PrivateKeyError()
            context = _ssl_context(server.tls_settings, tls.public_key, tls.private_key)
        server.server_bind()
        server.server_activate()
        if context is not None:
            server.socket = context.wrap_socket(server.socket, server_side=True)
        _serve_until(server, stop_event)
    finally:
        server.server_close()