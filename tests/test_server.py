import html
import socket
import threading
import time

import pytest
import requests

from apigate.transport.server.server import (
    DEFAULT_CIPHER_SUITES,
    DEFAULT_CURVES,
    VERSION_SSL30,
    VERSION_TLS10,
    VERSION_TLS11,
    VERSION_TLS12,
    PrivateKeyError,
    PublicKeyError,
    ServerConfig,
    TLSConfig,
    TLSSettings,
    default_to_http_error,
    new_server,
    parse_cipher_suites,
    parse_curve_ids,
    parse_tls_config,
    parse_tls_version,
    run_server,
)


def _app(environ, start_response):
    body = f'Hello, "{html.escape(environ["PATH_INFO"])}"'.encode()
    start_response("200 OK", [("Content-Type", "text/plain"), ("Content-Length", str(len(body)))])
    return [body]


def _free_port():
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def _get_with_retry(url, deadline=5.0):
    end = time.monotonic() + deadline
    while True:
        try:
            return requests.get(url, timeout=2)
        except requests.ConnectionError:
            if time.monotonic() > end:
                raise
            time.sleep(0.05)


def _run_and_query(cfg):
    stop = threading.Event()
    errors = []

    def target():
        try:
            run_server(cfg, _app, stop)
        except BaseException as exc:
            errors.append(exc)

    thread = threading.Thread(target=target, daemon=True)
    thread.start()
    try:
        resp = _get_with_retry(f"http://localhost:{cfg.port}/")
    finally:
        stop.set()
        thread.join(5)
    return resp, errors, thread


def test_run_server_plain():
    resp, errors, thread = _run_and_query(ServerConfig(port=_free_port()))
    assert resp.status_code == 200
    assert resp.text == 'Hello, "/"'
    assert errors == []
    assert not thread.is_alive()


def test_run_server_disabled_tls():
    cfg = ServerConfig(port=_free_port(), tls=TLSConfig(is_disabled=True))
    resp, errors, thread = _run_and_query(cfg)
    assert resp.status_code == 200
    assert errors == []
    assert not thread.is_alive()


@pytest.mark.parametrize(
    "tls, error",
    [
        (TLSConfig(), PublicKeyError),
        (TLSConfig(public_key="placeholder"), PrivateKeyError),
    ],
)
def test_run_server_missing_keys(tls, error):
    with pytest.raises(error):
        run_server(ServerConfig(tls=tls), _app, threading.Event())


def test_run_server_bad_keys():
    cfg = ServerConfig(tls=TLSConfig(public_key="placeholder", private_key="placeholder"))
    with pytest.raises(FileNotFoundError):
        run_server(cfg, _app, threading.Event())


def test_key_error_messages():
    assert str(PublicKeyError()) == "public key not defined"
    assert str(PrivateKeyError()) == "private key not defined"


@pytest.mark.parametrize(
    "name, expected",
    [
        ("SSL3.0", VERSION_SSL30),
        ("TLS10", VERSION_TLS10),
        ("TLS11", VERSION_TLS11),
        ("TLS12", VERSION_TLS12),
        ("Unknown", VERSION_TLS12),
    ],
)
def test_parse_tls_version(name, expected):
    assert parse_tls_version(name) == expected


def test_parse_curve_ids():
    original = [1, 2, 3]
    assert parse_curve_ids(TLSConfig(curve_preferences=original)) == original


def test_parse_curve_ids_default():
    assert parse_curve_ids(TLSConfig()) == list(DEFAULT_CURVES)


def test_parse_cipher_suites():
    original = [1, 2, 3]
    assert parse_cipher_suites(TLSConfig(cipher_suites=original)) == original


def test_parse_cipher_suites_default():
    assert parse_cipher_suites(TLSConfig()) == list(DEFAULT_CIPHER_SUITES)


def test_parse_tls_config_absent_or_disabled():
    assert parse_tls_config(None) is None
    assert parse_tls_config(TLSConfig(is_disabled=True)) is None


def test_parse_tls_config_defaults():
    settings = parse_tls_config(TLSConfig(prefer_server_cipher_suites=True))
    assert settings == TLSSettings(
        min_version=VERSION_TLS12,
        max_version=VERSION_TLS12,
        curve_preferences=DEFAULT_CURVES,
        prefer_server_cipher_suites=True,
        cipher_suites=DEFAULT_CIPHER_SUITES,
    )


def test_new_server_address_and_tls():
    port = _free_port()
    server = new_server(ServerConfig(port=port, tls=TLSConfig(min_version="TLS11")), _app)
    try:
        assert server.server_address == ("", port)
        assert server.tls_settings.min_version == VERSION_TLS11
        assert server.get_app() is _app
    finally:
        server.server_close()


def test_new_server_without_tls():
    server = new_server(ServerConfig(), _app)
    try:
        assert server.tls_settings is None
    finally:
        server.server_close()


def test_default_to_http_error():
    assert default_to_http_error(ValueError("x")) == 500