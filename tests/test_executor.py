import threading
from http.server import BaseHTTPRequestHandler, HTTPServer

import pytest
import requests

from apigate.transport.client.executor import (
    default_http_request_executor,
    new_http_client,
)


class _HelloHandler(BaseHTTPRequestHandler):
    def do_GET(self):
        body = b"Hello, client\n"
        self.send_response(200)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, *args):
        pass


@pytest.fixture
def server_url():
    server = HTTPServer(("127.0.0.1", 0), _HelloHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    host, port = server.server_address
    yield f"http://{host}:{port}"
    server.shutdown()
    server.server_close()
    thread.join()


def test_default_http_request_executor(server_url):
    executor = default_http_request_executor(new_http_client)
    resp = executor(requests.Request("GET", server_url, data=b""))
    assert resp.status_code == 200
    assert resp.text == "Hello, client\n"


def test_executor_accepts_prepared_request(server_url):
    executor = default_http_request_executor(new_http_client)
    prepared = requests.Request("GET", server_url).prepare()
    resp = executor(prepared, timeout=5)
    assert resp.status_code == 200


def test_executor_uses_factory_for_each_call(server_url):
    calls = []

    def factory():
        calls.append(1)
        return new_http_client()

    executor = default_http_request_executor(factory)
    first = executor(requests.Request("GET", server_url))
    second = executor(requests.Request("GET", server_url))
    assert [first.status_code, second.status_code] == [200, 200]
    assert len(calls) == 2


def test_new_http_client_is_shared(server_url):
    client = new_http_client()
    assert new_http_client() is client
    resp = client.get(server_url, timeout=5)
    assert resp.text == "Hello, client\n"