from __future__ import annotations

import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest


class _Handler(BaseHTTPRequestHandler):
    def _send(self, status: int, body: bytes, headers: list[tuple[str, str]] = ()) -> None:
        self.send_response(status)
        for name, value in headers:
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(body)

    def _route(self) -> None:
        if self.path == "/hello":
            self._send(
                200,
                b"hello",
                [
                    ("Content-Type", "text/plain"),
                    ("X-Multi", "a"),
                    ("X-Multi", "b"),
                    ("Set-Cookie", "one=1"),
                    ("Set-Cookie", "two=2"),
                ],
            )
        elif self.path == "/echo":
            length = int(self.headers.get("Content-Length") or 0)
            body = self.rfile.read(length) if length else b""
            self._send(200, self.command.encode() + b" " + body)
        elif self.path == "/redirect":
            self._send(302, b"", [("Location", "/hello")])
        elif self.path == "/json":
            self._send(200, b'{"items": []}', [("Content-Type", "application/json")])
        elif self.path == "/latin1":
            self._send(200, b"caf\xe9", [("Content-Type", "text/plain; charset=latin-1")])
        else:
            self._send(404, b"nope")

    do_GET = do_POST = do_PUT = do_DELETE = do_PATCH = do_HEAD = _route

    def log_message(self, format, *args):  # noqa: A002
        pass


@pytest.fixture
def server_url():
    httpd = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{httpd.server_address[1]}"
    finally:
        httpd.shutdown()
        httpd.server_close()
