"""
Test doubles and local network helpers shared by the test suite.
"""

import io
import socket
import threading
from contextlib import contextmanager
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Iterator, List

from browser_runner.domain.ports import IToolkitPort
from browser_runner.errors import ToolkitInstallError


class FakeToolkit(IToolkitPort):
    """Toolkit double recording install attempts."""

    def __init__(self, installed: bool = True, install_succeeds: bool = True):
        self.installed = installed
        self.install_succeeds = install_succeeds
        self.install_calls = 0

    def is_installed(self) -> bool:
        return self.installed

    def install(self) -> None:
        self.install_calls += 1
        if not self.install_succeeds:
            raise ToolkitInstallError("Failed to install Playwright", detail="pip exited with status 1")
        self.installed = True


class TTYStdin(io.StringIO):
    """Interactive terminal stand-in: nothing piped."""

    def isatty(self) -> bool:
        return True


def _handler_for(status: int):
    class _Handler(BaseHTTPRequestHandler):
        def do_HEAD(self):
            self.send_response(status)
            self.send_header("Content-Length", "0")
            self.end_headers()

        def do_GET(self):
            body = b"ok"
            self.send_response(status)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format, *args):
            pass

    return _Handler


@contextmanager
def serve_status(status: int = 200) -> Iterator[int]:
    """Serve the given status for HEAD and GET on a free loopback port."""
    server = ThreadingHTTPServer(("127.0.0.1", 0), _handler_for(status))
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server.server_address[1]
    finally:
        server.shutdown()
        server.server_close()


@contextmanager
def silent_listener() -> Iterator[int]:
    """A port that accepts TCP connections but never answers."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(16)
    try:
        yield sock.getsockname()[1]
    finally:
        sock.close()


def closed_ports(count: int = 1) -> List[int]:
    """Ports that were free a moment ago and now refuse connections."""
    ports = []
    sockets = []
    for _ in range(count):
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.bind(("127.0.0.1", 0))
        sockets.append(sock)
        ports.append(sock.getsockname()[1])
    for sock in sockets:
        sock.close()
    return ports
