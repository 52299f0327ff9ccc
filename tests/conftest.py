import socket
import threading

import pytest
from blessed import Terminal

from irc_client.renderer import ConsoleRenderer


@pytest.fixture
def renderer():
    """Renderer that prints plain text regardless of the attached terminal."""
    return ConsoleRenderer(term=Terminal(force_styling=None))


@pytest.fixture
def listener():
    """A listening loopback socket; yields its port."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(1)
    sock.settimeout(5)
    yield sock
    sock.close()


@pytest.fixture
def closed_port():
    """A loopback port with nothing listening on it."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


class FakeServer:
    """Accepts one client, optionally greets it, and records what it sends."""

    def __init__(
        self, listener: socket.socket, greeting: bytes = b"", until=b"QUIT \r\n"
    ):
        self.listener = listener
        self.port = listener.getsockname()[1]
        self.greeting = greeting
        self.until = until
        self.received = b""
        self.thread = threading.Thread(target=self._serve, daemon=True)

    def start(self) -> "FakeServer":
        self.thread.start()
        return self

    def _serve(self):
        conn, _ = self.listener.accept()
        conn.settimeout(5)
        with conn:
            if self.greeting:
                conn.sendall(self.greeting)
            while self.until not in self.received:
                try:
                    data = conn.recv(1024)
                except OSError:
                    break
                if not data:
                    break
                self.received += data

    def join(self):
        self.thread.join(timeout=5)


@pytest.fixture
def fake_server(listener):
    def start(**kwargs) -> FakeServer:
        return FakeServer(listener, **kwargs).start()

    return start
