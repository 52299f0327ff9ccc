import logging
import socket
from unittest.mock import MagicMock, patch

import pytest

from irc_client.connection import CommandWriter, Connection, ConnectionManager
from irc_shared.errors import ConnectError


def read_until(conn: socket.socket, marker: bytes) -> bytes:
    conn.settimeout(5)
    data = b""
    while marker not in data:
        chunk = conn.recv(1024)
        if not chunk:
            break
        data += chunk
    return data


class TestConnectionManager:
    def test_registration_handshake(self, listener):
        """USER then NICK are sent before connect returns."""
        port = listener.getsockname()[1]
        connection = ConnectionManager(port=port).connect("alice", "127.0.0.1")

        server_side, _ = listener.accept()
        with server_side:
            try:
                received = read_until(server_side, b"NICK alice\r\n")
            finally:
                connection.close()

        assert received == b"USER alice * * alice\r\nNICK alice\r\n"
        assert connection.server == f"127.0.0.1:{port}"

    def test_handshake_is_echoed(self, listener):
        port = listener.getsockname()[1]
        echoed = []

        connection = ConnectionManager(port=port, echo=echoed.append).connect(
            "alice", "127.0.0.1"
        )
        connection.close()

        assert echoed == ["USER alice * * alice\r\n", "NICK alice\r\n"]

    def test_refused_port_raises_connect_error(self, closed_port):
        with pytest.raises(ConnectError) as exc_info:
            ConnectionManager(port=closed_port).connect("alice", "127.0.0.1")

        assert exc_info.value.server == f"127.0.0.1:{closed_port}"
        assert isinstance(exc_info.value.reason, OSError)

    def test_refused_port_is_not_logged_as_error(self, closed_port, caplog):
        """The caller reports connect failures; the manager only notes them."""
        with caplog.at_level(logging.DEBUG):
            with pytest.raises(ConnectError):
                ConnectionManager(port=closed_port).connect("alice", "127.0.0.1")

        assert "Failed to connect" in caplog.text
        assert all(r.levelno < logging.ERROR for r in caplog.records)

    def test_handshake_write_failure_raises_connect_error(self):
        outbound = MagicMock()
        outbound.write.side_effect = BrokenPipeError("broken pipe")
        sock = MagicMock()
        inbound = MagicMock()
        sock.makefile.side_effect = lambda mode: outbound if "w" in mode else inbound

        with patch(
            "irc_client.connection.socket.create_connection", return_value=sock
        ) as create_connection:
            with pytest.raises(ConnectError):
                ConnectionManager(port=6667).connect("alice", "irc.example.net")

        create_connection.assert_called_once_with(("irc.example.net", 6667))
        sock.close.assert_called_once()


class TestConnection:
    @pytest.fixture
    def socket_pair(self):
        local, remote = socket.socketpair()
        remote.settimeout(5)
        yield local, remote
        remote.close()

    def test_directions_are_split(self, socket_pair):
        local, remote = socket_pair
        connection = Connection(local, "test:6667")

        remote.sendall(b"PING :42\r\n")
        connection.outbound.send("PONG", ":42")

        assert connection.inbound.readline() == b"PING :42\r\n"
        assert remote.recv(1024) == b"PONG :42\r\n"
        connection.close()

    def test_close_is_idempotent(self, socket_pair):
        local, remote = socket_pair
        connection = Connection(local, "test:6667")

        connection.close()
        connection.close()

        assert connection.closed
        assert remote.recv(1024) == b""


class TestCommandWriter:
    def test_frames_with_crlf(self):
        stream = MagicMock()
        line = CommandWriter(stream).send("JOIN", "#test")

        assert line == "JOIN #test\r\n"
        stream.write.assert_called_once_with(b"JOIN #test\r\n")
        stream.flush.assert_called_once()

    def test_empty_payload_keeps_separator(self):
        stream = MagicMock()
        CommandWriter(stream).send("QUIT")
        stream.write.assert_called_once_with(b"QUIT \r\n")
