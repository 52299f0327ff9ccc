import socket
import logging
from typing import BinaryIO, Callable

from irc_shared.config import LOGGER_NAME, IRC_PORT
from irc_shared.errors import ConnectError

CRLF = "\r\n"


class CommandWriter:
    """The outbound half of a connection.

    Frames each command as `<VERB> <payload>\\r\\n`. Write failures are not
    caught here and reach the caller as `OSError`.
    """

    def __init__(
        self,
        stream: BinaryIO,
        encoding: str = "utf-8",
        echo: Callable[[str], None] | None = None,
    ) -> None:
        self.logger = logging.getLogger(f"{LOGGER_NAME}.writer")
        self._stream = stream
        self._encoding = encoding
        self._echo = echo

    def send(self, verb: str, payload: str = "") -> str:
        line = f"{verb} {payload}{CRLF}"
        if self._echo is not None:
            self._echo(line)
        self.logger.debug(f">> {line.strip()}")
        self._stream.write(line.encode(self._encoding))
        self._stream.flush()
        return line


class Connection:
    """A live TCP session split into one inbound and one outbound capability."""

    def __init__(
        self,
        sock: socket.socket,
        server: str,
        encoding: str = "utf-8",
        echo: Callable[[str], None] | None = None,
    ) -> None:
        self.logger = logging.getLogger(f"{LOGGER_NAME}.connection")
        self.sock = sock
        self.server = server
        self.inbound: BinaryIO = sock.makefile("rb")
        self.outbound = CommandWriter(sock.makefile("wb"), encoding, echo)
        self.closed = False

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.logger.info(f"Closing connection to {self.server}")
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # The peer may already have gone away.
            pass
        self.sock.close()


class ConnectionManager:
    def __init__(
        self,
        port: int = IRC_PORT,
        encoding: str = "utf-8",
        echo: Callable[[str], None] | None = None,
    ) -> None:
        self.logger = logging.getLogger(f"{LOGGER_NAME}.connection")
        self.port = port
        self.encoding = encoding
        self.echo = echo

    def connect(self, nickname: str, server_host: str) -> Connection:
        """
        Opens a TCP session to `server_host` and registers `nickname`.

        Sends `USER <nick> * * <nick>` followed by `NICK <nick>`. There is a
        single attempt; any failure closes the socket.

        Raises:
            ConnectError: the host is unreachable, the port refused the
                connection or a handshake write failed.
        """
        server = f"{server_host}:{self.port}"
        self.logger.info(f"Connecting to {server} as {nickname}")
        try:
            sock = socket.create_connection((server_host, self.port))
        except OSError as e:
            self.logger.info(f"Failed to connect to {server}: {e}")
            raise ConnectError(server, e) from e

        connection = Connection(sock, server, self.encoding, self.echo)
        try:
            connection.outbound.send("USER", f"{nickname} * * {nickname}")
            connection.outbound.send("NICK", nickname)
        except OSError as e:
            self.logger.info(f"Registration handshake with {server} failed: {e}")
            connection.close()
            raise ConnectError(server, e) from e

        self.logger.info(f"Connected to {server}")
        return connection
