import sys
import queue
import logging
import threading
from dataclasses import dataclass
from typing import BinaryIO, Callable, TextIO

from irc_shared.config import ClientConfig, LOGGER_NAME, client_config
from irc_shared.models import DispatchOutcome, Frame

from .commands import CommandDispatcher, CommandRegistry, build_registry
from .connection import Connection, ConnectionManager
from .framer import frame_lines
from .renderer import ConsoleRenderer


@dataclass
class ActivityResult:
    name: str
    outcome: DispatchOutcome | None = None
    error: BaseException | None = None


class IrcSession:
    """
    One connection to one server under one nickname.

    The inbound framer and the input dispatch loop run on two daemon threads,
    each owning one direction of the connection. Each posts an
    `ActivityResult` on `results` when it stops, and `run` acts on the first
    one that is not the server hanging up after `/quit`.
    """

    def __init__(
        self,
        nickname: str,
        server: str,
        config: ClientConfig = client_config,
        renderer: ConsoleRenderer | None = None,
        registry: CommandRegistry | None = None,
        connection_manager: ConnectionManager | None = None,
    ) -> None:
        self.logger = logging.getLogger(f"{LOGGER_NAME}.session")
        self.nickname = nickname
        self.server = server
        self.config = config
        self.renderer = renderer if renderer is not None else ConsoleRenderer()
        self.registry = registry if registry is not None else build_registry()

        if connection_manager is None:
            echo = self.renderer.render_outbound if config.echo_outbound else None
            connection_manager = ConnectionManager(
                port=config.port, encoding=config.encoding, echo=echo
            )
        self.connection_manager = connection_manager

        self.connection: Connection | None = None
        self.results: queue.Queue[ActivityResult] = queue.Queue()
        self.quitting = threading.Event()
        self._closing = threading.Event()

    def run(self, input_stream: TextIO | None = None) -> None:
        """
        Connects, then blocks until `/quit` or a fatal I/O error.

        Raises:
            ConnectError: connecting or registering failed.
            OSError: reading from or writing to the server failed.
        """
        connection = self.connection_manager.connect(self.nickname, self.server)
        self.connection = connection
        dispatcher = CommandDispatcher(
            self.registry, connection.outbound, self.renderer, quitting=self.quitting
        )

        self._start_activity("inbound", self.handle_inbound, connection.inbound)
        self._start_activity(
            "dispatch", self.handle_user_input, dispatcher, input_stream
        )

        try:
            result = self._wait_for_result()
        finally:
            self._closing.set()
            connection.close()

        if result.error is None and result.outcome is not DispatchOutcome.QUIT:
            result.error = ConnectionError(f"{result.name} activity ended unexpectedly")

        if result.error is not None:
            self.logger.warning(f"{result.name} activity failed: {result.error}")
            raise result.error

        self.logger.info("Session ended by user")
        self.renderer.render_notice("Quitting...")

    def _wait_for_result(self) -> ActivityResult:
        """Returns the first result that decides how the session ends.

        Once QUIT is on its way the server hangs up, so an inbound failure
        from then on is dropped and the dispatch thread's outcome is awaited.
        """
        while True:
            result = self.results.get()
            if result.name == "inbound" and self.quitting.is_set():
                self.logger.debug(f"inbound ended during quit: {result.error}")
                continue
            return result

    def _start_activity(self, name: str, target: Callable, *args) -> threading.Thread:
        thread = threading.Thread(
            target=self._run_activity,
            args=(name, target, *args),
            name=f"irc-{name}",
            daemon=True,
        )
        thread.start()
        return thread

    def _run_activity(self, name: str, target: Callable, *args) -> None:
        try:
            outcome = target(*args)
        except Exception as e:
            if self._closing.is_set():
                self.logger.debug(f"{name} activity stopped after close: {e}")
            self.results.put(ActivityResult(name, error=e))
        else:
            self.results.put(ActivityResult(name, outcome=outcome))

    def handle_inbound(self, inbound: BinaryIO) -> None:
        """Prints every line received from the server, numbered in arrival order."""
        lines = frame_lines(
            inbound,
            encoding=self.config.encoding,
            max_line_bytes=self.config.max_line_bytes,
        )
        for seq, text in enumerate(lines):
            self.renderer.render_frame(Frame(seq=seq, text=text))

    def handle_user_input(
        self, dispatcher: CommandDispatcher, input_stream: TextIO | None = None
    ) -> DispatchOutcome:
        while True:
            stream = input_stream if input_stream is not None else sys.stdin
            try:
                line = stream.readline()
            except UnicodeDecodeError as e:
                self.logger.error(f"error while reading user input: {e}")
                continue

            if not line:
                self.logger.info("End of input, quitting")
                line = "/quit"

            if dispatcher.dispatch(line) is DispatchOutcome.QUIT:
                return DispatchOutcome.QUIT
