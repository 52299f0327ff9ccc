import logging
import threading
from types import MappingProxyType
from typing import Callable, Mapping

from irc_shared.config import LOGGER_NAME
from irc_shared.errors import CommandValidationError
from irc_shared.models import Command, CommandSpec, DispatchOutcome

from .connection import CommandWriter
from .renderer import ConsoleRenderer

logger = logging.getLogger(f"{LOGGER_NAME}.commands")

CommandRegistry = Mapping[str, CommandSpec]


def build_registry() -> CommandRegistry:
    """Returns the read-only table of local commands, in `help` order."""
    commands = {
        "help": CommandSpec(min_args=0, usage="Command: help"),
        "/quit": CommandSpec(min_args=0, usage="Command: /quit"),
        "/join": CommandSpec(min_args=1, usage="Command: /join Parameters: <channel>"),
        "/part": CommandSpec(min_args=1, usage="Command: /part Parameters: <channel>"),
        "/nick": CommandSpec(
            min_args=1, usage="Command: /nick Parameters: <nickname>"
        ),
        "/msg": CommandSpec(
            min_args=2, usage="Command: /msg Parameters: <receiver> <text>"
        ),
        "/topic": CommandSpec(
            min_args=2, usage="Command: /topic Parameters: <channel> <topic>"
        ),
        "/list": CommandSpec(min_args=0, usage="Command: /list Parameters: [<target>]"),
        "/names": CommandSpec(
            min_args=0, usage="Command: /names Parameters: [<target>]"
        ),
    }
    return MappingProxyType(commands)


def _wire_join(command: Command) -> tuple[str, str]:
    return "JOIN", command.arg(0)


def _wire_part(command: Command) -> tuple[str, str]:
    return "PART", command.arg(0)


def _wire_nick(command: Command) -> tuple[str, str]:
    return "NICK", command.arg(0)


def _wire_msg(command: Command) -> tuple[str, str]:
    return "PRIVMSG", f"{command.arg(0)} :{command.rest(1)}"


def _wire_topic(command: Command) -> tuple[str, str]:
    topic = command.rest(1)
    if len(command.args) > 2:
        topic = f":{topic}"
    return "TOPIC", f"{command.arg(0)} {topic}"


def _wire_list(command: Command) -> tuple[str, str]:
    return "LIST", command.arg(0)


def _wire_names(command: Command) -> tuple[str, str]:
    return "NAMES", command.arg(0)


WIRE_COMMANDS: dict[str, Callable[[Command], tuple[str, str]]] = {
    "/join": _wire_join,
    "/part": _wire_part,
    "/nick": _wire_nick,
    "/msg": _wire_msg,
    "/topic": _wire_topic,
    "/list": _wire_list,
    "/names": _wire_names,
}


class CommandDispatcher:
    """Turns local input lines into wire commands on the outbound stream."""

    def __init__(
        self,
        registry: CommandRegistry,
        writer: CommandWriter,
        renderer: ConsoleRenderer,
        quitting: threading.Event | None = None,
    ) -> None:
        self.registry = registry
        self.writer = writer
        self.renderer = renderer
        self.quitting = quitting if quitting is not None else threading.Event()

    def dispatch(self, line: str) -> DispatchOutcome:
        """
        Handles one line of local input.

        Missing arguments and unknown verbs are reported on the console and
        nothing is written. A failed write raises `OSError`.

        Returns:
            `DispatchOutcome.QUIT` after sending QUIT, otherwise
            `DispatchOutcome.CONTINUE`.
        """
        command = Command.parse(line)
        if command is None:
            return DispatchOutcome.CONTINUE

        spec = self.registry.get(command.verb)
        if spec is None:
            logger.info(f"Unrecognized command: {command.verb}")
            self.renderer.render_notice(f"Unrecognized command: {command.verb}")
            return DispatchOutcome.CONTINUE

        try:
            command.require(spec)
        except CommandValidationError as e:
            logger.info(f"Too few arguments for {e.verb}")
            self.renderer.render_usage(e.usage)
            return DispatchOutcome.CONTINUE

        if command.verb == "help":
            for entry in self.registry.values():
                self.renderer.render_usage(entry.usage)
            return DispatchOutcome.CONTINUE

        if command.verb == "/quit":
            # Set before writing: the server may hang up as soon as QUIT lands.
            self.quitting.set()
            self.writer.send("QUIT")
            return DispatchOutcome.QUIT

        verb, payload = WIRE_COMMANDS[command.verb](command)
        self.writer.send(verb, payload)
        return DispatchOutcome.CONTINUE


def dispatch(
    registry: CommandRegistry,
    line: str,
    writer: CommandWriter,
    renderer: ConsoleRenderer,
) -> DispatchOutcome:
    return CommandDispatcher(registry, writer, renderer).dispatch(line)
