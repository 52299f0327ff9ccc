class IrcClientError(Exception):
    """Base class for errors raised by the IRC client."""


class UsageError(IrcClientError):
    """The command line could not be understood."""


class ConnectError(IrcClientError):
    """The server could not be reached or the registration handshake failed."""

    def __init__(self, server: str, reason: Exception | str):
        self.server = server
        self.reason = reason
        super().__init__(f"could not connect to {server}: {reason}")


class FrameDecodeError(IrcClientError):
    def __init__(self, raw: bytes, reason: UnicodeDecodeError):
        self.raw = raw
        self.reason = reason
        super().__init__(f"error while reading from tcp stream: {reason}")


class CommandValidationError(IrcClientError):
    """A local command was given fewer arguments than it needs."""

    def __init__(self, verb: str, usage: str):
        self.verb = verb
        self.usage = usage
        super().__init__(usage)
