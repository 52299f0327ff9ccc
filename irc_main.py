import sys
import logging

from irc_client.session import IrcSession
from irc_shared.config import DEFAULT_HOST, client_config
from irc_shared.errors import ConnectError, UsageError
from irc_shared.log import setup_logging

PROGRAM_NAME = "pyirc"


def parse_args(argv: list[str]) -> tuple[str, str]:
    """Returns `(nickname, server_host)` from `<nickname> [server-host]`."""
    if len(argv) == 1:
        return argv[0], DEFAULT_HOST
    if len(argv) == 2:
        return argv[0], argv[1]
    raise UsageError(f"expected 1 or 2 arguments, got {len(argv)}")


def usage() -> None:
    print(
        f"{PROGRAM_NAME}: usage: {PROGRAM_NAME} <nickname> [server]",
        file=sys.stderr,
    )
    print(
        f"{PROGRAM_NAME}: if no server is supplied, defaults to {DEFAULT_HOST}",
        file=sys.stderr,
    )


def main(argv: list[str] | None = None, session_factory=IrcSession) -> int:
    try:
        nickname, server = parse_args(sys.argv[1:] if argv is None else argv)
    except UsageError:
        usage()
        return 1

    # Errors are reported through the console handler set up by setup_logging.
    logger = logging.getLogger(client_config.logger_name)
    session = session_factory(nickname, server)

    try:
        session.run()
    except ConnectError as e:
        logger.error(f"Connection failed: {e}")
        return 1
    except OSError as e:
        logger.error(f"Client Error: {e}")
        return 1
    return 0


def run() -> None:
    logger = setup_logging(client_config)
    logger.info("Starting IRC client")
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("Client interrupted by user (Ctrl+C). Shutting down.")
        print("\nDisconnected. Goodbye!")
        sys.exit(130)
    finally:
        logging.shutdown()


if __name__ == "__main__":
    run()
