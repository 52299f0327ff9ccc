import logging
from typing import BinaryIO, Iterator

from irc_shared.config import LOGGER_NAME
from irc_shared.errors import FrameDecodeError

MAX_LINE_BYTES = 512

START_OF_HEADING = 0x01
CARRIAGE_RETURN = 0x0D
LINE_FEED = 0x0A

logger = logging.getLogger(f"{LOGGER_NAME}.framer")


def decode_frame(raw: bytes, encoding: str = "utf-8") -> str:
    try:
        return raw.decode(encoding)
    except UnicodeDecodeError as e:
        raise FrameDecodeError(raw, e) from e


def read_raw_line(stream: BinaryIO, max_line_bytes: int = MAX_LINE_BYTES) -> bytes:
    """Read up to one line of raw bytes from `stream`.

    Stops at a line feed or after `max_line_bytes` reads, whichever comes
    first. Every byte read counts toward the cap, including the start of
    heading and carriage return bytes that are dropped from the result.
    Whatever follows a truncated line is read as the next line.

    Raises:
        ConnectionError: the stream reached end of file.
        OSError: the underlying read failed.
    """
    buffer = bytearray()
    for _ in range(max_line_bytes):
        byte = stream.read(1)
        if not byte:
            raise ConnectionError("connection closed by server")

        value = byte[0]
        if value in (START_OF_HEADING, CARRIAGE_RETURN):
            continue
        if value == LINE_FEED:
            break
        buffer.append(value)
    return bytes(buffer)


def frame_lines(
    stream: BinaryIO,
    encoding: str = "utf-8",
    max_line_bytes: int = MAX_LINE_BYTES,
) -> Iterator[str]:
    """Yield decoded, non-empty lines from a raw inbound byte stream.

    The generator never finishes on its own: it ends only by propagating the
    error of a failed read. Lines that fail to decode are logged and skipped.
    """
    while True:
        raw = read_raw_line(stream, max_line_bytes)
        try:
            text = decode_frame(raw, encoding)
        except FrameDecodeError as e:
            logger.error(str(e))
            continue

        if text:
            logger.debug(f"<< {text}")
            yield text
