from enum import Enum

from blessed import Terminal
from pydantic import BaseModel

from irc_shared.models import Frame


class Style(Enum):
    PLAIN = "normal"
    CYAN = "cyan"
    GREEN = "green"
    YELLOW = "yellow"


class RenderConfig(BaseModel):
    frame_style: Style = Style.PLAIN
    outbound_style: Style = Style.GREEN
    usage_style: Style = Style.CYAN
    notice_style: Style = Style.YELLOW
    outbound_marker: str = "sending:"


class ConsoleRenderer:
    """Prints chat traffic and local notices to the console.

    Called from both the inbound and the dispatch threads; each call emits
    one whole line with a single print.
    """

    def __init__(
        self,
        config: RenderConfig = RenderConfig(),
        term: Terminal | None = None,
    ):
        self._term: Terminal = term if term is not None else Terminal()
        self.render_config: RenderConfig = config

    def _styled(self, style: Style, text: str) -> str:
        if style is Style.PLAIN:
            return text
        return getattr(self._term, style.value)(text)

    def render_frame(self, frame: Frame):
        print(self._styled(self.render_config.frame_style, str(frame)), flush=True)

    def render_outbound(self, line: str):
        text = f"{self.render_config.outbound_marker} {line.strip()}"
        print(self._styled(self.render_config.outbound_style, text), flush=True)

    def render_usage(self, usage: str):
        print(self._styled(self.render_config.usage_style, usage), flush=True)

    def render_notice(self, text: str):
        print(self._styled(self.render_config.notice_style, text), flush=True)
