from enum import Enum

from pydantic import BaseModel, ConfigDict

from .errors import CommandValidationError


class DispatchOutcome(Enum):
    CONTINUE = "continue"
    QUIT = "quit"


class CommandSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_args: int
    usage: str


class Command(BaseModel):
    """A local input line split into a verb and its arguments."""

    verb: str
    args: list[str] = []

    @classmethod
    def parse(cls, line: str) -> "Command | None":
        tokens = line.split()
        if not tokens:
            return None
        return cls(verb=tokens[0].strip(), args=tokens[1:])

    def require(self, spec: CommandSpec) -> None:
        if len(self.args) < spec.min_args:
            raise CommandValidationError(self.verb, spec.usage)

    def arg(self, index: int, default: str = "") -> str:
        if 0 <= index < len(self.args):
            return self.args[index]
        return default

    def rest(self, start: int) -> str:
        return " ".join(self.args[start:])

    def __str__(self):
        return " ".join([self.verb, *self.args])


class Frame(BaseModel):
    seq: int
    text: str

    def __str__(self):
        return f"{self.seq}: {self.text}"
