from dataclasses import dataclass
from enum import Enum


@dataclass
class OneTimeBump:
    chat_id: int
    fires_at: int


@dataclass
class RecurringBump:
    chat_id: int
    interval_seconds: int
    next_fires_at: int
    description: str

    def advance(self, now: int) -> None:
        self.next_fires_at = now + self.interval_seconds


class CommandKind(Enum):
    INFO = "info"
    HELP = "help"
    ONE_TIME = "one_time"
    RECURRING = "recurring"
    SHOW_QUEUE = "show_queue"
    STOP = "stop"
    HI = "hi"


@dataclass
class Command:
    kind: CommandKind
    amount: int = 0
    seconds: int = 0
    unit: str = ""


@dataclass
class Reply:
    text: str
    rich: bool = False
