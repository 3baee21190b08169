import re
from typing import Callable

from bumpp.models import Command, CommandKind
from bumpp.utils import normalize, parse_amount

CommandFactory = Callable[[re.Match], Command]

AMOUNT = r"(\d+|an?)"
UNIT = r"([a-z]+)"


def _simple(kind: CommandKind) -> CommandFactory:
    return lambda match: Command(kind)


def _timed(kind: CommandKind) -> CommandFactory:
    def build(match: re.Match) -> Command:
        amount = parse_amount(match.group(1))
        seconds, unit = normalize(amount, match.group(2))
        return Command(kind, amount=amount, seconds=seconds, unit=unit)

    return build


# Order is precedence: the first matching grammar wins.
GRAMMAR: list[tuple[str, CommandFactory]] = [
    (r"(?:info|about)\b", _simple(CommandKind.INFO)),
    (r"help\b", _simple(CommandKind.HELP)),
    (rf"bump\s+this\s+in\s+{AMOUNT}\s*{UNIT}", _timed(CommandKind.ONE_TIME)),
    (rf"bump\s+this\s+every\s+{AMOUNT}\s*{UNIT}", _timed(CommandKind.RECURRING)),
    (r"show\s+queue\b", _simple(CommandKind.SHOW_QUEUE)),
    (r"stop\b", _simple(CommandKind.STOP)),
    (r"hi\b", _simple(CommandKind.HI)),
]


def mention(bot_username: str) -> str:
    return "@" + re.escape(bot_username.lstrip("@"))


def parse(text: str, bot_username: str) -> Command | None:
    """Match a chat message against the bump grammar.

    Returns None when the bot is not mentioned, and a help command when it
    is mentioned but nothing in the grammar matches.
    """
    prefix = mention(bot_username)
    text = text.strip()

    if not re.search(rf"{prefix}\b", text, re.IGNORECASE):
        return None

    for pattern, factory in GRAMMAR:
        match = re.search(rf"{prefix}\s+{pattern}", text, re.IGNORECASE)

        if match:
            return factory(match)

    return Command(CommandKind.HELP)
