import logging
import time
from typing import Callable

from bumpp.models import Command, CommandKind, OneTimeBump, RecurringBump, Reply
from bumpp.repository import Repository
from bumpp.utils import pluralize, time_to_str

Clock = Callable[[], int]

logger = logging.getLogger(__name__)


def unix_now() -> int:
    return int(time.time())


# ----------------------------------------------------------------
#  @messages
# ----------------------------------------------------------------


def welcome_message(bot_username: str) -> str:
    return f"""
👋 Hi there! I'm {bot_username}, a handy bot that helps you schedule bumps in your chats.

🤖 I can schedule both one-time and recurring bumps, helping you keep conversations active without manual intervention.

🧪 Try me out by saying:
• "@{bot_username} bump this in 30 minutes" (one-time bump)
• "@{bot_username} bump this every 2 hours" (recurring bump)

📝 Created by @createdbymason
🔗 Say what's up on <a href="https://x.com/createdbymason">X</a> or <a href="https://t.me/createdbymason">Telegram</a>
"""


def help_message(bot_username: str) -> str:
    return f"""
Here's what I can do:
• @{bot_username} info/about - Learn about me
• @{bot_username} bump this in [number] [unit] - Schedule a one-time bump
• @{bot_username} bump this every [number] [unit] - Schedule a recurring bump
  Examples: "bump this in 30 mins" or "bump this every an hour"
• @{bot_username} show queue - Show all scheduled bumps
• @{bot_username} stop - Cancel all scheduled bumps
"""


HI_MESSAGE = "Hello, I’m alive!"

EMPTY_QUEUE_MESSAGE = "No bumps scheduled."


def str_queue(
    one_time: list[OneTimeBump], recurring: list[RecurringBump], now: int
) -> str:
    sections = []

    if one_time:
        lines = [f"📆 One-time bumps ({len(one_time)}):"]
        lines += [
            f"{idx + 1}. In {time_to_str(bump.fires_at - now)}"
            for idx, bump in enumerate(sorted(one_time, key=lambda b: b.fires_at))
        ]
        sections.append("\n".join(lines))

    if recurring:
        lines = [f"🔄 Recurring bumps ({len(recurring)}):"]
        lines += [
            f"{idx + 1}. {bump.description} (next in {time_to_str(bump.next_fires_at - now)})"
            for idx, bump in enumerate(recurring)
        ]
        sections.append("\n".join(lines))

    return "\n\n".join(sections)


# ----------------------------------------------------------------
#  @executor
# ----------------------------------------------------------------


class CommandExecutor:
    """Applies parsed commands to the repository and builds the replies."""

    def __init__(self, repository: Repository, bot_username: str, clock: Clock = unix_now):
        self.repository = repository
        self.bot_username = bot_username
        self.clock = clock

    def execute(self, command: Command, chat_id: int) -> Reply | None:
        match command.kind:
            case CommandKind.INFO:
                return self.info()
            case CommandKind.HELP:
                return Reply(help_message(self.bot_username))
            case CommandKind.HI:
                return Reply(HI_MESSAGE)
            case CommandKind.ONE_TIME:
                return self.schedule_one_time(command, chat_id)
            case CommandKind.RECURRING:
                return self.schedule_recurring(command, chat_id)
            case CommandKind.SHOW_QUEUE:
                return self.show_queue(chat_id)
            case CommandKind.STOP:
                return self.stop(chat_id)
            case _:
                return None

    def info(self) -> Reply:
        return Reply(welcome_message(self.bot_username), rich=True)

    def schedule_one_time(self, command: Command, chat_id: int) -> Reply | None:
        if command.seconds <= 0:
            return None

        bump = OneTimeBump(chat_id, self.clock() + command.seconds)
        self.repository.add_one_time(bump)

        logger.info("[%s] Scheduled bump at %d", chat_id, bump.fires_at)

        return Reply(f"✅ Bump scheduled in {command.amount} {command.unit}.")

    def schedule_recurring(self, command: Command, chat_id: int) -> Reply | None:
        if command.seconds <= 0:
            return None

        description = f"every {command.amount} {command.unit}"
        bump = RecurringBump(
            chat_id, command.seconds, self.clock() + command.seconds, description
        )
        self.repository.add_recurring(bump)

        logger.info("[%s] Scheduled recurring bump %s", chat_id, description)

        return Reply(f"✅ Recurring bump scheduled {description}.")

    def show_queue(self, chat_id: int) -> Reply:
        one_time = self.repository.get_one_time(chat_id)
        recurring = self.repository.get_recurring(chat_id)

        if not one_time and not recurring:
            return Reply(EMPTY_QUEUE_MESSAGE)

        return Reply(str_queue(one_time, recurring, self.clock()))

    def stop(self, chat_id: int) -> Reply:
        removed = self.repository.remove_chat(chat_id)

        logger.info("[%s] Stopped %d bumps", chat_id, removed)

        return Reply(f"🛑 Stopped {removed} {pluralize(removed, 'bump')} in this chat.")
