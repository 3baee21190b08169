import asyncio
import logging
from typing import Awaitable, Callable

from bumpp.commands import Clock, unix_now
from bumpp.repository import Repository

Send = Callable[[int, str], Awaitable]

BUMP_TEXT = "bump"

TICK_INTERVAL = 1

SEND_TIMEOUT = 10

SEND_ATTEMPTS = 2

logger = logging.getLogger(__name__)


class Dispatcher:
    """Delivers due bumps, one scan per tick.

    A tick snapshots the due entries, sends all of them concurrently and
    then commits the result: delivered one-time bumps are removed and
    delivered recurring bumps move to ``now + interval``. Missed intervals
    are skipped, never replayed.
    """

    def __init__(
        self,
        repository: Repository,
        send: Send,
        clock: Clock = unix_now,
        timeout: float = SEND_TIMEOUT,
        attempts: int = SEND_ATTEMPTS,
    ):
        self.repository = repository
        self.send = send
        self.clock = clock
        self.timeout = timeout
        self.attempts = attempts
        self._running = asyncio.Lock()

    async def tick(self) -> int:
        if self._running.locked():
            logger.warning("Previous tick still running, skipping")
            return 0

        async with self._running:
            now = self.clock()
            one_time, recurring = self.repository.get_due(now)

            if not one_time and not recurring:
                return 0

            chat_ids = [bump.chat_id for bump in one_time]
            chat_ids += [bump.chat_id for bump in recurring]

            await asyncio.gather(*(self.deliver(chat_id) for chat_id in chat_ids))

            self.repository.complete(one_time, recurring, now)

            return len(chat_ids)

    async def deliver(self, chat_id: int) -> bool:
        for attempt in range(1, self.attempts + 1):
            try:
                await asyncio.wait_for(self.send(chat_id, BUMP_TEXT), self.timeout)
                logger.info("[%s] Sent bump", chat_id)
                return True
            except Exception as e:
                logger.warning(
                    "[%s] Bump delivery failed (attempt %d/%d): %r",
                    chat_id,
                    attempt,
                    self.attempts,
                    e,
                )

        return False
