import logging
import threading

from bumpp.models import OneTimeBump, RecurringBump
from bumpp.storage import Storage, StorageError

logger = logging.getLogger(__name__)


class Repository:
    """Owns the pending one-time and recurring bumps.

    Every mutation happens under ``lock`` and is mirrored to ``storage``.
    The in-memory lists stay authoritative if a write fails.
    """

    def __init__(self, storage: Storage):
        self.storage = storage
        self.one_time: list[OneTimeBump] = []
        self.recurring: list[RecurringBump] = []
        self.lock = threading.Lock()

    # ----------------------------------------------------------------
    #  @rehydration
    # ----------------------------------------------------------------

    def load(self) -> None:
        one_time = self._load_collection(self.storage.load_one_time, "one-time")
        recurring = self._load_collection(self.storage.load_recurring, "recurring")

        with self.lock:
            self.one_time = one_time
            self.recurring = recurring

        logger.info(
            "Loaded %d one-time and %d recurring bumps", len(one_time), len(recurring)
        )

    def _load_collection(self, load: callable, name: str) -> list:
        try:
            return load()
        except StorageError:
            logger.exception("Cannot load %s bumps, starting empty", name)
            return []

    # ----------------------------------------------------------------
    #  @queries
    # ----------------------------------------------------------------

    def get_one_time(self, chat_id: int) -> list[OneTimeBump]:
        with self.lock:
            return [bump for bump in self.one_time if bump.chat_id == chat_id]

    def get_recurring(self, chat_id: int) -> list[RecurringBump]:
        with self.lock:
            return [bump for bump in self.recurring if bump.chat_id == chat_id]

    def get_due(self, now: int) -> tuple[list[OneTimeBump], list[RecurringBump]]:
        with self.lock:
            one_time = [bump for bump in self.one_time if bump.fires_at <= now]
            recurring = [bump for bump in self.recurring if bump.next_fires_at <= now]

            return one_time, recurring

    def count(self) -> tuple[int, int]:
        with self.lock:
            return len(self.one_time), len(self.recurring)

    # ----------------------------------------------------------------
    #  @mutations
    # ----------------------------------------------------------------

    def add_one_time(self, bump: OneTimeBump) -> None:
        with self.lock:
            self.one_time.append(bump)
            self._persist()

    def add_recurring(self, bump: RecurringBump) -> None:
        with self.lock:
            self.recurring.append(bump)
            self._persist()

    def remove_chat(self, chat_id: int) -> int:
        with self.lock:
            one_time = [bump for bump in self.one_time if bump.chat_id != chat_id]
            recurring = [bump for bump in self.recurring if bump.chat_id != chat_id]

            removed = (len(self.one_time) - len(one_time)) + (
                len(self.recurring) - len(recurring)
            )

            self.one_time = one_time
            self.recurring = recurring
            self._persist()

            return removed

    def complete(
        self,
        fired_one_time: list[OneTimeBump],
        fired_recurring: list[RecurringBump],
        now: int,
    ) -> None:
        """Drop delivered one-time bumps and advance delivered recurring ones.

        Entries are matched by identity, so anything stopped while the
        deliveries were in flight stays stopped.
        """
        fired_ids = {id(bump) for bump in fired_one_time}
        advance_ids = {id(bump) for bump in fired_recurring}

        with self.lock:
            changed = False

            remaining = [bump for bump in self.one_time if id(bump) not in fired_ids]

            if len(remaining) != len(self.one_time):
                self.one_time = remaining
                changed = True

            for bump in self.recurring:
                if id(bump) in advance_ids:
                    bump.advance(now)
                    changed = True

            if changed:
                self._persist()

    # ----------------------------------------------------------------
    #  @persistence
    # ----------------------------------------------------------------

    def _persist(self) -> None:
        # Called with the lock held
        try:
            self.storage.replace_one_time(list(self.one_time))
            self.storage.replace_recurring(list(self.recurring))
        except StorageError:
            logger.exception("Cannot persist bumps, keeping in-memory state")
