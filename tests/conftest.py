"""Shared test fixtures: fake clock, fake transport, in-memory storage."""

from pathlib import Path

import pytest

from bumpp.commands import CommandExecutor
from bumpp.dispatcher import Dispatcher
from bumpp.models import OneTimeBump, RecurringBump
from bumpp.repository import Repository
from bumpp.storage import JsonStorage, StorageError

BOT_USERNAME = "BumppBot"


class FakeClock:
    def __init__(self, now: int = 1000):
        self.now = now

    def __call__(self) -> int:
        return self.now


class FakeTransport:
    """Records sends; chat ids in ``failing`` raise on every send."""

    def __init__(self):
        self.sent: list[tuple[int, str]] = []
        self.failing: set[int] = set()

    async def send(self, chat_id: int, text: str) -> None:
        if chat_id in self.failing:
            raise ConnectionError("send failed")
        self.sent.append((chat_id, text))


class MemoryStorage:
    def __init__(self):
        self.one_time: list[OneTimeBump] = []
        self.recurring: list[RecurringBump] = []
        self.writes = 0
        self.fail_writes = False

    def load_one_time(self) -> list[OneTimeBump]:
        return [OneTimeBump(b.chat_id, b.fires_at) for b in self.one_time]

    def load_recurring(self) -> list[RecurringBump]:
        return [
            RecurringBump(b.chat_id, b.interval_seconds, b.next_fires_at, b.description)
            for b in self.recurring
        ]

    def replace_one_time(self, bumps: list[OneTimeBump]) -> None:
        if self.fail_writes:
            raise StorageError("disk full")
        self.writes += 1
        self.one_time = [OneTimeBump(b.chat_id, b.fires_at) for b in bumps]

    def replace_recurring(self, bumps: list[RecurringBump]) -> None:
        if self.fail_writes:
            raise StorageError("disk full")
        self.recurring = [
            RecurringBump(b.chat_id, b.interval_seconds, b.next_fires_at, b.description)
            for b in bumps
        ]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def json_storage(tmp_path: Path) -> JsonStorage:
    return JsonStorage(tmp_path / "data")


@pytest.fixture
def repository(storage: MemoryStorage) -> Repository:
    return Repository(storage)


@pytest.fixture
def executor(repository: Repository, clock: FakeClock) -> CommandExecutor:
    return CommandExecutor(repository, BOT_USERNAME, clock)


@pytest.fixture
def dispatcher(
    repository: Repository, transport: FakeTransport, clock: FakeClock
) -> Dispatcher:
    return Dispatcher(repository, transport.send, clock, timeout=1)
