"""Tests for the in-memory schedule store."""

from bumpp.models import OneTimeBump, RecurringBump
from bumpp.repository import Repository


class TestRepository:
    def test_add_persists(self, repository: Repository, storage):
        repository.add_one_time(OneTimeBump(1, 2800))
        repository.add_recurring(RecurringBump(1, 60, 1060, "every 1 minute"))

        assert storage.one_time == [OneTimeBump(1, 2800)]
        assert storage.recurring == [RecurringBump(1, 60, 1060, "every 1 minute")]

    def test_queries_filter_by_chat(self, repository: Repository):
        repository.add_one_time(OneTimeBump(1, 2800))
        repository.add_one_time(OneTimeBump(2, 2900))
        repository.add_recurring(RecurringBump(2, 60, 1060, "every 1 minute"))

        assert repository.get_one_time(1) == [OneTimeBump(1, 2800)]
        assert repository.get_recurring(1) == []
        assert len(repository.get_recurring(2)) == 1
        assert repository.count() == (2, 1)

    def test_remove_chat(self, repository: Repository, storage):
        repository.add_one_time(OneTimeBump(1, 2800))
        repository.add_one_time(OneTimeBump(1, 2900))
        repository.add_one_time(OneTimeBump(2, 2900))
        repository.add_recurring(RecurringBump(1, 60, 1060, "every 1 minute"))
        repository.add_recurring(RecurringBump(2, 60, 1060, "every 1 minute"))

        assert repository.remove_chat(1) == 3

        assert repository.one_time == [OneTimeBump(2, 2900)]
        assert repository.recurring == [RecurringBump(2, 60, 1060, "every 1 minute")]
        assert storage.one_time == repository.one_time

    def test_get_due(self, repository: Repository):
        repository.add_one_time(OneTimeBump(1, 2000))
        repository.add_one_time(OneTimeBump(1, 2001))
        repository.add_recurring(RecurringBump(1, 60, 2000, "every 1 minute"))

        one_time, recurring = repository.get_due(2000)

        assert one_time == [OneTimeBump(1, 2000)]
        assert len(recurring) == 1

    def test_complete_matches_by_identity(self, repository: Repository):
        first = OneTimeBump(1, 2000)
        twin = OneTimeBump(1, 2000)
        repository.add_one_time(first)
        repository.add_one_time(twin)

        repository.complete([first], [], 2000)

        assert len(repository.one_time) == 1
        assert repository.one_time[0] is twin

    def test_complete_skips_entries_stopped_meanwhile(self, repository: Repository):
        recurring = RecurringBump(1, 60, 2000, "every 1 minute")
        repository.add_recurring(recurring)
        repository.add_one_time(OneTimeBump(1, 2000))
        one_time, due_recurring = repository.get_due(2000)

        repository.remove_chat(1)
        repository.complete(one_time, due_recurring, 2000)

        assert repository.one_time == []
        assert repository.recurring == []

    def test_write_failure_keeps_memory_state(self, repository: Repository, storage):
        storage.fail_writes = True

        repository.add_one_time(OneTimeBump(1, 2800))

        assert repository.one_time == [OneTimeBump(1, 2800)]
        assert storage.one_time == []
