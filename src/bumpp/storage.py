"""Durable mirror of the schedule store.

The repository only ever replaces or loads a collection as a whole, so an
adapter is anything offering those four operations. ``JsonStorage`` keeps
each collection in its own JSON file and writes them atomically.
"""

import json
import logging
import os
import tempfile
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Protocol

from bumpp.models import OneTimeBump, RecurringBump

ONE_TIME_FILE = "one_time_bumps.json"
RECURRING_FILE = "recurring_bumps.json"

logger = logging.getLogger(__name__)


class StorageError(Exception):
    pass


class Storage(Protocol):
    def load_one_time(self) -> list[OneTimeBump]: ...

    def load_recurring(self) -> list[RecurringBump]: ...

    def replace_one_time(self, bumps: list[OneTimeBump]) -> None: ...

    def replace_recurring(self, bumps: list[RecurringBump]) -> None: ...


class JsonStorage:
    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    def load_one_time(self) -> list[OneTimeBump]:
        return self._load(self.directory / ONE_TIME_FILE, OneTimeBump)

    def load_recurring(self) -> list[RecurringBump]:
        return self._load(self.directory / RECURRING_FILE, RecurringBump)

    def replace_one_time(self, bumps: list[OneTimeBump]) -> None:
        self._write(self.directory / ONE_TIME_FILE, bumps)

    def replace_recurring(self, bumps: list[RecurringBump]) -> None:
        self._write(self.directory / RECURRING_FILE, bumps)

    def _load(self, path: Path, model: type) -> list:
        if not path.exists():
            return []

        try:
            with path.open(encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Cannot read {path}: {e}") from e

        if not isinstance(raw, list):
            raise StorageError(f"Expected a list in {path}")

        bumps = []

        for item in raw:
            bump = from_dict(model, item)

            if bump is None:
                logger.warning("Skipping malformed entry in %s: %r", path, item)
                continue

            bumps.append(bump)

        return bumps

    def _write(self, path: Path, bumps: list) -> None:
        records = [asdict(bump) for bump in bumps]

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=path.parent, suffix=".tmp")

            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(records, f, indent=2)
                    f.flush()
                    os.fsync(f.fileno())
                Path(tmp).replace(path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise

        except OSError as e:
            raise StorageError(f"Cannot write {path}: {e}") from e


def from_dict(model: type, item: Any):
    if not isinstance(item, dict):
        return None

    values = {}

    for field in fields(model):
        value = item.get(field.name)

        # bool is an int subclass but never a valid chat id or timestamp
        if field.type is int and (type(value) is not int):
            return None

        if field.type is str and not isinstance(value, str):
            return None

        values[field.name] = value

    return model(**values)
