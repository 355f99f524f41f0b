"""
JSON repositories: Infrastructure adapters for local file storage.

Implements ListRepository by keeping every list, performance included,
in a single JSON array on disk, and ActivityRepository the same way with
one entry per list and day.
"""

import json
import logging
import os
import tempfile
from dataclasses import replace
from pathlib import Path

from flashdeck.application.serialization import (
    daily_stat_to_record,
    list_to_record,
    record_to_daily_stat,
    record_to_data,
    record_to_list,
    validate_daily_stat,
    validate_record,
)
from flashdeck.application.utils.common import utc_now
from flashdeck.domain.errors import InvalidListStructureError
from flashdeck.domain.models import CardList, DailyStat
from flashdeck.domain.ports import ActivityRepository, ListRepository

logger = logging.getLogger(__name__)

LISTS_FILENAME = "lists.json"
ACTIVITY_FILENAME = "activity.json"


def _read_array(path: Path) -> list:
    if not path.exists():
        return []

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, RecursionError) as e:
        raise InvalidListStructureError(f"Corrupt store {path}: {e}") from e

    if not isinstance(data, list):
        raise InvalidListStructureError(f"Store {path} must hold a JSON array")
    return data


def _write_array(path: Path, payload: list) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class JsonListRepository(ListRepository):
    """
    Stores lists in `<data_dir>/lists.json`.

    The file is read on every call and rewritten atomically on every change;
    there is no in-process cache to go stale.
    """

    def __init__(self, data_dir: Path):
        self.path = Path(data_dir) / LISTS_FILENAME

    async def load_list(self, list_id: str) -> CardList | None:
        return next((cl for cl in self._read() if cl.id == list_id), None)

    async def save_list(self, card_list: CardList) -> CardList:
        lists = self._read()
        stored = replace(card_list, updated_at=utc_now())

        for i, existing in enumerate(lists):
            if existing.id == stored.id:
                lists[i] = stored
                break
        else:
            lists.append(stored)

        self._write(lists)
        logger.debug(f"Saved list {stored.id} ({len(stored.cards)} cards) to {self.path}")
        return stored

    async def delete_list(self, list_id: str) -> bool:
        lists = self._read()
        remaining = [cl for cl in lists if cl.id != list_id]
        if len(remaining) == len(lists):
            return False
        self._write(remaining)
        return True

    async def list_all(self) -> list[CardList]:
        return self._read()

    def _read(self) -> list[CardList]:
        return [record_to_list(validate_record(item)) for item in _read_array(self.path)]

    def _write(self, lists: list[CardList]) -> None:
        _write_array(self.path, [record_to_data(list_to_record(cl)) for cl in lists])


class JsonActivityRepository(ActivityRepository):
    """Stores the daily activity log in `<data_dir>/activity.json`."""

    def __init__(self, data_dir: Path):
        self.path = Path(data_dir) / ACTIVITY_FILENAME

    async def load_daily_stats(self, list_id: str | None = None) -> list[DailyStat]:
        stats = self._read()
        if list_id is not None:
            stats = [s for s in stats if s.list_id == list_id]
        return sorted(stats, key=lambda s: s.day)

    async def save_daily_stat(self, stat: DailyStat) -> None:
        stats = [s for s in self._read() if (s.day, s.list_id) != (stat.day, stat.list_id)]
        stats.append(stat)
        _write_array(self.path, [record_to_data(daily_stat_to_record(s)) for s in stats])
        logger.debug(f"Saved activity for list {stat.list_id} on {stat.day}")

    def _read(self) -> list[DailyStat]:
        return [record_to_daily_stat(validate_daily_stat(item)) for item in _read_array(self.path)]
