"""In-memory repositories, for tests and for embedding the engine."""

from dataclasses import replace
from datetime import date

from flashdeck.application.utils.common import utc_now
from flashdeck.domain.models import CardList, DailyStat
from flashdeck.domain.ports import ActivityRepository, ListRepository


class InMemoryListRepository(ListRepository):
    def __init__(self, lists: list[CardList] | None = None):
        self._lists: dict[str, CardList] = {cl.id: cl for cl in lists or []}

    async def load_list(self, list_id: str) -> CardList | None:
        return self._lists.get(list_id)

    async def save_list(self, card_list: CardList) -> CardList:
        stored = replace(card_list, updated_at=utc_now())
        self._lists[stored.id] = stored
        return stored

    async def delete_list(self, list_id: str) -> bool:
        return self._lists.pop(list_id, None) is not None

    async def list_all(self) -> list[CardList]:
        return list(self._lists.values())


class InMemoryActivityRepository(ActivityRepository):
    def __init__(self, stats: list[DailyStat] | None = None):
        self._stats: dict[tuple[date, str], DailyStat] = {
            (s.day, s.list_id): s for s in stats or []
        }

    async def load_daily_stats(self, list_id: str | None = None) -> list[DailyStat]:
        stats = [s for s in self._stats.values() if list_id is None or s.list_id == list_id]
        return sorted(stats, key=lambda s: s.day)

    async def save_daily_stat(self, stat: DailyStat) -> None:
        self._stats[(stat.day, stat.list_id)] = stat
