"""
Practice Service: Application layer orchestrator.

Coordinates loading lists from the repository, combining and shuffling them
into a session, and writing per-card results back to the owning list.
"""

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, replace

from flashdeck.application.combiner import CombinedPool, combine_lists
from flashdeck.application.performance import record_card_view
from flashdeck.application.progress import (
    ProgressReport,
    build_progress_report,
    empty_daily_stat,
    record_activity,
    record_session,
    today_utc,
)
from flashdeck.application.shuffle import (
    DEFAULT_SMART_SHUFFLE_CONFIG,
    MasteryDistribution,
    ShuffleSessionStats,
    SmartShuffleConfig,
    get_mastery_distribution,
    get_shuffle_session_stats,
    perform_smart_shuffle,
)
from flashdeck.domain.constants import DEFAULT_PROGRESS_DAYS
from flashdeck.domain.errors import CardNotFoundError
from flashdeck.domain.models import Card, DailyStat, Direction
from flashdeck.domain.ports import ActivityRepository, ListRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PracticeSession:
    """
    One practice run: the shuffled card order plus the pool it was drawn from.

    Ephemeral; never persisted.
    """

    cards: list[Card]
    pool: CombinedPool

    @property
    def direction(self) -> Direction:
        return self.pool.direction

    @property
    def name(self) -> str:
        return self.pool.name

    @property
    def card_origin_map(self) -> dict[str, str]:
        return self.pool.card_origin_map

    def stats(self) -> ShuffleSessionStats:
        return get_shuffle_session_stats(self.pool.cards, self.cards)

    def distribution(self) -> MasteryDistribution:
        return get_mastery_distribution(self.stats())


class PracticeService:
    """
    Application service for running practice sessions.

    Follows Dependency Inversion: depends on the ListRepository abstraction,
    not a concrete storage adapter.
    """

    def __init__(
        self,
        repo: ListRepository,
        shuffle_config: SmartShuffleConfig | None = None,
        rng: random.Random | None = None,
        activity: ActivityRepository | None = None,
    ):
        """
        Args:
            repo: The repository (port) for loading and saving lists.
            shuffle_config: Smart shuffle settings; uses defaults if not provided.
            rng: Random source for shuffling; seed it for reproducible sessions.
            activity: Daily activity log; when omitted nothing is logged.
        """
        self._repo = repo
        self._activity = activity
        self._config = shuffle_config or DEFAULT_SMART_SHUFFLE_CONFIG
        self._rng = rng

    async def start_session(self, list_ids: list[str]) -> PracticeSession:
        """
        Load, combine and shuffle the given lists.

        Unknown list ids are skipped with a warning. With no lists found the
        session is empty.
        """
        lists = []
        for list_id in list_ids:
            card_list = await self._repo.load_list(list_id)
            if card_list is None:
                logger.warning(f"List {list_id} not found, skipping")
                continue
            lists.append(card_list)

        pool = combine_lists(lists)
        cards = perform_smart_shuffle(pool.cards, self._config, self._rng)
        for card_list in lists:
            await self._update_activity(card_list.id, record_session)

        logger.info(
            f"Session {pool.name!r}: {len(cards)} cards from {len(pool.cards)} "
            f"(mode={self._config.shuffle_mode}, smart={self._config.enable_smart_shuffle})"
        )
        return PracticeSession(cards=cards, pool=pool)

    async def record_result(
        self,
        list_id: str,
        card_id: str,
        response_time_ms: int,
        flip_count: int,
    ) -> Card:
        """
        Record one interaction and persist the updated card in its list.

        Returns:
            The updated card.

        Raises:
            CardNotFoundError: If the list or the card does not exist.
            InvalidMetricsError: If the interaction values are invalid.
        """
        card_list = await self._repo.load_list(list_id)
        if card_list is None:
            raise CardNotFoundError(f"List {list_id} not found")

        card = card_list.get_card(card_id)
        if card is None:
            raise CardNotFoundError(f"Card {card_id} not found in list {list_id}")

        updated = record_card_view(card, response_time_ms, flip_count)
        cards = tuple(updated if c.id == card_id else c for c in card_list.cards)
        await self._repo.save_list(replace(card_list, cards=cards))
        await self._update_activity(
            list_id, lambda stat: record_activity(stat, response_time_ms, flip_count)
        )

        logger.info(
            f"Recorded {response_time_ms}ms/{flip_count} flips for card {card_id}: "
            f"mastery {card.mastery_level} -> {updated.mastery_level}"
        )
        return updated

    async def record_session_result(
        self,
        session: PracticeSession,
        card_id: str,
        response_time_ms: int,
        flip_count: int,
    ) -> Card:
        """Like `record_result`, resolving the owning list from the session's origin map."""
        list_id = session.card_origin_map.get(card_id)
        if list_id is None:
            raise CardNotFoundError(f"Card {card_id} is not part of this session")
        return await self.record_result(list_id, card_id, response_time_ms, flip_count)

    async def progress_report(
        self, list_id: str | None = None, days: int = DEFAULT_PROGRESS_DAYS
    ) -> ProgressReport:
        """
        Summarize recent activity and current mastery for one list, or all lists.

        Raises:
            CardNotFoundError: If `list_id` is given and no such list exists.
        """
        if list_id is None:
            lists = await self._repo.list_all()
            cards = [card for card_list in lists for card in card_list.cards]
        else:
            card_list = await self._repo.load_list(list_id)
            if card_list is None:
                raise CardNotFoundError(f"List {list_id} not found")
            cards = list(card_list.cards)

        stats = await self._activity.load_daily_stats(list_id) if self._activity is not None else []
        return build_progress_report(cards, stats, days=days)

    async def _update_activity(self, list_id: str, update: Callable[[DailyStat], DailyStat]):
        if self._activity is None:
            return

        today = today_utc()
        stats = await self._activity.load_daily_stats(list_id)
        current = next((s for s in stats if s.day == today), None)
        await self._activity.save_daily_stat(update(current or empty_daily_stat(list_id, today)))
