"""
Progress reporting over the daily activity log and current card mastery.

Pure computations: the caller loads daily stats and cards, this module
aggregates them into a summary, a four-band mastery distribution and the
current streak of consecutive practice days.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from datetime import date, timedelta

from flashdeck.application.performance import is_correct_response
from flashdeck.application.utils.common import round_half_up, utc_now
from flashdeck.domain.constants import (
    DEFAULT_PROGRESS_DAYS,
    LEARNING_MASTERY_BELOW,
    MASTERED_MASTERY_FROM,
)
from flashdeck.domain.models import Card, DailyStat


@dataclass(frozen=True)
class ProgressDistribution:
    """Card counts per mastery band."""

    new: int  # mastery == 0
    learning: int  # 0 < mastery < 50
    familiar: int  # 50 <= mastery < 80
    mastered: int  # mastery >= 80


@dataclass(frozen=True)
class ProgressSummary:
    total_sessions: int
    total_cards_reviewed: int
    total_correct: int
    total_incorrect: int
    total_duration_ms: int
    average_accuracy: float  # mean of the daily accuracy percentages
    average_response_time: int  # mean of the daily averages, in ms
    current_streak: int


@dataclass(frozen=True)
class ProgressReport:
    daily_stats: list[DailyStat]
    summary: ProgressSummary
    distribution: ProgressDistribution


# ---------- Activity updates ----------


def today_utc() -> date:
    return utc_now().date()


def empty_daily_stat(list_id: str, day: date | None = None) -> DailyStat:
    return DailyStat(day=day or today_utc(), list_id=list_id)


def record_session(stat: DailyStat) -> DailyStat:
    return replace(stat, sessions_count=stat.sessions_count + 1)


def record_activity(stat: DailyStat, response_time_ms: int, flip_count: int) -> DailyStat:
    """Add one card view to a day's activity, judged by the same rule as card metrics."""
    correct = is_correct_response(response_time_ms, flip_count)
    return replace(
        stat,
        cards_reviewed=stat.cards_reviewed + 1,
        correct_answers=stat.correct_answers + (1 if correct else 0),
        incorrect_answers=stat.incorrect_answers + (0 if correct else 1),
        total_duration_ms=stat.total_duration_ms + response_time_ms,
    )


# ---------- Per-day views ----------


def accuracy_percentage(stat: DailyStat) -> float:
    if stat.cards_reviewed == 0:
        return 0.0
    return stat.correct_answers / stat.cards_reviewed * 100


def average_response_time_ms(stat: DailyStat) -> int:
    if stat.cards_reviewed == 0:
        return 0
    return round_half_up(stat.total_duration_ms / stat.cards_reviewed)


# ---------- Aggregates ----------


def get_progress_distribution(cards: Iterable[Card]) -> ProgressDistribution:
    counts = {"new": 0, "learning": 0, "familiar": 0, "mastered": 0}
    for card in cards:
        mastery = card.mastery_level
        if mastery == 0:
            counts["new"] += 1
        elif mastery < LEARNING_MASTERY_BELOW:
            counts["learning"] += 1
        elif mastery < MASTERED_MASTERY_FROM:
            counts["familiar"] += 1
        else:
            counts["mastered"] += 1
    return ProgressDistribution(**counts)


def recent_stats(
    stats: Iterable[DailyStat], today: date, days: int = DEFAULT_PROGRESS_DAYS
) -> list[DailyStat]:
    """Entries from `days` days before `today` onwards, oldest first."""
    start = today - timedelta(days=days)
    return sorted((s for s in stats if s.day >= start), key=lambda s: s.day)


def calculate_streak(active_days: Iterable[date], today: date) -> int:
    """
    Count consecutive days with activity, ending today.

    No activity today means a streak of 0, even if yesterday was active.
    Several entries on the same day (one per list) count once.
    """
    active = set(active_days)
    streak = 0
    current = today
    while current in active:
        streak += 1
        current -= timedelta(days=1)
    return streak


def summarize_progress(stats: Sequence[DailyStat], today: date) -> ProgressSummary:
    """
    Aggregate daily entries into totals and averages.

    Averages are taken over entries, so each list-day weighs the same
    regardless of how many cards it reviewed.
    """
    count = len(stats)
    return ProgressSummary(
        total_sessions=sum(s.sessions_count for s in stats),
        total_cards_reviewed=sum(s.cards_reviewed for s in stats),
        total_correct=sum(s.correct_answers for s in stats),
        total_incorrect=sum(s.incorrect_answers for s in stats),
        total_duration_ms=sum(s.total_duration_ms for s in stats),
        average_accuracy=(
            sum(accuracy_percentage(s) for s in stats) / count if count else 0.0
        ),
        average_response_time=(
            round_half_up(sum(average_response_time_ms(s) for s in stats) / count)
            if count
            else 0
        ),
        current_streak=calculate_streak((s.day for s in stats), today),
    )


def build_progress_report(
    cards: Iterable[Card],
    stats: Iterable[DailyStat],
    today: date | None = None,
    days: int = DEFAULT_PROGRESS_DAYS,
) -> ProgressReport:
    today = today or today_utc()
    recent = recent_stats(stats, today, days)
    return ProgressReport(
        daily_stats=recent,
        summary=summarize_progress(recent, today),
        distribution=get_progress_distribution(cards),
    )
