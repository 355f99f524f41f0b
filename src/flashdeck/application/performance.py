"""
Performance tracking for individual cards.

Turns a single timed interaction into updated per-card statistics and
derives mastery (0-100) and difficulty from them.

This is a pure computation module with no I/O.
"""

from dataclasses import replace
from datetime import datetime

from flashdeck.application.utils.common import round_half_up, utc_now
from flashdeck.domain.constants import (
    CONSISTENCY_MIN_VIEWS,
    CONSISTENCY_POINTS,
    CONSISTENCY_SPREAD_FACTOR,
    CORRECT_RESPONSE_THRESHOLD_MS,
    FAST_RESPONSE_MS,
    FAST_RESPONSE_POINTS,
    HARD_FLIP_RATIO,
    HARD_SUCCESS_RATE,
    MASTERY_MAX,
    MEDIUM_FLIP_RATIO,
    MEDIUM_SUCCESS_RATE,
    MODERATE_RESPONSE_MS,
    MODERATE_RESPONSE_POINTS,
    SUCCESS_POINTS,
)
from flashdeck.domain.errors import InvalidMetricsError
from flashdeck.domain.models import Card, CardPerformanceMetrics, Difficulty


def create_empty() -> CardPerformanceMetrics:
    """Metrics for a card that has never been practiced."""
    return CardPerformanceMetrics()


def _require_count(name: str, value: object) -> int:
    # bool is an int subclass; True/False are never a valid count
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidMetricsError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidMetricsError(f"{name} must be non-negative, got {value}")
    return value


def is_correct_response(response_time_ms: int, flip_count: int) -> bool:
    """A view is correct when answered under the threshold without flipping."""
    return response_time_ms < CORRECT_RESPONSE_THRESHOLD_MS and flip_count == 0


def record_view(
    metrics: CardPerformanceMetrics,
    response_time_ms: int,
    flip_count: int,
    now: datetime | None = None,
) -> CardPerformanceMetrics:
    """
    Record one practice view and return the updated metrics.

    The input is not modified.

    Args:
        metrics: Current metrics for the card.
        response_time_ms: Time from showing the card to the first interaction.
        flip_count: Flips to the back side during this view.
        now: Timestamp to store as `last_reviewed_at`; defaults to the current UTC time.

    Raises:
        InvalidMetricsError: If either input is negative or not an integer.
    """
    response_time_ms = _require_count("response_time_ms", response_time_ms)
    flip_count = _require_count("flip_count", flip_count)

    fastest = metrics.fastest_response_ms
    slowest = metrics.slowest_response_ms
    correct = is_correct_response(response_time_ms, flip_count)

    updated = replace(
        metrics,
        view_count=metrics.view_count + 1,
        flip_count=metrics.flip_count + flip_count,
        total_response_time_ms=metrics.total_response_time_ms + response_time_ms,
        fastest_response_ms=response_time_ms if fastest is None else min(fastest, response_time_ms),
        slowest_response_ms=response_time_ms if slowest is None else max(slowest, response_time_ms),
        correct_count=metrics.correct_count + (1 if correct else 0),
        incorrect_count=metrics.incorrect_count + (0 if correct else 1),
        last_reviewed_at=now or utc_now(),
    )
    return replace(updated, mastery_level=calculate_mastery(updated))


def record_card_view(
    card: Card,
    response_time_ms: int,
    flip_count: int,
    now: datetime | None = None,
) -> Card:
    """
    Apply `record_view` to a card's embedded metrics.

    This is the only path through which a card's performance changes.
    `last_reviewed` on the card is set to the same instant.
    """
    now = now or utc_now()
    performance = record_view(card.performance, response_time_ms, flip_count, now=now)
    return replace(card, performance=performance, last_reviewed=now)


def calculate_mastery(metrics: CardPerformanceMetrics) -> int:
    """
    Calculate mastery level (0-100).

    Score components:
        - success rate: up to 60 points
        - consistency of response times (3+ views): up to 20 points
        - average speed: 20 points under 3s, 10 points under 5s
    """
    if metrics.view_count == 0:
        return 0

    success_rate = metrics.correct_count / metrics.view_count
    score = success_rate * SUCCESS_POINTS

    avg_time = metrics.total_response_time_ms / metrics.view_count

    if (
        metrics.view_count >= CONSISTENCY_MIN_VIEWS
        and metrics.fastest_response_ms is not None
        and metrics.slowest_response_ms is not None
    ):
        variation = metrics.slowest_response_ms - metrics.fastest_response_ms
        if avg_time > 0:
            consistency = max(0.0, 1 - variation / (avg_time * CONSISTENCY_SPREAD_FACTOR))
        else:
            # every response was 0 ms
            consistency = 1.0
        score += consistency * CONSISTENCY_POINTS

    if avg_time < FAST_RESPONSE_MS:
        score += FAST_RESPONSE_POINTS
    elif avg_time < MODERATE_RESPONSE_MS:
        score += MODERATE_RESPONSE_POINTS

    return min(MASTERY_MAX, round_half_up(score))


def classify_difficulty(metrics: CardPerformanceMetrics) -> Difficulty:
    """
    Classify a card as new, easy, medium or hard.

    Both thresholds use strict comparisons: a success rate of exactly 0.7
    with a low flip ratio is easy.
    """
    if metrics.view_count == 0:
        return "new"

    flip_ratio = metrics.flip_count / metrics.view_count
    success_rate = metrics.correct_count / metrics.view_count

    if success_rate < HARD_SUCCESS_RATE or flip_ratio > HARD_FLIP_RATIO:
        return "hard"
    if success_rate < MEDIUM_SUCCESS_RATE or flip_ratio > MEDIUM_FLIP_RATIO:
        return "medium"
    return "easy"


def average_response_time(metrics: CardPerformanceMetrics) -> int:
    """Average response time in ms, or 0 if the card has no views."""
    if metrics.view_count == 0:
        return 0
    return round_half_up(metrics.total_response_time_ms / metrics.view_count)


def success_rate_percent(metrics: CardPerformanceMetrics) -> int:
    if metrics.view_count == 0:
        return 0
    return round_half_up(metrics.correct_count / metrics.view_count * 100)


def format_time(ms: int) -> str:
    """Format milliseconds for display, e.g. "150ms" or "2.5s"."""
    if ms < 1000:
        return f"{ms}ms"
    return f"{ms / 1000:.1f}s"
