"""
Domain models for flashcard lists and practice performance.

These are pure data structures with no I/O or external dependencies.
All of them are immutable; updates go through `dataclasses.replace`.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal

from .errors import InvalidListStructureError, InvalidMetricsError

Direction = Literal["front-to-back", "back-to-front"]
ShuffleMode = Literal["balanced", "mastery-focused", "challenge-first"]
Difficulty = Literal["new", "easy", "medium", "hard"]

_COUNTER_FIELDS = (
    "view_count",
    "flip_count",
    "correct_count",
    "incorrect_count",
    "total_response_time_ms",
)


@dataclass(frozen=True)
class CardPerformanceMetrics:
    """
    Per-card practice statistics.

    Attributes:
        view_count: Times the card has been practiced.
        flip_count: Total flips to the back side across all views.
        correct_count: Views answered fast and without flipping.
        incorrect_count: Views that were slow or needed a flip.
        total_response_time_ms: Sum of all recorded response times.
        fastest_response_ms: Running minimum, set on the first view.
        slowest_response_ms: Running maximum, set on the first view.
        last_reviewed_at: Instant of the latest recorded view.
        mastery_level: 0-100, derived from the fields above.
    """

    view_count: int = 0
    flip_count: int = 0
    correct_count: int = 0
    incorrect_count: int = 0
    total_response_time_ms: int = 0
    fastest_response_ms: int | None = None
    slowest_response_ms: int | None = None
    last_reviewed_at: datetime | None = None
    mastery_level: int = 0

    def __post_init__(self):
        for name in _COUNTER_FIELDS:
            value = getattr(self, name)
            if value < 0:
                raise InvalidMetricsError(f"{name} must be non-negative, got {value}")
        if not 0 <= self.mastery_level <= 100:
            raise InvalidMetricsError(
                f"mastery_level must be within 0-100, got {self.mastery_level}"
            )
        if self.correct_count + self.incorrect_count != self.view_count:
            raise InvalidMetricsError(
                f"correct_count ({self.correct_count}) + incorrect_count "
                f"({self.incorrect_count}) must equal view_count ({self.view_count})"
            )
        fastest, slowest = self.fastest_response_ms, self.slowest_response_ms
        if fastest is not None and slowest is not None and fastest > slowest:
            raise InvalidMetricsError(
                f"fastest_response_ms ({fastest}) exceeds slowest_response_ms ({slowest})"
            )


@dataclass(frozen=True)
class Card:
    id: str
    front: str
    back: str
    created_at: datetime
    meaning: str | None = None
    notes: str | None = None
    tags: tuple[str, ...] | None = None  # set-like; order carries no meaning
    card_type: str | None = None
    last_reviewed: datetime | None = None
    performance: CardPerformanceMetrics = field(default_factory=CardPerformanceMetrics)

    @property
    def mastery_level(self) -> int:
        return self.performance.mastery_level


@dataclass(frozen=True)
class CardList:
    """
    A named, ordered collection of cards.

    A list owns its cards; cards are never shared by reference across lists.
    """

    id: str
    name: str
    cards: tuple[Card, ...]
    created_at: datetime
    updated_at: datetime
    default_direction: Direction | None = None

    def __post_init__(self):
        if not self.name:
            raise InvalidListStructureError(f"List {self.id} must have a non-empty name")

    def get_card(self, card_id: str) -> Card | None:
        return next((c for c in self.cards if c.id == card_id), None)


@dataclass(frozen=True)
class DailyStat:
    """
    Practice activity for one list on one UTC calendar day.

    Attributes:
        day: The calendar day the activity happened on.
        list_id: The list that was practiced.
        sessions_count: Practice sessions started that included the list.
        cards_reviewed: Recorded card views.
        correct_answers: Views answered fast and without flipping.
        incorrect_answers: Views that were slow or needed a flip.
        total_duration_ms: Sum of the recorded response times.
    """

    day: date
    list_id: str
    sessions_count: int = 0
    cards_reviewed: int = 0
    correct_answers: int = 0
    incorrect_answers: int = 0
    total_duration_ms: int = 0
