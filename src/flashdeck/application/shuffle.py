"""
Smart shuffle: mastery-weighted practice session ordering.

Builds a practice sequence where every card appears at least once and
cards are repeated according to a mastery-based weight:
1. Compute a weight per card from its mastery level and the shuffle mode
2. Expand the cards into a weighted pool (round(weight) copies, minimum 1)
3. Shuffle the pool uniformly
"""

import logging
import random
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass
from typing import NamedTuple, TypeVar

from flashdeck.application.utils.common import round_half_up
from flashdeck.domain.constants import (
    DEFAULT_SHUFFLE_MODE,
    EASY_MASTERY_ABOVE,
    HARD_MASTERY_BELOW,
)
from flashdeck.domain.models import Card, ShuffleMode

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class SmartShuffleConfig:
    """Smart shuffle behavior for a practice session."""

    enable_smart_shuffle: bool = True
    shuffle_mode: ShuffleMode = DEFAULT_SHUFFLE_MODE


DEFAULT_SMART_SHUFFLE_CONFIG = SmartShuffleConfig()


class WeightedEntry(NamedTuple):
    card: Card
    original_index: int


def calculate_weight(mastery_level: float, mode: str = DEFAULT_SHUFFLE_MODE) -> float:
    """
    Weight multiplier for a card in the given shuffle mode.

    - balanced: 1.0 - 1.8 (grows with mastery)
    - mastery-focused: 1.0 - 2.5 (grows with mastery)
    - challenge-first: 0.5 - 1.2 (inverted: low mastery weighs more)

    Unknown modes are treated as balanced.
    """
    normalized = max(0.0, min(100.0, mastery_level)) / 100

    if mode == "mastery-focused":
        return 1 + normalized * 1.5
    if mode == "challenge-first":
        return 0.5 + (1 - normalized) * 0.7
    if mode != "balanced":
        logger.debug(f"Unknown shuffle mode {mode!r}, using balanced weights")
    return 1 + normalized * 0.8


def build_weighted_pool(
    cards: Sequence[Card], mode: str = DEFAULT_SHUFFLE_MODE
) -> list[WeightedEntry]:
    """
    Expand cards into a pool where each card occurs round(weight) times (at least once).

    Input order is preserved; shuffling is a separate step.
    """
    pool: list[WeightedEntry] = []
    for index, card in enumerate(cards):
        count = max(1, round_half_up(calculate_weight(card.mastery_level, mode)))
        pool.extend([WeightedEntry(card, index)] * count)
    return pool


def shuffle(items: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """
    Return a uniformly random permutation of `items` (Fisher-Yates).

    The input is not modified. Pass a seeded `random.Random` for reproducible
    order; without one, a fresh generator is created per call.
    """
    rng = rng or random.Random()
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def perform_smart_shuffle(
    cards: Sequence[Card],
    config: SmartShuffleConfig | None = None,
    rng: random.Random | None = None,
) -> list[Card]:
    """
    Build the card order for a practice session.

    With smart shuffle disabled (or no cards) every card appears exactly once.
    Otherwise the weighted pool for `config.shuffle_mode` is shuffled, so cards
    may repeat.
    """
    config = config or DEFAULT_SMART_SHUFFLE_CONFIG

    if not config.enable_smart_shuffle or not cards:
        return shuffle(cards, rng)

    pool = build_weighted_pool(cards, config.shuffle_mode)
    logger.debug(
        f"Weighted pool: {len(pool)} entries from {len(cards)} cards "
        f"(mode={config.shuffle_mode})"
    )
    return [entry.card for entry in shuffle(pool, rng)]


# ---------- Session statistics ----------


@dataclass(frozen=True)
class CardAppearance:
    card_id: str
    front: str
    back: str
    mastery_level: int
    appearance_count: int


@dataclass(frozen=True)
class ShuffleSessionStats:
    total_cards_in_session: int
    unique_cards_included: int
    card_appearances: list[CardAppearance]  # most frequent first


@dataclass(frozen=True)
class BandCount:
    count: int
    percentage: int


@dataclass(frozen=True)
class MasteryDistribution:
    """
    Session appearances split into mastery bands.

    Percentages are rounded independently and need not sum to 100.
    """

    hard_cards: BandCount  # mastery < 50
    medium_cards: BandCount  # 50 <= mastery <= 80
    easy_cards: BandCount  # mastery > 80


def appearance_count(shuffled_cards: Sequence[Card], card_id: str) -> int:
    return sum(1 for card in shuffled_cards if card.id == card_id)


def get_shuffle_session_stats(
    original_cards: Sequence[Card], shuffled_cards: Sequence[Card]
) -> ShuffleSessionStats:
    """
    Summarize how often each card appears in a shuffled session.

    Card details come from the first matching card in `original_cards`; ids
    missing from it report empty faces and mastery 0.
    """
    counts = Counter(card.id for card in shuffled_cards)

    originals: dict[str, Card] = {}
    for card in original_cards:
        originals.setdefault(card.id, card)

    appearances = []
    for card_id, count in counts.items():
        original = originals.get(card_id)
        appearances.append(
            CardAppearance(
                card_id=card_id,
                front=original.front if original else "",
                back=original.back if original else "",
                mastery_level=original.mastery_level if original else 0,
                appearance_count=count,
            )
        )
    # Stable sort keeps first-seen order among equal counts
    appearances.sort(key=lambda a: a.appearance_count, reverse=True)

    return ShuffleSessionStats(
        total_cards_in_session=len(shuffled_cards),
        unique_cards_included=len(counts),
        card_appearances=appearances,
    )


def get_mastery_distribution(stats: ShuffleSessionStats) -> MasteryDistribution:
    total = stats.total_cards_in_session

    def band(selected: list[CardAppearance]) -> BandCount:
        count = sum(a.appearance_count for a in selected)
        percentage = round_half_up(count / total * 100) if total else 0
        return BandCount(count=count, percentage=percentage)

    appearances = stats.card_appearances
    return MasteryDistribution(
        hard_cards=band([a for a in appearances if a.mastery_level < HARD_MASTERY_BELOW]),
        medium_cards=band(
            [
                a
                for a in appearances
                if HARD_MASTERY_BELOW <= a.mastery_level <= EASY_MASTERY_ABOVE
            ]
        ),
        easy_cards=band([a for a in appearances if a.mastery_level > EASY_MASTERY_ABOVE]),
    )
