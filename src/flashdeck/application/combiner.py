"""
Multi-list combiner for cross-list practice sessions.

Merges the cards of several lists into one pool while remembering which
list each card came from, so results can be written back to the owner.
"""

from collections.abc import Sequence
from dataclasses import dataclass, replace

from flashdeck.domain.constants import (
    COMBINED_NAME_SEPARATOR,
    DEFAULT_DIRECTION,
    MIN_LISTS_TO_COMBINE,
)
from flashdeck.domain.models import Card, CardList, Direction


@dataclass(frozen=True)
class CombinedPool:
    """Result of combining lists."""

    cards: list[Card]  # list order, then card order within each list
    card_origin_map: dict[str, str]  # card id -> source list id
    direction: Direction  # always the first list's direction
    name: str


def combine_lists(lists: Sequence[CardList]) -> CombinedPool:
    """
    Combine lists into a single practice pool.

    Cards are copied, so the pool never aliases the source lists' card objects.
    If a card id occurs in more than one list, the origin map keeps the later
    list. The direction is taken from the first list only (front-to-back if it
    has none); other lists' directions are ignored.

    Works for any number of lists, including zero or one.
    """
    cards: list[Card] = []
    origin: dict[str, str] = {}

    for card_list in lists:
        for card in card_list.cards:
            cards.append(replace(card))
            origin[card.id] = card_list.id

    direction: Direction = DEFAULT_DIRECTION
    if lists and lists[0].default_direction:
        direction = lists[0].default_direction

    return CombinedPool(
        cards=cards,
        card_origin_map=origin,
        direction=direction,
        name=COMBINED_NAME_SEPARATOR.join(card_list.name for card_list in lists),
    )


def parse_list_ids(raw: str) -> list[str]:
    """Split a comma-separated id parameter, dropping blanks: "a, b,,c" -> [a, b, c]."""
    return [part.strip() for part in raw.split(",") if part.strip()]


def validate_selection(list_ids: Sequence[str]) -> bool:
    """Whether enough lists are selected for a combined session."""
    return len(list_ids) >= MIN_LISTS_TO_COMBINE
