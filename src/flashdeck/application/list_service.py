"""
List-level helpers: copy naming, duplication, JSON export and import.

Pure functions over CardList values; persistence is the caller's concern.
"""

import logging
import re
from collections.abc import Collection
from dataclasses import replace
from datetime import datetime

from flashdeck.application.id_service import generate_id
from flashdeck.application.performance import create_empty
from flashdeck.application.serialization import (
    ListRecord,
    dump_record,
    list_to_record,
    load_record,
    record_to_metrics,
)
from flashdeck.application.utils.common import utc_now
from flashdeck.domain.errors import InvalidListStructureError
from flashdeck.domain.models import Card, CardList

logger = logging.getLogger(__name__)

_INDEXED_NAME = re.compile(r"^(.+?) \((\d+)\)$")


def unique_copy_name(existing_names: Collection[str], name: str) -> str:
    """
    Pick a free name of the form "name (n)" for a copy.

    With "Verbs" taken, "Verbs" becomes "Verbs (2)" (or "Verbs (3)" if that
    is taken too). A name that already carries an index starts searching two
    above it: "Verbs (2)" becomes "Verbs (4)".
    """
    match = _INDEXED_NAME.match(name)
    if match:
        base, index = match.group(1), int(match.group(2)) + 1
    else:
        base, index = name, 0

    while True:
        index += 1
        candidate = base if index <= 1 else f"{base} ({index})"
        if candidate not in existing_names:
            return candidate


def import_record(
    record: ListRecord,
    now: datetime | None = None,
    keep_performance: bool = True,
) -> CardList:
    """
    Build a new list from a record, as an import rather than a restore.

    The list and every card get fresh ids, and `created_at`/`updated_at`
    are set to `now`. Card content and `last_reviewed` are preserved.
    """
    now = now or utc_now()
    cards = tuple(
        Card(
            id=generate_id(),
            front=card.front,
            back=card.back,
            created_at=now,
            meaning=card.meaning,
            notes=card.notes,
            tags=tuple(card.tags) if card.tags is not None else None,
            card_type=card.card_type,
            last_reviewed=card.last_reviewed,
            performance=record_to_metrics(card.performance) if keep_performance else create_empty(),
        )
        for card in record.cards
    )
    return CardList(
        id=generate_id(),
        name=record.name,
        cards=cards,
        created_at=now,
        updated_at=now,
        default_direction=record.default_direction,
    )


def duplicate_list(card_list: CardList, new_name: str, now: datetime | None = None) -> CardList:
    """Copy a list (content and performance) under a new name with fresh ids."""
    now = now or utc_now()
    return replace(
        card_list,
        id=generate_id(),
        name=new_name,
        cards=tuple(replace(card, id=generate_id(), created_at=now) for card in card_list.cards),
        created_at=now,
        updated_at=now,
    )


def export_list_json(card_list: CardList) -> str:
    """Export a list, performance included, as indented JSON."""
    return dump_record(list_to_record(card_list, include_performance=True), indent=2)


def import_list_json(text: str, now: datetime | None = None) -> CardList:
    """
    Import a list previously written by `export_list_json`.

    Raises:
        InvalidListStructureError: If the JSON is malformed or lacks id, name or cards.
    """
    record = load_record(text)
    if not record.id:
        raise InvalidListStructureError("Exported list is missing its id")

    imported = import_record(record, now=now, keep_performance=True)
    logger.info(f"Imported list {record.name!r} with {len(imported.cards)} cards as {imported.id}")
    return imported
