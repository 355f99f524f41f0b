"""
Record schema for persisted and shared lists.

The JSON shape (camelCase keys, millisecond ISO timestamps with a `Z` suffix)
is shared with the web client, so exported files and share tokens stay
readable on both sides.
"""

import json
from datetime import date, datetime
from typing import Annotated

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    ValidationError,
)
from pydantic.alias_generators import to_camel

from flashdeck.application.utils.common import ensure_utc, to_iso_millis
from flashdeck.domain.errors import InvalidListStructureError, InvalidMetricsError
from flashdeck.domain.models import Card, CardList, CardPerformanceMetrics, DailyStat, Direction

IsoDatetime = Annotated[
    datetime,
    AfterValidator(ensure_utc),
    PlainSerializer(to_iso_millis, return_type=str, when_used="json"),
]


class _Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class PerformanceRecord(_Record):
    view_count: int = Field(default=0, ge=0)
    flip_count: int = Field(default=0, ge=0)
    correct_count: int = Field(default=0, ge=0)
    incorrect_count: int = Field(default=0, ge=0)
    total_response_time_ms: int = Field(default=0, ge=0)
    fastest_response_ms: int | None = None
    slowest_response_ms: int | None = None
    last_reviewed_at: IsoDatetime | None = None
    mastery_level: int = Field(default=0, ge=0, le=100)


class CardRecord(_Record):
    id: str | None = None
    front: str
    back: str
    card_type: str | None = Field(default=None, alias="type")
    meaning: str | None = None
    notes: str | None = None
    tags: list[str] | None = None
    created_at: IsoDatetime | None = None
    last_reviewed: IsoDatetime | None = None
    performance: PerformanceRecord | None = None


class ListRecord(_Record):
    id: str | None = None
    name: str = Field(min_length=1)
    cards: list[CardRecord]
    created_at: IsoDatetime | None = None
    updated_at: IsoDatetime | None = None
    default_direction: Direction | None = None


class DailyStatRecord(_Record):
    day: date
    list_id: str
    sessions_count: int = Field(default=0, ge=0)
    cards_reviewed: int = Field(default=0, ge=0)
    correct_answers: int = Field(default=0, ge=0)
    incorrect_answers: int = Field(default=0, ge=0)
    total_duration_ms: int = Field(default=0, ge=0)


# ---------- Domain <-> record ----------


def metrics_to_record(metrics: CardPerformanceMetrics) -> PerformanceRecord:
    return PerformanceRecord(
        view_count=metrics.view_count,
        flip_count=metrics.flip_count,
        correct_count=metrics.correct_count,
        incorrect_count=metrics.incorrect_count,
        total_response_time_ms=metrics.total_response_time_ms,
        fastest_response_ms=metrics.fastest_response_ms,
        slowest_response_ms=metrics.slowest_response_ms,
        last_reviewed_at=metrics.last_reviewed_at,
        mastery_level=metrics.mastery_level,
    )


def record_to_metrics(record: PerformanceRecord | None) -> CardPerformanceMetrics:
    """
    Build metrics from a stored record.

    Raises:
        InvalidListStructureError: If the recorded counters contradict each other.
    """
    if record is None:
        return CardPerformanceMetrics()
    try:
        return CardPerformanceMetrics(**record.model_dump())
    except InvalidMetricsError as e:
        raise InvalidListStructureError(f"Inconsistent performance record: {e}") from e


def card_to_record(card: Card, include_performance: bool = True) -> CardRecord:
    return CardRecord(
        id=card.id,
        front=card.front,
        back=card.back,
        card_type=card.card_type,
        meaning=card.meaning,
        notes=card.notes,
        tags=list(card.tags) if card.tags is not None else None,
        created_at=card.created_at,
        last_reviewed=card.last_reviewed,
        performance=metrics_to_record(card.performance) if include_performance else None,
    )


def list_to_record(card_list: CardList, include_performance: bool = True) -> ListRecord:
    """
    Convert a list to its record form.

    Args:
        card_list: The list to convert.
        include_performance: Set False for shared payloads, which carry content only.
    """
    return ListRecord(
        id=card_list.id,
        name=card_list.name,
        cards=[card_to_record(c, include_performance) for c in card_list.cards],
        created_at=card_list.created_at,
        updated_at=card_list.updated_at,
        default_direction=card_list.default_direction,
    )


def record_to_list(record: ListRecord) -> CardList:
    """
    Restore a list exactly as recorded, ids and timestamps included.

    Raises:
        InvalidListStructureError: If the record lacks ids or timestamps.
    """
    if record.id is None or record.created_at is None or record.updated_at is None:
        raise InvalidListStructureError(f"List record {record.name!r} lacks id or timestamps")

    cards = []
    for card in record.cards:
        if card.id is None or card.created_at is None:
            raise InvalidListStructureError(
                f"Card {card.front!r} in list {record.id} lacks id or createdAt"
            )
        cards.append(
            Card(
                id=card.id,
                front=card.front,
                back=card.back,
                created_at=card.created_at,
                meaning=card.meaning,
                notes=card.notes,
                tags=tuple(card.tags) if card.tags is not None else None,
                card_type=card.card_type,
                last_reviewed=card.last_reviewed,
                performance=record_to_metrics(card.performance),
            )
        )

    return CardList(
        id=record.id,
        name=record.name,
        cards=tuple(cards),
        created_at=record.created_at,
        updated_at=record.updated_at,
        default_direction=record.default_direction,
    )


def daily_stat_to_record(stat: DailyStat) -> DailyStatRecord:
    return DailyStatRecord(**vars(stat))


def record_to_daily_stat(record: DailyStatRecord) -> DailyStat:
    return DailyStat(**record.model_dump())


def validate_daily_stat(data: object) -> DailyStatRecord:
    try:
        return DailyStatRecord.model_validate(data)
    except ValidationError as e:
        raise InvalidListStructureError(f"Invalid activity entry: {e}") from e


# ---------- JSON ----------


def record_to_data(record: BaseModel) -> dict:
    """Plain JSON-ready dict with camelCase keys; unset optionals are omitted."""
    return record.model_dump(mode="json", by_alias=True, exclude_none=True)


def dump_record(record: BaseModel, indent: int | None = None) -> str:
    """
    Serialize a record to JSON.

    Compact by default, with field order fixed by the schema, so equal
    records always produce identical text. Non-ASCII text is kept as-is.
    """
    separators = (",", ":") if indent is None else None
    return json.dumps(
        record_to_data(record), ensure_ascii=False, indent=indent, separators=separators
    )


def load_record(text: str | bytes) -> ListRecord:
    """
    Parse and validate a list record.

    Raises:
        InvalidListStructureError: On malformed JSON or a schema mismatch.
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
        raise InvalidListStructureError(f"List payload is not valid JSON: {e}") from e
    return validate_record(data)


def validate_record(data: object) -> ListRecord:
    if not isinstance(data, dict):
        raise InvalidListStructureError("List payload must be a JSON object")
    try:
        return ListRecord.model_validate(data)
    except ValidationError as e:
        raise InvalidListStructureError(f"Invalid list structure: {e}") from e
