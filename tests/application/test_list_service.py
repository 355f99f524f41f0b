import json
from datetime import datetime, timezone

import pytest

from flashdeck.application.list_service import (
    duplicate_list,
    export_list_json,
    import_list_json,
    unique_copy_name,
)
from flashdeck.application.serialization import (
    dump_record,
    list_to_record,
    load_record,
    record_to_list,
)
from flashdeck.domain.errors import InvalidListStructureError
from flashdeck.domain.models import CardPerformanceMetrics

NOW = datetime(2024, 3, 15, 8, 30, 0, 123456, tzinfo=timezone.utc)


@pytest.fixture
def practiced_list(make_card, make_list):
    performance = CardPerformanceMetrics(
        view_count=3,
        correct_count=2,
        incorrect_count=1,
        total_response_time_ms=9000,
        fastest_response_ms=2000,
        slowest_response_ms=4000,
        last_reviewed_at=datetime(2024, 2, 1, tzinfo=timezone.utc),
        mastery_level=68,
    )
    cards = [
        make_card(
            "c1",
            front="食べる",
            back="to eat",
            meaning="verb",
            notes="ichidan",
            tags=("verb", "jlpt5"),
            card_type="verb",
            last_reviewed=datetime(2024, 2, 1, tzinfo=timezone.utc),
            performance=performance,
        ),
        make_card("c2", front="飲む", back="to drink"),
    ]
    return make_list("L1", cards, name="Verbs", direction="back-to-front")


# ---------- unique_copy_name ----------


@pytest.mark.parametrize(
    "existing,name,expected",
    [
        ([], "Verbs", "Verbs"),
        (["Verbs"], "Verbs", "Verbs (2)"),
        (["Verbs", "Verbs (2)"], "Verbs", "Verbs (3)"),
        (["List", "List (2)", "List (5)"], "List", "List (3)"),
        (["Set (a)"], "Set (a)", "Set (a) (2)"),
        (["Test "], "Test ", "Test  (2)"),
        # an indexed name continues past its own index
        ([], "My List (2)", "My List (4)"),
        (["Original"], "Original (5)", "Original (7)"),
        (["List"], "List (9)", "List (11)"),
        (["Test (99)", "Test (100)"], "Test (100)", "Test (102)"),
        (["Other List"], "My List (3)", "My List (5)"),
        # a non-numeric suffix is part of the base name
        ([], "List (abc)", "List (abc)"),
        (["List (old) (2)"], "List (old)", "List (old)"),
    ],
)
def test_unique_copy_name(existing, name, expected):
    assert unique_copy_name(existing, name) == expected


# ---------- duplicate_list ----------


def test_duplicate_list(practiced_list):
    copy = duplicate_list(practiced_list, "Verbs (2)", now=NOW)

    assert copy.name == "Verbs (2)"
    assert copy.id != practiced_list.id
    assert copy.created_at == NOW
    assert copy.updated_at == NOW
    assert copy.default_direction == "back-to-front"
    assert [c.front for c in copy.cards] == ["食べる", "飲む"]
    assert {c.id for c in copy.cards}.isdisjoint({c.id for c in practiced_list.cards})
    assert copy.cards[0].performance == practiced_list.cards[0].performance


def test_duplicate_list_requires_name(practiced_list):
    with pytest.raises(InvalidListStructureError):
        duplicate_list(practiced_list, "", now=NOW)


# ---------- export / import ----------


def test_export_uses_camel_case_and_millisecond_timestamps(practiced_list):
    data = json.loads(export_list_json(practiced_list))

    assert data["name"] == "Verbs"
    assert data["defaultDirection"] == "back-to-front"
    assert data["createdAt"] == "2024-01-01T00:00:00.000Z"

    card = data["cards"][0]
    assert card["type"] == "verb"
    assert card["tags"] == ["verb", "jlpt5"]
    assert card["lastReviewed"] == "2024-02-01T00:00:00.000Z"
    assert card["performance"]["viewCount"] == 3
    assert card["performance"]["masteryLevel"] == 68
    assert card["performance"]["lastReviewedAt"] == "2024-02-01T00:00:00.000Z"

    # Unset optionals are omitted
    assert "meaning" not in data["cards"][1]
    assert "fastestResponseMs" not in data["cards"][1]["performance"]


def test_export_keeps_unicode_readable(practiced_list):
    assert "食べる" in export_list_json(practiced_list)


def test_import_mints_fresh_ids_and_keeps_performance(practiced_list):
    imported = import_list_json(export_list_json(practiced_list), now=NOW)

    assert imported.id != practiced_list.id
    assert imported.name == "Verbs"
    assert imported.created_at == NOW
    assert imported.cards[0].id != "c1"
    assert imported.cards[0].created_at == NOW
    assert imported.cards[0].front == "食べる"
    assert imported.cards[0].tags == ("verb", "jlpt5")
    assert imported.cards[0].card_type == "verb"
    assert imported.cards[0].last_reviewed == practiced_list.cards[0].last_reviewed
    assert imported.cards[0].performance == practiced_list.cards[0].performance
    assert imported.cards[1].performance == CardPerformanceMetrics()


def test_import_requires_id():
    with pytest.raises(InvalidListStructureError):
        import_list_json('{"name": "No id", "cards": []}')


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[]",
        '{"id": "x", "cards": []}',
        '{"id": "x", "name": "", "cards": []}',
        '{"id": "x", "name": "Missing cards"}',
        '{"id": "x", "name": "Bad card", "cards": [{"front": "a"}]}',
        '{"id": "x", "name": "Bad direction", "cards": [], "defaultDirection": "sideways"}',
    ],
)
def test_import_rejects_malformed_payloads(text):
    with pytest.raises(InvalidListStructureError):
        import_list_json(text)


@pytest.mark.parametrize(
    "performance",
    [
        {"viewCount": 1, "correctCount": 5},
        {"viewCount": 2, "correctCount": 2, "fastestResponseMs": 900, "slowestResponseMs": 10},
    ],
)
def test_import_rejects_inconsistent_performance(performance):
    card = {"front": "a", "back": "b", "performance": performance}
    text = json.dumps({"id": "x", "name": "Bad counts", "cards": [card]})

    with pytest.raises(InvalidListStructureError, match="Inconsistent performance"):
        import_list_json(text)


# ---------- record round trip ----------


def test_record_round_trip_restores_list_exactly(practiced_list):
    restored = record_to_list(load_record(dump_record(list_to_record(practiced_list))))
    assert restored == practiced_list


def test_record_round_trip_truncates_to_milliseconds(make_card, make_list):
    card_list = make_list("L1", [make_card("a", created_at=NOW)])
    restored = record_to_list(load_record(dump_record(list_to_record(card_list))))

    assert restored.cards[0].created_at == NOW.replace(microsecond=123000)


def test_record_to_list_requires_ids():
    record = load_record('{"name": "Shared", "cards": [{"front": "a", "back": "b"}]}')
    with pytest.raises(InvalidListStructureError):
        record_to_list(record)


def test_load_record_ignores_unknown_fields():
    record = load_record('{"name": "Extra", "cards": [], "colour": "blue"}')
    assert record.name == "Extra"
