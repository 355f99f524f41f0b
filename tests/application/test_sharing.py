import gzip
import json
import re
from datetime import datetime, timezone

import pytest

from flashdeck.application.sharing import (
    ShareCodec,
    decode_base62,
    decode_share_token,
    encode_base62,
    extract_import_token,
    generate_share_token,
    generate_share_url,
)
from flashdeck.domain.errors import (
    CorruptSharePayloadError,
    InvalidListStructureError,
    InvalidShareCodeError,
    InvalidShareStructureError,
    ShareErrorKind,
    ShareTokenError,
)
from flashdeck.domain.models import CardList, CardPerformanceMetrics
from flashdeck.domain.ports import Compressor
from flashdeck.infrastructure.adapters.compression import GzipCompressor

TOKEN_PATTERN = re.compile(r"^[0-9A-Za-z]+$")
NOW = datetime(2024, 5, 5, tzinfo=timezone.utc)


class IdentityCompressor(Compressor):
    def compress(self, data: bytes) -> bytes:
        return data

    def decompress(self, data: bytes) -> bytes:
        return data


@pytest.fixture
def shared_list(make_card, make_list):
    reviewed = datetime(2024, 2, 10, 9, 0, tzinfo=timezone.utc)
    cards = [
        make_card(
            "c1",
            front="こんにちは 👋",
            back="hello",
            meaning="greeting",
            tags=("greeting",),
            last_reviewed=reviewed,
            performance=CardPerformanceMetrics(view_count=4, correct_count=4, mastery_level=90),
        ),
        make_card("c2", front="Ærlig", back="honest", notes="Norwegian"),
    ]
    return make_list("L1", cards, name="Greetings ✨", direction="back-to-front")


def _payload(token: str) -> dict:
    return json.loads(gzip.decompress(decode_base62(token)).decode("utf-8"))


# ---------- base-62 ----------


def test_base62_known_values():
    assert encode_base62(b"\x01\x00") == "48"
    assert decode_base62("48") == b"\x01\x00"
    assert encode_base62(b"\x3d") == "z"
    assert encode_base62(b"\x3e") == "10"


def test_base62_zero():
    assert encode_base62(b"") == "0"
    assert encode_base62(b"\x00\x00") == "0"
    assert decode_base62("0") == b"\x00"


def test_base62_round_trip_of_bytes_without_leading_zero():
    data = bytes(range(1, 256))
    assert decode_base62(encode_base62(data)) == data


@pytest.mark.parametrize("token", ["", "abc-123", "with space", "ab+/", "é"])
def test_base62_rejects_invalid_tokens(token):
    with pytest.raises(InvalidShareCodeError):
        decode_base62(token)


# ---------- token round trip ----------


def test_round_trip_preserves_content(shared_list):
    token = generate_share_token(shared_list)
    decoded = decode_share_token(token, now=NOW)

    assert TOKEN_PATTERN.match(token)
    assert decoded.name == "Greetings ✨"
    assert decoded.default_direction == "back-to-front"
    assert [c.front for c in decoded.cards] == ["こんにちは 👋", "Ærlig"]
    assert [c.back for c in decoded.cards] == ["hello", "honest"]
    assert decoded.cards[0].meaning == "greeting"
    assert decoded.cards[0].tags == ("greeting",)
    assert decoded.cards[1].notes == "Norwegian"
    assert decoded.cards[0].last_reviewed == shared_list.cards[0].last_reviewed


def test_decoded_list_gets_fresh_ids_and_timestamps(shared_list):
    decoded = decode_share_token(generate_share_token(shared_list), now=NOW)

    assert decoded.id != shared_list.id
    assert decoded.created_at == NOW
    assert decoded.updated_at == NOW
    assert all(c.created_at == NOW for c in decoded.cards)
    assert {c.id for c in decoded.cards}.isdisjoint({"c1", "c2"})
    assert len({c.id for c in decoded.cards}) == 2


def test_decoding_twice_gives_distinct_ids(shared_list):
    token = generate_share_token(shared_list)
    assert decode_share_token(token).id != decode_share_token(token).id


def test_performance_is_not_shared(shared_list):
    token = generate_share_token(shared_list)

    payload = _payload(token)
    assert all("performance" not in card for card in payload["cards"])

    decoded = decode_share_token(token)
    assert decoded.cards[0].performance == CardPerformanceMetrics()
    assert decoded.cards[0].mastery_level == 0


def test_payload_uses_camel_case_keys(shared_list):
    payload = _payload(generate_share_token(shared_list))

    assert payload["defaultDirection"] == "back-to-front"
    assert payload["createdAt"] == "2024-01-01T00:00:00.000Z"
    assert payload["cards"][0]["lastReviewed"] == "2024-02-10T09:00:00.000Z"


def test_tokens_are_deterministic(shared_list):
    assert generate_share_token(shared_list) == generate_share_token(shared_list)


def test_large_list_round_trip(make_card, make_list):
    cards = [make_card(f"c{i}", front=f"word {i}", back=f"ord {i}") for i in range(500)]
    token = generate_share_token(make_list("big", cards, name="Big"))

    decoded = decode_share_token(token)
    assert len(decoded.cards) == 500
    assert decoded.cards[499].front == "word 499"


def test_empty_list_round_trip(make_list):
    decoded = decode_share_token(generate_share_token(make_list("L0", [], name="Empty")))
    assert decoded.name == "Empty"
    assert decoded.cards == ()


def test_unnamed_list_cannot_be_built_or_shared():
    with pytest.raises(InvalidListStructureError):
        CardList(id="L0", name="", cards=(), created_at=NOW, updated_at=NOW)


def test_codec_with_custom_compressor(shared_list):
    codec = ShareCodec(IdentityCompressor())
    token = codec.generate_token(shared_list)

    assert TOKEN_PATTERN.match(token)
    assert json.loads(decode_base62(token))["name"] == "Greetings ✨"
    assert codec.decode_token(token).name == "Greetings ✨"


# ---------- decode errors ----------


@pytest.mark.parametrize("token", ["", "not a token!", "abc_123"])
def test_invalid_code(token):
    with pytest.raises(InvalidShareCodeError) as exc_info:
        decode_share_token(token)
    assert exc_info.value.kind is ShareErrorKind.INVALID_CODE
    assert exc_info.value.message


def test_corrupt_payload():
    with pytest.raises(CorruptSharePayloadError) as exc_info:
        decode_share_token("abc123")
    assert exc_info.value.kind is ShareErrorKind.CORRUPT_PAYLOAD
    assert isinstance(exc_info.value, ShareTokenError)


def test_truncated_token_is_rejected(shared_list):
    token = generate_share_token(shared_list)
    with pytest.raises(ShareTokenError):
        decode_share_token(token[: len(token) // 2])


@pytest.mark.parametrize(
    "payload",
    [
        b"not json",
        b'{"cards": []}',
        b'{"name": "No cards"}',
        b'{"name": "", "cards": []}',
        b'["name", "cards"]',
        b'{"name": "Bad card", "cards": [{"front": 1}]}',
        b"[" * 200000,
    ],
)
def test_invalid_structure(payload):
    token = encode_base62(GzipCompressor().compress(payload))

    with pytest.raises(InvalidShareStructureError) as exc_info:
        decode_share_token(token)
    assert exc_info.value.kind is ShareErrorKind.INVALID_STRUCTURE


# ---------- URLs ----------


def test_generate_share_url(shared_list):
    url = generate_share_url(shared_list, "https://flash.example.com")
    token = generate_share_token(shared_list)

    assert url == f"https://flash.example.com/egendefinert?import={token}"
    assert extract_import_token(url) == token


def test_generate_share_url_custom_path(shared_list):
    url = generate_share_url(shared_list, "http://localhost:5173", "/share")
    assert url.startswith("http://localhost:5173/share?import=")


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://flash.example.com/egendefinert?import=abc123", "abc123"),
        ("https://flash.example.com/?lang=no&import=XyZ", "XyZ"),
        ("https://flash.example.com/egendefinert?import=", ""),
        ("https://flash.example.com/egendefinert", None),
        ("https://flash.example.com/?other=1", None),
        ("/egendefinert?import=abc", None),
        ("not a url", None),
        ("", None),
        ("http://[::1/?import=abc", None),
        ("http://host:abc/?import=x", None),
        ("http://host:99999/?import=x", None),
    ],
)
def test_extract_import_token(url, expected):
    assert extract_import_token(url) == expected
