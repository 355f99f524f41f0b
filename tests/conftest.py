from datetime import datetime, timezone

import pytest

from flashdeck.domain.models import Card, CardList, CardPerformanceMetrics

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def make_card():
    """Factory for cards; `mastery` sets only the performance mastery level."""

    def _make(card_id: str, front: str = "あ", back: str = "a", mastery: int = 0, **kwargs):
        performance = kwargs.pop("performance", None) or CardPerformanceMetrics(
            mastery_level=mastery
        )
        return Card(
            id=card_id,
            front=front,
            back=back,
            created_at=kwargs.pop("created_at", T0),
            performance=performance,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_list():
    def _make(list_id: str, cards, name: str | None = None, direction=None):
        return CardList(
            id=list_id,
            name=name or f"List {list_id}",
            cards=tuple(cards),
            created_at=T0,
            updated_at=T0,
            default_direction=direction,
        )

    return _make


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config/logs
    monkeypatch.setenv("HOME", str(home))
    for var in ("FLASHDECK_DATA_DIR", "FLASHDECK_SHUFFLE_MODE", "FLASHDECK_ENABLE_SMART_SHUFFLE"):
        monkeypatch.delenv(var, raising=False)
    return home
