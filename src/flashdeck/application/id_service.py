"""Service for minting stable ids for lists and cards."""

from ulid import ULID


def generate_id() -> str:
    """Generate a fresh, time-sortable id using ULID."""
    return str(ULID())
