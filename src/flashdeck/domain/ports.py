"""
Ports (interfaces) for list storage and payload compression.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod

from .models import CardList, DailyStat


class ListRepository(ABC):
    """
    Port for persisting card lists.

    Implementations:
        - JsonListRepository: Stores all lists in a single JSON file.
        - InMemoryListRepository: Keeps lists in a dict (tests, embedding).
    """

    @abstractmethod
    async def load_list(self, list_id: str) -> CardList | None:
        """
        Fetch a list by id.

        Returns:
            The stored list, or None if no list has that id.
        """
        pass

    @abstractmethod
    async def save_list(self, card_list: CardList) -> CardList:
        """
        Insert or replace a list.

        Returns:
            The list as stored, with `updated_at` stamped to the save time.
        """
        pass

    @abstractmethod
    async def delete_list(self, list_id: str) -> bool:
        """
        Remove a list.

        Returns:
            True if a list was removed, False if none matched.
        """
        pass

    @abstractmethod
    async def list_all(self) -> list[CardList]:
        """Return every stored list in insertion order."""
        pass


class ActivityRepository(ABC):
    """
    Port for the per-day practice activity log.

    Implementations:
        - JsonActivityRepository: Stores all entries in a single JSON file.
        - InMemoryActivityRepository: Keeps entries in a dict (tests, embedding).
    """

    @abstractmethod
    async def load_daily_stats(self, list_id: str | None = None) -> list[DailyStat]:
        """
        Fetch activity entries, oldest day first.

        Args:
            list_id: Only return entries for this list; all lists when None.
        """
        pass

    @abstractmethod
    async def save_daily_stat(self, stat: DailyStat) -> None:
        """Insert or replace the entry for `(stat.day, stat.list_id)`."""
        pass


class Compressor(ABC):
    """Lossless byte compression used by the share codec."""

    @abstractmethod
    def compress(self, data: bytes) -> bytes:
        pass

    @abstractmethod
    def decompress(self, data: bytes) -> bytes:
        """Raise ValueError (or a subclass) when `data` is not a valid stream."""
        pass
