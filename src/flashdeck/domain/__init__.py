# Domain Package
from .errors import (
    CardNotFoundError,
    CorruptSharePayloadError,
    FlashdeckError,
    InvalidListStructureError,
    InvalidMetricsError,
    InvalidShareCodeError,
    InvalidShareStructureError,
    ShareErrorKind,
    ShareTokenError,
)
from .models import (
    Card,
    CardList,
    CardPerformanceMetrics,
    DailyStat,
    Difficulty,
    Direction,
    ShuffleMode,
)
from .ports import ActivityRepository, Compressor, ListRepository

__all__ = [
    "Card",
    "CardList",
    "CardPerformanceMetrics",
    "DailyStat",
    "Difficulty",
    "Direction",
    "ShuffleMode",
    "ActivityRepository",
    "Compressor",
    "ListRepository",
    "FlashdeckError",
    "InvalidMetricsError",
    "InvalidListStructureError",
    "CardNotFoundError",
    "ShareErrorKind",
    "ShareTokenError",
    "InvalidShareCodeError",
    "CorruptSharePayloadError",
    "InvalidShareStructureError",
]
