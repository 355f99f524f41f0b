# Application Package
from .combiner import CombinedPool, combine_lists
from .performance import (
    calculate_mastery,
    classify_difficulty,
    create_empty,
    record_card_view,
    record_view,
)
from .practice_service import PracticeService, PracticeSession
from .sharing import (
    ShareCodec,
    decode_share_token,
    extract_import_token,
    generate_share_token,
    generate_share_url,
)
from .shuffle import SmartShuffleConfig, perform_smart_shuffle

__all__ = [
    "CombinedPool",
    "combine_lists",
    "create_empty",
    "record_view",
    "record_card_view",
    "calculate_mastery",
    "classify_difficulty",
    "SmartShuffleConfig",
    "perform_smart_shuffle",
    "ShareCodec",
    "generate_share_token",
    "decode_share_token",
    "generate_share_url",
    "extract_import_token",
    "PracticeService",
    "PracticeSession",
]
