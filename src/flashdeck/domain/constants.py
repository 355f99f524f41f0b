"""Centralized constants for flashdeck.

All magic numbers and defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Performance ----------
CORRECT_RESPONSE_THRESHOLD_MS = 5000
MASTERY_MAX = 100
SUCCESS_POINTS = 60
CONSISTENCY_POINTS = 20
CONSISTENCY_MIN_VIEWS = 3
CONSISTENCY_SPREAD_FACTOR = 5
FAST_RESPONSE_MS = 3000
FAST_RESPONSE_POINTS = 20
MODERATE_RESPONSE_MS = 5000
MODERATE_RESPONSE_POINTS = 10

# ---------- Difficulty ----------
HARD_SUCCESS_RATE = 0.3
HARD_FLIP_RATIO = 1.5
MEDIUM_SUCCESS_RATE = 0.7
MEDIUM_FLIP_RATIO = 0.5

# ---------- Smart Shuffle ----------
DEFAULT_SHUFFLE_MODE = "balanced"
HARD_MASTERY_BELOW = 50  # hard band: mastery < 50
EASY_MASTERY_ABOVE = 80  # easy band: mastery > 80

# ---------- Progress ----------
LEARNING_MASTERY_BELOW = 50  # learning band: 0 < mastery < 50
MASTERED_MASTERY_FROM = 80  # mastered band: mastery >= 80
DEFAULT_PROGRESS_DAYS = 30

# ---------- Multi-list ----------
DEFAULT_DIRECTION = "front-to-back"
MIN_LISTS_TO_COMBINE = 2
COMBINED_NAME_SEPARATOR = " + "

# ---------- Sharing ----------
BASE62_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
SHARE_PATH = "/egendefinert"
IMPORT_QUERY_PARAM = "import"
