"""flashdeck: adaptive practice-session engine for flashcard lists."""

from flashdeck.consts import VERSION

__version__ = VERSION
