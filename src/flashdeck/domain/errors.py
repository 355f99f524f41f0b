"""
Error taxonomy for flashdeck.

Errors carry stable, language-neutral kinds. Messages are developer-facing;
presentation layers localize on `kind`.
"""

from enum import Enum


class FlashdeckError(Exception):
    """Base class for all flashdeck errors."""


class InvalidMetricsError(FlashdeckError, ValueError):
    """A performance update or metrics value violated its input contract."""


class InvalidListStructureError(FlashdeckError, ValueError):
    """A list, or its serialized form (JSON export or stored record), is malformed."""


class CardNotFoundError(FlashdeckError, LookupError):
    """A referenced list or card does not exist."""


class ShareErrorKind(str, Enum):
    INVALID_CODE = "invalid_code"
    CORRUPT_PAYLOAD = "corrupt_payload"
    INVALID_STRUCTURE = "invalid_structure"


class ShareTokenError(FlashdeckError):
    """A share token could not be decoded. Inspect `kind` to pick a user message."""

    kind: ShareErrorKind = ShareErrorKind.INVALID_STRUCTURE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidShareCodeError(ShareTokenError):
    """Token is empty or contains characters outside the base-62 alphabet."""

    kind = ShareErrorKind.INVALID_CODE


class CorruptSharePayloadError(ShareTokenError):
    """Token decoded to bytes that are not a valid compressed payload."""

    kind = ShareErrorKind.CORRUPT_PAYLOAD


class InvalidShareStructureError(ShareTokenError):
    """Payload is not JSON, or lacks the required `name` and `cards` fields."""

    kind = ShareErrorKind.INVALID_STRUCTURE
