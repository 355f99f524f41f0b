"""
Share codec: list <-> compact URL-safe token.

Encoding pipeline:
1. Serialize the list's content (never its performance data) to compact JSON
2. Compress the UTF-8 bytes (gzip by default)
3. Encode the compressed bytes as base-62 (`0-9A-Za-z`, big-endian, no padding)

Decoding reverses the pipeline and mints a fresh list: new list and card ids
and fresh creation timestamps. A token is an import, not a restore.
"""

import logging
from datetime import datetime
from urllib.parse import parse_qs, urljoin, urlsplit

from flashdeck.application.list_service import import_record
from flashdeck.application.serialization import dump_record, list_to_record, load_record
from flashdeck.domain.constants import BASE62_ALPHABET, IMPORT_QUERY_PARAM, SHARE_PATH
from flashdeck.domain.errors import (
    CorruptSharePayloadError,
    InvalidListStructureError,
    InvalidShareCodeError,
    InvalidShareStructureError,
)
from flashdeck.domain.models import CardList
from flashdeck.domain.ports import Compressor

logger = logging.getLogger(__name__)

_BASE = len(BASE62_ALPHABET)
_DIGITS = {ch: i for i, ch in enumerate(BASE62_ALPHABET)}


# ---------- Base-62 ----------


def encode_base62(data: bytes) -> str:
    """
    Encode bytes as a base-62 string, most significant digit first.

    The bytes are read as one big unsigned integer, so leading zero bytes are
    not represented. Gzip output always starts with 0x1f, so tokens are unaffected.
    """
    num = int.from_bytes(data, "big")
    if num == 0:
        return BASE62_ALPHABET[0]

    digits = []
    while num > 0:
        num, remainder = divmod(num, _BASE)
        digits.append(BASE62_ALPHABET[remainder])
    return "".join(reversed(digits))


def decode_base62(token: str) -> bytes:
    """
    Decode a base-62 string back to bytes.

    Raises:
        InvalidShareCodeError: If the token is empty or has characters outside the alphabet.
    """
    if not token:
        raise InvalidShareCodeError("Share token is empty")

    num = 0
    for ch in token:
        value = _DIGITS.get(ch)
        if value is None:
            raise InvalidShareCodeError(f"Invalid base62 character: {ch!r}")
        num = num * _BASE + value

    if num == 0:
        return b"\x00"
    return num.to_bytes((num.bit_length() + 7) // 8, "big")


# ---------- Codec ----------


class ShareCodec:
    """
    Encodes lists to share tokens and back.

    Stateless apart from the compressor; safe to share between callers.
    """

    def __init__(self, compressor: Compressor | None = None):
        """
        Args:
            compressor: Compression capability; defaults to gzip.
        """
        if compressor is None:
            from flashdeck.infrastructure.adapters.compression import GzipCompressor

            compressor = GzipCompressor()
        self._compressor = compressor

    def generate_token(self, card_list: CardList) -> str:
        """Encode a list's shareable content as a base-62 token."""
        payload = dump_record(list_to_record(card_list, include_performance=False))
        compressed = self._compressor.compress(payload.encode("utf-8"))
        token = encode_base62(compressed)
        logger.debug(
            f"Encoded list {card_list.id} ({len(card_list.cards)} cards): "
            f"{len(payload)} chars JSON -> {len(token)} chars token"
        )
        return token

    def decode_token(self, token: str, now: datetime | None = None) -> CardList:
        """
        Decode a token into a freshly minted list.

        Args:
            token: A token produced by `generate_token`.
            now: Creation time for the new list and cards; defaults to current UTC time.

        Raises:
            InvalidShareCodeError: Empty token or characters outside the base-62 alphabet.
            CorruptSharePayloadError: The bytes are not a valid compressed stream.
            InvalidShareStructureError: Not JSON, or missing `name`/`cards`.
        """
        try:
            compressed = decode_base62(token)
        except InvalidShareCodeError as e:
            logger.warning(f"Rejected share token: {e}")
            raise

        try:
            raw = self._compressor.decompress(compressed)
        except ValueError as e:
            logger.warning(f"Share token payload could not be decompressed: {e}")
            raise CorruptSharePayloadError(f"Share token payload is corrupt: {e}") from e

        try:
            record = load_record(raw)
        except InvalidListStructureError as e:
            logger.warning(f"Share token payload has invalid structure: {e}")
            raise InvalidShareStructureError(str(e)) from e

        return import_record(record, now=now, keep_performance=False)

    def generate_url(self, card_list: CardList, base_url: str, path: str = SHARE_PATH) -> str:
        """Build `<base_url><path>?import=<token>`; base-62 never needs escaping."""
        token = self.generate_token(card_list)
        return f"{urljoin(base_url, path)}?{IMPORT_QUERY_PARAM}={token}"


_default_codec: ShareCodec | None = None


def _codec() -> ShareCodec:
    global _default_codec
    if _default_codec is None:
        _default_codec = ShareCodec()
    return _default_codec


def generate_share_token(card_list: CardList) -> str:
    return _codec().generate_token(card_list)


def decode_share_token(token: str, now: datetime | None = None) -> CardList:
    return _codec().decode_token(token, now=now)


def generate_share_url(card_list: CardList, base_url: str, path: str = SHARE_PATH) -> str:
    return _codec().generate_url(card_list, base_url, path)


def extract_import_token(url: str) -> str | None:
    """
    Return the `import` query parameter of an absolute URL.

    Returns None (never raises) for malformed or relative URLs and for URLs
    without the parameter. An empty `?import=` yields "".
    """
    try:
        parts = urlsplit(url)
        parts.port  # raises ValueError for a non-numeric or out-of-range port
    except (ValueError, TypeError, AttributeError):
        return None
    if not parts.scheme or not parts.netloc:
        return None

    values = parse_qs(parts.query, keep_blank_values=True).get(IMPORT_QUERY_PARAM)
    return values[0] if values else None
