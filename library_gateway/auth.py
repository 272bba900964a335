import base64
import binascii
import logging
import re
import time
from typing import Callable

from .errors import LibraryError

logger = logging.getLogger(__name__)

SENTINEL = "__SENTINEL__"
CHAR_SHIFT = 3
FIELD_DELIMITER = "|"
FRESHNESS_WINDOW_MS = 30_000

AUTH_REQUIRED = "Authentication required"
REQUEST_EXPIRED = "Request expired"
INVALID_EXTENSION = "Invalid extension"

# Integer prefix, the way extension clients format X-Timestamp: "1712345678901"
_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
# Sentinel segment is read like parseInt(x, 36): leading base-36 digits, trailing junk ignored
_BASE36_PREFIX = re.compile(r"\s*([+-]?[0-9a-z]+)", re.IGNORECASE | re.ASCII)
_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def now_ms() -> int:
    return time.time_ns() // 1_000_000


def parse_timestamp(raw: str) -> int | None:
    m = _INT_PREFIX.match(raw or "")
    if not m:
        return None
    try:
        return int(m.group(1))
    except ValueError:
        # exceeds the int string-conversion digit limit
        return None


def parse_base36(raw: str) -> str | None:
    """Decimal rendering of the leading base-36 number in `raw`, or None."""
    m = _BASE36_PREFIX.match(raw or "")
    if not m:
        return None
    return str(int(m.group(1), 36))


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    value = abs(value)
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36_DIGITS[rem])
    return sign + "".join(reversed(digits))


def _b64_text(data: str) -> str:
    return base64.b64decode(data).decode("utf-8", errors="replace")


def _shift(text: str, offset: int) -> str:
    return "".join(chr(ord(c) + offset) for c in text)


def encode_extension_header(extension_id: str, timestamp: str, nonce: str) -> str:
    """
    Build an X-Extension-Auth value the way the browser extension does.

    base64("id|ts|nonce") -> reversed -> every char shifted up by CHAR_SHIFT,
    then "__SENTINEL__" + base36(ts) appended and the whole thing base64'd.
    """
    payload = FIELD_DELIMITER.join([extension_id, timestamp, nonce])
    step1 = base64.b64encode(payload.encode("utf-8")).decode("ascii")
    step2 = _shift(step1[::-1], CHAR_SHIFT)
    combined = f"{step2}{SENTINEL}{to_base36(int(timestamp))}"
    return base64.b64encode(combined.encode("utf-8")).decode("ascii")


def decode_extension_header(auth_header: str, timestamp: str, nonce: str) -> str | None:
    """
    Reverse encode_extension_header() and return the embedded extension id.

    Returns None when the header is malformed or does not bind to the given
    timestamp/nonce.
    """
    try:
        parts = _b64_text(auth_header).split(SENTINEL)
        if len(parts) != 2:
            logger.info("auth header rejected: expected 2 sentinel segments, got %d", len(parts))
            return None

        encrypted, timestamp_check = parts
        if parse_base36(timestamp_check) != timestamp:
            logger.info("auth header rejected: sentinel timestamp mismatch")
            return None

        original = _b64_text(_shift(encrypted, -CHAR_SHIFT)[::-1])
        fields = original.split(FIELD_DELIMITER)
        if len(fields) != 3:
            logger.info("auth header rejected: expected 3 fields, got %d", len(fields))
            return None

        extension_id, ts, n = fields
        if ts != timestamp or n != nonce:
            logger.info("auth header rejected: embedded timestamp/nonce mismatch")
            return None
        return extension_id
    except (binascii.Error, ValueError) as e:
        logger.info("auth header rejected: undecodable (%s)", e)
        return None


class ExtensionAuthenticator:
    def __init__(
        self,
        expected_extension_id: str | None,
        *,
        freshness_window_ms: int = FRESHNESS_WINDOW_MS,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.expected_extension_id = expected_extension_id
        self.freshness_window_ms = freshness_window_ms
        self.clock = clock

    def authenticate(self, headers) -> str:
        """
        Validate the X-Extension-Auth / X-Timestamp / X-Nonce triple.

        `headers` is any case-insensitive mapping (http.client.HTTPMessage,
        starlette Headers). Returns the extension id, raises LibraryError(403).
        """
        auth_header = headers.get("x-extension-auth")
        timestamp = headers.get("x-timestamp")
        nonce = headers.get("x-nonce")

        if not auth_header or not timestamp or not nonce:
            logger.info("auth failed: missing extension headers")
            raise LibraryError(403, AUTH_REQUIRED)

        header_time = parse_timestamp(timestamp)
        # Only stale timestamps are rejected; future ones pass this check.
        if header_time is None or self.clock() - header_time > self.freshness_window_ms:
            logger.info("auth failed: request expired (x-timestamp=%r)", timestamp)
            raise LibraryError(403, REQUEST_EXPIRED)

        extension_id = decode_extension_header(auth_header, timestamp, nonce)
        if not self.expected_extension_id:
            logger.warning("EXPECTED_EXTENSION_ID is not configured; rejecting request")
            raise LibraryError(403, INVALID_EXTENSION)
        if not extension_id or extension_id != self.expected_extension_id:
            logger.warning("auth failed: invalid extension id %r", extension_id)
            raise LibraryError(403, INVALID_EXTENSION)

        logger.info("Authentication successful for extension: %s", extension_id)
        return extension_id
