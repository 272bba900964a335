import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

from .auth import ExtensionAuthenticator, now_ms
from .config import Settings, get_settings
from .content import load_library_html
from .errors import LibraryError
from .schemas import ErrorResponse, HtmlResult, LibraryResponse

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, X-Extension-Auth, X-Timestamp, X-Nonce",
    "Access-Control-Max-Age": "86400",
}


@dataclass
class LibraryReply:
    status_code: int
    body: dict[str, Any]
    headers: dict[str, str] = field(default_factory=lambda: {**CORS_HEADERS, "Content-Type": "application/json"})


def iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def client_address(headers, peer: str | None = None) -> str:
    return headers.get("x-forwarded-for") or headers.get("x-real-ip") or peer or "unknown"


def _error(status_code: int, message: str) -> LibraryReply:
    return LibraryReply(status_code, ErrorResponse(error=message).model_dump(exclude_none=True))


def handle_library_request(
    method: str,
    headers,
    *,
    content_length: int | None = None,
    peer: str | None = None,
    settings: Settings | None = None,
    clock: Callable[[], int] = now_ms,
) -> LibraryReply:
    """
    Serve one /api/library call.

    `headers` must support case-insensitive .get(). Never raises; every outcome
    is turned into a LibraryReply carrying the CORS headers.
    """
    method = method.upper()
    if method == "OPTIONS":
        return LibraryReply(200, {})
    if method != "POST":
        return _error(405, "Method not allowed")

    if settings is None:
        settings = get_settings()

    if content_length is not None and content_length > settings.max_body_bytes:
        logger.warning("request body too large: %d bytes", content_length)
        return _error(413, "Request body too large")

    logger.info("Library download request from IP: %s", client_address(headers, peer))

    authenticator = ExtensionAuthenticator(settings.expected_extension_id, clock=clock)
    try:
        authenticator.authenticate(headers)
    except LibraryError as e:
        return _error(e.status_code, e.message)

    try:
        start = time.perf_counter()
        html = load_library_html()
        generation_time = int((time.perf_counter() - start) * 1000)
        logger.info("Library content prepared in %dms", generation_time)

        payload = LibraryResponse(
            html_result=HtmlResult(html=html),
            generation_time=generation_time,
            timestamp=iso_now(),
        )
        return LibraryReply(200, payload.model_dump(by_alias=True))
    except Exception as e:
        logger.exception("Library download failed")
        payload = ErrorResponse(
            error="Library download failed",
            details=str(e) if settings.expose_error_details else None,
            timestamp=iso_now(),
        )
        return LibraryReply(500, payload.model_dump(exclude_none=True))
