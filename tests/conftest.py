"""
Shared pytest fixtures for the library gateway tests.
"""

from __future__ import annotations

import threading
from http.server import ThreadingHTTPServer

import pytest
from fastapi.testclient import TestClient

from library_gateway.auth import encode_extension_header, now_ms

EXTENSION_ID = "abcdefghijklmnopabcdefghijklmnop"


@pytest.fixture()
def extension_env(monkeypatch):
    monkeypatch.setenv("EXPECTED_EXTENSION_ID", EXTENSION_ID)
    monkeypatch.setenv("APP_ENV", "production")
    return EXTENSION_ID


@pytest.fixture()
def auth_headers():
    """
    Factory for a valid X-Extension-Auth / X-Timestamp / X-Nonce triple.
    """

    def _make(
        *,
        extension_id: str = EXTENSION_ID,
        timestamp: int | None = None,
        nonce: str = "n0nce-1",
    ) -> dict[str, str]:
        ts = str(now_ms() if timestamp is None else timestamp)
        return {
            "X-Extension-Auth": encode_extension_header(extension_id, ts, nonce),
            "X-Timestamp": ts,
            "X-Nonce": nonce,
        }

    return _make


@pytest.fixture()
def client(extension_env) -> TestClient:
    from main import app

    return TestClient(app, raise_server_exceptions=True)


@pytest.fixture()
def vercel_url(extension_env):
    """
    Serve api/library.py's handler on an ephemeral port, the way the Vercel
    Python runtime drives it.
    """
    from api.library import handler

    server = ThreadingHTTPServer(("127.0.0.1", 0), handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        host, port = server.server_address[:2]
        yield f"http://{host}:{port}/api/library"
    finally:
        server.shutdown()
        server.server_close()
