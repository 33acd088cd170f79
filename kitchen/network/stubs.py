"""Canned sample responses for running the client without a server.

``stub_transport()`` answers every request in-process with a fixed
envelope, for previews and offline demos. Login, register, user lookup
and list fetches get realistic payloads. Anything else gets a bare
success envelope with no ``data``: status-only calls succeed on it and
calls that decode a model raise ``ServerError``.
"""

from __future__ import annotations

import logging
import re
from typing import Any

import httpx

logger = logging.getLogger(__name__)

SAMPLE_USER: dict[str, Any] = {"id": "123", "email": "test@example.com", "name": "Test User"}

SAMPLE_LOGIN: dict[str, Any] = {
    "success": True,
    "data": {"token": "sample_token", "user": SAMPLE_USER},
}

SAMPLE_USER_INFO: dict[str, Any] = {"success": True, "data": SAMPLE_USER}

SAMPLE_DATA_LIST: dict[str, Any] = {
    "success": True,
    "data": {"items": [], "total": 0, "page": 1, "limit": 10},
}

SAMPLE_DEFAULT: dict[str, Any] = {"success": True, "message": "Operation succeeded"}

# (method, path pattern) -> body. Patterns match the end of the path so a
# base URL carrying its own prefix, e.g. ``/v1``, still matches.
_ROUTES: list[tuple[str, re.Pattern[str], dict[str, Any]]] = [
    ("POST", re.compile(r"/auth/login$"), SAMPLE_LOGIN),
    ("POST", re.compile(r"/auth/register$"), SAMPLE_LOGIN),
    ("GET", re.compile(r"/users/[^/]+$"), SAMPLE_USER_INFO),
    ("GET", re.compile(r"/data$"), SAMPLE_DATA_LIST),
]


def sample_response(method: str, path: str) -> dict[str, Any]:
    """Canned body for ``method`` and ``path``; the default envelope when none matches."""
    for route_method, pattern, body in _ROUTES:
        if route_method == method.upper() and pattern.search(path):
            return body
    return SAMPLE_DEFAULT


def _handle(request: httpx.Request) -> httpx.Response:
    body = sample_response(request.method, request.url.path)
    logger.debug("Stub response for %s %s", request.method, request.url.path)
    return httpx.Response(200, json=body)


def stub_transport() -> httpx.MockTransport:
    """An httpx transport that serves the sample responses above."""
    return httpx.MockTransport(_handle)
