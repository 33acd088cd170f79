"""HTTP transport adapter over a single long-lived ``httpx.AsyncClient``.

Attaches content-type and bearer-token headers, notifies observers around
every call, and turns every failure into exactly one ``NetworkError``:
exceptions raised by httpx go through ``classify_transport_failure`` and
non-2xx responses through ``classify_http_status``.

SECURITY: Request/response bodies are only logged in verbose mode, and
always sanitized.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from typing import Protocol, TypeVar

import httpx

from kitchen.config.settings import DEFAULT_REQUEST_TIMEOUT_SECONDS, DEFAULT_RETRY_COUNT
from kitchen.logging_config import sanitize
from kitchen.models.responses import EmptyResponse
from kitchen.network.catalog import RequestDescriptor
from kitchen.network.decoding import decode_empty, decode_response
from kitchen.network.errors import (
    NetworkError,
    classify_http_status,
    classify_transport_failure,
)
from kitchen.network.session import AuthSession

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MAX_LOGGED_BODY = 2048


# ---------------------------------------------------------------------------
# Observers
# ---------------------------------------------------------------------------


class TransportObserver(Protocol):
    """Side-effect hooks called around every request."""

    def will_send(self, descriptor: RequestDescriptor) -> None: ...

    def did_receive(
        self,
        descriptor: RequestDescriptor,
        response: httpx.Response | None,
        error: NetworkError | None,
        duration_ms: float,
    ) -> None:
        """Called once per call. ``response`` and ``error`` are both ``None`` when it was cancelled."""
        ...


class LoggingObserver:
    """Logs method and URL of each call; bodies too when ``verbose``."""

    def __init__(self, verbose: bool = False) -> None:
        self._verbose = verbose

    def will_send(self, descriptor: RequestDescriptor) -> None:
        logger.debug(
            "--> %s %s",
            descriptor.method.value,
            descriptor.url,
            extra={"method": descriptor.method.value, "url": descriptor.url},
        )
        if self._verbose and descriptor.json is not None:
            logger.debug("Request body: %s", sanitize(str(dict(descriptor.json)))[:_MAX_LOGGED_BODY])

    def did_receive(
        self,
        descriptor: RequestDescriptor,
        response: httpx.Response | None,
        error: NetworkError | None,
        duration_ms: float,
    ) -> None:
        extra = {
            "method": descriptor.method.value,
            "url": descriptor.url,
            "duration_ms": duration_ms,
        }

        if response is None and error is None:
            logger.info(
                "<-- %s %s cancelled",
                descriptor.method.value,
                descriptor.url,
                extra=extra,
            )
            return

        if response is None:
            logger.info(
                "<-- %s %s failed: %s",
                descriptor.method.value,
                descriptor.url,
                error,
                extra={**extra, "error_code": error.code},
            )
            return

        logger.debug(
            "<-- %s %s %d",
            descriptor.method.value,
            descriptor.url,
            response.status_code,
            extra={**extra, "status_code": response.status_code},
        )
        if self._verbose:
            logger.debug("Response body: %s", sanitize(response.text)[:_MAX_LOGGED_BODY])


class NetworkActivityIndicator:
    """App-wide busy flag; visible while at least one request is in flight."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._in_flight = 0

    @property
    def is_visible(self) -> bool:
        return self._in_flight > 0

    def begin(self) -> None:
        with self._lock:
            self._in_flight += 1

    def end(self) -> None:
        with self._lock:
            self._in_flight = max(0, self._in_flight - 1)


class ActivityObserver:
    """Drives a ``NetworkActivityIndicator`` from request start/completion."""

    def __init__(self, indicator: NetworkActivityIndicator) -> None:
        self.indicator = indicator

    def will_send(self, descriptor: RequestDescriptor) -> None:
        self.indicator.begin()

    def did_receive(
        self,
        descriptor: RequestDescriptor,
        response: httpx.Response | None,
        error: NetworkError | None,
        duration_ms: float,
    ) -> None:
        self.indicator.end()


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------


class HttpTransport:
    """Executes request descriptors and classifies their outcome.

    Parameters
    ----------
    session:
        Source of the bearer token attached to outgoing requests.
    timeout_seconds:
        Per-request timeout (default 30).
    retry_count:
        Advisory retry count surfaced to callers. Never applied here.
    observers:
        Side-effect hooks notified before and after every call.
    transport:
        Optional httpx transport, e.g. ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        session: AuthSession,
        *,
        timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        retry_count: int = DEFAULT_RETRY_COUNT,
        observers: list[TransportObserver] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._session = session
        self.retry_count = retry_count
        self._observers: list[TransportObserver] = list(observers or [])
        self._client = httpx.AsyncClient(
            timeout=timeout_seconds,
            headers={"Cache-Control": "no-cache"},
            transport=transport,
        )

    @property
    def observers(self) -> list[TransportObserver]:
        return self._observers

    def build_headers(self, descriptor: RequestDescriptor) -> dict[str, str]:
        """Descriptor headers plus ``Authorization`` when a token is stored."""
        headers = dict(descriptor.headers)
        if descriptor.is_multipart:
            # httpx writes multipart/form-data with the boundary itself.
            headers.pop("Content-Type", None)
        token = self._session.access_token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _notify_will_send(self, descriptor: RequestDescriptor) -> None:
        for observer in self._observers:
            try:
                observer.will_send(descriptor)
            except Exception:
                logger.exception("Transport observer will_send failed")

    def _notify_did_receive(
        self,
        descriptor: RequestDescriptor,
        response: httpx.Response | None,
        error: NetworkError | None,
        started: float,
    ) -> None:
        duration_ms = round((time.monotonic() - started) * 1000, 2)
        for observer in self._observers:
            try:
                observer.did_receive(descriptor, response, error, duration_ms)
            except Exception:
                logger.exception("Transport observer did_receive failed")

    async def execute(self, descriptor: RequestDescriptor) -> httpx.Response:
        """Send ``descriptor`` and return the 2xx response.

        Raises
        ------
        NetworkError
            Classified transport failure or non-2xx status.
        """
        files = None
        if descriptor.is_multipart:
            files = [
                (
                    part.name,
                    (part.file_name, part.content, part.mime_type or "application/octet-stream"),
                )
                for part in descriptor.parts
            ]

        self._notify_will_send(descriptor)
        started = time.monotonic()
        try:
            response = await self._client.request(
                descriptor.method.value,
                descriptor.url,
                json=dict(descriptor.json) if descriptor.json is not None else None,
                params=dict(descriptor.params) if descriptor.params is not None else None,
                files=files,
                headers=self.build_headers(descriptor),
            )
        except asyncio.CancelledError:
            self._notify_did_receive(descriptor, None, None, started)
            raise
        except Exception as exc:
            error = classify_transport_failure(exc)
            self._notify_did_receive(descriptor, None, error, started)
            raise error from exc

        error = None
        if not response.is_success:
            error = classify_http_status(response.status_code, response.content)
        self._notify_did_receive(descriptor, response, error, started)
        if error is not None:
            raise error
        return response

    async def send(self, descriptor: RequestDescriptor, model: type[T]) -> T:
        """Execute and decode the body into ``model``."""
        response = await self.execute(descriptor)
        return decode_response(response.content, response.status_code, model)

    async def send_empty(self, descriptor: RequestDescriptor) -> EmptyResponse:
        """Execute where only the status code matters."""
        response = await self.execute(descriptor)
        return decode_empty(response.status_code, response.content)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> HttpTransport:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
