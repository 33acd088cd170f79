"""Network error taxonomy, failure classifiers and the global error reporter.

Every failure on the network path ends as exactly one ``NetworkError``
subclass. Each carries a stable numeric ``code`` for reporting across
boundaries and a human readable ``message``. ``ErrorReporter`` is the global
observer that logs classified failures and reacts to ``UnauthorizedError``
by clearing the session and broadcasting a re-auth notification.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import httpx

from kitchen.network.notifications import (
    USER_NEEDS_REAUTH,
    NotificationCenter,
)

if TYPE_CHECKING:
    from kitchen.network.session import AuthSession

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Error hierarchy
# ---------------------------------------------------------------------------


class NetworkError(Exception):
    """Base error for every classified network failure."""

    code: int = -1
    message: str = "Network error"

    def __init__(
        self,
        message: str | None = None,
        *,
        cause: BaseException | None = None,
    ) -> None:
        self.message = message or self.__class__.message
        self.cause = cause
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code}, message={self.message!r})"


class InvalidURLError(NetworkError):
    """Bad or unsupported URL."""

    code = -1000
    message = "Invalid URL"


class NoDataError(NetworkError):
    """Server returned no body where one was expected."""

    code = -1002
    message = "Server returned no data"


class DecodingError(NetworkError):
    """Response body could not be decoded into the expected model."""

    code = -1003
    message = "Failed to decode response"

    def __init__(self, cause: BaseException | None = None, message: str | None = None) -> None:
        super().__init__(message or _with_cause(self.__class__.message, cause), cause=cause)


class EncodingError(NetworkError):
    """Request payload could not be encoded."""

    code = -1004
    message = "Failed to encode request"

    def __init__(self, cause: BaseException | None = None, message: str | None = None) -> None:
        super().__init__(message or _with_cause(self.__class__.message, cause), cause=cause)


class TransportError(NetworkError):
    """HTTP client failure that is neither connectivity, timeout nor URL related."""

    code = -1005
    message = "Transport error"

    def __init__(self, cause: BaseException | None = None, message: str | None = None) -> None:
        super().__init__(message or _with_cause(self.__class__.message, cause), cause=cause)


class ServerError(NetworkError):
    """Server rejected the request; ``code`` is the HTTP or envelope code."""

    message = "Unknown server error"

    def __init__(self, code: int, message: str | None = None) -> None:
        self.code = code
        self.server_message = message
        super().__init__(f"Server error ({code}): {message or self.__class__.message}")


class NetworkUnavailableError(NetworkError):
    """Not connected, or the connection was lost."""

    code = -1009
    message = "Network connection unavailable"


class RequestTimeoutError(NetworkError):
    """Request timed out."""

    code = -1001
    message = "Request timed out"


class UnauthorizedError(NetworkError):
    """Authentication failed (HTTP 401)."""

    code = 401
    message = "User authentication failed"


class ForbiddenError(NetworkError):
    """Access denied (HTTP 403)."""

    code = 403
    message = "Access denied"


class NotFoundError(NetworkError):
    """Requested resource does not exist (HTTP 404)."""

    code = 404
    message = "Requested resource not found"


class UnknownNetworkError(NetworkError):
    """Anything the classifiers could not place."""

    code = -1
    message = "Unknown error"

    def __init__(self, cause: BaseException | None = None, message: str | None = None) -> None:
        super().__init__(message or _with_cause(self.__class__.message, cause), cause=cause)


def _with_cause(message: str, cause: BaseException | None) -> str:
    return f"{message}: {cause}" if cause is not None else message


# ---------------------------------------------------------------------------
# Classifiers
# ---------------------------------------------------------------------------

_STATUS_DEFAULT_MESSAGES = {
    400: "Bad request parameters",
    422: "Request validation failed",
}


def _extract_message(body: bytes | str | None) -> str | None:
    """Pull an optional ``message`` string out of a JSON error body."""
    if not body:
        return None
    try:
        payload = json.loads(body)
    except (ValueError, TypeError):
        return None
    if isinstance(payload, dict) and isinstance(payload.get("message"), str):
        return payload["message"]
    return None


def classify_http_status(status_code: int, body: bytes | str | None = None) -> NetworkError:
    """Map a non-2xx HTTP status (plus optional JSON body) to a typed error."""
    message = _extract_message(body)

    if status_code == 401:
        return UnauthorizedError()
    if status_code == 403:
        return ForbiddenError()
    if status_code == 404:
        return NotFoundError()
    if status_code in _STATUS_DEFAULT_MESSAGES:
        return ServerError(status_code, message or _STATUS_DEFAULT_MESSAGES[status_code])
    if 500 <= status_code <= 599:
        return ServerError(status_code, message or "Internal server error")
    return ServerError(status_code, message)


def classify_transport_failure(exc: BaseException) -> NetworkError:
    """Map an exception raised while executing a request to a typed error."""
    if isinstance(exc, NetworkError):
        return exc
    # "Not connected" and "connection lost"
    if isinstance(
        exc,
        (httpx.ConnectError, httpx.ReadError, httpx.WriteError, httpx.RemoteProtocolError),
    ):
        return NetworkUnavailableError(cause=exc)
    if isinstance(exc, httpx.TimeoutException):
        return RequestTimeoutError(cause=exc)
    if isinstance(exc, (httpx.InvalidURL, httpx.UnsupportedProtocol)):
        return InvalidURLError(cause=exc)
    if isinstance(exc, httpx.TransportError):
        return TransportError(exc)
    return UnknownNetworkError(exc)


# ---------------------------------------------------------------------------
# Global error observer
# ---------------------------------------------------------------------------


class ErrorReporter:
    """Receives every classified failure exactly once.

    Parameters
    ----------
    session:
        Auth session cleared on ``UnauthorizedError``.
    notifications:
        Notification center that receives ``USER_NEEDS_REAUTH``.
    """

    def __init__(self, session: AuthSession, notifications: NotificationCenter) -> None:
        self._session = session
        self._notifications = notifications

    def report(self, error: NetworkError) -> None:
        logger.warning(
            "Network error: %s",
            error.message,
            extra={"error_code": error.code},
        )

        if isinstance(error, UnauthorizedError):
            self._session.clear()
            self._notifications.post(USER_NEEDS_REAUTH)
        elif isinstance(error, NetworkUnavailableError):
            # Offline handling hooks in here; no state changes today.
            pass
