"""Shared test fixtures and hypothesis strategies for the kitchen test suite."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest
from hypothesis import strategies as st

from kitchen.config.settings import KitchenSettings
from kitchen.network.api import KitchenAPI
from kitchen.network.errors import ErrorReporter
from kitchen.network.notifications import NotificationCenter
from kitchen.network.session import AuthSession, InMemoryKeyValueStore
from kitchen.network.transport import (
    ActivityObserver,
    HttpTransport,
    LoggingObserver,
    NetworkActivityIndicator,
)
from kitchen.storage.database import DatabaseManager

BASE_URL = "https://api.example.com"

Handler = Callable[[httpx.Request], httpx.Response]


def envelope(data: object = None, *, success: bool = True, **extra: object) -> dict:
    """Build an API envelope body."""
    body: dict = {"success": success, "data": data}
    body.update(extra)
    return body


def json_response(status_code: int, body: object) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(body).encode("utf-8"))


# ---------------------------------------------------------------------------
# Settings fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path: Path) -> KitchenSettings:
    """Test settings with everything under a temporary directory."""
    return KitchenSettings(
        api_base_url=BASE_URL,
        data_dir=tmp_path / "data",
        verbose_network_logging=True,
    )


# ---------------------------------------------------------------------------
# Network fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def session(store: InMemoryKeyValueStore) -> AuthSession:
    return AuthSession(store)


@pytest.fixture
def notifications() -> NotificationCenter:
    return NotificationCenter()


@pytest.fixture
def reporter(session: AuthSession, notifications: NotificationCenter) -> ErrorReporter:
    return ErrorReporter(session, notifications)


@pytest.fixture
def activity() -> NetworkActivityIndicator:
    return NetworkActivityIndicator()


@pytest.fixture
def make_transport(
    session: AuthSession, activity: NetworkActivityIndicator
) -> Callable[[Handler], HttpTransport]:
    """Factory: an HttpTransport whose server is ``handler``."""

    def _make(handler: Handler) -> HttpTransport:
        return HttpTransport(
            session,
            observers=[LoggingObserver(verbose=True), ActivityObserver(activity)],
            transport=httpx.MockTransport(handler),
        )

    return _make


@pytest.fixture
def make_api(
    make_transport: Callable[[Handler], HttpTransport],
    session: AuthSession,
    reporter: ErrorReporter,
) -> Callable[[Handler], KitchenAPI]:
    """Factory: a KitchenAPI backed by a mock server ``handler``."""

    def _make(handler: Handler) -> KitchenAPI:
        return KitchenAPI(make_transport(handler), session, reporter, base_url=BASE_URL)

    return _make


# ---------------------------------------------------------------------------
# Storage fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def db(tmp_path: Path) -> DatabaseManager:
    """A manager that has not been set up yet."""
    manager = DatabaseManager(tmp_path / "db", busy_timeout_seconds=3.0)
    yield manager
    manager.close()


@pytest.fixture
def ready_db(db: DatabaseManager) -> DatabaseManager:
    db.setup("test.sqlite3")
    return db


# ---------------------------------------------------------------------------
# Hypothesis strategies (reusable across property tests)
# ---------------------------------------------------------------------------

identifiers = st.text(
    alphabet="abcdefghijklmnopqrstuvwxyz0123456789-_", min_size=1, max_size=20
)
emails = st.from_regex(r"[a-z]{3,10}@[a-z]{3,8}\.(com|org|io)", fullmatch=True)
messages = st.text(
    alphabet="abcdefghijklmnopqrstuvwxyz ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789.,",
    min_size=1,
    max_size=60,
)
status_codes = st.integers(min_value=200, max_value=599)
error_status_codes = st.integers(min_value=400, max_value=599)

users = st.fixed_dictionaries(
    {"id": identifiers, "email": emails, "name": messages},
    optional={"avatar": st.none() | st.just("https://cdn.example.com/a.png")},
)
