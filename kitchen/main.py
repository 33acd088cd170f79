"""Application wiring with startup/shutdown management.

Startup: load settings, configure logging, open the local database and run
pending migrations.
Shutdown: close the HTTP client, dispose the database engine.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from kitchen.config.settings import KitchenSettings
from kitchen.logging_config import configure_logging
from kitchen.network.api import KitchenAPI
from kitchen.network.errors import ErrorReporter
from kitchen.network.notifications import NotificationCenter
from kitchen.network.session import AuthSession, JsonFileStore, KeyValueStore
from kitchen.network.stubs import stub_transport
from kitchen.network.transport import (
    ActivityObserver,
    HttpTransport,
    LoggingObserver,
    NetworkActivityIndicator,
)
from kitchen.storage.database import DatabaseManager
from kitchen.storage.recipes import RecipeRepository

logger = logging.getLogger(__name__)


@dataclass
class KitchenApp:
    """Every long-lived component, created once per process."""

    settings: KitchenSettings
    session: AuthSession
    notifications: NotificationCenter
    activity: NetworkActivityIndicator
    transport: HttpTransport
    api: KitchenAPI
    database: DatabaseManager
    recipes: RecipeRepository

    def startup(self) -> None:
        logger.info("Starting kitchen client (api=%s)", self.settings.api_base_url)
        self.database.setup(self.settings.database_file_name)
        logger.info("Kitchen client started")

    async def shutdown(self) -> None:
        logger.info("Shutting down kitchen client")
        await self.transport.aclose()
        self.database.close()
        logger.info("Kitchen client shut down")


def create_app(
    settings: KitchenSettings | None = None,
    *,
    store: KeyValueStore | None = None,
    http_transport: httpx.AsyncBaseTransport | None = None,
    configure_logs: bool = True,
) -> KitchenApp:
    """Build and wire all components from ``settings``.

    ``store`` overrides the JSON settings file used for auth tokens and
    ``http_transport`` the underlying httpx transport (tests pass
    ``httpx.MockTransport``). Without one, ``use_sample_responses`` selects
    the in-process sample server.
    """
    settings = settings or KitchenSettings()
    if http_transport is None and settings.use_sample_responses:
        http_transport = stub_transport()

    if configure_logs:
        configure_logging(settings.log_level)

    session = AuthSession(store or JsonFileStore(settings.data_dir / settings.settings_file_name))
    notifications = NotificationCenter()
    reporter = ErrorReporter(session, notifications)
    activity = NetworkActivityIndicator()

    transport = HttpTransport(
        session,
        timeout_seconds=settings.request_timeout_seconds,
        retry_count=settings.retry_count,
        observers=[
            LoggingObserver(verbose=settings.verbose_network_logging),
            ActivityObserver(activity),
        ],
        transport=http_transport,
    )

    api = KitchenAPI(
        transport,
        session,
        reporter,
        base_url=settings.api_base_url,
        image_quality=settings.image_compression_quality,
    )

    database = DatabaseManager(
        settings.data_dir,
        file_name=settings.database_file_name,
        busy_timeout_seconds=settings.db_busy_timeout_seconds,
        echo=settings.db_echo,
    )

    return KitchenApp(
        settings=settings,
        session=session,
        notifications=notifications,
        activity=activity,
        transport=transport,
        api=api,
        database=database,
        recipes=RecipeRepository(database),
    )
