"""API facade: every catalog operation in three completion styles.

The coroutine methods are the canonical form; each one runs the request
through ``_perform`` exactly once. ``callback`` and ``stream`` adapt any of
them to a completion callback or a ``Single`` stream:

    user = await api.get_user_info("42")
    api.callback(api.get_user_info, "42", completion=on_result)
    api.stream(api.get_user_info, "42").subscribe(on_user, on_error)

Login and register persist the returned tokens into the session before
control returns to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from pathlib import Path
from typing import Any, TypeVar

from PIL import Image
from pydantic import ValidationError

from kitchen.models.requests import UpdateUserRequest
from kitchen.models.responses import EmptyResponse, PaginatedResponse
from kitchen.models.schemas import DataItem, LoginResponse, UploadResponse, User
from kitchen.network.catalog import (
    DeleteData,
    Endpoint,
    FetchDataDetail,
    FetchDataList,
    GetUserInfo,
    Login,
    Register,
    UpdateUserInfo,
    UploadData,
    UploadFile,
    UploadImage,
    build_request,
)
from kitchen.network.completion import Result, Single, run_with_callback
from kitchen.network.errors import (
    EncodingError,
    ErrorReporter,
    NetworkError,
    UnknownNetworkError,
)
from kitchen.network.images import DEFAULT_COMPRESSION_QUALITY, encode_jpeg, image_file_name
from kitchen.network.session import AuthSession
from kitchen.network.transport import HttpTransport

logger = logging.getLogger(__name__)

T = TypeVar("T")


class KitchenAPI:
    """Typed client for the kitchen backend.

    Parameters
    ----------
    transport:
        Shared HTTP transport.
    session:
        Auth session written on login/register and cleared on logout.
    reporter:
        Global observer that sees every classified failure once.
    base_url:
        API root, e.g. ``https://api.example.com``.
    image_quality:
        Default JPEG quality for ``upload_image``.
    """

    def __init__(
        self,
        transport: HttpTransport,
        session: AuthSession,
        reporter: ErrorReporter,
        base_url: str,
        image_quality: float = DEFAULT_COMPRESSION_QUALITY,
    ) -> None:
        self._transport = transport
        self._session = session
        self._reporter = reporter
        self._base_url = base_url
        self._image_quality = image_quality

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _fail(self, error: NetworkError) -> NetworkError:
        self._reporter.report(error)
        return error

    def _store_tokens(self, response: LoginResponse) -> None:
        try:
            self._session.save(response.token, response.refresh_token)
        except Exception as exc:
            raise self._fail(UnknownNetworkError(exc)) from exc

    async def _perform(self, endpoint: Endpoint, model: type[T] | None = None) -> Any:
        """Build, send and decode one request; every failure is one ``NetworkError``."""
        try:
            descriptor = build_request(endpoint, self._base_url)
        except (ValidationError, TypeError, ValueError) as exc:
            raise self._fail(EncodingError(exc)) from exc

        try:
            if model is None:
                return await self._transport.send_empty(descriptor)
            return await self._transport.send(descriptor, model)
        except NetworkError as error:
            raise self._fail(error)
        except Exception as exc:
            raise self._fail(UnknownNetworkError(exc)) from exc

    # ------------------------------------------------------------------
    # Completion-style adapters
    # ------------------------------------------------------------------

    def callback(
        self,
        method: Callable[..., Awaitable[T]],
        *args: Any,
        completion: Callable[[Result[T]], None],
        **kwargs: Any,
    ) -> asyncio.Task:
        """Run ``method(*args, **kwargs)`` and pass its ``Result`` to ``completion`` once."""
        return run_with_callback(method(*args, **kwargs), completion)

    def stream(self, method: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> Single[T]:
        """Wrap ``method(*args, **kwargs)`` as a single-value stream."""
        return Single(lambda: method(*args, **kwargs))

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    async def login(self, email: str, password: str) -> LoginResponse:
        response = await self._perform(Login(email, password), LoginResponse)
        self._store_tokens(response)
        logger.info("Logged in as user %s", response.user.id)
        return response

    async def register(self, email: str, password: str, name: str) -> LoginResponse:
        response = await self._perform(Register(email, password, name), LoginResponse)
        self._store_tokens(response)
        logger.info("Registered user %s", response.user.id)
        return response

    async def logout(self) -> EmptyResponse:
        """Clear local credentials. No server call is made."""
        try:
            self._session.clear()
        except Exception as exc:
            raise self._fail(UnknownNetworkError(exc)) from exc
        return EmptyResponse()

    @property
    def auth_token(self) -> str | None:
        return self._session.access_token

    @property
    def refresh_token(self) -> str | None:
        return self._session.refresh_token

    def is_logged_in(self) -> bool:
        return self._session.is_logged_in

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def get_user_info(self, user_id: str) -> User:
        return await self._perform(GetUserInfo(user_id), User)

    async def update_user_info(self, user_id: str, request: UpdateUserRequest) -> User:
        return await self._perform(UpdateUserInfo(user_id, request.to_payload()), User)

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------

    async def fetch_data_list(self, page: int = 1, limit: int = 20) -> PaginatedResponse[DataItem]:
        return await self._perform(FetchDataList(page, limit), PaginatedResponse[DataItem])

    async def fetch_data_detail(self, data_id: str) -> DataItem:
        return await self._perform(FetchDataDetail(data_id), DataItem)

    async def upload_data(self, data: Mapping[str, Any]) -> DataItem:
        return await self._perform(UploadData(dict(data)), DataItem)

    async def delete_data(self, data_id: str) -> EmptyResponse:
        return await self._perform(DeleteData(data_id))

    # ------------------------------------------------------------------
    # Uploads
    # ------------------------------------------------------------------

    async def upload_image(
        self,
        image: Image.Image | bytes,
        quality: float | None = None,
    ) -> UploadResponse:
        """Re-encode ``image`` as JPEG and upload it.

        Encoding failures raise ``EncodingError`` before any network I/O.
        """
        try:
            image_data = encode_jpeg(image, self._image_quality if quality is None else quality)
        except EncodingError as error:
            raise self._fail(error)
        return await self._perform(UploadImage(image_data, image_file_name()), UploadResponse)

    async def upload_file(self, file_data: bytes, file_name: str) -> UploadResponse:
        return await self._perform(UploadFile(file_data, file_name), UploadResponse)

    async def upload_file_from_path(self, path: str | Path) -> UploadResponse:
        """Read ``path`` and upload it under its own file name."""
        path = Path(path)
        try:
            file_data = await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            raise self._fail(EncodingError(exc)) from exc
        return await self.upload_file(file_data, path.name)
