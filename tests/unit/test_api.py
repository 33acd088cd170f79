"""Unit tests for KitchenAPI: every operation and all three completion styles."""

from __future__ import annotations

import asyncio
import io
import json
import math
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from PIL import Image

from kitchen.models.requests import UpdateUserRequest
from kitchen.models.responses import EmptyResponse
from kitchen.network.api import KitchenAPI
from kitchen.network.completion import Result
from kitchen.network.errors import (
    DecodingError,
    EncodingError,
    ErrorReporter,
    NetworkError,
    NetworkUnavailableError,
    NotFoundError,
    ServerError,
    UnauthorizedError,
    UnknownNetworkError,
)
from kitchen.network.notifications import USER_NEEDS_REAUTH, NotificationCenter
from kitchen.network.session import AuthSession, InMemoryKeyValueStore
from kitchen.network.transport import HttpTransport
from tests.conftest import BASE_URL, envelope, json_response

USER = {"id": "7", "email": "chef@example.com", "name": "Chef"}
LOGIN = {"token": "access-1", "refresh_token": "refresh-1", "user": USER, "expires_in": 3600}
ITEM = {"id": "d1", "title": "Soup", "created_at": "2024-03-01T12:30:45.000000Z"}
UPLOAD = {"url": "https://cdn.example.com/x.jpg", "filename": "x.jpg", "size": 10}


def _png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", (4, 4), (255, 0, 0, 128)).save(buffer, format="PNG")
    return buffer.getvalue()


class Router:
    """Mock server: maps ``(method, path)`` to a response and records requests."""

    def __init__(self, routes: dict[tuple[str, str], httpx.Response]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.routes.get((request.method, request.url.path))
        if response is None:
            return json_response(404, {"message": "no route"})
        return response


class FailingStore(InMemoryKeyValueStore):
    """Token store whose writes fail, like a full disk."""

    def set(self, key: str, value: str) -> None:
        raise OSError("disk full")


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class TestAuth:
    @pytest.mark.asyncio
    async def test_login_stores_tokens_and_later_calls_send_bearer(
        self, make_api: Callable[..., KitchenAPI], session: AuthSession
    ) -> None:
        router = Router(
            {
                ("POST", "/auth/login"): json_response(200, envelope(LOGIN)),
                ("GET", "/users/7"): json_response(200, envelope(USER)),
            }
        )
        api = make_api(router)

        response = await api.login("chef@example.com", "pw")
        assert response.token == "access-1"
        assert session.access_token == "access-1"
        assert session.refresh_token == "refresh-1"
        assert api.auth_token == "access-1"
        assert api.refresh_token == "refresh-1"
        assert api.is_logged_in()

        await api.get_user_info("7")
        assert "Authorization" not in router.requests[0].headers
        assert router.requests[1].headers["Authorization"] == "Bearer access-1"

    @pytest.mark.asyncio
    async def test_login_without_refresh_token(self, make_api, session: AuthSession) -> None:
        body = {"token": "access-2", "user": USER}
        api = make_api(Router({("POST", "/auth/login"): json_response(200, envelope(body))}))

        await api.login("chef@example.com", "pw")

        assert session.access_token == "access-2"
        assert session.refresh_token is None

    @pytest.mark.asyncio
    async def test_register(self, make_api, session: AuthSession) -> None:
        router = Router({("POST", "/auth/register"): json_response(201, envelope(LOGIN))})
        api = make_api(router)

        response = await api.register("chef@example.com", "pw", "Chef")

        assert response.user.name == "Chef"
        assert session.access_token == "access-1"
        assert json.loads(router.requests[0].content) == {
            "email": "chef@example.com",
            "password": "pw",
            "name": "Chef",
        }

    @pytest.mark.asyncio
    async def test_failed_login_stores_nothing(self, make_api, session: AuthSession) -> None:
        api = make_api(Router({("POST", "/auth/login"): json_response(400, {"message": "bad"})}))

        with pytest.raises(ServerError) as exc_info:
            await api.login("chef@example.com", "pw")

        assert exc_info.value.code == 400
        assert session.access_token is None

    @pytest.mark.asyncio
    async def test_token_store_failure_is_classified(self) -> None:
        session = AuthSession(FailingStore())
        reporter = ErrorReporter(session, NotificationCenter())
        router = Router({("POST", "/auth/login"): json_response(200, envelope(LOGIN))})
        transport = HttpTransport(session, transport=httpx.MockTransport(router))
        api = KitchenAPI(transport, session, reporter, base_url=BASE_URL)

        async with transport:
            with patch.object(reporter, "report") as report:
                with pytest.raises(UnknownNetworkError) as exc_info:
                    await api.login("chef@example.com", "pw")

        assert isinstance(exc_info.value.cause, OSError)
        assert session.access_token is None
        report.assert_called_once()

    @pytest.mark.asyncio
    async def test_empty_password_is_encoding_error(self, make_api) -> None:
        router = Router({})
        api = make_api(router)

        with pytest.raises(EncodingError):
            await api.login("chef@example.com", "")
        assert router.requests == []

    @pytest.mark.asyncio
    async def test_logout_is_local(self, make_api, session: AuthSession) -> None:
        router = Router({})
        api = make_api(router)
        session.save("a", "r")

        assert await api.logout() == EmptyResponse()
        assert not api.is_logged_in()
        assert session.refresh_token is None
        assert router.requests == []

    @pytest.mark.asyncio
    async def test_401_clears_tokens_and_posts_reauth_once(
        self,
        make_api,
        session: AuthSession,
        notifications: NotificationCenter,
    ) -> None:
        session.save("stale", "stale-refresh")
        events: list[str] = []
        notifications.add_observer(USER_NEEDS_REAUTH, lambda name, _: events.append(name))
        api = make_api(Router({("GET", "/users/7"): json_response(401, {})}))

        with pytest.raises(UnauthorizedError):
            await api.get_user_info("7")

        assert session.access_token is None
        assert session.refresh_token is None
        assert events == [USER_NEEDS_REAUTH]


# ---------------------------------------------------------------------------
# Users and data
# ---------------------------------------------------------------------------


class TestUsersAndData:
    @pytest.mark.asyncio
    async def test_get_user_info(self, make_api) -> None:
        api = make_api(Router({("GET", "/users/7"): json_response(200, envelope(USER))}))
        user = await api.get_user_info("7")
        assert user.email == "chef@example.com"

    @pytest.mark.asyncio
    async def test_update_user_info_sends_only_set_fields(self, make_api) -> None:
        router = Router({("PUT", "/users/7"): json_response(200, envelope({**USER, "name": "Bo"}))})
        api = make_api(router)

        user = await api.update_user_info("7", UpdateUserRequest(name="Bo"))

        assert user.name == "Bo"
        assert json.loads(router.requests[0].content) == {"name": "Bo"}

    @pytest.mark.asyncio
    async def test_fetch_data_list_empty_page(self, make_api) -> None:
        body = {"success": True, "data": {"items": [], "total": 0, "page": 1, "limit": 20}}
        router = Router({("GET", "/data"): json_response(200, body)})
        api = make_api(router)

        page = await api.fetch_data_list(1, 20)

        assert page.items == []
        assert page.total == 0
        assert router.requests[0].url.params["page"] == "1"
        assert router.requests[0].url.params["limit"] == "20"

    @pytest.mark.asyncio
    async def test_fetch_data_list_items(self, make_api) -> None:
        data = {"items": [ITEM], "total": 1, "page": 1, "limit": 20, "has_more": False}
        api = make_api(Router({("GET", "/data"): json_response(200, envelope(data))}))

        page = await api.fetch_data_list()

        assert [item.title for item in page.items] == ["Soup"]
        assert page.has_more is False

    @pytest.mark.asyncio
    async def test_fetch_data_detail_bare_payload(self, make_api) -> None:
        api = make_api(Router({("GET", "/data/d1"): json_response(200, ITEM)}))
        item = await api.fetch_data_detail("d1")
        assert item.id == "d1"

    @pytest.mark.asyncio
    async def test_upload_data(self, make_api) -> None:
        router = Router({("POST", "/data"): json_response(201, envelope(ITEM))})
        api = make_api(router)

        item = await api.upload_data({"title": "Soup", "tags": ["hot"]})

        assert item.title == "Soup"
        assert json.loads(router.requests[0].content) == {"title": "Soup", "tags": ["hot"]}

    @pytest.mark.asyncio
    async def test_upload_data_with_unencodable_value(self, make_api) -> None:
        router = Router({("POST", "/data"): json_response(201, envelope(ITEM))})
        api = make_api(router)

        with pytest.raises(EncodingError):
            await api.upload_data({"title": "Soup", "when": datetime(2024, 1, 1)})
        with pytest.raises(EncodingError):
            await api.upload_data({"title": "Soup", "weight": math.nan})
        assert router.requests == []

    @pytest.mark.asyncio
    async def test_delete_data(self, make_api) -> None:
        api = make_api(Router({("DELETE", "/data/d1"): httpx.Response(204)}))
        assert await api.delete_data("d1") == EmptyResponse()

    @pytest.mark.asyncio
    async def test_delete_missing(self, make_api) -> None:
        api = make_api(Router({}))
        with pytest.raises(NotFoundError):
            await api.delete_data("nope")

    @pytest.mark.asyncio
    async def test_envelope_failure_on_200(self, make_api) -> None:
        body = envelope(None, success=False, message="Quota exceeded")
        api = make_api(Router({("GET", "/users/7"): json_response(200, body)}))

        with pytest.raises(ServerError) as exc_info:
            await api.get_user_info("7")

        assert exc_info.value.code == 200
        assert exc_info.value.server_message == "Quota exceeded"

    @pytest.mark.asyncio
    async def test_garbage_body_is_decoding_error(self, make_api) -> None:
        api = make_api(Router({("GET", "/users/7"): httpx.Response(200, content=b"<html>")}))
        with pytest.raises(DecodingError):
            await api.get_user_info("7")

    @pytest.mark.asyncio
    async def test_offline(self, make_api, session: AuthSession) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("offline", request=request)

        session.save("keep")
        api = make_api(handler)

        with pytest.raises(NetworkUnavailableError):
            await api.get_user_info("7")
        assert session.access_token == "keep"


# ---------------------------------------------------------------------------
# Uploads
# ---------------------------------------------------------------------------


class TestUploads:
    @pytest.mark.asyncio
    async def test_upload_image_reencodes_as_jpeg(self, make_api) -> None:
        router = Router({("POST", "/upload/image"): json_response(200, envelope(UPLOAD))})
        api = make_api(router)

        response = await api.upload_image(_png_bytes())

        assert response.filename == "x.jpg"
        body = router.requests[0].content
        assert b'name="image"' in body
        assert b"Content-Type: image/jpeg" in body
        assert b"\xff\xd8" in body

    @pytest.mark.asyncio
    async def test_upload_pillow_image(self, make_api) -> None:
        router = Router({("POST", "/upload/image"): json_response(200, envelope(UPLOAD))})
        api = make_api(router)

        await api.upload_image(Image.new("RGB", (2, 2)), quality=0.5)

        assert len(router.requests) == 1

    @pytest.mark.asyncio
    async def test_image_encoding_failure_makes_no_request(self, make_api) -> None:
        router = Router({})
        api = make_api(router)

        with pytest.raises(EncodingError):
            await api.upload_image(b"definitely not an image")

        assert router.requests == []

    @pytest.mark.asyncio
    async def test_upload_file(self, make_api) -> None:
        router = Router({("POST", "/upload/file"): json_response(200, envelope(UPLOAD))})
        api = make_api(router)

        await api.upload_file(b"%PDF-1.7", "menu.pdf")

        body = router.requests[0].content
        assert b'name="file"' in body
        assert b'filename="menu.pdf"' in body
        assert b"%PDF-1.7" in body

    @pytest.mark.asyncio
    async def test_upload_file_from_path(self, make_api, tmp_path: Path) -> None:
        path = tmp_path / "notes.txt"
        path.write_bytes(b"salt, pepper")
        router = Router({("POST", "/upload/file"): json_response(200, envelope(UPLOAD))})
        api = make_api(router)

        await api.upload_file_from_path(path)

        assert b'filename="notes.txt"' in router.requests[0].content

    @pytest.mark.asyncio
    async def test_upload_missing_path(self, make_api, tmp_path: Path) -> None:
        router = Router({})
        api = make_api(router)

        with pytest.raises(EncodingError):
            await api.upload_file_from_path(tmp_path / "missing.bin")
        assert router.requests == []


# ---------------------------------------------------------------------------
# Completion styles
# ---------------------------------------------------------------------------


class TestCallbackStyle:
    @pytest.mark.asyncio
    async def test_success_fires_once(self, make_api) -> None:
        api = make_api(Router({("GET", "/users/7"): json_response(200, envelope(USER))}))
        results: list[Result] = []

        task = api.callback(api.get_user_info, "7", completion=results.append)
        await task
        await asyncio.sleep(0)

        assert len(results) == 1
        assert results[0].is_success
        assert results[0].unwrap().id == "7"

    @pytest.mark.asyncio
    async def test_failure_fires_once(self, make_api) -> None:
        api = make_api(Router({}))
        results: list[Result] = []

        task = api.callback(api.fetch_data_detail, "missing", completion=results.append)
        with pytest.raises(NotFoundError):
            await task
        await asyncio.sleep(0)

        assert len(results) == 1
        assert isinstance(results[0].error, NotFoundError)


class TestStreamStyle:
    @pytest.mark.asyncio
    async def test_value_then_complete(self, make_api) -> None:
        api = make_api(Router({("GET", "/users/7"): json_response(200, envelope(USER))}))
        events: list[object] = []
        done = asyncio.Event()

        api.stream(api.get_user_info, "7").subscribe(
            on_value=events.append,
            on_error=events.append,
            on_complete=lambda: (events.append("complete"), done.set()),
        )
        await asyncio.wait_for(done.wait(), timeout=1)

        assert len(events) == 2
        assert events[0].id == "7"
        assert events[1] == "complete"

    @pytest.mark.asyncio
    async def test_error(self, make_api) -> None:
        api = make_api(Router({}))
        errors: list[NetworkError] = []
        done = asyncio.Event()

        def on_error(error: NetworkError) -> None:
            errors.append(error)
            done.set()

        api.stream(api.get_user_info, "7").subscribe(on_value=lambda _: None, on_error=on_error)
        await asyncio.wait_for(done.wait(), timeout=1)

        assert [type(e) for e in errors] == [NotFoundError]

    @pytest.mark.asyncio
    async def test_cancel_suppresses_delivery(self, make_api) -> None:
        release = asyncio.Event()
        served = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            await release.wait()
            served.set()
            return json_response(200, envelope(USER))

        api = make_api(handler)
        events: list[object] = []

        subscription = api.stream(api.get_user_info, "7").subscribe(
            on_value=events.append,
            on_error=events.append,
            on_complete=lambda: events.append("complete"),
        )
        subscription.cancel()
        release.set()
        await asyncio.wait_for(served.wait(), timeout=1)
        await asyncio.sleep(0.01)

        assert subscription.is_cancelled
        assert events == []

    @pytest.mark.asyncio
    async def test_awaitable(self, make_api) -> None:
        api = make_api(Router({("GET", "/users/7"): json_response(200, envelope(USER))}))
        user = await api.stream(api.get_user_info, "7")
        assert user.name == "Chef"


class TestUnexpectedFailures:
    @pytest.mark.asyncio
    async def test_unclassified_exception_becomes_unknown(self, make_api) -> None:
        api = make_api(Router({}))
        with patch.object(
            HttpTransport, "send", new_callable=AsyncMock, side_effect=RuntimeError("bug")
        ):
            with pytest.raises(UnknownNetworkError) as exc_info:
                await api.get_user_info("7")
        assert isinstance(exc_info.value.cause, RuntimeError)

    @pytest.mark.asyncio
    async def test_every_failure_is_reported_once(self, make_api, reporter) -> None:
        api = make_api(Router({}))
        with patch.object(reporter, "report") as report:
            with pytest.raises(NotFoundError):
                await api.fetch_data_detail("missing")
        report.assert_called_once()
        assert isinstance(report.call_args.args[0], NotFoundError)
