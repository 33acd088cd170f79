"""Request catalog: every API endpoint and how it maps to an HTTP request.

Each endpoint is a frozen dataclass carrying its typed arguments. The
``Endpoint`` union is closed; ``build_request`` is a pure function from an
endpoint to an immutable ``RequestDescriptor``.

| endpoint        | method | body                  |
|-----------------|--------|-----------------------|
| Login/Register  | POST   | JSON                  |
| GetUserInfo     | GET    | none                  |
| UpdateUserInfo  | PUT    | JSON                  |
| FetchDataList   | GET    | query string          |
| FetchDataDetail | GET    | none                  |
| UploadData      | POST   | JSON                  |
| DeleteData      | DELETE | none                  |
| UploadImage     | POST   | multipart (``image``) |
| UploadFile      | POST   | multipart (``file``)  |
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Union
from urllib.parse import quote

from kitchen.models.requests import LoginRequest, RegisterRequest

JSON_CONTENT_TYPE = "application/json"
MULTIPART_CONTENT_TYPE = "multipart/form-data"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


@dataclass(frozen=True)
class MultipartPart:
    """One named file part of a multipart body."""

    name: str
    file_name: str
    content: bytes = field(repr=False)
    mime_type: str | None = None


@dataclass(frozen=True)
class RequestDescriptor:
    """Fully resolved description of one outbound HTTP call."""

    base_url: str
    path: str
    method: HttpMethod
    json: Mapping[str, Any] | None = None
    params: Mapping[str, Any] | None = None
    parts: tuple[MultipartPart, ...] = ()
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze the mappings so a dispatched descriptor cannot change.
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))
        if self.json is not None:
            object.__setattr__(self, "json", MappingProxyType(dict(self.json)))
        if self.params is not None:
            object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    @property
    def url(self) -> str:
        return self.base_url.rstrip("/") + self.path

    @property
    def is_multipart(self) -> bool:
        return bool(self.parts)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Login:
    email: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class Register:
    email: str
    password: str = field(repr=False)
    name: str


@dataclass(frozen=True)
class GetUserInfo:
    user_id: str


@dataclass(frozen=True)
class UpdateUserInfo:
    user_id: str
    user_data: Mapping[str, Any]


@dataclass(frozen=True)
class FetchDataList:
    page: int = 1
    limit: int = 20


@dataclass(frozen=True)
class FetchDataDetail:
    data_id: str


@dataclass(frozen=True)
class UploadData:
    data: Mapping[str, Any]


@dataclass(frozen=True)
class DeleteData:
    data_id: str


@dataclass(frozen=True)
class UploadImage:
    image_data: bytes = field(repr=False)
    file_name: str = "image.jpg"


@dataclass(frozen=True)
class UploadFile:
    file_data: bytes = field(repr=False)
    file_name: str


Endpoint = Union[
    Login,
    Register,
    GetUserInfo,
    UpdateUserInfo,
    FetchDataList,
    FetchDataDetail,
    UploadData,
    DeleteData,
    UploadImage,
    UploadFile,
]


def _segment(value: str) -> str:
    """URL-component encode one path parameter."""
    return quote(str(value), safe="")


def _json_body(data: Mapping[str, Any]) -> dict[str, Any]:
    """Copy of ``data``, checked to be JSON encodable before any I/O.

    Raises ``TypeError`` or ``ValueError`` for values JSON cannot carry,
    such as datetimes or NaN.
    """
    body = dict(data)
    json.dumps(body, allow_nan=False)
    return body


def build_request(endpoint: Endpoint, base_url: str) -> RequestDescriptor:
    """Resolve ``endpoint`` into a request descriptor against ``base_url``.

    Raises
    ------
    pydantic.ValidationError
        If login/register credentials are empty.
    TypeError, ValueError
        For objects that are not catalog endpoints, or JSON bodies that
        cannot be encoded.
    """
    headers = {"Content-Type": JSON_CONTENT_TYPE}

    if isinstance(endpoint, Login):
        body = LoginRequest(email=endpoint.email, password=endpoint.password).model_dump()
        return RequestDescriptor(base_url, "/auth/login", HttpMethod.POST, json=body, headers=headers)

    if isinstance(endpoint, Register):
        body = RegisterRequest(
            email=endpoint.email, password=endpoint.password, name=endpoint.name
        ).model_dump()
        return RequestDescriptor(base_url, "/auth/register", HttpMethod.POST, json=body, headers=headers)

    if isinstance(endpoint, GetUserInfo):
        return RequestDescriptor(
            base_url, f"/users/{_segment(endpoint.user_id)}", HttpMethod.GET, headers=headers
        )

    if isinstance(endpoint, UpdateUserInfo):
        return RequestDescriptor(
            base_url,
            f"/users/{_segment(endpoint.user_id)}",
            HttpMethod.PUT,
            json=_json_body(endpoint.user_data),
            headers=headers,
        )

    if isinstance(endpoint, FetchDataList):
        return RequestDescriptor(
            base_url,
            "/data",
            HttpMethod.GET,
            params={"page": endpoint.page, "limit": endpoint.limit},
            headers=headers,
        )

    if isinstance(endpoint, FetchDataDetail):
        return RequestDescriptor(
            base_url, f"/data/{_segment(endpoint.data_id)}", HttpMethod.GET, headers=headers
        )

    if isinstance(endpoint, UploadData):
        return RequestDescriptor(
            base_url, "/data", HttpMethod.POST, json=_json_body(endpoint.data), headers=headers
        )

    if isinstance(endpoint, DeleteData):
        return RequestDescriptor(
            base_url, f"/data/{_segment(endpoint.data_id)}", HttpMethod.DELETE, headers=headers
        )

    multipart_headers = {"Content-Type": MULTIPART_CONTENT_TYPE}

    if isinstance(endpoint, UploadImage):
        part = MultipartPart("image", endpoint.file_name, endpoint.image_data, "image/jpeg")
        return RequestDescriptor(
            base_url, "/upload/image", HttpMethod.POST, parts=(part,), headers=multipart_headers
        )

    if isinstance(endpoint, UploadFile):
        part = MultipartPart("file", endpoint.file_name, endpoint.file_data)
        return RequestDescriptor(
            base_url, "/upload/file", HttpMethod.POST, parts=(part,), headers=multipart_headers
        )

    raise TypeError(f"Unknown endpoint: {endpoint!r}")
