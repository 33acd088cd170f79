"""Pydantic payload models returned by the kitchen API.

Date fields travel as ``yyyy-MM-dd'T'HH:mm:ss.SSSSSS'Z'`` in UTC.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, PlainSerializer

API_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def parse_api_datetime(value: Any) -> Any:
    """Parse the API's fixed date format, leaving anything else to pydantic."""
    if isinstance(value, str):
        try:
            return datetime.strptime(value, API_DATE_FORMAT).replace(tzinfo=timezone.utc)
        except ValueError:
            return value
    return value


def format_api_datetime(value: datetime) -> str:
    """Format a datetime in the API's wire format. Naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(API_DATE_FORMAT)


ApiDateTime = Annotated[
    datetime,
    BeforeValidator(parse_api_datetime),
    PlainSerializer(format_api_datetime, return_type=str, when_used="json"),
]


class User(BaseModel):
    id: str
    email: str
    name: str
    avatar: str | None = None
    created_at: ApiDateTime | None = None
    updated_at: ApiDateTime | None = None


class LoginResponse(BaseModel):
    """Returned by login and register."""

    token: str
    user: User
    refresh_token: str | None = None
    expires_in: int | None = None


class UploadResponse(BaseModel):
    url: str
    filename: str
    size: int
    mime_type: str | None = None


class DataItem(BaseModel):
    id: str
    title: str
    description: str | None = None
    created_at: ApiDateTime
    updated_at: ApiDateTime | None = None
    status: str | None = None
