"""Public models for the kitchen client."""

from kitchen.models.requests import LoginRequest, RegisterRequest, UpdateUserRequest
from kitchen.models.responses import ApiResponse, EmptyResponse, PaginatedResponse
from kitchen.models.schemas import (
    API_DATE_FORMAT,
    DataItem,
    LoginResponse,
    UploadResponse,
    User,
    format_api_datetime,
    parse_api_datetime,
)

__all__ = [
    "API_DATE_FORMAT",
    "ApiResponse",
    "DataItem",
    "EmptyResponse",
    "LoginRequest",
    "LoginResponse",
    "PaginatedResponse",
    "RegisterRequest",
    "UpdateUserRequest",
    "UploadResponse",
    "User",
    "format_api_datetime",
    "parse_api_datetime",
]
