"""Generic API response envelope models.

Responses from the kitchen API are usually wrapped in this envelope:
{ success: bool, message: str | None, code: int | None, data: T | None }
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """JSON envelope for all API responses."""

    success: bool
    message: str | None = None
    code: int | None = None
    data: T | None = None


class PaginatedResponse(BaseModel, Generic[T]):
    """One page of a list endpoint."""

    items: list[T]
    total: int
    page: int
    limit: int
    has_more: bool | None = None


class EmptyResponse(BaseModel):
    """Result of calls where only the success status matters."""

    model_config = ConfigDict(extra="ignore")
