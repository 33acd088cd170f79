"""Pydantic request body models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RegisterRequest(LoginRequest):
    name: str = Field(..., min_length=1)


class UpdateUserRequest(BaseModel):
    """Partial profile update; ``None`` fields are left untouched server-side."""

    name: str | None = None
    avatar: str | None = None

    def to_payload(self) -> dict:
        """Untyped map handed to the request catalog."""
        return self.model_dump(exclude_none=True)
