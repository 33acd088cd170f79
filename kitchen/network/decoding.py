"""Response body decoding.

Bodies are first read as an ``ApiResponse`` envelope. When that fails the
target model is decoded straight from the raw body, which tolerates
endpoints that return bare payloads.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from kitchen.models.responses import ApiResponse, EmptyResponse
from kitchen.network.errors import (
    DecodingError,
    NoDataError,
    ServerError,
    classify_http_status,
)

T = TypeVar("T")


@lru_cache(maxsize=128)
def _adapter(model: Any) -> TypeAdapter:
    return TypeAdapter(model)


def decode_response(raw: bytes | str, status_code: int, model: type[T]) -> T:
    """Decode ``raw`` into ``model``.

    Raises
    ------
    NoDataError
        If the body is empty.
    ServerError
        If the envelope reports ``success=false`` or carries no data. The
        envelope's code wins over ``status_code``.
    DecodingError
        If neither the envelope nor the bare model matches the body.
    """
    if not raw:
        raise NoDataError()

    try:
        envelope = _adapter(ApiResponse[model]).validate_json(raw)
    except ValidationError:
        try:
            return _adapter(model).validate_json(raw)
        except ValidationError as exc:
            raise DecodingError(exc) from exc

    if envelope.success and envelope.data is not None:
        return envelope.data

    code = envelope.code if envelope.code is not None else status_code
    raise ServerError(code, envelope.message or "Request failed")


def decode_empty(status_code: int, raw: bytes | str | None = None) -> EmptyResponse:
    """Status-only decoding for calls whose body does not matter."""
    if 200 <= status_code <= 299:
        return EmptyResponse()
    raise classify_http_status(status_code, raw)
