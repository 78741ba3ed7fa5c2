"""Remote API response envelope.

Every endpoint of the remote ledger API answers with:
{
    "success": true,
    "message": "Donation created",
    "data": { ... }        // null on error
}

`unwrap_envelope` is the single place where a response body is turned into
either its `data` payload or a RemoteApiError. The `parse_*` helpers do the
same for the items inside `data`: a payload the core cannot read is a
RemoteApiError, never a bare ValueError or ValidationError.
"""

from datetime import datetime
from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from src.dl_common.datetime_utils import parse_timestamp
from src.dl_common.errors import RemoteApiError

M = TypeVar("M", bound=BaseModel)
E = TypeVar("E", bound=Enum)


class ApiEnvelope(BaseModel):
    success: bool = False
    message: str = ""
    data: Any = None


class Pagination(BaseModel):
    page: int = 1
    limit: int | None = None
    total: int | None = None
    totalPages: int | None = None  # noqa: N815


def parse_envelope(body: object) -> ApiEnvelope:
    if body is None or body == "":
        return ApiEnvelope(success=False, message="Empty response", data=None)
    try:
        return ApiEnvelope.model_validate(body)
    except ValidationError as exc:
        raise RemoteApiError(f"Malformed response: {exc.error_count()} invalid field(s)") from exc


def unwrap_envelope(
    body: object,
    status_code: int,
    fallback_message: str,
) -> Any:
    """Return envelope.data or raise RemoteApiError with the server message."""
    envelope = parse_envelope(body)
    if status_code >= 400 or not envelope.success:
        raise RemoteApiError(envelope.message or fallback_message, status_code=status_code)
    return envelope.data


def total_pages_of(pagination: dict[str, Any] | None, requested_page: int) -> int:
    """Declared total page count; a missing pagination block means 'this is the last page'."""
    if not pagination:
        return requested_page
    parsed = Pagination.model_validate(pagination)
    if parsed.totalPages is None:
        return requested_page
    return parsed.totalPages


def parse_payload(model: type[M], raw: object, what: str) -> M:
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise RemoteApiError(
            f"Malformed {what} in response: {exc.error_count()} invalid field(s)"
        ) from exc


def parse_wire_enum(enum_cls: type[E], raw: str, what: str) -> E:
    """Enum lookup for a wire value, stripped and lower-cased first."""
    try:
        return enum_cls(raw.strip().lower())
    except ValueError as exc:
        raise RemoteApiError(f"Unknown {what}: {raw!r}") from exc


def parse_wire_timestamp(raw: str | None) -> datetime | None:
    try:
        return parse_timestamp(raw)
    except ValueError as exc:
        raise RemoteApiError(f"Malformed timestamp in response: {raw!r}") from exc
