"""Error values produced by the scheduling core.

These are plain data, not exceptions: the core returns them inside ``Err``
and the API layer decides how to present each kind.
"""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel

from scheduler.domain.models import Event


class ValidationError(BaseModel):
    """Bad input shape or values; the caller can fix the input and retry."""

    kind: Literal["validation"] = "validation"
    message: str
    field: str | None = None


class ConflictError(BaseModel):
    """The candidate interval overlaps a stored event."""

    kind: Literal["conflict"] = "conflict"
    message: str
    conflicting_event: Event


class NotFound(BaseModel):
    kind: Literal["not_found"] = "not_found"
    message: str
    event_id: str


class InvalidRange(BaseModel):
    kind: Literal["invalid_range"] = "invalid_range"
    message: str


class StoreError(BaseModel):
    """The persistence layer failed; surfaced with its original message."""

    kind: Literal["store"] = "store"
    message: str


ServiceError = Union[ValidationError, ConflictError, NotFound, InvalidRange, StoreError]
