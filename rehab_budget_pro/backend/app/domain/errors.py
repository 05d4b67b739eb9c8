# backend/app/domain/errors.py
from __future__ import annotations

from typing import Any, Iterable, Mapping


class DomainValidationError(ValueError):
    """Input is well-typed but violates a business rule (routers map to 422)."""


def reject_nulls(changes: Mapping[str, Any], keys: Iterable[str]) -> None:
    # PATCH bodies may send an explicit null; these columns are NOT NULL
    for key in keys:
        if key in changes and changes[key] is None:
            raise DomainValidationError(f"{key} cannot be null")


class InvalidTransition(ValueError):
    """A status change the lifecycle does not allow (routers map to 409)."""

    def __init__(self, entity: str, from_status: str, to_status: str):
        self.entity = entity
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"{entity} cannot move from {from_status!r} to {to_status!r}")
