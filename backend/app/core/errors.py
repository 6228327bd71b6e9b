from __future__ import annotations

from typing import Any


class FinanceError(Exception):
    """Base class for every error raised by the finance engine."""

    code = "finance_error"

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"detail": self.message, "code": self.code}
        payload.update({key: str(value) for key, value in self.detail.items()})
        return payload


class ValidationError(FinanceError):
    """Malformed or out-of-range input. Raised before anything is produced."""

    code = "validation_error"


class InvariantError(FinanceError):
    """A cross-field invariant does not hold. The message carries the computed value."""

    code = "invariant_violation"


class AllocationError(InvariantError):
    code = "allocation_invalid"


class NotFoundError(FinanceError):
    code = "not_found"
