"""
Domain exceptions.

ValidationError and NotFoundError surface to the caller synchronously.
DeliveryFailure is only ever logged: a push that fails never undoes the
write that preceded it.
"""

from __future__ import annotations

from typing import Any


class HudumaError(Exception):
    """Base class for all domain errors."""

    error_code: str = "error"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(HudumaError):
    """Malformed input or a broken participant invariant."""

    error_code = "validation_error"


class NotFoundError(HudumaError):
    """Referenced job, user or message does not exist."""

    error_code = "not_found"

    @classmethod
    def for_entity(cls, entity: str, entity_id: str) -> "NotFoundError":
        return cls(f"{entity} {entity_id} not found", {"entity": entity, "id": entity_id})


class DeliveryFailure(HudumaError):
    """A push to a live channel did not go through."""

    error_code = "delivery_failure"

    def __init__(self, user_id: str, reason: str) -> None:
        super().__init__(f"Push to user {user_id} failed: {reason}", {"user_id": user_id})
        self.user_id = user_id
        self.reason = reason


class PaymentError(HudumaError):
    """Payment gateway refused or is unavailable."""

    error_code = "payment_error"
