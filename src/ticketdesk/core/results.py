"""
Operation Results
=================

Discriminated results returned by every public engine operation.

No service method raises across its public boundary; callers branch on
``result.outcome`` instead. A no-op rejection (``Outcome.REJECTED``) is kept
apart from a failure so it can be silently ignored.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

from ticketdesk.config import AuditOutcome, Outcome
from ticketdesk.core.exceptions import (
    InvalidTransitionException,
    NoOpTransitionException,
    ResourceNotFoundException,
    ValidationException,
)

T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Success value or a structured reason why there is none."""

    outcome: Outcome
    value: Optional[T] = None
    reason: Optional[str] = None
    message: Optional[str] = None
    details: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.outcome == Outcome.SUCCESS

    @classmethod
    def success(cls, value: T) -> "OperationResult[T]":
        return cls(outcome=Outcome.SUCCESS, value=value)

    @classmethod
    def rejected(cls, reason: str, message: str, details: Optional[dict] = None) -> "OperationResult[T]":
        return cls(outcome=Outcome.REJECTED, reason=reason, message=message, details=details or {})

    @classmethod
    def invalid(cls, reason: str, message: str, details: Optional[dict] = None) -> "OperationResult[T]":
        return cls(outcome=Outcome.INVALID, reason=reason, message=message, details=details or {})

    @classmethod
    def not_found(cls, message: str, details: Optional[dict] = None) -> "OperationResult[T]":
        return cls(outcome=Outcome.NOT_FOUND, reason="not_found", message=message, details=details or {})

    @classmethod
    def failed(cls, message: str, details: Optional[dict] = None) -> "OperationResult[T]":
        return cls(outcome=Outcome.FAILED, reason="backend_error", message=message, details=details or {})

    def to_dict(self) -> dict:
        """Error payload for API responses."""
        return {
            "outcome": self.outcome.value,
            "reason": self.reason,
            "message": self.message,
            "details": self.details,
        }


def result_from_exception(exc: Exception) -> OperationResult:
    """Map an exception caught at a service boundary onto a result."""
    if isinstance(exc, NoOpTransitionException):
        return OperationResult.rejected("no_op_transition", exc.message, exc.details)
    if isinstance(exc, InvalidTransitionException):
        return OperationResult.invalid("transition_not_allowed", exc.message, exc.details)
    if isinstance(exc, ValidationException):
        return OperationResult.invalid(exc.reason, exc.message, exc.details)
    if isinstance(exc, ResourceNotFoundException):
        return OperationResult.not_found(
            exc.message,
            {"resource_type": exc.resource_type, "resource_id": exc.resource_id}
        )
    return OperationResult.failed(str(exc) or type(exc).__name__, {"error_type": type(exc).__name__})


@dataclass(frozen=True)
class StatusChangeResult(Generic[T]):
    """
    Result of a status change.

    The status update and its audit entry are two separate writes, so the
    audit outcome is reported on its own: a committed status change with
    ``audit == AuditOutcome.FAILED`` is still a successful status change.
    """

    status: OperationResult[T]
    audit: AuditOutcome = AuditOutcome.SKIPPED
    audit_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status.ok

    @property
    def outcome(self) -> Outcome:
        return self.status.outcome

    @property
    def value(self) -> Optional[T]:
        return self.status.value

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.status.to_dict(),
            "audit": self.audit.value,
            "audit_error": self.audit_error,
        }
