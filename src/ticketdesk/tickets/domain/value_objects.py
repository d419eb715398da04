"""
Ticket Value Objects
====================

Immutable value objects for the ticket lifecycle domain.

Value objects are defined by their attributes rather than an identity.
They are immutable and can be freely shared.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from pydantic import BaseModel, Field, TypeAdapter, field_validator, model_validator

from ticketdesk.config import (
    DEFAULT_SLA_HOURS,
    MAX_SLA_HOURS,
    RESOLVED_STATUSES,
    SLAState,
    TicketStatus,
)
from ticketdesk.core.clock import ensure_utc
from ticketdesk.core.exceptions import (
    InvalidTransitionException,
    NoOpTransitionException,
    ValidationException,
)
from ticketdesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

_datetime_adapter = TypeAdapter(datetime)

_ONE_HOUR = timedelta(hours=1)
_ONE_MINUTE = timedelta(minutes=1)


def _truncate(delta: timedelta, unit: timedelta) -> int:
    """Whole ``unit``s in ``delta``, truncated toward zero."""
    whole = abs(delta) // unit
    return whole if delta >= timedelta(0) else -whole


@dataclass(frozen=True)
class SLAClassification:
    """
    Derived, human-facing urgency bucket of a ticket.

    ``undefined``, ``invalid`` and ``unavailable`` are three different
    "no answer" states: deadline absent, deadline malformed, and
    classification blew up.
    """

    state: SLAState
    deadline: Optional[datetime] = None
    hours_remaining: Optional[int] = None
    minutes_remaining: Optional[int] = None
    hours_overdue: Optional[int] = None
    error: Optional[str] = None

    @property
    def is_breached(self) -> bool:
        return self.state == SLAState.OVERDUE

    @property
    def has_answer(self) -> bool:
        return self.state not in (SLAState.UNDEFINED, SLAState.INVALID, SLAState.UNAVAILABLE)

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "state": self.state.value,
            "deadline": self.deadline.isoformat() if self.deadline else None,
            "hours_remaining": self.hours_remaining,
            "minutes_remaining": self.minutes_remaining,
            "hours_overdue": self.hours_overdue,
            "is_breached": self.is_breached,
            "error": self.error,
        }


class SLACalculator:
    """
    Pure functions for SLA calculations.

    Stateless utility class - all deadline and classification logic
    lives here.
    """

    @staticmethod
    def compute_deadline(created_at: datetime, sla_hours: float) -> datetime:
        """
        Deadline = ``created_at`` + ``sla_hours`` hours.

        The caller substitutes the default SLA when a supplier has none;
        this function only accepts positive hours.

        Raises:
            ValidationException: ``sla_hours`` missing, not finite, not
                positive, or pushing the deadline out of range
        """
        if (
            isinstance(sla_hours, bool)
            or not isinstance(sla_hours, (int, float))
            or not math.isfinite(sla_hours)
            or sla_hours <= 0
        ):
            raise ValidationException(
                "SLA hours must be a positive number",
                reason="invalid_sla_hours",
                details={"field": "sla_hours", "value": sla_hours}
            )
        try:
            return ensure_utc(created_at) + timedelta(hours=sla_hours)
        except OverflowError as e:
            raise ValidationException(
                "SLA hours push the deadline out of range",
                reason="invalid_sla_hours",
                details={"field": "sla_hours", "value": sla_hours}
            ) from e

    @staticmethod
    def is_absent(deadline: Any) -> bool:
        return deadline is None or (isinstance(deadline, str) and not deadline.strip())

    @staticmethod
    def parse_deadline(deadline: Any) -> datetime:
        """
        Parse a stored deadline into an aware UTC datetime.

        Raises:
            ValueError: the value is not a valid instant
        """
        if isinstance(deadline, datetime):
            return ensure_utc(deadline)
        if isinstance(deadline, str):
            return ensure_utc(_datetime_adapter.validate_python(deadline.strip()))
        raise ValueError(f"Unsupported deadline value of type {type(deadline).__name__}")

    @staticmethod
    def classify(
        deadline: Any,
        status: Any,
        now: Optional[datetime] = None,
        critical_hours: int = 4,
        warning_hours: int = 12
    ) -> SLAClassification:
        """
        Classify a ticket's SLA.

        Order of checks: absent deadline, malformed deadline, resolved
        status, then the time-based buckets. Never raises: unexpected
        errors come back as ``SLAState.UNAVAILABLE``.

        Args:
            deadline: datetime, ISO-8601 string, or None
            status: Ticket status (enum member or its value)
            now: Evaluation instant, defaults to the wall clock
            critical_hours: Upper bound (inclusive) of the critical bucket
            warning_hours: Upper bound (inclusive) of the warning bucket
        """
        try:
            if SLACalculator.is_absent(deadline):
                return SLAClassification(state=SLAState.UNDEFINED)

            try:
                parsed = SLACalculator.parse_deadline(deadline)
            except ValueError as exc:
                return SLAClassification(state=SLAState.INVALID, error=str(exc))

            if TicketStatus(status) in RESOLVED_STATUSES:
                return SLAClassification(state=SLAState.RESOLVED, deadline=parsed)

            current = ensure_utc(now) if now is not None else datetime.now(timezone.utc)
            remaining = parsed - current
            hours_remaining = _truncate(remaining, _ONE_HOUR)

            if current > parsed:
                return SLAClassification(
                    state=SLAState.OVERDUE,
                    deadline=parsed,
                    hours_overdue=abs(hours_remaining)
                )

            if hours_remaining <= critical_hours:
                return SLAClassification(
                    state=SLAState.CRITICAL,
                    deadline=parsed,
                    hours_remaining=hours_remaining,
                    minutes_remaining=_truncate(remaining, _ONE_MINUTE) % 60
                )

            state = SLAState.WARNING if hours_remaining <= warning_hours else SLAState.ON_TRACK
            return SLAClassification(state=state, deadline=parsed, hours_remaining=hours_remaining)

        except Exception as exc:
            logger.error(
                "SLA classification failed",
                extra={"deadline": str(deadline), "status": str(status), "error": str(exc)}
            )
            return SLAClassification(state=SLAState.UNAVAILABLE, error=str(exc))


def _fully_connected() -> Dict[TicketStatus, FrozenSet[TicketStatus]]:
    return {
        status: frozenset(other for other in TicketStatus if other != status)
        for status in TicketStatus
    }


@dataclass(frozen=True)
class TransitionTable:
    """
    Permitted status transitions.

    The default table is fully connected; a same-state move is never a
    transition and is always rejected as a no-op.
    """

    edges: Mapping[TicketStatus, FrozenSet[TicketStatus]] = field(default_factory=_fully_connected)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, List[str]]) -> "TransitionTable":
        edges = _fully_connected()
        for source, targets in mapping.items():
            edges[TicketStatus(source)] = frozenset(
                TicketStatus(t) for t in targets if TicketStatus(t) != TicketStatus(source)
            )
        return cls(edges=edges)

    def allows(self, current: TicketStatus, target: TicketStatus) -> bool:
        return target in self.edges.get(current, frozenset())

    def check(self, ticket_id: str, current: TicketStatus, target: TicketStatus) -> None:
        """
        Raises:
            NoOpTransitionException: ``target`` equals ``current``
            InvalidTransitionException: the table has no such edge
        """
        if current == target:
            raise NoOpTransitionException(ticket_id, current)
        if not self.allows(current, target):
            raise InvalidTransitionException(ticket_id, current, target)


class EnginePolicy(BaseModel):
    """
    Ticket engine policy loaded from YAML.

    This is a value object - immutable and defined by its attributes.
    Absent keys fall back to the defaults below.
    """

    default_sla_hours: int = Field(default=DEFAULT_SLA_HOURS, ge=1, le=MAX_SLA_HOURS, description="SLA used when no supplier resolves")
    critical_threshold_hours: int = Field(default=4, ge=0, description="Upper bound of the critical bucket")
    warning_threshold_hours: int = Field(default=12, ge=0, description="Upper bound of the warning bucket")

    title_max_length: int = Field(default=200, ge=1)
    description_min_length: int = Field(default=10, ge=0)
    description_max_length: int = Field(default=2000, ge=1)

    duplicate_title_suffix: str = Field(default=" (Copy)")
    carry_over_deadline: bool = Field(
        default=True,
        description="Duplicates keep the source deadline instead of getting a fresh one"
    )
    clear_resolved_at_on_reopen: bool = Field(
        default=False,
        description="Leaving 'resolved' clears resolved_at"
    )

    transitions: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Allowed targets per status; statuses left out stay fully connected"
    )

    @field_validator("transitions")
    @classmethod
    def validate_transitions(cls, v: Dict[str, List[str]]) -> Dict[str, List[str]]:
        """Every status named in the table must exist."""
        known = {s.value for s in TicketStatus}
        for source, targets in v.items():
            unknown = ({source} | set(targets)) - known
            if unknown:
                raise ValueError(f"unknown statuses in transitions: {sorted(unknown)}")
        return v

    @model_validator(mode="after")
    def validate_thresholds(self) -> "EnginePolicy":
        if self.warning_threshold_hours < self.critical_threshold_hours:
            raise ValueError("warning_threshold_hours must be >= critical_threshold_hours")
        if self.description_max_length < self.description_min_length:
            raise ValueError("description_max_length must be >= description_min_length")
        return self

    def transition_table(self) -> TransitionTable:
        return TransitionTable.from_mapping(self.transitions)

    def classify(self, deadline: Any, status: Any, now: Optional[datetime] = None) -> SLAClassification:
        """``SLACalculator.classify`` with this policy's thresholds."""
        return SLACalculator.classify(
            deadline,
            status,
            now,
            critical_hours=self.critical_threshold_hours,
            warning_hours=self.warning_threshold_hours
        )
