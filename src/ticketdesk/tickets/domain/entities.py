"""
Ticket Domain Entities
======================

Pure Python domain entities for the ticket lifecycle.

Following Domain-Driven Design principles, these entities contain
business logic and are free of infrastructure concerns.
"""

import copy
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from ticketdesk.config import (
    InteractionType,
    TicketPriority,
    TicketStatus,
    TicketType,
)
from ticketdesk.core.exceptions import ValidationException
from ticketdesk.core.identity import Actor
from ticketdesk.tickets.domain.value_objects import (
    EnginePolicy,
    SLACalculator,
    TransitionTable,
)


def _coerce(enum_cls, value, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationException(
            f"Unknown {field_name} '{value}'",
            reason=f"invalid_{field_name}",
            details={"field": field_name, "value": value}
        )


@dataclass
class SupplierContact:
    """Who to talk to at the supplier about this ticket."""
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["SupplierContact"]:
        if not data:
            return None
        return cls(name=data.get("name"), phone=data.get("phone"), email=data.get("email"))

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"name": self.name, "phone": self.phone, "email": self.email}


@dataclass
class Interaction:
    """
    One timestamped, authored entry in a ticket's audit trail.

    ``sequence`` is the insertion number assigned by the store; it orders
    entries that share a timestamp.
    """

    id: str
    ticket_id: str
    author_id: str
    author_name: str
    message: str
    type: InteractionType
    created_at: datetime
    sequence: Optional[int] = None

    def __post_init__(self):
        """Validate interaction on initialization."""
        self.type = _coerce(InteractionType, self.type, "interaction_type")
        if not self.message or not self.message.strip():
            raise ValidationException(
                "Interaction message cannot be empty",
                reason="empty_message",
                details={"field": "message"}
            )

    @classmethod
    def authored(
        cls,
        ticket_id: str,
        actor: Actor,
        message: str,
        interaction_type: Any,
        now: datetime
    ) -> "Interaction":
        """
        A user-written entry. Status-change entries are only written by
        the state machine.
        """
        interaction_type = _coerce(InteractionType, interaction_type, "interaction_type")
        if interaction_type == InteractionType.STATUS_CHANGE:
            raise ValidationException(
                "Status-change entries are recorded by status transitions only",
                reason="reserved_interaction_type",
                details={"field": "type", "value": interaction_type.value}
            )
        return cls(
            id=str(uuid4()),
            ticket_id=ticket_id,
            author_id=actor.id,
            author_name=actor.name,
            message=message,
            type=interaction_type,
            created_at=now,
        )

    @classmethod
    def status_change(
        cls,
        ticket_id: str,
        actor: Actor,
        old_status: TicketStatus,
        new_status: TicketStatus,
        now: datetime
    ) -> "Interaction":
        return cls(
            id=str(uuid4()),
            ticket_id=ticket_id,
            author_id=actor.id,
            author_name=actor.name,
            message=f'Status changed from "{old_status.value}" to "{new_status.value}"',
            type=InteractionType.STATUS_CHANGE,
            created_at=now,
        )


@dataclass
class Ticket:
    """
    Ticket entity representing a support ticket filed against a supplier.

    ``sla_deadline`` and ``created_at`` are fixed at creation. Status only
    moves through ``change_status``; ``interactions`` only grows.
    """

    # Core attributes
    id: str
    title: str
    description: str
    supplier_id: Optional[str]
    type: TicketType
    status: TicketStatus
    priority: TicketPriority
    unit: str
    owner_id: str
    owner_name: str

    # Timestamps
    sla_deadline: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    # Optional attributes
    related_asset_id: Optional[str] = None
    related_asset_name: Optional[str] = None
    external_protocol: Optional[str] = None
    supplier_contact: Optional[SupplierContact] = None
    resolved_at: Optional[datetime] = None
    created_by: Optional[str] = None

    interactions: List[Interaction] = field(default_factory=list)

    # Never accepted from an update payload
    IMMUTABLE_FIELDS = frozenset({"id", "created_at", "sla_deadline"})
    # Owned by their own operations (transitions, timeline, bookkeeping)
    LIFECYCLE_FIELDS = frozenset({"status", "resolved_at", "interactions", "updated_at", "created_by"})
    EDITABLE_FIELDS = frozenset({
        "title", "description", "supplier_id", "type", "priority", "unit",
        "owner_id", "owner_name", "related_asset_id", "related_asset_name",
        "external_protocol", "supplier_contact",
    })
    REQUIRED_FIELDS = frozenset({"title", "description", "type", "priority", "unit", "owner_id", "owner_name"})

    def __post_init__(self):
        """Normalize enum fields on initialization."""
        self.status = _coerce(TicketStatus, self.status, "status")
        self.priority = _coerce(TicketPriority, self.priority, "priority")
        self.type = _coerce(TicketType, self.type, "type")
        if isinstance(self.supplier_contact, dict):
            self.supplier_contact = SupplierContact.from_dict(self.supplier_contact)

    @property
    def is_resolved(self) -> bool:
        """Resolved or closed."""
        return self.status in (TicketStatus.RESOLVED, TicketStatus.CLOSED)

    @staticmethod
    def validate_text(
        policy: EnginePolicy,
        title: Optional[str] = None,
        description: Optional[str] = None,
        require_all: bool = False
    ) -> None:
        """
        Intake rules for title and description.

        Raises:
            ValidationException: first rule broken
        """
        if title is not None or require_all:
            stripped = (title or "").strip()
            if not stripped:
                raise ValidationException("Title is required", reason="missing_title", details={"field": "title"})
            if len(stripped) > policy.title_max_length:
                raise ValidationException(
                    f"Title must be at most {policy.title_max_length} characters",
                    reason="title_too_long",
                    details={"field": "title", "max_length": policy.title_max_length}
                )
        if description is not None or require_all:
            stripped = (description or "").strip()
            if len(stripped) < policy.description_min_length:
                raise ValidationException(
                    f"Description must be at least {policy.description_min_length} characters",
                    reason="description_too_short",
                    details={"field": "description", "min_length": policy.description_min_length}
                )
            if len(stripped) > policy.description_max_length:
                raise ValidationException(
                    f"Description must be at most {policy.description_max_length} characters",
                    reason="description_too_long",
                    details={"field": "description", "max_length": policy.description_max_length}
                )

    @classmethod
    def create(
        cls,
        fields: Dict[str, Any],
        sla_hours: int,
        now: datetime,
        actor: Actor,
        policy: EnginePolicy,
        ticket_id: Optional[str] = None
    ) -> "Ticket":
        """
        Create a new ticket in status ``open`` with its deadline fixed.

        ``fields`` holds the editable attributes; lifecycle attributes in
        it are ignored.
        """
        cls.validate_text(policy, fields.get("title"), fields.get("description"), require_all=True)

        editable = {k: v for k, v in fields.items() if k in cls.EDITABLE_FIELDS}
        editable["title"] = editable["title"].strip()
        editable["description"] = editable["description"].strip()
        editable.setdefault("type", TicketType.OTHER)
        editable.setdefault("priority", TicketPriority.MEDIUM)
        editable.setdefault("unit", "")
        editable.setdefault("supplier_id", None)
        editable["owner_id"] = editable.get("owner_id") or actor.id
        editable["owner_name"] = editable.get("owner_name") or actor.name

        return cls(
            id=ticket_id or str(uuid4()),
            status=TicketStatus.OPEN,
            sla_deadline=SLACalculator.compute_deadline(now, sla_hours),
            created_at=now,
            updated_at=now,
            created_by=actor.id,
            interactions=[],
            **editable
        )

    def change_status(
        self,
        new_status: Any,
        actor: Actor,
        now: datetime,
        table: Optional[TransitionTable] = None,
        clear_resolved_at_on_reopen: bool = False
    ) -> Interaction:
        """
        Move to ``new_status`` and append the status-change entry.

        Landing on ``resolved`` stamps ``resolved_at``. Leaving it keeps the
        stamp unless ``clear_resolved_at_on_reopen`` is set.

        Raises:
            NoOpTransitionException: already in ``new_status``
            InvalidTransitionException: the table forbids the move

        Returns:
            The synthesized status-change interaction
        """
        target = _coerce(TicketStatus, new_status, "status")
        (table or TransitionTable()).check(self.id, self.status, target)

        previous = self.status
        self.status = target
        self.updated_at = now
        if target == TicketStatus.RESOLVED:
            self.resolved_at = now
        elif previous == TicketStatus.RESOLVED and clear_resolved_at_on_reopen:
            self.resolved_at = None

        interaction = Interaction.status_change(self.id, actor, previous, target, now)
        self.interactions.append(interaction)
        return interaction

    def status_fields(self) -> Dict[str, Any]:
        """Fields a status change writes to the store."""
        return {
            "status": self.status,
            "resolved_at": self.resolved_at,
            "updated_at": self.updated_at,
        }

    def apply_update(
        self,
        changes: Dict[str, Any],
        now: datetime,
        policy: EnginePolicy
    ) -> Tuple[Dict[str, Any], List[str]]:
        """
        Apply a partial edit.

        Immutable and lifecycle fields are dropped without complaint;
        ``supplier_id`` changes never touch ``sla_deadline``.

        Returns:
            (applied changes including ``updated_at``, names of dropped keys)
        """
        applied = {
            k: v for k, v in changes.items()
            if k in self.EDITABLE_FIELDS and not (v is None and k in self.REQUIRED_FIELDS)
        }
        dropped = sorted(k for k in changes if k not in applied)

        title = applied.get("title")
        if isinstance(title, str) and title.strip() == self.title:
            # Resending the current title passes even when a copy suffix made it overlong
            title = None
        self.validate_text(policy, title, applied.get("description"))
        if "title" in applied:
            applied["title"] = applied["title"].strip()
        if "description" in applied:
            applied["description"] = applied["description"].strip()
        if "type" in applied:
            applied["type"] = _coerce(TicketType, applied["type"], "type")
        if "priority" in applied:
            applied["priority"] = _coerce(TicketPriority, applied["priority"], "priority")
        if "supplier_contact" in applied and isinstance(applied["supplier_contact"], dict):
            applied["supplier_contact"] = SupplierContact.from_dict(applied["supplier_contact"])

        for key, value in applied.items():
            setattr(self, key, value)
        self.updated_at = now
        applied["updated_at"] = now

        return applied, dropped

    def duplicate(
        self,
        actor: Actor,
        now: datetime,
        policy: EnginePolicy,
        sla_hours: Optional[int] = None,
        new_id: Optional[str] = None
    ) -> "Ticket":
        """
        A new ticket copied from this one.

        Everything but the id is copied, then: title gets the copy suffix,
        status is ``open``, ``created_at``/``updated_at`` are ``now``, the
        timeline is empty and ``resolved_at`` is cleared. The deadline is
        carried over as-is (even if already past) unless the policy turns
        ``carry_over_deadline`` off, in which case it is recomputed from
        ``sla_hours``.
        """
        if policy.carry_over_deadline:
            deadline = self.sla_deadline
        else:
            deadline = SLACalculator.compute_deadline(now, sla_hours or policy.default_sla_hours)

        return replace(
            self,
            id=new_id or str(uuid4()),
            title=f"{self.title}{policy.duplicate_title_suffix}",
            status=TicketStatus.OPEN,
            sla_deadline=deadline,
            created_at=now,
            updated_at=now,
            resolved_at=None,
            created_by=actor.id,
            supplier_contact=copy.deepcopy(self.supplier_contact),
            interactions=[],
        )
