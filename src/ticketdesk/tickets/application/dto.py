"""
Ticket Application DTOs
=======================

Data Transfer Objects for the ticket API layer.

Length and emptiness rules are left to the domain so that they come back
as structured results with a reason code; these models only check shape
and vocabulary.
"""

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ticketdesk.tickets.domain import order_for_display


# ========== Type Aliases for Literals ==========
TicketStatusStr = Literal["open", "in-progress", "awaiting-third-party", "resolved", "closed"]
TicketPriorityStr = Literal["low", "medium", "high", "critical"]
TicketTypeStr = Literal[
    "internet-down", "intermittent-link", "billing-system-down",
    "validator-frozen", "hardware", "software", "other",
]
InteractionTypeStr = Literal["comment", "call", "email", "supplier-callback", "status-change"]
SLAStateStr = Literal[
    "undefined", "invalid", "unavailable", "resolved",
    "overdue", "critical", "warning", "on_track",
]


# ========== Request DTOs ==========

class SupplierContactDTO(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class TicketCreateDTO(BaseModel):
    """DTO for opening a ticket. Lifecycle fields in the payload are ignored."""
    model_config = ConfigDict(extra="ignore")

    title: str = Field(..., description="Short summary")
    description: str = Field(..., description="What is wrong")
    supplier_id: Optional[str] = Field(None, description="Supplier handling the ticket")
    type: TicketTypeStr = Field(default="other", description="Problem category")
    priority: TicketPriorityStr = Field(default="medium", description="Ticket priority")
    unit: str = Field(default="", description="Unit or location affected")
    related_asset_id: Optional[str] = None
    related_asset_name: Optional[str] = None
    external_protocol: Optional[str] = Field(None, description="Supplier's own ticket number")
    supplier_contact: Optional[SupplierContactDTO] = None
    owner_id: Optional[str] = Field(None, description="Defaults to the acting user")
    owner_name: Optional[str] = Field(None, description="Defaults to the acting user")


class TicketUpdateDTO(BaseModel):
    """
    DTO for editing a ticket.

    Unknown keys (``id``, ``created_at``, ``sla_deadline``, ``status``...)
    are dropped silently.
    """
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    supplier_id: Optional[str] = None
    type: Optional[TicketTypeStr] = None
    priority: Optional[TicketPriorityStr] = None
    unit: Optional[str] = None
    related_asset_id: Optional[str] = None
    related_asset_name: Optional[str] = None
    external_protocol: Optional[str] = None
    supplier_contact: Optional[SupplierContactDTO] = None
    owner_id: Optional[str] = None
    owner_name: Optional[str] = None


class StatusChangeDTO(BaseModel):
    """Request body for a status transition."""
    status: TicketStatusStr


class InteractionCreateDTO(BaseModel):
    """Request body for a timeline entry."""
    message: str = Field(..., description="Entry text")
    type: InteractionTypeStr = Field(default="comment", description="Entry kind")


# ========== Response DTOs ==========

class SLAClassificationResponse(BaseModel):
    """Response model for an SLA classification."""
    state: SLAStateStr
    deadline: Optional[datetime] = None
    hours_remaining: Optional[int] = None
    minutes_remaining: Optional[int] = None
    hours_overdue: Optional[int] = None
    is_breached: bool = False
    error: Optional[str] = None

    @classmethod
    def from_domain(cls, classification) -> "SLAClassificationResponse":
        return cls(
            state=classification.state.value,
            deadline=classification.deadline,
            hours_remaining=classification.hours_remaining,
            minutes_remaining=classification.minutes_remaining,
            hours_overdue=classification.hours_overdue,
            is_breached=classification.is_breached,
            error=classification.error,
        )


class InteractionResponse(BaseModel):
    """Response model for a timeline entry."""
    id: str
    ticket_id: str
    author_id: str
    author_name: str
    message: str
    type: InteractionTypeStr
    created_at: datetime

    @classmethod
    def from_domain(cls, interaction) -> "InteractionResponse":
        return cls(
            id=interaction.id,
            ticket_id=interaction.ticket_id,
            author_id=interaction.author_id,
            author_name=interaction.author_name,
            message=interaction.message,
            type=interaction.type.value,
            created_at=interaction.created_at,
        )


class TicketResponse(BaseModel):
    """Response model for a ticket, timeline most recent first."""
    id: str
    title: str
    description: str
    supplier_id: Optional[str] = None
    type: TicketTypeStr
    status: TicketStatusStr
    priority: TicketPriorityStr
    unit: str
    related_asset_id: Optional[str] = None
    related_asset_name: Optional[str] = None
    external_protocol: Optional[str] = None
    supplier_contact: Optional[SupplierContactDTO] = None
    owner_id: str
    owner_name: str
    sla_deadline: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    resolved_at: Optional[datetime] = None
    interactions: List[InteractionResponse] = Field(default_factory=list)
    sla: Optional[SLAClassificationResponse] = None

    @classmethod
    def from_domain(cls, ticket, classification=None) -> "TicketResponse":
        contact = ticket.supplier_contact
        return cls(
            id=ticket.id,
            title=ticket.title,
            description=ticket.description,
            supplier_id=ticket.supplier_id,
            type=ticket.type.value,
            status=ticket.status.value,
            priority=ticket.priority.value,
            unit=ticket.unit,
            related_asset_id=ticket.related_asset_id,
            related_asset_name=ticket.related_asset_name,
            external_protocol=ticket.external_protocol,
            supplier_contact=SupplierContactDTO(**contact.to_dict()) if contact else None,
            owner_id=ticket.owner_id,
            owner_name=ticket.owner_name,
            sla_deadline=ticket.sla_deadline if isinstance(ticket.sla_deadline, datetime) else None,
            created_at=ticket.created_at,
            updated_at=ticket.updated_at,
            resolved_at=ticket.resolved_at,
            interactions=[InteractionResponse.from_domain(i) for i in order_for_display(ticket.interactions)],
            sla=SLAClassificationResponse.from_domain(classification) if classification else None,
        )


class StatusChangeResponse(BaseModel):
    """Ticket after a transition plus what happened to its audit entry."""
    ticket: TicketResponse
    audit: Literal["ok", "failed", "skipped"]
    audit_error: Optional[str] = None


class AttentionItem(BaseModel):
    """An open ticket that needs a look."""
    id: str
    title: str
    priority: TicketPriorityStr
    status: TicketStatusStr
    sla_state: SLAStateStr


class TicketSummaryResponse(BaseModel):
    """Dashboard numbers."""
    total_open: int = Field(..., description="Tickets not resolved or closed")
    open_by_supplier_category: Dict[str, int] = Field(default_factory=dict)
    open_critical: int = Field(..., description="Open tickets with critical priority")
    by_status: Dict[str, int] = Field(default_factory=dict)
    by_sla_state: Dict[str, int] = Field(default_factory=dict)
    attention: List[AttentionItem] = Field(default_factory=list)
