"""
Ticket Application Layer
========================

Contains:
- Services: the Ticket Lifecycle Service
- DTOs: request/response models for the API
- Repository and policy interfaces implemented by the infrastructure layer
"""

from ticketdesk.tickets.application.dto import (
    TicketCreateDTO,
    TicketUpdateDTO,
    StatusChangeDTO,
    InteractionCreateDTO,
    SupplierContactDTO,
    TicketResponse,
    InteractionResponse,
    SLAClassificationResponse,
    StatusChangeResponse,
    AttentionItem,
    TicketSummaryResponse,
)
from ticketdesk.tickets.application.services import (
    ITicketRepository,
    IInteractionRepository,
    IPolicyProvider,
    StaticPolicyProvider,
    TicketLifecycleService,
)

__all__ = [
    # DTOs
    "TicketCreateDTO",
    "TicketUpdateDTO",
    "StatusChangeDTO",
    "InteractionCreateDTO",
    "SupplierContactDTO",
    "TicketResponse",
    "InteractionResponse",
    "SLAClassificationResponse",
    "StatusChangeResponse",
    "AttentionItem",
    "TicketSummaryResponse",
    # Services
    "TicketLifecycleService",
    "StaticPolicyProvider",
    # Interfaces
    "ITicketRepository",
    "IInteractionRepository",
    "IPolicyProvider",
]
