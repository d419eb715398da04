"""
Ticket Domain Layer
===================

Domain layer for the ticket lifecycle module.

Contains:
- Entities: Ticket, Interaction, SupplierContact
- Value Objects: SLAClassification, TransitionTable, EnginePolicy
- Domain Services: SLACalculator, order_for_display

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from ticketdesk.tickets.domain.value_objects import (
    SLACalculator,
    SLAClassification,
    TransitionTable,
    EnginePolicy,
)
from ticketdesk.tickets.domain.entities import Ticket, Interaction, SupplierContact
from ticketdesk.tickets.domain.timeline import order_for_display

__all__ = [
    "SLACalculator",
    "SLAClassification",
    "TransitionTable",
    "EnginePolicy",
    "Ticket",
    "Interaction",
    "SupplierContact",
    "order_for_display",
]
