"""
Ticket Infrastructure Layer
===========================

Contains:
- Models: SQLAlchemy ORM models
- Repositories: SQLAlchemy implementations of the repository interfaces
- External: YAML policy loading with hot reload
"""

from ticketdesk.tickets.infrastructure.models import TicketModel, InteractionModel
from ticketdesk.tickets.infrastructure.repositories import (
    SQLAlchemyTicketRepository,
    SQLAlchemyInteractionRepository,
)
from ticketdesk.tickets.infrastructure.external import PolicyConfigManager, PolicyFileHandler

__all__ = [
    "TicketModel",
    "InteractionModel",
    "SQLAlchemyTicketRepository",
    "SQLAlchemyInteractionRepository",
    "PolicyConfigManager",
    "PolicyFileHandler",
]
