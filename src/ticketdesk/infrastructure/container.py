"""
Service Wiring
==============

Builds the application services on top of one storage backend.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ticketdesk.core import IClock, SystemClock
from ticketdesk.infrastructure.memory import (
    InMemoryInteractionRepository,
    InMemorySupplierRepository,
    InMemoryTicketRepository,
    MemoryStore,
)
from ticketdesk.suppliers.application import SupplierRegistry
from ticketdesk.suppliers.infrastructure import SQLAlchemySupplierRepository
from ticketdesk.tickets.application import IPolicyProvider, TicketLifecycleService
from ticketdesk.tickets.infrastructure import (
    SQLAlchemyInteractionRepository,
    SQLAlchemyTicketRepository,
)


@dataclass
class ServiceContainer:
    """Services handed to the API layer through ``app.state``."""
    tickets: TicketLifecycleService
    suppliers: SupplierRegistry
    backend: str


def build_memory_services(
    store: Optional[MemoryStore] = None,
    clock: Optional[IClock] = None,
    policy_provider: Optional[IPolicyProvider] = None
) -> ServiceContainer:
    store = store or MemoryStore()
    clock = clock or SystemClock()
    registry = SupplierRegistry(InMemorySupplierRepository(store), clock)
    return ServiceContainer(
        tickets=TicketLifecycleService(
            InMemoryTicketRepository(store),
            InMemoryInteractionRepository(store),
            registry,
            policy_provider,
            clock,
        ),
        suppliers=registry,
        backend="memory",
    )


def build_database_services(
    session_maker: async_sessionmaker[AsyncSession],
    clock: Optional[IClock] = None,
    policy_provider: Optional[IPolicyProvider] = None
) -> ServiceContainer:
    clock = clock or SystemClock()
    registry = SupplierRegistry(SQLAlchemySupplierRepository(session_maker), clock)
    return ServiceContainer(
        tickets=TicketLifecycleService(
            SQLAlchemyTicketRepository(session_maker),
            SQLAlchemyInteractionRepository(session_maker),
            registry,
            policy_provider,
            clock,
        ),
        suppliers=registry,
        backend="database",
    )
