"""
In-Memory Storage
=================

Process-local implementations of the repository interfaces, selected with
``STORAGE_BACKEND=memory``. Callers always get deep copies, so mutating a
returned entity never touches the stored one. No method awaits while
holding store state, so calls are atomic within the event loop.
"""

import copy
from typing import Any, Dict, List, Optional

from ticketdesk.core import RepositoryException
from ticketdesk.suppliers.application import ISupplierRepository
from ticketdesk.suppliers.domain import Supplier
from ticketdesk.tickets.application import IInteractionRepository, ITicketRepository
from ticketdesk.tickets.domain import Interaction, Ticket


class MemoryStore:
    """Shared state behind the in-memory repositories."""

    def __init__(self):
        self.tickets: Dict[str, Ticket] = {}
        self.interactions: Dict[str, List[Interaction]] = {}
        self.suppliers: Dict[str, Supplier] = {}


class InMemoryTicketRepository(ITicketRepository):

    def __init__(self, store: MemoryStore):
        self._store = store

    async def insert(self, ticket: Ticket) -> Ticket:
        if ticket.id in self._store.tickets:
            raise RepositoryException(f"Ticket {ticket.id} already exists")
        stored = copy.deepcopy(ticket)
        stored.interactions = []
        self._store.tickets[ticket.id] = stored
        return copy.deepcopy(stored)

    async def get_by_id(self, ticket_id: str) -> Optional[Ticket]:
        ticket = self._store.tickets.get(ticket_id)
        return copy.deepcopy(ticket) if ticket else None

    async def update_by_id(self, ticket_id: str, changes: Dict[str, Any]) -> Optional[Ticket]:
        ticket = self._store.tickets.get(ticket_id)
        if ticket is None:
            return None
        for key, value in changes.items():
            setattr(ticket, key, copy.deepcopy(value))
        return copy.deepcopy(ticket)

    async def delete_by_id(self, ticket_id: str) -> bool:
        if self._store.tickets.pop(ticket_id, None) is None:
            return False
        self._store.interactions.pop(ticket_id, None)
        return True

    async def list_ordered_by_creation(self, descending: bool = True) -> List[Ticket]:
        tickets = sorted(self._store.tickets.values(), key=lambda t: t.created_at, reverse=descending)
        return copy.deepcopy(tickets)


class InMemoryInteractionRepository(IInteractionRepository):

    def __init__(self, store: MemoryStore):
        self._store = store

    async def insert_interaction(self, interaction: Interaction) -> Interaction:
        if interaction.ticket_id not in self._store.tickets:
            raise RepositoryException(f"Ticket {interaction.ticket_id} does not exist")
        timeline = self._store.interactions.setdefault(interaction.ticket_id, [])
        stored = copy.deepcopy(interaction)
        stored.sequence = len(timeline) + 1
        timeline.append(stored)
        return copy.deepcopy(stored)

    async def list_for_tickets(self, ticket_ids: List[str]) -> Dict[str, List[Interaction]]:
        return {
            ticket_id: sorted(copy.deepcopy(self._store.interactions[ticket_id]),
                              key=lambda i: (i.created_at, i.sequence))
            for ticket_id in ticket_ids
            if ticket_id in self._store.interactions
        }


class InMemorySupplierRepository(ISupplierRepository):

    def __init__(self, store: MemoryStore):
        self._store = store

    async def get_by_id(self, supplier_id: str) -> Optional[Supplier]:
        supplier = self._store.suppliers.get(supplier_id)
        return copy.deepcopy(supplier) if supplier else None

    async def list_active(self) -> List[Supplier]:
        return [s for s in await self.list_all() if s.active]

    async def list_all(self) -> List[Supplier]:
        return copy.deepcopy(sorted(self._store.suppliers.values(), key=lambda s: s.name))

    async def insert(self, supplier: Supplier) -> Supplier:
        if supplier.id in self._store.suppliers:
            raise RepositoryException(f"Supplier {supplier.id} already exists")
        self._store.suppliers[supplier.id] = copy.deepcopy(supplier)
        return copy.deepcopy(supplier)

    async def update_by_id(self, supplier_id: str, changes: dict[str, Any]) -> Optional[Supplier]:
        supplier = self._store.suppliers.get(supplier_id)
        if supplier is None:
            return None
        for key, value in changes.items():
            setattr(supplier, key, value)
        supplier.__post_init__()
        return copy.deepcopy(supplier)

    async def delete_by_id(self, supplier_id: str) -> bool:
        return self._store.suppliers.pop(supplier_id, None) is not None
