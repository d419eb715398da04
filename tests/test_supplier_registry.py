from __future__ import annotations

from datetime import timedelta

import pytest

from ticketdesk.config import MAX_SLA_HOURS, Outcome, SupplierCategory
from ticketdesk.core import RepositoryException
from ticketdesk.infrastructure.memory import (
    InMemoryInteractionRepository,
    InMemorySupplierRepository,
    InMemoryTicketRepository,
    MemoryStore,
)
from ticketdesk.suppliers.application import SupplierRegistry
from ticketdesk.tickets.application import TicketLifecycleService

from conftest import T0


async def test_add_and_find(registry, actor) -> None:
    created = await registry.add_supplier({"name": "  FastNet Telecom ", "category": "carrier", "sla_hours": 4}, actor)

    assert created.ok
    found = await registry.find_supplier(created.value.id)
    assert found.ok
    assert found.value.name == "FastNet Telecom"
    assert found.value.category == SupplierCategory.CARRIER
    assert found.value.created_by == actor.id


@pytest.mark.parametrize("hours", [0, -1, MAX_SLA_HOURS + 1, 10**8])
async def test_sla_hours_must_be_in_range(registry, actor, hours) -> None:
    result = await registry.add_supplier({"name": "Broken", "sla_hours": hours}, actor)

    assert result.outcome == Outcome.INVALID
    assert result.reason == "invalid_sla_hours"


async def test_lists_are_ordered_by_name(registry, actor) -> None:
    for name, active in [("Zeta Links", True), ("Alpha IT", False), ("Midway Billing", True)]:
        await registry.add_supplier({"name": name, "sla_hours": 12, "active": active}, actor)

    everyone = (await registry.list_suppliers()).value
    active = (await registry.list_active_suppliers()).value

    assert [s.name for s in everyone] == ["Alpha IT", "Midway Billing", "Zeta Links"]
    assert [s.name for s in active] == ["Midway Billing", "Zeta Links"]


async def test_resolve_sla_hours_falls_back(registry, carrier) -> None:
    assert await registry.resolve_sla_hours(carrier.id) == 4
    assert await registry.resolve_sla_hours("missing") == 24
    assert await registry.resolve_sla_hours(None, default=8) == 8


async def test_update_validates_merged_record(registry, carrier) -> None:
    result = await registry.update_supplier(carrier.id, {"sla_hours": 0})

    assert result.outcome == Outcome.INVALID
    assert (await registry.find_supplier(carrier.id)).value.sla_hours == 4


async def test_update_rejects_oversized_sla_hours(registry, carrier) -> None:
    result = await registry.update_supplier(carrier.id, {"sla_hours": 10**8})

    assert result.outcome == Outcome.INVALID
    assert result.reason == "invalid_sla_hours"
    assert (await registry.find_supplier(carrier.id)).value.sla_hours == 4


async def test_longest_sla_still_opens_tickets(registry, ticket_service, actor, ticket_fields) -> None:
    supplier = (await registry.add_supplier({"name": "Slow Vendor", "sla_hours": MAX_SLA_HOURS}, actor)).value

    result = await ticket_service.create_ticket(ticket_fields(supplier_id=supplier.id), actor)

    assert result.ok
    assert result.value.sla_deadline == T0 + timedelta(hours=MAX_SLA_HOURS)


async def test_update_and_delete(registry, carrier) -> None:
    updated = await registry.update_supplier(carrier.id, {"active": False, "unknown": "dropped"})
    assert updated.ok
    assert updated.value.active is False

    assert (await registry.delete_supplier(carrier.id)).ok
    assert (await registry.find_supplier(carrier.id)).outcome == Outcome.NOT_FOUND
    assert (await registry.delete_supplier(carrier.id)).outcome == Outcome.NOT_FOUND


class OfflineSupplierRepository(InMemorySupplierRepository):
    async def get_by_id(self, supplier_id):
        raise RepositoryException("supplier store offline")

    async def list_all(self):
        raise RepositoryException("supplier store offline")


async def test_backend_errors(actor) -> None:
    registry = SupplierRegistry(OfflineSupplierRepository(MemoryStore()))

    assert await registry.get_supplier("any") is None
    assert await registry.resolve_sla_hours("any") == 24
    assert (await registry.find_supplier("any")).outcome == Outcome.FAILED
    assert (await registry.list_suppliers()).outcome == Outcome.FAILED


async def test_ticket_intake_survives_supplier_outage(store, clock, actor, ticket_fields) -> None:
    service = TicketLifecycleService(
        InMemoryTicketRepository(store),
        InMemoryInteractionRepository(store),
        SupplierRegistry(OfflineSupplierRepository(store), clock),
        clock=clock,
    )

    result = await service.create_ticket(ticket_fields(supplier_id="whatever"), actor)

    assert result.ok
    assert result.value.sla_deadline == T0 + timedelta(hours=24)
