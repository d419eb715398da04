from __future__ import annotations

from datetime import timedelta

from ticketdesk.config import Outcome, SLAState, TicketStatus
from ticketdesk.infrastructure.container import build_memory_services
from ticketdesk.tickets.application import StaticPolicyProvider
from ticketdesk.tickets.domain import EnginePolicy

from conftest import T0


async def test_duplicate_carries_deadline_over(ticket_service, carrier, actor, other_actor, ticket_fields, clock) -> None:
    source = (await ticket_service.create_ticket(
        ticket_fields(
            supplier_id=carrier.id,
            external_protocol="CARRIER-55821",
            supplier_contact={"name": "NOC", "phone": "+55 11 4000-0000"},
        ),
        actor,
    )).value
    await ticket_service.add_interaction(source.id, {"message": "Called the NOC"}, actor)
    await ticket_service.change_status(source.id, "resolved", actor)
    clock.advance(hours=6)

    result = await ticket_service.duplicate_ticket(source.id, other_actor)

    assert result.ok
    copy = result.value
    assert copy.id != source.id
    assert copy.title == f"{source.title} (Copy)"
    assert copy.status == TicketStatus.OPEN
    assert copy.created_at == T0 + timedelta(hours=6)
    assert copy.sla_deadline == source.sla_deadline
    assert copy.resolved_at is None
    assert copy.created_by == other_actor.id
    assert copy.owner_id == actor.id
    assert copy.interactions == []
    assert copy.external_protocol == "CARRIER-55821"
    assert copy.supplier_contact.phone == "+55 11 4000-0000"

    # an inherited deadline that already passed makes the copy overdue at once
    assert ticket_service.classify(copy).state == SLAState.OVERDUE


async def test_duplicate_leaves_source_untouched(ticket_service, actor, ticket_fields, store) -> None:
    source = (await ticket_service.create_ticket(ticket_fields(), actor)).value

    copy = (await ticket_service.duplicate_ticket(source.id, actor)).value

    assert store.tickets[source.id].title == source.title
    assert set(store.tickets) == {source.id, copy.id}


async def test_duplicate_with_fresh_deadline(store, clock, actor, ticket_fields) -> None:
    policy = StaticPolicyProvider(EnginePolicy(carry_over_deadline=False))
    services = build_memory_services(store=store, clock=clock, policy_provider=policy)
    supplier = (await services.suppliers.add_supplier(
        {"name": "FastNet Telecom", "category": "carrier", "sla_hours": 8}, actor
    )).value
    source = (await services.tickets.create_ticket(ticket_fields(supplier_id=supplier.id), actor)).value
    clock.advance(hours=10)

    copy = (await services.tickets.duplicate_ticket(source.id, actor)).value

    assert copy.sla_deadline == T0 + timedelta(hours=18)


async def test_duplicate_missing_ticket(ticket_service, actor) -> None:
    result = await ticket_service.duplicate_ticket("missing", actor)
    assert result.outcome == Outcome.NOT_FOUND


async def test_copy_of_longest_title_can_be_edited(ticket_service, actor, ticket_fields) -> None:
    source = (await ticket_service.create_ticket(ticket_fields(title="T" * 200), actor)).value
    duplicate = (await ticket_service.duplicate_ticket(source.id, actor)).value
    assert len(duplicate.title) == 207

    same_title = await ticket_service.update_ticket(duplicate.id, {"title": duplicate.title, "unit": "Depot"}, actor)
    assert same_title.ok
    assert same_title.value.unit == "Depot"

    longer = await ticket_service.update_ticket(duplicate.id, {"title": duplicate.title + "!"}, actor)
    assert longer.outcome == Outcome.INVALID
    assert longer.reason == "title_too_long"
