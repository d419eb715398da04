from __future__ import annotations

import copy
from datetime import timedelta

import pytest

from ticketdesk.config import AuditOutcome, InteractionType, Outcome, SLAState, TicketStatus
from ticketdesk.core import RepositoryException
from ticketdesk.infrastructure.container import build_memory_services
from ticketdesk.infrastructure.memory import InMemoryInteractionRepository, InMemoryTicketRepository
from ticketdesk.tickets.application import StaticPolicyProvider, TicketLifecycleService
from ticketdesk.tickets.domain import EnginePolicy

from conftest import T0


async def test_create_fixes_deadline_from_supplier(ticket_service, carrier, actor, ticket_fields) -> None:
    result = await ticket_service.create_ticket(ticket_fields(supplier_id=carrier.id), actor)

    assert result.ok
    ticket = result.value
    assert ticket.status == TicketStatus.OPEN
    assert ticket.created_at == T0
    assert ticket.sla_deadline == T0 + timedelta(hours=4)
    assert ticket.owner_id == actor.id
    assert ticket.owner_name == actor.name
    assert ticket.created_by == actor.id
    assert ticket.resolved_at is None


async def test_create_with_explicit_supplier_skips_lookup(ticket_service, carrier, actor, ticket_fields) -> None:
    result = await ticket_service.create_ticket(ticket_fields(), actor, supplier=carrier)

    assert result.ok
    assert result.value.supplier_id == carrier.id
    assert result.value.sla_deadline == T0 + timedelta(hours=4)


async def test_create_with_unknown_supplier_uses_24_hours(ticket_service, actor, ticket_fields) -> None:
    result = await ticket_service.create_ticket(ticket_fields(supplier_id="no-such-supplier"), actor)

    assert result.ok
    assert result.value.sla_deadline == T0 + timedelta(hours=24)


@pytest.mark.parametrize(
    "overrides, reason",
    [
        ({"title": "   "}, "missing_title"),
        ({"title": "x" * 201}, "title_too_long"),
        ({"description": "too short"}, "description_too_short"),
        ({"description": "y" * 2001}, "description_too_long"),
    ],
)
async def test_create_rejects_bad_text(ticket_service, actor, ticket_fields, store, overrides, reason) -> None:
    result = await ticket_service.create_ticket(ticket_fields(**overrides), actor)

    assert result.outcome == Outcome.INVALID
    assert result.reason == reason
    assert store.tickets == {}


async def test_create_rejects_unknown_priority(ticket_service, actor, ticket_fields) -> None:
    result = await ticket_service.create_ticket(ticket_fields(priority="urgent"), actor)

    assert result.outcome == Outcome.INVALID
    assert result.reason == "invalid_payload"


async def test_status_change_records_one_interaction(ticket_service, actor, other_actor, ticket_fields, clock) -> None:
    ticket = (await ticket_service.create_ticket(ticket_fields(), actor)).value
    clock.advance(minutes=15)

    result = await ticket_service.change_status(ticket.id, "in-progress", other_actor)

    assert result.ok
    assert result.audit == AuditOutcome.OK
    updated = result.value
    assert updated.status == TicketStatus.IN_PROGRESS
    assert updated.updated_at == T0 + timedelta(minutes=15)
    assert len(updated.interactions) == 1
    entry = updated.interactions[0]
    assert entry.type == InteractionType.STATUS_CHANGE
    assert entry.author_id == other_actor.id
    assert entry.author_name == other_actor.name
    assert entry.message == 'Status changed from "open" to "in-progress"'


@pytest.mark.parametrize("status", list(TicketStatus))
async def test_same_status_is_rejected_without_writes(ticket_service, actor, ticket_fields, store, clock, status) -> None:
    ticket = (await ticket_service.create_ticket(ticket_fields(), actor)).value
    if status != TicketStatus.OPEN:
        assert (await ticket_service.change_status(ticket.id, status.value, actor)).ok
    before = copy.deepcopy(store.tickets[ticket.id])
    entries = len(store.interactions.get(ticket.id, []))
    clock.advance(minutes=5)

    result = await ticket_service.change_status(ticket.id, status.value, actor)

    assert result.outcome == Outcome.REJECTED
    assert result.status.reason == "no_op_transition"
    assert result.audit == AuditOutcome.SKIPPED
    assert len(store.interactions.get(ticket.id, [])) == entries
    assert store.tickets[ticket.id] == before


async def test_resolving_stamps_resolved_at_and_reopen_keeps_it(ticket_service, actor, ticket_fields, clock) -> None:
    ticket = (await ticket_service.create_ticket(ticket_fields(), actor)).value
    clock.advance(hours=2)
    resolved = (await ticket_service.change_status(ticket.id, "resolved", actor)).value
    assert resolved.resolved_at == T0 + timedelta(hours=2)

    clock.advance(hours=1)
    reopened = (await ticket_service.change_status(ticket.id, "in-progress", actor)).value
    assert reopened.status == TicketStatus.IN_PROGRESS
    assert reopened.resolved_at == T0 + timedelta(hours=2)
    assert len(reopened.interactions) == 2


async def test_reopen_clears_resolved_at_when_policy_says_so(store, clock, actor, ticket_fields) -> None:
    policy = StaticPolicyProvider(EnginePolicy(clear_resolved_at_on_reopen=True))
    service = build_memory_services(store=store, clock=clock, policy_provider=policy).tickets
    ticket = (await service.create_ticket(ticket_fields(), actor)).value

    await service.change_status(ticket.id, "resolved", actor)
    reopened = (await service.change_status(ticket.id, "open", actor)).value

    assert reopened.resolved_at is None


async def test_transition_table_forbids_edges(store, clock, actor, ticket_fields) -> None:
    policy = StaticPolicyProvider(EnginePolicy(transitions={"closed": []}))
    service = build_memory_services(store=store, clock=clock, policy_provider=policy).tickets
    ticket = (await service.create_ticket(ticket_fields(), actor)).value
    assert (await service.change_status(ticket.id, "closed", actor)).ok

    result = await service.change_status(ticket.id, "open", actor)

    assert result.outcome == Outcome.INVALID
    assert result.status.reason == "transition_not_allowed"
    assert store.tickets[ticket.id].status == TicketStatus.CLOSED


async def test_unknown_status_is_invalid(ticket_service, actor, ticket_fields) -> None:
    ticket = (await ticket_service.create_ticket(ticket_fields(), actor)).value

    result = await ticket_service.change_status(ticket.id, "escalated", actor)

    assert result.outcome == Outcome.INVALID
    assert result.status.reason == "invalid_status"


async def test_status_change_on_missing_ticket(ticket_service, actor) -> None:
    result = await ticket_service.change_status("missing", "resolved", actor)
    assert result.outcome == Outcome.NOT_FOUND


class FailingInteractionRepository(InMemoryInteractionRepository):
    async def insert_interaction(self, interaction):
        raise RepositoryException("interaction store offline")


async def test_audit_failure_keeps_status_change(store, clock, registry, actor, ticket_fields) -> None:
    service = TicketLifecycleService(
        InMemoryTicketRepository(store),
        FailingInteractionRepository(store),
        registry,
        clock=clock,
    )
    ticket = (await service.create_ticket(ticket_fields(), actor)).value

    result = await service.change_status(ticket.id, "awaiting-third-party", actor)

    assert result.ok
    assert result.audit == AuditOutcome.FAILED
    assert "offline" in result.audit_error
    assert result.to_dict()["audit"] == "failed"
    assert result.value.status == TicketStatus.AWAITING_THIRD_PARTY
    assert result.value.interactions == []
    assert store.tickets[ticket.id].status == TicketStatus.AWAITING_THIRD_PARTY


async def test_update_ignores_immutable_fields(ticket_service, actor, ticket_fields, clock, store) -> None:
    ticket = (await ticket_service.create_ticket(ticket_fields(), actor)).value
    clock.advance(minutes=5)

    result = await ticket_service.update_ticket(
        ticket.id,
        {
            "id": "forged",
            "created_at": "2020-01-01T00:00:00Z",
            "sla_deadline": "2099-01-01T00:00:00Z",
            "status": "closed",
            "priority": "critical",
        },
        actor,
    )

    assert result.ok
    updated = result.value
    assert updated.id == ticket.id
    assert updated.created_at == T0
    assert updated.sla_deadline == ticket.sla_deadline
    assert updated.status == TicketStatus.OPEN
    assert updated.priority.value == "critical"
    assert updated.updated_at == T0 + timedelta(minutes=5)
    assert list(store.tickets) == [ticket.id]


async def test_supplier_change_keeps_deadline(ticket_service, registry, carrier, actor, ticket_fields) -> None:
    slow = (await registry.add_supplier({"name": "SlowSoft", "category": "it-vendor", "sla_hours": 72}, actor)).value
    ticket = (await ticket_service.create_ticket(ticket_fields(supplier_id=carrier.id), actor)).value

    updated = (await ticket_service.update_ticket(ticket.id, {"supplier_id": slow.id}, actor)).value

    assert updated.supplier_id == slow.id
    assert updated.sla_deadline == T0 + timedelta(hours=4)


async def test_supplier_sla_edit_does_not_move_existing_deadlines(ticket_service, registry, carrier, actor, ticket_fields) -> None:
    ticket = (await ticket_service.create_ticket(ticket_fields(supplier_id=carrier.id), actor)).value

    assert (await registry.update_supplier(carrier.id, {"sla_hours": 48})).ok
    reloaded = (await ticket_service.get_ticket(ticket.id)).value
    fresh = (await ticket_service.create_ticket(ticket_fields(supplier_id=carrier.id), actor)).value

    assert reloaded.sla_deadline == T0 + timedelta(hours=4)
    assert fresh.sla_deadline == T0 + timedelta(hours=48)


async def test_update_validates_text(ticket_service, actor, ticket_fields) -> None:
    ticket = (await ticket_service.create_ticket(ticket_fields(), actor)).value

    result = await ticket_service.update_ticket(ticket.id, {"description": "short"}, actor)

    assert result.outcome == Outcome.INVALID
    assert result.reason == "description_too_short"


async def test_add_interaction_returns_reloaded_ticket(ticket_service, actor, other_actor, ticket_fields, clock) -> None:
    ticket = (await ticket_service.create_ticket(ticket_fields(), actor)).value
    clock.advance(minutes=1)

    result = await ticket_service.add_interaction(
        ticket.id, {"message": "Carrier confirmed outage", "type": "call"}, other_actor
    )

    assert result.ok
    assert [i.message for i in result.value.interactions] == ["Carrier confirmed outage"]
    assert result.value.interactions[0].type == InteractionType.CALL
    assert result.value.interactions[0].created_at == T0 + timedelta(minutes=1)


@pytest.mark.parametrize("message", ["", "   \n\t"])
async def test_blank_interaction_is_rejected(ticket_service, actor, ticket_fields, store, message) -> None:
    ticket = (await ticket_service.create_ticket(ticket_fields(), actor)).value

    result = await ticket_service.add_interaction(ticket.id, {"message": message}, actor)

    assert result.outcome == Outcome.INVALID
    assert result.reason == "empty_message"
    assert store.interactions.get(ticket.id, []) == []


async def test_status_change_entries_cannot_be_hand_written(ticket_service, actor, ticket_fields) -> None:
    ticket = (await ticket_service.create_ticket(ticket_fields(), actor)).value

    result = await ticket_service.add_interaction(
        ticket.id, {"message": "Status changed", "type": "status-change"}, actor
    )

    assert result.outcome == Outcome.INVALID
    assert result.reason == "reserved_interaction_type"


async def test_interaction_on_missing_ticket(ticket_service, actor) -> None:
    result = await ticket_service.add_interaction("missing", {"message": "hello"}, actor)
    assert result.outcome == Outcome.NOT_FOUND


async def test_classify_ticket_follows_clock(ticket_service, carrier, actor, ticket_fields, clock) -> None:
    ticket = (await ticket_service.create_ticket(ticket_fields(supplier_id=carrier.id), actor)).value

    clock.advance(hours=3, minutes=30)
    critical = await ticket_service.classify_ticket(ticket.id)
    clock.advance(hours=1, minutes=30)
    overdue = await ticket_service.classify_ticket(ticket.id)

    assert (critical.state, critical.hours_remaining, critical.minutes_remaining) == (SLAState.CRITICAL, 0, 30)
    assert (overdue.state, overdue.hours_overdue) == (SLAState.OVERDUE, 1)


async def test_classify_missing_ticket_is_unavailable(ticket_service) -> None:
    result = await ticket_service.classify_ticket("missing")
    assert result.state == SLAState.UNAVAILABLE


async def test_list_is_newest_first_with_timelines(ticket_service, actor, ticket_fields, clock) -> None:
    first = (await ticket_service.create_ticket(ticket_fields(title="First"), actor)).value
    clock.advance(minutes=10)
    second = (await ticket_service.create_ticket(ticket_fields(title="Second"), actor)).value
    await ticket_service.add_interaction(first.id, {"message": "Waiting on carrier"}, actor)

    tickets = (await ticket_service.list_tickets()).value

    assert [t.id for t in tickets] == [second.id, first.id]
    assert [len(t.interactions) for t in tickets] == [0, 1]


async def test_list_by_asset(ticket_service, actor, ticket_fields) -> None:
    await ticket_service.create_ticket(ticket_fields(related_asset_id="validator-7"), actor)
    await ticket_service.create_ticket(ticket_fields(related_asset_id="router-1"), actor)

    tickets = (await ticket_service.list_tickets_by_asset("validator-7")).value

    assert [t.related_asset_id for t in tickets] == ["validator-7"]


async def test_delete_removes_ticket_and_timeline(ticket_service, actor, ticket_fields, store) -> None:
    ticket = (await ticket_service.create_ticket(ticket_fields(), actor)).value
    await ticket_service.add_interaction(ticket.id, {"message": "Noted"}, actor)

    assert (await ticket_service.delete_ticket(ticket.id)).ok
    assert ticket.id not in store.tickets
    assert ticket.id not in store.interactions
    assert (await ticket_service.delete_ticket(ticket.id)).outcome == Outcome.NOT_FOUND


async def test_summary_counts(ticket_service, registry, carrier, actor, ticket_fields, clock) -> None:
    vendor = (await registry.add_supplier({"name": "BillCo", "category": "billing-system-vendor", "sla_hours": 48}, actor)).value
    late = (await ticket_service.create_ticket(ticket_fields(supplier_id=carrier.id, priority="low"), actor)).value
    await ticket_service.create_ticket(ticket_fields(supplier_id=vendor.id, priority="critical"), actor)
    await ticket_service.create_ticket(ticket_fields(priority="medium"), actor)
    done = (await ticket_service.create_ticket(ticket_fields(supplier_id=carrier.id, priority="high"), actor)).value
    await ticket_service.change_status(done.id, "closed", actor)
    clock.advance(hours=5)

    summary = (await ticket_service.summarize()).value

    assert summary.total_open == 3
    assert summary.open_by_supplier_category == {"carrier": 1, "billing-system-vendor": 1, "unassigned": 1}
    assert summary.open_critical == 1
    assert summary.by_status["open"] == 3
    assert summary.by_status["closed"] == 1
    assert summary.by_status["in-progress"] == 0
    assert summary.by_sla_state == {"overdue": 1, "on_track": 2, "resolved": 1}
    attention_ids = {item.id for item in summary.attention}
    assert late.id in attention_ids
    assert done.id not in attention_ids
    assert len(summary.attention) == 2
