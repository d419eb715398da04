"""
Ticket Application Services
===========================

Application services orchestrate business logic and coordinate between
domain entities and repositories.

Following SOLID principles:
- Single Responsibility: the lifecycle service owns the ticket workflow
- Dependency Inversion: depends on repository and clock abstractions

Every public method returns a result object; none raises. Each repository
call is its own unit of work, so a status change and its audit entry are
two writes and the second may fail on its own.
"""

from abc import ABC, abstractmethod
from collections import Counter
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from ticketdesk.config import (
    AuditOutcome,
    SLAState,
    TicketPriority,
    TicketStatus,
)
from ticketdesk.core import (
    Actor,
    IClock,
    OperationResult,
    ResourceNotFoundException,
    StatusChangeResult,
    SystemClock,
    result_from_exception,
)
from ticketdesk.shared.infrastructure.logging import get_logger
from ticketdesk.suppliers.application import SupplierRegistry
from ticketdesk.suppliers.domain import Supplier
from ticketdesk.tickets.application.dto import (
    AttentionItem,
    InteractionCreateDTO,
    TicketCreateDTO,
    TicketSummaryResponse,
    TicketUpdateDTO,
)
from ticketdesk.tickets.domain import (
    EnginePolicy,
    Interaction,
    SLAClassification,
    Ticket,
    order_for_display,
)

logger = get_logger(__name__)


# ========== Repository Interfaces (Dependency Inversion) ==========

class ITicketRepository(ABC):
    """
    Interface for ticket data access.

    Tickets come back without their timeline; the service attaches it
    from ``IInteractionRepository``.
    """

    @abstractmethod
    async def insert(self, ticket: Ticket) -> Ticket:
        """Persist a new ticket."""

    @abstractmethod
    async def get_by_id(self, ticket_id: str) -> Optional[Ticket]:
        """Get ticket by ID."""

    @abstractmethod
    async def update_by_id(self, ticket_id: str, changes: Dict[str, Any]) -> Optional[Ticket]:
        """Apply field changes; None when the ticket does not exist."""

    @abstractmethod
    async def delete_by_id(self, ticket_id: str) -> bool:
        """Delete ticket and its timeline; False when it did not exist."""

    @abstractmethod
    async def list_ordered_by_creation(self, descending: bool = True) -> List[Ticket]:
        """All tickets ordered by ``created_at``."""


class IInteractionRepository(ABC):
    """Interface for the append-only interaction log."""

    @abstractmethod
    async def insert_interaction(self, interaction: Interaction) -> Interaction:
        """Append an entry; the stored copy carries its ``sequence``."""

    @abstractmethod
    async def list_for_tickets(self, ticket_ids: List[str]) -> Dict[str, List[Interaction]]:
        """Entries per ticket, oldest first."""


class IPolicyProvider(ABC):
    """Interface for engine policy access."""

    @abstractmethod
    def get_policy(self) -> EnginePolicy:
        """Get current engine policy."""


class StaticPolicyProvider(IPolicyProvider):
    """Policy fixed at construction."""

    def __init__(self, policy: Optional[EnginePolicy] = None):
        self._policy = policy or EnginePolicy()

    def get_policy(self) -> EnginePolicy:
        return self._policy


def _validation_failure(exc: ValidationError) -> OperationResult:
    errors = [
        {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
        for err in exc.errors()
    ]
    return OperationResult.invalid("invalid_payload", "Payload failed validation", {"errors": errors})


# ========== Application Services ==========

class TicketLifecycleService:
    """
    Ticket state machine, timeline and duplication on top of the store.

    Collaborators:
        ticket_repository: ticket rows
        interaction_repository: the audit trail
        supplier_registry: SLA-hour lookups at intake
        policy_provider: thresholds, limits and the transition table
        clock: current instant (inject ``FixedClock`` in tests)
    """

    def __init__(
        self,
        ticket_repository: ITicketRepository,
        interaction_repository: IInteractionRepository,
        supplier_registry: SupplierRegistry,
        policy_provider: Optional[IPolicyProvider] = None,
        clock: Optional[IClock] = None
    ):
        self._tickets = ticket_repository
        self._interactions = interaction_repository
        self._suppliers = supplier_registry
        self._policy_provider = policy_provider or StaticPolicyProvider()
        self._clock = clock or SystemClock()

    @property
    def policy(self) -> EnginePolicy:
        return self._policy_provider.get_policy()

    # ---------- Intake ----------

    async def create_ticket(
        self,
        fields: Union[TicketCreateDTO, dict],
        actor: Actor,
        supplier: Optional[Supplier] = None
    ) -> OperationResult[Ticket]:
        """
        Open a ticket.

        SLA hours come from ``supplier`` when given, else from the supplier
        named by ``supplier_id``; the policy default (24h) applies when
        neither resolves.
        """
        try:
            dto = fields if isinstance(fields, TicketCreateDTO) else TicketCreateDTO.model_validate(fields)
        except ValidationError as exc:
            return _validation_failure(exc)

        try:
            policy = self.policy
            now = self._clock.now()

            data = dto.model_dump()
            if supplier is None:
                supplier = await self._suppliers.get_supplier(dto.supplier_id)
            elif not data.get("supplier_id"):
                data["supplier_id"] = supplier.id
            sla_hours = supplier.sla_hours if supplier else policy.default_sla_hours

            ticket = Ticket.create(data, sla_hours, now, actor, policy)
            created = await self._tickets.insert(ticket)

            logger.info(
                "Ticket created",
                extra={
                    "ticket_id": created.id,
                    "supplier_id": created.supplier_id,
                    "sla_hours": sla_hours,
                    "sla_deadline": created.sla_deadline.isoformat(),
                    "actor_id": actor.id,
                }
            )
            return OperationResult.success(created)
        except Exception as exc:
            return self._failure("create_ticket", exc)

    # ---------- State machine ----------

    async def change_status(
        self,
        ticket_id: str,
        new_status: Union[TicketStatus, str],
        actor: Actor
    ) -> StatusChangeResult[Ticket]:
        """
        Move a ticket to ``new_status``.

        Same-status requests come back ``rejected`` with nothing written.
        The status write and the audit entry are separate; when the audit
        insert fails the status change still stands and
        ``result.audit == AuditOutcome.FAILED``.
        """
        try:
            policy = self.policy
            now = self._clock.now()

            ticket = await self._load(ticket_id)
            previous = ticket.status
            interaction = ticket.change_status(
                new_status,
                actor,
                now,
                table=policy.transition_table(),
                clear_resolved_at_on_reopen=policy.clear_resolved_at_on_reopen
            )

            if await self._tickets.update_by_id(ticket_id, ticket.status_fields()) is None:
                raise ResourceNotFoundException("Ticket", ticket_id)
        except Exception as exc:
            return StatusChangeResult(
                status=self._failure("change_status", exc, ticket_id=ticket_id, new_status=str(new_status)),
                audit=AuditOutcome.SKIPPED
            )

        logger.info(
            "Ticket status changed",
            extra={
                "ticket_id": ticket_id,
                "from_status": previous.value,
                "to_status": ticket.status.value,
                "actor_id": actor.id,
            }
        )

        audit, audit_error = AuditOutcome.OK, None
        try:
            await self._interactions.insert_interaction(interaction)
        except Exception as exc:
            audit, audit_error = AuditOutcome.FAILED, str(exc)
            ticket.interactions.remove(interaction)
            logger.error(
                "Status change committed without audit entry",
                extra={"ticket_id": ticket_id, "to_status": ticket.status.value, "error": str(exc)}
            )

        snapshot = await self._reload_or(ticket)
        return StatusChangeResult(
            status=OperationResult.success(snapshot),
            audit=audit,
            audit_error=audit_error
        )

    async def update_ticket(
        self,
        ticket_id: str,
        partial: Union[TicketUpdateDTO, dict],
        actor: Actor
    ) -> OperationResult[Ticket]:
        """
        Edit ticket fields.

        ``id``, ``created_at`` and ``sla_deadline`` (and the fields owned by
        other operations, like ``status``) are dropped from the payload
        without error. Changing ``supplier_id`` keeps the deadline.
        """
        raw = partial.model_dump(exclude_unset=True) if isinstance(partial, TicketUpdateDTO) else dict(partial)
        ignored = sorted(k for k in raw if k in Ticket.IMMUTABLE_FIELDS | Ticket.LIFECYCLE_FIELDS)
        try:
            changes = TicketUpdateDTO.model_validate(raw).model_dump(exclude_unset=True)
        except ValidationError as exc:
            return _validation_failure(exc)

        try:
            ticket = await self._load(ticket_id)
            applied, dropped = ticket.apply_update(changes, self._clock.now(), self.policy)

            if ignored or dropped:
                logger.info(
                    "Ticket update ignored fields",
                    extra={"ticket_id": ticket_id, "fields": sorted(set(ignored) | set(dropped))}
                )

            if await self._tickets.update_by_id(ticket_id, applied) is None:
                raise ResourceNotFoundException("Ticket", ticket_id)

            logger.info(
                "Ticket updated",
                extra={"ticket_id": ticket_id, "fields": sorted(applied), "actor_id": actor.id}
            )
            return OperationResult.success(await self._reload_or(ticket))
        except Exception as exc:
            return self._failure("update_ticket", exc, ticket_id=ticket_id)

    # ---------- Timeline ----------

    async def add_interaction(
        self,
        ticket_id: str,
        interaction: Union[InteractionCreateDTO, dict],
        actor: Actor
    ) -> OperationResult[Ticket]:
        """
        Append a user-written entry and return the reloaded ticket.

        Blank (whitespace-only) messages are rejected before any write.
        """
        try:
            dto = (
                interaction if isinstance(interaction, InteractionCreateDTO)
                else InteractionCreateDTO.model_validate(interaction)
            )
        except ValidationError as exc:
            return _validation_failure(exc)

        try:
            entry = Interaction.authored(ticket_id, actor, dto.message, dto.type, self._clock.now())
            await self._load(ticket_id)
            stored = await self._interactions.insert_interaction(entry)

            logger.info(
                "Interaction recorded",
                extra={
                    "ticket_id": ticket_id,
                    "interaction_id": stored.id,
                    "interaction_type": stored.type.value,
                    "actor_id": actor.id,
                }
            )
            return OperationResult.success(await self._load(ticket_id))
        except Exception as exc:
            return self._failure("add_interaction", exc, ticket_id=ticket_id)

    async def timeline(self, ticket_id: str) -> OperationResult[List[Interaction]]:
        """The ticket's interactions, most recent first."""
        try:
            ticket = await self._load(ticket_id)
            return OperationResult.success(order_for_display(ticket.interactions))
        except Exception as exc:
            return self._failure("timeline", exc, ticket_id=ticket_id)

    # ---------- Duplication ----------

    async def duplicate_ticket(self, ticket_id: str, actor: Actor) -> OperationResult[Ticket]:
        """
        Open a copy of a ticket.

        The copy keeps the source deadline, even when it has already
        passed, unless the policy disables ``carry_over_deadline``.
        """
        try:
            policy = self.policy
            source = await self._load(ticket_id)

            sla_hours = None
            if not policy.carry_over_deadline:
                sla_hours = await self._suppliers.resolve_sla_hours(source.supplier_id, policy.default_sla_hours)

            copy = source.duplicate(actor, self._clock.now(), policy, sla_hours=sla_hours)
            created = await self._tickets.insert(copy)

            logger.info(
                "Ticket duplicated",
                extra={
                    "ticket_id": created.id,
                    "source_ticket_id": ticket_id,
                    "carry_over_deadline": policy.carry_over_deadline,
                    "actor_id": actor.id,
                }
            )
            return OperationResult.success(created)
        except Exception as exc:
            return self._failure("duplicate_ticket", exc, ticket_id=ticket_id)

    # ---------- SLA ----------

    def classify(self, ticket: Ticket) -> SLAClassification:
        """Current SLA bucket of an already loaded ticket."""
        return self.policy.classify(ticket.sla_deadline, ticket.status, self._clock.now())

    async def classify_ticket(self, ticket_id: str) -> SLAClassification:
        """Load and classify; store errors come back as ``unavailable``."""
        try:
            ticket = await self._load(ticket_id)
        except Exception as exc:
            logger.error(
                "SLA classification unavailable",
                extra={"ticket_id": ticket_id, "error": str(exc)}
            )
            return SLAClassification(state=SLAState.UNAVAILABLE, error=str(exc))
        return self.classify(ticket)

    # ---------- Reads ----------

    async def get_ticket(self, ticket_id: str) -> OperationResult[Ticket]:
        try:
            return OperationResult.success(await self._load(ticket_id))
        except Exception as exc:
            return self._failure("get_ticket", exc, ticket_id=ticket_id)

    async def list_tickets(self) -> OperationResult[List[Ticket]]:
        """Every ticket, newest first, each with its full timeline."""
        try:
            tickets = await self._tickets.list_ordered_by_creation(descending=True)
            timelines = await self._interactions.list_for_tickets([t.id for t in tickets])
            for ticket in tickets:
                ticket.interactions = timelines.get(ticket.id, [])
            return OperationResult.success(tickets)
        except Exception as exc:
            return self._failure("list_tickets", exc)

    async def list_tickets_by_asset(self, asset_id: str) -> OperationResult[List[Ticket]]:
        result = await self.list_tickets()
        if not result.ok:
            return result
        return OperationResult.success([t for t in result.value if t.related_asset_id == asset_id])

    async def delete_ticket(self, ticket_id: str) -> OperationResult[bool]:
        try:
            if not await self._tickets.delete_by_id(ticket_id):
                raise ResourceNotFoundException("Ticket", ticket_id)
            logger.info("Ticket deleted", extra={"ticket_id": ticket_id})
            return OperationResult.success(True)
        except Exception as exc:
            return self._failure("delete_ticket", exc, ticket_id=ticket_id)

    async def summarize(self) -> OperationResult[TicketSummaryResponse]:
        """Dashboard numbers over the current collection."""
        try:
            tickets = await self._tickets.list_ordered_by_creation(descending=True)
        except Exception as exc:
            return self._failure("summarize", exc)

        suppliers = await self._suppliers.list_suppliers()
        categories = {s.id: s.category.value for s in (suppliers.value or [])} if suppliers.ok else {}

        by_status = Counter({status.value: 0 for status in TicketStatus})
        by_sla_state: Counter = Counter()
        by_category: Counter = Counter()
        attention: List[AttentionItem] = []
        open_critical = 0
        total_open = 0

        for ticket in tickets:
            by_status[ticket.status.value] += 1
            classification = self.classify(ticket)
            by_sla_state[classification.state.value] += 1

            if ticket.is_resolved:
                continue
            total_open += 1
            by_category[categories.get(ticket.supplier_id, "unassigned")] += 1
            if ticket.priority == TicketPriority.CRITICAL:
                open_critical += 1
            if ticket.priority in (TicketPriority.HIGH, TicketPriority.CRITICAL) or classification.is_breached:
                attention.append(AttentionItem(
                    id=ticket.id,
                    title=ticket.title,
                    priority=ticket.priority.value,
                    status=ticket.status.value,
                    sla_state=classification.state.value,
                ))

        return OperationResult.success(TicketSummaryResponse(
            total_open=total_open,
            open_by_supplier_category=dict(by_category),
            open_critical=open_critical,
            by_status=dict(by_status),
            by_sla_state=dict(by_sla_state),
            attention=attention,
        ))

    # ---------- Helpers ----------

    async def _load(self, ticket_id: str) -> Ticket:
        """Fresh snapshot of a ticket with its timeline."""
        ticket = await self._tickets.get_by_id(ticket_id)
        if ticket is None:
            raise ResourceNotFoundException("Ticket", ticket_id)
        timelines = await self._interactions.list_for_tickets([ticket_id])
        ticket.interactions = timelines.get(ticket_id, [])
        return ticket

    async def _reload_or(self, fallback: Ticket) -> Ticket:
        """Reload after a committed write; keep the local copy if that fails."""
        try:
            return await self._load(fallback.id)
        except Exception as exc:
            logger.warning(
                "Reload after write failed, returning local snapshot",
                extra={"ticket_id": fallback.id, "error": str(exc)}
            )
            return fallback

    def _failure(self, operation: str, exc: Exception, **context) -> OperationResult:
        result = result_from_exception(exc)
        log = logger.error if result.reason == "backend_error" else logger.info
        log(
            f"{operation} did not complete",
            extra={"operation": operation, "outcome": result.outcome.value, "error": str(exc), **context}
        )
        return result
