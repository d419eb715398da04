"""
Ticket Infrastructure Repositories
==================================

SQLAlchemy implementations of the ticket repository interfaces.

Every call runs in its own session and transaction (see
``ticketdesk.infrastructure.database.session_scope``).
"""

from collections import defaultdict
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ticketdesk.core import RepositoryException, ensure_utc
from ticketdesk.infrastructure.database import session_scope
from ticketdesk.tickets.application import IInteractionRepository, ITicketRepository
from ticketdesk.tickets.domain import Interaction, SupplierContact, Ticket
from ticketdesk.tickets.infrastructure.models import InteractionModel, TicketModel


def _parse_uuid(value: str) -> Optional[UUID]:
    try:
        return UUID(str(value))
    except ValueError:
        return None


def _to_column(value: Any) -> Any:
    """Domain value to what the column stores."""
    if isinstance(value, SupplierContact):
        return value.to_dict()
    return getattr(value, "value", value)


def _utc(value):
    return ensure_utc(value) if value is not None else None


def ticket_to_domain(model: TicketModel) -> Ticket:
    return Ticket(
        id=str(model.id),
        title=model.title,
        description=model.description,
        supplier_id=model.supplier_id,
        type=model.type,
        status=model.status,
        priority=model.priority,
        unit=model.unit,
        owner_id=model.owner_id,
        owner_name=model.owner_name,
        sla_deadline=_utc(model.sla_deadline),
        created_at=ensure_utc(model.created_at),
        updated_at=ensure_utc(model.updated_at),
        related_asset_id=model.related_asset_id,
        related_asset_name=model.related_asset_name,
        external_protocol=model.external_protocol,
        supplier_contact=SupplierContact.from_dict(model.supplier_contact),
        resolved_at=_utc(model.resolved_at),
        created_by=model.created_by,
        interactions=[],
    )


def interaction_to_domain(model: InteractionModel) -> Interaction:
    return Interaction(
        id=str(model.id),
        ticket_id=str(model.ticket_id),
        author_id=model.author_id,
        author_name=model.author_name,
        message=model.message,
        type=model.type,
        created_at=ensure_utc(model.created_at),
        sequence=model.sequence,
    )


class SQLAlchemyTicketRepository(ITicketRepository):
    """Ticket persistence using async SQLAlchemy."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def insert(self, ticket: Ticket) -> Ticket:
        model = TicketModel(
            id=UUID(ticket.id),
            title=ticket.title,
            description=ticket.description,
            type=ticket.type.value,
            status=ticket.status.value,
            priority=ticket.priority.value,
            unit=ticket.unit,
            supplier_id=ticket.supplier_id,
            external_protocol=ticket.external_protocol,
            supplier_contact=_to_column(ticket.supplier_contact),
            owner_id=ticket.owner_id,
            owner_name=ticket.owner_name,
            created_by=ticket.created_by,
            related_asset_id=ticket.related_asset_id,
            related_asset_name=ticket.related_asset_name,
            sla_deadline=ticket.sla_deadline,
            created_at=ticket.created_at,
            updated_at=ticket.updated_at,
            resolved_at=ticket.resolved_at,
        )
        try:
            async with session_scope(self._session_maker) as session:
                session.add(model)
                await session.flush()
                return ticket_to_domain(model)
        except SQLAlchemyError as exc:
            raise RepositoryException(f"Failed to insert ticket: {exc}")

    async def get_by_id(self, ticket_id: str) -> Optional[Ticket]:
        ticket_uuid = _parse_uuid(ticket_id)
        if ticket_uuid is None:
            return None
        try:
            async with session_scope(self._session_maker) as session:
                model = await session.get(TicketModel, ticket_uuid)
                return ticket_to_domain(model) if model else None
        except SQLAlchemyError as exc:
            raise RepositoryException(f"Failed to load ticket {ticket_id}: {exc}")

    async def update_by_id(self, ticket_id: str, changes: Dict[str, Any]) -> Optional[Ticket]:
        ticket_uuid = _parse_uuid(ticket_id)
        if ticket_uuid is None:
            return None
        try:
            async with session_scope(self._session_maker) as session:
                model = await session.get(TicketModel, ticket_uuid)
                if model is None:
                    return None
                for key, value in changes.items():
                    setattr(model, key, _to_column(value))
                await session.flush()
                return ticket_to_domain(model)
        except SQLAlchemyError as exc:
            raise RepositoryException(f"Failed to update ticket {ticket_id}: {exc}")

    async def delete_by_id(self, ticket_id: str) -> bool:
        ticket_uuid = _parse_uuid(ticket_id)
        if ticket_uuid is None:
            return False
        try:
            async with session_scope(self._session_maker) as session:
                model = await session.get(TicketModel, ticket_uuid)
                if model is None:
                    return False
                await session.execute(
                    delete(InteractionModel).where(InteractionModel.ticket_id == ticket_uuid)
                )
                await session.delete(model)
                return True
        except SQLAlchemyError as exc:
            raise RepositoryException(f"Failed to delete ticket {ticket_id}: {exc}")

    async def list_ordered_by_creation(self, descending: bool = True) -> List[Ticket]:
        order = TicketModel.created_at.desc() if descending else TicketModel.created_at.asc()
        try:
            async with session_scope(self._session_maker) as session:
                result = await session.execute(select(TicketModel).order_by(order))
                return [ticket_to_domain(m) for m in result.scalars().all()]
        except SQLAlchemyError as exc:
            raise RepositoryException(f"Failed to list tickets: {exc}")


class SQLAlchemyInteractionRepository(IInteractionRepository):
    """Append-only interaction log using async SQLAlchemy."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def insert_interaction(self, interaction: Interaction) -> Interaction:
        ticket_uuid = _parse_uuid(interaction.ticket_id)
        if ticket_uuid is None:
            raise RepositoryException(f"Invalid ticket id {interaction.ticket_id}")
        try:
            async with session_scope(self._session_maker) as session:
                last = await session.scalar(
                    select(func.max(InteractionModel.sequence))
                    .where(InteractionModel.ticket_id == ticket_uuid)
                )
                model = InteractionModel(
                    id=UUID(interaction.id),
                    ticket_id=ticket_uuid,
                    sequence=(last or 0) + 1,
                    author_id=interaction.author_id,
                    author_name=interaction.author_name,
                    message=interaction.message,
                    type=interaction.type.value,
                    created_at=interaction.created_at,
                )
                session.add(model)
                await session.flush()
                return interaction_to_domain(model)
        except SQLAlchemyError as exc:
            raise RepositoryException(f"Failed to record interaction: {exc}")

    async def list_for_tickets(self, ticket_ids: List[str]) -> Dict[str, List[Interaction]]:
        ticket_uuids = [u for u in (_parse_uuid(t) for t in ticket_ids) if u is not None]
        if not ticket_uuids:
            return {}

        stmt = (
            select(InteractionModel)
            .where(InteractionModel.ticket_id.in_(ticket_uuids))
            .order_by(InteractionModel.created_at.asc(), InteractionModel.sequence.asc())
        )
        try:
            async with session_scope(self._session_maker) as session:
                result = await session.execute(stmt)
                grouped: Dict[str, List[Interaction]] = defaultdict(list)
                for model in result.scalars().all():
                    grouped[str(model.ticket_id)].append(interaction_to_domain(model))
                return dict(grouped)
        except SQLAlchemyError as exc:
            raise RepositoryException(f"Failed to list interactions: {exc}")
