"""
Supplier Infrastructure Repositories
====================================

SQLAlchemy implementation of ``ISupplierRepository``.
"""

from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ticketdesk.core import RepositoryException, ensure_utc
from ticketdesk.infrastructure.database import session_scope
from ticketdesk.suppliers.application import ISupplierRepository
from ticketdesk.suppliers.domain import Supplier
from ticketdesk.suppliers.infrastructure.models import SupplierModel


def _parse_uuid(value: str) -> Optional[UUID]:
    try:
        return UUID(str(value))
    except ValueError:
        return None


def supplier_to_domain(model: SupplierModel) -> Supplier:
    return Supplier(
        id=str(model.id),
        name=model.name,
        category=model.category,
        sla_hours=model.sla_hours,
        active=model.active,
        created_at=ensure_utc(model.created_at) if model.created_at else None,
        updated_at=ensure_utc(model.updated_at) if model.updated_at else None,
        created_by=model.created_by,
    )


class SQLAlchemySupplierRepository(ISupplierRepository):
    """
    Supplier persistence using async SQLAlchemy.

    Every call runs in its own session and transaction.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def get_by_id(self, supplier_id: str) -> Optional[Supplier]:
        supplier_uuid = _parse_uuid(supplier_id)
        if supplier_uuid is None:
            return None
        try:
            async with session_scope(self._session_maker) as session:
                model = await session.get(SupplierModel, supplier_uuid)
                return supplier_to_domain(model) if model else None
        except SQLAlchemyError as exc:
            raise RepositoryException(f"Failed to load supplier {supplier_id}: {exc}")

    async def list_active(self) -> List[Supplier]:
        stmt = (
            select(SupplierModel)
            .where(SupplierModel.active.is_(True))
            .order_by(SupplierModel.name.asc())
        )
        return await self._list(stmt)

    async def list_all(self) -> List[Supplier]:
        return await self._list(select(SupplierModel).order_by(SupplierModel.name.asc()))

    async def _list(self, stmt) -> List[Supplier]:
        try:
            async with session_scope(self._session_maker) as session:
                result = await session.execute(stmt)
                return [supplier_to_domain(m) for m in result.scalars().all()]
        except SQLAlchemyError as exc:
            raise RepositoryException(f"Failed to list suppliers: {exc}")

    async def insert(self, supplier: Supplier) -> Supplier:
        model = SupplierModel(
            id=UUID(supplier.id),
            name=supplier.name,
            category=supplier.category.value,
            sla_hours=supplier.sla_hours,
            active=supplier.active,
            created_at=supplier.created_at,
            updated_at=supplier.updated_at,
            created_by=supplier.created_by,
        )
        try:
            async with session_scope(self._session_maker) as session:
                session.add(model)
                await session.flush()
                return supplier_to_domain(model)
        except SQLAlchemyError as exc:
            raise RepositoryException(f"Failed to insert supplier: {exc}")

    async def update_by_id(self, supplier_id: str, changes: dict[str, Any]) -> Optional[Supplier]:
        supplier_uuid = _parse_uuid(supplier_id)
        if supplier_uuid is None:
            return None
        try:
            async with session_scope(self._session_maker) as session:
                model = await session.get(SupplierModel, supplier_uuid)
                if model is None:
                    return None
                for key, value in changes.items():
                    setattr(model, key, getattr(value, "value", value))
                await session.flush()
                return supplier_to_domain(model)
        except SQLAlchemyError as exc:
            raise RepositoryException(f"Failed to update supplier {supplier_id}: {exc}")

    async def delete_by_id(self, supplier_id: str) -> bool:
        supplier_uuid = _parse_uuid(supplier_id)
        if supplier_uuid is None:
            return False
        try:
            async with session_scope(self._session_maker) as session:
                model = await session.get(SupplierModel, supplier_uuid)
                if model is None:
                    return False
                await session.delete(model)
                return True
        except SQLAlchemyError as exc:
            raise RepositoryException(f"Failed to delete supplier {supplier_id}: {exc}")
