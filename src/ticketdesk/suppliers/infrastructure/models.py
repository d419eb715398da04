"""
Supplier Infrastructure Models
==============================

SQLAlchemy ORM model for the Supplier entity.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ticketdesk.config import SupplierCategory
from ticketdesk.infrastructure.database import Base


class SupplierModel(Base):
    """
    Database model for Supplier entity.

    Maps to the 'ticket_suppliers' table.
    """
    __tablename__ = "ticket_suppliers"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False, default=SupplierCategory.OTHER.value)
    sla_hours: Mapped[int] = mapped_column(Integer, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    created_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
