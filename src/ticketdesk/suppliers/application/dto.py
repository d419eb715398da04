"""
Supplier Application DTOs
=========================

Pydantic models for the supplier API surface.
"""

from datetime import datetime
from typing import Optional, Literal

from pydantic import BaseModel, ConfigDict, Field

from ticketdesk.config import MAX_SLA_HOURS


SupplierCategoryStr = Literal["carrier", "billing-system-vendor", "it-vendor", "other"]


class SupplierCreateDTO(BaseModel):
    """DTO for registering a supplier."""
    name: str = Field(..., min_length=1, description="Supplier name")
    category: SupplierCategoryStr = Field(default="other", description="Supplier category")
    sla_hours: int = Field(..., ge=1, le=MAX_SLA_HOURS, description="Default SLA in hours for new tickets")
    active: bool = Field(default=True, description="Whether the supplier can be picked")


class SupplierUpdateDTO(BaseModel):
    """DTO for editing a supplier. Unknown keys are dropped."""
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = Field(None, min_length=1)
    category: Optional[SupplierCategoryStr] = None
    sla_hours: Optional[int] = Field(None, ge=1, le=MAX_SLA_HOURS)
    active: Optional[bool] = None


class SupplierResponse(BaseModel):
    """Response model for a supplier."""
    id: str
    name: str
    category: SupplierCategoryStr
    sla_hours: int
    active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, supplier) -> "SupplierResponse":
        return cls(
            id=supplier.id,
            name=supplier.name,
            category=supplier.category.value,
            sla_hours=supplier.sla_hours,
            active=supplier.active,
            created_at=supplier.created_at,
            updated_at=supplier.updated_at,
        )
