"""
Supplier Domain Entities
========================

Support vendors tickets are filed against. Each carries the default SLA
duration applied to new tickets.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ticketdesk.config import MAX_SLA_HOURS, SupplierCategory
from ticketdesk.core.exceptions import ValidationException


def validate_sla_hours(value) -> int:
    """SLA hours must be a positive integer no larger than ``MAX_SLA_HOURS``."""
    if isinstance(value, bool) or not isinstance(value, int) or not 0 < value <= MAX_SLA_HOURS:
        raise ValidationException(
            f"SLA hours must be an integer between 1 and {MAX_SLA_HOURS}",
            reason="invalid_sla_hours",
            details={"field": "sla_hours", "value": value}
        )
    return value


@dataclass
class Supplier:
    """
    Supplier entity.

    ``sla_hours`` is read once when a ticket is created; later edits to it
    never move deadlines of existing tickets.
    """

    id: str
    name: str
    category: SupplierCategory
    sla_hours: int
    active: bool = True

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None

    def __post_init__(self):
        """Validate supplier on initialization."""
        if not self.name or not self.name.strip():
            raise ValidationException(
                "Supplier name is required",
                reason="missing_name",
                details={"field": "name"}
            )
        try:
            self.category = SupplierCategory(self.category)
        except ValueError:
            raise ValidationException(
                f"Unknown supplier category '{self.category}'",
                reason="invalid_category",
                details={"field": "category", "value": self.category}
            )
        validate_sla_hours(self.sla_hours)
