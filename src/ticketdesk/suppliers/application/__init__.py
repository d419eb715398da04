"""
Supplier Application Layer
==========================

Contains:
- Services: the Supplier Registry
- DTOs: request/response models for the API
"""

from ticketdesk.suppliers.application.dto import (
    SupplierCreateDTO,
    SupplierUpdateDTO,
    SupplierResponse,
)
from ticketdesk.suppliers.application.services import (
    ISupplierRepository,
    SupplierRegistry,
)

__all__ = [
    # DTOs
    "SupplierCreateDTO",
    "SupplierUpdateDTO",
    "SupplierResponse",
    # Services
    "SupplierRegistry",
    # Repository Interfaces
    "ISupplierRepository",
]
