"""
Supplier Infrastructure Layer
=============================

- Models: SQLAlchemy ORM models
- Repositories: Data access layer
"""

from ticketdesk.suppliers.infrastructure.models import SupplierModel
from ticketdesk.suppliers.infrastructure.repositories import SQLAlchemySupplierRepository

__all__ = [
    "SupplierModel",
    "SQLAlchemySupplierRepository",
]
