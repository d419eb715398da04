"""
Supplier Domain Layer
=====================

Pure Python business objects for the Supplier Registry.
"""

from ticketdesk.suppliers.domain.entities import Supplier, validate_sla_hours

__all__ = ["Supplier", "validate_sla_hours"]
