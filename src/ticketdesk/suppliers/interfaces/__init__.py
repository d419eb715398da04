"""
Supplier Interfaces Layer
=========================

FastAPI routes for the supplier registry.
"""

from ticketdesk.suppliers.interfaces.controllers import router as suppliers_router

__all__ = ["suppliers_router"]
