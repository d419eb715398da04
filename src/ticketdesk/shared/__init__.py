"""
Shared Kernel Module
====================

Shared infrastructure and API plumbing used by all bounded contexts
(Supplier Registry and Ticket Lifecycle).

Architecture Pattern: Modular Monolith
- Each module (suppliers, tickets) is a bounded context
- Shared kernel contains only generic infrastructure

DO NOT add ticket or supplier business logic to the shared kernel.
"""
