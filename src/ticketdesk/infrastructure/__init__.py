"""
Infrastructure Layer
=====================

Storage wiring shared by the bounded contexts:
- Database engine and session management (SQLAlchemy)
- In-memory store used when ``storage_backend == "memory"``
"""
