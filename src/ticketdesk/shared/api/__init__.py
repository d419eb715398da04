"""
Shared API
==========

Middleware and dependencies shared by every router.
"""
