"""
Ticketdesk
==========

Ticket lifecycle and SLA tracking engine for support tickets filed
against external suppliers.
"""

__version__ = "1.0.0"
