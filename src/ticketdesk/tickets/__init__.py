"""
Tickets Module
==============

Bounded Context for the ticket lifecycle.

Responsibilities:
- Open tickets with an SLA deadline fixed at creation
- Move tickets through their status state machine, auditing every change
- Keep the append-only interaction timeline
- Classify SLA urgency (overdue, critical, warning, on track)
- Duplicate tickets and summarize the collection for dashboards
"""
