"""
Interaction Timeline
====================

Display ordering for a ticket's audit trail.
"""

from typing import Iterable, List

from ticketdesk.core.clock import ensure_utc
from ticketdesk.tickets.domain.entities import Interaction


def order_for_display(interactions: Iterable[Interaction]) -> List[Interaction]:
    """
    Most recent first.

    Entries sharing a timestamp keep insertion order: by ``sequence`` when
    every entry has one (so the result does not depend on how the input
    was arranged), by input position otherwise. Returns a new list; the
    input is left untouched.
    """
    entries = list(interactions)
    if all(entry.sequence is not None for entry in entries):
        entries.sort(key=lambda entry: entry.sequence)
    # sort() is stable with reverse=True, so ties keep the order above
    return sorted(entries, key=lambda entry: ensure_utc(entry.created_at), reverse=True)
