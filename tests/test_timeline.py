from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

from ticketdesk.config import InteractionType
from ticketdesk.tickets.domain import Interaction, order_for_display

T0 = datetime(2025, 3, 10, 8, 0, tzinfo=timezone.utc)


def entry(n: int, at: datetime, sequence=None) -> Interaction:
    return Interaction(
        id=f"i-{n}",
        ticket_id="t-1",
        author_id="op-1",
        author_name="Ana Souza",
        message=f"entry {n}",
        type=InteractionType.COMMENT,
        created_at=at,
        sequence=sequence,
    )


def test_most_recent_first() -> None:
    entries = [entry(1, T0, 1), entry(2, T0 + timedelta(minutes=5), 2), entry(3, T0 + timedelta(minutes=1), 3)]
    assert [e.id for e in order_for_display(entries)] == ["i-2", "i-3", "i-1"]


def test_does_not_mutate_input() -> None:
    entries = [entry(1, T0, 1), entry(2, T0 + timedelta(minutes=5), 2)]
    order_for_display(entries)
    assert [e.id for e in entries] == ["i-1", "i-2"]


def test_idempotent() -> None:
    entries = [entry(n, T0 + timedelta(minutes=n % 3), n) for n in range(1, 8)]
    once = order_for_display(entries)
    assert order_for_display(once) == once


def test_ties_resolved_by_sequence_regardless_of_input_order() -> None:
    entries = [entry(n, T0, n) for n in range(1, 6)] + [entry(9, T0 + timedelta(seconds=1), 9)]
    expected = [e.id for e in order_for_display(entries)]

    shuffled = list(entries)
    random.Random(7).shuffle(shuffled)

    assert [e.id for e in order_for_display(shuffled)] == expected
    assert expected == ["i-9", "i-1", "i-2", "i-3", "i-4", "i-5"]


def test_ties_without_sequence_keep_input_order() -> None:
    entries = [entry(1, T0), entry(2, T0), entry(3, T0 - timedelta(minutes=1))]
    assert [e.id for e in order_for_display(entries)] == ["i-1", "i-2", "i-3"]


def test_naive_and_aware_timestamps_compare() -> None:
    naive = entry(1, datetime(2025, 3, 10, 9, 0), 1)
    aware = entry(2, T0, 2)
    assert [e.id for e in order_for_display([aware, naive])] == ["i-1", "i-2"]


def test_empty() -> None:
    assert order_for_display([]) == []
