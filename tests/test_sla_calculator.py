from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from ticketdesk.config import SLAState, TicketStatus
from ticketdesk.core import ValidationException
from ticketdesk.tickets.domain import EnginePolicy, SLACalculator

T0 = datetime(2025, 3, 10, 8, 0, tzinfo=timezone.utc)


def test_compute_deadline_adds_hours() -> None:
    assert SLACalculator.compute_deadline(T0, 4) == T0 + timedelta(hours=4)
    assert SLACalculator.compute_deadline(T0, 24) == datetime(2025, 3, 11, 8, 0, tzinfo=timezone.utc)


def test_compute_deadline_treats_naive_as_utc() -> None:
    naive = datetime(2025, 3, 10, 8, 0)
    assert SLACalculator.compute_deadline(naive, 1) == T0 + timedelta(hours=1)


@pytest.mark.parametrize("hours", [0, -3, None, "4", True])
def test_compute_deadline_rejects_non_positive_hours(hours) -> None:
    with pytest.raises(ValidationException) as exc_info:
        SLACalculator.compute_deadline(T0, hours)
    assert exc_info.value.reason == "invalid_sla_hours"


@pytest.mark.parametrize("hours", [float("nan"), float("inf"), float("-inf"), 10**12])
def test_compute_deadline_rejects_unusable_hours(hours) -> None:
    with pytest.raises(ValidationException) as exc_info:
        SLACalculator.compute_deadline(T0, hours)
    assert exc_info.value.reason == "invalid_sla_hours"


def test_four_hour_supplier_goes_critical_then_overdue() -> None:
    deadline = SLACalculator.compute_deadline(T0, 4)

    later = SLACalculator.classify(deadline, TicketStatus.OPEN, now=T0 + timedelta(hours=3, minutes=30))
    assert later.state == SLAState.CRITICAL
    assert later.hours_remaining == 0
    assert later.minutes_remaining == 30

    past = SLACalculator.classify(deadline, TicketStatus.OPEN, now=T0 + timedelta(hours=5))
    assert past.state == SLAState.OVERDUE
    assert past.hours_overdue == 1
    assert past.is_breached


def test_buckets_use_truncated_hours() -> None:
    deadline = T0 + timedelta(hours=12, minutes=59)
    result = SLACalculator.classify(deadline, "open", now=T0)
    assert result.state == SLAState.WARNING
    assert result.hours_remaining == 12

    deadline = T0 + timedelta(hours=13)
    assert SLACalculator.classify(deadline, "open", now=T0).state == SLAState.ON_TRACK

    deadline = T0 + timedelta(hours=4, minutes=59)
    result = SLACalculator.classify(deadline, "open", now=T0)
    assert result.state == SLAState.CRITICAL
    assert (result.hours_remaining, result.minutes_remaining) == (4, 59)


def test_overdue_less_than_an_hour_reports_zero_hours() -> None:
    deadline = T0
    result = SLACalculator.classify(deadline, "in-progress", now=T0 + timedelta(minutes=40))
    assert result.state == SLAState.OVERDUE
    assert result.hours_overdue == 0


def test_deadline_reached_exactly_is_critical() -> None:
    result = SLACalculator.classify(T0, "open", now=T0)
    assert result.state == SLAState.CRITICAL
    assert result.hours_remaining == 0
    assert result.minutes_remaining == 0


@pytest.mark.parametrize("remaining, expected", [
    (timedelta(seconds=-1), SLAState.OVERDUE),
    (timedelta(0), SLAState.CRITICAL),
    (timedelta(hours=4), SLAState.CRITICAL),
    (timedelta(hours=4, minutes=1), SLAState.CRITICAL),
    (timedelta(hours=5), SLAState.WARNING),
    (timedelta(hours=12), SLAState.WARNING),
    (timedelta(hours=12, minutes=1), SLAState.WARNING),
    (timedelta(hours=13), SLAState.ON_TRACK),
])
def test_bucket_boundaries(remaining, expected) -> None:
    result = SLACalculator.classify(T0 + remaining, "open", now=T0)
    assert result.state == expected
    assert result.is_breached == (expected == SLAState.OVERDUE)


@pytest.mark.parametrize("status", ["resolved", "closed"])
def test_resolved_wins_over_overdue(status: str) -> None:
    result = SLACalculator.classify(T0, status, now=T0 + timedelta(days=3))
    assert result.state == SLAState.RESOLVED
    assert not result.is_breached


@pytest.mark.parametrize("deadline", [None, "", "   "])
def test_missing_deadline_is_undefined(deadline) -> None:
    result = SLACalculator.classify(deadline, "open", now=T0)
    assert result.state == SLAState.UNDEFINED
    assert not result.has_answer


def test_malformed_deadline_is_invalid() -> None:
    result = SLACalculator.classify("next tuesday", "open", now=T0)
    assert result.state == SLAState.INVALID
    assert result.error


def test_malformed_deadline_checked_before_resolved() -> None:
    assert SLACalculator.classify("garbage", "closed", now=T0).state == SLAState.INVALID


def test_iso_string_deadline_is_parsed() -> None:
    result = SLACalculator.classify("2025-03-10T10:00:00Z", "open", now=T0)
    assert result.state == SLAState.CRITICAL
    assert result.hours_remaining == 2


def test_unexpected_status_degrades_to_unavailable() -> None:
    result = SLACalculator.classify(T0 + timedelta(hours=1), "on-fire", now=T0)
    assert result.state == SLAState.UNAVAILABLE
    assert result.error


def test_policy_thresholds_drive_buckets() -> None:
    policy = EnginePolicy(critical_threshold_hours=1, warning_threshold_hours=2)
    deadline = T0 + timedelta(hours=3)
    assert policy.classify(deadline, "open", now=T0).state == SLAState.ON_TRACK
    assert policy.classify(deadline, "open", now=T0 + timedelta(hours=1)).state == SLAState.WARNING
    assert policy.classify(deadline, "open", now=T0 + timedelta(hours=2)).state == SLAState.CRITICAL


def test_classification_serializes() -> None:
    result = SLACalculator.classify(T0 + timedelta(hours=2), "open", now=T0)
    assert result.to_dict() == {
        "state": "critical",
        "deadline": "2025-03-10T10:00:00+00:00",
        "hours_remaining": 2,
        "minutes_remaining": 0,
        "hours_overdue": None,
        "is_breached": False,
        "error": None,
    }
