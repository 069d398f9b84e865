"""Tests for the append-only ActivityLog."""

import pytest
from datetime import datetime, timezone
from decimal import Decimal

from slicingpie_domain.lifecycle import ActivityLog
from slicingpie_domain.schemas import ActivityEvent

from fakes import SequentialIds, StepClock


@pytest.fixture
def log():
    return ActivityLog(clock=StepClock(), id_factory=SequentialIds("e"))


def test_add_event_records_fields(log):
    event = log.add_event("deleted", "contributor", "c1", "Alice", Decimal("2000"), cascade_count=3)

    assert event.id == "e-1"
    assert event.action == "deleted"
    assert event.target_kind == "contributor"
    assert event.target_label == "Alice"
    assert event.slices_affected == Decimal("2000")
    assert event.cascade_count == 3
    assert log.events == (event,)


def test_contribution_events_have_no_cascade_count(log):
    event = log.add_event("restored", "contribution", "k1", "cash contribution (Bob)", Decimal("40"))
    assert event.cascade_count is None


def test_invalid_action_rejected(log):
    with pytest.raises(ValueError):
        log.add_event("purged", "contributor", "c1", "Alice", Decimal("0"))
    assert len(log) == 0


def test_recent_events_newest_first(log):
    for i in range(5):
        log.add_event("deleted", "contribution", f"k{i}", f"item {i}", Decimal(i))

    recent = log.get_recent_events(3)

    assert [e.target_id for e in recent] == ["k4", "k3", "k2"]
    assert [e.target_id for e in log.get_recent_events()] == ["k4", "k3", "k2", "k1", "k0"]
    assert log.get_recent_events(0) == []


def test_recent_events_negative_limit(log):
    with pytest.raises(ValueError, match="non-negative"):
        log.get_recent_events(-1)


def test_events_view_is_read_only(log):
    log.add_event("deleted", "contributor", "c1", "Alice", Decimal("1"))
    assert isinstance(log.events, tuple)


def test_extend_merges_by_timestamp_and_skips_known(log):
    """Imported events older than the existing log sort before it."""
    existing = log.add_event("deleted", "contributor", "c1", "Alice", Decimal("1"))

    def imported(event_id, hour):
        return ActivityEvent(
            id=event_id,
            action="restored",
            target_kind="contributor",
            target_id="c1",
            target_label="Alice",
            slices_affected=Decimal("1"),
            timestamp=datetime(2023, 1, 1, hour, tzinfo=timezone.utc),
        )

    appended = log.extend([imported("late", 10), existing, imported("early", 9), imported("late", 10)])

    assert appended == 2
    assert [e.id for e in log.events] == ["early", "late", "e-1"]
    assert log.get_recent_events(1) == [existing]


def test_constructor_loads_events():
    source = ActivityLog(clock=StepClock(), id_factory=SequentialIds("e"))
    source.add_event("deleted", "contributor", "c1", "Alice", Decimal("1"))
    copy = ActivityLog(events=source.events)
    assert copy.events == source.events
