from datetime import timedelta

import pytest

from practice_scheduler.schemas.availability import BusyInterval
from practice_scheduler.services.availability.intervals import overlaps
from practice_scheduler.services.availability.slot_generator import generate_slots

from conftest import utc


def busy(start, end, source="booking"):
    return BusyInterval(start=start, end=end, source=source)


def test_free_window_is_split_in_duration_strides():
    slots = generate_slots(utc(2025, 2, 3, 9), utc(2025, 2, 3, 12), 60, [])
    assert [s.start for s in slots] == [utc(2025, 2, 3, 9), utc(2025, 2, 3, 10), utc(2025, 2, 3, 11)]
    assert all(s.end - s.start == timedelta(minutes=60) for s in slots)


def test_partial_trailing_slot_is_dropped():
    slots = generate_slots(utc(2025, 2, 3, 9), utc(2025, 2, 3, 11, 30), 60, [])
    assert len(slots) == 2
    assert slots[-1].end == utc(2025, 2, 3, 11)


def test_slot_ending_exactly_at_window_end_is_kept():
    slots = generate_slots(utc(2025, 2, 3, 9), utc(2025, 2, 3, 12), 45, [])
    assert [s.start.strftime("%H:%M") for s in slots] == ["09:00", "09:45", "10:30", "11:15"]
    assert slots[-1].end == utc(2025, 2, 3, 12)


def test_busy_interval_removes_overlapping_slots_only():
    slots = generate_slots(
        utc(2025, 2, 3, 9), utc(2025, 2, 3, 12), 60,
        [busy(utc(2025, 2, 3, 10, 30), utc(2025, 2, 3, 11))],
    )
    assert [s.start for s in slots] == [utc(2025, 2, 3, 9), utc(2025, 2, 3, 11)]


def test_touching_busy_interval_does_not_block():
    slots = generate_slots(
        utc(2025, 2, 3, 9), utc(2025, 2, 3, 11), 60,
        [busy(utc(2025, 2, 3, 8), utc(2025, 2, 3, 9)), busy(utc(2025, 2, 3, 11), utc(2025, 2, 3, 12))],
    )
    assert len(slots) == 2


def test_slots_never_overlap_busy_or_each_other():
    busy_list = [
        busy(utc(2025, 2, 3, 9, 10), utc(2025, 2, 3, 9, 20), "external"),
        busy(utc(2025, 2, 3, 13), utc(2025, 2, 3, 14, 30)),
    ]
    slots = generate_slots(utc(2025, 2, 3, 8), utc(2025, 2, 3, 18), 30, busy_list)
    for slot in slots:
        assert utc(2025, 2, 3, 8) <= slot.start and slot.end <= utc(2025, 2, 3, 18)
        assert not any(overlaps(slot.start, slot.end, b.start, b.end) for b in busy_list)
    for first, second in zip(slots, slots[1:]):
        assert first.end <= second.start


def test_non_positive_duration_rejected():
    with pytest.raises(ValueError):
        generate_slots(utc(2025, 2, 3, 9), utc(2025, 2, 3, 12), 0, [])
