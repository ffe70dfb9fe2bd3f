# practice_scheduler/services/availability/slot_generator.py
from datetime import datetime
from typing import List, Sequence

from practice_scheduler.schemas.availability import BusyInterval, CandidateSlot
from practice_scheduler.services.availability.intervals import add_minutes, overlaps_any


def generate_slots(
    window_start: datetime,
    window_end: datetime,
    duration_minutes: int,
    busy: Sequence[BusyInterval],
) -> List[CandidateSlot]:
    """
    Fixed-length slots aligned to the window start in duration strides.

    A slot is kept only if it fits entirely in the window and intersects no
    busy interval. Arithmetic is done on UTC instants.
    """
    if duration_minutes <= 0:
        raise ValueError("duration_minutes must be positive")

    slots: List[CandidateSlot] = []
    cursor = window_start
    while add_minutes(cursor, duration_minutes) <= window_end:
        slot_end = add_minutes(cursor, duration_minutes)
        if not overlaps_any(cursor, slot_end, busy):
            slots.append(CandidateSlot(start=cursor, end=slot_end))
        cursor = slot_end
    return slots
