"""
Slot generation

Turns a doctor's weekly template into the half-hour labels a client can
book, and splits the labels of one day into available and booked lists.
Weekdays are numbered 0 = Sunday ... 6 = Saturday.
"""
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional


def normalize_slot(label: str) -> str:
    """Return ``label`` as zero-padded ``HH:MM``; raise ValueError when malformed."""
    parsed = datetime.strptime(label.strip(), "%H:%M")
    return parsed.strftime("%H:%M")


def to_minutes(label: str) -> int:
    parsed = datetime.strptime(normalize_slot(label), "%H:%M")
    return parsed.hour * 60 + parsed.minute


def _label(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def weekday_index(day: date) -> int:
    # Python counts Monday as 0; the schedule counts Sunday as 0
    return (day.weekday() + 1) % 7


def expand_ranges(ranges: Iterable[Dict[str, Any]], slot_minutes: int = 30) -> List[str]:
    """
    Expand schedule ranges into slot labels.

    Each available ``{"startTime", "endTime", "isAvailable"}`` range yields a
    label every ``slot_minutes`` from its start. A slot that would run past
    the end of its range is dropped.
    """
    labels = set()
    for rng in ranges:
        if not rng.get("isAvailable", True):
            continue
        start = to_minutes(rng["startTime"])
        end = to_minutes(rng["endTime"])
        current = start
        while current + slot_minutes <= end:
            labels.add(_label(current))
            current += slot_minutes
    return sorted(labels, key=to_minutes)


def day_slots(schedule_day: Optional[Any], slot_minutes: int = 30) -> List[str]:
    """Slots of one weekday template; empty when the day is off or missing."""
    if schedule_day is None or not schedule_day.is_available:
        return []
    return expand_ranges(schedule_day.slots or [], slot_minutes)


def split_slots(all_slots: List[str], booked: Iterable[str], day: date, now: datetime) -> Dict[str, List[str]]:
    """
    Build the ``availableSlots`` / ``bookedSlots`` pair for ``day``.

    Booked labels outside the template are still reported as booked. On the
    current day a label at or before ``now`` is no longer available.
    """
    booked_set = {normalize_slot(b) for b in booked}
    booked_slots = sorted(booked_set, key=to_minutes)

    cutoff = None
    if day == now.date():
        cutoff = now.hour * 60 + now.minute

    available = [
        s for s in all_slots
        if s not in booked_set and (cutoff is None or to_minutes(s) > cutoff)
    ]
    return {"availableSlots": available, "bookedSlots": booked_slots}


def ranges_overlap(ranges: List[Dict[str, Any]]) -> bool:
    """True when two ranges of the same day intersect."""
    spans = sorted((to_minutes(r["startTime"]), to_minutes(r["endTime"])) for r in ranges)
    for (_, prev_end), (next_start, _) in zip(spans, spans[1:]):
        if next_start < prev_end:
            return True
    return False

