from datetime import date, datetime

import pytest

from myclinics.application import slots
from myclinics.application.ports.doctor_repo import ScheduleDto


def test_normalize_slot_pads_hours():
    assert slots.normalize_slot("9:00") == "09:00"
    assert slots.normalize_slot(" 14:30 ") == "14:30"


def test_normalize_slot_rejects_garbage():
    with pytest.raises(ValueError):
        slots.normalize_slot("25:00")
    with pytest.raises(ValueError):
        slots.normalize_slot("noon")


def test_weekday_index_counts_sunday_as_zero():
    assert slots.weekday_index(date(2024, 6, 2)) == 0  # Sunday
    assert slots.weekday_index(date(2024, 6, 3)) == 1  # Monday
    assert slots.weekday_index(date(2024, 6, 8)) == 6  # Saturday


def test_expand_ranges_drops_partial_slot_and_merges():
    ranges = [
        {"startTime": "09:00", "endTime": "10:45", "isAvailable": True},
        {"startTime": "13:00", "endTime": "14:00", "isAvailable": True},
        {"startTime": "16:00", "endTime": "18:00", "isAvailable": False},
    ]
    assert slots.expand_ranges(ranges) == ["09:00", "09:30", "10:00", "13:00", "13:30"]


def test_day_slots_empty_for_day_off():
    off = ScheduleDto(id="s", doctor_id="d", day_of_week=5, slots=[{"startTime": "09:00", "endTime": "12:00"}], is_available=False)
    assert slots.day_slots(off) == []
    assert slots.day_slots(None) == []


def test_split_slots_hides_past_labels_today():
    now = datetime(2024, 6, 3, 10, 15)
    result = slots.split_slots(["09:00", "10:00", "10:30", "11:00"], ["11:00"], now.date(), now)
    assert result == {"availableSlots": ["10:30"], "bookedSlots": ["11:00"]}


def test_split_slots_keeps_booked_outside_template():
    now = datetime(2024, 6, 1, 8, 0)
    result = slots.split_slots(["09:00"], ["15:00"], date(2024, 6, 3), now)
    assert result["availableSlots"] == ["09:00"]
    assert result["bookedSlots"] == ["15:00"]


def test_ranges_overlap():
    assert slots.ranges_overlap([
        {"startTime": "09:00", "endTime": "11:00"},
        {"startTime": "10:30", "endTime": "12:00"},
    ])
    assert not slots.ranges_overlap([
        {"startTime": "09:00", "endTime": "11:00"},
        {"startTime": "11:00", "endTime": "12:00"},
    ])
