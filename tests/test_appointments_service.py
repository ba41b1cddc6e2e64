from datetime import datetime, date

import pytest

from myclinics.application.services.appointments_service import AppointmentsService
from myclinics.application.ports.appointments_repo import SlotTakenError
from myclinics.exceptions import APIException
from myclinics import messages

from .fakes import FakeUserRepo, FakeDoctorRepo, FakeAppointmentsRepo, FakeReviewRepo

NOW = datetime(2030, 1, 6, 8, 0)  # a Sunday
MONDAY = date(2030, 1, 7)


def make_service():
    doctors = FakeDoctorRepo(FakeUserRepo())
    svc = AppointmentsService(
        repo=FakeAppointmentsRepo(),
        doctor_repo=doctors,
        review_repo=FakeReviewRepo(),
        now=lambda: NOW,
    )
    doctor = doctors.add(fee=25.0)
    doctors.upsert_schedule_day(doctor.id, 1, [{"startTime": "09:00", "endTime": "11:00", "isAvailable": True}], True)
    return svc, doctor


def test_schedule_lists_template_slots():
    svc, doctor = make_service()
    out = svc.schedule_for(doctor.id, "2030-01-07")
    assert out == {
        "date": "2030-01-07",
        "availableSlots": ["09:00", "09:30", "10:00", "10:30"],
        "bookedSlots": [],
    }


def test_schedule_defaults_to_today_and_unscheduled_day_is_empty():
    svc, doctor = make_service()
    out = svc.schedule_for(doctor.id)
    assert out["date"] == "2030-01-06"
    assert out["availableSlots"] == []


def test_schedule_past_day_has_no_available_slots():
    svc, doctor = make_service()
    out = svc.schedule_for(doctor.id, "2029-12-31")
    assert out["availableSlots"] == []


def test_schedule_unknown_doctor():
    svc, _ = make_service()
    with pytest.raises(APIException) as exc:
        svc.schedule_for("missing", "2030-01-07")
    assert exc.value.status_code == 404


def test_book_success_takes_fee_and_blocks_slot():
    svc, doctor = make_service()
    appt = svc.book("p1", doctor.id, "2030-01-07", "9:30")
    assert appt.status == "pending"
    assert appt.time_slot == "09:30"
    assert appt.amount == 25.0
    out = svc.schedule_for(doctor.id, "2030-01-07")
    assert "09:30" not in out["availableSlots"]
    assert out["bookedSlots"] == ["09:30"]


def test_book_taken_slot_conflicts():
    svc, doctor = make_service()
    svc.book("p1", doctor.id, "2030-01-07", "10:00")
    with pytest.raises(APIException) as exc:
        svc.book("p2", doctor.id, "2030-01-07", "10:00")
    assert exc.value.status_code == 409
    assert exc.value.code == messages.SLOT_UNAVAILABLE


def test_book_outside_schedule_conflicts():
    svc, doctor = make_service()
    with pytest.raises(APIException) as exc:
        svc.book("p1", doctor.id, "2030-01-07", "15:00")
    assert exc.value.code == messages.SLOT_UNAVAILABLE


def test_book_rejects_past_and_malformed_dates():
    svc, doctor = make_service()
    with pytest.raises(APIException) as exc:
        svc.book("p1", doctor.id, "2030-01-01", "09:00")
    assert exc.value.detail == messages.DATE_IN_PAST
    with pytest.raises(APIException) as exc:
        svc.book("p1", doctor.id, "07/01/2030", "09:00")
    assert exc.value.detail == messages.INVALID_DATE
    with pytest.raises(APIException) as exc:
        svc.book("p1", doctor.id, "2030-01-07", "nine")
    assert exc.value.detail == messages.INVALID_TIME


def test_cancelled_slot_is_free_again():
    svc, doctor = make_service()
    appt = svc.book("p1", doctor.id, "2030-01-07", "10:00")
    cancelled = svc.cancel("p1", appt.id)
    assert cancelled.status == "cancelled"
    assert svc.book("p2", doctor.id, "2030-01-07", "10:00").status == "pending"


def test_cancel_rules():
    svc, doctor = make_service()
    appt = svc.book("p1", doctor.id, "2030-01-07", "10:00")
    with pytest.raises(APIException) as exc:
        svc.cancel("someone-else", appt.id)
    assert exc.value.status_code == 404
    svc.cancel("p1", appt.id)
    with pytest.raises(APIException) as exc:
        svc.cancel("p1", appt.id)
    assert exc.value.detail == messages.APPOINTMENT_ALREADY_CANCELLED

    done = svc.repo.add("p1", doctor.id, MONDAY, "09:00", status="completed")
    with pytest.raises(APIException) as exc:
        svc.cancel("p1", done.id)
    assert exc.value.detail == messages.APPOINTMENT_COMPLETED

    old = svc.repo.add("p1", doctor.id, date(2029, 12, 1), "09:00")
    with pytest.raises(APIException) as exc:
        svc.cancel("p1", old.id)
    assert exc.value.detail == messages.APPOINTMENT_IN_PAST


def test_update_moves_appointment_and_resets_status():
    svc, doctor = make_service()
    appt = svc.book("p1", doctor.id, "2030-01-07", "09:00")
    svc.repo.update(appt.id, {"status": "confirmed"})
    # Keeping the same slot is allowed
    view = svc.update("p1", appt.id, doctor.id, "2030-01-07", "09:00")
    assert view.appointment.time_slot == "09:00"
    view = svc.update("p1", appt.id, doctor.id, "2030-01-07", "10:30")
    assert view.appointment.time_slot == "10:30"
    assert view.appointment.status == "pending"
    assert view.doctor.id == doctor.id
    assert svc.schedule_for(doctor.id, "2030-01-07")["bookedSlots"] == ["10:30"]


def test_update_into_taken_slot_conflicts():
    svc, doctor = make_service()
    svc.book("p2", doctor.id, "2030-01-07", "10:00")
    mine = svc.book("p1", doctor.id, "2030-01-07", "09:00")
    with pytest.raises(APIException) as exc:
        svc.update("p1", mine.id, doctor.id, "2030-01-07", "10:00")
    assert exc.value.status_code == 409


def test_list_for_patient_attaches_doctor():
    svc, doctor = make_service()
    svc.book("p1", doctor.id, "2030-01-07", "09:00")
    svc.book("p1", doctor.id, "2030-01-07", "10:00")
    svc.book("p2", doctor.id, "2030-01-07", "10:30")
    views = svc.list_for_patient("p1")
    assert [v.appointment.time_slot for v in views] == ["10:00", "09:00"]
    assert all(v.doctor.id == doctor.id for v in views)


def test_review_updates_doctor_rating():
    svc, doctor = make_service()
    first = svc.repo.add("p1", doctor.id, MONDAY, "09:00", status="completed")
    second = svc.repo.add("p2", doctor.id, MONDAY, "09:30", status="completed")
    svc.review("p1", first.id, 5, "  ممتاز ")
    review = svc.review("p2", second.id, 4, "")
    assert review.comment is None
    updated = svc.doctor_repo.get_by_id(doctor.id)
    assert updated.rating == 4.5
    assert updated.reviews_count == 2


def test_review_only_once_and_only_completed():
    svc, doctor = make_service()
    pending = svc.book("p1", doctor.id, "2030-01-07", "09:00")
    with pytest.raises(APIException) as exc:
        svc.review("p1", pending.id, 5)
    assert exc.value.detail == messages.REVIEW_NOT_ALLOWED

    done = svc.repo.add("p1", doctor.id, MONDAY, "10:00", status="completed")
    svc.review("p1", done.id, 3)
    with pytest.raises(APIException) as exc:
        svc.review("p1", done.id, 4)
    assert exc.value.status_code == 409


def test_book_losing_a_race_for_the_slot_conflicts(monkeypatch):
    svc, doctor = make_service()

    def taken(*args, **kwargs):
        raise SlotTakenError("slot")

    monkeypatch.setattr(svc.repo, "create", taken)
    with pytest.raises(APIException) as exc:
        svc.book("p1", doctor.id, "2030-01-07", "09:00")
    assert exc.value.status_code == 409
    assert exc.value.code == messages.SLOT_UNAVAILABLE


def test_suspended_doctor_is_not_bookable():
    svc, doctor = make_service()
    users = svc.doctor_repo.users
    users.update_profile_fields(doctor.user_id, {"is_active": False})
    with pytest.raises(APIException) as exc:
        svc.book("p1", doctor.id, "2030-01-07", "09:00")
    assert exc.value.status_code == 404
    with pytest.raises(APIException):
        svc.schedule_for(doctor.id, "2030-01-07")
