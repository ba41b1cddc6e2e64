from datetime import date

import pytest

from myclinics.application.services.doctor_service import DoctorService
from myclinics.exceptions import APIException
from myclinics import messages

from .fakes import FakeUserRepo, FakeDoctorRepo, FakeAppointmentsRepo

TODAY = date(2030, 1, 7)


def make_service():
    users = FakeUserRepo()
    doctors = FakeDoctorRepo(users)
    svc = DoctorService(doctor_repo=doctors, appointments_repo=FakeAppointmentsRepo(), user_repo=users, today=lambda: TODAY)
    doctor = doctors.add(fee=30.0)
    return svc, doctor


def test_update_profile_keeps_photo_unless_uploaded():
    svc, doctor = make_service()
    svc.doctor_repo.update_profile(doctor.id, {"photo": "/uploads/doctors/old.jpg"})
    out = svc.update_profile(doctor.user_id, specialty=" neurology ", location="عمان", fee=40, biography="Bio")
    assert out.specialty == "neurology"
    assert out.fee == 40
    assert out.biography == "Bio"
    assert out.photo == "/uploads/doctors/old.jpg"
    out = svc.update_profile(doctor.user_id, specialty="neurology", location="عمان", fee=40, photo_url="/uploads/doctors/new.jpg")
    assert out.photo == "/uploads/doctors/new.jpg"


def test_update_profile_rejects_negative_fee():
    svc, doctor = make_service()
    with pytest.raises(APIException) as exc:
        svc.update_profile(doctor.user_id, specialty="x", location="y", fee=-1)
    assert exc.value.status_code == 400


def test_profile_missing_for_non_doctor():
    svc, _ = make_service()
    with pytest.raises(APIException) as exc:
        svc.get_profile("patient-user")
    assert exc.value.detail == messages.DOCTOR_PROFILE_NOT_FOUND


def test_schedule_always_has_seven_days():
    svc, doctor = make_service()
    svc.update_schedule(doctor.user_id, 2, [{"startTime": "13:00", "endTime": "15:00"}, {"startTime": "9:00", "endTime": "12:00"}], True)
    week = svc.get_schedule(doctor.user_id)
    assert [d.day_of_week for d in week] == list(range(7))
    assert week[0].is_available is False
    assert [r["startTime"] for r in week[2].slots] == ["09:00", "13:00"]


def test_update_schedule_validation():
    svc, doctor = make_service()
    with pytest.raises(APIException) as exc:
        svc.update_schedule(doctor.user_id, 7, [], True)
    assert exc.value.detail == messages.SCHEDULE_INVALID_DAY
    with pytest.raises(APIException) as exc:
        svc.update_schedule(doctor.user_id, 1, [{"startTime": "12:00", "endTime": "09:00"}], True)
    assert exc.value.detail == messages.SCHEDULE_INVALID_RANGE
    with pytest.raises(APIException) as exc:
        svc.update_schedule(doctor.user_id, 1, [
            {"startTime": "09:00", "endTime": "12:00"},
            {"startTime": "11:00", "endTime": "13:00"},
        ], True)
    assert exc.value.detail == messages.SCHEDULE_OVERLAP
    with pytest.raises(APIException) as exc:
        svc.update_schedule(doctor.user_id, 1, [{"startTime": "9am", "endTime": "10:00"}], True)
    assert exc.value.detail == messages.INVALID_TIME


def test_day_off_clears_ranges():
    svc, doctor = make_service()
    day = svc.update_schedule(doctor.user_id, 5, [{"startTime": "09:00", "endTime": "12:00"}], False)
    assert day.is_available is False
    assert day.slots == []


def test_status_transitions():
    svc, doctor = make_service()
    appt = svc.appointments_repo.add("p1", doctor.id, TODAY)
    assert svc.update_appointment_status(doctor.user_id, appt.id, "confirmed").status == "confirmed"
    assert svc.update_appointment_status(doctor.user_id, appt.id, "completed").status == "completed"
    with pytest.raises(APIException) as exc:
        svc.update_appointment_status(doctor.user_id, appt.id, "cancelled")
    assert exc.value.detail == messages.INVALID_STATUS_TRANSITION


def test_pending_cannot_jump_to_completed():
    svc, doctor = make_service()
    appt = svc.appointments_repo.add("p1", doctor.id, TODAY)
    with pytest.raises(APIException):
        svc.update_appointment_status(doctor.user_id, appt.id, "completed")


def test_other_doctors_appointment_is_hidden():
    svc, doctor = make_service()
    other = svc.doctor_repo.add(name="Dr. Other")
    appt = svc.appointments_repo.add("p1", other.id, TODAY)
    with pytest.raises(APIException) as exc:
        svc.update_appointment_status(doctor.user_id, appt.id, "confirmed")
    assert exc.value.status_code == 404


def test_list_appointments_filters_and_attaches_patient():
    svc, doctor = make_service()
    patient = svc.user_repo.add(name="Huda", email="huda@example.com")
    svc.appointments_repo.add(patient.id, doctor.id, TODAY, "09:00")
    svc.appointments_repo.add(patient.id, doctor.id, date(2030, 1, 8), "09:00", status="confirmed")
    views = svc.list_appointments(doctor.user_id, "2030-01-07")
    assert len(views) == 1
    assert views[0].patient.name == "Huda"
    assert len(svc.list_appointments(doctor.user_id, status="confirmed")) == 1
    assert len(svc.list_appointments(doctor.user_id)) == 2


def test_statistics_counts_and_revenue():
    svc, doctor = make_service()
    repo = svc.appointments_repo
    repo.add("p1", doctor.id, date(2030, 1, 2), "09:00", status="completed", amount=30.0)
    repo.add("p2", doctor.id, date(2030, 1, 3), "09:00", status="completed", amount=20.0)
    repo.add("p3", doctor.id, date(2030, 1, 4), "09:00", status="cancelled")
    repo.add("p4", doctor.id, date(2030, 1, 5), "09:00", status="confirmed")
    repo.add("p5", doctor.id, date(2030, 2, 5), "09:00", status="completed")
    stats = svc.statistics(doctor.user_id, "2030-01-01", "2030-01-31")
    assert stats.total_appointments == 4
    assert stats.completed_appointments == 2
    assert stats.cancelled_appointments == 1
    assert stats.pending_appointments == 1
    assert stats.total_revenue == 50.0


def test_statistics_rejects_inverted_range():
    svc, doctor = make_service()
    with pytest.raises(APIException) as exc:
        svc.statistics(doctor.user_id, "2030-02-01", "2030-01-01")
    assert exc.value.detail == messages.INVALID_DATE_RANGE


def test_dashboard():
    svc, doctor = make_service()
    repo = svc.appointments_repo
    repo.add("p1", doctor.id, TODAY, "09:00")
    repo.add("p1", doctor.id, date(2030, 1, 9), "09:00", status="confirmed")
    repo.add("p2", doctor.id, date(2030, 1, 1), "09:00", status="completed")
    repo.add("p3", doctor.id, TODAY, "10:00", status="cancelled")
    assert svc.dashboard(doctor.user_id) == {
        "totalPatients": 2,
        "upcomingAppointments": 2,
        "todayAppointments": 1,
    }
