import pytest

from myclinics.application.services.catalog_service import CatalogService, paginate
from myclinics.application.services.clinic_service import ClinicService, ClinicForm
from myclinics.exceptions import APIException
from myclinics import constants

from .fakes import FakeUserRepo, FakeDoctorRepo, FakeClinicRepo


def make_service():
    doctors = FakeDoctorRepo(FakeUserRepo())
    doctors.clinics = FakeClinicRepo()
    return CatalogService(doctors)


def test_paginate_is_zero_based():
    items = list(range(7))
    page, meta = paginate(items, 1, 3)
    assert page == [3, 4, 5]
    assert meta == {"page": 1, "limit": 3, "total": 7, "totalPages": 3}
    page, meta = paginate(items, 5, 3)
    assert page == []


def test_specialties_pages_with_slug():
    svc = make_service()
    first, meta = svc.specialties()
    assert len(first) == 5
    assert first[0]["slug"] == first[0]["id"]
    assert meta["total"] == len(constants.MEDICAL_SPECIALTIES)
    rest, _ = svc.specialties(page=1)
    assert len(rest) == len(constants.MEDICAL_SPECIALTIES) - 5


def test_top_rated_orders_by_rating():
    svc = make_service()
    svc.doctor_repo.add(name="Dr. B", rating=4.0)
    svc.doctor_repo.add(name="Dr. A", rating=4.0)
    svc.doctor_repo.add(name="Dr. C", rating=4.9)
    top, meta = svc.top_rated(limit=2)
    assert [d.name for d in top] == ["Dr. C", "Dr. A"]
    assert meta["totalPages"] == 2


def test_cities_are_unique_and_ordered():
    cities = make_service().cities()
    assert len(cities) == len(set(cities))
    assert cities[0] == constants.CITIES[0]


def test_search_ignores_blank_filters_and_matches_clinic_name():
    svc = make_service()
    first = svc.doctor_repo.add(name="Dr. Noor", specialty="dentistry", location="عمان")
    svc.doctor_repo.add(name="Dr. Zaid", specialty="cardiology", location="إربد")
    ClinicService(svc.doctor_repo.clinics, svc.doctor_repo).update(
        first.user_id, ClinicForm("Smile Center", "عمان", "06", ""))

    assert len(svc.search(specialty="  ", location="")) == 2
    assert [d.name for d in svc.search(specialty="DENT")] == ["Dr. Noor"]
    assert [d.name for d in svc.search(clinic_name="smile")] == ["Dr. Noor"]
    assert [d.name for d in svc.search(name="zaid")] == ["Dr. Zaid"]


def test_get_doctor_missing():
    with pytest.raises(APIException) as exc:
        make_service().get_doctor("nope")
    assert exc.value.status_code == 404


def test_suspended_doctor_is_hidden_everywhere():
    svc = make_service()
    doctor = svc.doctor_repo.add(name="Dr. Away", rating=4.9)
    svc.doctor_repo.users.update_profile_fields(doctor.user_id, {"is_active": False})
    assert svc.search() == []
    top, meta = svc.top_rated()
    assert top == [] and meta["total"] == 0
    with pytest.raises(APIException) as exc:
        svc.get_doctor(doctor.id)
    assert exc.value.status_code == 404
