from datetime import date, timedelta

import pytest

from myclinics.application.services.profile_service import ProfileService
from myclinics.exceptions import APIException
from myclinics import messages

from .fakes import FakeUserRepo


def test_update_profile_validates_and_updates():
    repo = FakeUserRepo()
    user = repo.add(name="Old")
    svc = ProfileService(user_repo=repo)
    out = svc.update_profile(user.id, name=" New Name ", phone="0790000000", address="عمان", date_of_birth="1990-05-01")
    assert out.name == "New Name"
    assert out.phone == "0790000000"
    assert out.address == "عمان"
    assert out.date_of_birth == date(1990, 5, 1)


def test_update_profile_leaves_missing_fields_alone():
    repo = FakeUserRepo()
    user = repo.add(name="Same", phone="0791111111")
    svc = ProfileService(user_repo=repo)
    out = svc.update_profile(user.id, address="الزرقاء")
    assert out.name == "Same"
    assert out.phone == "0791111111"


def test_update_profile_rejects_future_birth_date():
    repo = FakeUserRepo()
    user = repo.add()
    svc = ProfileService(user_repo=repo)
    tomorrow = (date.today() + timedelta(days=1)).isoformat()
    with pytest.raises(APIException) as exc:
        svc.update_profile(user.id, date_of_birth=tomorrow)
    assert exc.value.errors == {"dateOfBirth": [messages.INVALID_DATE]}


def test_update_profile_phone_taken_by_someone_else():
    repo = FakeUserRepo()
    repo.add(email="a@example.com", phone="0792222222")
    user = repo.add(email="b@example.com")
    svc = ProfileService(user_repo=repo)
    with pytest.raises(APIException) as exc:
        svc.update_profile(user.id, phone="0792222222")
    assert exc.value.status_code == 409


def test_get_profile_missing_user():
    svc = ProfileService(user_repo=FakeUserRepo())
    with pytest.raises(APIException) as exc:
        svc.get_profile("nobody")
    assert exc.value.status_code == 404
