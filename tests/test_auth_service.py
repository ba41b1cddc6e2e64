from datetime import timedelta
from dataclasses import replace

import pytest

from myclinics.application.services.auth_service import AuthService, EMAIL_VERIFICATION, PASSWORD_RESET
from myclinics.exceptions import APIException
from myclinics import messages, utils

from .fakes import FakeUserRepo, FakeOTPRepo, FakeTokenRepo, FakeOTPSender, FakeAudit, FakeDoctorRepo, FakeRateLimiter

PASSWORD = "secret123"


def make_service(sender=None, rate_limiter=None):
    users = FakeUserRepo()
    svc = AuthService(
        user_repo=users,
        otp_repo=FakeOTPRepo(),
        otp_sender=sender or FakeOTPSender(),
        doctor_repo=FakeDoctorRepo(users),
        token_repo=FakeTokenRepo(),
        audit=FakeAudit(),
        rate_limiter=rate_limiter,
    )
    return svc


def registered_user(svc, email="sara@example.com"):
    issued = svc.register(email, PASSWORD, "Sara", phone="0791234567")
    return issued, svc.user_repo.get_by_id(issued.user_id)


def test_register_creates_unverified_patient_and_sends_code():
    svc = make_service()
    issued, user = registered_user(svc, email="  Sara@Example.com ")
    assert user.email == "sara@example.com"
    assert user.role == "patient"
    assert not user.is_email_verified
    assert utils.verify_password(PASSWORD, user.password_hash)
    assert issued.sent is True
    assert svc.otp_sender.sent == [(user.id, issued.otp, EMAIL_VERIFICATION)]
    assert len(issued.otp) == 6 and issued.otp.isdigit()


def test_register_doctor_creates_profile():
    svc = make_service()
    issued = svc.register("doc@example.com", PASSWORD, "Dr. Omar", role="doctor",
                          specialty="cardiology", location="إربد", fee=15)
    doctor = svc.doctor_repo.get_by_user_id(issued.user_id)
    assert doctor is not None
    assert doctor.fee == 15.0
    assert doctor.specialty == "cardiology"


def test_register_doctor_requires_practice_fields():
    svc = make_service()
    with pytest.raises(APIException) as exc:
        svc.register("doc@example.com", PASSWORD, "Dr. Omar", role="doctor", specialty="cardiology")
    assert exc.value.status_code == 400


def test_register_admin_is_forbidden():
    svc = make_service()
    with pytest.raises(APIException) as exc:
        svc.register("root@example.com", PASSWORD, "Root", role="admin")
    assert exc.value.status_code == 403


def test_register_duplicate_email_and_phone():
    svc = make_service()
    registered_user(svc)
    with pytest.raises(APIException) as exc:
        svc.register("sara@example.com", PASSWORD, "Other")
    assert exc.value.status_code == 409
    assert exc.value.code == messages.EMAIL_EXISTS

    with pytest.raises(APIException) as exc:
        svc.register("other@example.com", PASSWORD, "Other", phone="0791234567")
    assert exc.value.code == messages.PHONE_EXISTS


def test_register_rejects_weak_password():
    svc = make_service()
    with pytest.raises(APIException) as exc:
        svc.register("weak@example.com", "short", "Weak")
    assert exc.value.status_code == 400


def test_register_survives_delivery_failure():
    svc = make_service(sender=FakeOTPSender(fail=True))
    issued, user = registered_user(svc)
    assert issued.sent is False
    assert svc.otp_repo.latest_active(user.id, EMAIL_VERIFICATION).otp == issued.otp


def test_register_is_throttled():
    svc = make_service(rate_limiter=FakeRateLimiter(allowed=False))
    with pytest.raises(APIException) as exc:
        svc.register("sara@example.com", PASSWORD, "Sara")
    assert exc.value.status_code == 429


def test_verify_email_then_login():
    svc = make_service()
    issued, user = registered_user(svc)

    with pytest.raises(APIException) as exc:
        svc.login("sara@example.com", PASSWORD)
    assert exc.value.code == messages.EMAIL_NOT_VERIFIED

    svc.verify_email_otp(user.id, issued.otp)
    result = svc.login("sara@example.com", PASSWORD)
    assert result.user.id == user.id
    payload = utils.verify_access_token(result.token)
    assert payload["sub"] == user.id
    assert payload["role"] == "patient"
    assert utils.verify_refresh_token(result.refresh_token)["sub"] == user.id


def test_verify_email_twice_is_rejected():
    svc = make_service()
    issued, user = registered_user(svc)
    svc.verify_email_otp(user.id, issued.otp)
    with pytest.raises(APIException) as exc:
        svc.verify_email_otp(user.id, issued.otp)
    assert exc.value.detail == messages.EMAIL_ALREADY_VERIFIED


def test_wrong_code_counts_attempts_until_locked():
    svc = make_service()
    issued, user = registered_user(svc)
    wrong = "000000" if issued.otp != "000000" else "111111"
    for _ in range(4):
        with pytest.raises(APIException) as exc:
            svc.verify_email_otp(user.id, wrong)
        assert exc.value.detail == messages.OTP_INVALID
    with pytest.raises(APIException) as exc:
        svc.verify_email_otp(user.id, wrong)
    assert exc.value.detail == messages.OTP_TOO_MANY_ATTEMPTS
    # Even the right code is refused once locked
    with pytest.raises(APIException) as exc:
        svc.verify_email_otp(user.id, issued.otp)
    assert exc.value.detail == messages.OTP_TOO_MANY_ATTEMPTS


def test_expired_code_is_rejected():
    svc = make_service()
    issued, user = registered_user(svc)
    code = svc.otp_repo.latest_active(user.id, EMAIL_VERIFICATION)
    svc.otp_repo.codes[-1] = replace(code, expires_at=utils.utc_now() - timedelta(seconds=1))
    with pytest.raises(APIException) as exc:
        svc.verify_email_otp(user.id, issued.otp)
    assert exc.value.detail == messages.OTP_EXPIRED


def test_resend_invalidates_previous_code():
    svc = make_service()
    first, user = registered_user(svc)
    second = svc.resend_email_otp(user.id)
    active = svc.otp_repo.latest_active(user.id, EMAIL_VERIFICATION)
    assert active.otp == second.otp
    assert len([c for c in svc.otp_repo.codes if not c.is_used]) == 1


def test_login_wrong_password_and_suspended_account():
    svc = make_service()
    user = svc.user_repo.add(email="ali@example.com", password_hash=utils.hash_password(PASSWORD))
    with pytest.raises(APIException) as exc:
        svc.login("ali@example.com", "wrong-pass1")
    assert exc.value.code == messages.INVALID_CREDENTIALS

    svc.user_repo.users[user.id] = replace(user, is_active=False)
    with pytest.raises(APIException) as exc:
        svc.login("ali@example.com", PASSWORD)
    assert exc.value.code == messages.ACCOUNT_SUSPENDED


def test_refresh_token_is_single_use():
    svc = make_service()
    svc.user_repo.add(email="ali@example.com", password_hash=utils.hash_password(PASSWORD))
    first = svc.login("ali@example.com", PASSWORD)
    second = svc.refresh(first.refresh_token)
    assert second.token != first.token
    with pytest.raises(APIException) as exc:
        svc.refresh(first.refresh_token)
    assert exc.value.status_code == 401


def test_access_token_cannot_refresh():
    svc = make_service()
    svc.user_repo.add(email="ali@example.com", password_hash=utils.hash_password(PASSWORD))
    result = svc.login("ali@example.com", PASSWORD)
    with pytest.raises(APIException):
        svc.refresh(result.token)


def test_logout_revokes_access_token():
    svc = make_service()
    user = svc.user_repo.add(email="ali@example.com", password_hash=utils.hash_password(PASSWORD))
    result = svc.login("ali@example.com", PASSWORD)
    assert svc.authenticate(result.token).id == user.id
    svc.logout(result.token)
    with pytest.raises(APIException) as exc:
        svc.authenticate(result.token)
    assert exc.value.status_code == 401
    assert svc.validate_token(result.token) is None
    assert svc.validate_token(None) is None


def test_change_password():
    svc = make_service()
    user = svc.user_repo.add(email="ali@example.com", password_hash=utils.hash_password(PASSWORD))
    with pytest.raises(APIException) as exc:
        svc.change_password(user.id, PASSWORD, "newpass123", "newpass124")
    assert exc.value.errors == {"confirmPassword": [messages.PASSWORD_MISMATCH]}
    with pytest.raises(APIException) as exc:
        svc.change_password(user.id, "badpass123", "newpass123", "newpass123")
    assert exc.value.detail == messages.PASSWORD_WRONG

    svc.change_password(user.id, PASSWORD, "newpass123", "newpass123")
    assert svc.login("ali@example.com", "newpass123").user.id == user.id


def test_password_reset_flow():
    svc = make_service()
    user = svc.user_repo.add(email="ali@example.com", password_hash=utils.hash_password(PASSWORD))
    issued = svc.forgot_password("ALI@example.com")
    assert issued.user_id == user.id
    assert svc.verify_password_reset_otp(user.id, issued.otp) is True

    svc.reset_password(user.id, issued.otp, "brandnew99")
    assert svc.login("ali@example.com", "brandnew99").user.id == user.id
    # The code is spent
    with pytest.raises(APIException):
        svc.reset_password(user.id, issued.otp, "another999")
    assert svc.otp_repo.latest_active(user.id, PASSWORD_RESET) is None


def test_forgot_password_unknown_email():
    svc = make_service()
    with pytest.raises(APIException) as exc:
        svc.forgot_password("ghost@example.com")
    assert exc.value.status_code == 404


def test_email_exists():
    svc = make_service()
    svc.user_repo.add(email="ali@example.com")
    assert svc.email_exists(" ALI@example.com") is True
    assert svc.email_exists("nobody@example.com") is False
