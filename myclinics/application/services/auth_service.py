from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, date
from typing import Optional, Dict, Any
import logging

from ...core.config import settings
from ...exceptions import APIException
from ... import messages
from ... import utils
from ..ports.user_repo import UserRepository, UserDto
from ..ports.otp_repo import OTPRepository, TokenRevocationRepository
from ..ports.otp_provider import OTPSender
from ..ports.doctor_repo import DoctorRepository
from ..ports.audit_logger import AuditLogger
from ..ports.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

EMAIL_VERIFICATION = "email_verification"
PASSWORD_RESET = "password_reset"
SELF_SERVICE_ROLES = ("patient", "doctor")


@dataclass
class IssuedCode:
    user_id: str
    otp: str
    sent: bool


@dataclass
class AuthResult:
    token: str
    refresh_token: str
    user: UserDto


@dataclass
class AuthService:
    user_repo: UserRepository
    otp_repo: OTPRepository
    otp_sender: OTPSender
    doctor_repo: DoctorRepository
    token_repo: TokenRevocationRepository
    audit: AuditLogger
    rate_limiter: Optional[RateLimiter] = None

    # ------------------------
    # Registration & email verification
    # ------------------------
    def register(self, email: str, password: str, name: str, role: str = "patient", phone: Optional[str] = None,
                 address: Optional[str] = None, date_of_birth: Optional[date] = None,
                 specialty: Optional[str] = None, location: Optional[str] = None,
                 fee: Optional[float] = None, ip_address: Optional[str] = None) -> IssuedCode:
        email = utils.normalize_email(email)
        if role not in SELF_SERVICE_ROLES:
            raise APIException(403, messages.ADMIN_SIGNUP_FORBIDDEN)
        if role == "doctor" and (not specialty or not location or fee is None):
            raise APIException(400, messages.DOCTOR_FIELDS_REQUIRED)
        if not utils.is_strong_password(password):
            raise APIException(400, messages.PASSWORD_WEAK, errors={"password": [messages.PASSWORD_WEAK]})
        self._throttle(f"register:{email}")

        if self.user_repo.get_by_email(email):
            self.audit.log("register", email, ip_address=ip_address, success=False, details={"reason": "email_exists"})
            raise APIException(409, code=messages.EMAIL_EXISTS)
        if phone and self.user_repo.get_by_phone(phone):
            self.audit.log("register", email, ip_address=ip_address, success=False, details={"reason": "phone_exists"})
            raise APIException(409, code=messages.PHONE_EXISTS)

        user = self.user_repo.create(
            name=name.strip(),
            email=email,
            password_hash=utils.hash_password(password),
            role=role,
            phone=phone,
            address=address,
            date_of_birth=date_of_birth,
        )
        if role == "doctor":
            self.doctor_repo.create(user.id, specialty, location, float(fee))

        issued = self._issue_code(user, EMAIL_VERIFICATION)
        self.audit.log("register", email, user_id=user.id, ip_address=ip_address, details={"role": role})
        return issued

    def verify_email_otp(self, user_id: str, otp: str) -> None:
        user = self._require_user(user_id)
        if user.is_email_verified:
            raise APIException(400, messages.EMAIL_ALREADY_VERIFIED)
        code = self._check_code(user, otp, EMAIL_VERIFICATION)
        self.otp_repo.mark_used(code)
        self.user_repo.mark_email_verified(user.id)
        self.audit.log("verify_email", user.email, user_id=user.id)

    def resend_email_otp(self, user_id: str) -> IssuedCode:
        user = self._require_user(user_id)
        if user.is_email_verified:
            raise APIException(400, messages.EMAIL_ALREADY_VERIFIED)
        self._throttle(f"resend:{user.id}")
        return self._issue_code(user, EMAIL_VERIFICATION)

    # ------------------------
    # Sessions
    # ------------------------
    def login(self, email: str, password: str, ip_address: Optional[str] = None) -> AuthResult:
        email = utils.normalize_email(email)
        user = self.user_repo.get_by_email(email)
        if not user or not utils.verify_password(password, user.password_hash):
            self.audit.log("login", email, ip_address=ip_address, success=False)
            raise APIException(401, code=messages.INVALID_CREDENTIALS)
        if not user.is_active:
            raise APIException(401, code=messages.ACCOUNT_SUSPENDED)
        if not user.is_email_verified:
            raise APIException(401, code=messages.EMAIL_NOT_VERIFIED)
        self.audit.log("login", email, user_id=user.id, ip_address=ip_address)
        return self._issue_tokens(user)

    def refresh(self, refresh_token: str) -> AuthResult:
        payload = utils.verify_refresh_token(refresh_token)
        if not payload or self.token_repo.is_revoked(payload.get("jti", "")):
            raise APIException(401, messages.TOKEN_INVALID)
        user = self.user_repo.get_by_id(payload.get("sub", ""))
        if not user or not user.is_active:
            raise APIException(401, messages.TOKEN_INVALID)
        # One refresh token buys one new pair
        self._revoke_payload(payload)
        return self._issue_tokens(user)

    def logout(self, token: str) -> None:
        payload = utils.decode_jwt_token(token)
        if payload:
            self._revoke_payload(payload)

    def authenticate(self, token: str) -> UserDto:
        """Resolve an access token to an active user or raise 401."""
        payload = utils.verify_access_token(token)
        if not payload:
            raise APIException(401, messages.TOKEN_INVALID)
        if self.token_repo.is_revoked(payload.get("jti", "")):
            raise APIException(401, messages.TOKEN_INVALID)
        user = self.user_repo.get_by_id(payload.get("sub", ""))
        if not user or not user.is_active:
            raise APIException(401, messages.TOKEN_INVALID)
        return user

    def validate_token(self, token: Optional[str]) -> Optional[UserDto]:
        if not token:
            return None
        try:
            return self.authenticate(token)
        except APIException:
            return None

    # ------------------------
    # Passwords
    # ------------------------
    def change_password(self, user_id: str, current_password: str, new_password: str, confirm_password: str) -> None:
        user = self._require_user(user_id)
        if new_password != confirm_password:
            raise APIException(400, messages.PASSWORD_MISMATCH, errors={"confirmPassword": [messages.PASSWORD_MISMATCH]})
        if not utils.verify_password(current_password, user.password_hash):
            raise APIException(400, messages.PASSWORD_WRONG, errors={"currentPassword": [messages.PASSWORD_WRONG]})
        if not utils.is_strong_password(new_password):
            raise APIException(400, messages.PASSWORD_WEAK, errors={"newPassword": [messages.PASSWORD_WEAK]})
        self.user_repo.set_password(user.id, utils.hash_password(new_password))
        self.audit.log("change_password", user.email, user_id=user.id)

    def forgot_password(self, email: str, ip_address: Optional[str] = None) -> IssuedCode:
        email = utils.normalize_email(email)
        self._throttle(f"forgot:{email}")
        user = self.user_repo.get_by_email(email)
        if not user:
            self.audit.log("forgot_password", email, ip_address=ip_address, success=False)
            raise APIException(404, messages.EMAIL_NOT_FOUND)
        issued = self._issue_code(user, PASSWORD_RESET)
        self.audit.log("forgot_password", email, user_id=user.id, ip_address=ip_address)
        return issued

    def verify_password_reset_otp(self, user_id: str, otp: str) -> bool:
        user = self._require_user(user_id)
        self._check_code(user, otp, PASSWORD_RESET)
        return True

    def reset_password(self, user_id: str, otp: str, new_password: str) -> None:
        user = self._require_user(user_id)
        if not utils.is_strong_password(new_password):
            raise APIException(400, messages.PASSWORD_WEAK, errors={"newPassword": [messages.PASSWORD_WEAK]})
        code = self._check_code(user, otp, PASSWORD_RESET)
        self.otp_repo.mark_used(code)
        self.user_repo.set_password(user.id, utils.hash_password(new_password))
        self.audit.log("reset_password", user.email, user_id=user.id)

    def email_exists(self, email: str) -> bool:
        return self.user_repo.get_by_email(utils.normalize_email(email)) is not None

    # ------------------------
    # Helpers
    # ------------------------
    def _require_user(self, user_id: str) -> UserDto:
        user = self.user_repo.get_by_id(user_id)
        if not user:
            raise APIException(404, messages.USER_NOT_FOUND)
        return user

    def _throttle(self, key: str) -> None:
        if self.rate_limiter is None:
            return
        if not self.rate_limiter.allow(key, settings.AUTH_RATE_LIMIT_MAX, settings.AUTH_RATE_LIMIT_WINDOW_SEC):
            logger.warning(f"Auth rate limit exceeded for {key.split(':')[0]}")
            raise APIException(429, code=messages.RATE_LIMITED)

    def _issue_code(self, user: UserDto, purpose: str) -> IssuedCode:
        self.otp_repo.invalidate_all(user.id, purpose)
        code = utils.generate_otp()
        expires_at = utils.utc_now() + timedelta(minutes=settings.OTP_EXPIRY_MINUTES)
        self.otp_repo.create(user.id, code, purpose, expires_at)
        try:
            sent = self.otp_sender.send(user, code, purpose)
        except Exception as e:
            logger.error(f"Failed to deliver {purpose} code for user {user.id}: {e}")
            sent = False
        return IssuedCode(user_id=user.id, otp=code, sent=sent)

    def _check_code(self, user: UserDto, otp: str, purpose: str) -> str:
        """Validate ``otp`` against the latest active code and return its id."""
        active = self.otp_repo.latest_active(user.id, purpose)
        if not active or utils.as_utc(active.expires_at) < utils.utc_now():
            raise APIException(400, messages.OTP_EXPIRED)
        if active.attempts >= settings.OTP_MAX_ATTEMPTS:
            raise APIException(400, messages.OTP_TOO_MANY_ATTEMPTS)
        if active.otp != (otp or "").strip():
            attempts = self.otp_repo.register_attempt(active.id)
            self.audit.log(f"verify_{purpose}", user.email, user_id=user.id, success=False, details={"attempts": attempts})
            if attempts >= settings.OTP_MAX_ATTEMPTS:
                raise APIException(400, messages.OTP_TOO_MANY_ATTEMPTS)
            raise APIException(400, messages.OTP_INVALID)
        return active.id

    def _issue_tokens(self, user: UserDto) -> AuthResult:
        claims: Dict[str, Any] = {"sub": user.id, "role": user.role}
        return AuthResult(
            token=utils.create_access_token(claims),
            refresh_token=utils.create_refresh_token(claims),
            user=user,
        )

    def _revoke_payload(self, payload: Dict[str, Any]) -> None:
        jti = payload.get("jti")
        if not jti:
            return
        exp = payload.get("exp")
        expires_at = datetime.fromtimestamp(exp, timezone.utc) if exp else utils.utc_now()
        self.token_repo.revoke(jti, payload.get("sub", ""), expires_at)
