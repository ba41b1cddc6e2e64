import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from ..core.config import settings
from ..exceptions import APIException
from .. import messages
from ..application.ports.user_repo import UserDto
from ..application.services.auth_service import AuthService, IssuedCode
from ..application.services.profile_service import ProfileService
from ..dependencies import (
    get_auth_service,
    get_profile_service,
    get_current_user,
    get_bearer_token,
    client_ip,
)
from ..schemas import (
    RegisterRequest, LoginRequest, VerifyOTPRequest, ResendOTPRequest, RefreshTokenRequest,
    EmailRequest, ResetPasswordRequest, ChangePasswordRequest, UpdateProfileRequest,
    OTPIssuedResponse, VerifyResetResponse, AuthResponse, MessageResponse, Envelope,
    UserOut, ExistsOut, TokenStatusOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _issued_response(issued: IssuedCode, message: str) -> OTPIssuedResponse:
    response = OTPIssuedResponse(message=message, userId=issued.user_id, emailSent=issued.sent)
    if settings.OTP_DEV_MODE:
        response.otp = issued.otp
        response.devMessage = f"وضع التطوير: رمز التحقق هو {issued.otp}"
    return response


def _auth_response(result, message: Optional[str] = None) -> AuthResponse:
    return AuthResponse(
        message=message,
        token=result.token,
        refreshToken=result.refresh_token,
        user=UserOut.from_dto(result.user),
    )


def _parse_birth_date(value: Optional[str]):
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise APIException(400, messages.INVALID_DATE, errors={"dateOfBirth": [messages.INVALID_DATE]})


@router.post("/register", response_model=OTPIssuedResponse, response_model_exclude_none=True, status_code=201)
def register(
    data: RegisterRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
):
    issued = auth_service.register(
        email=data.email,
        password=data.password,
        name=data.name,
        role=data.role,
        phone=data.phone,
        address=data.address,
        date_of_birth=_parse_birth_date(data.dateOfBirth),
        specialty=data.specialty,
        location=data.location,
        fee=data.fee,
        ip_address=client_ip(request),
    )
    logger.info(f"Registered user {issued.user_id} as {data.role}")
    return _issued_response(issued, messages.REGISTERED)


@router.post("/verify-email-otp", response_model=MessageResponse)
def verify_email_otp(data: VerifyOTPRequest, auth_service: AuthService = Depends(get_auth_service)):
    auth_service.verify_email_otp(data.userId, data.otp)
    return MessageResponse(message=messages.EMAIL_VERIFIED)


@router.post("/resend-email-otp", response_model=OTPIssuedResponse, response_model_exclude_none=True)
def resend_email_otp(data: ResendOTPRequest, auth_service: AuthService = Depends(get_auth_service)):
    issued = auth_service.resend_email_otp(data.userId)
    return _issued_response(issued, messages.OTP_SENT)


@router.post("/login", response_model=AuthResponse)
def login(
    data: LoginRequest,
    request: Request,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
):
    result = auth_service.login(data.email, data.password, ip_address=client_ip(request))
    response.set_cookie(
        key="access_token",
        value=result.token,
        httponly=True,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    return _auth_response(result, messages.LOGIN_SUCCESS)


@router.post("/logout", response_model=MessageResponse)
def logout(
    response: Response,
    current_user: UserDto = Depends(get_current_user),
    token: Optional[str] = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service),
):
    auth_service.logout(token)
    response.delete_cookie("access_token")
    logger.info(f"User {current_user.id} logged out")
    return MessageResponse(message=messages.LOGOUT_SUCCESS)


@router.post("/refresh", response_model=AuthResponse)
def refresh(data: RefreshTokenRequest, auth_service: AuthService = Depends(get_auth_service)):
    return _auth_response(auth_service.refresh(data.refreshToken))


@router.get("/profile", response_model=Envelope[UserOut])
def get_profile(current_user: UserDto = Depends(get_current_user)):
    return Envelope(data=UserOut.from_dto(current_user))


@router.put("/profile", response_model=Envelope[UserOut])
def update_profile(
    data: UpdateProfileRequest,
    current_user: UserDto = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
):
    user = profile_service.update_profile(
        current_user.id,
        name=data.name,
        phone=data.phone,
        address=data.address,
        date_of_birth=data.dateOfBirth,
    )
    return Envelope(data=UserOut.from_dto(user), message=messages.PROFILE_UPDATED)


@router.put("/change-password", response_model=MessageResponse)
def change_password(
    data: ChangePasswordRequest,
    current_user: UserDto = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    auth_service.change_password(current_user.id, data.currentPassword, data.newPassword, data.confirmPassword)
    return MessageResponse(message=messages.PASSWORD_CHANGED)


@router.post("/forgot-password", response_model=OTPIssuedResponse, response_model_exclude_none=True)
def forgot_password(data: EmailRequest, request: Request, auth_service: AuthService = Depends(get_auth_service)):
    issued = auth_service.forgot_password(data.email, ip_address=client_ip(request))
    response = _issued_response(issued, messages.OTP_SENT)
    response.emailSent = None
    return response


@router.post("/verify-password-reset-otp", response_model=VerifyResetResponse)
def verify_password_reset_otp(data: VerifyOTPRequest, auth_service: AuthService = Depends(get_auth_service)):
    ok = auth_service.verify_password_reset_otp(data.userId, data.otp)
    return VerifyResetResponse(message=messages.OTP_VALID, canResetPassword=ok)


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(data: ResetPasswordRequest, auth_service: AuthService = Depends(get_auth_service)):
    auth_service.reset_password(data.userId, data.otp, data.newPassword)
    return MessageResponse(message=messages.PASSWORD_RESET)


@router.post("/check-email", response_model=Envelope[ExistsOut])
def check_email(data: EmailRequest, auth_service: AuthService = Depends(get_auth_service)):
    return Envelope(data=ExistsOut(exists=auth_service.email_exists(data.email)))


@router.get("/validate-token", response_model=Envelope[TokenStatusOut])
def validate_token(
    token: Optional[str] = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service),
):
    user = auth_service.validate_token(token)
    return Envelope(data=TokenStatusOut(valid=user is not None, user=UserOut.from_dto(user) if user else None))
