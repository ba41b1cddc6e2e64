import logging
from typing import Callable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from .core.config import settings
from .db.session import get_session
from .exceptions import APIException
from . import messages
from .application.ports.user_repo import UserDto
from .application.services.auth_service import AuthService
from .application.services.profile_service import ProfileService
from .application.services.appointments_service import AppointmentsService
from .application.services.doctor_service import DoctorService
from .application.services.clinic_service import ClinicService
from .application.services.records_service import RecordsService
from .application.services.catalog_service import CatalogService
from .application.services.upload_service import UploadService
from .infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from .infrastructure.persistence.sqlalchemy.repositories.otp_repository_sql import SqlOTPRepository, SqlTokenRevocationRepository
from .infrastructure.persistence.sqlalchemy.repositories.doctor_repository_sql import SqlDoctorRepository
from .infrastructure.persistence.sqlalchemy.repositories.clinic_repository_sql import SqlClinicRepository
from .infrastructure.persistence.sqlalchemy.repositories.appointments_repository_sql import SqlAppointmentsRepository, SqlReviewRepository
from .infrastructure.persistence.sqlalchemy.repositories.records_repository_sql import SqlRecordsRepository
from .infrastructure.otp.twilio_provider import get_otp_sender
from .infrastructure.rate_limit.factory import get_rate_limiter
from .infrastructure.storage.local_storage import LocalStorageRepository
from .infrastructure.audit.std_logger import StdAuditLogger

logger = logging.getLogger(__name__)

oauth2_scheme = HTTPBearer(auto_error=False)


# ------------------------
# Service factories
# ------------------------
def get_auth_service(session: Session = Depends(get_session)) -> AuthService:
    return AuthService(
        user_repo=SqlUserRepository(session),
        otp_repo=SqlOTPRepository(session),
        otp_sender=get_otp_sender(),
        doctor_repo=SqlDoctorRepository(session),
        token_repo=SqlTokenRevocationRepository(session),
        audit=StdAuditLogger(),
        rate_limiter=get_rate_limiter(),
    )


def get_profile_service(session: Session = Depends(get_session)) -> ProfileService:
    return ProfileService(SqlUserRepository(session))


def get_appointments_service(session: Session = Depends(get_session)) -> AppointmentsService:
    return AppointmentsService(
        repo=SqlAppointmentsRepository(session),
        doctor_repo=SqlDoctorRepository(session),
        review_repo=SqlReviewRepository(session),
        slot_minutes=settings.SLOT_DURATION_MINUTES,
    )


def get_doctor_service(session: Session = Depends(get_session)) -> DoctorService:
    return DoctorService(
        doctor_repo=SqlDoctorRepository(session),
        appointments_repo=SqlAppointmentsRepository(session),
        user_repo=SqlUserRepository(session),
    )


def get_clinic_service(session: Session = Depends(get_session)) -> ClinicService:
    return ClinicService(SqlClinicRepository(session), SqlDoctorRepository(session))


def get_records_service(session: Session = Depends(get_session)) -> RecordsService:
    return RecordsService(
        repo=SqlRecordsRepository(session),
        appointments_repo=SqlAppointmentsRepository(session),
        doctor_repo=SqlDoctorRepository(session),
    )


def get_catalog_service(session: Session = Depends(get_session)) -> CatalogService:
    return CatalogService(SqlDoctorRepository(session))


def get_upload_service() -> UploadService:
    return UploadService(LocalStorageRepository())


# ------------------------
# Authentication
# ------------------------
def get_bearer_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials] = Depends(oauth2_scheme)) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    # Fallback to cookie
    return request.cookies.get("access_token")


def get_current_user(
    token: Optional[str] = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> UserDto:
    if not token:
        raise APIException(401, messages.TOKEN_INVALID)
    return auth_service.authenticate(token)


def require_role(*roles: str) -> Callable[..., UserDto]:
    def checker(current_user: UserDto = Depends(get_current_user)) -> UserDto:
        if current_user.role not in roles:
            logger.warning(f"User {current_user.id} with role {current_user.role} denied access")
            raise APIException(403)
        return current_user
    return checker


require_patient = require_role("patient")
require_doctor = require_role("doctor")
require_admin = require_role("admin")


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"
