import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from .. import messages
from ..application.ports.user_repo import UserDto
from ..application.services.clinic_service import ClinicService
from ..dependencies import get_clinic_service, require_admin
from ..schemas import Envelope, ClinicReviewOut, RejectClinicRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/clinics", response_model=Envelope[List[ClinicReviewOut]])
def list_clinics(
    status: Optional[str] = Query(None),
    current_user: UserDto = Depends(require_admin),
    clinic_service: ClinicService = Depends(get_clinic_service),
):
    clinics = clinic_service.list_for_review(status)
    return Envelope(data=[ClinicReviewOut.from_dto(c) for c in clinics])


@router.put("/clinics/{clinic_id}/approve", response_model=Envelope[ClinicReviewOut])
def approve_clinic(
    clinic_id: str,
    current_user: UserDto = Depends(require_admin),
    clinic_service: ClinicService = Depends(get_clinic_service),
):
    clinic = clinic_service.approve(clinic_id)
    logger.info(f"Admin {current_user.id} approved clinic {clinic_id}")
    return Envelope(data=ClinicReviewOut.from_dto(clinic), message=messages.CLINIC_APPROVED)


@router.put("/clinics/{clinic_id}/reject", response_model=Envelope[ClinicReviewOut])
def reject_clinic(
    clinic_id: str,
    data: RejectClinicRequest,
    current_user: UserDto = Depends(require_admin),
    clinic_service: ClinicService = Depends(get_clinic_service),
):
    clinic = clinic_service.reject(clinic_id, data.reason or "")
    logger.info(f"Admin {current_user.id} rejected clinic {clinic_id}")
    return Envelope(data=ClinicReviewOut.from_dto(clinic), message=messages.CLINIC_REJECTED)
