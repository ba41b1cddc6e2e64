from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, TypeVar
import math

from ... import constants
from ... import messages
from ...exceptions import APIException
from ..ports.doctor_repo import DoctorRepository, DoctorDto

T = TypeVar("T")

SPECIALTIES_PAGE_SIZE = 5
TOP_RATED_PAGE_SIZE = 4


def paginate(items: Sequence[T], page: int, limit: int) -> Tuple[List[T], Dict[str, int]]:
    """Slice a zero-based page out of ``items``.

    Returns the page and the pagination block ``{page, limit, total, totalPages}``.
    """
    page = max(page, 0)
    limit = max(limit, 1)
    total = len(items)
    start = page * limit
    return list(items[start:start + limit]), {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": math.ceil(total / limit),
    }


def _by_rating(doctors: List[DoctorDto]) -> List[DoctorDto]:
    return sorted(doctors, key=lambda d: (-d.rating, d.name))


@dataclass
class CatalogService:
    doctor_repo: DoctorRepository

    def specialties(self, page: int = 0, limit: int = SPECIALTIES_PAGE_SIZE) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
        items = [dict(s, slug=s["id"]) for s in constants.MEDICAL_SPECIALTIES]
        return paginate(items, page, limit)

    def top_rated(self, page: int = 0, limit: int = TOP_RATED_PAGE_SIZE) -> Tuple[List[DoctorDto], Dict[str, int]]:
        return paginate(_by_rating(self.doctor_repo.list_active()), page, limit)

    def all_doctors(self) -> List[DoctorDto]:
        return _by_rating(self.doctor_repo.list_active())

    def cities(self) -> List[str]:
        return list(dict.fromkeys(constants.CITIES))

    def search(self, specialty: Optional[str] = None, location: Optional[str] = None,
               clinic_name: Optional[str] = None, name: Optional[str] = None) -> List[DoctorDto]:
        """Case-insensitive substring search; blank filters are ignored."""
        def clean(value: Optional[str]) -> Optional[str]:
            return (value or "").strip() or None
        return self.doctor_repo.search(
            specialty=clean(specialty),
            location=clean(location),
            clinic_name=clean(clinic_name),
            name=clean(name),
        )

    def get_doctor(self, doctor_id: str) -> DoctorDto:
        doctor = self.doctor_repo.get_active(doctor_id)
        if not doctor:
            raise APIException(404, messages.DOCTOR_NOT_FOUND)
        return doctor
