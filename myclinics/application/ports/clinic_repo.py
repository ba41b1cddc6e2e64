from typing import List, Optional, Protocol, Dict, Any

from .doctor_repo import ClinicDto


class ClinicRepository(Protocol):
    def get_by_doctor(self, doctor_id: str) -> Optional[ClinicDto]:
        ...

    def get_by_id(self, clinic_id: str) -> Optional[ClinicDto]:
        ...

    def upsert(self, doctor_id: str, fields: Dict[str, Any]) -> ClinicDto:
        ...

    def update(self, clinic_id: str, fields: Dict[str, Any]) -> ClinicDto:
        ...

    def list_by_status(self, status: Optional[str] = None) -> List[ClinicDto]:
        ...
