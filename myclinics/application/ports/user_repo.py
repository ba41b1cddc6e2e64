from dataclasses import dataclass
from typing import Protocol, Optional, Dict, Any
from datetime import datetime, date


@dataclass
class UserDto:
    id: str
    name: str
    email: str
    password_hash: str
    phone: Optional[str]
    role: str
    address: Optional[str]
    date_of_birth: Optional[date]
    is_email_verified: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime


class UserRepository(Protocol):
    def get_by_id(self, user_id: str) -> Optional[UserDto]:
        ...

    def get_by_email(self, email: str) -> Optional[UserDto]:
        ...

    def get_by_phone(self, phone: str) -> Optional[UserDto]:
        ...

    def create(self, name: str, email: str, password_hash: str, role: str, phone: Optional[str],
               address: Optional[str], date_of_birth: Optional[date]) -> UserDto:
        ...

    def mark_email_verified(self, user_id: str) -> None:
        ...

    def set_password(self, user_id: str, password_hash: str) -> None:
        ...

    def update_profile_fields(self, user_id: str, fields: Dict[str, Any]) -> Optional[UserDto]:
        ...
