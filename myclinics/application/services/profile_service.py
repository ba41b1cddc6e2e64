from dataclasses import dataclass
from typing import Optional, Dict, Any
from datetime import datetime, date

from ...exceptions import APIException
from ... import messages
from ..ports.user_repo import UserRepository, UserDto


@dataclass
class ProfileService:
    user_repo: UserRepository

    def get_profile(self, user_id: str) -> UserDto:
        user = self.user_repo.get_by_id(user_id)
        if not user:
            raise APIException(404, messages.USER_NOT_FOUND)
        return user

    def update_profile(self, user_id: str, name: Optional[str] = None, phone: Optional[str] = None,
                       address: Optional[str] = None, date_of_birth: Optional[str] = None) -> UserDto:
        fields: Dict[str, Any] = {}
        if name is not None:
            if not name.strip():
                raise APIException(400, errors={"name": [messages.status_message(422)]})
            fields["name"] = name.strip()
        if phone is not None:
            existing = self.user_repo.get_by_phone(phone)
            if existing and existing.id != user_id:
                raise APIException(409, code=messages.PHONE_EXISTS)
            fields["phone"] = phone
        if address is not None:
            fields["address"] = address
        if date_of_birth is not None:
            try:
                dob = datetime.strptime(date_of_birth, "%Y-%m-%d").date()
            except ValueError:
                raise APIException(400, messages.INVALID_DATE, errors={"dateOfBirth": [messages.INVALID_DATE]})
            if dob > date.today():
                raise APIException(400, messages.INVALID_DATE, errors={"dateOfBirth": [messages.INVALID_DATE]})
            fields["date_of_birth"] = dob
        user = self.user_repo.update_profile_fields(user_id, fields)
        if not user:
            raise APIException(404, messages.USER_NOT_FOUND)
        return user
