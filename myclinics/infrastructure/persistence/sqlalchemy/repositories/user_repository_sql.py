from typing import Optional, Dict, Any
from datetime import date
from sqlmodel import Session, select

from .....utils import utc_now
from .....db.models import User
from .....application.ports.user_repo import UserRepository, UserDto


def user_to_dto(user: User) -> UserDto:
    return UserDto(
        id=user.id,
        name=user.name,
        email=user.email,
        password_hash=user.password_hash,
        phone=user.phone,
        role=user.role,
        address=user.address,
        date_of_birth=user.date_of_birth,
        is_email_verified=bool(user.is_email_verified),
        is_active=bool(user.is_active),
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


class SqlUserRepository(UserRepository):
    def __init__(self, session: Session):
        self.session = session

    def _find(self, *criteria) -> Optional[User]:
        return self.session.exec(select(User).where(*criteria)).first()

    def _touch(self, user: User, **changes: Any) -> User:
        for key, value in changes.items():
            setattr(user, key, value)
        user.updated_at = utc_now()
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def get_by_id(self, user_id: str) -> Optional[UserDto]:
        found = self._find(User.id == user_id)
        return user_to_dto(found) if found else None

    def get_by_email(self, email: str) -> Optional[UserDto]:
        found = self._find(User.email == email)
        return user_to_dto(found) if found else None

    def get_by_phone(self, phone: str) -> Optional[UserDto]:
        found = self._find(User.phone == phone)
        return user_to_dto(found) if found else None

    def create(self, name: str, email: str, password_hash: str, role: str, phone: Optional[str],
               address: Optional[str], date_of_birth: Optional[date]) -> UserDto:
        user = User(name=name, email=email, password_hash=password_hash, role=role,
                    phone=phone, address=address, date_of_birth=date_of_birth)
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user_to_dto(user)

    def mark_email_verified(self, user_id: str) -> None:
        user = self._find(User.id == user_id)
        if user:
            self._touch(user, is_email_verified=True)

    def set_password(self, user_id: str, password_hash: str) -> None:
        user = self._find(User.id == user_id)
        if user:
            self._touch(user, password_hash=password_hash)

    def update_profile_fields(self, user_id: str, fields: Dict[str, Any]) -> Optional[UserDto]:
        user = self._find(User.id == user_id)
        if not user:
            return None
        return user_to_dto(self._touch(user, **fields))
