from typing import Optional
from datetime import datetime
from sqlmodel import Session, select

from .....db.models import OTPCode, RevokedToken
from .....application.ports.otp_repo import OTPRepository, OTPDto, TokenRevocationRepository


class SqlOTPRepository(OTPRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, row: OTPCode) -> OTPDto:
        return OTPDto(
            id=row.id,
            user_id=row.user_id,
            otp=row.otp,
            purpose=row.purpose,
            attempts=row.attempts,
            is_used=row.is_used,
            expires_at=row.expires_at,
            created_at=row.created_at,
        )

    def create(self, user_id: str, otp: str, purpose: str, expires_at: datetime) -> OTPDto:
        row = OTPCode(user_id=user_id, otp=otp, purpose=purpose, expires_at=expires_at)
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return self._to_dto(row)

    def latest_active(self, user_id: str, purpose: str) -> Optional[OTPDto]:
        row = self.session.exec(
            select(OTPCode)
            .where(OTPCode.user_id == user_id)
            .where(OTPCode.purpose == purpose)
            .where(OTPCode.is_used == False)  # noqa: E712
            .order_by(OTPCode.created_at.desc())
        ).first()
        return self._to_dto(row) if row else None

    def register_attempt(self, otp_id: str) -> int:
        row = self.session.exec(select(OTPCode).where(OTPCode.id == otp_id)).first()
        if not row:
            return 0
        row.attempts += 1
        self.session.add(row)
        self.session.commit()
        return row.attempts

    def mark_used(self, otp_id: str) -> None:
        row = self.session.exec(select(OTPCode).where(OTPCode.id == otp_id)).first()
        if not row:
            return
        row.is_used = True
        self.session.add(row)
        self.session.commit()

    def invalidate_all(self, user_id: str, purpose: str) -> None:
        rows = self.session.exec(
            select(OTPCode)
            .where(OTPCode.user_id == user_id)
            .where(OTPCode.purpose == purpose)
            .where(OTPCode.is_used == False)  # noqa: E712
        ).all()
        for row in rows:
            row.is_used = True
            self.session.add(row)
        self.session.commit()


class SqlTokenRevocationRepository(TokenRevocationRepository):
    def __init__(self, session: Session):
        self.session = session

    def revoke(self, jti: str, user_id: str, expires_at: datetime) -> None:
        if self.session.get(RevokedToken, jti):
            return
        self.session.add(RevokedToken(jti=jti, user_id=user_id, expires_at=expires_at))
        self.session.commit()

    def is_revoked(self, jti: str) -> bool:
        return self.session.get(RevokedToken, jti) is not None
