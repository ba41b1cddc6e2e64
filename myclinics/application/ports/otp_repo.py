from dataclasses import dataclass
from typing import Protocol, Optional
from datetime import datetime


@dataclass
class OTPDto:
    id: str
    user_id: str
    otp: str
    purpose: str
    attempts: int
    is_used: bool
    expires_at: datetime
    created_at: datetime


class OTPRepository(Protocol):
    def create(self, user_id: str, otp: str, purpose: str, expires_at: datetime) -> OTPDto:
        ...

    def latest_active(self, user_id: str, purpose: str) -> Optional[OTPDto]:
        ...

    def register_attempt(self, otp_id: str) -> int:
        ...

    def mark_used(self, otp_id: str) -> None:
        ...

    def invalidate_all(self, user_id: str, purpose: str) -> None:
        ...


class TokenRevocationRepository(Protocol):
    def revoke(self, jti: str, user_id: str, expires_at: datetime) -> None:
        ...

    def is_revoked(self, jti: str) -> bool:
        ...
