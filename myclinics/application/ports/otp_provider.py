from typing import Protocol

from .user_repo import UserDto


class OTPSender(Protocol):
    def send(self, user: UserDto, code: str, purpose: str) -> bool:
        ...
