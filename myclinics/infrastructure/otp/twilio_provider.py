import logging
from typing import Optional

from twilio.rest import Client
from twilio.base.exceptions import TwilioRestException

from ...core.config import settings
from ...application.ports.otp_provider import OTPSender
from ...application.ports.user_repo import UserDto

logger = logging.getLogger(__name__)

MESSAGES = {
    "email_verification": "رمز التحقق الخاص بك في عياداتي هو {code}. صالح لمدة {minutes} دقائق.",
    "password_reset": "رمز إعادة تعيين كلمة المرور في عياداتي هو {code}. صالح لمدة {minutes} دقائق.",
}


class TwilioOTPSender(OTPSender):
    """Texts one-time codes to the user's phone."""

    def __init__(self, client: Optional[Client] = None, from_number: Optional[str] = None):
        self.client = client or Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
        self.from_number = from_number or settings.TWILIO_PHONE_NUMBER

    def send(self, user: UserDto, code: str, purpose: str) -> bool:
        if not user.phone:
            logger.info(f"User {user.id} has no phone; {purpose} code not texted")
            return False
        body = MESSAGES.get(purpose, MESSAGES["email_verification"]).format(code=code, minutes=settings.OTP_EXPIRY_MINUTES)
        try:
            message = self.client.messages.create(to=user.phone, from_=self.from_number, body=body)
        except TwilioRestException as e:
            logger.error(f"Twilio failed to send {purpose} code to user {user.id}: {e}")
            return False
        logger.info(f"Sent {purpose} code to user {user.id} (sid={message.sid})")
        return True


class LoggingOTPSender(OTPSender):
    """Used when no SMS provider is configured; nothing leaves the process."""

    def send(self, user: UserDto, code: str, purpose: str) -> bool:
        logger.info(f"{purpose} code issued for user {user.id}")
        return False


def get_otp_sender() -> OTPSender:
    if settings.twilio_configured:
        return TwilioOTPSender()
    return LoggingOTPSender()
