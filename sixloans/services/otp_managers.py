from datetime import datetime
from typing import List

from pydantic import BaseModel

from sixloans.core.config import settings
from sixloans.core.store import create_store
from sixloans.services.notification_service import notification_service
from sixloans.services.otp_service import OtpManager, OtpRecord


class RevokedToken(BaseModel):
    jti: str
    expires_at: datetime


# Pending registrations: the OTP record payload carries the signup details
signup_otp_manager = OtpManager(
    create_store("otp:signup", OtpRecord),
    length=settings.SIGNUP_OTP_LENGTH,
    ttl_minutes=settings.SIGNUP_OTP_EXPIRY_MINUTES,
    dispatcher=notification_service.send_signup_otp,
    name="signup",
)

email_otp_manager = OtpManager(
    create_store("otp:verify", OtpRecord),
    length=settings.OTP_LENGTH,
    ttl_minutes=settings.OTP_EXPIRY_MINUTES,
    dispatcher=notification_service.send_otp,
    name="email-verification",
)

password_reset_otp_manager = OtpManager(
    create_store("otp:reset", OtpRecord),
    length=settings.OTP_LENGTH,
    ttl_minutes=settings.OTP_EXPIRY_MINUTES,
    dispatcher=notification_service.send_password_reset_otp,
    name="password-reset",
)

revoked_token_store = create_store("auth:revoked", RevokedToken)


def all_otp_managers() -> List[OtpManager]:
    return [signup_otp_manager, email_otp_manager, password_reset_otp_manager]
