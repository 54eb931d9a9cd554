import logging
from datetime import datetime
from typing import Any, Dict

from fastapi import HTTPException, status

from sixloans.core.config import settings
from sixloans.database.repositories import BeanieUserRepository, UserRepository
from sixloans.services.otp_managers import email_otp_manager
from sixloans.services.otp_service import OtpManager, is_well_formed_code, raise_for_otp_status
from sixloans.utils.email import normalize_email

logger = logging.getLogger(__name__)


class EmailVerificationService:
    """Confirms ownership of an existing account's email address with a one-time code."""

    def __init__(self, users: UserRepository, otp: OtpManager):
        self.users = users
        self.otp = otp

    async def send_otp(self, email: str, resend: bool = False) -> Dict[str, Any]:
        user = await self._unverified_user(email)

        issued = await self.otp.issue(email, display_name=user.name)
        if settings.is_development:
            logger.info("[DEV] Email verification OTP %s for %s", issued.code, email)

        # The caller is told whether the mail actually went out
        delivered = await issued.delivery if issued.delivery is not None else False
        if not delivered:
            await self.otp.discard(email)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to send OTP email. Please try again later."
            )

        return {
            "success": True,
            "message": "OTP resent successfully" if resend else "OTP sent successfully to your email",
            "expiryMinutes": self.otp.ttl_minutes,
        }

    async def verify_otp(self, email: str, otp: str) -> Dict[str, Any]:
        if not is_well_formed_code(otp):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid OTP format")

        user = await self._unverified_user(email)

        outcome = await self.otp.verify(email, otp)
        raise_for_otp_status(outcome)

        user.email_verified = True
        user.email_verified_at = datetime.utcnow()
        await self.users.save(user)
        logger.info("Email verified for user %s", user.id)

        return {
            "success": True,
            "message": "Email verified successfully",
            "user": {
                "id": str(user.id),
                "email": user.email,
                "name": user.name,
                "emailVerified": True,
                "emailVerifiedAt": user.email_verified_at.isoformat(),
            },
        }

    async def status(self, email: str) -> Dict[str, Any]:
        user = await self.users.find_by_email(normalize_email(email) or email)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        verified_at = user.email_verified_at
        return {
            "success": True,
            "emailVerified": bool(user.email_verified),
            "emailVerifiedAt": verified_at.isoformat() if verified_at else None,
        }

    async def _unverified_user(self, email: str):
        user = await self.users.find_by_email(email)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        if user.email_verified:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is already verified")
        return user


email_verification_service = EmailVerificationService(BeanieUserRepository(), email_otp_manager)


def get_email_verification_service() -> EmailVerificationService:
    return email_verification_service
