from fastapi import HTTPException, status
from datetime import datetime
from typing import Any, Dict, Optional
import logging

from sixloans.core.config import settings
from sixloans.core.security import (
    create_access_token,
    hash_password,
    is_valid_password,
    token_claims_for,
    token_expiry,
    verify_password,
)
from sixloans.core.store import ExpiringStore
from sixloans.database.repositories import BeanieUserRepository, UserRepository
from sixloans.helpers.response_builder import build_user_response
from sixloans.schemas import SignupRequest
from sixloans.services.otp_managers import (
    RevokedToken,
    password_reset_otp_manager,
    revoked_token_store,
    signup_otp_manager,
)
from sixloans.services.otp_service import OtpManager, raise_for_otp_status
from sixloans.utils.email import normalize_email
from sixloans.utils.phone import normalize_phone_number

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(
        self,
        users: UserRepository,
        signup_otp: OtpManager,
        reset_otp: OtpManager,
        revoked_tokens: ExpiringStore[RevokedToken],
    ):
        self.users = users
        self.signup_otp = signup_otp
        self.reset_otp = reset_otp
        self.revoked_tokens = revoked_tokens

    # Start a signup: keep the details as a pending registration until the emailed OTP comes back
    async def initiate_signup(self, data: SignupRequest) -> Dict[str, Any]:
        phone = normalize_phone_number(data.phone)
        existing = await self.users.find_by_email_or_phone(data.email, phone)
        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="User with this email or phone already exists"
            )

        try:
            hashed_password = hash_password(data.password)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Password must be at least 8 characters long"
            )

        pending = {
            "name": data.name,
            "email": data.email,
            "phone": phone,
            "hashed_password": hashed_password,
        }
        issued = await self.signup_otp.issue(data.email, display_name=data.name, payload=pending)
        if settings.is_development:
            logger.info("[DEV] Signup OTP %s for %s", issued.code, data.email)

        return {
            "success": True,
            "message": "OTP sent to email",
            "expiryMinutes": self.signup_otp.ttl_minutes,
        }

    # Send a fresh code for a pending registration; the previous one stops working
    async def resend_signup_otp(self, email: str) -> Dict[str, Any]:
        pending = await self.signup_otp.peek(email)
        if pending is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No pending signup for this email. Please sign up again"
            )
        issued = await self.signup_otp.resend(email, display_name=pending.payload.get("name"))
        if settings.is_development:
            logger.info("[DEV] Signup OTP %s for %s", issued.code, email)
        return {
            "success": True,
            "message": "OTP resent successfully",
            "expiryMinutes": self.signup_otp.ttl_minutes,
        }

    # Finish a signup: a valid OTP promotes the pending registration to a user account
    async def complete_signup(self, email: str, otp: str) -> Dict[str, Any]:
        outcome, record = await self.signup_otp.consume(email, otp)
        raise_for_otp_status(outcome)

        pending = record.payload
        if not pending.get("hashed_password"):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No pending signup for this email. Please sign up again"
            )

        # Someone may have registered the same email or phone while the code was outstanding
        if await self.users.find_by_email_or_phone(pending["email"], pending["phone"]):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="User with this email or phone already exists"
            )

        now = datetime.utcnow()
        user = await self.users.create(
            name=pending["name"],
            email=pending["email"],
            phone=pending["phone"],
            hashed_password=pending["hashed_password"],
            email_verified=True,
            email_verified_at=now,
            created_at=now,
        )
        logger.info("Registered user %s", user.id)
        return self._session_for(user)

    # Authenticate with email or phone plus password
    async def login(self, email_or_phone: str, password: str) -> Dict[str, Any]:
        identifier = email_or_phone.strip()
        if "@" in identifier:
            email = normalize_email(identifier)
            user = await self.users.find_by_email_or_phone(email, None) if email else None
        else:
            user = await self.users.find_by_email_or_phone(None, normalize_phone_number(identifier))

        if not user or not verify_password(password, user.hashed_password):
            logger.warning("Failed login for %s", identifier)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials"
            )
        return self._session_for(user)

    async def is_token_revoked(self, payload: Dict[str, Any]) -> bool:
        jti = payload.get("jti")
        if not jti:
            return True
        return await self.revoked_tokens.get(jti) is not None

    # Revoke a single token until it would have expired anyway
    async def logout(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        await self._revoke(payload)
        return {"success": True, "message": "Successfully logged out. Token has been revoked."}

    # Invalidate every token issued to the user so far
    async def logout_all(self, user, payload: Dict[str, Any]) -> Dict[str, Any]:
        user.token_version = (user.token_version or 0) + 1
        await self.users.save(user)
        await self._revoke(payload)
        logger.info("User %s logged out from all devices", user.email)
        return {"success": True, "message": "Successfully logged out from all devices. All tokens have been revoked."}

    async def refresh(self, user, payload: Dict[str, Any]) -> Dict[str, Any]:
        await self._revoke(payload)
        return self._session_for(user)

    async def request_password_reset(self, email: str) -> Dict[str, Any]:
        user = await self.users.find_by_email(email)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )
        issued = await self.reset_otp.issue(email, display_name=user.name)
        if settings.is_development:
            logger.info("[DEV] Password reset OTP %s for %s", issued.code, email)
        return {"success": True, "message": "OTP sent to your email for password reset"}

    async def reset_password(self, email: str, otp: str, new_password: str) -> Dict[str, Any]:
        if not is_valid_password(new_password):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Password must be at least 8 characters long"
            )
        user = await self.users.find_by_email(email)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )

        outcome = await self.reset_otp.verify(email, otp)
        raise_for_otp_status(outcome)

        user.hashed_password = hash_password(new_password)
        # Existing sessions end with the old password
        user.token_version = (user.token_version or 0) + 1
        await self.users.save(user)
        return {"success": True, "message": "Password reset successfully"}

    async def _revoke(self, payload: Dict[str, Any]) -> None:
        jti = payload.get("jti")
        if jti:
            await self.revoked_tokens.put(jti, RevokedToken(jti=jti, expires_at=token_expiry(payload)))

    def _session_for(self, user) -> Dict[str, Any]:
        try:
            token = create_access_token(token_claims_for(user))
        except ValueError as e:
            logger.error("Token creation failed: %s", e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Could not create access token"
            )
        return {"token": token, "token_type": "bearer", "user": build_user_response(user)}


auth_service = AuthService(
    users=BeanieUserRepository(),
    signup_otp=signup_otp_manager,
    reset_otp=password_reset_otp_manager,
    revoked_tokens=revoked_token_store,
)


def get_auth_service() -> AuthService:
    return auth_service
