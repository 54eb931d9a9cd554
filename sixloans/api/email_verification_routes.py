from fastapi import APIRouter, Depends
from typing import Any, Dict

from sixloans.schemas import EmailRequest, OtpVerifyRequest
from sixloans.services.email_verification_service import (
    EmailVerificationService,
    get_email_verification_service,
)

router = APIRouter(prefix="/api/email-verification", tags=["Email Verification"])


@router.post("/send-otp")
async def send_otp(
    data: EmailRequest,
    service: EmailVerificationService = Depends(get_email_verification_service),
) -> Dict[str, Any]:
    return await service.send_otp(data.email)


@router.post("/verify-otp")
async def verify_otp(
    data: OtpVerifyRequest,
    service: EmailVerificationService = Depends(get_email_verification_service),
) -> Dict[str, Any]:
    return await service.verify_otp(data.email, data.otp)


@router.post("/resend-otp")
async def resend_otp(
    data: EmailRequest,
    service: EmailVerificationService = Depends(get_email_verification_service),
) -> Dict[str, Any]:
    return await service.send_otp(data.email, resend=True)


@router.get("/status/{email}")
async def verification_status(
    email: str,
    service: EmailVerificationService = Depends(get_email_verification_service),
) -> Dict[str, Any]:
    return await service.status(email)
