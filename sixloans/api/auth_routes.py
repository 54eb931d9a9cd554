from fastapi import APIRouter, Depends, status
from typing import Any, Dict

from sixloans.core.auth_dependencies import get_current_user, get_token_payload
from sixloans.helpers.response_builder import build_user_response
from sixloans.schemas import (
    AuthResponse,
    EmailRequest,
    LoginRequest,
    OtpVerifyRequest,
    ResetPasswordRequest,
    SignupRequest,
    UserResponse,
)
from sixloans.services.auth_service import AuthService, get_auth_service

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"]
)

# Starts a signup and emails the verification code
@router.post("/signup", status_code=status.HTTP_202_ACCEPTED)
async def signup(data: SignupRequest, service: AuthService = Depends(get_auth_service)) -> Dict[str, Any]:
    return await service.initiate_signup(data)

# Completes a pending signup with the emailed code and opens a session
@router.post("/signup/verify", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def verify_signup(data: OtpVerifyRequest, service: AuthService = Depends(get_auth_service)):
    return await service.complete_signup(data.email, data.otp)

# Sends a fresh code for a pending signup
@router.post("/send-otp")
async def send_signup_otp(data: EmailRequest, service: AuthService = Depends(get_auth_service)) -> Dict[str, Any]:
    return await service.resend_signup_otp(data.email)

# Authenticates with email or phone and password
@router.post("/login", response_model=AuthResponse)
async def login(data: LoginRequest, service: AuthService = Depends(get_auth_service)):
    return await service.login(data.emailOrPhone, data.password)

# Returns the authenticated user
@router.get("/me", response_model=UserResponse)
async def me(current_user=Depends(get_current_user)):
    return build_user_response(current_user)

@router.post("/logout")
async def logout(
    payload: Dict[str, Any] = Depends(get_token_payload),
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    return await service.logout(payload)

@router.post("/logout-all")
async def logout_all(
    current_user=Depends(get_current_user),
    payload: Dict[str, Any] = Depends(get_token_payload),
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    return await service.logout_all(current_user, payload)

# Swaps the current token for a new one with a fresh expiry
@router.post("/refresh-token", response_model=AuthResponse)
async def refresh_token(
    current_user=Depends(get_current_user),
    payload: Dict[str, Any] = Depends(get_token_payload),
    service: AuthService = Depends(get_auth_service),
):
    return await service.refresh(current_user, payload)

@router.post("/forgot-password")
async def forgot_password(data: EmailRequest, service: AuthService = Depends(get_auth_service)) -> Dict[str, Any]:
    return await service.request_password_reset(data.email)

@router.post("/reset-password")
async def reset_password(data: ResetPasswordRequest, service: AuthService = Depends(get_auth_service)) -> Dict[str, Any]:
    return await service.reset_password(data.email, data.otp, data.new_password)
