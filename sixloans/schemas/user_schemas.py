from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional

from sixloans.schemas.enums import RoleEnum


class SignupRequest(BaseModel):
    name: str = Field(..., min_length=1, description="Full name of the user")
    email: EmailStr = Field(..., description="Email address of the user")
    phone: str = Field(..., min_length=6, description="Phone number of the user")
    password: str = Field(..., min_length=8, description="Password for the user account")


class EmailRequest(BaseModel):
    email: EmailStr = Field(..., description="Email address the OTP is sent to")


class OtpVerifyRequest(BaseModel):
    email: EmailStr = Field(..., description="Email address the OTP was sent to")
    otp: str = Field(..., description="One-time code received by the user")


class LoginRequest(BaseModel):
    emailOrPhone: str = Field(..., min_length=1, description="Registered email address or phone number")
    password: str = Field(..., min_length=1)


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    otp: str
    new_password: str = Field(..., min_length=8)


class UserResponse(BaseModel):
    id: str = Field(..., description="Unique identifier for the user")
    name: str
    email: EmailStr
    phone: str
    role: RoleEnum = RoleEnum.user
    email_verified: bool = False


class AuthResponse(BaseModel):
    token: str = Field(..., description="Bearer access token")
    token_type: str = Field(default="bearer")
    user: UserResponse


class RoleUpdateRequest(BaseModel):
    role: RoleEnum


class ProfileResponse(UserResponse):
    pan_card: Optional[str] = None
    city: Optional[str] = None
    pincode: Optional[str] = None
    employment_type: Optional[str] = None
    employer_name: Optional[str] = None
    work_experience: Optional[str] = None
    residence_type: Optional[str] = None
    monthly_income: Optional[float] = None
    email_verified_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class ProfileUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    pan_card: Optional[str] = None
    city: Optional[str] = None
    pincode: Optional[str] = None
    employment_type: Optional[str] = None
    employer_name: Optional[str] = None
    work_experience: Optional[str] = None
    residence_type: Optional[str] = None
    monthly_income: Optional[float] = Field(None, ge=0)
