from beanie import Document, Indexed
from pydantic import EmailStr, Field
from datetime import datetime
from typing import Optional

from sixloans.schemas.enums import RoleEnum


class User(Document):
    name: str = Field(..., description="Full name of the user")
    email: Indexed(EmailStr, unique=True) = Field(..., description="Email address of the user")
    phone: Indexed(str, unique=True) = Field(..., description="Normalized phone number of the user")
    hashed_password: str = Field(..., description="Hashed password for the user account")
    role: RoleEnum = Field(default=RoleEnum.user, description="Authorization role")
    email_verified: bool = Field(default=False, description="Whether the email address was confirmed with an OTP")
    email_verified_at: Optional[datetime] = Field(None, description="When the email address was confirmed")
    token_version: int = Field(default=0, description="Bumped on logout-all to invalidate issued tokens")

    pan_card: Optional[str] = Field(None, description="PAN card number")
    city: Optional[str] = None
    pincode: Optional[str] = None
    employment_type: Optional[str] = None
    employer_name: Optional[str] = None
    work_experience: Optional[str] = None
    residence_type: Optional[str] = None
    monthly_income: Optional[float] = None

    created_at: datetime = Field(default_factory=datetime.utcnow, description="Timestamp when the user was created")
    updated_at: Optional[datetime] = Field(None, description="Timestamp when the user was last updated")

    class Settings:
        name = "users"
