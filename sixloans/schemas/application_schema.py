from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List, Optional, Union

from sixloans.schemas.enums import ApplicationStatusEnum


class DocumentLink(BaseModel):
    title: str
    url: str


class ApplicationCreateRequest(BaseModel):
    name: Optional[str] = Field(None, description="Applicant's full name")
    email: EmailStr = Field(..., description="Applicant's email address")
    phone: str = Field(..., min_length=6, description="Applicant's phone number")
    panNumber: Optional[str] = None
    employmentType: Optional[str] = None
    monthlyIncome: Optional[Union[str, float]] = None
    employerName: Optional[str] = None
    workExperience: Optional[Union[str, int]] = None
    residenceType: Optional[str] = None
    city: Optional[str] = None
    pincode: Optional[str] = None
    loanAmount: Optional[Union[str, float]] = None
    productId: Optional[str] = None
    # Checked against ProductTypeEnum by the service after alias mapping
    productType: str = Field(..., description="LOAN, CREDIT_CARD, INSURANCE, APP or LOAN_AGAINST_SECURITY")
    categorySlug: Optional[str] = None
    categoryName: Optional[str] = None
    documents: List[DocumentLink] = Field(default_factory=list)

    @field_validator("productType")
    @classmethod
    def upper_product_type(cls, value: str) -> str:
        return value.strip().upper()


class StatusUpdateRequest(BaseModel):
    status: Optional[ApplicationStatusEnum] = None
    feedback: Optional[str] = Field(None, description="Reviewer feedback shown to the applicant")
