from beanie import Document, Indexed
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List

from sixloans.schemas.enums import ProductTypeEnum, ApplicationStatusEnum


class ApplicationDocumentLink(BaseModel):
    title: str = Field(..., description="Document label, e.g. 'PAN card'")
    url: str = Field(..., description="Where the uploaded document is stored")


class Application(Document):
    application_number: Indexed(int, unique=True) = Field(..., description="Sequential application number")
    reference_no: Optional[str] = Field(None, description="Checksummed reference shown to the applicant")
    user_id: Optional[str] = Field(None, description="Id of the linked user account, if any")
    product_type: ProductTypeEnum = Field(..., description="Kind of product applied for")
    product_id: Optional[str] = Field(None, description="Id of the product applied for")
    category_slug: Optional[str] = None
    category_name: Optional[str] = None
    status: ApplicationStatusEnum = Field(default=ApplicationStatusEnum.pending)
    amount: float = Field(default=0, description="Requested amount")

    applicant_name: str
    email: str
    phone: str
    pan_number: Optional[str] = None
    employment_type: Optional[str] = None
    monthly_income: Optional[str] = None
    employer_name: Optional[str] = None
    work_experience: Optional[str] = None
    residence_type: Optional[str] = None
    city: Optional[str] = None
    pincode: Optional[str] = None
    notes: Optional[str] = None
    feedback: Optional[str] = Field(None, description="Reviewer feedback shown to the applicant")
    documents: List[ApplicationDocumentLink] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    class Settings:
        name = "applications"


class Counter(Document):
    """Named monotonically increasing sequence."""
    name: Indexed(str, unique=True)
    value: int = 0

    class Settings:
        name = "counters"
