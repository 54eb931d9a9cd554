from beanie import Document, Indexed
from pydantic import Field
from datetime import datetime
from typing import Optional, List, Dict, Any

from sixloans.schemas.enums import ProductTypeEnum


class Category(Document):
    name: str = Field(..., description="Display name, e.g. 'Personal Loan'")
    slug: Indexed(str, unique=True) = Field(..., description="URL slug, e.g. 'personal-loan'")
    type: ProductTypeEnum = Field(..., description="Kind of product listed under this category")
    description: Optional[str] = None
    display_order: int = 0
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "categories"


class Product(Document):
    product_type: ProductTypeEnum = Field(..., description="Loan, credit card, insurance or app")
    title: str = Field(..., description="Product title shown in the catalog")
    slug: Indexed(str, unique=True) = Field(..., description="URL slug of the product")
    provider_name: str = Field(..., description="Bank, insurer or partner offering the product")
    category_slug: Optional[str] = Field(None, description="Slug of the owning category")
    summary: Optional[str] = None
    features: List[str] = Field(default_factory=list, description="Bullet points shown on the product card")
    details: Dict[str, Any] = Field(default_factory=dict, description="Type specific attributes (rates, fees, limits)")
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    class Settings:
        name = "products"
