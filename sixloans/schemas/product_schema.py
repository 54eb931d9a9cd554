from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any

from sixloans.schemas.enums import ProductTypeEnum


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    type: ProductTypeEnum
    description: Optional[str] = None
    display_order: int = 0


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    display_order: Optional[int] = None


class ProductCreate(BaseModel):
    product_type: ProductTypeEnum
    title: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    provider_name: str = Field(..., min_length=1)
    category_slug: Optional[str] = None
    summary: Optional[str] = None
    features: List[str] = Field(default_factory=list)
    details: Dict[str, Any] = Field(default_factory=dict)
    is_active: bool = True


class ProductUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    provider_name: Optional[str] = Field(None, min_length=1)
    category_slug: Optional[str] = None
    summary: Optional[str] = None
    features: Optional[List[str]] = None
    details: Optional[Dict[str, Any]] = None
    is_active: Optional[bool] = None
