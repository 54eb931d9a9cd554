from fastapi import APIRouter, Depends, Query
from typing import Any, Dict, List, Optional

from sixloans.schemas import ProductTypeEnum
from sixloans.services.catalog_service import CatalogService, get_catalog_service

router = APIRouter(prefix="/api", tags=["Catalog"])


@router.get("/categories")
async def list_categories(
    type: Optional[ProductTypeEnum] = Query(default=None, description="Filter by product type"),
    service: CatalogService = Depends(get_catalog_service),
) -> List[Dict[str, Any]]:
    return await service.list_categories(type.value if type else None)


@router.get("/categories/{slug}/products")
async def category_products(slug: str, service: CatalogService = Depends(get_catalog_service)) -> Dict[str, Any]:
    return await service.category_with_products(slug)


@router.get("/products")
async def list_products(
    type: Optional[ProductTypeEnum] = Query(default=None, description="Filter by product type"),
    service: CatalogService = Depends(get_catalog_service),
) -> List[Dict[str, Any]]:
    return await service.list_products(type.value if type else None)


@router.get("/products/{slug}")
async def product_details(slug: str, service: CatalogService = Depends(get_catalog_service)) -> Dict[str, Any]:
    return await service.get_product_by_slug(slug)
