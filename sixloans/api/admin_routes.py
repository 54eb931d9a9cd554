from fastapi import APIRouter, Depends, Query, status
from typing import Any, Dict, List, Optional

from sixloans.core.auth_dependencies import get_admin_user, get_staff_user
from sixloans.schemas import (
    ApplicationStatusEnum,
    CategoryCreate,
    CategoryUpdate,
    PeriodEnum,
    ProductCreate,
    ProductTypeEnum,
    ProductUpdate,
    RoleUpdateRequest,
    StatusUpdateRequest,
)
from sixloans.services.application_service import ApplicationService, get_application_service
from sixloans.services.catalog_service import CatalogService, get_catalog_service
from sixloans.services.dashboard_service import DashboardService, get_dashboard_service
from sixloans.services.user_service import UserService, get_user_service

router = APIRouter(prefix="/api/admin", tags=["Admin"], dependencies=[Depends(get_staff_user)])


@router.get("/stats")
async def stats(service: DashboardService = Depends(get_dashboard_service)) -> Dict[str, Any]:
    return await service.stats()


@router.get("/users")
async def list_users(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=500),
    service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    return await service.list_users(skip=skip, limit=limit)


@router.put("/users/{user_id}/role")
async def set_user_role(
    user_id: str,
    data: RoleUpdateRequest,
    admin=Depends(get_admin_user),
    service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    return await service.set_role(admin, user_id, data.role)


@router.get("/categories")
async def list_categories(
    type: Optional[ProductTypeEnum] = Query(default=None),
    service: CatalogService = Depends(get_catalog_service),
) -> List[Dict[str, Any]]:
    return await service.list_categories(type.value if type else None)


@router.post("/categories", status_code=status.HTTP_201_CREATED)
async def create_category(data: CategoryCreate, service: CatalogService = Depends(get_catalog_service)) -> Dict[str, Any]:
    return await service.create_category(data)


@router.put("/categories/{slug}")
async def update_category(slug: str, data: CategoryUpdate, service: CatalogService = Depends(get_catalog_service)) -> Dict[str, Any]:
    return await service.update_category(slug, data)


@router.get("/categories/{slug}/can-delete")
async def can_delete_category(slug: str, service: CatalogService = Depends(get_catalog_service)) -> Dict[str, Any]:
    return await service.can_delete_category(slug)


@router.delete("/categories/{slug}")
async def delete_category(slug: str, service: CatalogService = Depends(get_catalog_service)) -> Dict[str, Any]:
    return await service.delete_category(slug)


@router.delete("/categories/{slug}/force")
async def force_delete_category(slug: str, service: CatalogService = Depends(get_catalog_service)) -> Dict[str, Any]:
    return await service.force_delete_category(slug)


@router.get("/products")
async def list_products(
    type: Optional[ProductTypeEnum] = Query(default=None),
    service: CatalogService = Depends(get_catalog_service),
) -> List[Dict[str, Any]]:
    return await service.list_products(type.value if type else None, include_inactive=True)


@router.post("/products", status_code=status.HTTP_201_CREATED)
async def create_product(data: ProductCreate, service: CatalogService = Depends(get_catalog_service)) -> Dict[str, Any]:
    return await service.create_product(data)


@router.get("/products/{product_id}")
async def get_product(product_id: str, service: CatalogService = Depends(get_catalog_service)) -> Dict[str, Any]:
    return await service.get_product(product_id)


@router.put("/products/{product_id}")
async def update_product(product_id: str, data: ProductUpdate, service: CatalogService = Depends(get_catalog_service)) -> Dict[str, Any]:
    return await service.update_product(product_id, data)


@router.delete("/products/{product_id}")
async def delete_product(product_id: str, service: CatalogService = Depends(get_catalog_service)) -> Dict[str, Any]:
    return await service.delete_product(product_id)


@router.get("/applications")
async def list_applications(
    status_filter: Optional[ApplicationStatusEnum] = Query(default=None, alias="status"),
    type: Optional[ProductTypeEnum] = Query(default=None),
    category_slug: Optional[str] = Query(default=None, alias="categorySlug"),
    period: Optional[PeriodEnum] = Query(default=None),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=500),
    service: ApplicationService = Depends(get_application_service),
) -> Dict[str, Any]:
    return await service.list(
        status_filter=status_filter.value if status_filter else None,
        product_type=type.value if type else None,
        category_slug=category_slug,
        period=period,
        skip=skip,
        limit=limit,
    )


@router.put("/applications/{application_id}")
async def update_application_status(
    application_id: int,
    data: StatusUpdateRequest,
    service: ApplicationService = Depends(get_application_service),
) -> Dict[str, Any]:
    return await service.update_status(application_id, data.status, data.feedback)
