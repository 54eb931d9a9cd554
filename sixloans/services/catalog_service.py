import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status

from sixloans.database.repositories import (
    ApplicationRepository,
    BeanieApplicationRepository,
    BeanieCatalogRepository,
    CatalogRepository,
)
from sixloans.helpers.response_builder import build_category_response, build_product_response
from sixloans.schemas import CategoryCreate, CategoryUpdate, ProductCreate, ProductTypeEnum, ProductUpdate

logger = logging.getLogger(__name__)

COUNT_KEYS = {
    ProductTypeEnum.loan: "loans",
    ProductTypeEnum.insurance: "insurance",
    ProductTypeEnum.credit_card: "creditCards",
    ProductTypeEnum.app: "apps",
}

PRODUCT_LABELS = {
    ProductTypeEnum.loan: "loan",
    ProductTypeEnum.insurance: "insurance",
    ProductTypeEnum.credit_card: "credit card",
    ProductTypeEnum.app: "app",
}


class CatalogService:
    def __init__(self, repository: CatalogRepository, applications: ApplicationRepository):
        self.repository = repository
        self.applications = applications

    async def list_categories(self, product_type: Optional[str] = None) -> List[Dict[str, Any]]:
        return [build_category_response(c) for c in await self.repository.list_categories(product_type)]

    async def category_with_products(self, slug: str) -> Dict[str, Any]:
        category = await self._category(slug)
        products = await self.repository.list_products(category_slug=slug)
        return {
            "category": build_category_response(category),
            "products": [build_product_response(p) for p in products],
        }

    async def create_category(self, data: CategoryCreate) -> Dict[str, Any]:
        if await self.repository.get_category(data.slug):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Category slug already exists")
        category = await self.repository.create_category(**data.model_dump())
        logger.info("Created category %s", category.slug)
        return build_category_response(category)

    async def update_category(self, slug: str, data: CategoryUpdate) -> Dict[str, Any]:
        category = await self._category(slug)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(category, field, value)
        category = await self.repository.save_category(category)
        return build_category_response(category)

    async def can_delete_category(self, slug: str) -> Dict[str, Any]:
        """Report which products still reference a category."""
        await self._category(slug)
        by_type = await self.repository.count_products_by_type(slug)
        counts = {key: by_type.get(product_type.value, 0) for product_type, key in COUNT_KEYS.items()}
        reasons = [
            f"{counts[key]} {PRODUCT_LABELS[product_type]} product(s)"
            for product_type, key in COUNT_KEYS.items()
            if counts[key] > 0
        ]
        return {"canDelete": not reasons, "reasons": reasons, "counts": counts}

    async def delete_category(self, slug: str) -> Dict[str, Any]:
        """Delete a category, keeping its products but detaching them from it."""
        category = await self._category(slug)
        unlinked = await self.repository.unlink_products(slug)
        await self.repository.delete_category(category)
        logger.info("Deleted category %s (%d product(s) disassociated)", slug, unlinked)
        return {
            "success": True,
            "message": "Category deleted successfully. All products have been disassociated from this category.",
        }

    async def force_delete_category(self, slug: str) -> Dict[str, Any]:
        """Delete a category together with its products.

        Applications for those products are kept; only their product
        reference is cleared. The steps run one after another without a
        transaction, so a failure part way leaves the category in place and
        the request can simply be repeated.
        """
        category = await self._category(slug)
        products = await self.repository.list_products(category_slug=slug, active_only=False)
        cleared = await self.applications.clear_product([str(p.id) for p in products])
        deleted = await self.repository.delete_products_in_category(slug)
        await self.repository.delete_category(category)
        logger.info(
            "Force deleted category %s with %d product(s); %d application(s) detached",
            slug, deleted, cleared,
        )
        return {"success": True, "message": "Category and all associated products deleted successfully"}

    async def list_products(self, product_type: Optional[str] = None, include_inactive: bool = False) -> List[Dict[str, Any]]:
        products = await self.repository.list_products(product_type=product_type, active_only=not include_inactive)
        return [build_product_response(p) for p in products]

    async def get_product_by_slug(self, slug: str) -> Dict[str, Any]:
        product = await self.repository.get_product_by_slug(slug)
        if not product or not product.is_active:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
        return build_product_response(product)

    async def get_product(self, product_id: str) -> Dict[str, Any]:
        return build_product_response(await self._product(product_id))

    async def create_product(self, data: ProductCreate) -> Dict[str, Any]:
        if await self.repository.get_product_by_slug(data.slug):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Product slug already exists")
        if data.category_slug:
            await self._category(data.category_slug)
        product = await self.repository.create_product(**data.model_dump())
        logger.info("Created %s product %s", data.product_type.value, product.slug)
        return build_product_response(product)

    async def update_product(self, product_id: str, data: ProductUpdate) -> Dict[str, Any]:
        product = await self._product(product_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("category_slug"):
            await self._category(changes["category_slug"])
        for field, value in changes.items():
            setattr(product, field, value)
        product = await self.repository.save_product(product)
        return build_product_response(product)

    async def delete_product(self, product_id: str) -> Dict[str, Any]:
        product = await self._product(product_id)
        await self.repository.delete_product(product)
        return {"success": True, "message": "Product deleted"}

    async def _category(self, slug: str):
        category = await self.repository.get_category(slug)
        if not category:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
        return category

    async def _product(self, product_id: str):
        product = await self.repository.get_product(product_id)
        if not product:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
        return product


catalog_service = CatalogService(BeanieCatalogRepository(), BeanieApplicationRepository())


def get_catalog_service() -> CatalogService:
    return catalog_service
