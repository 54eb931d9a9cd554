"""
Persistence seams used by the services.

Services only talk to these repository interfaces; the Beanie
implementations below are the production system of record, and tests swap
in in-memory fakes with the same methods.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from beanie import PydanticObjectId
from beanie.operators import In, Or, Set
from bson.errors import InvalidId
from pymongo import ReturnDocument

from sixloans.database.models import Application, Category, Counter, Product, User

logger = logging.getLogger(__name__)

APPLICATION_SEQUENCE = "applications"


def _object_id(value: str) -> Optional[PydanticObjectId]:
    try:
        return PydanticObjectId(value)
    except (InvalidId, TypeError):
        return None


class UserRepository:
    async def get(self, user_id: str): raise NotImplementedError
    async def find_by_email(self, email: str): raise NotImplementedError
    async def find_by_email_or_phone(self, email: Optional[str], phone: Optional[str]): raise NotImplementedError
    async def create(self, **fields): raise NotImplementedError
    async def save(self, user): raise NotImplementedError
    async def list(self, skip: int = 0, limit: int = 50) -> Tuple[List[Any], int]: raise NotImplementedError
    async def count(self, created_from: Optional[datetime] = None, created_to: Optional[datetime] = None) -> int: raise NotImplementedError


def _created_between(created_from: Optional[datetime], created_to: Optional[datetime]) -> Dict[str, Any]:
    """Mongo filter on ``created_at`` over the half-open range [created_from, created_to)."""
    bounds: Dict[str, Any] = {}
    if created_from is not None:
        bounds["$gte"] = created_from
    if created_to is not None:
        bounds["$lt"] = created_to
    return {"created_at": bounds} if bounds else {}


class BeanieUserRepository(UserRepository):
    async def get(self, user_id: str) -> Optional[User]:
        oid = _object_id(user_id)
        if oid is None:
            return None
        return await User.get(oid)

    async def find_by_email(self, email: str) -> Optional[User]:
        return await User.find_one(User.email == email)

    async def find_by_email_or_phone(self, email: Optional[str], phone: Optional[str]) -> Optional[User]:
        clauses = []
        if email:
            clauses.append(User.email == email)
        if phone:
            clauses.append(User.phone == phone)
        if not clauses:
            return None
        return await User.find_one(Or(*clauses))

    async def create(self, **fields) -> User:
        user = User(**fields)
        await user.insert()
        logger.debug("User saved with ID: %s", user.id)
        return user

    async def save(self, user: User) -> User:
        user.updated_at = datetime.utcnow()
        await user.save()
        return user

    async def list(self, skip: int = 0, limit: int = 50) -> Tuple[List[User], int]:
        total = await User.find_all().count()
        users = await User.find_all().sort(-User.created_at).skip(skip).limit(limit).to_list()
        return users, total

    async def count(self, created_from: Optional[datetime] = None, created_to: Optional[datetime] = None) -> int:
        return await User.find(_created_between(created_from, created_to)).count()


class ApplicationRepository:
    async def next_application_number(self) -> int: raise NotImplementedError
    async def create(self, **fields): raise NotImplementedError
    async def save(self, application): raise NotImplementedError
    async def get_by_number(self, application_number: int): raise NotImplementedError
    async def list(self, filters: Dict[str, Any], skip: int = 0, limit: int = 50, created_from: Optional[datetime] = None) -> Tuple[List[Any], int]: raise NotImplementedError
    async def list_for_user(self, user_id: str, email: Optional[str] = None) -> List[Any]: raise NotImplementedError
    async def count_by(self, field: str) -> Dict[str, int]: raise NotImplementedError
    async def count(self, created_from: Optional[datetime] = None, created_to: Optional[datetime] = None) -> int: raise NotImplementedError
    async def recent(self, limit: int = 5) -> List[Any]: raise NotImplementedError
    async def clear_product(self, product_ids: List[str]) -> int: raise NotImplementedError


class BeanieApplicationRepository(ApplicationRepository):
    async def next_application_number(self) -> int:
        collection = Counter.get_motor_collection()
        counter = await collection.find_one_and_update(
            {"name": APPLICATION_SEQUENCE},
            {"$inc": {"value": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return int(counter["value"])

    async def create(self, **fields) -> Application:
        application = Application(**fields)
        await application.insert()
        return application

    async def save(self, application: Application) -> Application:
        application.updated_at = datetime.utcnow()
        await application.save()
        return application

    async def get_by_number(self, application_number: int) -> Optional[Application]:
        return await Application.find_one(Application.application_number == application_number)

    async def list(self, filters: Dict[str, Any], skip: int = 0, limit: int = 50, created_from: Optional[datetime] = None) -> Tuple[List[Application], int]:
        query = {k: v for k, v in filters.items() if v is not None}
        query.update(_created_between(created_from, None))
        total = await Application.find(query).count()
        items = await Application.find(query).sort(-Application.created_at).skip(skip).limit(limit).to_list()
        return items, total

    async def list_for_user(self, user_id: str, email: Optional[str] = None) -> List[Application]:
        clauses = [Application.user_id == user_id]
        if email:
            clauses.append(Application.email == email)
        return await Application.find(Or(*clauses)).sort(-Application.created_at).to_list()

    async def count_by(self, field: str) -> Dict[str, int]:
        pipeline = [{"$group": {"_id": f"${field}", "count": {"$sum": 1}}}]
        rows = await Application.aggregate(pipeline).to_list()
        return {str(row["_id"]): row["count"] for row in rows}

    async def count(self, created_from: Optional[datetime] = None, created_to: Optional[datetime] = None) -> int:
        return await Application.find(_created_between(created_from, created_to)).count()

    async def recent(self, limit: int = 5) -> List[Application]:
        return await Application.find_all().sort(-Application.created_at).limit(limit).to_list()

    async def clear_product(self, product_ids: List[str]) -> int:
        if not product_ids:
            return 0
        result = await Application.find(In(Application.product_id, product_ids)).update(
            Set({Application.product_id: None})
        )
        return result.modified_count if result is not None else 0


class CatalogRepository:
    async def list_categories(self, product_type: Optional[str] = None) -> List[Any]: raise NotImplementedError
    async def get_category(self, slug: str): raise NotImplementedError
    async def create_category(self, **fields): raise NotImplementedError
    async def save_category(self, category): raise NotImplementedError
    async def delete_category(self, category) -> None: raise NotImplementedError
    async def list_products(self, product_type: Optional[str] = None, category_slug: Optional[str] = None, active_only: bool = True) -> List[Any]: raise NotImplementedError
    async def get_product(self, product_id: str): raise NotImplementedError
    async def get_product_by_slug(self, slug: str): raise NotImplementedError
    async def create_product(self, **fields): raise NotImplementedError
    async def save_product(self, product): raise NotImplementedError
    async def delete_product(self, product) -> None: raise NotImplementedError
    async def count_products_by_type(self, category_slug: Optional[str] = None) -> Dict[str, int]: raise NotImplementedError
    async def unlink_products(self, category_slug: str) -> int: raise NotImplementedError
    async def delete_products_in_category(self, category_slug: str) -> int: raise NotImplementedError


class BeanieCatalogRepository(CatalogRepository):
    async def list_categories(self, product_type: Optional[str] = None) -> List[Category]:
        query = Category.find(Category.type == product_type) if product_type else Category.find_all()
        return await query.sort(+Category.display_order).to_list()

    async def get_category(self, slug: str) -> Optional[Category]:
        return await Category.find_one(Category.slug == slug)

    async def create_category(self, **fields) -> Category:
        category = Category(**fields)
        await category.insert()
        return category

    async def save_category(self, category: Category) -> Category:
        await category.save()
        return category

    async def delete_category(self, category: Category) -> None:
        await category.delete()

    async def list_products(self, product_type: Optional[str] = None, category_slug: Optional[str] = None, active_only: bool = True) -> List[Product]:
        query: Dict[str, Any] = {}
        if product_type:
            query["product_type"] = product_type
        if category_slug:
            query["category_slug"] = category_slug
        if active_only:
            query["is_active"] = True
        return await Product.find(query).sort(-Product.created_at).to_list()

    async def get_product(self, product_id: str) -> Optional[Product]:
        oid = _object_id(product_id)
        if oid is None:
            return None
        return await Product.get(oid)

    async def get_product_by_slug(self, slug: str) -> Optional[Product]:
        return await Product.find_one(Product.slug == slug)

    async def create_product(self, **fields) -> Product:
        product = Product(**fields)
        await product.insert()
        return product

    async def save_product(self, product: Product) -> Product:
        product.updated_at = datetime.utcnow()
        await product.save()
        return product

    async def delete_product(self, product: Product) -> None:
        await product.delete()

    async def count_products_by_type(self, category_slug: Optional[str] = None) -> Dict[str, int]:
        pipeline: List[Dict[str, Any]] = []
        if category_slug:
            pipeline.append({"$match": {"category_slug": category_slug}})
        pipeline.append({"$group": {"_id": "$product_type", "count": {"$sum": 1}}})
        rows = await Product.aggregate(pipeline).to_list()
        return {str(row["_id"]): row["count"] for row in rows}

    async def unlink_products(self, category_slug: str) -> int:
        result = await Product.find(Product.category_slug == category_slug).update(
            Set({Product.category_slug: None, Product.updated_at: datetime.utcnow()})
        )
        return result.modified_count if result is not None else 0

    async def delete_products_in_category(self, category_slug: str) -> int:
        result = await Product.find(Product.category_slug == category_slug).delete()
        return result.deleted_count if result is not None else 0
