import itertools
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from sixloans.core.config import settings
from sixloans.core.store import InMemoryStore
from sixloans.database.repositories import ApplicationRepository, CatalogRepository, UserRepository
from sixloans.services.otp_service import OtpManager


class FakeClock:
    def __init__(self, start=None):
        self.now = start or datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class RecordingDispatcher:
    """Captures every code handed over for delivery."""

    def __init__(self, result=True):
        self.result = result
        self.sent = []

    async def __call__(self, key, code, display_name=None):
        self.sent.append((key, code, display_name))
        return self.result


class FakeUserRepository(UserRepository):
    def __init__(self):
        self.users = {}
        self._ids = itertools.count(1)

    async def get(self, user_id):
        return self.users.get(user_id)

    async def find_by_email(self, email):
        return next((u for u in self.users.values() if u.email == email), None)

    async def find_by_email_or_phone(self, email, phone):
        for user in self.users.values():
            if (email and user.email == email) or (phone and user.phone == phone):
                return user
        return None

    async def create(self, **fields):
        user = SimpleNamespace(
            id=f"user-{next(self._ids)}",
            role="USER",
            email_verified=False,
            email_verified_at=None,
            token_version=0,
            pan_card=None,
            city=None,
            pincode=None,
            employment_type=None,
            employer_name=None,
            work_experience=None,
            residence_type=None,
            monthly_income=None,
            created_at=datetime.utcnow(),
            updated_at=None,
        )
        for field, value in fields.items():
            setattr(user, field, value)
        self.users[user.id] = user
        return user

    async def save(self, user):
        user.updated_at = datetime.utcnow()
        self.users[user.id] = user
        return user

    async def list(self, skip=0, limit=50):
        users = list(self.users.values())
        return users[skip:skip + limit], len(users)

    async def count(self, created_from=None, created_to=None):
        return sum(1 for u in self.users.values() if _created_between(u, created_from, created_to))


def _created_between(item, created_from, created_to):
    return (created_from is None or item.created_at >= created_from) and (
        created_to is None or item.created_at < created_to
    )


class FakeApplicationRepository(ApplicationRepository):
    def __init__(self):
        self.applications = {}
        self._sequence = 0

    async def next_application_number(self):
        self._sequence += 1
        return self._sequence

    async def create(self, **fields):
        fields.setdefault("created_at", datetime.utcnow())
        application = SimpleNamespace(reference_no=None, feedback=None, updated_at=None, **fields)
        self.applications[application.application_number] = application
        return application

    async def save(self, application):
        application.updated_at = datetime.utcnow()
        self.applications[application.application_number] = application
        return application

    async def get_by_number(self, application_number):
        return self.applications.get(application_number)

    async def list(self, filters, skip=0, limit=50, created_from=None):
        wanted = {k: v for k, v in filters.items() if v is not None}
        items = [
            a for a in self.applications.values()
            if all(getattr(getattr(a, k), "value", getattr(a, k)) == v for k, v in wanted.items())
            and _created_between(a, created_from, None)
        ]
        return items[skip:skip + limit], len(items)

    async def list_for_user(self, user_id, email=None):
        return [a for a in self.applications.values() if a.user_id == user_id or (email and a.email == email)]

    async def count_by(self, field):
        counts = {}
        for application in self.applications.values():
            value = getattr(application, field)
            key = getattr(value, "value", value)
            counts[key] = counts.get(key, 0) + 1
        return counts

    async def count(self, created_from=None, created_to=None):
        return sum(1 for a in self.applications.values() if _created_between(a, created_from, created_to))

    async def recent(self, limit=5):
        return sorted(self.applications.values(), key=lambda a: a.created_at, reverse=True)[:limit]

    async def clear_product(self, product_ids):
        cleared = 0
        for application in self.applications.values():
            if application.product_id in product_ids:
                application.product_id = None
                cleared += 1
        return cleared


class FakeCatalogRepository(CatalogRepository):
    def __init__(self):
        self.categories = {}
        self.products = {}
        self._ids = itertools.count(1)

    async def list_categories(self, product_type=None):
        return [c for c in self.categories.values() if product_type is None or c.type == product_type]

    async def get_category(self, slug):
        return self.categories.get(slug)

    async def create_category(self, **fields):
        category = SimpleNamespace(id=f"cat-{next(self._ids)}", **fields)
        self.categories[category.slug] = category
        return category

    async def save_category(self, category):
        return category

    async def delete_category(self, category):
        del self.categories[category.slug]

    async def list_products(self, product_type=None, category_slug=None, active_only=True):
        return [
            p for p in self.products.values()
            if (product_type is None or p.product_type == product_type)
            and (category_slug is None or p.category_slug == category_slug)
            and (p.is_active or not active_only)
        ]

    async def get_product(self, product_id):
        return self.products.get(product_id)

    async def get_product_by_slug(self, slug):
        return next((p for p in self.products.values() if p.slug == slug), None)

    async def create_product(self, **fields):
        product = SimpleNamespace(id=f"prod-{next(self._ids)}", **fields)
        self.products[product.id] = product
        return product

    async def save_product(self, product):
        return product

    async def delete_product(self, product):
        del self.products[product.id]

    async def count_products_by_type(self, category_slug=None):
        counts = {}
        for product in self.products.values():
            if category_slug is None or product.category_slug == category_slug:
                key = getattr(product.product_type, "value", product.product_type)
                counts[key] = counts.get(key, 0) + 1
        return counts

    async def unlink_products(self, category_slug):
        linked = [p for p in self.products.values() if p.category_slug == category_slug]
        for product in linked:
            product.category_slug = None
        return len(linked)

    async def delete_products_in_category(self, category_slug):
        doomed = [pid for pid, p in self.products.items() if p.category_slug == category_slug]
        for product_id in doomed:
            del self.products[product_id]
        return len(doomed)


class FakeNotifier:
    def __init__(self):
        self.confirmations = []

    async def send_application_confirmation(self, email, name, product_name, product_type, reference_no):
        self.confirmations.append((email, reference_no))
        return True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def make_manager(clock):
    def factory(**kwargs):
        kwargs.setdefault("clock", clock)
        return OtpManager(InMemoryStore("test"), **kwargs)
    return factory


@pytest.fixture
def users():
    return FakeUserRepository()


@pytest.fixture
def applications():
    return FakeApplicationRepository()


@pytest.fixture
def catalog_repository():
    return FakeCatalogRepository()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def jwt_secret(monkeypatch):
    monkeypatch.setattr(settings, "JWT_SECRET_KEY", "test-secret")
    return "test-secret"


@pytest.fixture
def failing_dispatcher():
    return RecordingDispatcher(result=False)
