from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from main import app
from sixloans.core.auth_dependencies import get_current_user
from sixloans.core.security import hash_password
from sixloans.core.store import InMemoryStore
from sixloans.services.application_service import ApplicationService, get_application_service
from sixloans.services.auth_service import AuthService, get_auth_service
from sixloans.services.catalog_service import CatalogService, get_catalog_service
from sixloans.services.dashboard_service import DashboardService, get_dashboard_service


@pytest.fixture
def client():
    app.dependency_overrides = {}
    yield TestClient(app)
    app.dependency_overrides = {}


@pytest.fixture
def application_service(applications, users, notifier):
    service = ApplicationService(applications, users, notifier)
    app.dependency_overrides[get_application_service] = lambda: service
    return service


@pytest.fixture
def dashboard_service(applications, users, catalog_repository):
    service = DashboardService(applications, users, catalog_repository)
    app.dependency_overrides[get_dashboard_service] = lambda: service
    return service


@pytest.fixture
def catalog_service(catalog_repository, applications):
    service = CatalogService(catalog_repository, applications)
    app.dependency_overrides[get_catalog_service] = lambda: service
    return service


@pytest.fixture
def auth_service(users, make_manager, dispatcher):
    service = AuthService(
        users=users,
        signup_otp=make_manager(length=4, dispatcher=dispatcher),
        reset_otp=make_manager(dispatcher=dispatcher),
        revoked_tokens=InMemoryStore("revoked"),
    )
    app.dependency_overrides[get_auth_service] = lambda: service
    return service


def _as(role):
    user = SimpleNamespace(id="staff-1", email="staff@example.com", role=role, token_version=0)
    app.dependency_overrides[get_current_user] = lambda: user
    return user


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
    assert resp.headers["X-Frame-Options"] == "DENY"


def test_submit_application_returns_reference(client, application_service, notifier):
    resp = client.post("/api/applications/", json={
        "name": "Kiran Shah",
        "email": "kiran@example.com",
        "phone": "+919000012345",
        "loanAmount": "250000",
        "productType": "LOAN",
        "categorySlug": "personal-loan",
    })

    assert resp.status_code == 201
    body = resp.json()
    assert body["referenceNo"] == "SIX-L-PER-00001-08"
    assert notifier.confirmations == [("kiran@example.com", body["referenceNo"])]

    fetched = client.get("/api/applications/1")
    assert fetched.status_code == 200
    assert fetched.json()["referenceNo"] == body["referenceNo"]


def test_missing_application_uses_error_envelope(client, application_service):
    resp = client.get("/api/applications/99")
    assert resp.status_code == 404
    error = resp.json()["error"]
    assert error["message"] == "Application not found"
    assert error["code"] == "not_found"


def test_invalid_body_is_a_validation_error(client, application_service):
    resp = client.post("/api/applications/", json={"email": "not-an-email", "productType": "LOAN"})
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "validation_error"


def test_admin_routes_reject_regular_users(client, application_service):
    _as("USER")
    resp = client.get("/api/admin/stats")
    assert resp.status_code == 403
    assert resp.json()["error"]["message"] == "Access denied. Admins or Moderators only."


def test_moderator_can_read_stats_but_not_change_roles(client, dashboard_service):
    _as("MODERATOR")
    stats = client.get("/api/admin/stats").json()
    assert stats["totalApplications"] == 0
    assert stats["appTrend"] == "+0.0%"
    assert stats["recentApplications"] == []

    resp = client.put("/api/admin/users/user-2/role", json={"role": "ADMIN"})
    assert resp.status_code == 403


def test_admin_status_update(client, application_service):
    client.post("/api/applications/", json={
        "email": "kiran@example.com",
        "phone": "+919000012345",
        "productType": "INSURANCE",
    })
    _as("ADMIN")

    resp = client.put("/api/admin/applications/1", json={"status": "UNDER_REVIEW"})
    assert resp.status_code == 200
    assert resp.json()["application"]["status"] == "UNDER_REVIEW"

    resp = client.put("/api/admin/applications/1", json={"feedback": "Awaiting salary slips"})
    assert resp.json()["application"]["status"] == "UNDER_REVIEW"
    assert resp.json()["application"]["feedback"] == "Awaiting salary slips"

    assert client.put("/api/admin/applications/1", json={}).status_code == 400


def test_admin_application_filters(client, application_service):
    for slug in ("personal-loan", "home-loan"):
        client.post("/api/applications/", json={
            "email": "kiran@example.com",
            "phone": "+919000012345",
            "productType": "LOAN",
            "categorySlug": slug,
        })
    _as("MODERATOR")

    resp = client.get("/api/admin/applications", params={"categorySlug": "home-loan", "period": "daily"})
    assert resp.status_code == 200
    assert [a["categorySlug"] for a in resp.json()["data"]] == ["home-loan"]

    assert client.get("/api/admin/applications", params={"period": "hourly"}).status_code == 422


def test_category_delete_endpoints(client, catalog_service, catalog_repository):
    _as("ADMIN")
    for slug in ("personal-loan", "home-loan"):
        client.post("/api/admin/categories", json={"name": slug, "slug": slug, "type": "LOAN"})
        client.post("/api/admin/products", json={
            "product_type": "LOAN",
            "title": "Loan",
            "slug": f"{slug}-basic",
            "provider_name": "Acme",
            "category_slug": slug,
        })

    report = client.get("/api/admin/categories/personal-loan/can-delete").json()
    assert report["canDelete"] is False
    assert report["reasons"] == ["1 loan product(s)"]

    assert client.delete("/api/admin/categories/personal-loan").json()["success"] is True
    assert len(catalog_repository.products) == 2

    assert client.delete("/api/admin/categories/home-loan/force").json()["success"] is True
    assert [p.slug for p in catalog_repository.products.values()] == ["personal-loan-basic"]
    assert catalog_repository.categories == {}


def test_protected_route_requires_token(client, auth_service, jwt_secret):
    resp = client.get("/auth/me")
    assert resp.status_code == 401


def test_login_me_logout(client, auth_service, users, jwt_secret):
    user = SimpleNamespace(
        id="user-1", name="Ravi", email="ravi@example.com", phone="+919800000000",
        hashed_password=hash_password("password1"), role="USER", email_verified=True, token_version=0,
    )
    users.users[user.id] = user

    login = client.post("/auth/login", json={"emailOrPhone": "ravi@example.com", "password": "password1"})
    assert login.status_code == 200
    headers = {"Authorization": f"Bearer {login.json()['token']}"}

    me = client.get("/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["email"] == "ravi@example.com"

    assert client.post("/auth/logout", headers=headers).status_code == 200
    revoked = client.get("/auth/me", headers=headers)
    assert revoked.status_code == 401
    assert revoked.json()["error"]["message"] == "Token has been revoked. Please login again."


def test_signup_verify_over_http(client, auth_service, jwt_secret):
    resp = client.post("/auth/signup", json={
        "name": "Asha Rao",
        "email": "asha@example.com",
        "phone": "+919876543210",
        "password": "s3cret-pass",
    })
    assert resp.status_code == 202

    wrong = client.post("/auth/signup/verify", json={"email": "asha@example.com", "otp": "12"})
    assert wrong.status_code == 400
    assert wrong.json()["error"]["message"] == "Invalid OTP format"
