from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest
from fastapi import BackgroundTasks, HTTPException

from sixloans.schemas import ApplicationCreateRequest, ApplicationStatusEnum, PeriodEnum
from sixloans.services.application_service import ApplicationService, parse_amount
from sixloans.utils.reference_number import generate_reference_number, is_valid_reference_number


@pytest.fixture
def service(applications, users, notifier):
    return ApplicationService(applications, users, notifier)


def _request(**overrides):
    data = {
        "name": "Kiran Shah",
        "email": "kiran@example.com",
        "phone": "+91 90000 12345",
        "loanAmount": "₹ 5,00,000",
        "productType": "loan",
        "categorySlug": "personal-loan",
        "categoryName": "Personal Loan",
        "employmentType": "Salaried",
        "monthlyIncome": "85,000",
    }
    data.update(overrides)
    return ApplicationCreateRequest(**data)


def test_parse_amount():
    assert parse_amount("₹ 5,00,000") == 500000.0
    assert parse_amount(1200) == 1200.0
    assert parse_amount("") is None
    assert parse_amount("n/a") is None


@pytest.mark.asyncio
async def test_submit_assigns_reference_and_queues_confirmation(service, notifier):
    tasks = BackgroundTasks()
    result = await service.submit(_request(), tasks)

    assert result["referenceNo"] == generate_reference_number(1, "LOAN", "personal-loan")
    assert is_valid_reference_number(result["referenceNo"])
    assert result["application"]["id"] == 1
    assert result["application"]["amount"] == 500000.0
    assert result["application"]["status"] == "PENDING"
    assert len(tasks.tasks) == 1

    await tasks()
    assert notifier.confirmations == [("kiran@example.com", result["referenceNo"])]


@pytest.mark.asyncio
async def test_application_numbers_are_sequential(service):
    first = await service.submit(_request())
    second = await service.submit(_request(productType="CREDIT_CARD", categorySlug=None))

    assert first["application"]["id"] == 1
    assert second["application"]["id"] == 2
    assert second["referenceNo"].startswith("SIX-C-GEN-00002-")


@pytest.mark.asyncio
async def test_loan_against_security_is_stored_as_loan(service):
    result = await service.submit(_request(productType="LOAN_AGAINST_SECURITY", categorySlug="loan-against-shares"))
    assert result["application"]["type"] == "LOAN"


@pytest.mark.asyncio
async def test_unknown_product_type_is_rejected(service, applications):
    with pytest.raises(HTTPException) as exc:
        await service.submit(_request(productType="MORTGAGE"))
    assert exc.value.status_code == 400
    assert applications.applications == {}


@pytest.mark.asyncio
async def test_existing_user_is_linked_and_profile_updated(service, users):
    user = await users.create(name="Kiran", email="kiran@example.com", phone="+919000012345", hashed_password="x")

    result = await service.submit(_request(city="Pune"))
    assert result["application"]["userId"] == user.id
    assert user.city == "Pune"
    assert user.monthly_income == 85000.0


@pytest.mark.asyncio
async def test_withdraw_only_from_open_statuses(service, applications):
    user = SimpleNamespace(id="user-9", email="kiran@example.com")
    await service.submit(_request())

    withdrawn = await service.withdraw(user, 1)
    assert withdrawn["application"]["status"] == "WITHDRAWN"

    await service.submit(_request())
    applications.applications[2].status = ApplicationStatusEnum.approved
    with pytest.raises(HTTPException) as exc:
        await service.withdraw(user, 2)
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_other_users_cannot_see_application(service):
    await service.submit(_request())
    stranger = SimpleNamespace(id="user-42", email="someone@example.com")

    with pytest.raises(HTTPException) as exc:
        await service.get_for_user(stranger, 1)
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_status_update_and_filtered_list(service):
    await service.submit(_request())
    await service.submit(_request(productType="INSURANCE", categorySlug="health-insurance"))

    updated = await service.update_status(1, ApplicationStatusEnum.approved)
    assert updated["application"]["status"] == "APPROVED"

    listed = await service.list(status_filter="PENDING")
    assert listed["total"] == 1
    assert listed["data"][0]["type"] == "INSURANCE"

    by_category = await service.list(category_slug="personal-loan")
    assert [a["id"] for a in by_category["data"]] == [1]


@pytest.mark.asyncio
async def test_feedback_can_be_saved_without_status_change(service):
    await service.submit(_request())

    updated = await service.update_status(1, feedback="Please upload a clearer PAN card")
    assert updated["application"]["status"] == "PENDING"
    assert updated["application"]["feedback"] == "Please upload a clearer PAN card"

    rejected = await service.update_status(1, ApplicationStatusEnum.rejected, "Income below threshold")
    assert rejected["application"]["status"] == "REJECTED"
    assert rejected["application"]["feedback"] == "Income below threshold"


@pytest.mark.asyncio
async def test_empty_status_update_is_rejected(service):
    await service.submit(_request())
    with pytest.raises(HTTPException) as exc:
        await service.update_status(1)
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_list_by_period(service, applications):
    now = datetime(2025, 3, 31, 15, 30)
    for age in (timedelta(hours=2), timedelta(days=3), timedelta(days=20), timedelta(days=200), timedelta(days=400)):
        await service.submit(_request())
        applications.applications[applications._sequence].created_at = now - age

    assert (await service.list(period=PeriodEnum.daily, now=now))["total"] == 1
    assert (await service.list(period=PeriodEnum.weekly, now=now))["total"] == 2
    assert (await service.list(period=PeriodEnum.monthly, now=now))["total"] == 3
    assert (await service.list(period=PeriodEnum.yearly, now=now))["total"] == 4
    assert (await service.list(now=now))["total"] == 5
