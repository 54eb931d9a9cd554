import pytest
from fastapi import HTTPException

from sixloans.services.email_verification_service import EmailVerificationService


async def _user(users, **fields):
    data = {"name": "Meera", "email": "meera@example.com", "phone": "+919811111111", "hashed_password": "x"}
    data.update(fields)
    return await users.create(**data)


@pytest.mark.asyncio
async def test_send_then_verify_marks_email_verified(users, make_manager, dispatcher):
    user = await _user(users)
    service = EmailVerificationService(users, make_manager(dispatcher=dispatcher))

    sent = await service.send_otp("meera@example.com")
    assert sent["success"] is True
    code = dispatcher.sent[-1][1]

    result = await service.verify_otp("meera@example.com", code)
    assert result["user"]["emailVerified"] is True
    assert user.email_verified is True
    assert user.email_verified_at is not None


@pytest.mark.asyncio
async def test_undelivered_code_is_reported_and_dropped(users, make_manager, failing_dispatcher):
    await _user(users)
    service = EmailVerificationService(users, make_manager(dispatcher=failing_dispatcher))

    with pytest.raises(HTTPException) as exc:
        await service.send_otp("meera@example.com")
    assert exc.value.status_code == 500
    assert await service.otp.peek("meera@example.com") is None


@pytest.mark.asyncio
async def test_already_verified_email_is_rejected(users, make_manager, dispatcher):
    await _user(users, email_verified=True)
    service = EmailVerificationService(users, make_manager(dispatcher=dispatcher))

    with pytest.raises(HTTPException) as exc:
        await service.send_otp("meera@example.com")
    assert exc.value.detail == "Email is already verified"
    assert dispatcher.sent == []


@pytest.mark.asyncio
async def test_unknown_email_is_not_found(users, make_manager, dispatcher):
    service = EmailVerificationService(users, make_manager(dispatcher=dispatcher))

    with pytest.raises(HTTPException) as exc:
        await service.send_otp("ghost@example.com")
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_malformed_code_is_rejected_before_lookup(users, make_manager):
    service = EmailVerificationService(users, make_manager())

    with pytest.raises(HTTPException) as exc:
        await service.verify_otp("ghost@example.com", "12")
    assert exc.value.detail == "Invalid OTP format"


@pytest.mark.asyncio
async def test_resend_replaces_code(users, make_manager, dispatcher):
    await _user(users)
    service = EmailVerificationService(users, make_manager(dispatcher=dispatcher))

    await service.send_otp("meera@example.com")
    resent = await service.send_otp("meera@example.com", resend=True)
    assert resent["message"] == "OTP resent successfully"

    result = await service.verify_otp("meera@example.com", dispatcher.sent[-1][1])
    assert result["success"] is True


@pytest.mark.asyncio
async def test_status_reports_verification(users, make_manager):
    await _user(users)
    service = EmailVerificationService(users, make_manager())

    status = await service.status("meera@example.com")
    assert status["emailVerified"] is False
    assert status["emailVerifiedAt"] is None
