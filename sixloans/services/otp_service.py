import asyncio
import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Set, Tuple

from fastapi import HTTPException
from pydantic import BaseModel, Field

from sixloans.core.store import ExpiringStore, utcnow

logger = logging.getLogger(__name__)

MIN_CODE_LENGTH = 4
MAX_CODE_LENGTH = 8

# (key, code, display_name) -> delivered?
Dispatcher = Callable[[str, str, Optional[str]], Awaitable[bool]]


class OtpRecord(BaseModel):
    key: str
    code: str
    expires_at: datetime
    payload: Dict[str, Any] = Field(default_factory=dict)


class OtpStatus(str, Enum):
    VERIFIED = "verified"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    MISMATCH = "mismatch"
    VALIDATION = "validation"

    @property
    def ok(self) -> bool:
        return self is OtpStatus.VERIFIED


class InvalidOtpLength(ValueError):
    pass


@dataclass
class IssuedOtp:
    key: str
    code: str
    expires_at: datetime
    # Delivery runs as its own task; await it to learn whether the code was sent
    delivery: Optional["asyncio.Task[bool]"] = None


def generate_numeric_code(length: int) -> str:
    if not MIN_CODE_LENGTH <= length <= MAX_CODE_LENGTH:
        raise InvalidOtpLength(f"OTP length must be between {MIN_CODE_LENGTH} and {MAX_CODE_LENGTH}")
    return f"{secrets.randbelow(10 ** length):0{length}d}"


def is_well_formed_code(code: Optional[str]) -> bool:
    return bool(code) and code.isdigit() and MIN_CODE_LENGTH <= len(code) <= MAX_CODE_LENGTH


class OtpManager:
    """Issues, verifies and expires one-time codes for a single purpose.

    Each manager owns one store namespace (signup, email verification,
    password reset), so a code issued for one flow can never satisfy another.
    At most one live code exists per key and a successful verification
    consumes it.
    """

    def __init__(
        self,
        store: ExpiringStore[OtpRecord],
        *,
        length: int = 6,
        ttl_minutes: int = 10,
        dispatcher: Optional[Dispatcher] = None,
        clock: Callable[[], datetime] = utcnow,
        name: str = "otp",
    ):
        self.store = store
        self.length = length
        self.ttl_minutes = ttl_minutes
        self.dispatcher = dispatcher
        self.clock = clock
        self.name = name
        self._pending_deliveries: Set[asyncio.Task] = set()

    async def issue(
        self,
        key: str,
        length: Optional[int] = None,
        ttl_minutes: Optional[int] = None,
        *,
        display_name: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> IssuedOtp:
        code = generate_numeric_code(self.length if length is None else length)
        ttl = self.ttl_minutes if ttl_minutes is None else ttl_minutes
        if ttl < 0:
            raise ValueError("OTP lifetime cannot be negative")
        expires_at = self.clock() + timedelta(minutes=ttl)
        await self.store.put(key, OtpRecord(key=key, code=code, expires_at=expires_at, payload=payload or {}))
        logger.info("[%s] Issued OTP for %s, expires at %s", self.name, key, expires_at.isoformat())

        issued = IssuedOtp(key=key, code=code, expires_at=expires_at)
        if self.dispatcher is not None:
            issued.delivery = self._start_delivery(key, code, display_name)
        return issued

    async def resend(
        self,
        key: str,
        length: Optional[int] = None,
        ttl_minutes: Optional[int] = None,
        *,
        display_name: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> IssuedOtp:
        if payload is None:
            previous = await self.store.get(key)
            payload = previous.payload if previous else None
        return await self.issue(key, length, ttl_minutes, display_name=display_name, payload=payload)

    async def consume(self, key: str, submitted_code: Optional[str]) -> Tuple[OtpStatus, Optional[OtpRecord]]:
        if not is_well_formed_code(submitted_code):
            return OtpStatus.VALIDATION, None

        record = await self.store.get(key)
        if record is None:
            return OtpStatus.NOT_FOUND, None

        if self.clock() > record.expires_at:
            await self.store.delete(key)
            logger.info("[%s] OTP for %s expired", self.name, key)
            return OtpStatus.EXPIRED, None

        if not hmac.compare_digest(record.code, submitted_code):
            return OtpStatus.MISMATCH, None

        await self.store.delete(key)
        logger.info("[%s] OTP verified for %s", self.name, key)
        return OtpStatus.VERIFIED, record

    async def verify(self, key: str, submitted_code: Optional[str]) -> OtpStatus:
        status, _ = await self.consume(key, submitted_code)
        return status

    async def peek(self, key: str) -> Optional[OtpRecord]:
        record = await self.store.get(key)
        if record is None or self.clock() > record.expires_at:
            return None
        return record

    async def discard(self, key: str) -> bool:
        return await self.store.delete(key)

    async def sweep(self) -> int:
        return await self.store.sweep(self.clock())

    def _start_delivery(self, key: str, code: str, display_name: Optional[str]) -> "asyncio.Task[bool]":
        task = asyncio.create_task(self._deliver(key, code, display_name))
        self._pending_deliveries.add(task)
        task.add_done_callback(self._pending_deliveries.discard)
        return task

    async def _deliver(self, key: str, code: str, display_name: Optional[str]) -> bool:
        try:
            delivered = await self.dispatcher(key, code, display_name)
        except Exception:
            logger.exception("[%s] OTP delivery to %s raised", self.name, key)
            return False
        if not delivered:
            logger.warning("[%s] OTP delivery to %s failed", self.name, key)
        return bool(delivered)


OTP_FAILURE_MESSAGES = {
    OtpStatus.NOT_FOUND: "No OTP found. Please request a new OTP",
    OtpStatus.EXPIRED: "OTP has expired. Please request a new OTP",
    OtpStatus.MISMATCH: "Invalid OTP. Please try again",
    OtpStatus.VALIDATION: "Invalid OTP format",
}


def raise_for_otp_status(status: OtpStatus) -> None:
    """Turn a failed verification into the 400 response the API returns for it."""
    if status.ok:
        return
    raise HTTPException(status_code=400, detail=OTP_FAILURE_MESSAGES[status])
