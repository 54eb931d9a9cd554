import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Generic, Optional, Type, TypeVar

import redis.asyncio as redis_async
from pydantic import BaseModel

from sixloans.core.config import settings

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)

# Redis keeps entries a little past their expiry so late lookups can still report them as expired
REDIS_EXPIRY_GRACE_SECONDS = 300


class ExpiringStore(Generic[R]):
    """Key/value store for short-lived records carrying an ``expires_at`` field.

    Implementations only hold records; deciding whether a record is still
    valid is left to the caller. ``sweep`` removes everything already past
    its expiry and reports how many records were dropped.
    """

    async def put(self, key: str, record: R) -> None:
        raise NotImplementedError

    async def get(self, key: str) -> Optional[R]:
        raise NotImplementedError

    async def delete(self, key: str) -> bool:
        raise NotImplementedError

    async def sweep(self, now: datetime) -> int:
        raise NotImplementedError


class InMemoryStore(ExpiringStore[R]):
    def __init__(self, namespace: str = "default"):
        self.namespace = namespace
        self._records: Dict[str, R] = {}
        self._lock = asyncio.Lock()

    async def put(self, key: str, record: R) -> None:
        async with self._lock:
            self._records[key] = record

    async def get(self, key: str) -> Optional[R]:
        async with self._lock:
            return self._records.get(key)

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._records.pop(key, None) is not None

    async def sweep(self, now: datetime) -> int:
        async with self._lock:
            stale = [k for k, rec in self._records.items() if rec.expires_at < now]
            for k in stale:
                del self._records[k]
        if stale:
            logger.debug("Swept %d expired records from %s", len(stale), self.namespace)
        return len(stale)

    def __len__(self) -> int:
        return len(self._records)


class RedisStore(ExpiringStore[R]):
    """Redis-backed store shared by every server instance.

    Redis expires keys on its own, so ``sweep`` has nothing to do.
    """

    def __init__(self, client, namespace: str, model: Type[R]):
        self._client = client
        self.namespace = namespace
        self._model = model

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def put(self, key: str, record: R) -> None:
        remaining = record.expires_at - datetime.now(timezone.utc)
        ttl = max(int(remaining.total_seconds()), 1) + REDIS_EXPIRY_GRACE_SECONDS
        await self._client.set(self._key(key), record.model_dump_json(), ex=ttl)

    async def get(self, key: str) -> Optional[R]:
        raw = await self._client.get(self._key(key))
        if not raw:
            return None
        try:
            return self._model.model_validate_json(raw)
        except ValueError:
            logger.warning("Discarding unreadable record under %s", self._key(key))
            await self._client.delete(self._key(key))
            return None

    async def delete(self, key: str) -> bool:
        return bool(await self._client.delete(self._key(key)))

    async def sweep(self, now: datetime) -> int:
        return 0


_redis_client = None


def create_store(namespace: str, model: Type[R]) -> ExpiringStore[R]:
    """Build the store configured for this process: Redis when REDIS_URL is set, memory otherwise."""
    global _redis_client
    if settings.REDIS_URL:
        if _redis_client is None:
            _redis_client = redis_async.from_url(settings.REDIS_URL)
        return RedisStore(_redis_client, namespace, model)
    return InMemoryStore(namespace)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def expiry_after(minutes: int, now: Optional[datetime] = None) -> datetime:
    return (now or utcnow()) + timedelta(minutes=minutes)
