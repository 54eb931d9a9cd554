import asyncio
import logging
from typing import Iterable, Optional

from sixloans.core.store import ExpiringStore, utcnow
from sixloans.services.otp_service import OtpManager

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Periodically drops expired OTPs and revoked-token entries."""

    def __init__(
        self,
        managers: Iterable[OtpManager],
        stores: Iterable[ExpiringStore] = (),
        interval_seconds: float = 300,
    ):
        self.managers = list(managers)
        self.stores = list(stores)
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    async def sweep_once(self) -> int:
        removed = 0
        for manager in self.managers:
            removed += await manager.sweep()
        now = utcnow()
        for store in self.stores:
            removed += await store.sweep(now)
        if removed:
            logger.info("Expiry sweep removed %d records", removed)
        return removed

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run())
            logger.info("Expiry sweeper started (every %ss)", self.interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Expiry sweeper stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.sweep_once()
            except Exception:
                logger.exception("Expiry sweep failed")
