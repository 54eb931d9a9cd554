import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from sixloans.core.store import InMemoryStore
from sixloans.services.otp_managers import RevokedToken
from sixloans.workers.otp_sweeper import ExpirySweeper


@pytest.mark.asyncio
async def test_sweep_once_covers_managers_and_stores(make_manager, clock):
    manager = make_manager(ttl_minutes=1)
    await manager.issue("a@example.com")
    clock.advance(minutes=2)

    revoked = InMemoryStore("revoked")
    await revoked.put("old", RevokedToken(jti="old", expires_at=datetime.now(timezone.utc) - timedelta(minutes=1)))
    await revoked.put("new", RevokedToken(jti="new", expires_at=datetime.now(timezone.utc) + timedelta(hours=1)))

    sweeper = ExpirySweeper([manager], stores=[revoked])
    assert await sweeper.sweep_once() == 2
    assert await revoked.get("new") is not None


@pytest.mark.asyncio
async def test_background_loop_sweeps_until_stopped(make_manager, clock):
    manager = make_manager(ttl_minutes=1)
    await manager.issue("a@example.com")
    clock.advance(minutes=2)

    sweeper = ExpirySweeper([manager], interval_seconds=0.01)
    sweeper.start()
    await asyncio.sleep(0.05)
    await sweeper.stop()

    assert len(manager.store) == 0
    assert sweeper._task is None


@pytest.mark.asyncio
async def test_stop_without_start_is_a_no_op():
    await ExpirySweeper([]).stop()
