"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from redis.exceptions import RedisError

from buildarena.arena.service import ArenaService
from buildarena.config import get_settings
from buildarena.players.schemas import Player
from buildarena.runs.schemas import Build
from buildarena.runs.service import RunService
from buildarena.storage.memory_store import MemoryStore
from buildarena.storage.redis_store import connect_redis

# Monday 2026-02-23 10:03:00 UTC -> small bucket 10:00-10:15
T0 = datetime(2026, 2, 23, 10, 3, 0, tzinfo=timezone.utc)


class FakeClock:
    """Settable clock injected into services."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore(lock_blocking_timeout=2.0)


@pytest.fixture
def arena(store: MemoryStore, clock: FakeClock) -> ArenaService:
    return ArenaService(store, clock=clock)


@pytest.fixture
def runs(store: MemoryStore, clock: FakeClock) -> RunService:
    return RunService(store, clock=clock)


def make_build(
    player_id: str,
    power_score: int,
    *,
    build_id: str | None = None,
    slot_index: int = 0,
    created_at: datetime = T0,
) -> Build:
    return Build(
        build_id=build_id or f"build-{player_id}-{slot_index}",
        player_id=player_id,
        run_id=f"run-{player_id}",
        traits=["berserk"],
        units=["orb_knight"],
        modifiers=["crit_core"],
        power_score=power_score,
        seed="seed",
        slot_index=slot_index,
        created_at=created_at,
    )


async def fund_player(store: MemoryStore, player_id: str, coins: int) -> Player:
    player = Player(player_id=player_id, nickname=f"Player-{player_id[:6]}", currency_soft=coins)
    await store.save_player(player)
    return player


@pytest_asyncio.fixture
async def redis_client() -> AsyncGenerator[object, None]:
    """Live Redis client (BUILDARENA_REDIS_URL or localhost), flushed after use."""
    url = get_settings().redis_url or "redis://localhost:6379/15"
    rc = connect_redis(url)
    try:
        await rc.ping()
    except (RedisError, OSError):
        await rc.aclose()
        pytest.skip(f"Redis not reachable at {url}")
    await rc.flushdb()
    yield rc
    await rc.flushdb()
    await rc.aclose()
