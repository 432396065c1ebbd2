"""Redis-backed GameStore.

Records are JSON strings under per-record keys. Two index structures:
  build_slots:{player}              hash  slot_index -> build_id
  season_entries:{type}:{season}    zset  entry_id scored by created_at
Redis errors surface as StoreError; nothing is retried here.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as redis
from pydantic import TypeAdapter
from redis.asyncio import Redis
from redis.exceptions import LockNotOwnedError, RedisError

from buildarena.arena.schemas import ArenaEntry, LeaderboardRow
from buildarena.exceptions import LockTimeout, StoreError
from buildarena.players.schemas import Player
from buildarena.runs.schemas import Build, Run
from buildarena.storage.base import (
    GameStore,
    key_arena_entry,
    key_build,
    key_build_slots,
    key_leaderboard,
    key_lock,
    key_player,
    key_run,
    key_season_entries,
)

logger = logging.getLogger(__name__)

_leaderboard_rows = TypeAdapter(list[LeaderboardRow])


def connect_redis(url: str, max_connections: int = 50) -> Redis:
    """Client with its own connection pool. No network I/O until the first command."""
    return redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=max_connections,
    )


@asynccontextmanager
async def _store_errors(op: str) -> AsyncIterator[None]:
    try:
        yield
    except RedisError as exc:
        raise StoreError(f"Redis {op} failed: {exc}") from exc


class RedisStore(GameStore):
    """GameStore over a shared Redis instance (durable, multi-process)."""

    def __init__(
        self,
        client: Redis,
        run_ttl_seconds: int | None = None,
        lock_timeout: float = 30.0,
        lock_blocking_timeout: float = 10.0,
    ) -> None:
        self._redis = client
        self._run_ttl = run_ttl_seconds or None
        self._lock_timeout = lock_timeout
        self._lock_blocking_timeout = lock_blocking_timeout

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._redis.aclose()

    # --- Players ---

    async def get_player(self, player_id: str) -> Player | None:
        async with _store_errors("get player"):
            raw = await self._redis.get(key_player(player_id))
        return Player.model_validate_json(raw) if raw else None

    async def save_player(self, player: Player) -> None:
        async with _store_errors("save player"):
            await self._redis.set(key_player(player.player_id), player.model_dump_json())

    # --- Runs ---

    async def get_run(self, player_id: str) -> Run | None:
        async with _store_errors("get run"):
            raw = await self._redis.get(key_run(player_id))
        return Run.model_validate_json(raw) if raw else None

    async def save_run(self, run: Run) -> None:
        async with _store_errors("save run"):
            await self._redis.set(key_run(run.player_id), run.model_dump_json(), ex=self._run_ttl)

    async def clear_run(self, player_id: str) -> None:
        async with _store_errors("clear run"):
            await self._redis.delete(key_run(player_id))

    # --- Builds ---

    async def get_build(self, build_id: str) -> Build | None:
        async with _store_errors("get build"):
            raw = await self._redis.get(key_build(build_id))
        return Build.model_validate_json(raw) if raw else None

    async def save_build(self, build: Build) -> None:
        async with _store_errors("save build"):
            pipe = self._redis.pipeline()
            pipe.set(key_build(build.build_id), build.model_dump_json())
            pipe.hset(key_build_slots(build.player_id), str(build.slot_index), build.build_id)
            await pipe.execute()

    async def list_builds(self, player_id: str) -> list[Build]:
        async with _store_errors("list builds"):
            slots = await self._redis.hgetall(key_build_slots(player_id))
            if not slots:
                return []
            ordered_ids = [slots[s] for s in sorted(slots, key=int)]
            raws = await self._redis.mget([key_build(b) for b in ordered_ids])
        return [Build.model_validate_json(raw) for raw in raws if raw]

    # --- Arena ---

    async def save_arena_entry(self, entry: ArenaEntry) -> None:
        async with _store_errors("save arena entry"):
            pipe = self._redis.pipeline()
            pipe.set(key_arena_entry(entry.entry_id), entry.model_dump_json())
            pipe.zadd(
                key_season_entries(entry.arena_type, entry.season_id),
                {entry.entry_id: entry.created_at.timestamp()},
            )
            await pipe.execute()

    async def list_season_entries(self, arena_type: str, season_id: str) -> list[ArenaEntry]:
        async with _store_errors("list season entries"):
            ids = await self._redis.zrange(key_season_entries(arena_type, season_id), 0, -1)
            if not ids:
                return []
            raws = await self._redis.mget([key_arena_entry(i) for i in ids])
        return [ArenaEntry.model_validate_json(raw) for raw in raws if raw]

    async def save_leaderboard(self, arena_type: str, season_id: str, rows: list[LeaderboardRow]) -> None:
        async with _store_errors("save leaderboard"):
            await self._redis.set(key_leaderboard(arena_type, season_id), _leaderboard_rows.dump_json(rows).decode())

    async def get_leaderboard(self, arena_type: str, season_id: str) -> list[LeaderboardRow]:
        async with _store_errors("get leaderboard"):
            raw = await self._redis.get(key_leaderboard(arena_type, season_id))
        return _leaderboard_rows.validate_json(raw) if raw else []

    # --- Coordination ---

    @asynccontextmanager
    async def lock(self, name: str) -> AsyncIterator[None]:
        lock = self._redis.lock(
            key_lock(name),
            timeout=self._lock_timeout,
            blocking_timeout=self._lock_blocking_timeout,
        )
        async with _store_errors(f"acquire lock {name}"):
            acquired = await lock.acquire()
        if not acquired:
            raise LockTimeout(name, self._lock_blocking_timeout)
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockNotOwnedError:
                logger.warning("Lock %s expired before release (timeout=%ss)", name, self._lock_timeout)

    async def ping(self) -> bool:
        try:
            return bool(await self._redis.ping())
        except RedisError:
            logger.warning("Redis ping failed", exc_info=True)
            return False
