"""Key-value persistence for game state."""

from __future__ import annotations

import logging

from buildarena.config import Settings
from buildarena.storage.base import GameStore
from buildarena.storage.memory_store import MemoryStore
from buildarena.storage.redis_store import RedisStore, connect_redis

logger = logging.getLogger(__name__)

__all__ = ["GameStore", "MemoryStore", "RedisStore", "close_store", "open_store"]


async def open_store(settings: Settings) -> GameStore:
    """Redis-backed store when redis_url is configured, process-local otherwise."""
    if settings.redis_url:
        client = connect_redis(settings.redis_url, max_connections=settings.redis_max_connections)
        return RedisStore(
            client,
            run_ttl_seconds=settings.run_ttl_seconds,
            lock_timeout=settings.lock_timeout_seconds,
            lock_blocking_timeout=settings.lock_blocking_timeout_seconds,
        )

    logger.warning("No redis_url configured, using in-memory store (state is per-process)")
    return MemoryStore(lock_blocking_timeout=settings.lock_blocking_timeout_seconds)


async def close_store(store: GameStore) -> None:
    if isinstance(store, RedisStore):
        await store.aclose()
