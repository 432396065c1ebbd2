"""Wiring for the game core: settings -> logging -> store -> services.

The HTTP layer opens one GameCore per process and calls its services.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from buildarena.arena.service import ArenaService, Clock
from buildarena.config import Settings, get_settings
from buildarena.logging_config import setup_logging
from buildarena.players.schemas import PlayerProfile
from buildarena.players.service import get_player_profile
from buildarena.runs.service import RunService
from buildarena.storage import GameStore, close_store, open_store


@dataclass
class GameCore:
    settings: Settings
    store: GameStore
    runs: RunService
    arena: ArenaService

    @classmethod
    def from_store(cls, store: GameStore, settings: Settings | None = None, clock: Clock | None = None) -> GameCore:
        return cls(
            settings=settings or get_settings(),
            store=store,
            runs=RunService(store, clock=clock),
            arena=ArenaService(store, clock=clock),
        )

    async def player_profile(self, player_id: str) -> PlayerProfile:
        return await get_player_profile(self.store, player_id)

    async def readiness(self) -> dict[str, object]:
        """Readiness probe: store connectivity plus version."""
        store_ok = await self.store.ping()
        return {
            "status": "ready" if store_ok else "degraded",
            "checks": {"store": "ok" if store_ok else "error"},
            "store": type(self.store).__name__,
            "version": self.settings.app_version,
        }


@asynccontextmanager
async def open_game_core(settings: Settings | None = None) -> AsyncGenerator[GameCore, None]:
    """Startup and shutdown lifecycle."""
    settings = settings or get_settings()
    setup_logging(settings)
    store = await open_store(settings)
    try:
        yield GameCore.from_store(store, settings)
    finally:
        await close_store(store)
