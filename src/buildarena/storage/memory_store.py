"""Process-local store used when Redis is not configured (dev and tests).

Records are kept as JSON strings so callers never share mutable objects
with the store, matching what a networked store returns.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from pydantic import TypeAdapter

from buildarena.arena.schemas import ArenaEntry, LeaderboardRow
from buildarena.exceptions import LockTimeout
from buildarena.players.schemas import Player
from buildarena.runs.schemas import Build, Run
from buildarena.storage.base import GameStore, key_leaderboard, key_lock, key_season_entries

_leaderboard_rows = TypeAdapter(list[LeaderboardRow])


class MemoryStore(GameStore):
    """Dict-backed GameStore. Not shared across processes."""

    def __init__(self, lock_blocking_timeout: float = 10.0) -> None:
        self._players: dict[str, str] = {}
        self._runs: dict[str, str] = {}
        self._builds: dict[str, str] = {}
        self._build_slots: dict[str, dict[int, str]] = defaultdict(dict)
        self._entries: dict[str, str] = {}
        self._season_entries: dict[str, list[str]] = defaultdict(list)
        self._leaderboards: dict[str, str] = {}
        # Per-name locks live only while someone holds or waits on them.
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = defaultdict(int)
        self._lock_blocking_timeout = lock_blocking_timeout

    async def get_player(self, player_id: str) -> Player | None:
        raw = self._players.get(player_id)
        return Player.model_validate_json(raw) if raw else None

    async def save_player(self, player: Player) -> None:
        self._players[player.player_id] = player.model_dump_json()

    async def get_run(self, player_id: str) -> Run | None:
        raw = self._runs.get(player_id)
        return Run.model_validate_json(raw) if raw else None

    async def save_run(self, run: Run) -> None:
        self._runs[run.player_id] = run.model_dump_json()

    async def clear_run(self, player_id: str) -> None:
        self._runs.pop(player_id, None)

    async def get_build(self, build_id: str) -> Build | None:
        raw = self._builds.get(build_id)
        return Build.model_validate_json(raw) if raw else None

    async def save_build(self, build: Build) -> None:
        self._builds[build.build_id] = build.model_dump_json()
        self._build_slots[build.player_id][build.slot_index] = build.build_id

    async def list_builds(self, player_id: str) -> list[Build]:
        slots = self._build_slots.get(player_id, {})
        builds = []
        for slot_index in sorted(slots):
            build = await self.get_build(slots[slot_index])
            if build is not None:
                builds.append(build)
        return builds

    async def save_arena_entry(self, entry: ArenaEntry) -> None:
        self._entries[entry.entry_id] = entry.model_dump_json()
        season = self._season_entries[key_season_entries(entry.arena_type, entry.season_id)]
        if entry.entry_id not in season:
            season.append(entry.entry_id)

    async def list_season_entries(self, arena_type: str, season_id: str) -> list[ArenaEntry]:
        ids = self._season_entries.get(key_season_entries(arena_type, season_id), [])
        return [ArenaEntry.model_validate_json(self._entries[i]) for i in ids if i in self._entries]

    async def save_leaderboard(self, arena_type: str, season_id: str, rows: list[LeaderboardRow]) -> None:
        self._leaderboards[key_leaderboard(arena_type, season_id)] = _leaderboard_rows.dump_json(rows).decode()

    async def get_leaderboard(self, arena_type: str, season_id: str) -> list[LeaderboardRow]:
        raw = self._leaderboards.get(key_leaderboard(arena_type, season_id))
        return _leaderboard_rows.validate_json(raw) if raw else []

    @asynccontextmanager
    async def lock(self, name: str) -> AsyncIterator[None]:
        key = key_lock(name)
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] += 1
        try:
            try:
                await asyncio.wait_for(lock.acquire(), timeout=self._lock_blocking_timeout)
            except asyncio.TimeoutError:
                raise LockTimeout(name, self._lock_blocking_timeout) from None
            try:
                yield
            finally:
                lock.release()
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._locks[key]

    async def ping(self) -> bool:
        return True
