"""Abstract key-value store for game state.

Every method is a single-key read or write (the per-player build slot
index and per-season entry index aside). There are no multi-key
transactions; callers that need read-check-write atomicity take a named
lock first.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager

from buildarena.arena.schemas import ArenaEntry, LeaderboardRow
from buildarena.players.schemas import Player
from buildarena.runs.schemas import Build, Run


def key_player(player_id: str) -> str:
    return f"player:{player_id}"


def key_run(player_id: str) -> str:
    return f"run:{player_id}"


def key_build(build_id: str) -> str:
    return f"build:{build_id}"


def key_build_slots(player_id: str) -> str:
    return f"build_slots:{player_id}"


def key_arena_entry(entry_id: str) -> str:
    return f"arena_entry:{entry_id}"


def key_season_entries(arena_type: str, season_id: str) -> str:
    return f"season_entries:{arena_type}:{season_id}"


def key_leaderboard(arena_type: str, season_id: str) -> str:
    return f"leaderboard:{arena_type}:{season_id}"


def key_lock(name: str) -> str:
    return f"lock:{name}"


def season_lock_name(arena_type: str, season_id: str) -> str:
    return f"arena:{arena_type}:{season_id}"


def player_lock_name(player_id: str) -> str:
    return f"player:{player_id}"


class GameStore(ABC):
    """Persistence collaborator for players, runs, builds and arenas."""

    # --- Players ---

    @abstractmethod
    async def get_player(self, player_id: str) -> Player | None: ...

    @abstractmethod
    async def save_player(self, player: Player) -> None: ...

    # --- Runs (one per player) ---

    @abstractmethod
    async def get_run(self, player_id: str) -> Run | None: ...

    @abstractmethod
    async def save_run(self, run: Run) -> None: ...

    @abstractmethod
    async def clear_run(self, player_id: str) -> None: ...

    # --- Builds ---

    @abstractmethod
    async def get_build(self, build_id: str) -> Build | None: ...

    @abstractmethod
    async def save_build(self, build: Build) -> None:
        """Persist a build and point the owner's slot at it (replacing any previous build there)."""

    @abstractmethod
    async def list_builds(self, player_id: str) -> list[Build]:
        """Builds currently held in the player's slots, ordered by slot_index."""

    # --- Arena ---

    @abstractmethod
    async def save_arena_entry(self, entry: ArenaEntry) -> None: ...

    @abstractmethod
    async def list_season_entries(self, arena_type: str, season_id: str) -> list[ArenaEntry]:
        """All entries of a season, oldest first."""

    @abstractmethod
    async def save_leaderboard(self, arena_type: str, season_id: str, rows: list[LeaderboardRow]) -> None: ...

    @abstractmethod
    async def get_leaderboard(self, arena_type: str, season_id: str) -> list[LeaderboardRow]: ...

    # --- Coordination ---

    @abstractmethod
    def lock(self, name: str) -> AbstractAsyncContextManager[None]:
        """Mutual exclusion across every request sharing this store.

        Raises LockTimeout when the lock cannot be taken in time.
        """

    @abstractmethod
    async def ping(self) -> bool: ...
