"""Arena orchestration: entry admission, lazy settlement, leaderboards.

There is no scheduler. A season is settled by whichever request first
observes now >= result_at. Settlement and admission for a season run under
the season lock; any read-modify-write of a player's economy or builds runs
under that player's lock (always taken after the season lock, never before).

Settlement is idempotent: entries already marked resolved are never
credited again, so a settlement interrupted half-way is completed by the
next request without double-paying anyone.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import datetime, timezone

import structlog

from buildarena.arena.ranking import rank_entries
from buildarena.arena.rewards import reward_for_rank
from buildarena.arena.schemas import (
    ArenaEntry,
    ArenaState,
    ArenaWindow,
    LeaderboardRow,
    SeasonLeaderboard,
    SettlementResult,
)
from buildarena.arena.windows import (
    as_utc,
    get_arena_entry_cost,
    get_arena_window,
    get_previous_arena_window,
    is_valid_arena_type,
    seconds_until,
)
from buildarena.exceptions import (
    AlreadyEntered,
    BuildLocked,
    BuildNotFound,
    BuildNotOwned,
    InsufficientFunds,
    UnknownArenaType,
)
from buildarena.players.schemas import Player
from buildarena.players.service import get_or_create_player
from buildarena.runs.schemas import Build
from buildarena.storage.base import GameStore, player_lock_name, season_lock_name

logger = structlog.get_logger()

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _ranked_pool(entries: list[ArenaEntry]) -> list[ArenaEntry]:
    return [e for e in entries if e.status != "cancelled"]


def settlement_status(entries: list[ArenaEntry], now: datetime) -> str:
    """Classify a season: "empty", "open", "settled" or "due"."""
    pool = _ranked_pool(entries)
    if not pool:
        return "empty"
    if as_utc(now) < as_utc(pool[0].result_at):
        return "open"
    if all(e.status == "resolved" for e in pool):
        return "settled"
    return "due"


def _validate_arena_type(arena_type: str) -> None:
    if not is_valid_arena_type(arena_type):
        raise UnknownArenaType(arena_type)


class ArenaService:
    """Arena lifecycle over a GameStore."""

    def __init__(self, store: GameStore, clock: Clock | None = None) -> None:
        self._store = store
        self._clock = clock or utcnow

    # --- Settlement ---

    async def resolve_arena_if_needed(self, arena_type: str, season_id: str) -> SettlementResult:
        """Settle a season if its window has closed and it is not settled yet."""
        _validate_arena_type(arena_type)
        entries = await self._store.list_season_entries(arena_type, season_id)
        status = settlement_status(entries, self._clock())
        if status != "due":
            return SettlementResult(resolved=status == "settled", entries=entries)

        async with self._store.lock(season_lock_name(arena_type, season_id)):
            return await self._resolve_locked(arena_type, season_id)

    async def _resolve_locked(self, arena_type: str, season_id: str) -> SettlementResult:
        # Re-read under the lock: another request may have settled meanwhile.
        entries = await self._store.list_season_entries(arena_type, season_id)
        status = settlement_status(entries, self._clock())
        if status != "due":
            return SettlementResult(resolved=status == "settled", entries=entries)
        return await self._settle(arena_type, season_id, entries)

    async def _settle(self, arena_type: str, season_id: str, entries: list[ArenaEntry]) -> SettlementResult:
        ranked = rank_entries(_ranked_pool(entries))
        leaderboard: list[LeaderboardRow] = []
        settled: list[ArenaEntry] = []
        credited = 0

        for rank, entry in ranked:
            if entry.status == "resolved":
                player = await get_or_create_player(self._store, entry.player_id)
            else:
                entry, player = await self._credit_entry(arena_type, entry, rank)
                credited += 1
            settled.append(entry)

            leaderboard.append(
                LeaderboardRow(
                    rank=rank,
                    score=entry.power_score,
                    player_id=entry.player_id,
                    nickname=player.nickname,
                )
            )

        await self._store.save_leaderboard(arena_type, season_id, leaderboard)
        logger.info(
            "arena_settled",
            arena_type=arena_type,
            season_id=season_id,
            entries=len(ranked),
            credited=credited,
            winner=leaderboard[0].player_id if leaderboard else None,
        )
        return SettlementResult(resolved=True, entries=settled)

    async def _credit_entry(
        self, arena_type: str, entry: ArenaEntry, rank: int
    ) -> tuple[ArenaEntry, Player]:
        reward = reward_for_rank(arena_type, rank)
        resolved = entry.model_copy(
            update={
                "rank": rank,
                "reward": reward,
                "status": "resolved",
                "resolved_at": self._clock(),
            }
        )

        async with self._store.lock(player_lock_name(entry.player_id)):
            await self._store.save_arena_entry(resolved)

            player = await get_or_create_player(self._store, entry.player_id)
            player.currency_soft += reward.coins
            player.cups += reward.cups
            player.leaderboard_points += reward.cups
            player.add_mmr(arena_type, reward.mmr)
            if rank == 1:
                player.stats.wins += 1
            await self._store.save_player(player)

            build = await self._store.get_build(entry.build_id)
            if build is not None and build.locked_by_arena_entry_id == entry.entry_id:
                build.locked = False
                build.locked_by_arena_entry_id = None
                await self._store.save_build(build)

        return resolved, player

    async def _settle_recent(self, arena_type: str, now: datetime) -> ArenaWindow:
        """Settle the just-closed season and the current one; return the current window."""
        window = get_arena_window(arena_type, now)
        previous = get_previous_arena_window(arena_type, now)
        await self.resolve_arena_if_needed(arena_type, previous.season_id)
        await self.resolve_arena_if_needed(arena_type, window.season_id)
        return window

    # --- Admission ---

    async def enter_arena(self, arena_type: str, build: Build, player_id: str) -> ArenaEntry:
        """Submit ``build`` to the current season of ``arena_type``."""
        _validate_arena_type(arena_type)
        now = self._clock()

        # The closed season may still hold this build; settle it before the lock check.
        previous = get_previous_arena_window(arena_type, now)
        await self.resolve_arena_if_needed(arena_type, previous.season_id)
        stored = await self._store.get_build(build.build_id)
        if stored is not None:
            build = stored

        if build.player_id != player_id:
            raise BuildNotOwned(build.build_id, player_id)
        if build.locked:
            raise BuildLocked(build.build_id, build.locked_by_arena_entry_id)

        window = get_arena_window(arena_type, now)

        async with self._store.lock(season_lock_name(arena_type, window.season_id)):
            await self._resolve_locked(arena_type, window.season_id)

            season_entries = await self._store.list_season_entries(arena_type, window.season_id)
            if any(e.player_id == player_id and e.status != "cancelled" for e in season_entries):
                raise AlreadyEntered(player_id, window.season_id)

            async with self._store.lock(player_lock_name(player_id)):
                stored = await self._store.get_build(build.build_id)
                if stored is not None:
                    if stored.player_id != player_id:
                        raise BuildNotOwned(stored.build_id, player_id)
                    if stored.locked:
                        raise BuildLocked(stored.build_id, stored.locked_by_arena_entry_id)
                    build = stored

                player = await get_or_create_player(self._store, player_id)
                entry_cost = get_arena_entry_cost(arena_type)
                if player.currency_soft < entry_cost:
                    raise InsufficientFunds(arena_type, entry_cost, player.currency_soft)

                entry = ArenaEntry(
                    entry_id=str(uuid.uuid4()),
                    arena_type=arena_type,
                    season_id=window.season_id,
                    player_id=player_id,
                    build_id=build.build_id,
                    power_score=build.power_score,
                    lock_at=window.lock_at,
                    result_at=window.result_at,
                    status="pending",
                    created_at=now,
                    entry_cost=entry_cost,
                )

                locked_build = build.model_copy(
                    update={"locked": True, "locked_by_arena_entry_id": entry.entry_id}
                )
                await self._store.save_build(locked_build)
                await self._store.save_arena_entry(entry)

                player.currency_soft -= entry_cost
                player.stats.arena_entries += 1
                await self._store.save_player(player)

        logger.info(
            "arena_entered",
            arena_type=arena_type,
            season_id=window.season_id,
            player_id=player_id,
            entry_id=entry.entry_id,
            power_score=entry.power_score,
        )
        return entry

    async def enter_arena_by_build_id(self, arena_type: str, build_id: str, player_id: str) -> ArenaEntry:
        """Load a stored build and enter it."""
        _validate_arena_type(arena_type)
        build = await self._store.get_build(build_id)
        if build is None:
            raise BuildNotFound(build_id)
        return await self.enter_arena(arena_type, build, player_id)

    # --- Reads ---

    async def get_arena_state(self, arena_type: str, player_id: str) -> ArenaState:
        _validate_arena_type(arena_type)
        now = self._clock()
        window = await self._settle_recent(arena_type, now)

        entries = await self._store.list_season_entries(arena_type, window.season_id)
        return ArenaState(
            window=window,
            total_entries=len(entries),
            my_entries=[e for e in entries if e.player_id == player_id],
            entry_cost=get_arena_entry_cost(arena_type),
            seconds_until_resolve=seconds_until(window.result_at, now),
        )

    async def get_leaderboard(self, arena_type: str, season_id: str | None = None) -> SeasonLeaderboard:
        """Published rows for a season (default: the current one)."""
        _validate_arena_type(arena_type)
        window = await self._settle_recent(arena_type, self._clock())

        target = season_id or window.season_id
        if target != window.season_id:
            await self.resolve_arena_if_needed(arena_type, target)

        rows = await self._store.get_leaderboard(arena_type, target)
        return SeasonLeaderboard(arena_type=arena_type, season_id=target, rows=rows)
