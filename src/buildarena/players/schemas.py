"""Pydantic models for player profiles and economy."""

from __future__ import annotations

from pydantic import BaseModel, Field

from buildarena.runs.schemas import Run

DEFAULT_MMR = 1000


class PlayerStats(BaseModel):
    runs_started: int = 0
    runs_finished: int = 0
    arena_entries: int = 0
    wins: int = 0


class Player(BaseModel):
    player_id: str
    nickname: str
    wallet: str | None = None
    currency_soft: int = 0
    currency_hard: int = 0
    cups: int = 0
    leaderboard_points: int = 0
    mmr_small: int = DEFAULT_MMR
    mmr_daily: int = DEFAULT_MMR
    mmr_weekly: int = DEFAULT_MMR
    stats: PlayerStats = Field(default_factory=PlayerStats)

    def add_mmr(self, arena_type: str, amount: int) -> None:
        field = f"mmr_{arena_type}"
        setattr(self, field, getattr(self, field) + amount)


class PlayerProfile(BaseModel):
    player: Player
    active_run: Run | None = None
    arena_entry_cost: dict[str, int]
