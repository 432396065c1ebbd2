"""Pydantic models for arena windows, entries and leaderboards."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

ArenaType = Literal["small", "daily", "weekly"]
EntryStatus = Literal["pending", "resolved", "cancelled"]


class ArenaWindow(BaseModel):
    arena_type: ArenaType
    season_id: str
    lock_at: datetime
    result_at: datetime
    window_start_at: datetime


class Reward(BaseModel):
    coins: int
    cups: int
    mmr: int


class ArenaEntry(BaseModel):
    entry_id: str
    arena_type: ArenaType
    season_id: str
    player_id: str
    build_id: str
    power_score: int
    lock_at: datetime
    result_at: datetime
    # "cancelled" is reserved: the duplicate-entry check honours it but nothing sets it yet
    status: EntryStatus = "pending"
    rank: int | None = None
    reward: Reward | None = None
    created_at: datetime
    resolved_at: datetime | None = None
    entry_cost: int


class LeaderboardRow(BaseModel):
    rank: int
    score: int
    player_id: str
    nickname: str


class SeasonLeaderboard(BaseModel):
    arena_type: ArenaType
    season_id: str
    rows: list[LeaderboardRow] = Field(default_factory=list)


class ArenaState(BaseModel):
    window: ArenaWindow
    total_entries: int
    my_entries: list[ArenaEntry]
    entry_cost: int
    seconds_until_resolve: int


class SettlementResult(BaseModel):
    resolved: bool
    entries: list[ArenaEntry] = Field(default_factory=list)
