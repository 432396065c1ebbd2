"""Pydantic models for runs, draft choices and builds."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ChoiceType = Literal["trait", "unit", "modifier"]
RunStatus = Literal["active", "failed", "ready_to_finish"]

MAX_ROUNDS = 10


class ChoiceItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    power: int = 0
    hp: int = 0
    economy: int = 0


class Choice(BaseModel):
    """One card offered in a draft. choice_id is "{type}:{item.id}"."""

    model_config = ConfigDict(frozen=True)

    choice_id: str
    type: ChoiceType
    item: ChoiceItem


class Run(BaseModel):
    run_id: str
    player_id: str
    seed: str
    started_at: datetime
    round: int = Field(default=0, ge=0, le=MAX_ROUNDS)
    hp: int = Field(default=100, ge=0)
    economy: int = 0
    power: int = 12
    picks: list[Choice] = Field(default_factory=list)
    status: RunStatus = "active"
    current_choices: list[Choice] = Field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status != "active"


class Build(BaseModel):
    build_id: str
    player_id: str
    run_id: str
    traits: list[str] = Field(default_factory=list)
    units: list[str] = Field(default_factory=list)
    modifiers: list[str] = Field(default_factory=list)
    power_score: int
    seed: str
    slot_index: int = Field(ge=0)
    created_at: datetime
    locked: bool = False
    locked_by_arena_entry_id: str | None = None


class RunFinish(BaseModel):
    """Outcome of banking a finished run into a build slot."""

    build: Build
    status: RunStatus
    rounds_completed: int
    hp_left: int
    payout: int
