"""Run state machine: start a run and apply draft picks.

State progression: active -> active* -> failed | ready_to_finish
Both end states are terminal: no further picks are accepted.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from buildarena.exceptions import InvalidChoice, RunNotActive
from buildarena.runs.catalog import START_ECONOMY, START_HP, START_POWER
from buildarena.runs.draft import get_round_choices, seeded_range
from buildarena.runs.schemas import MAX_ROUNDS, Run

VALID_TRANSITIONS: dict[str, list[str]] = {
    "active": ["active", "failed", "ready_to_finish"],
    "failed": [],
    "ready_to_finish": [],
}

ENEMY_BASE_POWER = 14
ENEMY_POWER_PER_ROUND = 4
ENEMY_VARIANCE = 8
PLAYER_VARIANCE = 6


def validate_transition(current_status: str, target_status: str) -> None:
    """Validate a run state transition. Raises ValueError if invalid."""
    valid = VALID_TRANSITIONS.get(current_status, [])
    if target_status not in valid:
        raise ValueError(
            f"Invalid transition: {current_status} -> {target_status}. "
            f"Valid transitions: {valid}"
        )


def start_run(player_id: str, now: datetime | None = None) -> Run:
    """Create a fresh run with a random seed and the round-1 draft."""
    if now is None:
        now = datetime.now(timezone.utc)
    seed = str(uuid.uuid4())
    return Run(
        run_id=str(uuid.uuid4()),
        player_id=player_id,
        seed=seed,
        started_at=now,
        round=0,
        hp=START_HP,
        economy=START_ECONOMY,
        power=START_POWER,
        picks=[],
        status="active",
        current_choices=get_round_choices(seed, 1),
    )


def combat_damage(seed: str, round_number: int, power: int) -> int:
    """Damage taken in the combat tick closing ``round_number``."""
    enemy_power = (
        ENEMY_BASE_POWER
        + ENEMY_POWER_PER_ROUND * round_number
        + seeded_range(seed, f"enemy:{round_number}", ENEMY_VARIANCE)
    )
    player_roll = power + seeded_range(seed, f"player:{round_number}", PLAYER_VARIANCE)
    return max(0, (enemy_power - player_roll) // 2)


def apply_choice(run: Run, choice_index: int) -> Run:
    """Apply one draft pick and resolve the round's combat tick.

    Returns a new Run; the input is left untouched.
    """
    if run.is_terminal:
        raise RunNotActive(run.status)
    if (
        not isinstance(choice_index, int)
        or isinstance(choice_index, bool)
        or not 0 <= choice_index < len(run.current_choices)
    ):
        raise InvalidChoice(choice_index, len(run.current_choices))

    choice = run.current_choices[choice_index]
    round_number = run.round + 1
    power = run.power + choice.item.power
    economy = run.economy + choice.item.economy
    hp = run.hp + choice.item.hp

    hp = max(0, hp - combat_damage(run.seed, round_number, power))

    if hp <= 0:
        status, next_choices = "failed", []
    elif round_number >= MAX_ROUNDS:
        status, next_choices = "ready_to_finish", []
    else:
        status, next_choices = "active", get_round_choices(run.seed, round_number + 1)
    validate_transition(run.status, status)

    return run.model_copy(
        update={
            "picks": [*run.picks, choice],
            "power": power,
            "economy": economy,
            "hp": hp,
            "round": round_number,
            "status": status,
            "current_choices": next_choices,
        }
    )
