"""Run lifecycle over the store: start, pick, finish into a build slot."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from buildarena.exceptions import InvalidChoice, RunNotActive, RunNotFinished, RunNotFound
from buildarena.players.service import get_or_create_player
from buildarena.runs.builds import build_snapshot_from_run, validate_slot_index
from buildarena.runs.engine import apply_choice, start_run
from buildarena.runs.schemas import Build, Run, RunFinish
from buildarena.storage.base import GameStore, player_lock_name

logger = logging.getLogger(__name__)

CHOICES_PER_ROUND = 3
FINISH_BASE_PAYOUT = 25
FINISH_PAYOUT_PER_ROUND = 3


def finish_payout(rounds_completed: int) -> int:
    """Soft currency paid for banking a run, win or lose."""
    return FINISH_BASE_PAYOUT + FINISH_PAYOUT_PER_ROUND * rounds_completed


class RunService:
    """One active run per player, keyed on player_id in the store."""

    def __init__(self, store: GameStore, clock: Callable[[], datetime] | None = None) -> None:
        self._store = store
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def start_run(self, player_id: str) -> Run:
        """Start a new run, replacing any run the player had in progress."""
        async with self._store.lock(player_lock_name(player_id)):
            player = await get_or_create_player(self._store, player_id)
            player.stats.runs_started += 1
            await self._store.save_player(player)

            run = start_run(player_id, now=self._clock())
            await self._store.save_run(run)

        logger.info("Run %s started for player %s", run.run_id, player_id)
        return run

    async def get_active_run(self, player_id: str) -> Run | None:
        return await self._store.get_run(player_id)

    async def submit_choice(self, player_id: str, choice_index: int) -> Run:
        """Apply the player's pick to their active run."""
        if isinstance(choice_index, bool) or not isinstance(choice_index, int) or not 0 <= choice_index < CHOICES_PER_ROUND:
            raise InvalidChoice(choice_index, CHOICES_PER_ROUND)

        async with self._store.lock(player_lock_name(player_id)):
            run = await self._store.get_run(player_id)
            if run is None:
                raise RunNotFound(player_id)
            if run.status != "active":
                raise RunNotActive(run.status)

            updated = apply_choice(run, choice_index)
            await self._store.save_run(updated)

        if updated.is_terminal:
            logger.info(
                "Run %s ended: %s at round %d (hp=%d)",
                updated.run_id, updated.status, updated.round, updated.hp,
            )
        return updated

    async def finish_run(self, player_id: str, slot_index: int) -> RunFinish:
        """Bank a terminal run into build slot ``slot_index`` and pay out."""
        slot_index = validate_slot_index(slot_index)

        async with self._store.lock(player_lock_name(player_id)):
            run = await self._store.get_run(player_id)
            if run is None:
                raise RunNotFound(player_id)
            if run.status not in ("ready_to_finish", "failed"):
                raise RunNotFinished(run.status)

            build = build_snapshot_from_run(run, slot_index, now=self._clock())
            await self._store.save_build(build)
            await self._store.clear_run(player_id)

            payout = finish_payout(run.round)
            player = await get_or_create_player(self._store, player_id)
            player.stats.runs_finished += 1
            player.currency_soft += payout
            await self._store.save_player(player)

        logger.info(
            "Run %s banked into slot %d for player %s (power_score=%d, payout=%d)",
            run.run_id, slot_index, player_id, build.power_score, payout,
        )
        return RunFinish(
            build=build,
            status=run.status,
            rounds_completed=run.round,
            hp_left=run.hp,
            payout=payout,
        )

    async def list_builds(self, player_id: str) -> list[Build]:
        return await self._store.list_builds(player_id)
