"""Player lookup with lazy creation."""

from __future__ import annotations

import logging

from buildarena.arena.windows import ARENA_ENTRY_COST
from buildarena.players.schemas import Player, PlayerProfile
from buildarena.storage.base import GameStore

logger = logging.getLogger(__name__)


def default_player(player_id: str) -> Player:
    """A brand-new player with starting economy and MMR."""
    return Player(player_id=player_id, nickname=f"Player-{player_id[:6]}")


async def get_or_create_player(store: GameStore, player_id: str) -> Player:
    """Load a player, creating and persisting defaults on first sight."""
    existing = await store.get_player(player_id)
    if existing is not None:
        return existing

    player = default_player(player_id)
    await store.save_player(player)
    logger.info("Created player %s", player_id)
    return player


async def get_player_profile(store: GameStore, player_id: str) -> PlayerProfile:
    """Player record plus their in-progress run, if any."""
    player = await get_or_create_player(store, player_id)
    active_run = await store.get_run(player_id)
    return PlayerProfile(
        player=player,
        active_run=active_run,
        arena_entry_cost=dict(ARENA_ENTRY_COST),
    )
