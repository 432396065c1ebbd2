"""Reward curve: settlement rank -> coins, cups and MMR."""

from __future__ import annotations

from buildarena.arena.schemas import Reward

# Coins for ranks 1..5; every other rank gets PARTICIPATION_COINS.
COIN_POOLS: dict[str, tuple[int, ...]] = {
    "small": (120, 90, 70, 50, 35),
    "daily": (500, 350, 250, 150, 80),
    "weekly": (2000, 1200, 800, 500, 250),
}
PARTICIPATION_COINS = 20

CUPS_BASE = 12
MMR_BASE = 15


def coins_for_rank(arena_type: str, rank: int) -> int:
    """Coin payout for ``rank`` (1-indexed).

    Top 5 → per-arena table
    6+    → 20 (participation)
    """
    pool = COIN_POOLS.get(arena_type, ())
    if 1 <= rank <= len(pool):
        return pool[rank - 1]
    return PARTICIPATION_COINS


def reward_for_rank(arena_type: str, rank: int) -> Reward:
    """Full reward for a settled rank. Cups and MMR never drop below 1."""
    return Reward(
        coins=coins_for_rank(arena_type, rank),
        cups=max(1, CUPS_BASE - rank),
        mmr=max(1, MMR_BASE - rank),
    )
