"""Error taxonomy for the game core.

ValidationError  -- bad input, raised before any state is touched.
DomainError      -- request is well-formed but breaks a game rule.
StoreError       -- persistence failure; propagates, partial writes stay.
"""

from __future__ import annotations


class BuildArenaError(Exception):
    """Base class for all game core errors."""


# --- Validation ---


class ValidationError(BuildArenaError):
    """Input rejected before any mutation."""


class InvalidChoice(ValidationError):
    def __init__(self, index: object, available: int) -> None:
        self.index = index
        self.available = available
        super().__init__(f"Invalid choice index {index!r}: {available} choices available")


class InvalidSlot(ValidationError):
    def __init__(self, slot_index: object, max_slots: int) -> None:
        self.slot_index = slot_index
        super().__init__(f"slot_index must be in range 0..{max_slots - 1}, got {slot_index!r}")


class UnknownArenaType(ValidationError):
    def __init__(self, arena_type: object) -> None:
        self.arena_type = arena_type
        super().__init__(f"Unknown arena type: {arena_type!r} (expected small|daily|weekly)")


# --- Domain ---


class DomainError(BuildArenaError):
    """A game rule rejected the request."""


class AlreadyEntered(DomainError):
    def __init__(self, player_id: str, season_id: str) -> None:
        self.player_id = player_id
        self.season_id = season_id
        super().__init__(f"Player {player_id} already entered arena season {season_id}")


class InsufficientFunds(DomainError):
    def __init__(self, arena_type: str, required: int, available: int) -> None:
        self.arena_type = arena_type
        self.required = required
        self.available = available
        super().__init__(
            f"Not enough coins for {arena_type} arena. Required: {required}, available: {available}"
        )


class BuildNotFound(DomainError):
    def __init__(self, build_id: str) -> None:
        self.build_id = build_id
        super().__init__(f"Build {build_id} not found")


class BuildNotOwned(DomainError):
    def __init__(self, build_id: str, player_id: str) -> None:
        self.build_id = build_id
        self.player_id = player_id
        super().__init__(f"Build {build_id} does not belong to player {player_id}")


class BuildLocked(DomainError):
    def __init__(self, build_id: str, entry_id: str | None) -> None:
        self.build_id = build_id
        self.entry_id = entry_id
        super().__init__(f"Build {build_id} is already locked in arena entry {entry_id}")


class RunNotFound(DomainError):
    def __init__(self, player_id: str) -> None:
        self.player_id = player_id
        super().__init__(f"No active run for player {player_id}")


class RunNotActive(DomainError):
    def __init__(self, status: str) -> None:
        self.status = status
        super().__init__(f"Run is not active: {status}")


class RunNotFinished(DomainError):
    def __init__(self, status: str) -> None:
        self.status = status
        super().__init__(f"Run is not ready to finish: {status}")


# --- Store ---


class StoreError(BuildArenaError):
    """Key-value store read/write failed."""


class LockTimeout(StoreError):
    def __init__(self, name: str, timeout: float) -> None:
        self.name = name
        self.timeout = timeout
        super().__init__(f"Could not acquire lock {name!r} within {timeout}s")
