"""Arena window boundaries for the three cadences.

small  -> 15-minute buckets aligned to the Unix epoch
daily  -> UTC calendar day
weekly -> UTC week starting Monday 00:00

Season ids embed the window start so every instant maps to exactly one
season per arena type.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

from buildarena.arena.schemas import ArenaWindow
from buildarena.exceptions import UnknownArenaType

ARENA_TYPES: tuple[str, ...] = ("small", "daily", "weekly")

ARENA_ENTRY_COST: dict[str, int] = {
    "small": 20,
    "daily": 80,
    "weekly": 200,
}
DEFAULT_ENTRY_COST = 20

SMALL_WINDOW = timedelta(minutes=15)
DAILY_WINDOW = timedelta(days=1)
WEEKLY_WINDOW = timedelta(weeks=1)

_CADENCE: dict[str, timedelta] = {
    "small": SMALL_WINDOW,
    "daily": DAILY_WINDOW,
    "weekly": WEEKLY_WINDOW,
}

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def is_valid_arena_type(value: object) -> bool:
    return value in ARENA_TYPES


def get_arena_entry_cost(arena_type: str) -> int:
    """Soft-currency cost of entering ``arena_type``."""
    return ARENA_ENTRY_COST.get(arena_type, DEFAULT_ENTRY_COST)


def cadence_length(arena_type: str) -> timedelta:
    try:
        return _CADENCE[arena_type]
    except KeyError:
        raise UnknownArenaType(arena_type) from None


def to_iso_z(dt: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a Z suffix, e.g. 2026-02-23T10:15:00.000Z."""
    dt = as_utc(dt)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def as_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def get_monday(dt: datetime | date) -> date:
    """Get the Monday of the week containing dt."""
    d = dt.date() if isinstance(dt, datetime) else dt
    return d - timedelta(days=d.weekday())


def window_start(arena_type: str, now: datetime) -> datetime:
    """Start of the ``arena_type`` window containing ``now``."""
    now = as_utc(now)
    if arena_type == "small":
        buckets = (now - _EPOCH) // SMALL_WINDOW
        return _EPOCH + buckets * SMALL_WINDOW
    if arena_type == "daily":
        return datetime.combine(now.date(), time.min, tzinfo=timezone.utc)
    if arena_type == "weekly":
        return datetime.combine(get_monday(now), time.min, tzinfo=timezone.utc)
    raise UnknownArenaType(arena_type)


def season_id_for(arena_type: str, start: datetime) -> str:
    if arena_type == "small":
        return f"small:{to_iso_z(start)}"
    return f"{arena_type}:{start.date().isoformat()}"


def get_arena_window(arena_type: str, now: datetime | None = None) -> ArenaWindow:
    """Map a wall-clock instant to its arena season.

    lock_at equals the window start and is informational only; result_at is
    the settlement gate.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    start = window_start(arena_type, now)
    return ArenaWindow(
        arena_type=arena_type,
        season_id=season_id_for(arena_type, start),
        lock_at=start,
        result_at=start + cadence_length(arena_type),
        window_start_at=start,
    )


def get_previous_arena_window(arena_type: str, now: datetime | None = None) -> ArenaWindow:
    """The window that ended exactly when the current one started."""
    current = get_arena_window(arena_type, now)
    return get_arena_window(arena_type, current.window_start_at - cadence_length(arena_type))


def seconds_until(target: datetime, now: datetime) -> int:
    """Whole seconds from ``now`` to ``target``, floored at zero."""
    remaining = as_utc(target) - as_utc(now)
    return max(0, remaining // timedelta(seconds=1))
