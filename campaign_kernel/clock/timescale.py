"""
Time Scaling — converts real elapsed time into the accelerated game clock.

One real hour is one game week (168x). Every cycle-timing calculation in the
kernel goes through this module so the multiplier lives in one place.

Behavioral Contract:
- Never reads the wall clock; every function takes the instants it needs
- Treats naive datetimes as UTC
- Day and week anchors (UTC midnight, UTC Sunday) come from cron schedules,
  so reset boundaries are explicit and testable
"""

from datetime import datetime, timedelta, timezone

from croniter import croniter

TIME_SCALE = 168

MS_PER_HOUR = 60 * 60 * 1000

# Game-time units, in game hours
GAME_TIME = {
    "HOUR": 1,
    "DAY": 24,
    "WEEK": 168,
    "MONTH": 720,
    "YEAR": 8736,
}

DAILY_RESET_SCHEDULE = "0 0 * * *"
WEEKLY_RESET_SCHEDULE = "0 0 * * 0"


def as_utc(value: datetime) -> datetime:
    """Normalize a datetime to an aware UTC datetime."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_epoch_ms(value: datetime) -> int:
    """Epoch milliseconds for a datetime (naive values are UTC)."""
    return int(round(as_utc(value).timestamp() * 1000))


def from_epoch_ms(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def real_to_game_hours(real_ms: float) -> float:
    """Convert real elapsed milliseconds to game hours."""
    return real_ms / MS_PER_HOUR * TIME_SCALE


def game_to_real_hours(game_hours: float) -> float:
    """Convert game hours to real hours."""
    return game_hours / TIME_SCALE


def real_hours_between(start: datetime, end: datetime) -> float:
    """Real hours elapsed from start to end (negative if end precedes start)."""
    return (as_utc(end) - as_utc(start)).total_seconds() / 3600


def game_week_of(value: datetime) -> int:
    """Game week number of an instant, counted from the epoch."""
    return int(real_to_game_hours(to_epoch_ms(value)) // GAME_TIME["WEEK"])


def add_hours(value: datetime, hours: float) -> datetime:
    return as_utc(value) + timedelta(hours=hours)


def next_utc_midnight(now: datetime) -> datetime:
    """The first UTC midnight strictly after now."""
    cron = croniter(DAILY_RESET_SCHEDULE, as_utc(now))
    return as_utc(cron.get_next(datetime))


def utc_week_start(now: datetime) -> datetime:
    """The most recent Sunday 00:00 UTC at or before now."""
    anchor = as_utc(now)
    minute = anchor.replace(second=0, microsecond=0)
    if croniter.match(WEEKLY_RESET_SCHEDULE, minute):
        return minute
    cron = croniter(WEEKLY_RESET_SCHEDULE, minute)
    return as_utc(cron.get_prev(datetime))


def is_new_week(week_started_at: datetime, now: datetime) -> bool:
    """True once now falls in a later UTC week than week_started_at."""
    return utc_week_start(now) > as_utc(week_started_at)
