"""Calendar-month budget period arithmetic."""

from datetime import date, datetime, time, timedelta

from dateutil.relativedelta import relativedelta

from couplebucks.utils.clock import DEFAULT_TIMEZONE, resolve_timezone, to_naive_utc


def period_start_for(day: date) -> date:
    """Return the first day of the month containing day."""
    return day.replace(day=1)


def next_period_start(period_start: date) -> date:
    """Return the first day of the month after the period starting at period_start."""
    return period_start_for(period_start) + relativedelta(months=1)


def period_end(period_start: date) -> date:
    """Return the last day (inclusive) of the monthly period."""
    return next_period_start(period_start) - timedelta(days=1)


def previous_period_end(today: date) -> date:
    """Return the day before the first day of today's month."""
    return period_start_for(today) - timedelta(days=1)


def is_elapsed(period_start: date, today: date) -> bool:
    """Return True if the period started in a calendar month before today's."""
    return (period_start.year, period_start.month) < (today.year, today.month)


def local_midnight(day: date, timezone: str = DEFAULT_TIMEZONE) -> datetime:
    """Return the start of day in timezone as a naive UTC datetime, as the ledger stores it."""
    return to_naive_utc(datetime.combine(day, time.min, tzinfo=resolve_timezone(timezone)))


def day_bounds(
    start: date, end_exclusive: date, timezone: str = DEFAULT_TIMEZONE
) -> tuple[datetime, datetime]:
    """Convert a half-open range of calendar days in timezone to naive UTC bounds."""
    return local_midnight(start, timezone), local_midnight(end_exclusive, timezone)


def period_bounds(
    period_start: date, timezone: str = DEFAULT_TIMEZONE
) -> tuple[datetime, datetime]:
    """Half-open naive UTC range from period_start to the next period start, both local midnights."""
    return day_bounds(period_start, next_period_start(period_start), timezone)


def month_label(period_start: date) -> str:
    """Format a period as YYYY-MM."""
    return f"{period_start.year:04d}-{period_start.month:02d}"
