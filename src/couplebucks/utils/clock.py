"""Resolution of "today" in a single canonical timezone."""

import os
from datetime import UTC, date, datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_TIMEZONE = "UTC"


def resolve_timezone(name: Optional[str] = None) -> ZoneInfo:
    """Return the zone to pin calendar days to.

    Args:
        name: IANA zone name. If None, checks COUPLEBUCKS_TIMEZONE
            environment variable, then defaults to UTC

    Raises:
        ValueError: If the zone name is unknown
    """
    if name is None:
        name = os.environ.get("COUPLEBUCKS_TIMEZONE", DEFAULT_TIMEZONE)
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone '{name}'") from e


def today(timezone: Optional[str] = None) -> date:
    """Return the current calendar day in the canonical timezone."""
    return datetime.now(resolve_timezone(timezone)).date()


def utcnow() -> datetime:
    """Return the current time as a naive UTC datetime, as the ledger stores it."""
    return datetime.now(UTC).replace(tzinfo=None)


def to_naive_utc(moment: datetime) -> datetime:
    """Normalize a datetime to naive UTC. Naive input is assumed to be UTC."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(UTC).replace(tzinfo=None)


def to_local(moment: datetime, timezone: Optional[str] = None) -> datetime:
    """Express a stored naive UTC datetime in the given zone."""
    return moment.replace(tzinfo=UTC).astimezone(resolve_timezone(timezone))
