from __future__ import annotations

from datetime import date, datetime, timezone


def utcnow_naive() -> datetime:
    """Return current UTC time as naive datetime for DATETIME columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def today_utc() -> date:
    return utcnow_naive().date()


def is_process_active(end_date: date, today: date | None = None) -> bool:
    """A process stays active through its end date."""
    return end_date >= (today or today_utc())
