"""Time helpers shared by the daylog tests."""

from datetime import date, datetime, timezone

UTC = timezone.utc
TODAY = date(2026, 10, 18)


def at(day, hour=12, minute=0):
    """Noon (by default) UTC on the given day."""
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=UTC)
