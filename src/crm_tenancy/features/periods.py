"""Calendar-month usage periods."""

import calendar
from datetime import date, datetime, timezone


def usage_period(at: datetime | date) -> tuple[date, date]:
    """Return (first day, last day) of the calendar month containing ``at``.

    Aware datetimes are converted to UTC first; naive ones are taken as UTC.
    """
    if isinstance(at, datetime):
        if at.tzinfo is not None:
            at = at.astimezone(timezone.utc)
        at = at.date()
    last_day = calendar.monthrange(at.year, at.month)[1]
    return date(at.year, at.month, 1), date(at.year, at.month, last_day)
