import datetime as dt
from typing import Optional

from dateutil.relativedelta import relativedelta

from app.models.enums import RecurrenceInterval

WEEK_INTERVALS = {
    RecurrenceInterval.weekly: 1,
    RecurrenceInterval.biweekly: 2,
}

MONTH_INTERVALS = {
    RecurrenceInterval.monthly: 1,
    RecurrenceInterval.semiannually: 6,
}


def start_of_day(value: dt.date | dt.datetime | str) -> dt.date:
    """Normalize to the UTC calendar date.

    Aware datetimes are converted to UTC first; naive ones are taken as UTC.
    Strings accept ISO dates or datetimes, with 'Z' or an offset.
    """
    if isinstance(value, dt.datetime):
        if value.tzinfo is not None:
            value = value.astimezone(dt.timezone.utc)
        return value.date()

    if isinstance(value, dt.date):
        return value

    if isinstance(value, str):
        s = value.strip().replace("Z", "+00:00")
        if not s:
            raise ValueError("empty date")
        try:
            parsed = dt.datetime.fromisoformat(s)
        except ValueError:
            parsed = dt.datetime.strptime(s, "%Y-%m-%d")
        return start_of_day(parsed)

    raise TypeError(f"Unsupported type for date: {type(value)!r}")


def parse_interval(value: Optional[str]) -> Optional[RecurrenceInterval]:
    if value is None:
        return None
    try:
        return RecurrenceInterval(value)
    except ValueError:
        return None


def next_occurrence(
    interval: Optional[RecurrenceInterval | str],
    current: dt.date,
    anchor: Optional[dt.date] = None,
) -> Optional[dt.date]:
    """Date of the occurrence after `current`, or None when the template is exhausted.

    Month steps are counted from `anchor` (the template's start date) so that
    clamping to a short month does not drift later occurrences: a template
    anchored on Jan 31 goes Feb 28, Mar 31, Apr 30...
    """
    if isinstance(interval, str) and not isinstance(interval, RecurrenceInterval):
        interval = parse_interval(interval)

    if interval in WEEK_INTERVALS:
        return current + dt.timedelta(weeks=WEEK_INTERVALS[interval])

    if interval in MONTH_INTERVALS:
        months = MONTH_INTERVALS[interval]
        if anchor is None or anchor > current:
            return current + relativedelta(months=months)
        step = 1
        candidate = anchor + relativedelta(months=months)
        while candidate <= current:
            step += 1
            candidate = anchor + relativedelta(months=months * step)
        return candidate

    # once / unknown
    return None


def first_occurrence_on_or_after(
    interval: Optional[RecurrenceInterval | str],
    start: dt.date,
    boundary: dt.date,
) -> dt.date:
    """First date of the series anchored on `start` that is not before `boundary`.

    A series without further occurrences (once) keeps its single run, pushed
    to `boundary` when its start date is already behind it.
    """
    current = start
    while current < boundary:
        following = next_occurrence(interval, current, anchor=start)
        if following is None:
            return boundary
        current = following
    return current


def is_due(next_payment_date: Optional[dt.date], today: dt.date) -> bool:
    return next_payment_date is not None and start_of_day(next_payment_date) <= today
