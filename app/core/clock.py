from datetime import date, datetime, timezone


class Clock:
    """Source of the current UTC date used for due-date checks."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return self.now().date()


class FixedClock(Clock):
    def __init__(self, today: date):
        self._now = datetime.combine(today, datetime.min.time(), tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._now


system_clock = Clock()


def get_clock() -> Clock:
    return system_clock
