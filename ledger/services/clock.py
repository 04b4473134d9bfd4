from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo


class BusinessClock:
    """Supplies "today" as seen in the business timezone."""

    def __init__(self, timezone_name: str = "Asia/Ho_Chi_Minh") -> None:
        self._tz = ZoneInfo(timezone_name)

    def today(self) -> date:
        return datetime.now(self._tz).date()

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    def __init__(self, today: date, now: Optional[datetime] = None) -> None:
        self._today = today
        self._now = now or datetime(today.year, today.month, today.day, 12, 0, tzinfo=timezone.utc)

    def today(self) -> date:
        return self._today

    def now(self) -> datetime:
        return self._now


def format_round_date(day: date) -> str:
    return day.strftime("%d/%m/%Y")
