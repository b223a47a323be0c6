"""
Calendar service: ISO week arithmetic and the purchase cutoff

Pure computation. All zone handling goes through zoneinfo so DST transitions
are resolved from the tz database, never from a fixed offset.
"""
from datetime import date, datetime, time, timezone
from typing import Tuple
from zoneinfo import ZoneInfo


def iso_weeks_in_year(year: int) -> int:
    """52 or 53; Dec 28 always falls in the last ISO week of its year"""
    return date(year, 12, 28).isocalendar()[1]


def next_iso_week(year: int, week: int) -> Tuple[int, int]:
    if week < iso_weeks_in_year(year):
        return year, week + 1
    return year + 1, 1


def current_iso_week(now: datetime, tz_name: str) -> Tuple[int, int]:
    """ISO (year, week) of `now` as seen in the club's local time"""
    local = now.astimezone(ZoneInfo(tz_name))
    iso = local.isocalendar()
    return iso[0], iso[1]


def purchase_cutoff(year: int, week: int, tz_name: str,
                    weekday: int = 6, hour: int = 17) -> datetime:
    """
    Instant after which boards for ISO week (year, week) can no longer be bought

    The deadline is `weekday` (ISO, 6 = Saturday) of that week at `hour`:00
    local civil time, returned as an aware UTC datetime.

    Example:
        purchase_cutoff(2025, 13, "Europe/Copenhagen")
        -> 2025-03-29 16:00 UTC (CET, the switch to CEST is the next morning)
    """
    local_day = date.fromisocalendar(year, week, weekday)
    local_deadline = datetime.combine(local_day, time(hour=hour), tzinfo=ZoneInfo(tz_name))
    return local_deadline.astimezone(timezone.utc)


def is_past_cutoff(now: datetime, year: int, week: int, tz_name: str,
                   weekday: int = 6, hour: int = 17) -> bool:
    """Deadline is exclusive: 16:59:59 is allowed, 17:00:00 is not"""
    return now >= purchase_cutoff(year, week, tz_name, weekday, hour)
