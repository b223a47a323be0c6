"""
Time source abstraction

Business logic never reads the wall clock directly. Every component that needs
"now" takes a Clock in its constructor, so tests can place time exactly on a
cutoff boundary and move it forward without sleeping.
"""
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """Returns the current instant as a timezone-aware UTC datetime"""

    @abstractmethod
    def now(self) -> datetime:
        ...


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class ManualClock(Clock):
    """
    Clock that only moves when told to

    Naive datetimes are rejected: an instant without a zone is ambiguous
    around DST changes.
    """

    def __init__(self, instant: datetime):
        self.set(instant)

    def set(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            raise ValueError("ManualClock needs a timezone-aware datetime")
        self._now = instant.astimezone(timezone.utc)

    def advance(self, delta: timedelta = timedelta(seconds=1)) -> datetime:
        self._now = self._now + delta
        return self._now

    def now(self) -> datetime:
        return self._now
