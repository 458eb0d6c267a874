"""Clock abstraction so descriptor timestamps are deterministic in tests."""

from abc import ABC, abstractmethod
from datetime import UTC, datetime


class Time(ABC):
    """Abstract clock for dependency injection."""

    @abstractmethod
    def now(self) -> datetime:
        """Current time as an aware UTC datetime."""
        ...


class RealTime(Time):
    """Production clock."""

    def now(self) -> datetime:
        return datetime.now(UTC)


def isoformat_utc(moment: datetime) -> str:
    """Format as ISO-8601 with millisecond precision and a trailing Z."""
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
