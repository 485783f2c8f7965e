"""
Injectable time source.

Report metadata (``generated_at``) and snapshot bookkeeping (``created_at``,
default effective date) read the time only through a Clock handed to the
service, so a report run or a sequence of catalog edits can be replayed
exactly.  Engines never need one: their dates arrive as arguments.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone

_DEFAULT_START = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class Clock(ABC):
    """Source of the current, timezone-aware UTC time."""

    @abstractmethod
    def now(self) -> datetime: ...

    def today(self) -> date:
        """UTC calendar date of ``now()``; the default effective date of a change."""
        return self.now().astimezone(timezone.utc).date()


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Clock that only moves when told to.

    Starts at 2024-01-01 12:00 UTC unless given another instant.  Successive
    catalog edits in tests call ``advance()`` so their ``created_at`` stamps
    are strictly ordered.
    """

    def __init__(self, start: datetime | None = None):
        self._current = start or _DEFAULT_START

    def now(self) -> datetime:
        return self._current

    def advance(self, seconds: int = 1) -> datetime:
        self._current += timedelta(seconds=seconds)
        return self._current
