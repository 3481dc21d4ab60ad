# TerraField ETL Quality - Clock
# Injectable source of "today" for year/date heuristics

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Protocol


class Clock(Protocol):
    """Anything that can tell the engine what day it is."""

    def today(self) -> date: ...


class SystemClock:
    """Reads the local calendar date at call time."""

    def today(self) -> date:
        return date.today()


@dataclass(frozen=True)
class FixedClock:
    """Always returns the same date; used to make runs reproducible."""

    fixed: date

    @classmethod
    def at(cls, year: int, month: int = 1, day: int = 1) -> "FixedClock":
        return cls(date(year, month, day))

    def today(self) -> date:
        return self.fixed


def current_year(clock: Clock) -> int:
    return clock.today().year


def current_date_iso(clock: Clock) -> str:
    """Today's date in YYYY-MM-DD form."""
    return clock.today().isoformat()


def resolve_clock(clock: Optional[Clock]) -> Clock:
    return clock if clock is not None else SystemClock()
