"""Day-count, calendar and business-day conventions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import FrozenSet, Iterable

from .exceptions import InvalidArgumentError


class StubType(str, Enum):
    FRONT_SHORT = "front_short"
    FRONT_LONG = "front_long"
    BACK_SHORT = "back_short"
    BACK_LONG = "back_long"
    NONE = "none"

    @property
    def is_front(self) -> bool:
        return self in (StubType.FRONT_SHORT, StubType.FRONT_LONG)


class BusinessDayConvention(str, Enum):
    FOLLOWING = "following"
    PRECEDING = "preceding"

    @property
    def step(self) -> int:
        return 1 if self is BusinessDayConvention.FOLLOWING else -1


class DayCount(str, Enum):
    ACT_365F = "ACT/365F"
    ACT_360 = "ACT/360"

    @property
    def denominator(self) -> float:
        return 365.0 if self is DayCount.ACT_365F else 360.0

    def year_fraction(self, start: date, end: date) -> float:
        return (end - start).days / self.denominator


@dataclass(frozen=True, slots=True)
class WeekendCalendar:
    """Calendar closed on Saturdays and Sundays only."""

    def is_business_day(self, day: date) -> bool:
        return day.weekday() < 5


@dataclass(frozen=True, slots=True)
class HolidayCalendar:
    """Weekend calendar with an explicit set of additional holidays."""

    holidays: FrozenSet[date] = field(default_factory=frozenset)

    @classmethod
    def from_dates(cls, holidays: Iterable[date]) -> "HolidayCalendar":
        return cls(holidays=frozenset(holidays))

    def is_business_day(self, day: date) -> bool:
        return day.weekday() < 5 and day not in self.holidays


def adjust_date(day: date, convention: BusinessDayConvention, calendar) -> date:
    """Move ``day`` one calendar day at a time until it is a business day."""

    if day is None:
        raise InvalidArgumentError("date is required")
    if calendar is None:
        raise InvalidArgumentError("calendar is required")
    delta = timedelta(days=BusinessDayConvention(convention).step)
    adjusted = day
    while not calendar.is_business_day(adjusted):
        adjusted += delta
    return adjusted


def add_business_days(day: date, count: int, calendar) -> date:
    if count < 0:
        raise InvalidArgumentError("business day count must be non-negative")
    current = day
    remaining = count
    while remaining > 0:
        current += timedelta(days=1)
        if calendar.is_business_day(current):
            remaining -= 1
    return current
