"""Premium-leg accrual and payment schedule generation.

The generator follows the ISDA standard model: an unadjusted date list is
rolled from one end of the contract in integer multiples of the coupon step,
the stub is placed at the requested end, and every date except the first is
moved to a business day. The final accrual end date is never adjusted and,
when protection starts at the beginning of a day, runs one day past maturity
to capture the extra day of accrued premium.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Iterator, List, Sequence, Tuple

from dateutil.relativedelta import relativedelta

from .conventions import BusinessDayConvention, StubType, WeekendCalendar, adjust_date
from .exceptions import InvalidArgumentError, InvalidScheduleError


@dataclass(frozen=True, slots=True)
class SchedulePeriod:
    accrual_start: date
    accrual_end: date
    payment_date: date

    def as_triplet(self) -> Tuple[date, date, date]:
        return self.accrual_start, self.accrual_end, self.payment_date


@dataclass(frozen=True, slots=True)
class PremiumLegSchedule:
    """Immutable sequence of schedule periods."""

    periods: Tuple[SchedulePeriod, ...]

    def __post_init__(self) -> None:
        if not self.periods:
            raise InvalidScheduleError("schedule requires at least one period")

    def __len__(self) -> int:
        return len(self.periods)

    def __iter__(self) -> Iterator[SchedulePeriod]:
        return iter(self.periods)

    def __getitem__(self, index: int) -> SchedulePeriod:
        return self.periods[index]

    @property
    def accrual_start_dates(self) -> List[date]:
        return [period.accrual_start for period in self.periods]

    @property
    def accrual_end_dates(self) -> List[date]:
        return [period.accrual_end for period in self.periods]

    @property
    def payment_dates(self) -> List[date]:
        return [period.payment_date for period in self.periods]

    def accrual_start_index(self, day: date) -> int:
        """Index of ``day`` among the accrual start dates.

        When ``day`` is not an accrual start the result is
        ``-(insertion_point) - 1``.
        """

        starts = self.accrual_start_dates
        position = bisect.bisect_left(starts, day)
        if position < len(starts) and starts[position] == day:
            return position
        return -position - 1

    def period_containing(self, day: date) -> SchedulePeriod | None:
        for period in self.periods:
            if period.accrual_start <= day < period.accrual_end:
                return period
        return None


def _check_step(start_date: date, step: relativedelta) -> None:
    if step is None:
        raise InvalidArgumentError("step is required")
    if start_date + step <= start_date:
        raise InvalidArgumentError(f"step must be a positive period, got {step!r}")


def generate_unadjusted_dates(
    start_date: date,
    end_date: date,
    step: relativedelta,
    stub_type: StubType,
) -> List[date]:
    """Ascending unadjusted dates from ``start_date`` to ``end_date``.

    The k-th date is rolled as ``anchor -/+ step * k`` rather than by k
    repeated single steps, so month-end clamping never accumulates.
    """

    if start_date is None or end_date is None:
        raise InvalidArgumentError("start_date and end_date are required")
    if stub_type is None:
        raise InvalidArgumentError("stub_type is required")
    stub_type = StubType(stub_type)
    if stub_type is StubType.NONE:
        raise InvalidScheduleError("NONE is not allowed as a stub type")
    if end_date <= start_date:
        raise InvalidScheduleError(f"end date {end_date} must be after start date {start_date}")
    _check_step(start_date, step)

    dates: List[date] = []
    intervals = 0
    match stub_type:
        case StubType.FRONT_SHORT | StubType.FRONT_LONG:
            current = end_date
            while current > start_date:
                dates.append(current)
                intervals += 1
                current = end_date - step * intervals
            if current == start_date or len(dates) == 1 or stub_type is StubType.FRONT_SHORT:
                dates.append(start_date)
            else:
                dates[-1] = start_date
            dates.reverse()
        case StubType.BACK_SHORT | StubType.BACK_LONG:
            current = start_date
            while current < end_date:
                dates.append(current)
                intervals += 1
                current = start_date + step * intervals
            if current == end_date or len(dates) == 1 or stub_type is StubType.BACK_SHORT:
                dates.append(end_date)
            else:
                dates[-1] = end_date
    return dates


def generate_schedule(
    start_date: date,
    end_date: date,
    step: relativedelta,
    stub_type: StubType,
    business_day_convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
    calendar=None,
    protect_from_day_start: bool = True,
) -> PremiumLegSchedule:
    """Build the premium-leg schedule between ``start_date`` and ``end_date``."""

    if start_date is None or end_date is None:
        raise InvalidArgumentError("start_date and end_date are required")
    if stub_type is None:
        raise InvalidArgumentError("stub_type is required")
    if StubType(stub_type) is StubType.NONE:
        raise InvalidScheduleError("NONE is not allowed as a stub type")
    if protect_from_day_start:
        if end_date < start_date:
            raise InvalidScheduleError(f"end date {end_date} is before start date {start_date}")
    elif end_date <= start_date:
        raise InvalidScheduleError(f"end date {end_date} must be after start date {start_date}")
    calendar = calendar if calendar is not None else WeekendCalendar()

    if start_date == end_date:
        unadjusted: Sequence[date] = [start_date, end_date]
    else:
        unadjusted = generate_unadjusted_dates(start_date, end_date, step, stub_type)

    periods: List[SchedulePeriod] = []
    previous_adjusted = unadjusted[0]  # the first date is never adjusted
    for next_date in unadjusted[1:]:
        next_adjusted = adjust_date(next_date, business_day_convention, calendar)
        periods.append(SchedulePeriod(previous_adjusted, next_adjusted, next_adjusted))
        previous_adjusted = next_adjusted

    last = unadjusted[-1]
    final_end = last + timedelta(days=1) if protect_from_day_start else last
    periods[-1] = replace(periods[-1], accrual_end=final_end)
    return PremiumLegSchedule(periods=tuple(periods))
