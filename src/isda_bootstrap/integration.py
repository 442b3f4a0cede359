"""Integration time grids for the protection and accrual-on-default legs.

Both legs are integrals of discounted default density. With piecewise-flat
forward interest rates and hazard rates the integrand has a closed form on
any interval where neither curve has a node, so the grid consists of every
node of both curves inside the protection window plus the window endpoints.
Points closer together than ``tolerance`` (in years) are merged so that
nearly coincident nodes cannot produce zero-width sub-intervals.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Iterable, List, Sequence

import numpy as np

from .conventions import DayCount
from .exceptions import InvalidArgumentError, InvalidScheduleError

if TYPE_CHECKING:
    from .curves import DiscountCurve
    from .hazard import PiecewiseCreditCurve
    from .valuation import CDSTerms

DEFAULT_TOLERANCE = 1e-10
ONE_DAY = timedelta(days=1)


def _restrict(points: Iterable[float], lower: float, upper: float, tolerance: float) -> np.ndarray:
    values = np.unique(np.asarray(list(points), dtype=float))
    inside = values[(values > lower + tolerance) & (values < upper - tolerance)]
    kept: List[float] = [lower]
    for value in inside:
        if value - kept[-1] > tolerance:
            kept.append(float(value))
    kept.append(upper)
    return np.array(kept, dtype=float)


def integration_time_points(
    discount_curve: "DiscountCurve",
    hazard_curve: "PiecewiseCreditCurve",
    start_time: float,
    end_time: float,
    *,
    hazard_time_shift: float = 0.0,
    cashflow_times: Sequence[float] | None = None,
    settlement_offset: float = 0.0,
    tolerance: float = DEFAULT_TOLERANCE,
) -> np.ndarray:
    """Sorted, de-duplicated curve nodes restricted to the integration window.

    When ``cashflow_times`` is given every premium cash-flow time except the
    last is shifted back by ``settlement_offset`` and added to the grid, and
    the window opens at the second cash-flow time minus the offset.
    """

    if discount_curve is None or hazard_curve is None:
        raise InvalidArgumentError("discount and hazard curves are required")
    if tolerance < 0.0:
        raise InvalidArgumentError("tolerance must be non-negative")

    points: List[float] = list(discount_curve.node_times())
    points.extend(float(t) + hazard_time_shift for t in hazard_curve.node_times)
    points.extend([start_time, end_time])

    lower = start_time
    if cashflow_times is not None:
        if len(cashflow_times) < 2:
            raise InvalidArgumentError("cash-flow schedule needs at least two dates")
        offset_start = float(cashflow_times[1]) - settlement_offset
        points.append(offset_start)
        last = len(cashflow_times) - 1
        for i, time in enumerate(cashflow_times):
            points.append(float(time) - settlement_offset if i < last else float(time))
        lower = offset_start

    if not lower < end_time:
        raise InvalidArgumentError(f"integration window [{lower}, {end_time}] is empty")
    return _restrict(points, lower, end_time, tolerance)


def _hazard_time_shift(valuation_date: date, hazard_curve: "PiecewiseCreditCurve", day_count: DayCount) -> float:
    if hazard_curve.base_date is None:
        return 0.0
    return day_count.year_fraction(valuation_date, hazard_curve.base_date)


def build_protection_leg_schedule(
    valuation_date: date,
    terms: "CDSTerms",
    discount_curve: "DiscountCurve",
    hazard_curve: "PiecewiseCreditCurve",
    include_schedule: bool = False,
    tolerance: float = DEFAULT_TOLERANCE,
    day_count: DayCount = DayCount.ACT_365F,
) -> np.ndarray:
    """Integration times from the protection start to maturity.

    Maturity is extended by one day when protection starts at the beginning
    of a day.
    """

    start_time = day_count.year_fraction(valuation_date, terms.start_date)
    end_date = terms.maturity + ONE_DAY if terms.protect_from_day_start else terms.maturity
    end_time = day_count.year_fraction(valuation_date, end_date)

    cashflow_times = None
    settlement_offset = 0.0
    if include_schedule:
        schedule = terms.schedule()
        schedule_dates = [schedule[0].accrual_start, *schedule.payment_dates]
        cashflow_times = [day_count.year_fraction(valuation_date, d) for d in schedule_dates]
        if terms.protect_from_day_start:
            settlement_offset = day_count.year_fraction(valuation_date, valuation_date + ONE_DAY)

    return integration_time_points(
        discount_curve,
        hazard_curve,
        start_time,
        end_time,
        hazard_time_shift=_hazard_time_shift(valuation_date, hazard_curve, day_count),
        cashflow_times=cashflow_times,
        settlement_offset=settlement_offset,
        tolerance=tolerance,
    )


def _time_to_date(origin: date, time: float, day_count: DayCount) -> date:
    return origin + timedelta(days=int(round(time * day_count.denominator)))


def build_accrual_leg_schedule(
    valuation_date: date,
    terms: "CDSTerms",
    discount_curve: "DiscountCurve",
    hazard_curve: "PiecewiseCreditCurve",
    day_count: DayCount = DayCount.ACT_365F,
) -> List[date]:
    """Date grid for the accrual-on-default integral of a CDS."""

    start_date = terms.start_date
    end_date = terms.maturity + ONE_DAY if terms.protect_from_day_start else terms.maturity

    candidates: List[date] = [_time_to_date(valuation_date, t, day_count) for t in discount_curve.node_times()]
    if hazard_curve.dates:
        candidates.extend(hazard_curve.dates)
    else:
        origin = hazard_curve.base_date or valuation_date
        candidates.extend(_time_to_date(origin, float(t), day_count) for t in hazard_curve.node_times)
    candidates.extend([start_date, end_date])
    return truncate_dates(candidates, start_date, end_date)


def _calendar_day(value: date) -> date:
    return value.date() if isinstance(value, datetime) else value


def truncate_dates(
    all_dates: Sequence[date],
    start_date: date,
    end_date: date,
    is_sorted: bool = False,
) -> List[date]:
    """Dates of ``all_dates`` within ``[start_date, end_date]``, bracketed by both ends.

    Membership is decided on calendar dates only, ignoring any time of day.
    """

    if all_dates is None or start_date is None or end_date is None:
        raise InvalidArgumentError("dates, start_date and end_date are required")
    if not _calendar_day(start_date) < _calendar_day(end_date):
        raise InvalidScheduleError(f"start date {start_date} must be before end date {end_date}")

    first, last = _calendar_day(start_date), _calendar_day(end_date)
    truncated: List[date] = []
    seen = set()
    for value in all_dates:
        if first <= _calendar_day(value) <= last and value not in seen:
            seen.add(value)
            truncated.append(value)
    if not truncated:
        return [start_date, end_date]
    if not is_sorted:
        truncated.sort()
    if truncated[0] != start_date:
        truncated.insert(0, start_date)
    if truncated[-1] != end_date:
        truncated.append(end_date)
    return truncated
