import math
from datetime import date, datetime

import numpy as np
import pytest

from isda_bootstrap.conventions import DayCount
from isda_bootstrap.curves import FlatDiscountCurve, PiecewiseZeroCurve
from isda_bootstrap.exceptions import InvalidArgumentError, InvalidScheduleError
from isda_bootstrap.hazard import PiecewiseCreditCurve
from isda_bootstrap.integration import (
    build_accrual_leg_schedule,
    build_protection_leg_schedule,
    integration_time_points,
    truncate_dates,
)
from isda_bootstrap.valuation import CDSTerms

VALUATION = date(2013, 6, 12)


def _curves():
    discount = PiecewiseZeroCurve(times=np.array([0.5, 1.0, 2.0]), rates=np.array([0.01, 0.012, 0.015]))
    hazard = PiecewiseCreditCurve.from_times([0.75, 1.0 + 1e-12, 3.0], [0.01, 0.015, 0.02])
    return discount, hazard


def test_union_of_nodes_inside_window():
    discount, hazard = _curves()
    grid = integration_time_points(discount, hazard, 0.25, 2.5)
    np.testing.assert_allclose(grid, [0.25, 0.5, 0.75, 1.0, 2.0, 2.5], rtol=0, atol=1e-15)
    assert np.all(np.diff(grid) > 0)


def test_near_duplicate_nodes_are_merged():
    discount, hazard = _curves()
    grid = integration_time_points(discount, hazard, 0.0, 3.0)
    assert np.all(np.diff(grid) > 1e-10)
    assert np.count_nonzero(np.abs(grid - 1.0) < 1e-9) == 1


def test_endpoints_are_kept_exactly():
    discount, hazard = _curves()
    end = 2.0 - 1e-13
    grid = integration_time_points(discount, hazard, 0.1, end)
    assert grid[0] == 0.1
    assert grid[-1] == end
    assert 2.0 not in grid


def test_empty_window_raises():
    discount, hazard = _curves()
    with pytest.raises(InvalidArgumentError):
        integration_time_points(discount, hazard, 1.0, 1.0)
    with pytest.raises(InvalidArgumentError):
        integration_time_points(discount, hazard, 0.0, 1.0, cashflow_times=[0.5])


def test_cashflow_times_move_window_start():
    discount, hazard = _curves()
    grid = integration_time_points(
        discount,
        hazard,
        0.0,
        2.5,
        cashflow_times=[0.0, 0.3, 0.55, 2.5],
        settlement_offset=0.01,
    )
    assert math.isclose(grid[0], 0.29, abs_tol=1e-15)
    assert any(math.isclose(t, 0.54, abs_tol=1e-15) for t in grid)
    assert grid[-1] == 2.5


def _terms(maturity=date(2014, 6, 20), protect=True):
    return CDSTerms(start_date=date(2013, 3, 20), maturity=maturity, protect_from_day_start=protect)


def _dated_hazard():
    return PiecewiseCreditCurve.from_dates(
        VALUATION,
        [date(2013, 12, 20), date(2014, 6, 20), date(2016, 6, 20)],
        [0.01, 0.015, 0.02],
    )


def test_protection_leg_schedule_window():
    terms = _terms()
    grid = build_protection_leg_schedule(VALUATION, terms, FlatDiscountCurve(rate=0.02), _dated_hazard())
    dc = DayCount.ACT_365F
    assert grid[0] == dc.year_fraction(VALUATION, date(2013, 3, 20))
    assert grid[-1] == dc.year_fraction(VALUATION, date(2014, 6, 21))
    assert dc.year_fraction(VALUATION, date(2013, 12, 20)) in grid
    assert dc.year_fraction(VALUATION, date(2014, 6, 20)) in grid
    assert dc.year_fraction(VALUATION, date(2016, 6, 20)) not in grid


def test_protection_leg_schedule_without_day_begin_protection():
    terms = _terms(protect=False)
    grid = build_protection_leg_schedule(VALUATION, terms, FlatDiscountCurve(rate=0.02), _dated_hazard())
    assert grid[-1] == DayCount.ACT_365F.year_fraction(VALUATION, date(2014, 6, 20))


def test_protection_leg_schedule_with_cashflows():
    terms = _terms()
    grid = build_protection_leg_schedule(
        VALUATION, terms, FlatDiscountCurve(rate=0.02), _dated_hazard(), include_schedule=True
    )
    # first payment 2013-06-20 shifted back one day
    assert math.isclose(grid[0], 7 / 365, abs_tol=1e-15)
    assert any(math.isclose(t, (date(2013, 9, 20) - VALUATION).days / 365 - 1 / 365, abs_tol=1e-15) for t in grid)


def test_accrual_leg_schedule_dates():
    dates = build_accrual_leg_schedule(VALUATION, _terms(), FlatDiscountCurve(rate=0.02), _dated_hazard())
    assert dates == [date(2013, 3, 20), date(2013, 12, 20), date(2014, 6, 20), date(2014, 6, 21)]


def test_truncate_filters_sorts_and_brackets():
    all_dates = [date(2013, 5, 1), date(2013, 1, 1), date(2013, 3, 1), date(2013, 3, 1), date(2014, 1, 1)]
    result = truncate_dates(all_dates, date(2013, 2, 1), date(2013, 12, 31))
    assert result == [date(2013, 2, 1), date(2013, 3, 1), date(2013, 5, 1), date(2013, 12, 31)]


def test_truncate_keeps_existing_endpoints_once():
    all_dates = [date(2013, 2, 1), date(2013, 4, 1), date(2013, 6, 1)]
    result = truncate_dates(all_dates, date(2013, 2, 1), date(2013, 6, 1), is_sorted=True)
    assert result == all_dates


def test_truncate_empty_returns_endpoints():
    result = truncate_dates([date(2012, 1, 1), date(2015, 1, 1)], date(2013, 1, 1), date(2014, 1, 1))
    assert result == [date(2013, 1, 1), date(2014, 1, 1)]


def test_truncate_ignores_time_of_day():
    start = datetime(2013, 2, 1, 12, 0)
    end = datetime(2013, 6, 1, 9, 0)
    early = datetime(2013, 2, 1, 0, 0)
    late = datetime(2013, 6, 1, 18, 0)
    result = truncate_dates([early, late], start, end)
    assert result[0] == start
    assert result[-1] == end
    assert early in result
    assert late in result


def test_truncate_requires_ordered_bounds():
    with pytest.raises(InvalidScheduleError):
        truncate_dates([date(2013, 3, 1)], date(2013, 6, 1), date(2013, 6, 1))
    with pytest.raises(InvalidArgumentError):
        truncate_dates(None, date(2013, 1, 1), date(2013, 6, 1))
