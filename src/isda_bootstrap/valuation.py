"""ISDA standard-model premium/protection leg valuation.

Both legs are evaluated exactly on the integration grid: between grid points
the forward interest rate and the hazard rate are constant, so the discounted
default density integrates in closed form. A Taylor expansion replaces the
closed form when the combined rate over a sub-interval is tiny.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Any

import numpy as np
from dateutil.relativedelta import relativedelta

from .conventions import BusinessDayConvention, DayCount, StubType, WeekendCalendar
from .curves import DiscountCurve
from .exceptions import InvalidArgumentError
from .hazard import PiecewiseCreditCurve
from .integration import DEFAULT_TOLERANCE, integration_time_points
from .schedule import PremiumLegSchedule, generate_schedule

TIME_DAY_COUNT = DayCount.ACT_365F
ONE_DAY = timedelta(days=1)
HALF_DAY = 0.5 / 365.0
TAYLOR_THRESHOLD = 1e-5


class PriceType(str, Enum):
    CLEAN = "clean"
    DIRTY = "dirty"


@dataclass(frozen=True, slots=True)
class CDSTerms:
    """Contractual terms of a single-name CDS."""

    start_date: date
    maturity: date
    coupon_step: relativedelta = field(default_factory=lambda: relativedelta(months=3))
    stub_type: StubType = StubType.FRONT_SHORT
    pay_accrued_on_default: bool = True
    protect_from_day_start: bool = True
    business_day_convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING
    calendar: Any = field(default_factory=WeekendCalendar)
    accrual_day_count: DayCount = DayCount.ACT_360

    def __post_init__(self) -> None:
        if self.start_date is None or self.maturity is None:
            raise InvalidArgumentError("start_date and maturity are required")

    def schedule(self) -> PremiumLegSchedule:
        return generate_schedule(
            self.start_date,
            self.maturity,
            self.coupon_step,
            self.stub_type,
            self.business_day_convention,
            self.calendar,
            self.protect_from_day_start,
        )


@dataclass(frozen=True, slots=True)
class PremiumLegBreakdown:
    """Premium leg decomposition showing coupon vs accrual PV."""

    coupon_pv: float
    accrual_on_default_pv: float
    accrued: float = 0.0

    @property
    def dirty(self) -> float:
        return self.coupon_pv + self.accrual_on_default_pv

    @property
    def clean(self) -> float:
        return self.dirty - self.accrued

    @property
    def total(self) -> float:
        return self.dirty

    def value(self, price_type: PriceType) -> float:
        return self.clean if PriceType(price_type) is PriceType.CLEAN else self.dirty


class _Timeline:
    """Valuation-date time axis and curve lookups shared by both legs."""

    def __init__(
        self,
        valuation_date: date,
        discount_curve: DiscountCurve,
        hazard_curve: PiecewiseCreditCurve,
    ) -> None:
        if discount_curve is None or hazard_curve is None:
            raise InvalidArgumentError("discount and hazard curves are required")
        self.valuation_date = valuation_date
        self.discount_curve = discount_curve
        self.hazard_curve = hazard_curve
        base = hazard_curve.base_date
        self.hazard_shift = self.time(base) if base is not None else 0.0

    def time(self, day: date) -> float:
        return TIME_DAY_COUNT.year_fraction(self.valuation_date, day)

    def grid(self, start_time: float, end_time: float) -> np.ndarray:
        return integration_time_points(
            self.discount_curve,
            self.hazard_curve,
            start_time,
            end_time,
            hazard_time_shift=self.hazard_shift,
            tolerance=DEFAULT_TOLERANCE,
        )

    def discount_factor(self, time: float) -> float:
        return self.discount_curve.discount_factor(time)

    def survival(self, time: float) -> float:
        return self.hazard_curve.survival_probability(time - self.hazard_shift)

    def log_terms(self, times: np.ndarray):
        ht = np.array([self.hazard_curve.integrated_hazard(t - self.hazard_shift) for t in times], dtype=float)
        rt = np.array([-np.log(self.discount_curve.discount_factor(t)) for t in times], dtype=float)
        return ht, rt


def _check_dates(valuation_date: date, stepin_date: date, cash_settle_date: date) -> None:
    if valuation_date is None or stepin_date is None or cash_settle_date is None:
        raise InvalidArgumentError("valuation, step-in and cash-settle dates are required")
    if stepin_date < valuation_date:
        raise InvalidArgumentError("Require stepin_date >= valuation_date")
    if cash_settle_date < valuation_date:
        raise InvalidArgumentError("Require cash_settle_date >= valuation_date")


def _protection_integral(ht: np.ndarray, rt: np.ndarray) -> float:
    b = np.exp(-(ht + rt))
    dht = np.diff(ht)
    dhrt = dht + np.diff(rt)
    with np.errstate(divide="ignore", invalid="ignore"):
        exact = dht / dhrt * (b[:-1] - b[1:])
    approx = dht * b[:-1] * (1.0 - dhrt / 2.0 + dhrt * dhrt / 6.0)
    return float(np.sum(np.where(np.abs(dhrt) < TAYLOR_THRESHOLD, approx, exact)))


def _accrual_on_default_integral(
    grid: np.ndarray,
    ht: np.ndarray,
    rt: np.ndarray,
    accrual_origin: float,
    half_day: float,
) -> float:
    b = np.exp(-(ht + rt))
    dt = np.diff(grid)
    dht = np.diff(ht)
    dhrt = dht + np.diff(rt)
    t0 = grid[:-1] - accrual_origin + half_day
    t1 = grid[1:] - accrual_origin + half_day
    b0, b1 = b[:-1], b[1:]
    with np.errstate(divide="ignore", invalid="ignore"):
        exact = dht / dhrt * (t0 * b0 - t1 * b1 + dt / dhrt * (b0 - b1))
    approx = dht * b0 * (t0 + dt / 2.0 - dhrt * (t0 / 2.0 + dt / 3.0))
    return float(np.sum(np.where(np.abs(dhrt) < TAYLOR_THRESHOLD, approx, exact)))


def protection_leg_pv(
    valuation_date: date,
    stepin_date: date,
    cash_settle_date: date,
    terms: CDSTerms,
    discount_curve: DiscountCurve,
    hazard_curve: PiecewiseCreditCurve,
    recovery_rate: float,
) -> float:
    """Protection leg PV per unit notional, valued at the cash-settle date."""

    _check_dates(valuation_date, stepin_date, cash_settle_date)
    if not 0.0 <= recovery_rate < 1.0:
        raise InvalidArgumentError(f"recovery rate must be in [0, 1), got {recovery_rate}")
    timeline = _Timeline(valuation_date, discount_curve, hazard_curve)
    offset = ONE_DAY if terms.protect_from_day_start else timedelta(0)
    protection_start = max(terms.start_date, stepin_date, valuation_date) - offset
    start_time = timeline.time(protection_start)
    end_time = timeline.time(terms.maturity)
    if end_time <= start_time:
        return 0.0

    grid = timeline.grid(start_time, end_time)
    ht, rt = timeline.log_terms(grid)
    pv = (1.0 - recovery_rate) * _protection_integral(ht, rt)
    return pv / timeline.discount_factor(timeline.time(cash_settle_date))


def premium_leg_breakdown(
    valuation_date: date,
    stepin_date: date,
    cash_settle_date: date,
    terms: CDSTerms,
    discount_curve: DiscountCurve,
    hazard_curve: PiecewiseCreditCurve,
    coupon: float = 1.0,
) -> PremiumLegBreakdown:
    _check_dates(valuation_date, stepin_date, cash_settle_date)
    timeline = _Timeline(valuation_date, discount_curve, hazard_curve)
    schedule = terms.schedule()
    protect = terms.protect_from_day_start
    # survival is observed at the end of the day before a date when protection starts at day-begin
    offset = ONE_DAY if protect else timedelta(0)
    half_day = HALF_DAY if protect else 0.0
    stepin_time = timeline.time(stepin_date - offset)

    coupon_pv = 0.0
    accrual_pv = 0.0
    for period in schedule:
        if period.accrual_end <= stepin_date:
            continue
        accrual = terms.accrual_day_count.year_fraction(period.accrual_start, period.accrual_end)
        obs_start = timeline.time(period.accrual_start - offset)
        obs_end = timeline.time(period.accrual_end - offset)
        payment_df = timeline.discount_factor(timeline.time(period.payment_date))
        coupon_pv += accrual * payment_df * timeline.survival(obs_end)

        if not terms.pay_accrued_on_default:
            continue
        window_start = max(obs_start, stepin_time)
        if obs_end <= window_start:
            continue
        grid = timeline.grid(window_start, obs_end)
        ht, rt = timeline.log_terms(grid)
        accrual_rate = accrual / (obs_end - obs_start)
        accrual_pv += accrual_rate * _accrual_on_default_integral(grid, ht, rt, obs_start, half_day)

    settle_df = timeline.discount_factor(timeline.time(cash_settle_date))
    accrued = 0.0
    current = schedule.period_containing(stepin_date)
    if current is not None:
        accrued = terms.accrual_day_count.year_fraction(current.accrual_start, stepin_date)
    return PremiumLegBreakdown(
        coupon_pv=coupon * coupon_pv / settle_df,
        accrual_on_default_pv=coupon * accrual_pv / settle_df,
        accrued=coupon * accrued,
    )


def risky_annuity(
    valuation_date: date,
    stepin_date: date,
    cash_settle_date: date,
    terms: CDSTerms,
    discount_curve: DiscountCurve,
    hazard_curve: PiecewiseCreditCurve,
    price_type: PriceType = PriceType.CLEAN,
) -> float:
    """RPV01: premium leg PV for a unit running coupon."""

    breakdown = premium_leg_breakdown(
        valuation_date, stepin_date, cash_settle_date, terms, discount_curve, hazard_curve, coupon=1.0
    )
    return breakdown.value(price_type)


def premium_leg_pv(
    valuation_date: date,
    stepin_date: date,
    cash_settle_date: date,
    terms: CDSTerms,
    discount_curve: DiscountCurve,
    hazard_curve: PiecewiseCreditCurve,
    coupon: float,
    price_type: PriceType = PriceType.CLEAN,
) -> float:
    return coupon * risky_annuity(
        valuation_date, stepin_date, cash_settle_date, terms, discount_curve, hazard_curve, price_type
    )


def pv01(
    valuation_date: date,
    stepin_date: date,
    cash_settle_date: date,
    terms: CDSTerms,
    discount_curve: DiscountCurve,
    hazard_curve: PiecewiseCreditCurve,
) -> float:
    """PV01 (annuity) expressed per basis point of spread."""

    annuity = risky_annuity(valuation_date, stepin_date, cash_settle_date, terms, discount_curve, hazard_curve)
    return annuity / 10_000.0


def cds_pv(
    valuation_date: date,
    stepin_date: date,
    cash_settle_date: date,
    terms: CDSTerms,
    discount_curve: DiscountCurve,
    hazard_curve: PiecewiseCreditCurve,
    coupon: float,
    recovery_rate: float,
    price_type: PriceType = PriceType.CLEAN,
) -> float:
    """Protection-buyer PV: protection leg minus ``coupon`` times the RPV01."""

    protection = protection_leg_pv(
        valuation_date, stepin_date, cash_settle_date, terms, discount_curve, hazard_curve, recovery_rate
    )
    annuity = risky_annuity(
        valuation_date, stepin_date, cash_settle_date, terms, discount_curve, hazard_curve, price_type
    )
    return protection - coupon * annuity


def par_spread(
    valuation_date: date,
    stepin_date: date,
    cash_settle_date: date,
    terms: CDSTerms,
    discount_curve: DiscountCurve,
    hazard_curve: PiecewiseCreditCurve,
    recovery_rate: float,
) -> float:
    prot = protection_leg_pv(
        valuation_date, stepin_date, cash_settle_date, terms, discount_curve, hazard_curve, recovery_rate
    )
    annuity = risky_annuity(valuation_date, stepin_date, cash_settle_date, terms, discount_curve, hazard_curve)
    if annuity == 0:
        raise InvalidArgumentError("Premium leg annuity is zero; invalid maturity/step")
    return float(prot / annuity)
