"""Sequential bootstrap of a piece-wise hazard curve from par CDS spreads."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Iterable, List, Sequence

from dateutil.relativedelta import relativedelta

from .conventions import BusinessDayConvention, DayCount, StubType, WeekendCalendar, add_business_days
from .curves import DiscountCurve
from .dates import previous_imm_date
from .exceptions import InvalidArgumentError
from .hazard import PiecewiseCreditCurve
from .rootfinding import bracket_root, brent_root
from .valuation import CDSTerms, PriceType, par_spread, protection_leg_pv, risky_annuity

logger = logging.getLogger(__name__)

BRACKET_WIDTH = 0.1


@dataclass(slots=True)
class CDSQuote:
    maturity: date
    spread_bps: float
    tenor: str | None = None

    @property
    def spread_decimal(self) -> float:
        return self.spread_bps / 10_000.0


@dataclass(slots=True)
class CalibrationParameters:
    """Market conventions shared by every quote of a calibration."""

    valuation_date: date
    recovery_rate: float = 0.4
    coupon_step: relativedelta = field(default_factory=lambda: relativedelta(months=3))
    stub_type: StubType = StubType.FRONT_SHORT
    step_in_days: int = 1
    cash_settle_days: int = 3
    protect_from_day_start: bool = True
    pay_accrued_on_default: bool = True
    business_day_convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING
    calendar: Any = field(default_factory=WeekendCalendar)
    accrual_day_count: DayCount = DayCount.ACT_360
    protection_start_date: date | None = None

    @property
    def stepin_date(self) -> date:
        return self.valuation_date + timedelta(days=self.step_in_days)

    @property
    def cash_settle_date(self) -> date:
        return add_business_days(self.valuation_date, self.cash_settle_days, self.calendar)

    @property
    def start_date(self) -> date:
        """Accrual start: explicit date, else the roll date on or before step-in."""

        if self.protection_start_date is not None:
            return self.protection_start_date
        return previous_imm_date(self.stepin_date)

    @property
    def lgd(self) -> float:
        return 1.0 - self.recovery_rate

    def terms(self, maturity: date) -> CDSTerms:
        return CDSTerms(
            start_date=self.start_date,
            maturity=maturity,
            coupon_step=self.coupon_step,
            stub_type=self.stub_type,
            pay_accrued_on_default=self.pay_accrued_on_default,
            protect_from_day_start=self.protect_from_day_start,
            business_day_convention=self.business_day_convention,
            calendar=self.calendar,
            accrual_day_count=self.accrual_day_count,
        )


@dataclass(frozen=True, slots=True)
class NodeObjective:
    """PV of CDS ``index`` as a function of the hazard rate at node ``index``."""

    index: int
    valuation_date: date
    stepin_date: date
    cash_settle_date: date
    terms: CDSTerms
    coupon: float
    recovery_rate: float
    discount_curve: DiscountCurve
    hazard_curve: PiecewiseCreditCurve

    def evaluate(self, rate: float) -> float:
        curve = self.hazard_curve.with_rate(rate, self.index)
        rpv01 = risky_annuity(
            self.valuation_date,
            self.stepin_date,
            self.cash_settle_date,
            self.terms,
            self.discount_curve,
            curve,
            PriceType.CLEAN,
        )
        protection = protection_leg_pv(
            self.valuation_date,
            self.stepin_date,
            self.cash_settle_date,
            self.terms,
            self.discount_curve,
            curve,
            self.recovery_rate,
        )
        return protection - self.coupon * rpv01

    def __call__(self, rate: float) -> float:
        return self.evaluate(rate)


def _validate_inputs(
    valuation_date: date,
    stepin_date: date,
    cash_settle_date: date,
    protection_start_date: date,
    maturities: Sequence[date],
    par_coupons: Sequence[float],
    coupon_step: relativedelta,
    stub_type: StubType,
    discount_curve: DiscountCurve,
    recovery_rate: float,
) -> None:
    required = {
        "valuation_date": valuation_date,
        "stepin_date": stepin_date,
        "cash_settle_date": cash_settle_date,
        "protection_start_date": protection_start_date,
        "coupon_step": coupon_step,
        "stub_type": stub_type,
        "discount_curve": discount_curve,
    }
    for name, value in required.items():
        if value is None:
            raise InvalidArgumentError(f"null {name}")
    if not maturities or not par_coupons:
        raise InvalidArgumentError("maturities and par coupons are required")
    if any(m is None for m in maturities):
        raise InvalidArgumentError("null maturity")
    if len(maturities) != len(par_coupons):
        raise InvalidArgumentError(
            f"length of par coupons ({len(par_coupons)}) does not match maturities ({len(maturities)})"
        )
    if any(later <= earlier for earlier, later in zip(maturities, maturities[1:])):
        raise InvalidArgumentError("maturities must be strictly ascending")
    if maturities[0] <= valuation_date:
        raise InvalidArgumentError("maturities must be after the valuation date")
    if any(not math.isfinite(c) or c <= 0.0 for c in par_coupons):
        raise InvalidArgumentError("par coupons must be positive and finite")
    if not 0.0 <= recovery_rate < 1.0:
        raise InvalidArgumentError(f"recovery rate must be in [0, 1), got {recovery_rate}")
    if cash_settle_date < valuation_date:
        raise InvalidArgumentError("Require cash_settle_date >= valuation_date")
    if stepin_date < valuation_date:
        raise InvalidArgumentError("Require stepin_date >= valuation_date")


def calibrate_hazard_curve(
    valuation_date: date,
    stepin_date: date,
    cash_settle_date: date,
    protection_start_date: date,
    maturities: Sequence[date],
    par_coupons: Sequence[float],
    pay_accrued_on_default: bool,
    coupon_step: relativedelta,
    stub_type: StubType,
    protect_from_day_start: bool,
    discount_curve: DiscountCurve,
    recovery_rate: float,
    *,
    business_day_convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
    calendar: Any = None,
    accrual_day_count: DayCount = DayCount.ACT_360,
) -> PiecewiseCreditCurve:
    """Strip a credit curve that reprices every par CDS to zero PV.

    Nodes are solved one at a time in maturity order with all earlier nodes
    held fixed. Any bracketing or solver failure aborts the whole calibration.
    """

    maturities = list(maturities)
    par_coupons = [float(c) for c in par_coupons]
    _validate_inputs(
        valuation_date,
        stepin_date,
        cash_settle_date,
        protection_start_date,
        maturities,
        par_coupons,
        coupon_step,
        stub_type,
        discount_curve,
        recovery_rate,
    )
    calendar = calendar if calendar is not None else WeekendCalendar()

    lgd = 1.0 - recovery_rate
    guesses = [coupon / lgd for coupon in par_coupons]
    hazard_curve = PiecewiseCreditCurve.from_dates(valuation_date, maturities, guesses)

    for index, (maturity, coupon) in enumerate(zip(maturities, par_coupons)):
        terms = CDSTerms(
            start_date=protection_start_date,
            maturity=maturity,
            coupon_step=coupon_step,
            stub_type=stub_type,
            pay_accrued_on_default=pay_accrued_on_default,
            protect_from_day_start=protect_from_day_start,
            business_day_convention=business_day_convention,
            calendar=calendar,
            accrual_day_count=accrual_day_count,
        )
        objective = NodeObjective(
            index=index,
            valuation_date=valuation_date,
            stepin_date=stepin_date,
            cash_settle_date=cash_settle_date,
            terms=terms,
            coupon=coupon,
            recovery_rate=recovery_rate,
            discount_curve=discount_curve,
            hazard_curve=hazard_curve,
        )
        guess = guesses[index]
        lower, upper = bracket_root(
            objective,
            (1.0 - BRACKET_WIDTH) * guess,
            (1.0 + BRACKET_WIDTH) * guess,
            0.0,
            math.inf,
        )
        rate = brent_root(objective, lower, upper)
        hazard_curve = hazard_curve.with_rate(rate, index)
        logger.debug("Node %s (%s): guess=%.8f solved=%.8f", index, maturity, guess, rate)

    logger.info("Calibrated %s credit curve nodes as of %s", len(maturities), valuation_date)
    return hazard_curve


@dataclass(slots=True)
class CalibrationResult:
    hazard_curve: PiecewiseCreditCurve
    par_spread_errors: List[float]


def calibrate_piecewise_hazard(
    quotes: Iterable[CDSQuote],
    discount_curve: DiscountCurve,
    params: CalibrationParameters,
) -> CalibrationResult:
    sorted_quotes = sorted(quotes, key=lambda q: q.maturity)
    if not sorted_quotes:
        raise InvalidArgumentError("quotes are required")

    hazard_curve = calibrate_hazard_curve(
        valuation_date=params.valuation_date,
        stepin_date=params.stepin_date,
        cash_settle_date=params.cash_settle_date,
        protection_start_date=params.start_date,
        maturities=[q.maturity for q in sorted_quotes],
        par_coupons=[q.spread_decimal for q in sorted_quotes],
        pay_accrued_on_default=params.pay_accrued_on_default,
        coupon_step=params.coupon_step,
        stub_type=params.stub_type,
        protect_from_day_start=params.protect_from_day_start,
        discount_curve=discount_curve,
        recovery_rate=params.recovery_rate,
        business_day_convention=params.business_day_convention,
        calendar=params.calendar,
        accrual_day_count=params.accrual_day_count,
    )

    par_errors: List[float] = []
    for quote in sorted_quotes:
        model = par_spread(
            params.valuation_date,
            params.stepin_date,
            params.cash_settle_date,
            params.terms(quote.maturity),
            discount_curve,
            hazard_curve,
            params.recovery_rate,
        )
        par_errors.append(model - quote.spread_decimal)
    return CalibrationResult(hazard_curve=hazard_curve, par_spread_errors=par_errors)
