"""Tabular pricing summaries shared by the CLI and the example scripts."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Dict, List, Sequence

from .calibration import CalibrationParameters, CDSQuote
from .conventions import DayCount
from .curves import DiscountCurve
from .hazard import PiecewiseCreditCurve
from .schedule import PremiumLegSchedule
from .valuation import par_spread, premium_leg_breakdown, protection_leg_pv, pv01


@dataclass(slots=True)
class PricingRow:
    """Leg values of one quoted CDS priced at its own par coupon.

    ``premium`` is the clean premium leg; ``coupon`` and ``accrual`` are its
    dirty components and ``accrued`` is the premium accrued at step-in.
    """

    maturity: date
    years: float
    premium: float
    protection: float
    net: float
    coupon: float
    accrual: float
    accrued: float
    pv01: float

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class ParErrorRow:
    """Quoted vs repriced par spread, in basis points."""

    maturity: date
    market_bps: float
    model_bps: float
    error_bps: float

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def price_quotes(
    hazard_curve: PiecewiseCreditCurve,
    discount_curve: DiscountCurve,
    quotes: Sequence[CDSQuote],
    params: CalibrationParameters,
) -> List[PricingRow]:
    rows: List[PricingRow] = []
    dates = (params.valuation_date, params.stepin_date, params.cash_settle_date)
    for quote in quotes:
        terms = params.terms(quote.maturity)
        breakdown = premium_leg_breakdown(*dates, terms, discount_curve, hazard_curve, coupon=quote.spread_decimal)
        protection = protection_leg_pv(*dates, terms, discount_curve, hazard_curve, params.recovery_rate)
        rows.append(
            PricingRow(
                maturity=quote.maturity,
                years=DayCount.ACT_365F.year_fraction(params.valuation_date, quote.maturity),
                premium=breakdown.clean,
                protection=protection,
                net=protection - breakdown.clean,
                coupon=breakdown.coupon_pv,
                accrual=breakdown.accrual_on_default_pv,
                accrued=breakdown.accrued,
                pv01=pv01(*dates, terms, discount_curve, hazard_curve),
            )
        )
    return rows


def par_reconciliation(
    hazard_curve: PiecewiseCreditCurve,
    discount_curve: DiscountCurve,
    quotes: Sequence[CDSQuote],
    params: CalibrationParameters,
) -> List[ParErrorRow]:
    rows: List[ParErrorRow] = []
    for quote in quotes:
        model = par_spread(
            params.valuation_date,
            params.stepin_date,
            params.cash_settle_date,
            params.terms(quote.maturity),
            discount_curve,
            hazard_curve,
            params.recovery_rate,
        )
        rows.append(
            ParErrorRow(
                maturity=quote.maturity,
                market_bps=quote.spread_bps,
                model_bps=model * 10_000.0,
                error_bps=(model - quote.spread_decimal) * 10_000.0,
            )
        )
    return rows


def schedule_rows(schedule: PremiumLegSchedule, day_count: DayCount = DayCount.ACT_360) -> List[Dict[str, Any]]:
    return [
        {
            "accrual_start": period.accrual_start,
            "accrual_end": period.accrual_end,
            "payment_date": period.payment_date,
            "accrual_fraction": day_count.year_fraction(period.accrual_start, period.accrual_end),
        }
        for period in schedule
    ]
