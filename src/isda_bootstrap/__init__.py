"""ISDA-standard CDS credit curve bootstrapping."""

from .calibration import (
    CalibrationParameters,
    CalibrationResult,
    CDSQuote,
    NodeObjective,
    calibrate_hazard_curve,
    calibrate_piecewise_hazard,
)
from .conventions import BusinessDayConvention, DayCount, HolidayCalendar, StubType, WeekendCalendar
from .curves import DiscountCurve, FlatDiscountCurve, PiecewiseZeroCurve, build_from_zero_rates
from .exceptions import (
    BracketingError,
    CDSCalibrationError,
    IndexOutOfRangeError,
    InvalidArgumentError,
    InvalidScheduleError,
    RootFinderNonConvergenceError,
)
from .hazard import PiecewiseCreditCurve
from .integration import (
    build_accrual_leg_schedule,
    build_protection_leg_schedule,
    integration_time_points,
    truncate_dates,
)
from .schedule import PremiumLegSchedule, SchedulePeriod, generate_schedule
from .valuation import (
    CDSTerms,
    PremiumLegBreakdown,
    PriceType,
    cds_pv,
    par_spread,
    premium_leg_breakdown,
    premium_leg_pv,
    protection_leg_pv,
    pv01,
    risky_annuity,
)

__all__ = [
    "calibrate_hazard_curve",
    "calibrate_piecewise_hazard",
    "CalibrationParameters",
    "CalibrationResult",
    "CDSQuote",
    "NodeObjective",
    "BusinessDayConvention",
    "DayCount",
    "HolidayCalendar",
    "StubType",
    "WeekendCalendar",
    "DiscountCurve",
    "FlatDiscountCurve",
    "PiecewiseZeroCurve",
    "build_from_zero_rates",
    "BracketingError",
    "CDSCalibrationError",
    "IndexOutOfRangeError",
    "InvalidArgumentError",
    "InvalidScheduleError",
    "RootFinderNonConvergenceError",
    "PiecewiseCreditCurve",
    "build_accrual_leg_schedule",
    "build_protection_leg_schedule",
    "integration_time_points",
    "truncate_dates",
    "PremiumLegSchedule",
    "SchedulePeriod",
    "generate_schedule",
    "CDSTerms",
    "PremiumLegBreakdown",
    "PriceType",
    "cds_pv",
    "par_spread",
    "premium_leg_breakdown",
    "premium_leg_pv",
    "protection_leg_pv",
    "pv01",
    "risky_annuity",
]
