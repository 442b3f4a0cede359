"""Tenor parsing and CDS roll-date helpers."""

from __future__ import annotations

import re
from datetime import date

from dateutil.relativedelta import relativedelta

from .exceptions import InvalidArgumentError

IMM_MONTHS = (3, 6, 9, 12)
IMM_DAY = 20

_TENOR_PATTERN = re.compile(r"^\s*(\d+)\s*([DWMY])\s*$", re.IGNORECASE)


def parse_tenor(tenor: str) -> relativedelta:
    """Convert strings such as ``"3M"`` or ``"5Y"`` into a ``relativedelta``."""

    match = _TENOR_PATTERN.match(str(tenor))
    if match is None:
        raise InvalidArgumentError(f"Cannot parse tenor {tenor!r}")
    amount = int(match.group(1))
    if amount <= 0:
        raise InvalidArgumentError(f"Tenor must be positive: {tenor!r}")
    unit = match.group(2).upper()
    if unit == "D":
        return relativedelta(days=amount)
    if unit == "W":
        return relativedelta(weeks=amount)
    if unit == "M":
        return relativedelta(months=amount)
    return relativedelta(years=amount)


def previous_imm_date(day: date) -> date:
    """Latest CDS roll date (20th of Mar/Jun/Sep/Dec) on or before ``day``."""

    for month in reversed(IMM_MONTHS):
        candidate = date(day.year, month, IMM_DAY)
        if candidate <= day:
            return candidate
    return date(day.year - 1, 12, IMM_DAY)


def next_imm_date(day: date) -> date:
    """Earliest CDS roll date strictly after ``day``."""

    for month in IMM_MONTHS:
        candidate = date(day.year, month, IMM_DAY)
        if candidate > day:
            return candidate
    return date(day.year + 1, 3, IMM_DAY)


def standard_maturity(trade_date: date, tenor: str | relativedelta) -> date:
    step = parse_tenor(tenor) if isinstance(tenor, str) else tenor
    return next_imm_date(trade_date) + step
