"""Configuration loading for the CLI and example scripts."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any, Dict, List

import yaml

from .calibration import CalibrationParameters, CDSQuote
from .conventions import BusinessDayConvention, DayCount, HolidayCalendar, StubType
from .curves import DiscountCurve, FlatDiscountCurve, build_from_zero_rates
from .dates import parse_tenor, standard_maturity
from .exceptions import ConfigurationError, InvalidArgumentError


def load_config(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as fh:
            if path.suffix in {".yml", ".yaml"}:
                config = yaml.safe_load(fh)
            else:
                config = json.load(fh)
    except (yaml.YAMLError, json.JSONDecodeError, OSError) as exc:
        raise ConfigurationError(f"{path}: {exc}") from exc
    if not isinstance(config, dict):
        raise ConfigurationError(f"{path} does not contain a mapping")
    return config


def _to_date(value: Any, name: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as exc:
        raise ConfigurationError(f"{name} is not an ISO date: {value!r}") from exc


def build_discount_curve(config: Dict[str, Any]) -> DiscountCurve:
    curve_cfg = config.get("discount_curve", {"type": "flat", "rate": 0.01})
    curve_type = curve_cfg.get("type", "flat")
    if curve_type == "flat":
        return FlatDiscountCurve(rate=float(curve_cfg.get("rate", 0.01)))
    if curve_type == "pillars":
        pillars = [(float(t), float(rate)) for t, rate in curve_cfg.get("pillars", [])]
        try:
            return build_from_zero_rates(pillars)
        except InvalidArgumentError as exc:
            raise ConfigurationError(f"Invalid discount curve pillars: {exc}") from exc
    raise ConfigurationError(f"Unknown discount curve type: {curve_type}")


def build_params(config: Dict[str, Any]) -> CalibrationParameters:
    if "valuation_date" not in config:
        raise ConfigurationError("valuation_date missing from configuration")
    isda_cfg = config.get("isda", {})
    holidays = [_to_date(h, "holiday") for h in config.get("holidays", [])]
    start = isda_cfg.get("protection_start_date")
    try:
        return CalibrationParameters(
            valuation_date=_to_date(config["valuation_date"], "valuation_date"),
            recovery_rate=float(config.get("recovery_rate", 0.4)),
            coupon_step=parse_tenor(isda_cfg.get("coupon_step", "3M")),
            stub_type=StubType(isda_cfg.get("stub_type", StubType.FRONT_SHORT.value)),
            step_in_days=int(isda_cfg.get("step_in_days", 1)),
            cash_settle_days=int(isda_cfg.get("cash_settle_days", 3)),
            protect_from_day_start=bool(isda_cfg.get("protect_from_day_start", True)),
            pay_accrued_on_default=bool(isda_cfg.get("accrual_on_default", True)),
            business_day_convention=BusinessDayConvention(isda_cfg.get("business_day_convention", "following")),
            calendar=HolidayCalendar.from_dates(holidays),
            accrual_day_count=DayCount(isda_cfg.get("accrual_day_count", DayCount.ACT_360.value)),
            protection_start_date=_to_date(start, "protection_start_date") if start is not None else None,
        )
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc


def build_quotes(config: Dict[str, Any], params: CalibrationParameters) -> List[CDSQuote]:
    quotes_cfg = config.get("quotes")
    if not quotes_cfg:
        raise ConfigurationError("quotes missing from configuration")
    quotes: List[CDSQuote] = []
    for item in quotes_cfg:
        if "spread_bps" not in item:
            raise ConfigurationError(f"quote without spread_bps: {item!r}")
        if "maturity" in item:
            maturity = _to_date(item["maturity"], "maturity")
            tenor = item.get("tenor")
        elif "tenor" in item:
            tenor = str(item["tenor"])
            try:
                maturity = standard_maturity(params.valuation_date, tenor)
            except InvalidArgumentError as exc:
                raise ConfigurationError(str(exc)) from exc
        else:
            raise ConfigurationError(f"quote needs a tenor or a maturity: {item!r}")
        quotes.append(CDSQuote(maturity=maturity, spread_bps=float(item["spread_bps"]), tenor=tenor))
    return quotes
