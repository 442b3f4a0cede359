"""Calibrate the sample quotes under several market and convention scenarios."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Callable, List, NamedTuple, Sequence

import pandas as pd

from isda_bootstrap.calibration import CalibrationParameters, CDSQuote, calibrate_piecewise_hazard
from isda_bootstrap.config import build_discount_curve, build_params, build_quotes, load_config
from isda_bootstrap.conventions import StubType
from isda_bootstrap.curves import DiscountCurve
from isda_bootstrap.reporting import par_reconciliation, price_quotes, schedule_rows

CONFIG_PATH = Path(__file__).with_name("sample_quotes.yaml")


class Scenario(NamedTuple):
    name: str
    quotes: Callable[[Sequence[CDSQuote]], List[CDSQuote]]
    params: Callable[[CalibrationParameters], CalibrationParameters]


def _unchanged_quotes(quotes: Sequence[CDSQuote]) -> List[CDSQuote]:
    return list(quotes)


def _unchanged_params(params: CalibrationParameters) -> CalibrationParameters:
    return params


SCENARIOS = [
    Scenario("Market quotes", _unchanged_quotes, _unchanged_params),
    Scenario(
        "Spreads +25 bps",
        lambda qs: [replace(q, spread_bps=q.spread_bps + 25.0) for q in qs],
        _unchanged_params,
    ),
    Scenario(
        "Spreads halved",
        lambda qs: [replace(q, spread_bps=q.spread_bps * 0.5) for q in qs],
        _unchanged_params,
    ),
    Scenario(
        "Recovery 25%",
        _unchanged_quotes,
        lambda p: replace(p, recovery_rate=0.25),
    ),
    Scenario(
        "Back-long stub, end-of-day protection",
        _unchanged_quotes,
        lambda p: replace(p, stub_type=StubType.BACK_LONG, protect_from_day_start=False),
    ),
    Scenario(
        "No accrual on default",
        _unchanged_quotes,
        lambda p: replace(p, pay_accrued_on_default=False),
    ),
]


def _print_table(frame: pd.DataFrame, title: str) -> None:
    print(title)
    print("-" * len(title))
    print(frame.to_string(index=False, float_format=lambda x: f"{x:,.6f}"))
    print()


def run_scenario(
    scenario: Scenario,
    quotes: Sequence[CDSQuote],
    discount_curve: DiscountCurve,
    params: CalibrationParameters,
) -> pd.DataFrame:
    quotes = scenario.quotes(quotes)
    params = scenario.params(params)
    result = calibrate_piecewise_hazard(quotes, discount_curve, params)
    curve = result.hazard_curve

    nodes = pd.DataFrame(
        {
            "maturity": [node.date for node in curve.nodes],
            "zero hazard (bps)": curve.rates * 10_000.0,
            "forward hazard (bps)": [s.hazard_rate * 10_000.0 for s in curve.segments],
            "survival": [curve.survival_probability(node.time) for node in curve.nodes],
        }
    )
    pricing = pd.DataFrame([row.as_dict() for row in price_quotes(curve, discount_curve, quotes, params)])
    pars = pd.DataFrame([row.as_dict() for row in par_reconciliation(curve, discount_curve, quotes, params)])

    print(f"\n=== {scenario.name} ===\n")
    _print_table(nodes, "Credit curve nodes")
    _print_table(pricing.drop(columns=["years"]), "Leg PVs per unit notional")
    _print_table(pars, "Par spread reconciliation")
    return nodes.assign(scenario=scenario.name)


def main(config_path: Path = CONFIG_PATH) -> None:
    config = load_config(config_path)
    params = build_params(config)
    quotes = build_quotes(config, params)
    discount_curve = build_discount_curve(config)

    first = params.terms(min(q.maturity for q in quotes))
    _print_table(pd.DataFrame(schedule_rows(first.schedule())), f"Premium schedule to {first.maturity}")

    frames = [run_scenario(s, quotes, discount_curve, params) for s in SCENARIOS]
    summary = pd.concat(frames).pivot(index="maturity", columns="scenario", values="zero hazard (bps)")
    print(summary[[s.name for s in SCENARIOS]].to_string(float_format=lambda x: f"{x:,.2f}"))


if __name__ == "__main__":
    main()
