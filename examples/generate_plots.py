"""Write diagnostic plots for the sample calibration and its stub variants."""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Iterable, Sequence

from isda_bootstrap.calibration import CalibrationParameters, CDSQuote, calibrate_piecewise_hazard
from isda_bootstrap.config import build_discount_curve, build_params, build_quotes, load_config
from isda_bootstrap.conventions import StubType
from isda_bootstrap.curves import DiscountCurve
from isda_bootstrap.plots import plot_sensitivity_curve, save_core_diagnostics
from isda_bootstrap.reporting import par_reconciliation, price_quotes

HERE = Path(__file__).resolve().parent


def _bumped(quotes: Sequence[CDSQuote], bump_bps: float) -> list[CDSQuote]:
    return [replace(q, spread_bps=q.spread_bps + bump_bps) for q in quotes]


def sensitivity_rows(
    quotes: Sequence[CDSQuote],
    discount_curve: DiscountCurve,
    params: CalibrationParameters,
    bumps: Iterable[float],
) -> list[dict]:
    """Recalibrate under parallel bumps and reprice the unbumped contracts."""

    base = calibrate_piecewise_hazard(quotes, discount_curve, params).hazard_curve
    base_last = float(base.rates[-1])
    base_net = sum(row.net for row in price_quotes(base, discount_curve, quotes, params))

    rows = []
    for bump in bumps:
        curve = calibrate_piecewise_hazard(_bumped(quotes, bump), discount_curve, params).hazard_curve
        net = sum(row.net for row in price_quotes(curve, discount_curve, quotes, params))
        rows.append(
            {
                "bump_bps": bump,
                "delta_last_hazard_bps": (float(curve.rates[-1]) - base_last) * 10_000.0,
                "delta_net_pv": net - base_net,
            }
        )
    return rows


def write_diagnostics(
    quotes: Sequence[CDSQuote],
    discount_curve: DiscountCurve,
    params: CalibrationParameters,
    destination: Path,
) -> None:
    curve = calibrate_piecewise_hazard(quotes, discount_curve, params).hazard_curve
    save_core_diagnostics(
        hazard_curve=curve,
        pricing_rows=price_quotes(curve, discount_curve, quotes, params),
        par_rows=par_reconciliation(curve, discount_curve, quotes, params),
        destination=destination,
    )


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--config", type=Path, default=HERE / "sample_quotes.yaml")
    parser.add_argument("--plot-dir", type=Path, default=Path("plots/extended"))
    parser.add_argument(
        "--bumps",
        type=float,
        nargs="+",
        default=[-50.0, -25.0, -10.0, 0.0, 10.0, 25.0, 50.0],
        help="Parallel spread bumps in bps for the sensitivity plot",
    )
    args = parser.parse_args()

    config = load_config(args.config)
    params = build_params(config)
    quotes = sorted(build_quotes(config, params), key=lambda q: q.maturity)
    discount_curve = build_discount_curve(config)

    for stub in (StubType.FRONT_SHORT, StubType.BACK_SHORT):
        write_diagnostics(quotes, discount_curve, replace(params, stub_type=stub), args.plot_dir / stub.value)

    rows = sensitivity_rows(quotes, discount_curve, params, args.bumps)
    plot_sensitivity_curve(rows, args.plot_dir / "spread_sensitivity.png")
    print(f"Saved plots under {args.plot_dir.resolve()}")


if __name__ == "__main__":
    main()
