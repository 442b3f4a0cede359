"""Command line entrypoints."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import typer

from .calibration import calibrate_piecewise_hazard
from .config import build_discount_curve, build_params, build_quotes, load_config
from .conventions import BusinessDayConvention, StubType
from .dates import parse_tenor
from .exceptions import CDSCalibrationError
from .plots import save_core_diagnostics
from .reporting import par_reconciliation, price_quotes, schedule_rows
from .schedule import generate_schedule

app = typer.Typer(help="ISDA CDS credit curve bootstrapping utilities")


@app.callback()
def configure(
    log_level: str = typer.Option("WARNING", "--log-level", "-l", help="Logging level (DEBUG, INFO, ...)"),
) -> None:
    """Configure logging for every command."""

    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise typer.BadParameter(f"Unknown log level: {log_level}")
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@app.command()
def calibrate(
    config_path: Path,
    plot_dir: Path = typer.Option(Path("plots"), "--plot-dir", "-p", help="Directory for PNG diagnostics"),
    no_plots: bool = typer.Option(False, "--no-plots", help="Skip writing diagnostic plots"),
) -> None:
    """Calibrate the hazard curve, print nodes and prices, and save diagnostic plots."""

    try:
        config = load_config(config_path)
        params = build_params(config)
        discount_curve = build_discount_curve(config)
        quotes = build_quotes(config, params)
    except CDSCalibrationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    typer.echo("Input parameters:")
    typer.echo(f"  Valuation date: {params.valuation_date}")
    typer.echo(f"  Step-in / cash-settle: {params.stepin_date} / {params.cash_settle_date}")
    typer.echo(f"  Accrual start: {params.start_date}")
    typer.echo(f"  Recovery rate: {params.recovery_rate:.2%}")
    typer.echo(f"  Stub: {params.stub_type.value}, protect from day start: {params.protect_from_day_start}")
    curve_cfg = config.get("discount_curve", {})
    curve_type = curve_cfg.get("type", "flat")
    if curve_type == "flat":
        typer.echo(f"  Discount curve: flat, rate={float(curve_cfg.get('rate', 0.01)):.4%}")
    else:
        typer.echo(f"  Discount curve: pillars ({len(curve_cfg.get('pillars', []))} nodes)")
    typer.echo(f"  Quotes loaded: {len(quotes)} maturities")

    typer.echo("Running calibration...")
    try:
        result = calibrate_piecewise_hazard(quotes=quotes, discount_curve=discount_curve, params=params)
    except CDSCalibrationError as exc:
        typer.echo(f"Calibration failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo("Calibrated hazard rates:")
    for node in result.hazard_curve.nodes:
        typer.echo(f"  {node.date}  t={node.time:>7.4f}  -> {node.rate:.4%}")

    quotes = sorted(quotes, key=lambda q: q.maturity)
    pricing_rows = price_quotes(result.hazard_curve, discount_curve, quotes, params)
    typer.echo("\nCDS PVs per unit notional:")
    typer.echo("  Maturity       Premium    Protection          Net       PV01/bp")
    for row in pricing_rows:
        typer.echo(
            f"  {row.maturity}  {row.premium:>10.6f}    {row.protection:>10.6f}   {row.net:>10.2e}    {row.pv01:>10.6f}"
        )

    typer.echo("\nValidation vs market par spreads:")
    par_rows = par_reconciliation(result.hazard_curve, discount_curve, quotes, params)
    typer.echo("  Maturity    Market (bps)    Model (bps)    Error (bps)")
    for row in par_rows:
        typer.echo(f"  {row.maturity}  {row.market_bps:>12.4f}    {row.model_bps:>11.4f}    {row.error_bps:>10.2e}")

    if no_plots:
        return
    plot_dir = plot_dir.expanduser()
    save_core_diagnostics(result.hazard_curve, pricing_rows, par_rows, plot_dir)
    typer.echo(f"\nSaved diagnostic plots under {plot_dir.resolve()}")


@app.command()
def schedule(
    start: str = typer.Argument(..., help="Accrual start date (YYYY-MM-DD)"),
    end: str = typer.Argument(..., help="Maturity date (YYYY-MM-DD)"),
    step: str = typer.Option("3M", "--step", help="Coupon step tenor"),
    stub: StubType = typer.Option(StubType.FRONT_SHORT, "--stub", help="Stub placement"),
    convention: BusinessDayConvention = typer.Option(BusinessDayConvention.FOLLOWING, "--convention"),
    protect_start: bool = typer.Option(True, "--protect-start/--no-protect-start"),
) -> None:
    """Print the premium-leg accrual and payment schedule."""

    try:
        start_date = datetime.strptime(start, "%Y-%m-%d").date()
        end_date = datetime.strptime(end, "%Y-%m-%d").date()
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    try:
        periods = generate_schedule(
            start_date,
            end_date,
            parse_tenor(step),
            stub,
            convention,
            protect_from_day_start=protect_start,
        )
    except CDSCalibrationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    typer.echo("  #  Accrual start  Accrual end    Payment      Accrual (ACT/360)")
    for i, row in enumerate(schedule_rows(periods), start=1):
        typer.echo(
            f"{i:>3}  {row['accrual_start']}     {row['accrual_end']}     {row['payment_date']}   "
            f"{row['accrual_fraction']:.6f}"
        )


if __name__ == "__main__":
    app()
