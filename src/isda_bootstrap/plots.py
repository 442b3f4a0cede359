"""Matplotlib diagnostics for a calibrated credit curve."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping, Sequence

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from .hazard import PiecewiseCreditCurve
from .reporting import ParErrorRow, PricingRow

BPS = 10_000.0


def _maturity_labels(rows: Sequence[PricingRow] | Sequence[ParErrorRow]) -> list[str]:
    return [row.maturity.isoformat() for row in rows]


def _save(fig, destination: Path) -> None:
    fig.tight_layout()
    fig.savefig(destination)
    plt.close(fig)


def save_core_diagnostics(
    hazard_curve: PiecewiseCreditCurve,
    pricing_rows: Sequence[PricingRow],
    par_rows: Sequence[ParErrorRow],
    destination: Path,
) -> None:
    destination.mkdir(parents=True, exist_ok=True)
    if not pricing_rows:
        return
    plot_hazard_curve(hazard_curve, destination / "hazard_curve.png")
    plot_probabilities(hazard_curve, pricing_rows[-1].years, destination / "survival_default.png")
    plot_pv_contributions(pricing_rows, destination / "pv_contributions.png")
    plot_premium_decomposition(pricing_rows, destination / "premium_decomposition.png")
    plot_par_errors(par_rows, destination / "par_spread_errors.png")


def plot_hazard_curve(hazard_curve: PiecewiseCreditCurve, destination: Path) -> None:
    """Forward hazard steps with the calibrated zero hazard rates at the nodes."""

    segments = hazard_curve.segments
    if not segments:
        return
    edges = [segments[0].start] + [segment.end for segment in segments]
    forwards = [segment.hazard_rate * BPS for segment in segments]

    fig, ax = plt.subplots(figsize=(7, 4))
    ax.stairs(forwards, edges, label="Forward hazard", linewidth=2)
    ax.plot(hazard_curve.node_times, hazard_curve.rates * BPS, "o--", label="Zero hazard (nodes)")
    for node in hazard_curve.nodes:
        if node.date is not None:
            ax.annotate(
                node.date.isoformat(),
                (node.time, node.rate * BPS),
                textcoords="offset points",
                xytext=(0, 6),
                ha="center",
                fontsize=7,
            )
    ax.set_xlabel("Time from valuation (ACT/365F years)")
    ax.set_ylabel("Hazard rate (bps)")
    ax.set_title("Calibrated Credit Curve")
    ax.grid(True, alpha=0.3)
    ax.legend()
    _save(fig, destination)


def plot_probabilities(hazard_curve: PiecewiseCreditCurve, horizon: float, destination: Path) -> None:
    if horizon <= 0:
        return
    grid = np.linspace(0.0, horizon, 200)
    survival = np.array([hazard_curve.survival_probability(float(t)) for t in grid], dtype=float)
    node_times = hazard_curve.node_times[hazard_curve.node_times <= horizon]
    node_survival = [hazard_curve.survival_probability(float(t)) for t in node_times]

    fig, (ax_surv, ax_def) = plt.subplots(1, 2, figsize=(10, 4), sharex=True)
    ax_surv.plot(grid, survival, color="tab:blue")
    ax_surv.plot(node_times, node_survival, "o", color="tab:blue")
    ax_surv.set_title("Survival probability")
    ax_surv.set_xlabel("Time (years)")
    ax_surv.grid(True, alpha=0.3)

    ax_def.fill_between(grid, 0.0, 1.0 - survival, color="tab:red", alpha=0.4)
    ax_def.set_title("Cumulative default probability")
    ax_def.set_xlabel("Time (years)")
    ax_def.grid(True, alpha=0.3)
    _save(fig, destination)


def plot_pv_contributions(pricing_rows: Sequence[PricingRow], destination: Path) -> None:
    """Clean premium vs protection per quote, with the residual on its own axis."""

    rows = list(pricing_rows)
    if not rows:
        return
    x = np.arange(len(rows))
    width = 0.4

    fig, ax = plt.subplots(figsize=(8, 4))
    ax.bar(x - width / 2, [row.premium for row in rows], width, label="Premium leg (clean)")
    ax.bar(x + width / 2, [row.protection for row in rows], width, label="Protection leg")
    ax.set_xticks(x, _maturity_labels(rows), rotation=30)
    ax.set_ylabel("PV per unit notional")
    ax.grid(True, axis="y", alpha=0.3)

    residual = ax.twinx()
    residual.plot(x, [row.net for row in rows], color="black", marker="o", label="Net PV")
    residual.set_ylabel("Net PV")
    residual.ticklabel_format(axis="y", style="sci", scilimits=(0, 0))

    handles, labels = ax.get_legend_handles_labels()
    more_handles, more_labels = residual.get_legend_handles_labels()
    ax.legend(handles + more_handles, labels + more_labels, loc="upper left")
    ax.set_title("Leg PVs at Calibrated Spreads")
    _save(fig, destination)


def plot_premium_decomposition(pricing_rows: Sequence[PricingRow], destination: Path) -> None:
    rows = list(pricing_rows)
    if not rows:
        return
    coupon = np.array([row.coupon for row in rows], dtype=float)
    accrual = np.array([row.accrual for row in rows], dtype=float)
    clean = np.array([row.premium for row in rows], dtype=float)
    x = np.arange(len(rows))

    fig, ax = plt.subplots(figsize=(8, 4))
    ax.bar(x, coupon, label="Risky coupons")
    ax.bar(x, accrual, bottom=coupon, label="Accrual on default")
    ax.plot(x, clean, "k_", markersize=18, markeredgewidth=2, label="Clean premium (less accrued)")
    ax.set_xticks(x, _maturity_labels(rows), rotation=30)
    ax.set_ylabel("PV per unit notional")
    ax.set_title("Premium Leg Decomposition")
    ax.grid(True, axis="y", alpha=0.3)
    ax.legend()
    _save(fig, destination)


def plot_par_errors(rows: Sequence[ParErrorRow], destination: Path) -> None:
    data = list(rows)
    if not data:
        return
    x = np.arange(len(data))

    fig, (ax_spread, ax_error) = plt.subplots(2, 1, figsize=(8, 6), sharex=True)
    ax_spread.plot(x, [row.market_bps for row in data], "o-", label="Market")
    ax_spread.plot(x, [row.model_bps for row in data], "x--", label="Model")
    ax_spread.set_ylabel("Par spread (bps)")
    ax_spread.grid(True, alpha=0.3)
    ax_spread.legend()

    ax_error.bar(x, [row.error_bps for row in data], color="tab:red")
    ax_error.axhline(0.0, color="black", linewidth=1)
    ax_error.set_xticks(x, _maturity_labels(data), rotation=30)
    ax_error.set_ylabel("Model - market (bps)")
    ax_error.grid(True, axis="y", alpha=0.3)
    ax_spread.set_title("Par Spread Reconciliation")
    _save(fig, destination)


def plot_sensitivity_curve(rows: Iterable[Mapping[str, float]], destination: Path) -> None:
    """Response of the last hazard node and the base book PV to parallel spread bumps."""

    data = sorted(rows, key=lambda row: row["bump_bps"])
    if not data:
        return
    bumps = [row["bump_bps"] for row in data]

    fig, ax_hazard = plt.subplots(figsize=(7, 4))
    ax_hazard.plot(bumps, [row["delta_last_hazard_bps"] for row in data], marker="o", color="tab:blue")
    ax_hazard.set_xlabel("Parallel spread bump (bps)")
    ax_hazard.set_ylabel("Δ last zero hazard (bps)", color="tab:blue")
    ax_hazard.axvline(0.0, color="grey", linewidth=0.8)
    ax_hazard.grid(True, alpha=0.3)

    ax_pv = ax_hazard.twinx()
    ax_pv.plot(bumps, [row["delta_net_pv"] for row in data], marker="s", color="tab:orange")
    ax_pv.set_ylabel("Δ net PV of base contracts", color="tab:orange")
    ax_hazard.set_title("Parallel Spread Sensitivity")
    _save(fig, destination)
