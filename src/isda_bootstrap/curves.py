"""Discount-curve utilities for CDS pricing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from .exceptions import InvalidArgumentError


def _validate_nodes(times: np.ndarray, values: np.ndarray, what: str) -> None:
    if times.ndim != 1 or times.size == 0:
        raise InvalidArgumentError(f"{what} requires at least one node")
    if times.shape != values.shape:
        raise InvalidArgumentError(f"{what} times and values length mismatch")
    if times[0] <= 0.0:
        raise InvalidArgumentError(f"{what} node times must be positive")
    if np.any(np.diff(times) <= 0.0):
        raise InvalidArgumentError(f"{what} node times must be strictly increasing")
    if not np.all(np.isfinite(values)):
        raise InvalidArgumentError(f"{what} values must be finite")


def interpolate_rt(times: np.ndarray, rt: np.ndarray, time: float) -> float:
    """Interpolate ``r(t)*t`` linearly between nodes.

    Before the first node the zero rate is flat; after the last node the
    forward rate of the final segment is extended.
    """

    n = times.size
    if time <= times[0]:
        return float(rt[0] * time / times[0])
    if time >= times[-1]:
        if n == 1:
            return float(rt[0] * time / times[0])
        slope = (rt[-1] - rt[-2]) / (times[-1] - times[-2])
        return float(rt[-1] + slope * (time - times[-1]))
    index = int(np.searchsorted(times, time, side="right"))
    t0, t1 = times[index - 1], times[index]
    weight = (time - t0) / (t1 - t0)
    return float(rt[index - 1] + weight * (rt[index] - rt[index - 1]))


def forward_rate(times: np.ndarray, rt: np.ndarray, time: float) -> float:
    """Instantaneous forward rate implied by :func:`interpolate_rt`."""

    n = times.size
    if time < times[0] or n == 1:
        return float(rt[0] / times[0])
    if time >= times[-1]:
        return float((rt[-1] - rt[-2]) / (times[-1] - times[-2]))
    index = int(np.searchsorted(times, time, side="right"))
    return float((rt[index] - rt[index - 1]) / (times[index] - times[index - 1]))


class DiscountCurve:
    """Interface for deterministic discount curves."""

    def discount_factor(self, time: float) -> float:  # pragma: no cover - interface
        raise NotImplementedError

    def node_times(self) -> Tuple[float, ...]:
        return ()


@dataclass(frozen=True, slots=True)
class FlatDiscountCurve(DiscountCurve):
    """Flat continuously-compounded rate curve."""

    rate: float

    def discount_factor(self, time: float) -> float:
        return float(np.exp(-self.rate * time))


@dataclass(frozen=True, eq=False)
class PiecewiseZeroCurve(DiscountCurve):
    """ISDA zero curve: continuously-compounded zero rates, linear in ``r*t``."""

    times: np.ndarray
    rates: np.ndarray

    def __post_init__(self) -> None:
        times = np.array(self.times, dtype=float)
        rates = np.array(self.rates, dtype=float)
        _validate_nodes(times, rates, "zero curve")
        rt = rates * times
        for array in (times, rates, rt):
            array.setflags(write=False)
        object.__setattr__(self, "times", times)
        object.__setattr__(self, "rates", rates)
        object.__setattr__(self, "_rt", rt)

    def discount_factor(self, time: float) -> float:
        return float(np.exp(-interpolate_rt(self.times, self._rt, time)))

    def zero_rate(self, time: float) -> float:
        if time == 0.0:
            return float(self.rates[0])
        return interpolate_rt(self.times, self._rt, time) / time

    def forward_rate(self, time: float) -> float:
        return forward_rate(self.times, self._rt, time)

    def node_times(self) -> Tuple[float, ...]:
        return tuple(float(t) for t in self.times)


def build_flat_curve(rate: float) -> FlatDiscountCurve:
    return FlatDiscountCurve(rate=rate)


def build_from_zero_rates(pillars: Iterable[Tuple[float, float]]) -> PiecewiseZeroCurve:
    data: List[Tuple[float, float]] = sorted((float(t), float(r)) for t, r in pillars)
    if not data:
        raise InvalidArgumentError("Need at least one pillar")
    times: Sequence[float] = [t for t, _ in data]
    rates: Sequence[float] = [r for _, r in data]
    return PiecewiseZeroCurve(times=np.array(times), rates=np.array(rates))
