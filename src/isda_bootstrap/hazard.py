"""Piece-wise constant hazard rate credit curve."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import List, Sequence, Tuple

import numpy as np

from .conventions import DayCount
from .curves import _validate_nodes, forward_rate, interpolate_rt
from .exceptions import IndexOutOfRangeError, InvalidArgumentError


@dataclass(frozen=True, slots=True)
class HazardSegment:
    start: float
    end: float
    hazard_rate: float


@dataclass(frozen=True, slots=True)
class CreditCurveNode:
    date: date | None
    time: float
    rate: float


@dataclass(frozen=True, eq=False)
class PiecewiseCreditCurve:
    """Credit curve defined by zero hazard rates at dated nodes.

    The integrated hazard ``H(t) = r(t) * t`` is linear between nodes, so the
    instantaneous hazard is constant on each segment and the survival
    probability ``exp(-H(t))`` is log-linear in time. Instances are never
    mutated; :meth:`with_rate` returns a new curve sharing nothing writable
    with the receiver.
    """

    times: np.ndarray
    rates: np.ndarray
    base_date: date | None = None
    dates: Tuple[date, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        times = np.array(self.times, dtype=float)
        rates = np.array(self.rates, dtype=float)
        _validate_nodes(times, rates, "credit curve")
        dates = tuple(self.dates)
        if dates and len(dates) != times.size:
            raise InvalidArgumentError("credit curve dates and rates length mismatch")
        rt = rates * times
        for array in (times, rates, rt):
            array.setflags(write=False)
        object.__setattr__(self, "times", times)
        object.__setattr__(self, "rates", rates)
        object.__setattr__(self, "dates", dates)
        object.__setattr__(self, "_rt", rt)

    @classmethod
    def from_dates(
        cls,
        base_date: date,
        dates: Sequence[date],
        rates: Sequence[float],
        day_count: DayCount = DayCount.ACT_365F,
    ) -> "PiecewiseCreditCurve":
        if base_date is None or not dates:
            raise InvalidArgumentError("base_date and node dates are required")
        times = [day_count.year_fraction(base_date, d) for d in dates]
        return cls(times=np.array(times), rates=np.array(rates), base_date=base_date, dates=tuple(dates))

    @classmethod
    def from_times(cls, times: Sequence[float], rates: Sequence[float]) -> "PiecewiseCreditCurve":
        return cls(times=np.array(times), rates=np.array(rates))

    @classmethod
    def flat(cls, hazard_rate: float, maturity: float) -> "PiecewiseCreditCurve":
        return cls.from_times([maturity], [hazard_rate])

    def __len__(self) -> int:
        return int(self.times.size)

    @property
    def node_times(self) -> np.ndarray:
        return self.times

    @property
    def nodes(self) -> List[CreditCurveNode]:
        return [
            CreditCurveNode(
                date=self.dates[i] if self.dates else None,
                time=float(self.times[i]),
                rate=float(self.rates[i]),
            )
            for i in range(len(self))
        ]

    @property
    def segments(self) -> List[HazardSegment]:
        segments: List[HazardSegment] = []
        last = 0.0
        for time in self.times:
            segments.append(HazardSegment(start=last, end=float(time), hazard_rate=self.hazard_rate(0.5 * (last + time))))
            last = float(time)
        return segments

    def with_rate(self, rate: float, index: int) -> "PiecewiseCreditCurve":
        """Copy of this curve with node ``index`` set to ``rate``."""

        if not 0 <= index < len(self):
            raise IndexOutOfRangeError(f"node index {index} out of range for {len(self)} nodes")
        rates = np.array(self.rates, dtype=float)
        rates[index] = rate
        return PiecewiseCreditCurve(times=self.times, rates=rates, base_date=self.base_date, dates=self.dates)

    def integrated_hazard(self, time: float) -> float:
        return interpolate_rt(self.times, self._rt, time)

    def survival_probability(self, time: float) -> float:
        return float(np.exp(-self.integrated_hazard(time)))

    def hazard_rate(self, time: float) -> float:
        """Instantaneous (forward) hazard rate at ``time``."""

        return forward_rate(self.times, self._rt, time)

    def zero_hazard_rate(self, time: float) -> float:
        if time == 0.0:
            return float(self.rates[0])
        return self.integrated_hazard(time) / time
