"""Root bracketing and Brent solving for the bootstrap."""

from __future__ import annotations

import logging
import math
from typing import Callable, Tuple

from scipy.optimize import brentq

from .exceptions import BracketingError, InvalidArgumentError, RootFinderNonConvergenceError

logger = logging.getLogger(__name__)

Func = Callable[[float], float]

BRACKET_RATIO = 1.6
MAX_BRACKET_STEPS = 50
DEFAULT_XTOL = 1e-12
DEFAULT_MAX_ITER = 100


def _evaluate(func: Func, x: float) -> float:
    value = float(func(x))
    if math.isnan(value):
        raise BracketingError(f"objective returned NaN at x={x}")
    return value


def bracket_root(
    func: Func,
    x1: float,
    x2: float,
    lower: float = -math.inf,
    upper: float = math.inf,
    max_steps: int = MAX_BRACKET_STEPS,
) -> Tuple[float, float]:
    """Expand ``[x1, x2]`` inside ``[lower, upper]`` until ``func`` changes sign.

    The end with the smaller absolute function value is pushed outwards by
    ``BRACKET_RATIO`` times the current width. An end that hits its limit is
    clamped there and never moved again.
    """

    if x1 >= x2:
        raise InvalidArgumentError(f"bracket requires x1 < x2, got [{x1}, {x2}]")
    if x1 < lower or x2 > upper:
        raise InvalidArgumentError(f"initial bracket [{x1}, {x2}] outside limits [{lower}, {upper}]")

    f1 = _evaluate(func, x1)
    f2 = _evaluate(func, x2)
    lower_reached = x1 == lower
    upper_reached = x2 == upper
    for step in range(max_steps):
        if f1 * f2 <= 0.0:
            logger.debug("Bracketed root in [%s, %s] after %s expansions", x1, x2, step)
            return x1, x2
        if lower_reached and upper_reached:
            raise BracketingError(f"no sign change between limits [{lower}, {upper}]")
        if not lower_reached and (abs(f1) < abs(f2) or upper_reached):
            x1 += BRACKET_RATIO * (x1 - x2)
            if x1 <= lower:
                x1 = lower
                lower_reached = True
            f1 = _evaluate(func, x1)
        else:
            x2 += BRACKET_RATIO * (x2 - x1)
            if x2 >= upper:
                x2 = upper
                upper_reached = True
            f2 = _evaluate(func, x2)
        logger.debug("Bracket expansion %s: [%s, %s] f=[%s, %s]", step + 1, x1, x2, f1, f2)
    if f1 * f2 <= 0.0:
        return x1, x2
    raise BracketingError(f"failed to bracket root after {max_steps} expansions")


def brent_root(
    func: Func,
    a: float,
    b: float,
    xtol: float = DEFAULT_XTOL,
    maxiter: int = DEFAULT_MAX_ITER,
) -> float:
    """Solve ``func(x) = 0`` on a sign-changing bracket with Brent's method."""

    root, result = brentq(func, a, b, xtol=xtol, maxiter=maxiter, full_output=True, disp=False)
    if not result.converged:
        raise RootFinderNonConvergenceError(
            f"Brent solver did not converge in {maxiter} iterations ({result.flag}); last estimate {root}"
        )
    logger.debug("Brent converged to %s in %s iterations", root, result.iterations)
    return float(root)
