"""Chi-squared 95th percentile thresholds used to gate measurement updates."""

from __future__ import annotations

import logging
import math
from statistics import NormalDist

__all__ = ["CHI_SQUARE_TABLE_95TH", "chi2_threshold"]

_log = logging.getLogger(__name__)

_CONFIDENCE = 0.95
_TABLE_SIZE = 1000
_DECIMALS = 6
_EPS = 1e-15
_TINY = 1e-300
_MAX_ITER = 10_000


def _log_prefactor(a: float, x: float) -> float:
    return -x + a * math.log(x) - math.lgamma(a)


def _lower_gamma_series(a: float, x: float) -> float:
    """Regularized lower incomplete gamma P(a, x) by its power series."""
    term = total = 1.0 / a
    denom = a
    for _ in range(_MAX_ITER):
        denom += 1.0
        term *= x / denom
        total += term
        if abs(term) < abs(total) * _EPS:
            break
    return total * math.exp(_log_prefactor(a, x))


def _upper_gamma_fraction(a: float, x: float) -> float:
    """Regularized upper incomplete gamma Q(a, x) by a continued fraction."""
    b = x + 1.0 - a
    c = 1.0 / _TINY
    d = 1.0 / b
    h = d
    for i in range(1, _MAX_ITER):
        an = -i * (i - a)
        b += 2.0
        d = an * d + b
        if abs(d) < _TINY:
            d = _TINY
        c = b + an / c
        if abs(c) < _TINY:
            c = _TINY
        d = 1.0 / d
        delta = d * c
        h *= delta
        if abs(delta - 1.0) < _EPS:
            break
    return h * math.exp(_log_prefactor(a, x))


def _chi2_survival(x: float, dof: int) -> float:
    a = dof / 2.0
    half = x / 2.0
    if half <= 0.0:
        return 1.0
    if half < a + 1.0:
        return 1.0 - _lower_gamma_series(a, half)
    return _upper_gamma_fraction(a, half)


def _chi2_pdf(x: float, dof: int) -> float:
    a = dof / 2.0
    half = x / 2.0
    return 0.5 * math.exp((a - 1.0) * math.log(half) - half - math.lgamma(a))


def _chi2_quantile(probability: float, dof: int) -> float:
    """Quantile of the chi-squared distribution, refined by Newton steps."""
    z = NormalDist().inv_cdf(probability)
    k = float(dof)
    spread = 2.0 / (9.0 * k)
    x = k * (1.0 - spread + z * math.sqrt(spread)) ** 3
    tail = 1.0 - probability
    for _ in range(100):
        step = (_chi2_survival(x, dof) - tail) / _chi2_pdf(x, dof)
        new_x = x + step
        if new_x <= 0.0:
            new_x = x / 2.0
        if abs(new_x - x) <= 1e-13 * max(1.0, x):
            x = new_x
            break
        x = new_x
    return x


# 95th percentile of the chi-squared distribution, indexed by degrees of freedom.
CHI_SQUARE_TABLE_95TH: tuple[float, ...] = (0.0,) + tuple(
    round(_chi2_quantile(_CONFIDENCE, dof), _DECIMALS) for dof in range(1, _TABLE_SIZE)
)


def chi2_threshold(dof: int) -> float:
    """Return the 95th percentile chi-squared value for ``dof`` degrees of freedom.

    Beyond the end of the precomputed table the last entry is returned and a
    warning is logged.
    """
    if isinstance(dof, bool) or not isinstance(dof, int):
        raise TypeError(f"degrees of freedom must be an integer, got {dof!r}")
    if dof < 0:
        raise ValueError(f"degrees of freedom must be non-negative, got {dof}")
    if dof < len(CHI_SQUARE_TABLE_95TH):
        return float(CHI_SQUARE_TABLE_95TH[dof])
    _log.warning("chi2_check over the residual limit - %d", dof)
    return float(CHI_SQUARE_TABLE_95TH[-1])