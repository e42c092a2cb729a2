"""
assaystat.stats.common.distributions
====================================

Cumulative distribution functions of the reference distributions.

Provides:
- `chi_square_cdf` / `chi_square_sf`
- `f_cdf` / `f_sf`
- `tukey_q_cdf` / `tukey_q_critical` (normal-approximation surrogate)

Examples
--------
>>> from assaystat.stats.common.distributions import chi_square_cdf, f_cdf
>>> chi_square_cdf(0.0, 3)
0.0
>>> f_cdf(float("nan"), 2, 10)
0.5
"""

from __future__ import annotations
import math

from assaystat.core.errors import InvalidInputError
from assaystat.stats.common.special import (
    BETA_MAX_ITER,
    incomplete_gamma_lower,
    regularized_incomplete_beta,
    standard_normal_cdf,
)


def _clamp_probability(p: float) -> float:
    return min(max(p, 0.0), 1.0)


def chi_square_cdf(x: float, df: int) -> float:
    """Chi-square CDF.

    Args:
        x: Statistic value
        df: Degrees of freedom (> 0)

    Returns:
        P(X <= x); 0 for x <= 0. For df = 1 the CDF is computed as
        2 * Phi(sqrt(x)) - 1, otherwise as the regularized lower incomplete
        gamma P(df / 2, x / 2).

    Note:
        The incomplete gamma evaluation is capped at 100 terms, so accuracy
        degrades for df above about 400 when x is near df.
    """
    if df <= 0:
        raise InvalidInputError(f"Chi-square degrees of freedom must be positive, got {df}")
    if x <= 0:
        return 0.0
    if df == 1:
        return 2.0 * standard_normal_cdf(math.sqrt(x)) - 1.0
    return incomplete_gamma_lower(df / 2.0, x / 2.0)


def chi_square_sf(x: float, df: int) -> float:
    """Upper tail 1 - chi_square_cdf(x, df), clamped into [0, 1]."""
    return _clamp_probability(1.0 - chi_square_cdf(x, df))


def f_cdf(x: float, df1: float, df2: float) -> float:
    """F-distribution CDF.

    Args:
        x: Statistic value
        df1: Numerator degrees of freedom (> 0)
        df2: Denominator degrees of freedom (> 0)

    Returns:
        I_y(df1 / 2, df2 / 2) with y = df1 x / (df1 x + df2); 0 for x <= 0.

    Note:
        Any non-finite input yields 0.5. This is a fallback-safety value,
        not a statistical statement.
    """
    if not all(math.isfinite(v) for v in (x, df1, df2)):
        return 0.5
    if df1 <= 0 or df2 <= 0:
        raise InvalidInputError(
            f"F degrees of freedom must be positive, got ({df1}, {df2})"
        )
    if x <= 0:
        return 0.0
    y = df1 * x / (df1 * x + df2)
    return regularized_incomplete_beta(y, df1 / 2.0, df2 / 2.0)


def f_sf(x: float, df1: float, df2: float) -> float:
    """Upper tail 1 - f_cdf(x, df1, df2), clamped into [0, 1]."""
    return _clamp_probability(1.0 - f_cdf(x, df1, df2))


def tukey_q_cdf(q: float, k: int, df: float) -> float:
    """Approximate CDF of the studentized range statistic.

    This is a normal-approximation surrogate,
        Phi((q * sqrt(df) - sqrt(k)) / sqrt(2)) ** k,
    and not the exact studentized-range distribution. p-values derived from
    it are indicative only.

    Args:
        q: Studentized range statistic
        k: Number of groups in the family of comparisons
        df: Error degrees of freedom

    Returns:
        Approximate P(Q <= q); 0 for q <= 0
    """
    if k < 2:
        raise InvalidInputError(f"Studentized range needs at least 2 groups, got {k}")
    if df <= 0:
        raise InvalidInputError(f"Studentized range degrees of freedom must be positive, got {df}")
    if q <= 0:
        return 0.0
    z = (q * math.sqrt(df) - math.sqrt(k)) / math.sqrt(2.0)
    return standard_normal_cdf(z) ** k


def tukey_q_critical(alpha: float, k: int, df: float) -> float:
    """Critical value q with tukey_q_cdf(q, k, df) = 1 - alpha.

    Found by bisection on the surrogate CDF, so it inherits the same
    approximation. The search is capped at `BETA_MAX_ITER` halvings.
    """
    if not (0 < alpha < 1):
        raise InvalidInputError(f"alpha must be in (0, 1), got {alpha}")
    target = 1.0 - alpha
    lo, hi = 0.0, 1.0
    while tukey_q_cdf(hi, k, df) < target and hi < 1e6:
        hi *= 2.0
    for _ in range(BETA_MAX_ITER):
        mid = 0.5 * (lo + hi)
        if tukey_q_cdf(mid, k, df) < target:
            lo = mid
        else:
            hi = mid
        if hi - lo < 1e-10:
            break
    return hi
