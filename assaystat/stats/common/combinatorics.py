"""
assaystat.stats.common.combinatorics
====================================

Log-space combinatorial primitives for exact tests.

Functions that are evaluated many times over the same population accept a
precomputed `log_factorial_table`, so each evaluation is a constant number
of lookups instead of a fresh ln(i) accumulation.

Examples
--------
>>> from assaystat.stats.common.combinatorics import log_factorial, log_factorial_table
>>> log_factorial(1)
0.0
>>> round(math.exp(log_factorial(5)))
120
>>> table = log_factorial_table(5)
>>> table[5] == log_factorial(5)
True
"""

from __future__ import annotations
import math
from typing import List, Optional, Sequence


def log_factorial(n: int) -> float:
    """Return ln(n!) as the running sum of ln(i) for i = 2..n; 0 for n <= 1."""
    if n <= 1:
        return 0.0
    total = 0.0
    for i in range(2, int(n) + 1):
        total += math.log(i)
    return total


def log_factorial_table(n: int) -> List[float]:
    """Return [ln(0!), ln(1!), ..., ln(n!)] as prefix sums of ln(i)."""
    table = [0.0] * (max(int(n), 1) + 1)
    total = 0.0
    for i in range(2, len(table)):
        total += math.log(i)
        table[i] = total
    return table


def log_binomial(
    n: int, k: int, log_fact: Optional[Sequence[float]] = None
) -> float:
    """Return ln(n choose k); -inf when k is outside [0, n].

    Args:
        n, k: Binomial arguments
        log_fact: Optional `log_factorial_table` covering at least n
    """
    if k < 0 or k > n:
        return -math.inf
    if log_fact is not None:
        return log_fact[n] - log_fact[k] - log_fact[n - k]
    return log_factorial(n) - log_factorial(k) - log_factorial(n - k)


def hypergeometric_pmf(
    x: int, N: int, K: int, n: int, log_fact: Optional[Sequence[float]] = None
) -> float:
    """Probability of exactly x successes in n draws without replacement.

    Args:
        x: Number of observed successes
        N: Population size
        K: Successes in the population
        n: Number of draws
        log_fact: Optional `log_factorial_table(N)`; pass it when the pmf is
            evaluated over a whole support

    Returns:
        P(X = x), computed in log space and exponentiated; 0 outside the
        support max(0, n - (N - K)) <= x <= min(n, K)
    """
    if x < max(0, n - (N - K)) or x > min(n, K):
        return 0.0
    log_p = (
        log_binomial(K, x, log_fact)
        + log_binomial(N - K, n - x, log_fact)
        - log_binomial(N, n, log_fact)
    )
    return math.exp(log_p)
