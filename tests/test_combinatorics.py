"""Tests for the log-space combinatorial primitives."""

from __future__ import annotations

import math

import pytest
from scipy import stats as sp_stats

from assaystat.stats.common.combinatorics import (
    hypergeometric_pmf,
    log_binomial,
    log_factorial,
    log_factorial_table,
)


@pytest.mark.parametrize("n", [0, 1, 2, 5, 17, 30])
def test_log_factorial_matches_lgamma(n):
    assert log_factorial(n) == pytest.approx(math.lgamma(n + 1), abs=1e-9)


def test_log_binomial():
    assert log_binomial(5, 2) == pytest.approx(math.log(10))
    assert log_binomial(7, 0) == 0.0
    assert log_binomial(4, 5) == -math.inf
    assert log_binomial(4, -1) == -math.inf


@pytest.mark.parametrize("x", [0, 1, 3, 5])
def test_hypergeometric_pmf_matches_scipy(x):
    # population 20, 8 successes, 10 draws
    expected = sp_stats.hypergeom.pmf(x, 20, 8, 10)
    assert hypergeometric_pmf(x, 20, 8, 10) == pytest.approx(expected, rel=1e-9)


def test_hypergeometric_pmf_sums_to_one():
    N, K, n = 20, 11, 10
    total = sum(hypergeometric_pmf(x, N, K, n) for x in range(0, n + 1))
    assert total == pytest.approx(1.0, abs=1e-12)


def test_hypergeometric_pmf_outside_support():
    # with N=10, K=8, n=5 at least 3 successes must be drawn
    assert hypergeometric_pmf(2, 10, 8, 5) == 0.0
    assert hypergeometric_pmf(6, 10, 8, 5) == 0.0


def test_log_factorial_table_matches_running_sums():
    table = log_factorial_table(40)
    assert len(table) == 41
    assert table == [log_factorial(n) for n in range(41)]


def test_log_factorial_table_small_sizes():
    assert log_factorial_table(0) == [0.0, 0.0]
    assert log_factorial_table(1) == [0.0, 0.0]


def test_hypergeometric_pmf_with_table_is_identical():
    table = log_factorial_table(20)
    for x in range(0, 9):
        assert hypergeometric_pmf(x, 20, 8, 10, table) == hypergeometric_pmf(x, 20, 8, 10)
