"""Tests for the count-data tests: chi-square, Fisher and the z-test."""

from __future__ import annotations

import math
import time

import pytest
from scipy import stats as sp_stats

from assaystat.core.errors import InvalidInputError
from assaystat.core.names import TestName
from assaystat.core.results import GroupProportion
from assaystat.stats.common.correction import holm
from assaystat.stats.schemes.contingency import (
    chi_square_test,
    fisher_exact_test,
    group_proportions,
    pairwise_proportion_tests,
    proportions_z_test,
)


# --- chi-square ---


def test_chi_square_boundary_expected_count_warns():
    result = chi_square_test([[10, 0], [0, 10]])
    assert result.statistic == pytest.approx(20.0)
    assert result.df == 1
    assert result.p_value < 0.05
    assert result.significant
    assert result.min_expected == pytest.approx(5.0)
    assert any("Fisher" in w for w in result.warnings)
    assert result.expected == ((5.0, 5.0), (5.0, 5.0))


def test_chi_square_matches_scipy():
    table = [[20, 15, 10], [10, 25, 30]]
    stat, p, dof, expected = sp_stats.chi2_contingency(table, correction=False)
    result = chi_square_test(table)
    assert result.test_name == TestName.CHI_SQUARE.value
    assert result.statistic == pytest.approx(stat, rel=1e-10)
    assert result.p_value == pytest.approx(p, abs=1e-8)
    assert result.df == dof == 2
    for ours, theirs in zip(result.expected, expected):
        assert list(ours) == pytest.approx(list(theirs))
    assert result.warnings == ()


def test_chi_square_identical_rows_has_zero_statistic():
    result = chi_square_test([[5, 5], [5, 5]])
    assert result.statistic == 0.0
    assert result.p_value == 1.0
    assert not result.significant


def test_chi_square_zero_column_is_skipped_with_warning():
    result = chi_square_test([[5, 0], [7, 0]])
    assert result.statistic == 0.0
    assert result.p_value == 1.0
    assert any("zero total" in w for w in result.warnings)


def test_chi_square_alpha_override(strict_settings):
    # X2 = 4.0 on one df: p ~ 0.0455
    table = [[30, 20], [20, 30]]
    assert chi_square_test(table).significant
    strict = chi_square_test(table, settings=strict_settings)
    assert not strict.significant
    assert strict.alpha == 0.01
    assert chi_square_test(table, alpha=0.01).significant is False


@pytest.mark.parametrize(
    "table",
    [
        [[1, 2, 3]],
        [[1], [2]],
        [[1, 2], [3]],
        [[1, -2], [3, 4]],
        [[1.5, 2], [3, 4]],
        [[0, 0], [0, 0]],
        [],
    ],
)
def test_chi_square_rejects_malformed_tables(table):
    with pytest.raises(InvalidInputError):
        chi_square_test(table)


# --- Fisher ---


def test_fisher_odds_ratio_and_p_value():
    result = fisher_exact_test(8, 2, 3, 7)
    assert result.odds_ratio == pytest.approx(56 / 6)
    assert result.statistic == result.odds_ratio
    assert 0.0 < result.p_value < 1.0
    assert result.df is None
    _, p = sp_stats.fisher_exact([[8, 2], [3, 7]])
    assert result.p_value == pytest.approx(p, abs=1e-9)


@pytest.mark.parametrize("table", [[[1, 9], [11, 3]], [[0, 5], [5, 0]], [[3, 3], [3, 3]]])
def test_fisher_matches_scipy(table):
    (a, b), (c, d) = table
    _, p = sp_stats.fisher_exact(table)
    assert fisher_exact_test(a, b, c, d).p_value == pytest.approx(p, abs=1e-9)


def test_fisher_large_table_runs_in_linear_time():
    # N = 12000: the support has 6001 tables
    start = time.perf_counter()
    result = fisher_exact_test(3000, 3000, 3000, 3000)
    elapsed = time.perf_counter() - start
    assert elapsed < 2.0
    assert result.odds_ratio == 1.0
    _, p = sp_stats.fisher_exact([[3000, 3000], [3000, 3000]])
    assert result.p_value == pytest.approx(p, abs=1e-6)


def test_fisher_unbalanced_large_table_matches_scipy():
    _, p = sp_stats.fisher_exact([[1210, 790], [1100, 900]])
    assert fisher_exact_test(1210, 790, 1100, 900).p_value == pytest.approx(p, rel=1e-6)


def test_fisher_p_value_is_at_most_one():
    assert fisher_exact_test(3, 3, 3, 3).p_value <= 1.0


def test_fisher_infinite_odds_ratio():
    result = fisher_exact_test(5, 0, 0, 5)
    assert result.odds_ratio == math.inf
    assert any("infinite" in w for w in result.warnings)


def test_fisher_undefined_odds_ratio():
    result = fisher_exact_test(0, 0, 3, 4)
    assert math.isnan(result.odds_ratio)
    assert result.p_value == pytest.approx(1.0)
    assert any("undefined" in w for w in result.warnings)


def test_fisher_zero_odds_ratio_has_no_warning():
    result = fisher_exact_test(0, 5, 5, 0)
    assert result.odds_ratio == 0.0
    assert result.warnings == ()


def test_fisher_rejects_bad_counts():
    with pytest.raises(InvalidInputError):
        fisher_exact_test(0, 0, 0, 0)
    with pytest.raises(InvalidInputError):
        fisher_exact_test(1, -1, 2, 3)


# --- z-test ---


def test_z_test_statistic_and_interval():
    result = proportions_z_test(30, 50, 20, 50)
    assert result.p1 == pytest.approx(0.6)
    assert result.p2 == pytest.approx(0.4)
    assert result.se_pooled == pytest.approx(0.1)
    assert result.statistic == pytest.approx(2.0)
    assert result.p_value == pytest.approx(2 * sp_stats.norm.sf(2.0), abs=1e-6)
    assert result.significant

    se_unpooled = math.sqrt(0.6 * 0.4 / 50 + 0.4 * 0.6 / 50)
    assert result.se_unpooled == pytest.approx(se_unpooled)
    assert result.ci_lower == pytest.approx(0.2 - 1.96 * se_unpooled)
    assert result.ci_upper == pytest.approx(0.2 + 1.96 * se_unpooled)


def test_z_test_is_antisymmetric():
    forward = proportions_z_test(30, 50, 20, 50)
    backward = proportions_z_test(20, 50, 30, 50)
    assert backward.statistic == pytest.approx(-forward.statistic)
    assert backward.p_value == pytest.approx(forward.p_value)


def test_z_test_zero_standard_error():
    result = proportions_z_test(0, 10, 0, 10)
    assert result.statistic == 0.0
    assert result.p_value == 0.5
    assert not result.significant
    assert any("standard error is zero" in w for w in result.warnings)


@pytest.mark.parametrize("args", [(11, 10, 2, 10), (1, 0, 2, 10), (1, 10, -2, 10)])
def test_z_test_rejects_bad_counts(args):
    with pytest.raises(InvalidInputError):
        proportions_z_test(*args)


# --- pairwise ---


def test_group_proportions(infection_counts):
    summaries = group_proportions(infection_counts)
    assert [g.name for g in summaries] == ["control", "low dose", "high dose"]
    assert [g.proportion for g in summaries] == pytest.approx([0.3, 0.5, 0.775])


def test_group_proportions_accepts_records():
    record = GroupProportion(name="x", count=3, total=10, proportion=0.3)
    (summary,) = group_proportions({"x": record})
    assert summary == record


def test_pairwise_fisher_with_holm(infection_counts):
    rows = pairwise_proportion_tests(infection_counts, test="fisher", correction="holm")
    assert [(r.group1, r.group2) for r in rows] == [
        ("control", "low dose"),
        ("control", "high dose"),
        ("low dose", "high dose"),
    ]
    assert [r.p_value_corrected for r in rows] == holm([r.p_value for r in rows])
    for r in rows:
        assert r.test_name == TestName.FISHER_EXACT.value
        assert "odds_ratio" in r.details
        assert r.p_value_corrected >= r.p_value
        assert r.ci_lower <= r.effect_size <= r.ci_upper

    control_high = rows[1]
    assert control_high.effect_size == pytest.approx(0.3 - 0.775)
    assert control_high.significant


@pytest.mark.parametrize("test", ["z-test", "chi-square"])
def test_pairwise_uses_the_requested_test(infection_counts, test):
    rows = pairwise_proportion_tests(infection_counts, test=test, correction="none")
    expected_name = TestName.Z_TEST.value if test == "z-test" else TestName.CHI_SQUARE.value
    assert {r.test_name for r in rows} == {expected_name}
    assert all(r.p_value_corrected == r.p_value for r in rows)


def test_pairwise_rejects_unknown_test(infection_counts):
    with pytest.raises(InvalidInputError):
        pairwise_proportion_tests(infection_counts, test="g-test")


def test_pairwise_needs_two_groups():
    with pytest.raises(InvalidInputError):
        pairwise_proportion_tests({"only": (3, 10)})
