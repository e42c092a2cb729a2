"""Tests for the comparison facade."""

from __future__ import annotations

import pytest

from assaystat.api.analysis import compare_measurements, compare_proportions
from assaystat.core.errors import InvalidInputError
from assaystat.core.results import ChiSquareResult, FisherExactResult, ProportionZTestResult
from assaystat.stats.schemes.contingency import chi_square_test


def test_compare_proportions_many_groups(infection_counts):
    outcome = compare_proportions(infection_counts, test="z-test", correction="holm")
    assert isinstance(outcome.global_test, ChiSquareResult)
    assert outcome.global_test.df == 2
    expected = chi_square_test([[12, 28], [20, 20], [31, 9]])
    assert outcome.global_test.statistic == pytest.approx(expected.statistic)
    assert outcome.global_test.significant
    assert len(outcome.pairwise) == 3
    assert outcome.correction == "holm"
    assert [g.name for g in outcome.groups] == list(infection_counts)


def test_compare_proportions_skips_pairs_when_not_significant():
    outcome = compare_proportions({"a": (10, 40), "b": (11, 40), "c": (10, 40)})
    assert not outcome.global_test.significant
    assert outcome.pairwise == ()
    assert outcome.correction == "none"


@pytest.mark.parametrize(
    "test, result_type",
    [
        ("z-test", ProportionZTestResult),
        ("fisher", FisherExactResult),
        ("chi-square", ChiSquareResult),
    ],
)
def test_compare_proportions_two_groups_runs_requested_test(test, result_type):
    outcome = compare_proportions({"treated": (18, 25), "control": (8, 25)}, test=test)
    assert isinstance(outcome.global_test, result_type)
    assert outcome.pairwise == ()


def test_compare_proportions_two_groups_fisher_uses_failures():
    outcome = compare_proportions({"treated": (8, 10), "control": (3, 10)}, test="fisher")
    assert outcome.global_test.odds_ratio == pytest.approx((8 * 7) / (2 * 3))


def test_compare_proportions_alpha_flows_through(infection_counts):
    outcome = compare_proportions(infection_counts, alpha=0.001)
    assert outcome.global_test.alpha == 0.001
    assert all(p.p_value_corrected < 0.001 for p in outcome.pairwise if p.significant)


def test_compare_proportions_rejects_bad_input(infection_counts):
    with pytest.raises(InvalidInputError):
        compare_proportions(infection_counts, test="auto")
    with pytest.raises(InvalidInputError):
        compare_proportions({"only": (3, 10)})


def test_compare_measurements_runs_tukey_when_significant(offspring_by_strain):
    outcome = compare_measurements(offspring_by_strain)
    assert outcome.anova.significant
    assert len(outcome.post_hoc) == 3
    assert [g.name for g in outcome.anova.group_stats] == list(offspring_by_strain)


def test_compare_measurements_without_difference():
    outcome = compare_measurements({"a": [1.0, 2.0, 3.0], "b": [1.5, 2.0, 2.5]})
    assert not outcome.anova.significant
    assert outcome.post_hoc == ()
