"""Tests for the multiple-testing corrections."""

from __future__ import annotations

import pytest
from scipy import stats as sp_stats

from assaystat.core.errors import InvalidInputError
from assaystat.stats.common.correction import (
    benjamini_hochberg,
    bonferroni,
    correct_p_values,
    holm,
)

RAW = [0.04, 0.001, 0.03, 0.2, 0.012, 0.5, 0.03]


def test_bonferroni_clamps_to_one():
    assert bonferroni([0.3, 0.6]) == pytest.approx([0.6, 1.0])


def test_holm_step_down():
    # ranks: 0.01 * 3, 0.03 * 2, 0.04 * 1 -> running maximum
    assert holm([0.01, 0.04, 0.03]) == pytest.approx([0.03, 0.06, 0.06])


def test_benjamini_hochberg_ascending_family():
    raw = [0.01, 0.02, 0.03, 0.04, 0.05]
    corrected = benjamini_hochberg(raw)
    assert corrected == sorted(corrected)
    # the largest rank is multiplied by n / n
    assert corrected[-1] == raw[-1]
    assert corrected == pytest.approx([0.05] * 5)


def test_benjamini_hochberg_matches_scipy():
    expected = sp_stats.false_discovery_control(RAW, method="bh")
    assert benjamini_hochberg(RAW) == pytest.approx(list(expected), abs=1e-12)


def test_corrections_are_ordered_elementwise():
    bonf, hl, bh = bonferroni(RAW), holm(RAW), benjamini_hochberg(RAW)
    for b, h, f, p in zip(bonf, hl, bh, RAW):
        assert b >= h >= f >= p


def test_input_order_is_preserved():
    corrected = holm(RAW)
    by_raw = sorted(zip(RAW, corrected))
    assert [c for _, c in by_raw] == sorted(corrected)
    # tied raw p-values keep their input positions and are non-decreasing
    assert corrected[2] <= corrected[6]


@pytest.mark.parametrize(
    "method, fn",
    [("bonferroni", bonferroni), ("holm", holm), ("fdr", benjamini_hochberg)],
)
def test_correct_p_values_dispatch(method, fn):
    assert correct_p_values(RAW, method) == fn(RAW)
    assert correct_p_values(RAW, method.upper()) == fn(RAW)


def test_correct_p_values_none_is_identity():
    assert correct_p_values(RAW, "none") == RAW


def test_default_method_is_fdr():
    assert correct_p_values(RAW) == benjamini_hochberg(RAW)


def test_empty_family():
    assert correct_p_values([], "holm") == []


def test_unknown_method_raises():
    with pytest.raises(InvalidInputError):
        correct_p_values([0.1], "sidak")


@pytest.mark.parametrize("bad", [-0.1, 1.5, float("nan")])
def test_out_of_range_p_values_raise(bad):
    with pytest.raises(InvalidInputError):
        correct_p_values([0.1, bad], "bonferroni")
