"""Tests for the Polars table views."""

from __future__ import annotations

import polars as pl
import pytest

from assaystat.api.analysis import compare_proportions
from assaystat.reporting.tables import AnovaReporter, PairwiseReporter, SurvivalReporter
from assaystat.stats.schemes.anova import multi_way_anova, one_way_anova
from assaystat.stats.schemes.survival import kaplan_meier_by_group


def test_one_way_effects_table(offspring_by_strain):
    result = one_way_anova(offspring_by_strain)
    table = AnovaReporter(result).effects_table()
    assert table.columns == [
        "effect", "kind", "ss", "df", "ms", "f_statistic", "p_value", "eta_squared", "significant",
    ]
    assert table["effect"].to_list() == ["Between groups", "Error"]
    assert table["df"].to_list() == [2, 9]
    assert table["f_statistic"][0] == pytest.approx(result.statistic)
    assert table["f_statistic"][1] is None


def test_group_table(offspring_by_strain):
    table = AnovaReporter(one_way_anova(offspring_by_strain)).group_table()
    assert table["group"].to_list() == list(offspring_by_strain)
    assert table["n"].to_list() == [4, 5, 3]
    assert table.schema["mean"] == pl.Float64


def test_multi_way_effects_table(strain_diet_rows):
    reporter = AnovaReporter(multi_way_anova(strain_diet_rows, ["strain", "diet"]))
    table = reporter.effects_table()
    assert table["kind"].to_list() == ["main", "main", "interaction", "error"]
    error = table.filter(pl.col("effect") == "Error")
    assert error["ss"][0] == pytest.approx(3.5)
    assert error["df"][0] == 4
    with pytest.raises(TypeError):
        reporter.group_table()


def test_pairwise_table(infection_counts):
    outcome = compare_proportions(infection_counts, test="fisher", correction="bonferroni")
    reporter = PairwiseReporter(outcome.pairwise)
    table = reporter.table()
    assert table.height == 3
    assert table["test"].unique().to_list() == ["Fisher's exact test"]

    significant = reporter.significant()
    assert significant["significant"].all()
    corrected = significant["p_value_corrected"].to_list()
    assert corrected == sorted(corrected)


def test_empty_pairwise_table():
    table = PairwiseReporter([]).table()
    assert table.height == 0
    assert "p_value_corrected" in table.columns


def test_survival_tables(survival_groups):
    reporter = SurvivalReporter(kaplan_meier_by_group(survival_groups))
    curves = reporter.curve_table()
    assert curves.height == 4 + 1
    assert curves.filter(pl.col("group") == "exposed")["events"].sum() == 3

    at = reporter.survival_at(3.5)
    survival = dict(zip(at["group"].to_list(), at["survival"].to_list()))
    assert survival == pytest.approx({"exposed": 0.5, "control": 1.0})
