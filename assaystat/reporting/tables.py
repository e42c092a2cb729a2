"""
assaystat.reporting.tables
==========================

Tabular views of result records as Polars DataFrames.

The tables carry raw numeric values; rounding and presentation are left to
the caller.

Examples
--------
>>> from assaystat.stats.schemes.anova import multi_way_anova
>>> from assaystat.reporting.tables import AnovaReporter
>>> rows = [
...     {"strain": s, "diet": d, "value": v}
...     for s, d, v in [
...         ("A", "low", 3.0), ("A", "low", 4.0), ("A", "high", 6.0), ("A", "high", 7.0),
...         ("B", "low", 5.0), ("B", "low", 6.0), ("B", "high", 9.0), ("B", "high", 11.0),
...     ]
... ]
>>> rep = AnovaReporter(multi_way_anova(rows, ["strain", "diet"]))
>>> rep.effects_table()["effect"].to_list()
['strain', 'diet', 'strain x diet', 'Error']
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence, Union

import polars as pl

from assaystat.core.results import (
    MultiWayAnovaResult,
    OneWayAnovaResult,
    PairwiseComparison,
    SurvivalPoint,
)

_EFFECT_SCHEMA = {
    "effect": pl.Utf8,
    "kind": pl.Utf8,
    "ss": pl.Float64,
    "df": pl.Int64,
    "ms": pl.Float64,
    "f_statistic": pl.Float64,
    "p_value": pl.Float64,
    "eta_squared": pl.Float64,
    "significant": pl.Boolean,
}


@dataclass
class AnovaReporter:
    """ANOVA table view for one-way and multi-way results."""

    result: Union[OneWayAnovaResult, MultiWayAnovaResult]

    def effects_table(self) -> pl.DataFrame:
        """
        Returns one row per modeled term plus a final 'Error' row:
        - effect, kind, ss, df, ms, f_statistic, p_value, eta_squared, significant
        """
        res = self.result
        if isinstance(res, OneWayAnovaResult):
            records = [
                {
                    "effect": "Between groups",
                    "kind": "main",
                    "ss": res.ss_between,
                    "df": res.df_between,
                    "ms": res.ms_between,
                    "f_statistic": res.statistic,
                    "p_value": res.p_value,
                    "eta_squared": res.eta_squared,
                    "significant": res.significant,
                },
                {
                    "effect": "Error",
                    "kind": "error",
                    "ss": res.ss_within,
                    "df": res.df_within,
                    "ms": res.ms_within,
                    "f_statistic": None,
                    "p_value": None,
                    "eta_squared": None,
                    "significant": None,
                },
            ]
        else:
            records = [
                {
                    "effect": e.label,
                    "kind": e.kind,
                    "ss": e.ss,
                    "df": e.df,
                    "ms": e.ms,
                    "f_statistic": e.f_statistic,
                    "p_value": e.p_value,
                    "eta_squared": e.eta_squared,
                    "significant": e.significant,
                }
                for e in res.effects
            ]
            records.append(
                {
                    "effect": "Error",
                    "kind": "error",
                    "ss": res.ss_error,
                    "df": res.df_error,
                    "ms": res.ms_error,
                    "f_statistic": None,
                    "p_value": None,
                    "eta_squared": None,
                    "significant": None,
                }
            )
        return pl.DataFrame(records, schema=_EFFECT_SCHEMA)

    def group_table(self) -> pl.DataFrame:
        """Per-group n, mean and std of a one-way result."""
        if not isinstance(self.result, OneWayAnovaResult):
            raise TypeError("group_table is only available for one-way ANOVA results")
        return pl.DataFrame(
            {
                "group": [g.name for g in self.result.group_stats],
                "n": [g.n for g in self.result.group_stats],
                "mean": [g.mean for g in self.result.group_stats],
                "std": [g.std for g in self.result.group_stats],
            },
            schema={"group": pl.Utf8, "n": pl.Int64, "mean": pl.Float64, "std": pl.Float64},
        )


@dataclass
class PairwiseReporter:
    """Table view of pairwise comparisons."""

    comparisons: Sequence[PairwiseComparison]

    def table(self) -> pl.DataFrame:
        """
        Returns one row per pair:
        - group1, group2, test, statistic, p_value, p_value_corrected,
          effect_size, ci_lower, ci_upper, significant
        """
        return pl.DataFrame(
            [
                {
                    "group1": c.group1,
                    "group2": c.group2,
                    "test": c.test_name,
                    "statistic": c.statistic,
                    "p_value": c.p_value,
                    "p_value_corrected": c.p_value_corrected,
                    "effect_size": c.effect_size,
                    "ci_lower": c.ci_lower,
                    "ci_upper": c.ci_upper,
                    "significant": c.significant,
                }
                for c in self.comparisons
            ],
            schema={
                "group1": pl.Utf8,
                "group2": pl.Utf8,
                "test": pl.Utf8,
                "statistic": pl.Float64,
                "p_value": pl.Float64,
                "p_value_corrected": pl.Float64,
                "effect_size": pl.Float64,
                "ci_lower": pl.Float64,
                "ci_upper": pl.Float64,
                "significant": pl.Boolean,
            },
        )

    def significant(self) -> pl.DataFrame:
        """Pairs whose corrected p-value is significant, smallest first."""
        return self.table().filter(pl.col("significant")).sort("p_value_corrected")


@dataclass
class SurvivalReporter:
    """Long-format table of Kaplan-Meier curves."""

    curves: Mapping[str, Sequence[SurvivalPoint]]

    def curve_table(self) -> pl.DataFrame:
        """
        Returns one row per group and curve step:
        - group, time, survival, at_risk, events
        """
        return pl.DataFrame(
            [
                {
                    "group": name,
                    "time": p.time,
                    "survival": p.survival,
                    "at_risk": p.at_risk,
                    "events": p.events,
                }
                for name, points in self.curves.items()
                for p in points
            ],
            schema={
                "group": pl.Utf8,
                "time": pl.Float64,
                "survival": pl.Float64,
                "at_risk": pl.Int64,
                "events": pl.Int64,
            },
        )

    def survival_at(self, time: float) -> pl.DataFrame:
        """Step-function survival of every group at `time`."""
        return (
            self.curve_table()
            .filter(pl.col("time") <= time)
            .sort("time")
            .group_by("group", maintain_order=True)
            .agg(pl.col("survival").last())
        )
