"""
assaystat.core.results
======================

Frozen result records returned by the hypothesis tests.

Every record is created per call and holds no identity beyond its values.
`TestResult` carries the fields common to all tests; the subclasses add the
intermediate quantities each procedure exposes.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from assaystat.core.names import EffectKind, GroupName

DegreesOfFreedom = Union[int, Tuple[int, int], None]


@dataclass(frozen=True, kw_only=True)
class TestResult:
    """Outcome of a single hypothesis test.

    Attributes:
        test_name: Human-readable test name
        statistic: Test statistic (chi-square, z, F, odds ratio, ...)
        p_value: p-value in [0, 1]
        df: Degrees of freedom, a (numerator, denominator) pair, or None
        significant: True when p_value < alpha
        alpha: Threshold used for `significant`
        warnings: Diagnostic messages, in the order they were raised
    """

    __test__ = False

    test_name: str
    statistic: float
    p_value: float
    df: DegreesOfFreedom
    significant: bool
    alpha: float = 0.05
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True, kw_only=True)
class ChiSquareResult(TestResult):
    """Chi-square test of independence with its expected-count table."""

    expected: Tuple[Tuple[float, ...], ...]
    min_expected: float


@dataclass(frozen=True, kw_only=True)
class FisherExactResult(TestResult):
    """Fisher's exact test; `statistic` is the odds ratio."""

    odds_ratio: float
    table_probability: float


@dataclass(frozen=True, kw_only=True)
class ProportionZTestResult(TestResult):
    """Two-sample z-test for proportions.

    `se_pooled` drives the statistic while the confidence interval of the
    difference uses `se_unpooled`.
    """

    p1: float
    p2: float
    difference: float
    se_pooled: float
    se_unpooled: float
    ci_lower: float
    ci_upper: float


@dataclass(frozen=True)
class GroupStats:
    """Size, mean and sample standard deviation of one group."""

    name: GroupName
    n: int
    mean: float
    std: float


@dataclass(frozen=True)
class GroupProportion:
    """Count of successes out of a total for one group."""

    name: GroupName
    count: int
    total: int
    proportion: float


@dataclass(frozen=True, kw_only=True)
class OneWayAnovaResult(TestResult):
    """One-way ANOVA; `df` is (df_between, df_within)."""

    ss_between: float
    ss_within: float
    ss_total: float
    df_between: int
    df_within: int
    ms_between: float
    ms_within: float
    eta_squared: float
    group_stats: Tuple[GroupStats, ...]
    undefined: bool = False

    @property
    def f_statistic(self) -> float:
        return self.statistic


@dataclass(frozen=True, kw_only=True)
class LogRankResult(TestResult):
    """Log-rank test with observed and expected events per group."""

    observed: Mapping[str, float]
    expected: Mapping[str, float]


@dataclass(frozen=True)
class PairwiseComparison:
    """One pairwise sub-comparison, before and after p-value correction.

    Attributes:
        group1, group2: Names of the compared groups
        test_name: Test used for the pair
        statistic: Test statistic of the pair
        p_value: Raw p-value
        p_value_corrected: p-value after multiple-testing correction
        effect_size: Difference (group1 - group2) in proportions or means
        ci_lower, ci_upper: Confidence bounds of the effect size
        significant: True when the corrected p-value is below alpha
        details: Test-specific extras (odds ratio, standard error, ...)
    """

    group1: GroupName
    group2: GroupName
    test_name: str
    statistic: float
    p_value: float
    p_value_corrected: float
    effect_size: float
    ci_lower: float
    ci_upper: float
    significant: bool
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class EffectRecord:
    """One row of a multi-way ANOVA table."""

    factors: Tuple[str, ...]
    kind: EffectKind
    ss: float
    df: int
    ms: float
    f_statistic: float
    p_value: float
    eta_squared: float
    significant: bool

    @property
    def label(self) -> str:
        """Factor name, or factor names joined by ' x ' for interactions."""
        return " x ".join(self.factors)


@dataclass(frozen=True, kw_only=True)
class MultiWayAnovaResult:
    """Effect decomposition of a 1-3 factor ANOVA."""

    factors: Tuple[str, ...]
    effects: Tuple[EffectRecord, ...]
    ss_total: float
    ss_error: float
    df_error: int
    ms_error: float
    n: int
    alpha: float = 0.05
    warnings: Tuple[str, ...] = ()

    @property
    def main_effects(self) -> Tuple[EffectRecord, ...]:
        return tuple(e for e in self.effects if e.kind == "main")

    @property
    def interactions(self) -> Tuple[EffectRecord, ...]:
        return tuple(e for e in self.effects if e.kind == "interaction")

    def effect(self, *factors: str) -> Optional[EffectRecord]:
        """Look up an effect by its factor names (order-insensitive)."""
        wanted = frozenset(factors)
        for record in self.effects:
            if frozenset(record.factors) == wanted:
                return record
        return None


@dataclass(frozen=True)
class SurvivalRecord:
    """Follow-up time of one individual; `status` is True for an event."""

    time: float
    status: bool


@dataclass(frozen=True)
class SurvivalPoint:
    """One step of a Kaplan-Meier curve."""

    time: float
    survival: float
    at_risk: int
    events: int


@dataclass(frozen=True)
class ProportionComparison:
    """Global test, group summaries and pairwise follow-up for count data."""

    global_test: TestResult
    groups: Tuple[GroupProportion, ...]
    pairwise: Tuple[PairwiseComparison, ...] = ()
    correction: str = "none"


@dataclass(frozen=True)
class MeasurementComparison:
    """One-way ANOVA with its Tukey HSD follow-up."""

    anova: OneWayAnovaResult
    post_hoc: Tuple[PairwiseComparison, ...] = ()
