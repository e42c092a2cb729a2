"""
assaystat.stats.schemes.contingency
===================================

Tests on count data: contingency tables and two-group proportions.

**Global tests:**
- `chi_square_test`: Pearson chi-square test of independence on an r x c table
- `fisher_exact_test`: two-tailed Fisher's exact test on a 2x2 table
- `proportions_z_test`: two-sample z-test for proportions

**Pairwise follow-up:**
- `pairwise_proportion_tests`: every pair of groups with an explicitly chosen
  test, p-values corrected together
- `group_proportions`: per-group count / total summaries

Mathematical Background
-----------------------
Expected counts under independence are E_ij = R_i * C_j / T and
    X^2 = sum (O_ij - E_ij)^2 / E_ij,   df = (r - 1)(c - 1).

Fisher's two-tailed p-value sums the hypergeometric probabilities of all
tables with the same margins that are no more probable than the observed one.

The z-test uses the pooled standard error under H0,
    SE_pooled = sqrt(p(1-p) (1/n1 + 1/n2)),  p = (x1 + x2) / (n1 + n2),
while the confidence interval of p1 - p2 uses the unpooled
    SE_unpooled = sqrt(p1(1-p1)/n1 + p2(1-p2)/n2).

Examples
--------
>>> from assaystat.stats.schemes.contingency import fisher_exact_test
>>> result = fisher_exact_test(8, 2, 3, 7)
>>> round(result.odds_ratio, 4)
9.3333
>>> 0 < result.p_value < 1
True
"""

from __future__ import annotations
import math
from itertools import combinations
from typing import List, Mapping, Optional, Sequence, Tuple, Union

from assaystat.core.errors import InvalidInputError, record_warning, require
from assaystat.core.names import PAIRWISE_TESTS, TestName
from assaystat.core.results import (
    ChiSquareResult,
    FisherExactResult,
    GroupProportion,
    PairwiseComparison,
    ProportionZTestResult,
)
from assaystat.core.settings import AnalysisSettings, resolve_settings
from assaystat.stats.common.combinatorics import hypergeometric_pmf, log_factorial_table
from assaystat.stats.common.correction import correct_p_values
from assaystat.stats.common.distributions import chi_square_sf
from assaystat.stats.common.special import standard_normal_cdf
from assaystat.utils.logging import get_logger

logger = get_logger(__name__)

FISHER_TOLERANCE = 1e-10

CountTotal = Union[Tuple[int, int], GroupProportion]


def _as_count(value: float, label: str) -> int:
    if isinstance(value, bool) or not math.isfinite(value) or value < 0:
        raise InvalidInputError(f"{label} must be a non-negative count, got {value!r}")
    if value != int(value):
        raise InvalidInputError(f"{label} must be an integer count, got {value!r}")
    return int(value)


def _validated_table(table: Sequence[Sequence[float]]) -> List[List[int]]:
    require(len(table) > 0, "Contingency table needs at least one row")
    width = len(table[0])
    require(width > 0, "Contingency table needs at least one column")
    rows: List[List[int]] = []
    for i, row in enumerate(table):
        if len(row) != width:
            raise InvalidInputError(
                f"Contingency table is not rectangular: row {i} has {len(row)} "
                f"cells, expected {width}"
            )
        rows.append([_as_count(v, f"cell ({i}, {j})") for j, v in enumerate(row)])
    return rows


# --- Standard errors for two proportions ---


def pooled_standard_error(x1: int, n1: int, x2: int, n2: int) -> float:
    """Standard error of p1 - p2 under H0: p1 = p2 (pooled variance)."""
    p_pooled = (x1 + x2) / (n1 + n2)
    var_pooled = p_pooled * (1 - p_pooled) * (1 / n1 + 1 / n2)
    return math.sqrt(var_pooled) if var_pooled > 0 else 0.0


def unpooled_standard_error(x1: int, n1: int, x2: int, n2: int) -> float:
    """Standard error of p1 - p2 from separate group variances."""
    p1, p2 = x1 / n1, x2 / n2
    var = p1 * (1 - p1) / n1 + p2 * (1 - p2) / n2
    return math.sqrt(var) if var > 0 else 0.0


# --- Global tests ---


def chi_square_test(
    table: Sequence[Sequence[float]],
    *,
    settings: Optional[AnalysisSettings] = None,
    alpha: Optional[float] = None,
) -> ChiSquareResult:
    """
    Pearson chi-square test of independence.

    Args:
        table: Rows = groups, columns = outcome categories, non-negative
            integer counts; at least 2 x 2
        settings: Thresholds (defaults to `DEFAULT_SETTINGS`)
        alpha: Override of `settings.alpha` for the significance flag

    Returns:
        ChiSquareResult with the expected-count table

    Note:
        A minimum expected count at or below `settings.min_expected_count`
        adds a warning recommending an exact test; the test is still
        computed. Cells of an empty row or column (expected count 0) do not
        contribute to the statistic and are reported as a warning.
    """
    cfg = resolve_settings(settings, alpha)
    observed = _validated_table(table)
    n_rows, n_cols = len(observed), len(observed[0])
    df = (n_rows - 1) * (n_cols - 1)
    if df <= 0:
        raise InvalidInputError(
            f"Chi-square test needs at least a 2 x 2 table, got {n_rows} x {n_cols}"
        )

    row_sums = [sum(row) for row in observed]
    col_sums = [sum(row[j] for row in observed) for j in range(n_cols)]
    total = sum(row_sums)
    require(total > 0, "Contingency table has no observations")

    expected = tuple(
        tuple(row_sums[i] * col_sums[j] / total for j in range(n_cols))
        for i in range(n_rows)
    )
    min_expected = min(min(row) for row in expected)

    warnings: List[str] = []
    if min_expected <= cfg.min_expected_count:
        record_warning(
            warnings,
            f"Minimum expected frequency is {min_expected:.2f} "
            f"(<= {cfg.min_expected_count:g}). Consider using Fisher's exact test.",
            logger,
        )
    if 0 in row_sums or 0 in col_sums:
        record_warning(
            warnings,
            "Table has a row or column with zero total; "
            "cells with zero expected count were skipped.",
            logger,
        )

    statistic = 0.0
    for i in range(n_rows):
        for j in range(n_cols):
            e = expected[i][j]
            if e > 0:
                diff = observed[i][j] - e
                statistic += diff * diff / e

    p_value = chi_square_sf(statistic, df)
    logger.debug("chi-square: X2=%.6g df=%d p=%.6g", statistic, df, p_value)

    return ChiSquareResult(
        test_name=TestName.CHI_SQUARE.value,
        statistic=statistic,
        p_value=p_value,
        df=df,
        significant=p_value < cfg.alpha,
        alpha=cfg.alpha,
        warnings=tuple(warnings),
        expected=expected,
        min_expected=min_expected,
    )


def fisher_exact_test(
    a: int,
    b: int,
    c: int,
    d: int,
    *,
    settings: Optional[AnalysisSettings] = None,
    alpha: Optional[float] = None,
) -> FisherExactResult:
    """
    Two-tailed Fisher's exact test on the table [[a, b], [c, d]].

    Args:
        a, b: Successes and failures of group 1
        c, d: Successes and failures of group 2

    Returns:
        FisherExactResult whose `statistic` is the odds ratio (a d) / (b c)

    Note:
        The p-value sums every table probability that does not exceed the
        observed one (plus a 1e-10 tolerance), clamped to 1. When b c = 0 the
        odds ratio is +inf (a d > 0) or NaN (a d = 0); both cases are
        reported in the warnings.
    """
    cfg = resolve_settings(settings, alpha)
    a, b, c, d = (_as_count(v, name) for v, name in zip((a, b, c, d), "abcd"))
    N = a + b + c + d
    require(N > 0, "Fisher's exact test needs at least one observation")

    n1 = a + b
    K = a + c
    log_fact = log_factorial_table(N)
    observed_prob = hypergeometric_pmf(a, N, K, n1, log_fact)

    lo, hi = max(0, n1 - (N - K)), min(n1, K)
    p_value = 0.0
    for x in range(lo, hi + 1):
        prob = hypergeometric_pmf(x, N, K, n1, log_fact)
        if prob <= observed_prob + FISHER_TOLERANCE:
            p_value += prob
    p_value = min(p_value, 1.0)

    warnings: List[str] = []
    numerator, denominator = a * d, b * c
    if denominator == 0:
        if numerator > 0:
            odds_ratio = math.inf
            record_warning(
                warnings, "Odds ratio is infinite (b * c = 0).", logger
            )
        else:
            odds_ratio = math.nan
            record_warning(
                warnings, "Odds ratio is undefined (a * d = b * c = 0).", logger
            )
    else:
        odds_ratio = numerator / denominator

    logger.debug("fisher: OR=%.6g p=%.6g", odds_ratio, p_value)

    return FisherExactResult(
        test_name=TestName.FISHER_EXACT.value,
        statistic=odds_ratio,
        p_value=p_value,
        df=None,
        significant=p_value < cfg.alpha,
        alpha=cfg.alpha,
        warnings=tuple(warnings),
        odds_ratio=odds_ratio,
        table_probability=observed_prob,
    )


def proportions_z_test(
    x1: int,
    n1: int,
    x2: int,
    n2: int,
    *,
    settings: Optional[AnalysisSettings] = None,
    alpha: Optional[float] = None,
) -> ProportionZTestResult:
    """
    Two-sample z-test for H0: p1 = p2.

    Args:
        x1, n1: Successes and trials of group 1
        x2, n2: Successes and trials of group 2

    Returns:
        ProportionZTestResult with z = (p1 - p2) / SE_pooled, two-tailed
        p-value 2 (1 - Phi(|z|)) and a CI for p1 - p2 built from SE_unpooled
        and `settings.ci_critical_value`

    Note:
        When the pooled standard error is zero (both groups all successes
        or all failures) z is reported as 0 and the p-value as the neutral
        fallback 0.5, with a warning.
    """
    cfg = resolve_settings(settings, alpha)
    x1, n1, x2, n2 = (
        _as_count(v, name) for v, name in zip((x1, n1, x2, n2), ("x1", "n1", "x2", "n2"))
    )
    require(n1 > 0 and n2 > 0, "Both groups need at least one trial")
    require(x1 <= n1 and x2 <= n2, "Successes cannot exceed trials")

    p1, p2 = x1 / n1, x2 / n2
    diff = p1 - p2
    se_pooled = pooled_standard_error(x1, n1, x2, n2)
    se_unpooled = unpooled_standard_error(x1, n1, x2, n2)

    warnings: List[str] = []
    if se_pooled > 0:
        z = diff / se_pooled
        p_value = min(max(2.0 * (1.0 - standard_normal_cdf(abs(z))), 0.0), 1.0)
    else:
        z = 0.0
        p_value = 0.5
        record_warning(
            warnings,
            "Pooled standard error is zero; z set to 0 and p-value to the neutral 0.5.",
            logger,
        )

    margin = cfg.ci_critical_value * se_unpooled
    return ProportionZTestResult(
        test_name=TestName.Z_TEST.value,
        statistic=z,
        p_value=p_value,
        df=None,
        significant=p_value < cfg.alpha,
        alpha=cfg.alpha,
        warnings=tuple(warnings),
        p1=p1,
        p2=p2,
        difference=diff,
        se_pooled=se_pooled,
        se_unpooled=se_unpooled,
        ci_lower=diff - margin,
        ci_upper=diff + margin,
    )


# --- Pairwise follow-up ---


def _count_total(name: str, value: CountTotal) -> Tuple[int, int]:
    if isinstance(value, GroupProportion):
        count, total = value.count, value.total
    else:
        count, total = value
    count = _as_count(count, f"{name} count")
    total = _as_count(total, f"{name} total")
    require(total > 0, f"Group {name!r} has no observations")
    require(count <= total, f"Group {name!r} count exceeds its total")
    return count, total


def group_proportions(groups: Mapping[str, CountTotal]) -> Tuple[GroupProportion, ...]:
    """Summarise `name -> (count, total)` groups as GroupProportion records."""
    summaries = []
    for name, value in groups.items():
        count, total = _count_total(name, value)
        summaries.append(
            GroupProportion(name=name, count=count, total=total, proportion=count / total)
        )
    return tuple(summaries)


def pairwise_proportion_tests(
    groups: Mapping[str, CountTotal],
    test: str = "z-test",
    correction: str = "fdr",
    *,
    settings: Optional[AnalysisSettings] = None,
    alpha: Optional[float] = None,
) -> List[PairwiseComparison]:
    """
    Compare every unordered pair of groups and correct the p-values together.

    Args:
        groups: `name -> (successes, total)`, in the order pairs are formed
        test: "z-test", "fisher" or "chi-square"; always applied as given
        correction: "bonferroni", "holm", "fdr" or "none"

    Returns:
        One PairwiseComparison per pair, in (i, j) order with i < j. The
        effect size is p1 - p2 with its unpooled confidence interval; Fisher
        pairs also carry the odds ratio in `details`.
    """
    cfg = resolve_settings(settings, alpha)
    if test not in PAIRWISE_TESTS:
        raise InvalidInputError(
            f"Unknown pairwise test: {test!r}; expected one of {PAIRWISE_TESTS}"
        )
    counts = {name: _count_total(name, value) for name, value in groups.items()}
    require(len(counts) >= 2, "Pairwise comparisons need at least two groups")

    rows = []
    for g1, g2 in combinations(counts, 2):
        x1, n1 = counts[g1]
        x2, n2 = counts[g2]
        details = {}
        if test == "z-test":
            res = proportions_z_test(x1, n1, x2, n2, settings=cfg)
        elif test == "fisher":
            res = fisher_exact_test(x1, n1 - x1, x2, n2 - x2, settings=cfg)
            details["odds_ratio"] = res.odds_ratio
        else:
            res = chi_square_test([[x1, n1 - x1], [x2, n2 - x2]], settings=cfg)
        if res.warnings:
            details["warnings"] = list(res.warnings)

        diff = x1 / n1 - x2 / n2
        margin = cfg.ci_critical_value * unpooled_standard_error(x1, n1, x2, n2)
        rows.append((g1, g2, res, diff, margin, details))

    corrected = correct_p_values([r[2].p_value for r in rows], correction)
    logger.debug(
        "pairwise %s: %d comparisons corrected with %s", test, len(rows), correction
    )

    return [
        PairwiseComparison(
            group1=g1,
            group2=g2,
            test_name=res.test_name,
            statistic=res.statistic,
            p_value=res.p_value,
            p_value_corrected=p_adj,
            effect_size=diff,
            ci_lower=diff - margin,
            ci_upper=diff + margin,
            significant=p_adj < cfg.alpha,
            details=details,
        )
        for (g1, g2, res, diff, margin, details), p_adj in zip(rows, corrected)
    ]
