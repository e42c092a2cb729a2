"""
assaystat.stats.schemes.anova
=============================

Analysis of variance on grouped measurements.

- `one_way_anova`: between/within decomposition for named groups
- `multi_way_anova`: main effects and interactions for up to three factors
- `tukey_hsd`: pairwise post-hoc comparisons after a one-way ANOVA
- `group_statistics`: per-group size, mean and standard deviation

Mathematical Background
-----------------------
With group means m_i, sizes n_i and grand mean M over N observations:
    SS_between = sum n_i (m_i - M)^2,      df = k - 1
    SS_within  = sum_i sum_j (x_ij - m_i)^2, df = N - k
    F = MS_between / MS_within,  eta^2 = SS_between / SS_total

Multi-way effects are computed from weighted cell means: main effects as
one-way SS against M, two-way interactions as
    sum n_ab (m_ab - m_a - m_b + M)^2,
and the three-way interaction as the three-way cell SS minus every
lower-order effect SS.

p-value fallback
----------------
If F or its p-value comes out non-finite, the default `undefined` policy
reports a p-value of 1.0 and flags the result. The `legacy` policy instead
reports 0.001 when F exceeds `fallback_f_threshold` and 0.5 otherwise; this
is a safety clamp, not a statistical result. Both add a warning.

Examples
--------
>>> from assaystat.stats.schemes.anova import one_way_anova
>>> result = one_way_anova({"a": [1.0, 2.0, 3.0], "b": [4.0, 5.0, 6.0]})
>>> result.df
(1, 4)
>>> result.ss_between
13.5
"""

from __future__ import annotations
import math
from itertools import combinations
from typing import Any, Dict, Hashable, List, Mapping, Optional, Sequence, Tuple

from assaystat.core.errors import InvalidInputError, record_warning, require
from assaystat.core.names import TestName
from assaystat.core.results import (
    EffectRecord,
    GroupStats,
    MultiWayAnovaResult,
    OneWayAnovaResult,
    PairwiseComparison,
)
from assaystat.core.settings import AnalysisSettings, resolve_settings
from assaystat.stats.common.distributions import f_sf, tukey_q_cdf, tukey_q_critical
from assaystat.utils.logging import get_logger

logger = get_logger(__name__)

MAX_FACTORS = 3
SS_TOLERANCE = 1e-9


def _validated_groups(groups: Mapping[str, Sequence[float]]) -> Dict[str, List[float]]:
    values: Dict[str, List[float]] = {}
    for name, samples in groups.items():
        data = [float(v) for v in samples]
        require(len(data) > 0, f"Group {name!r} has no measurements")
        values[name] = data
    return values


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def _sum_sq_dev(values: Sequence[float], center: float) -> float:
    return sum((v - center) ** 2 for v in values)


def group_statistics(groups: Mapping[str, Sequence[float]]) -> Tuple[GroupStats, ...]:
    """Size, mean and sample standard deviation (0 for n < 2) per group."""
    stats = []
    for name, data in _validated_groups(groups).items():
        n = len(data)
        mean = _mean(data)
        std = math.sqrt(_sum_sq_dev(data, mean) / (n - 1)) if n > 1 else 0.0
        stats.append(GroupStats(name=name, n=n, mean=mean, std=std))
    return tuple(stats)


def _guard_p_value(
    f_statistic: float,
    p_value: float,
    cfg: AnalysisSettings,
    warnings: List[str],
    label: str,
) -> Tuple[float, bool]:
    """Apply the configured fallback when F or its p-value is not usable.

    Returns the p-value to report and whether the result is undefined.
    """
    if math.isfinite(f_statistic) and math.isfinite(p_value) and 0.0 <= p_value <= 1.0:
        return p_value, False
    if cfg.anova_p_policy == "undefined":
        record_warning(
            warnings,
            f"{label}: p-value undefined (non-finite F or insufficient information); "
            "reported as 1.0.",
            logger,
        )
        return 1.0, True
    fallback = 0.001 if f_statistic > cfg.fallback_f_threshold else 0.5
    record_warning(
        warnings,
        f"{label}: non-finite p-value replaced by fallback {fallback} "
        f"(F {'>' if fallback == 0.001 else '<='} {cfg.fallback_f_threshold:g}).",
        logger,
    )
    return fallback, False


def one_way_anova(
    groups: Mapping[str, Sequence[float]],
    *,
    settings: Optional[AnalysisSettings] = None,
    alpha: Optional[float] = None,
) -> OneWayAnovaResult:
    """
    One-way analysis of variance.

    Args:
        groups: `name -> measurements`; at least two non-empty groups and
            more observations than groups
        settings: Thresholds and the p-value fallback policy
        alpha: Override of `settings.alpha`

    Returns:
        OneWayAnovaResult; `statistic` is F and `df` is (k - 1, N - k).
        F is 0 when MS_within is 0.
    """
    cfg = resolve_settings(settings, alpha)
    data = _validated_groups(groups)
    k = len(data)
    require(k >= 2, f"One-way ANOVA needs at least two groups, got {k}")
    n_total = sum(len(v) for v in data.values())
    df_between = k - 1
    df_within = n_total - k
    if df_within <= 0:
        raise InvalidInputError(
            f"One-way ANOVA needs more observations than groups (N={n_total}, k={k})"
        )

    all_values = [v for values in data.values() for v in values]
    grand_mean = _mean(all_values)
    means = {name: _mean(values) for name, values in data.items()}

    ss_between = sum(len(data[g]) * (means[g] - grand_mean) ** 2 for g in data)
    ss_within = sum(_sum_sq_dev(data[g], means[g]) for g in data)
    ss_total = _sum_sq_dev(all_values, grand_mean)

    ms_between = ss_between / df_between
    ms_within = ss_within / df_within

    warnings: List[str] = []
    if ms_within == 0:
        f_statistic = 0.0
        record_warning(
            warnings, "Within-group variance is zero; F set to 0.", logger
        )
    else:
        f_statistic = ms_between / ms_within

    p_value, undefined = _guard_p_value(
        f_statistic, f_sf(f_statistic, df_between, df_within), cfg, warnings, "ANOVA"
    )
    eta_squared = ss_between / ss_total if ss_total > 0 else 0.0
    logger.debug(
        "one-way ANOVA: F(%d, %d)=%.6g p=%.6g", df_between, df_within, f_statistic, p_value
    )

    return OneWayAnovaResult(
        test_name=TestName.ONE_WAY_ANOVA.value,
        statistic=f_statistic,
        p_value=p_value,
        df=(df_between, df_within),
        significant=p_value < cfg.alpha,
        alpha=cfg.alpha,
        warnings=tuple(warnings),
        ss_between=ss_between,
        ss_within=ss_within,
        ss_total=ss_total,
        df_between=df_between,
        df_within=df_within,
        ms_between=ms_between,
        ms_within=ms_within,
        eta_squared=eta_squared,
        group_stats=group_statistics(data),
        undefined=undefined,
    )


def tukey_hsd(
    groups: Mapping[str, Sequence[float]],
    ms_within: float,
    df_within: int,
    *,
    settings: Optional[AnalysisSettings] = None,
    alpha: Optional[float] = None,
) -> List[PairwiseComparison]:
    """
    Tukey HSD comparisons for every unordered pair of groups.

    Args:
        groups: The groups of the preceding one-way ANOVA
        ms_within: Within-group mean square of that ANOVA
        df_within: Within-group degrees of freedom of that ANOVA

    Returns:
        PairwiseComparison records with q = |m1 - m2| / SE,
        SE = sqrt(MS_within (1/n1 + 1/n2)), and p = 1 - Q_cdf(q, k, df)
        where k counts all groups, not only the pair. The effect size is
        m1 - m2 with a `settings.ci_level` interval; the p-value already
        accounts for the family, so the corrected p-value equals it.

    Note:
        The studentized range CDF is the normal-approximation surrogate of
        `tukey_q_cdf`.
    """
    cfg = resolve_settings(settings, alpha)
    data = _validated_groups(groups)
    k = len(data)
    require(k >= 2, f"Tukey HSD needs at least two groups, got {k}")
    require(df_within > 0, f"df_within must be positive, got {df_within}")
    require(ms_within >= 0, f"ms_within cannot be negative, got {ms_within}")

    q_critical = tukey_q_critical(1.0 - cfg.ci_level, k, df_within)
    comparisons = []
    for g1, g2 in combinations(data, 2):
        n1, n2 = len(data[g1]), len(data[g2])
        diff = _mean(data[g1]) - _mean(data[g2])
        se = math.sqrt(ms_within * (1.0 / n1 + 1.0 / n2))
        details: Dict[str, Any] = {"standard_error": se, "q_critical": q_critical}
        if se > 0:
            q = abs(diff) / se
            p_value = min(max(1.0 - tukey_q_cdf(q, k, df_within), 0.0), 1.0)
        else:
            q = 0.0
            p_value = 1.0
            details["warnings"] = ["Standard error is zero; q set to 0 and p-value to 1."]
        comparisons.append(
            PairwiseComparison(
                group1=g1,
                group2=g2,
                test_name=TestName.TUKEY_HSD.value,
                statistic=q,
                p_value=p_value,
                p_value_corrected=p_value,
                effect_size=diff,
                ci_lower=diff - q_critical * se,
                ci_upper=diff + q_critical * se,
                significant=p_value < cfg.alpha,
                details=details,
            )
        )
    return comparisons


# --- Multi-way ANOVA ---


def _cells(
    keys: Sequence[Tuple[Hashable, ...]], values: Sequence[float]
) -> Dict[Tuple[Hashable, ...], Tuple[int, float]]:
    """Map each cell key to (size, mean)."""
    sums: Dict[Tuple[Hashable, ...], List[float]] = {}
    for key, v in zip(keys, values):
        acc = sums.setdefault(key, [0, 0.0])
        acc[0] += 1
        acc[1] += v
    return {key: (int(n), s / n) for key, (n, s) in sums.items()}


def multi_way_anova(
    rows: Sequence[Mapping[str, Any]],
    factors: Sequence[str],
    value_key: str = "value",
    *,
    settings: Optional[AnalysisSettings] = None,
    alpha: Optional[float] = None,
) -> MultiWayAnovaResult:
    """
    Multi-way ANOVA with all interactions for one to three factors.

    Args:
        rows: Observations; each maps every factor name to its level and
            `value_key` to the measurement
        factors: One to three distinct factor names
        value_key: Key of the measurement in each row

    Returns:
        MultiWayAnovaResult with main effects first, then two-way and
        three-way interactions. Each effect is tested against MS_error with
        its own F, p-value and eta-squared (effect SS / SS_total).

    Note:
        Terms with zero degrees of freedom (a factor or factor combination
        with a single level) are skipped with a warning. In unbalanced
        designs the decomposition is not orthogonal: negative three-way or
        error SS are clamped to 0 with a warning.
    """
    cfg = resolve_settings(settings, alpha)
    factors = tuple(factors)
    if not (1 <= len(factors) <= MAX_FACTORS):
        raise InvalidInputError(
            f"Multi-way ANOVA supports 1 to {MAX_FACTORS} factors, got {len(factors)}"
        )
    require(len(set(factors)) == len(factors), "Factor names must be distinct")
    require(len(rows) > 0, "Multi-way ANOVA needs at least one observation")

    values: List[float] = []
    levels: Dict[str, List[Hashable]] = {f: [] for f in factors}
    for i, row in enumerate(rows):
        missing = [key for key in (*factors, value_key) if key not in row]
        if missing:
            raise InvalidInputError(f"Row {i} is missing {missing}")
        values.append(float(row[value_key]))
        for f in factors:
            levels[f].append(row[f])

    n = len(values)
    grand_mean = _mean(values)
    ss_total = _sum_sq_dev(values, grand_mean)
    n_levels = {f: len(set(levels[f])) for f in factors}

    warnings: List[str] = []
    marginal: Dict[str, Dict[Tuple[Hashable, ...], Tuple[int, float]]] = {}
    ss: Dict[Tuple[str, ...], float] = {}
    dfs: Dict[Tuple[str, ...], int] = {}

    for f in factors:
        cells = _cells([(lvl,) for lvl in levels[f]], values)
        marginal[f] = cells
        ss[(f,)] = sum(size * (mean - grand_mean) ** 2 for size, mean in cells.values())
        dfs[(f,)] = n_levels[f] - 1

    for fa, fb in combinations(factors, 2):
        cells = _cells(list(zip(levels[fa], levels[fb])), values)
        ss[(fa, fb)] = sum(
            size
            * (mean - marginal[fa][(la,)][1] - marginal[fb][(lb,)][1] + grand_mean) ** 2
            for (la, lb), (size, mean) in cells.items()
        )
        dfs[(fa, fb)] = (n_levels[fa] - 1) * (n_levels[fb] - 1)

    if len(factors) == 3:
        cells = _cells(list(zip(*(levels[f] for f in factors))), values)
        cell_ss = sum(size * (mean - grand_mean) ** 2 for size, mean in cells.values())
        three_way = cell_ss - sum(ss.values())
        if three_way < 0:
            if three_way < -SS_TOLERANCE * max(ss_total, 1.0):
                record_warning(
                    warnings,
                    f"Three-way interaction SS was negative ({three_way:.4g}) in an "
                    "unbalanced design; clamped to 0.",
                    logger,
                )
            three_way = 0.0
        ss[factors] = three_way
        dfs[factors] = (
            (n_levels[factors[0]] - 1) * (n_levels[factors[1]] - 1) * (n_levels[factors[2]] - 1)
        )

    modeled = []
    for term in ss:
        if dfs[term] <= 0:
            record_warning(
                warnings,
                f"Term {' x '.join(term)} has zero degrees of freedom and was skipped.",
                logger,
            )
            continue
        modeled.append(term)

    ss_error = ss_total - sum(ss[t] for t in modeled)
    if ss_error < 0:
        if ss_error < -SS_TOLERANCE * max(ss_total, 1.0):
            record_warning(
                warnings,
                f"Error SS was negative ({ss_error:.4g}); clamped to 0.",
                logger,
            )
        ss_error = 0.0
    df_error = n - sum(dfs[t] for t in modeled) - 1
    if df_error <= 0:
        raise InvalidInputError(
            f"Not enough observations for the model: error df = {df_error} "
            f"(N={n}, model df={sum(dfs[t] for t in modeled)})"
        )
    ms_error = ss_error / df_error
    if ms_error == 0:
        record_warning(warnings, "Error mean square is zero; F set to 0.", logger)

    effects = []
    for term in modeled:
        ms = ss[term] / dfs[term]
        f_statistic = ms / ms_error if ms_error > 0 else 0.0
        p_value, _ = _guard_p_value(
            f_statistic,
            f_sf(f_statistic, dfs[term], df_error),
            cfg,
            warnings,
            " x ".join(term),
        )
        effects.append(
            EffectRecord(
                factors=term,
                kind="main" if len(term) == 1 else "interaction",
                ss=ss[term],
                df=dfs[term],
                ms=ms,
                f_statistic=f_statistic,
                p_value=p_value,
                eta_squared=ss[term] / ss_total if ss_total > 0 else 0.0,
                significant=p_value < cfg.alpha,
            )
        )
    logger.debug(
        "%d-way ANOVA: %d effects, df_error=%d", len(factors), len(effects), df_error
    )

    return MultiWayAnovaResult(
        factors=factors,
        effects=tuple(effects),
        ss_total=ss_total,
        ss_error=ss_error,
        df_error=df_error,
        ms_error=ms_error,
        n=n,
        alpha=cfg.alpha,
        warnings=tuple(warnings),
    )
