"""
assaystat.api.analysis
======================

Facade combining a global test with its post-hoc follow-up.

The test to run is always chosen by the caller; nothing here inspects the
data to pick a different procedure.

Examples
--------
>>> from assaystat.api.analysis import compare_proportions
>>> outcome = compare_proportions(
...     {"control": (12, 40), "low dose": (20, 40), "high dose": (31, 40)},
...     test="z-test",
...     correction="holm",
... )
>>> outcome.global_test.df
2
>>> [g.proportion for g in outcome.groups]
[0.3, 0.5, 0.775]
"""

from __future__ import annotations
from typing import Mapping, Optional, Sequence

from assaystat.core.errors import InvalidInputError, require
from assaystat.core.names import PAIRWISE_TESTS
from assaystat.core.results import (
    MeasurementComparison,
    ProportionComparison,
    TestResult,
)
from assaystat.core.settings import AnalysisSettings, resolve_settings
from assaystat.stats.schemes.anova import one_way_anova, tukey_hsd
from assaystat.stats.schemes.contingency import (
    CountTotal,
    chi_square_test,
    fisher_exact_test,
    group_proportions,
    pairwise_proportion_tests,
    proportions_z_test,
)
from assaystat.utils.logging import get_logger

logger = get_logger(__name__)


def compare_proportions(
    groups: Mapping[str, CountTotal],
    test: str = "z-test",
    correction: str = "fdr",
    *,
    settings: Optional[AnalysisSettings] = None,
    alpha: Optional[float] = None,
) -> ProportionComparison:
    """
    Compare success proportions across two or more groups.

    Parameters
    ----------
    groups : mapping
        `name -> (successes, total)`
    test : {"z-test", "fisher", "chi-square"}, default="z-test"
        Test for a two-group comparison and for every pair when there are
        more groups
    correction : {"bonferroni", "holm", "fdr", "none"}, default="fdr"
        Correction applied to the pairwise p-values

    Returns
    -------
    ProportionComparison
        With two groups, `global_test` is `test` on the pair and there are
        no pairwise rows. With more groups, `global_test` is the chi-square
        test on the k x 2 table, and pairwise comparisons follow only when
        it is significant.
    """
    cfg = resolve_settings(settings, alpha)
    if test not in PAIRWISE_TESTS:
        raise InvalidInputError(
            f"Unknown test: {test!r}; expected one of {PAIRWISE_TESTS}"
        )
    summaries = group_proportions(groups)
    require(len(summaries) >= 2, "Comparing proportions needs at least two groups")

    if len(summaries) == 2:
        g1, g2 = summaries
        global_test: TestResult
        if test == "z-test":
            global_test = proportions_z_test(g1.count, g1.total, g2.count, g2.total, settings=cfg)
        elif test == "fisher":
            global_test = fisher_exact_test(
                g1.count, g1.total - g1.count, g2.count, g2.total - g2.count, settings=cfg
            )
        else:
            global_test = chi_square_test(
                [[g1.count, g1.total - g1.count], [g2.count, g2.total - g2.count]],
                settings=cfg,
            )
        return ProportionComparison(global_test=global_test, groups=summaries)

    table = [[g.count, g.total - g.count] for g in summaries]
    global_test = chi_square_test(table, settings=cfg)
    pairwise = ()
    if global_test.significant:
        pairwise = tuple(
            pairwise_proportion_tests(groups, test, correction, settings=cfg)
        )
    logger.debug(
        "compare_proportions: %d groups, global p=%.6g, %d pairwise",
        len(summaries),
        global_test.p_value,
        len(pairwise),
    )
    return ProportionComparison(
        global_test=global_test,
        groups=summaries,
        pairwise=pairwise,
        correction=correction if pairwise else "none",
    )


def compare_measurements(
    groups: Mapping[str, Sequence[float]],
    *,
    settings: Optional[AnalysisSettings] = None,
    alpha: Optional[float] = None,
) -> MeasurementComparison:
    """
    One-way ANOVA across groups, followed by Tukey HSD when significant.

    Parameters
    ----------
    groups : mapping
        `name -> measurements`

    Returns
    -------
    MeasurementComparison
        The ANOVA result (with per-group statistics) and, when the ANOVA is
        significant, the Tukey HSD comparisons of every pair
    """
    cfg = resolve_settings(settings, alpha)
    anova = one_way_anova(groups, settings=cfg)
    post_hoc = ()
    if anova.significant:
        post_hoc = tuple(
            tukey_hsd(groups, anova.ms_within, anova.df_within, settings=cfg)
        )
    return MeasurementComparison(anova=anova, post_hoc=post_hoc)
