"""
assaystat.core.names
====================

Typed names shared across the package.

- `TestName`: an Enum of the hypothesis tests the engine computes.
- `CorrectionMethod`, `PairwiseTest`, `EffectKind`, `AnovaPPolicy`: `Literal`
  selectors accepted by the public functions.
- `GroupName`: NewType wrapper for clarity.

Examples
--------
>>> from assaystat.core.names import TestName, CORRECTION_METHODS
>>> TestName.CHI_SQUARE.value
'Chi-square test of independence'
>>> "fdr" in CORRECTION_METHODS
True
"""

from __future__ import annotations
from enum import Enum
from typing import Literal, NewType, Tuple


class TestName(str, Enum):
    """Hypothesis tests computed by the engine.

    - CHI_SQUARE: Pearson chi-square test of independence
    - FISHER_EXACT: Fisher's exact test on a 2x2 table
    - Z_TEST: two-sample z-test for proportions
    - ONE_WAY_ANOVA / MULTI_WAY_ANOVA: analysis of variance
    - TUKEY_HSD: Tukey honestly significant difference post-hoc comparison
    - LOG_RANK: log-rank survival test
    """

    __test__ = False  # keep pytest from collecting the enum

    CHI_SQUARE = "Chi-square test of independence"
    FISHER_EXACT = "Fisher's exact test"
    Z_TEST = "Two-sample z-test for proportions"
    ONE_WAY_ANOVA = "One-way ANOVA"
    MULTI_WAY_ANOVA = "Multi-way ANOVA"
    TUKEY_HSD = "Tukey HSD"
    LOG_RANK = "Log-rank test"


GroupName = NewType("GroupName", str)

CorrectionMethod = Literal["bonferroni", "holm", "fdr", "none"]
CORRECTION_METHODS: Tuple[str, ...] = ("bonferroni", "holm", "fdr", "none")

PairwiseTest = Literal["z-test", "fisher", "chi-square"]
PAIRWISE_TESTS: Tuple[str, ...] = ("z-test", "fisher", "chi-square")

EffectKind = Literal["main", "interaction"]

AnovaPPolicy = Literal["legacy", "undefined"]
ANOVA_P_POLICIES: Tuple[str, ...] = ("legacy", "undefined")
