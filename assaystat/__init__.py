"""
assaystat: a statistical computation engine for experiment observations.

Laboratory dashboards that record individuals, reproduction events and
infection status end up asking the same handful of questions: do infection
rates differ between treatments, does offspring count depend on strain and
diet, do survival curves diverge. assaystat answers them with a small,
self-contained engine: classical hypothesis tests built on hand-implemented
special functions, plus multiple-testing corrections for their post-hoc
comparisons.

The engine is pure and stateless. Every function maps numeric inputs to a
frozen result record carrying the statistic, the p-value, a significance
flag and human-readable warnings; identical inputs always give identical
results.

Example
-------
>>> import assaystat
>>> result = assaystat.chi_square_test([[10, 0], [0, 10]])
>>> result.df, result.significant
(1, True)
>>> len(result.warnings) > 0
True
"""

from assaystat.core.errors import AssaystatError, InvalidInputError
from assaystat.core.settings import DEFAULT_SETTINGS, AnalysisSettings
from assaystat.stats.common.correction import correct_p_values
from assaystat.stats.schemes.anova import multi_way_anova, one_way_anova, tukey_hsd
from assaystat.stats.schemes.contingency import (
    chi_square_test,
    fisher_exact_test,
    proportions_z_test,
)
from assaystat.stats.schemes.survival import log_rank_test

__all__ = [
    "AnalysisSettings",
    "AssaystatError",
    "DEFAULT_SETTINGS",
    "InvalidInputError",
    "chi_square_test",
    "correct_p_values",
    "fisher_exact_test",
    "log_rank_test",
    "multi_way_anova",
    "one_way_anova",
    "proportions_z_test",
    "tukey_hsd",
]
