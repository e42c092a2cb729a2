"""
assaystat.core.settings
=======================

Configuration shared by the hypothesis tests.

Examples
--------
>>> from assaystat.core.settings import AnalysisSettings
>>> strict = AnalysisSettings(alpha=0.01)
>>> strict.validate()
>>> strict.with_alpha(None).alpha
0.01
>>> strict.with_alpha(0.1).alpha
0.1
"""

from __future__ import annotations
import math
from dataclasses import dataclass, replace
from typing import Optional

from assaystat.core.errors import InvalidInputError
from assaystat.core.names import ANOVA_P_POLICIES


@dataclass(frozen=True)
class AnalysisSettings:
    """
    Thresholds and fallback policies used across the engine.

    Attributes
    ----------
    alpha : float, default=0.05
        Significance threshold for the `significant` flag of every result
    min_expected_count : float, default=5.0
        Chi-square advisory threshold; a minimum expected count at or below
        it adds a warning recommending an exact test
    ci_critical_value : float, default=1.96
        Normal multiplier for the confidence interval of a difference in
        proportions
    ci_level : float, default=0.95
        Family-wise confidence level of Tukey HSD intervals
    anova_p_policy : {"legacy", "undefined"}, default="undefined"
        What ANOVA reports when the p-value comes out non-finite:
        - "legacy": 0.001 when F exceeds `fallback_f_threshold`, else 0.5
        - "undefined": p-value 1.0 and the result is flagged as undefined
    fallback_f_threshold : float, default=10.0
        F above which the legacy policy reports 0.001
    """

    alpha: float = 0.05
    min_expected_count: float = 5.0
    ci_critical_value: float = 1.96
    ci_level: float = 0.95
    anova_p_policy: str = "undefined"
    fallback_f_threshold: float = 10.0

    def validate(self) -> None:
        """Validate settings values."""
        if not (0 < self.alpha < 1):
            raise InvalidInputError(f"alpha must be in (0, 1), got {self.alpha}")
        if not (0 < self.ci_level < 1):
            raise InvalidInputError(
                f"ci_level must be in (0, 1), got {self.ci_level}"
            )
        if self.min_expected_count < 0:
            raise InvalidInputError("min_expected_count cannot be negative")
        if not math.isfinite(self.ci_critical_value) or self.ci_critical_value <= 0:
            raise InvalidInputError("ci_critical_value must be a positive number")
        if self.anova_p_policy not in ANOVA_P_POLICIES:
            raise InvalidInputError(
                f"anova_p_policy must be one of {ANOVA_P_POLICIES}, "
                f"got {self.anova_p_policy!r}"
            )

    def with_alpha(self, alpha: Optional[float]) -> "AnalysisSettings":
        """Return a copy with `alpha` overridden (unchanged when None)."""
        if alpha is None:
            return self
        updated = replace(self, alpha=alpha)
        updated.validate()
        return updated


DEFAULT_SETTINGS = AnalysisSettings()


def resolve_settings(
    settings: Optional[AnalysisSettings], alpha: Optional[float] = None
) -> AnalysisSettings:
    """Return validated settings, falling back to `DEFAULT_SETTINGS`."""
    resolved = settings if settings is not None else DEFAULT_SETTINGS
    resolved.validate()
    return resolved.with_alpha(alpha)
