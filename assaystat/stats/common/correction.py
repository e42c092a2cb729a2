"""
assaystat.stats.common.correction
=================================

Multiple-testing corrections for families of raw p-values.

The input order is preserved in the output: corrections only re-order
internally to rank the p-values. For any input,
``bonferroni(p)[i] >= holm(p)[i] >= benjamini_hochberg(p)[i]``.

Examples
--------
>>> from assaystat.stats.common.correction import bonferroni, correct_p_values
>>> bonferroni([0.01, 0.02])
[0.02, 0.04]
>>> correct_p_values([0.3, 0.7], "none")
[0.3, 0.7]
"""

from __future__ import annotations
import math
from typing import List, Sequence

from assaystat.core.errors import InvalidInputError
from assaystat.core.names import CORRECTION_METHODS
from assaystat.utils.logging import get_logger

logger = get_logger(__name__)


def _validated(p_values: Sequence[float]) -> List[float]:
    values = [float(p) for p in p_values]
    for p in values:
        if math.isnan(p) or not (0.0 <= p <= 1.0):
            raise InvalidInputError(f"p-values must lie in [0, 1], got {p}")
    return values


def _ascending_order(values: Sequence[float]) -> List[int]:
    """Indices sorting `values` ascending; ties keep their input order."""
    return sorted(range(len(values)), key=lambda i: values[i])


def bonferroni(p_values: Sequence[float]) -> List[float]:
    """Bonferroni correction: min(p * n, 1)."""
    values = _validated(p_values)
    n = len(values)
    return [min(p * n, 1.0) for p in values]


def holm(p_values: Sequence[float]) -> List[float]:
    """Holm step-down correction.

    The i-th smallest p-value (0-based) is multiplied by n - i and clamped to
    1, then a running maximum enforces monotonic non-decrease from the
    smallest to the largest p-value.
    """
    values = _validated(p_values)
    n = len(values)
    order = _ascending_order(values)
    corrected = [0.0] * n
    running = 0.0
    for i, idx in enumerate(order):
        adjusted = min(values[idx] * (n - i), 1.0)
        running = max(running, adjusted)
        corrected[idx] = running
    return corrected


def benjamini_hochberg(p_values: Sequence[float]) -> List[float]:
    """Benjamini-Hochberg false discovery rate correction.

    The p-value of rank r (1-based, ascending) is multiplied by n / r and
    clamped to 1, then a running minimum enforces monotonic non-increase from
    the largest rank down to the smallest. The largest p-value is therefore
    never adjusted above its raw value.
    """
    values = _validated(p_values)
    n = len(values)
    order = _ascending_order(values)
    corrected = [0.0] * n
    running = 1.0
    for i in range(n - 1, -1, -1):
        idx = order[i]
        rank = i + 1
        adjusted = min(values[idx] * (n / rank), 1.0)
        running = min(running, adjusted)
        corrected[idx] = running
    return corrected


def correct_p_values(p_values: Sequence[float], method: str = "fdr") -> List[float]:
    """Apply a correction selected by name.

    Args:
        p_values: Raw p-values, in the caller's order
        method: One of "bonferroni", "holm", "fdr" (Benjamini-Hochberg) or
            "none" (identity)

    Returns:
        Corrected p-values in the same order as `p_values`
    """
    m = method.lower()
    if m not in CORRECTION_METHODS:
        raise InvalidInputError(
            f"Unknown correction method: {method!r}; expected one of {CORRECTION_METHODS}"
        )
    logger.debug("Correcting %d p-values with %s", len(p_values), m)
    if m == "bonferroni":
        return bonferroni(p_values)
    if m == "holm":
        return holm(p_values)
    if m == "fdr":
        return benjamini_hochberg(p_values)
    return _validated(p_values)
