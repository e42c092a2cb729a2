"""
Pytest configuration and fixtures.
"""

from __future__ import annotations

import itertools
import logging

import pytest

from assaystat.core.settings import AnalysisSettings


@pytest.fixture
def strict_settings():
    """Settings with a 1% significance threshold."""
    return AnalysisSettings(alpha=0.01)


@pytest.fixture
def legacy_settings():
    """Settings using the legacy ANOVA p-value fallback."""
    return AnalysisSettings(anova_p_policy="legacy")


@pytest.fixture(scope="session")
def infection_counts():
    """Infected / total individuals per treatment."""
    return {"control": (12, 40), "low dose": (20, 40), "high dose": (31, 40)}


@pytest.fixture(scope="session")
def offspring_by_strain():
    """Offspring counts per strain, with a clear difference between strains."""
    return {
        "wild type": [4.1, 5.2, 6.3, 5.0],
        "mutant": [6.8, 7.1, 7.9, 8.2, 7.5],
        "hybrid": [5.5, 6.0, 5.8],
    }


@pytest.fixture(scope="session")
def strain_diet_rows():
    """Balanced 2 x 2 design with two replicates per cell."""
    data = [
        ("A", "low", 3.0), ("A", "low", 4.0), ("A", "high", 6.0), ("A", "high", 7.0),
        ("B", "low", 5.0), ("B", "low", 6.0), ("B", "high", 9.0), ("B", "high", 11.0),
    ]
    return [{"strain": s, "diet": d, "value": v} for s, d, v in data]


@pytest.fixture(scope="session")
def three_factor_rows():
    """Balanced 2 x 2 x 2 design with two replicates per cell."""
    rows = []
    for a, b, c in itertools.product((0, 1), repeat=3):
        for rep in (-1, 1):
            noise = 0.1 * (a + 2 * b + 4 * c + 1) * rep
            value = 10 + 2 * a + 3 * b - c + 1.5 * a * b * c + noise
            rows.append({"strain": f"s{a}", "diet": f"d{b}", "temp": f"t{c}", "value": value})
    return rows


@pytest.fixture(scope="session")
def survival_groups():
    """One group with early deaths and one group censored throughout."""
    return {
        "exposed": [(2, True), (3, True), (4, True), (5, False)],
        "control": [(6, False), (7, False), (8, False), (9, False)],
    }


@pytest.fixture
def reset_package_logger():
    """Restore the package logger after a test attaches handlers."""
    package_logger = logging.getLogger("assaystat")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    yield package_logger
    package_logger.handlers[:] = handlers
    package_logger.setLevel(level)
