"""
assaystat.core.errors
=====================

Error taxonomy of the engine.

Only malformed input raises. Numeric degeneracies (zero variance, zero
standard error, non-finite p-values) and domain advisories (low expected
counts, skipped interaction terms) never raise: they are reported as warning
strings on the returned result.
"""

from __future__ import annotations
import logging
from typing import List


class AssaystatError(Exception):
    """Base class for all errors raised by assaystat."""


class InvalidInputError(AssaystatError, ValueError):
    """Input data cannot define the requested computation.

    Raised for mismatched table dimensions, empty groups, degrees of
    freedom <= 0, factor counts outside 1-3, unknown method names and
    p-values outside [0, 1].
    """


def require(condition: bool, message: str) -> None:
    """Raise `InvalidInputError` with `message` unless `condition` holds."""
    if not condition:
        raise InvalidInputError(message)


def record_warning(warnings: List[str], message: str, logger: logging.Logger) -> None:
    """Append a non-fatal diagnostic to `warnings` and log it."""
    warnings.append(message)
    logger.info(message)
