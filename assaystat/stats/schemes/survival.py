"""
assaystat.stats.schemes.survival
================================

Survival comparisons on right-censored follow-up times.

- `log_rank_test`: compares event hazards across named groups
- `kaplan_meier` / `kaplan_meier_by_group`: product-limit survival curves

Records may be given as `SurvivalRecord`, `(time, status)` tuples or
`{"time": ..., "status": ...}` mappings; `status` is truthy for an event
(death) and falsy for a censored observation. Censored records stay in the
risk set up to and including their time but are never counted as events.

Examples
--------
>>> from assaystat.stats.schemes.survival import kaplan_meier
>>> [(p.time, p.survival) for p in kaplan_meier([(1, True), (2, False), (3, True)])]
[(0.0, 1.0), (1.0, 0.6666666666666667), (3.0, 0.0)]
"""

from __future__ import annotations
import math
from typing import Any, Dict, List, Mapping, Sequence, Optional, Union

from assaystat.core.errors import InvalidInputError, record_warning, require
from assaystat.core.names import TestName
from assaystat.core.results import LogRankResult, SurvivalPoint, SurvivalRecord
from assaystat.core.settings import AnalysisSettings, resolve_settings
from assaystat.stats.common.distributions import chi_square_sf
from assaystat.utils.logging import get_logger

logger = get_logger(__name__)

RecordLike = Union[SurvivalRecord, Sequence[Any], Mapping[str, Any]]


def as_survival_record(record: RecordLike) -> SurvivalRecord:
    """Normalise a record-like value into a validated SurvivalRecord."""
    if isinstance(record, SurvivalRecord):
        time, status = record.time, record.status
    elif isinstance(record, Mapping):
        try:
            time, status = record["time"], record["status"]
        except KeyError as exc:
            raise InvalidInputError(f"Survival record is missing {exc}") from exc
    else:
        try:
            time, status = record
        except (TypeError, ValueError) as exc:
            raise InvalidInputError(
                f"Survival record must be a (time, status) pair, got {record!r}"
            ) from exc
    time = float(time)
    if not math.isfinite(time) or time < 0:
        raise InvalidInputError(f"Survival time must be finite and >= 0, got {time}")
    return SurvivalRecord(time=time, status=bool(status))


def _validated_groups(
    groups: Mapping[str, Sequence[RecordLike]]
) -> Dict[str, List[SurvivalRecord]]:
    out: Dict[str, List[SurvivalRecord]] = {}
    for name, records in groups.items():
        parsed = [as_survival_record(r) for r in records]
        require(len(parsed) > 0, f"Group {name!r} has no survival records")
        out[name] = parsed
    return out


def log_rank_test(
    groups: Mapping[str, Sequence[RecordLike]],
    *,
    settings: Optional[AnalysisSettings] = None,
    alpha: Optional[float] = None,
) -> LogRankResult:
    """
    Log-rank test for equality of survival across groups.

    At every distinct event time t, a group's expected events are
    d_t * n_gt / n_t, where d_t counts events at t over all groups and n_gt
    counts the group's records with time >= t. Observed and expected events
    are summed over time, and the statistic

        sum_g (O_g - E_g)^2 / E_g

    runs over every group except the last, which is determined by the others.
    The statistic is referred to a chi-square with (groups - 1) degrees of
    freedom.

    Args:
        groups: `name -> survival records`, at least two non-empty groups

    Returns:
        LogRankResult with per-group observed and expected event counts
    """
    cfg = resolve_settings(settings, alpha)
    data = _validated_groups(groups)
    require(len(data) >= 2, f"Log-rank test needs at least two groups, got {len(data)}")
    names = list(data)
    df = len(names) - 1

    event_times = sorted({r.time for records in data.values() for r in records if r.status})
    observed = {g: 0.0 for g in names}
    expected = {g: 0.0 for g in names}

    for t in event_times:
        at_risk = {g: sum(1 for r in data[g] if r.time >= t) for g in names}
        deaths = {g: sum(1 for r in data[g] if r.status and r.time == t) for g in names}
        n_t = sum(at_risk.values())
        d_t = sum(deaths.values())
        for g in names:
            observed[g] += deaths[g]
            expected[g] += d_t * at_risk[g] / n_t

    warnings: List[str] = []
    statistic = 0.0
    if not event_times:
        record_warning(
            warnings, "No events observed in any group; statistic set to 0.", logger
        )
    for g in names[:-1]:
        if expected[g] > 0:
            statistic += (observed[g] - expected[g]) ** 2 / expected[g]
        elif event_times:
            record_warning(
                warnings,
                f"Group {g!r} has zero expected events and was skipped.",
                logger,
            )

    p_value = chi_square_sf(statistic, df)
    logger.debug("log-rank: X2=%.6g df=%d p=%.6g", statistic, df, p_value)

    return LogRankResult(
        test_name=TestName.LOG_RANK.value,
        statistic=statistic,
        p_value=p_value,
        df=df,
        significant=p_value < cfg.alpha,
        alpha=cfg.alpha,
        warnings=tuple(warnings),
        observed=observed,
        expected=expected,
    )


def kaplan_meier(records: Sequence[RecordLike]) -> List[SurvivalPoint]:
    """
    Kaplan-Meier product-limit estimate for one group.

    Returns:
        The curve as SurvivalPoint steps: (0, 1.0) with the full group at
        risk, then one point per distinct event time with the survival after
        that time's events.
    """
    parsed = [as_survival_record(r) for r in records]
    require(len(parsed) > 0, "Kaplan-Meier estimate needs at least one record")
    curve = [SurvivalPoint(time=0.0, survival=1.0, at_risk=len(parsed), events=0)]
    survival = 1.0
    for t in sorted({r.time for r in parsed if r.status}):
        at_risk = sum(1 for r in parsed if r.time >= t)
        events = sum(1 for r in parsed if r.status and r.time == t)
        survival *= 1.0 - events / at_risk
        curve.append(SurvivalPoint(time=t, survival=survival, at_risk=at_risk, events=events))
    return curve


def kaplan_meier_by_group(
    groups: Mapping[str, Sequence[RecordLike]]
) -> Dict[str, List[SurvivalPoint]]:
    """Kaplan-Meier curves for every group of a `name -> records` mapping."""
    return {name: kaplan_meier(records) for name, records in groups.items()}
