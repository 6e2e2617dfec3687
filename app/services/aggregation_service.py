"""
app/services/aggregation_service.py

In-memory aggregation of canonical radio metric records.

Reduction policy
----------------
Every bucket is reduced with the same per-metric rules:

    cume             mean of the positive CUME values (rounded); never summed
    tlh              sum, zeros included
    active_sessions  sum by default; mean when ``ReductionPolicy.AVERAGE``
    tsl              compute_tsl(summed tlh, averaged cume); never reduced directly

Grouping is a single pass over the input with a dictionary keyed by bucket,
so cost is linear in the number of records. Inputs are never mutated; each
bucket yields a new record.

No I/O lives here. Division and rounding belong to ``kpi.radio``.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Sequence

from app.domain.radio_metrics import AggregationPeriod, CanonicalMetricRecord, ReductionPolicy
from kpi.radio import RadioKPIFormula, compute_average_cume, compute_tsl

logger = logging.getLogger(__name__)

UNKNOWN_DIMENSION_VALUE = "Unknown"

DIMENSION_FIELDS: tuple[str, ...] = ("daypart", "device", "station")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class UnsupportedPeriodError(ValueError):
    """
    Raised when a period outside daily/weekly/monthly is requested.
    """


class UnsupportedDimensionError(ValueError):
    """
    Raised when grouping by a field that is not a categorical dimension.
    """


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _coerce_period(period: AggregationPeriod | str) -> AggregationPeriod:
    try:
        return AggregationPeriod(period)
    except ValueError as exc:
        allowed = ", ".join(p.value for p in AggregationPeriod)
        raise UnsupportedPeriodError(
            f"Unsupported period {period!r}. Allowed values: {allowed}."
        ) from exc


def _coerce_policy(policy: ReductionPolicy | str) -> ReductionPolicy:
    try:
        return ReductionPolicy(policy)
    except ValueError as exc:
        allowed = ", ".join(p.value for p in ReductionPolicy)
        raise ValueError(f"Unsupported sessions policy {policy!r}. Allowed values: {allowed}.") from exc


def _utc_day(value: datetime) -> date:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).date()


def period_bucket_start(value: datetime, period: AggregationPeriod | str) -> datetime:
    """
    Return the UTC start of the bucket *value* falls into.

    Weeks start on Sunday; months on the first day of the month.
    """

    resolved = _coerce_period(period)
    day = _utc_day(value)
    if resolved is AggregationPeriod.WEEKLY:
        day = day - timedelta(days=(day.weekday() + 1) % 7)
    elif resolved is AggregationPeriod.MONTHLY:
        day = day.replace(day=1)
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


def _reduce_group(
    group: Sequence[CanonicalMetricRecord],
    *,
    bucket_date: datetime,
    sessions_policy: ReductionPolicy,
    daypart: str | None = None,
    device: str | None = None,
    station: str | None = None,
    hour: int | None = None,
) -> CanonicalMetricRecord:
    average_cume = compute_average_cume(record.cume for record in group)
    total_tlh = math.fsum(record.tlh for record in group)
    total_sessions = math.fsum(record.active_sessions for record in group)
    if sessions_policy is ReductionPolicy.AVERAGE:
        active_sessions = total_sessions / len(group)
    else:
        active_sessions = total_sessions

    return CanonicalMetricRecord(
        cume=average_cume,
        tlh=total_tlh,
        tsl=compute_tsl(total_tlh, average_cume),
        active_sessions=active_sessions,
        date=bucket_date,
        daypart=daypart,
        device=device,
        station=station,
        hour=hour,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def aggregate_by_period(
    records: Iterable[CanonicalMetricRecord],
    period: AggregationPeriod | str,
    *,
    sessions_policy: ReductionPolicy | str = ReductionPolicy.SUM,
) -> list[CanonicalMetricRecord]:
    """
    Reduce *records* to one record per daily, weekly or monthly bucket.

    Output is sorted ascending by bucket start date. Raises
    :class:`UnsupportedPeriodError` for any other period.
    """

    resolved = _coerce_period(period)
    policy = _coerce_policy(sessions_policy)

    groups: dict[datetime, list[CanonicalMetricRecord]] = {}
    for record in records:
        groups.setdefault(period_bucket_start(record.date, resolved), []).append(record)

    aggregated = [
        _reduce_group(group, bucket_date=bucket, sessions_policy=policy)
        for bucket, group in sorted(groups.items())
    ]
    logger.debug(
        "aggregate_by_period period=%s buckets=%d",
        resolved.value,
        len(aggregated),
    )
    return aggregated


def aggregate_by_dimension(
    records: Iterable[CanonicalMetricRecord],
    dimension: str,
    *,
    sessions_policy: ReductionPolicy | str = ReductionPolicy.SUM,
) -> list[CanonicalMetricRecord]:
    """
    Reduce *records* to one record per daypart, device or station value.

    Records without a value group under ``"Unknown"``. Each output record
    carries the group value in its dimension field and the earliest date of
    the group. Output keeps first-seen group order; callers sort as needed
    (see :func:`rank_by_average_cume`).
    """

    if dimension not in DIMENSION_FIELDS:
        allowed = ", ".join(DIMENSION_FIELDS)
        raise UnsupportedDimensionError(
            f"Unsupported dimension {dimension!r}. Allowed values: {allowed}."
        )
    policy = _coerce_policy(sessions_policy)

    groups: dict[str, list[CanonicalMetricRecord]] = {}
    for record in records:
        value = getattr(record, dimension) or UNKNOWN_DIMENSION_VALUE
        groups.setdefault(value, []).append(record)

    aggregated = [
        _reduce_group(
            group,
            bucket_date=min(record.date for record in group),
            sessions_policy=policy,
            **{dimension: value},
        )
        for value, group in groups.items()
    ]
    logger.debug(
        "aggregate_by_dimension dimension=%s groups=%d",
        dimension,
        len(aggregated),
    )
    return aggregated


def aggregate_by_hour(
    records: Iterable[CanonicalMetricRecord],
    *,
    sessions_policy: ReductionPolicy | str = ReductionPolicy.SUM,
) -> list[CanonicalMetricRecord]:
    """
    Reduce hourly records to one record per hour of day, sorted by hour.

    Records without an hour are left out.
    """

    policy = _coerce_policy(sessions_policy)

    groups: dict[int, list[CanonicalMetricRecord]] = {}
    for record in records:
        if record.hour is not None:
            groups.setdefault(record.hour, []).append(record)

    return [
        _reduce_group(
            group,
            bucket_date=min(record.date for record in group),
            sessions_policy=policy,
            hour=hour,
        )
        for hour, group in sorted(groups.items())
    ]


def summarize_records(records: Sequence[CanonicalMetricRecord]) -> dict[str, float | int]:
    """
    Headline KPIs (average CUME, total TLH, TSL, average sessions) for *records*.
    """

    return RadioKPIFormula().calculate(
        {
            "cume_values": [record.cume for record in records],
            "tlh_values": [record.tlh for record in records],
            "session_values": [record.active_sessions for record in records],
        }
    )


def rank_by_average_cume(
    records: Iterable[CanonicalMetricRecord],
    *,
    descending: bool = True,
) -> list[CanonicalMetricRecord]:
    """
    Order aggregated records by CUME, best performer first by default.
    """

    return sorted(records, key=lambda record: record.cume, reverse=descending)
