"""
app/services/metrics_processing_service.py

Batch validation and post-ingestion processing of decoded metric rows.

Rows reach this service as plain JSON mappings (``cume``, ``tlh``,
``date``, dimensions) that were produced by an earlier ingestion. They are
validated or turned back into canonical records and handed to the
aggregation layer; nothing here re-derives CUME by summing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache
from typing import Any, Callable, Mapping, Sequence

from app.config import get_metrics_settings
from app.domain.radio_metrics import CanonicalMetricRecord, ReductionPolicy
from app.mappers.record_parser import coerce_number, parse_date, record_from_mapping
from app.services.aggregation_service import (
    aggregate_by_dimension,
    aggregate_by_period,
    summarize_records,
)
from app.validators.metrics_validator import MetricsValidator
from kpi.radio import compute_average_cume, compute_tsl

logger = logging.getLogger(__name__)

SUPPORTED_OPERATIONS: tuple[str, ...] = (
    "aggregate",
    "aggregate_by_dimension",
    "calculate_cume",
    "calculate_tsl",
    "filter_by_daypart",
    "filter_by_device",
    "filter_by_date_range",
    "summary",
)


class UnsupportedOperationError(ValueError):
    """
    Raised when a process request names an operation outside the closed set.
    """


@dataclass(frozen=True)
class RowValidationDetail:
    """
    Validation outcome of one submitted row.
    """

    row_index: int
    is_valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class BatchValidationReport:
    """
    "N of M rows valid" report for a batch of submitted rows.
    """

    total_records: int
    valid_records: int
    error_count: int
    warning_count: int
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    details: list[RowValidationDetail] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.error_count == 0


@dataclass(frozen=True)
class ProcessResult:
    """
    Output of one process operation plus the rows it had to skip.
    """

    data: Any
    skipped_rows: list[str] = field(default_factory=list)


class MetricsProcessingService:
    """
    Validates submitted metric rows and runs processing operations on them.
    """

    def __init__(self, *, validator: MetricsValidator | None = None) -> None:
        self._validator = validator or MetricsValidator()
        self._operations: dict[str, Callable[..., Any]] = {
            "aggregate": self._aggregate,
            "aggregate_by_dimension": self._aggregate_by_dimension,
            "calculate_cume": self._calculate_cume,
            "calculate_tsl": self._calculate_tsl,
            "filter_by_daypart": self._filter_by_daypart,
            "filter_by_device": self._filter_by_device,
            "filter_by_date_range": self._filter_by_date_range,
            "summary": self._summary,
        }

    def validate_rows(self, rows: Sequence[Mapping[str, Any]]) -> BatchValidationReport:
        """
        Validate each row and collect prefixed error and warning messages.
        """

        details: list[RowValidationDetail] = []
        errors: list[str] = []
        warnings: list[str] = []

        for index, row in enumerate(rows):
            result = self._validator.validate(row)
            details.append(
                RowValidationDetail(
                    row_index=index,
                    is_valid=result.is_valid,
                    errors=result.errors,
                    warnings=result.warnings,
                )
            )
            errors.extend(f"Row {index + 1}: {message}" for message in result.errors)
            warnings.extend(f"Row {index + 1}: {message}" for message in result.warnings)

        invalid = sum(1 for detail in details if not detail.is_valid)
        report = BatchValidationReport(
            total_records=len(details),
            valid_records=len(details) - invalid,
            error_count=invalid,
            warning_count=len(warnings),
            errors=errors,
            warnings=warnings,
            details=details,
        )
        logger.info(
            "Validated %d of %d rows (%d warnings)",
            report.valid_records,
            report.total_records,
            report.warning_count,
        )
        return report

    def process(
        self,
        rows: Sequence[Mapping[str, Any]],
        operation: str,
        **params: Any,
    ) -> ProcessResult:
        """
        Run one named operation over *rows*.

        Rows failing validation are left out of record-based operations and
        listed in ``ProcessResult.skipped_rows`` as "Row N: message".

        Raises :class:`UnsupportedOperationError` for unknown operations and
        ``ValueError`` when an operation's required parameter is missing.
        """

        handler = self._operations.get(operation)
        if handler is None:
            raise UnsupportedOperationError(f"Unknown operation: {operation}")
        logger.debug("process operation=%s rows=%d", operation, len(rows))
        skipped: list[str] = []
        data = handler(rows, skipped=skipped, **params)
        return ProcessResult(data=data, skipped_rows=skipped)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def _valid_rows(
        self,
        rows: Sequence[Mapping[str, Any]],
        skipped: list[str],
    ) -> list[Mapping[str, Any]]:
        valid: list[Mapping[str, Any]] = []
        for index, row in enumerate(rows, start=1):
            result = self._validator.validate(row)
            if result.is_valid:
                valid.append(row)
            else:
                skipped.extend(f"Row {index}: {message}" for message in result.errors)
        if len(valid) < len(rows):
            logger.warning("Skipped %d of %d invalid metric rows", len(rows) - len(valid), len(rows))
        return valid

    def _records(
        self,
        rows: Sequence[Mapping[str, Any]],
        skipped: list[str],
    ) -> list[CanonicalMetricRecord]:
        return [record_from_mapping(row) for row in self._valid_rows(rows, skipped)]

    def _aggregate(
        self,
        rows: Sequence[Mapping[str, Any]],
        *,
        skipped: list[str],
        period: str | None = None,
        sessions_policy: str | None = None,
        **_: Any,
    ) -> list[dict[str, Any]]:
        if not period:
            raise ValueError("Invalid period. Must be 'daily', 'weekly', or 'monthly'.")
        aggregated = aggregate_by_period(
            self._records(rows, skipped),
            period,
            sessions_policy=sessions_policy or ReductionPolicy.SUM,
        )
        return [record.to_dict() for record in aggregated]

    def _aggregate_by_dimension(
        self,
        rows: Sequence[Mapping[str, Any]],
        *,
        skipped: list[str],
        dimension: str | None = None,
        sessions_policy: str | None = None,
        **_: Any,
    ) -> list[dict[str, Any]]:
        if not dimension:
            raise ValueError("Dimension parameter required")
        aggregated = aggregate_by_dimension(
            self._records(rows, skipped),
            dimension,
            sessions_policy=sessions_policy or ReductionPolicy.SUM,
        )
        return [record.to_dict() for record in aggregated]

    @staticmethod
    def _calculate_cume(rows: Sequence[Mapping[str, Any]], **_: Any) -> dict[str, Any]:
        values = [coerce_number(row.get("cume")) for row in rows]
        cume_values = [value for value in values if value is not None]
        return {
            "average_cume": compute_average_cume(cume_values),
            "data_points": len(cume_values),
            "note": "CUME has been averaged, not summed, per radio industry standards",
        }

    def _calculate_tsl(
        self,
        rows: Sequence[Mapping[str, Any]],
        *,
        skipped: list[str],
        **_: Any,
    ) -> list[dict[str, Any]]:
        return [
            {
                **row,
                "tsl": compute_tsl(
                    coerce_number(row.get("tlh")) or 0.0,
                    coerce_number(row.get("cume")) or 0.0,
                ),
            }
            for row in self._valid_rows(rows, skipped)
        ]

    @staticmethod
    def _filter_by_dimension(
        rows: Sequence[Mapping[str, Any]],
        dimension: str,
        value: str | None,
    ) -> list[dict[str, Any]]:
        if not value:
            raise ValueError(f"{dimension.capitalize()} parameter required")
        wanted = value.strip().lower()
        return [
            dict(row)
            for row in rows
            if isinstance(row.get(dimension), str) and row[dimension].strip().lower() == wanted
        ]

    def _filter_by_daypart(
        self,
        rows: Sequence[Mapping[str, Any]],
        *,
        daypart: str | None = None,
        **_: Any,
    ) -> list[dict[str, Any]]:
        return self._filter_by_dimension(rows, "daypart", daypart)

    def _filter_by_device(
        self,
        rows: Sequence[Mapping[str, Any]],
        *,
        device: str | None = None,
        **_: Any,
    ) -> list[dict[str, Any]]:
        return self._filter_by_dimension(rows, "device", device)

    @staticmethod
    def _filter_by_date_range(
        rows: Sequence[Mapping[str, Any]],
        *,
        start_date: str | datetime | None = None,
        end_date: str | datetime | None = None,
        **_: Any,
    ) -> list[dict[str, Any]]:
        start = parse_date(start_date)
        end = parse_date(end_date)
        if start is None or end is None:
            raise ValueError("start_date and end_date parameters required")

        selected: list[dict[str, Any]] = []
        for row in rows:
            row_date = parse_date(row.get("date"))
            if row_date is not None and start <= row_date <= end:
                selected.append(dict(row))
        return selected

    def _summary(
        self,
        rows: Sequence[Mapping[str, Any]],
        *,
        skipped: list[str],
        **_: Any,
    ) -> dict[str, Any]:
        return dict(summarize_records(self._records(rows, skipped)))


@lru_cache(maxsize=1)
def get_metrics_processing_service() -> MetricsProcessingService:
    """
    Build and cache the processing service with env-driven settings.
    """

    settings = get_metrics_settings()
    return MetricsProcessingService(
        validator=MetricsValidator(tsl_warning_hours=settings.tsl_warning_hours),
    )
