"""
app/mappers/record_parser.py

Vendor row parsers producing canonical metric records.

Failure policy
--------------
Every row is parsed in isolation. A row that fails validation or cannot be
parsed is reported in the batch ``ParseReport`` and skipped; the batch
itself never aborts.

Numeric fields that are missing or unparseable default to ``0``. The
default is kept for compatibility with vendor exports that leave blank
cells, but each defaulted field is reported as a row warning so callers
can tell "zero" from "absent".
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
import math
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping

from app.domain.radio_metrics import (
    CanonicalMetricRecord,
    NielsenRecord,
    ParseReport,
    RowValidationError,
    ValidationResult,
)
from app.mappers.field_resolver import NIELSEN_ALIASES, TRITON_ALIASES, FieldResolver
from app.validators.metrics_validator import MetricsValidator
from kpi.radio import compute_tsl

logger = logging.getLogger(__name__)

TIMESTAMP_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%b %d, %Y",
    "%B %d, %Y",
)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _stringify(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def coerce_number(value: Any) -> float | None:
    """
    Parse a vendor cell into a float, or ``None`` when it is not numeric.

    Thousands separators and surrounding whitespace are tolerated.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        raw = str(value).strip().replace(",", "")
        if not raw:
            return None
        try:
            number = float(raw)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def parse_date(value: Any) -> datetime | None:
    """
    Parse a vendor date cell into an aware UTC datetime, or ``None``.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    raw = str(value).strip()
    if not raw:
        return None

    normalized = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        parsed = None

    if parsed is None:
        for fmt in TIMESTAMP_FORMATS:
            try:
                parsed = datetime.strptime(raw, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class _BaseRecordParser(ABC):
    """
    Shared row loop: isolation, warning capture and batch logging.
    """

    source_name = "vendor"

    def __init__(
        self,
        *,
        resolver: FieldResolver,
        validator: MetricsValidator | None = None,
        log_validation_errors: bool = True,
        clock: Clock = _utc_now,
    ) -> None:
        self._resolver = resolver
        self._validator = validator or MetricsValidator()
        self._log_validation_errors = log_validation_errors
        self._clock = clock

    def parse(self, rows: Iterable[Mapping[str, Any]]) -> ParseReport:
        records: list[Any] = []
        errors: list[RowValidationError] = []
        warnings: list[RowValidationError] = []
        rows_total = 0

        for row_number, row in enumerate(rows, start=1):
            rows_total += 1
            if not isinstance(row, Mapping):
                self._report_failure(
                    errors,
                    RowValidationError(
                        row_number=row_number,
                        message="Row is not a column mapping.",
                        value=_stringify(row),
                    ),
                )
                continue

            row_warnings: list[RowValidationError] = []
            try:
                record = self._build_record(row, row_number, row_warnings)
            except (TypeError, ValueError, ArithmeticError) as exc:
                self._report_failure(
                    errors,
                    RowValidationError(
                        row_number=row_number,
                        message=f"Row could not be parsed: {exc}",
                    ),
                )
                continue

            result = self._validate(record)
            if not result.is_valid:
                for message in result.errors:
                    self._report_failure(
                        errors,
                        RowValidationError(row_number=row_number, message=message),
                    )
                continue

            warnings.extend(row_warnings)
            warnings.extend(
                RowValidationError(row_number=row_number, message=message, severity="warning")
                for message in result.warnings
            )
            records.append(record)

        logger.info(
            "Parsed %d of %d %s rows (%d errors, %d warnings)",
            len(records),
            rows_total,
            self.source_name,
            len(errors),
            len(warnings),
        )
        return ParseReport(records=records, errors=errors, warnings=warnings, rows_total=rows_total)

    @abstractmethod
    def _build_record(
        self,
        row: Mapping[str, Any],
        row_number: int,
        warnings: list[RowValidationError],
    ) -> Any:
        """
        Build one vendor record from *row*, appending any field warnings.
        """

    def _validate(self, record: Any) -> ValidationResult:
        return self._validator.validate(record)

    def _number(
        self,
        row: Mapping[str, Any],
        field_name: str,
        label: str,
        row_number: int,
        warnings: list[RowValidationError],
    ) -> float:
        raw = self._resolver.resolve(row, field_name)
        value = coerce_number(raw)
        if value is None:
            warnings.append(
                RowValidationError(
                    row_number=row_number,
                    column=field_name,
                    message=f"{label} missing or not numeric; defaulted to 0",
                    value=_stringify(raw),
                    severity="warning",
                )
            )
            return 0.0
        return value

    def _date(
        self,
        row: Mapping[str, Any],
        row_number: int,
        warnings: list[RowValidationError],
    ) -> datetime:
        raw = self._resolver.resolve(row, "date")
        parsed = parse_date(raw)
        if parsed is None:
            warnings.append(
                RowValidationError(
                    row_number=row_number,
                    column="date",
                    message="Date missing or unparseable; defaulted to current time",
                    value=_stringify(raw),
                    severity="warning",
                )
            )
            return self._clock()
        return parsed

    def _report_failure(
        self,
        errors: list[RowValidationError],
        error: RowValidationError,
    ) -> None:
        if self._log_validation_errors:
            logger.warning(
                "%s row=%s skipped: %s",
                self.source_name,
                error.row_number,
                error.message,
            )
        errors.append(error)


class TritonRecordParser(_BaseRecordParser):
    """
    Parses Triton Webcast Metrics rows into :class:`CanonicalMetricRecord`.

    TSL is always derived from the row's own TLH and CUME.
    """

    source_name = "triton"

    def __init__(
        self,
        *,
        validator: MetricsValidator | None = None,
        device_falls_back_to_station: bool = True,
        log_validation_errors: bool = True,
        clock: Clock = _utc_now,
    ) -> None:
        super().__init__(
            resolver=FieldResolver(TRITON_ALIASES),
            validator=validator,
            log_validation_errors=log_validation_errors,
            clock=clock,
        )
        self._device_falls_back_to_station = device_falls_back_to_station

    def _build_record(
        self,
        row: Mapping[str, Any],
        row_number: int,
        warnings: list[RowValidationError],
    ) -> CanonicalMetricRecord:
        cume = self._number(row, "cume", "CUME", row_number, warnings)
        tlh = self._number(row, "tlh", "TLH", row_number, warnings)
        active_sessions = self._number(row, "active_sessions", "Active sessions", row_number, warnings)
        date = self._date(row, row_number, warnings)

        station = _optional_text(self._resolver.resolve(row, "station"))
        daypart = _optional_text(self._resolver.resolve(row, "daypart"))
        device = _optional_text(self._resolver.resolve(row, "device"))
        if device is None and self._device_falls_back_to_station:
            device = station

        return CanonicalMetricRecord(
            cume=cume,
            tlh=tlh,
            tsl=compute_tsl(tlh, cume),
            active_sessions=active_sessions,
            date=date,
            daypart=daypart,
            device=device,
            station=station,
            hour=self._hour(row, row_number, warnings),
        )

    def _hour(
        self,
        row: Mapping[str, Any],
        row_number: int,
        warnings: list[RowValidationError],
    ) -> int | None:
        raw = self._resolver.resolve(row, "hour")
        if raw is None:
            return None
        value = coerce_number(raw)
        if value is None or not value.is_integer() or not 0 <= value <= 23:
            warnings.append(
                RowValidationError(
                    row_number=row_number,
                    column="hour",
                    message="Hour must be an integer between 0 and 23; ignored",
                    value=_stringify(raw),
                    severity="warning",
                )
            )
            return None
        return int(value)


class NielsenRecordParser(_BaseRecordParser):
    """
    Parses Nielsen survey rows into :class:`NielsenRecord`.

    Nielsen exports carry no TLH, so TSL is taken from the vendor as-is.
    """

    source_name = "nielsen"

    def __init__(
        self,
        *,
        validator: MetricsValidator | None = None,
        log_validation_errors: bool = True,
        clock: Clock = _utc_now,
    ) -> None:
        super().__init__(
            resolver=FieldResolver(NIELSEN_ALIASES),
            validator=validator,
            log_validation_errors=log_validation_errors,
            clock=clock,
        )

    def _build_record(
        self,
        row: Mapping[str, Any],
        row_number: int,
        warnings: list[RowValidationError],
    ) -> NielsenRecord:
        return NielsenRecord(
            aqh_share=self._number(row, "aqh_share", "AQH Share", row_number, warnings),
            aqh_persons=self._number(row, "aqh_persons", "AQH Persons", row_number, warnings),
            cume=self._number(row, "cume", "CUME", row_number, warnings),
            tsl=self._number(row, "tsl", "TSL", row_number, warnings),
            date=self._date(row, row_number, warnings),
            daypart=_optional_text(self._resolver.resolve(row, "daypart")),
        )

    def _validate(self, record: Any) -> ValidationResult:
        return self._validator.validate(record, require_tlh=False)


def parse_triton(rows: Iterable[Mapping[str, Any]]) -> list[CanonicalMetricRecord]:
    """
    Parse Triton rows, returning only the records that passed validation.
    """

    return TritonRecordParser().parse(rows).records


def parse_nielsen(rows: Iterable[Mapping[str, Any]]) -> list[NielsenRecord]:
    """
    Parse Nielsen rows, returning only the records that passed validation.
    """

    return NielsenRecordParser().parse(rows).records


def record_from_mapping(
    data: Mapping[str, Any],
    *,
    clock: Clock = _utc_now,
) -> CanonicalMetricRecord:
    """
    Build a canonical record from an already-normalized metric mapping.

    Used for JSON payloads that carry ``cume``/``tlh`` keys directly rather
    than vendor headers. TSL is recomputed; any supplied ``tsl`` is ignored.
    """

    cume = coerce_number(data.get("cume")) or 0.0
    tlh = coerce_number(data.get("tlh")) or 0.0
    sessions_raw = data.get("active_sessions")
    if sessions_raw is None:
        sessions_raw = data.get("activeSessions")
    hour = coerce_number(data.get("hour"))

    return CanonicalMetricRecord(
        cume=cume,
        tlh=tlh,
        tsl=compute_tsl(tlh, cume),
        active_sessions=coerce_number(sessions_raw) or 0.0,
        date=parse_date(data.get("date")) or clock(),
        daypart=_optional_text(data.get("daypart")),
        device=_optional_text(data.get("device")),
        station=_optional_text(data.get("station")),
        hour=int(hour) if hour is not None and hour.is_integer() and 0 <= hour <= 23 else None,
    )
