"""
app/services/csv_ingestion_service.py

Service layer for radio metrics CSV ingestion.

Flow
----
    decode CSV → detect vendor format → detect export type
    → parse rows (per-row isolation) → summarize valid records

Rows that fail validation are skipped and reported; they never abort the
upload. Only whole-file problems (no header, undecodable text, unknown
vendor format, no valid rows at all) raise.
"""

from __future__ import annotations

import csv
import io
import logging
from functools import lru_cache
from typing import Any, BinaryIO, Sequence

from app.config import get_csv_ingestion_settings, get_metrics_settings
from app.domain.radio_metrics import (
    CanonicalMetricRecord,
    IngestionSummary,
    NielsenRecord,
    ParseReport,
    RowValidationError,
    SourceFormat,
)
from app.mappers.format_detector import detect_export_type, detect_format
from app.mappers.record_parser import NielsenRecordParser, TritonRecordParser
from app.services.aggregation_service import summarize_records
from app.validators.metrics_validator import MetricsValidator
from kpi.radio import compute_average_cume

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class CSVHeaderValidationError(ValueError):
    """
    Raised when CSV shape/header validation fails.
    """


class CSVFormatDetectionError(CSVHeaderValidationError):
    """
    Raised when the header row matches no known vendor format.
    """

    def __init__(self, *, headers: Sequence[str]) -> None:
        super().__init__(
            "Unable to detect data format. Expected Triton Webcast or Nielsen "
            "format with CUME and TLH columns."
        )
        self.headers = tuple(headers)

    def to_dict(self) -> dict[str, object]:
        return {"message": str(self), "headers": list(self.headers)}


class NoValidRecordsError(CSVHeaderValidationError):
    """
    Raised when every data row of an upload failed validation.
    """

    def __init__(self, *, errors: Sequence[RowValidationError]) -> None:
        super().__init__(
            "No valid records found in CSV. Check data format and required columns (CUME, TLH)."
        )
        self.errors = tuple(errors)

    def to_dict(self) -> dict[str, object]:
        return {
            "message": str(self),
            "errors": [
                {"row_number": error.row_number, "message": error.message, "column": error.column}
                for error in self.errors
            ],
        }


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class CSVIngestionService:
    """
    Coordinates CSV decoding, format detection, parsing, and summarizing.
    """

    def __init__(
        self,
        *,
        max_validation_errors: int,
        log_validation_errors: bool,
        max_preview_records: int,
        tsl_warning_hours: float = 8.0,
        device_falls_back_to_station: bool = True,
    ) -> None:
        self._max_validation_errors = max(1, max_validation_errors)
        self._max_preview_records = max(1, max_preview_records)
        validator = MetricsValidator(tsl_warning_hours=tsl_warning_hours)
        self._triton_parser = TritonRecordParser(
            validator=validator,
            device_falls_back_to_station=device_falls_back_to_station,
            log_validation_errors=log_validation_errors,
        )
        self._nielsen_parser = NielsenRecordParser(
            validator=validator,
            log_validation_errors=log_validation_errors,
        )

    def ingest_csv(self, *, upload_file: BinaryIO, filename: str = "") -> IngestionSummary:
        """
        Parse one vendor CSV export into canonical records and a summary.

        Args:
            upload_file: Binary file object positioned anywhere; read from the start.
            filename:    Original filename, used to refine the export type.
        """

        headers, rows = self._read_rows(upload_file)

        source_format = detect_format(headers)
        if source_format is SourceFormat.UNKNOWN:
            logger.info("CSV format not recognised filename=%r headers=%s", filename, headers)
            raise CSVFormatDetectionError(headers=headers)

        export_type = detect_export_type(headers, filename)
        logger.info(
            "Detected export type %r (category=%s, format=%s) filename=%r",
            export_type.type,
            export_type.category,
            source_format.value,
            filename,
        )

        if source_format is SourceFormat.TRITON:
            report = self._triton_parser.parse(rows)
        else:
            report = self._nielsen_parser.parse(rows)

        if not report.records:
            raise NoValidRecordsError(errors=report.errors[: self._max_validation_errors])

        return IngestionSummary(
            source_format=source_format,
            export_type=export_type,
            rows_total=report.rows_total,
            rows_valid=report.rows_valid,
            rows_failed=report.rows_failed,
            errors=report.errors[: self._max_validation_errors],
            warnings=report.warnings[: self._max_validation_errors],
            records=report.records[: self._max_preview_records],
            summary=self._summarize(source_format, report),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _read_rows(upload_file: BinaryIO) -> tuple[list[str], list[dict[str, Any]]]:
        upload_file.seek(0)
        text_stream: io.TextIOWrapper | None = None
        try:
            text_stream = io.TextIOWrapper(upload_file, encoding="utf-8-sig", newline="")
            reader = csv.DictReader(text_stream)
            headers = [header for header in (reader.fieldnames or []) if header and header.strip()]
            if not headers:
                raise CSVHeaderValidationError("CSV header row is missing.")

            rows = [
                row
                for row in reader
                if any(isinstance(value, str) and value.strip() for value in row.values())
            ]
        except UnicodeDecodeError as exc:
            raise CSVHeaderValidationError("CSV must be UTF-8 encoded.") from exc
        except csv.Error as exc:
            raise CSVHeaderValidationError(f"Invalid CSV format: {exc}") from exc
        finally:
            if text_stream is not None:
                try:
                    text_stream.detach()
                except ValueError:
                    pass

        if not rows:
            raise CSVHeaderValidationError("CSV file is empty.")
        return headers, rows

    @staticmethod
    def _summarize(source_format: SourceFormat, report: ParseReport) -> dict[str, Any]:
        records = report.records
        dates = [record.date for record in records]
        date_range = {
            "start": min(dates).isoformat(),
            "end": max(dates).isoformat(),
        }

        if source_format is SourceFormat.TRITON:
            triton_records: list[CanonicalMetricRecord] = records
            summary: dict[str, Any] = dict(summarize_records(triton_records))
        else:
            nielsen_records: list[NielsenRecord] = records
            summary = {
                "average_cume": compute_average_cume(record.cume for record in nielsen_records),
                "record_count": len(nielsen_records),
            }
        summary["date_range"] = date_range
        return summary


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_csv_ingestion_service() -> CSVIngestionService:
    """
    Build and cache the ingestion service with env-driven settings.
    """

    settings = get_csv_ingestion_settings()
    metrics_settings = get_metrics_settings()
    return CSVIngestionService(
        max_validation_errors=settings.max_validation_errors,
        log_validation_errors=settings.log_validation_errors,
        max_preview_records=settings.max_preview_records,
        tsl_warning_hours=metrics_settings.tsl_warning_hours,
        device_falls_back_to_station=metrics_settings.device_falls_back_to_station,
    )
