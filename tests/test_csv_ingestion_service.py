"""
tests/test_csv_ingestion_service.py

Unit tests for end-to-end CSV ingestion over in-memory uploads.
"""

from __future__ import annotations

import io

import pytest

from app.domain.radio_metrics import CanonicalMetricRecord, NielsenRecord, SourceFormat
from app.services.csv_ingestion_service import (
    CSVFormatDetectionError,
    CSVHeaderValidationError,
    CSVIngestionService,
    NoValidRecordsError,
)

TRITON_CSV = (
    "Week,Station,CUME,TLH,AAS\n"
    "2024-01-07,WYMS,1000,2000,50\n"
    "2024-01-14,WYMS,3000,4500,70\n"
    "2024-01-21,WYMS,2000,-10,60\n"
)

NIELSEN_CSV = (
    "AQH Share,AQH Persons,CUME,TSL,Date\n"
    "2.5,1200,15000,3.5,2024-03-01\n"
    "2.1,1100,13000,3.1,2024-03-08\n"
)


def _upload(text: str | bytes) -> io.BytesIO:
    return io.BytesIO(text.encode("utf-8") if isinstance(text, str) else text)


@pytest.fixture()
def service() -> CSVIngestionService:
    return CSVIngestionService(
        max_validation_errors=50,
        log_validation_errors=False,
        max_preview_records=100,
    )


class TestTritonIngestion:
    def test_counts_and_summary(self, service: CSVIngestionService) -> None:
        summary = service.ingest_csv(upload_file=_upload(TRITON_CSV), filename="triton.csv")

        assert summary.source_format is SourceFormat.TRITON
        assert summary.rows_total == 3
        assert summary.rows_valid == 2
        assert summary.rows_failed == 1
        assert summary.errors[0].row_number == 3
        assert summary.summary["average_cume"] == 2000.0
        assert summary.summary["total_tlh"] == 6500.0
        assert summary.summary["tsl"] == 3.25
        assert summary.summary["date_range"] == {
            "start": "2024-01-07T00:00:00+00:00",
            "end": "2024-01-14T00:00:00+00:00",
        }

    def test_records_are_canonical(self, service: CSVIngestionService) -> None:
        summary = service.ingest_csv(upload_file=_upload(TRITON_CSV))

        assert all(isinstance(record, CanonicalMetricRecord) for record in summary.records)
        assert summary.records[0].tsl == 2.0

    def test_export_type_detected(self, service: CSVIngestionService) -> None:
        summary = service.ingest_csv(upload_file=_upload(TRITON_CSV))

        assert summary.export_type.type == "Daily Overview"
        assert summary.export_type.has_station is True

    def test_utf8_bom_and_blank_rows_tolerated(self, service: CSVIngestionService) -> None:
        content = b"\xef\xbb\xbf" + TRITON_CSV.encode("utf-8") + b",,,,\n\n"

        summary = service.ingest_csv(upload_file=_upload(content))

        assert summary.rows_total == 3

    def test_preview_records_capped(self) -> None:
        capped = CSVIngestionService(
            max_validation_errors=50,
            log_validation_errors=False,
            max_preview_records=1,
        )

        summary = capped.ingest_csv(upload_file=_upload(TRITON_CSV))

        assert len(summary.records) == 1
        assert summary.rows_valid == 2


class TestNielsenIngestion:
    def test_nielsen_upload(self, service: CSVIngestionService) -> None:
        summary = service.ingest_csv(upload_file=_upload(NIELSEN_CSV), filename="nielsen.csv")

        assert summary.source_format is SourceFormat.NIELSEN
        assert summary.rows_valid == 2
        assert all(isinstance(record, NielsenRecord) for record in summary.records)
        assert summary.summary["average_cume"] == 14000.0
        assert summary.summary["record_count"] == 2


class TestRejectedUploads:
    def test_unknown_format(self, service: CSVIngestionService) -> None:
        with pytest.raises(CSVFormatDetectionError) as exc_info:
            service.ingest_csv(upload_file=_upload("foo,bar\n1,2\n"))

        assert exc_info.value.to_dict()["headers"] == ["foo", "bar"]

    def test_header_only_file(self, service: CSVIngestionService) -> None:
        with pytest.raises(CSVHeaderValidationError, match="CSV file is empty."):
            service.ingest_csv(upload_file=_upload("Week,CUME,TLH\n"))

    def test_empty_file(self, service: CSVIngestionService) -> None:
        with pytest.raises(CSVHeaderValidationError, match="CSV header row is missing."):
            service.ingest_csv(upload_file=_upload(b""))

    def test_non_utf8_file(self, service: CSVIngestionService) -> None:
        with pytest.raises(CSVHeaderValidationError, match="UTF-8"):
            service.ingest_csv(upload_file=_upload(b"Week,CUME,TLH\n\xff\xfe,1,2\n"))

    def test_all_rows_invalid(self, service: CSVIngestionService) -> None:
        content = "Week,Station,CUME,TLH\n2024-01-07,WYMS,-1,5\n2024-01-14,WYMS,10,-5\n"

        with pytest.raises(NoValidRecordsError) as exc_info:
            service.ingest_csv(upload_file=_upload(content))

        payload = exc_info.value.to_dict()
        assert [error["row_number"] for error in payload["errors"]] == [1, 2]
