"""
app/api/routers/csv_ingestion.py

CSV ingestion HTTP endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status

from app.api.dependencies import require_csv_upload
from app.schemas.csv_ingestion import (
    CSVIngestionSummaryResponse,
    CSVValidationErrorResponse,
    ExportTypeResponse,
)
from app.services.csv_ingestion_service import (
    CSVFormatDetectionError,
    CSVHeaderValidationError,
    CSVIngestionService,
    NoValidRecordsError,
    get_csv_ingestion_service,
)

router = APIRouter(tags=["ingestion"])


@router.post("/upload-csv", response_model=CSVIngestionSummaryResponse)
def upload_csv(
    file: UploadFile = Depends(require_csv_upload),
    ingestion_service: CSVIngestionService = Depends(get_csv_ingestion_service),
) -> CSVIngestionSummaryResponse:
    """
    Parse one Triton or Nielsen CSV export into canonical metric records.
    """

    try:
        summary = ingestion_service.ingest_csv(
            upload_file=file.file,
            filename=file.filename or "",
        )
    except (CSVFormatDetectionError, NoValidRecordsError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_dict(),
        ) from exc
    except CSVHeaderValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    finally:
        file.file.close()

    return CSVIngestionSummaryResponse(
        source_format=summary.source_format.value,
        export_type=ExportTypeResponse(
            type=summary.export_type.type,
            category=summary.export_type.category,
            has_station=summary.export_type.has_station,
            has_daypart=summary.export_type.has_daypart,
            has_device=summary.export_type.has_device,
            has_hour=summary.export_type.has_hour,
        ),
        rows_total=summary.rows_total,
        rows_valid=summary.rows_valid,
        rows_failed=summary.rows_failed,
        file_name=file.filename,
        validation_errors=[
            CSVValidationErrorResponse(
                row_number=error.row_number,
                column=error.column,
                message=error.message,
                value=error.value,
                severity=error.severity,
            )
            for error in summary.errors
        ],
        validation_warnings=[
            CSVValidationErrorResponse(
                row_number=warning.row_number,
                column=warning.column,
                message=warning.message,
                value=warning.value,
                severity=warning.severity,
            )
            for warning in summary.warnings
        ],
        summary=summary.summary,
        records=[record.to_dict() for record in summary.records],
    )
