"""
app/api/routers/metrics_router.py

Validation and processing endpoints for decoded metric rows.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.schemas.metrics import (
    MetricRowsRequest,
    ProcessRequest,
    ProcessResponse,
    RowValidationDetailResponse,
    ValidationReportResponse,
)
from app.services.metrics_processing_service import (
    MetricsProcessingService,
    get_metrics_processing_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/data", tags=["metrics"])


@router.post("/validate", response_model=ValidationReportResponse)
def validate_metrics(
    body: MetricRowsRequest,
    service: MetricsProcessingService = Depends(get_metrics_processing_service),
) -> ValidationReportResponse:
    """
    Validate each row and report how many of them are usable.
    """

    report = service.validate_rows(body.data)
    return ValidationReportResponse(
        success=report.success,
        valid_records=report.valid_records,
        total_records=report.total_records,
        error_count=report.error_count,
        warning_count=report.warning_count,
        errors=report.errors,
        warnings=report.warnings,
        details=[
            RowValidationDetailResponse(
                row_index=detail.row_index,
                is_valid=detail.is_valid,
                errors=list(detail.errors),
                warnings=list(detail.warnings),
            )
            for detail in report.details
        ],
    )


@router.post("/process", response_model=ProcessResponse)
def process_metrics(
    body: ProcessRequest,
    service: MetricsProcessingService = Depends(get_metrics_processing_service),
) -> ProcessResponse:
    """
    Run one aggregation, calculation or filter operation over the rows.

    Raises HTTP 400 for an unknown operation or a missing/invalid parameter.
    """

    try:
        result = service.process(
            body.data,
            body.operation,
            period=body.period,
            dimension=body.dimension,
            sessions_policy=body.sessions_policy,
            daypart=body.daypart,
            device=body.device,
            start_date=body.start_date,
            end_date=body.end_date,
        )
    except ValueError as exc:
        logger.info("Rejected process request operation=%r: %s", body.operation, exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    data = result.data
    return ProcessResponse(
        operation=body.operation,
        result_count=len(data) if isinstance(data, list) else 1,
        data=data,
        skipped_rows=result.skipped_rows,
    )
