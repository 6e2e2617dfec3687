"""
app/schemas/metrics.py

Request/response schemas for metric validation and processing endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class MetricRowsRequest(BaseModel):
    """
    A batch of already-decoded metric rows.
    """

    data: list[dict[str, Any]]


class RowValidationDetailResponse(BaseModel):
    row_index: int = Field(..., ge=0)
    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class ValidationReportResponse(BaseModel):
    """
    "N of M rows valid" report for a submitted batch.
    """

    success: bool
    valid_records: int = Field(..., ge=0)
    total_records: int = Field(..., ge=0)
    error_count: int = Field(..., ge=0)
    warning_count: int = Field(..., ge=0)
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    details: list[RowValidationDetailResponse] = Field(default_factory=list)


class ProcessRequest(MetricRowsRequest):
    """
    A processing operation over a batch of metric rows.
    """

    operation: str
    period: str | None = None
    dimension: str | None = None
    sessions_policy: str | None = None
    daypart: str | None = None
    device: str | None = None
    start_date: str | None = None
    end_date: str | None = None


class ProcessResponse(BaseModel):
    success: bool = True
    operation: str
    result_count: int = Field(..., ge=0)
    data: Any
    skipped_rows: list[str] = Field(default_factory=list)
