"""
app/schemas/csv_ingestion.py

Response schemas for CSV ingestion endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class CSVValidationErrorResponse(BaseModel):
    """
    API response model for one row-level error or warning.
    """

    row_number: int = Field(..., ge=1)
    message: str
    column: str | None = None
    value: str | None = None
    severity: str = "error"


class ExportTypeResponse(BaseModel):
    """
    API response model for the detected export type.
    """

    type: str
    category: str
    has_station: bool = False
    has_daypart: bool = False
    has_device: bool = False
    has_hour: bool = False


class CSVIngestionSummaryResponse(BaseModel):
    """
    API response model for CSV ingestion summary.
    """

    source_format: str
    export_type: ExportTypeResponse
    rows_total: int = Field(..., ge=0)
    rows_valid: int = Field(..., ge=0)
    rows_failed: int = Field(..., ge=0)
    file_name: str | None = None
    validation_errors: list[CSVValidationErrorResponse] = Field(default_factory=list)
    validation_warnings: list[CSVValidationErrorResponse] = Field(default_factory=list)
    summary: dict[str, Any] = Field(default_factory=dict)
    records: list[dict[str, Any]] = Field(default_factory=list)
