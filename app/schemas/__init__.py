"""
app/schemas package marker.
"""

from app.schemas.csv_ingestion import (
    CSVIngestionSummaryResponse,
    CSVValidationErrorResponse,
    ExportTypeResponse,
)
from app.schemas.metrics import (
    MetricRowsRequest,
    ProcessRequest,
    ProcessResponse,
    ValidationReportResponse,
)

__all__ = [
    "CSVIngestionSummaryResponse",
    "CSVValidationErrorResponse",
    "ExportTypeResponse",
    "MetricRowsRequest",
    "ProcessRequest",
    "ProcessResponse",
    "ValidationReportResponse",
]
