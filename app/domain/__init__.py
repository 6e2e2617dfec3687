"""
app/domain package marker.
"""

from app.domain.radio_metrics import (
    AggregationPeriod,
    CanonicalMetricRecord,
    ExportTypeInfo,
    IngestionSummary,
    NielsenRecord,
    ParseReport,
    ReductionPolicy,
    RowValidationError,
    SourceFormat,
    ValidationResult,
)

__all__ = [
    "AggregationPeriod",
    "CanonicalMetricRecord",
    "ExportTypeInfo",
    "IngestionSummary",
    "NielsenRecord",
    "ParseReport",
    "ReductionPolicy",
    "RowValidationError",
    "SourceFormat",
    "ValidationResult",
]
