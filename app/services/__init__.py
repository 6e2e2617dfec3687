"""
app/services package marker.
"""

from app.services.aggregation_service import (
    UnsupportedDimensionError,
    UnsupportedPeriodError,
    aggregate_by_dimension,
    aggregate_by_hour,
    aggregate_by_period,
    rank_by_average_cume,
    summarize_records,
)
from app.services.csv_ingestion_service import (
    CSVFormatDetectionError,
    CSVHeaderValidationError,
    CSVIngestionService,
    NoValidRecordsError,
    get_csv_ingestion_service,
)
from app.services.metrics_processing_service import (
    MetricsProcessingService,
    ProcessResult,
    UnsupportedOperationError,
    get_metrics_processing_service,
)

__all__ = [
    "CSVFormatDetectionError",
    "CSVHeaderValidationError",
    "CSVIngestionService",
    "MetricsProcessingService",
    "NoValidRecordsError",
    "ProcessResult",
    "UnsupportedDimensionError",
    "UnsupportedOperationError",
    "UnsupportedPeriodError",
    "aggregate_by_dimension",
    "aggregate_by_hour",
    "aggregate_by_period",
    "get_csv_ingestion_service",
    "get_metrics_processing_service",
    "rank_by_average_cume",
    "summarize_records",
]
