"""
app/domain/radio_metrics.py

Domain models for radio audience-measurement ingestion and aggregation.

Metric semantics
----------------
cume            unique audience; averaged across records, never summed
tlh             total listening hours; additive
tsl             tlh / cume; always recomputed, never averaged or summed
active_sessions session volume; summed by default, averaged on request
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class SourceFormat(str, Enum):
    """
    Vendor export formats recognised by the format detector.
    """

    TRITON = "triton"
    NIELSEN = "nielsen"
    UNKNOWN = "unknown"


class AggregationPeriod(str, Enum):
    """
    Time buckets supported by period aggregation.
    """

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class ReductionPolicy(str, Enum):
    """
    How a volume metric is reduced within one aggregation bucket.
    """

    SUM = "sum"
    AVERAGE = "average"


@dataclass(frozen=True)
class CanonicalMetricRecord:
    """
    One normalized audience-measurement observation.

    Instances are immutable; aggregation always builds new records.
    """

    cume: float
    tlh: float
    tsl: float
    active_sessions: float
    date: datetime
    daypart: str | None = None
    device: str | None = None
    station: str | None = None
    hour: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "cume": self.cume,
            "tlh": self.tlh,
            "tsl": self.tsl,
            "active_sessions": self.active_sessions,
            "date": self.date.isoformat(),
            "daypart": self.daypart,
            "device": self.device,
            "station": self.station,
            "hour": self.hour,
        }


@dataclass(frozen=True)
class NielsenRecord:
    """
    One Nielsen survey observation. TSL is vendor-supplied, not derived.
    """

    aqh_share: float
    aqh_persons: float
    cume: float
    tsl: float
    date: datetime
    daypart: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "aqh_share": self.aqh_share,
            "aqh_persons": self.aqh_persons,
            "cume": self.cume,
            "tsl": self.tsl,
            "date": self.date.isoformat(),
            "daypart": self.daypart,
        }


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of validating one record.
    """

    is_valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class RowValidationError:
    """
    One row-level error or warning detail.
    """

    row_number: int
    message: str
    column: str | None = None
    value: str | None = None
    severity: str = "error"


@dataclass(frozen=True)
class ParseReport:
    """
    Result of parsing one batch of raw rows.
    """

    records: list[Any] = field(default_factory=list)
    errors: list[RowValidationError] = field(default_factory=list)
    warnings: list[RowValidationError] = field(default_factory=list)
    rows_total: int = 0

    @property
    def rows_valid(self) -> int:
        return len(self.records)

    @property
    def rows_failed(self) -> int:
        return self.rows_total - len(self.records)


@dataclass(frozen=True)
class ExportTypeInfo:
    """
    Finer-grained classification of a vendor export by its headers and filename.
    """

    type: str
    category: str
    has_station: bool = False
    has_daypart: bool = False
    has_device: bool = False
    has_hour: bool = False


@dataclass(frozen=True)
class IngestionSummary:
    """
    End-of-run CSV ingestion summary.
    """

    source_format: SourceFormat
    export_type: ExportTypeInfo
    rows_total: int
    rows_valid: int
    rows_failed: int
    errors: list[RowValidationError] = field(default_factory=list)
    warnings: list[RowValidationError] = field(default_factory=list)
    records: list[Any] = field(default_factory=list)
    summary: dict[str, Any] = field(default_factory=dict)
