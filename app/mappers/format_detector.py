"""
app/mappers/format_detector.py

Vendor format and export-type detection from CSV headers.

Precedence
----------
Triton indicators are checked first and win whenever any is present, even
if Nielsen indicators are present too. A header set carrying both ``cume``
and ``tlh`` but no vendor indicator is treated as Triton.
"""

from __future__ import annotations

from typing import Sequence

from app.domain.radio_metrics import ExportTypeInfo, SourceFormat

TRITON_INDICATORS: frozenset[str] = frozenset(
    {"aas", "active sessions", "activesessions", "week", "station"}
)
NIELSEN_INDICATORS: frozenset[str] = frozenset({"aqh share", "aqhshare", "aqh persons"})
COMMON_METRIC_HEADERS: frozenset[str] = frozenset({"cume", "tlh"})

_DAYPART_FILENAME_TYPES: tuple[tuple[str, str], ...] = (
    ("morning", "Morning Drive"),
    ("midday", "Midday"),
    ("afternoon", "Afternoon Drive"),
    ("evening", "Evening"),
    ("overnight", "Overnight"),
    ("weekend", "Weekend"),
)


def _lower_headers(headers: Sequence[str]) -> set[str]:
    return {header.strip().lower() for header in headers if isinstance(header, str)}


def detect_format(headers: Sequence[str]) -> SourceFormat:
    """
    Classify a header row as Triton, Nielsen, or unknown.
    """

    lowered = _lower_headers(headers)
    if not lowered:
        return SourceFormat.UNKNOWN
    if lowered & TRITON_INDICATORS:
        return SourceFormat.TRITON
    if lowered & NIELSEN_INDICATORS:
        return SourceFormat.NIELSEN
    if COMMON_METRIC_HEADERS <= lowered:
        return SourceFormat.TRITON
    return SourceFormat.UNKNOWN


def detect_export_type(headers: Sequence[str], filename: str = "") -> ExportTypeInfo:
    """
    Identify which report a vendor export is (daypart, device, hourly, ...).
    """

    lowered = _lower_headers(headers)
    filename_lower = (filename or "").lower()

    has_station = bool(lowered & {"station", "stream"})
    has_daypart = bool(lowered & {"daypart", "day part"})
    has_device = bool(lowered & {"device", "device family", "platform"})
    has_hour = bool(lowered & {"hour", "hour of day"})
    has_day = "day of week" in lowered
    has_month = bool(lowered & {"month", "year"})
    has_location = bool(lowered & {"country", "state", "city", "location"})
    has_demographic = any(
        token in header for header in lowered for token in ("age", "gender", "ethnic")
    )

    if has_demographic:
        export_type, category = "Nielsen Demographics", "demographic"
    elif has_location:
        export_type, category = "Geographic Distribution", "geographic"
    elif has_device and has_daypart:
        export_type, category = "Daypart by Device Cross-Analysis", "device"
    elif has_device:
        export_type, category = "Device Analysis", "device"
    elif has_daypart and has_hour:
        export_type = next(
            (label for token, label in _DAYPART_FILENAME_TYPES if token in filename_lower),
            "Daypart Detail",
        )
        category = "daypart"
    elif has_daypart:
        export_type, category = "Daypart Performance", "daypart"
    elif has_hour:
        export_type, category = "Hourly Patterns", "hourly"
    elif has_day:
        export_type, category = "Day of Week Analysis", "daily"
    elif has_month:
        export_type, category = "Monthly Trends", "daily"
    elif has_station:
        export_type, category = "Daily Overview", "daily"
    else:
        export_type, category = "unknown", "unknown"

    return ExportTypeInfo(
        type=export_type,
        category=category,
        has_station=has_station,
        has_daypart=has_daypart,
        has_device=has_device,
        has_hour=has_hour,
    )
