"""
app/mappers package marker.
"""

from app.mappers.field_resolver import NIELSEN_ALIASES, TRITON_ALIASES, FieldResolver, resolve
from app.mappers.format_detector import detect_export_type, detect_format

__all__ = [
    "FieldResolver",
    "NIELSEN_ALIASES",
    "TRITON_ALIASES",
    "detect_export_type",
    "detect_format",
    "resolve",
]
