"""
app/validators package marker.
"""

from app.validators.metrics_validator import MetricsValidator, validate

__all__ = [
    "MetricsValidator",
    "validate",
]
