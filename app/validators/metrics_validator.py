"""
app/validators/metrics_validator.py

Structural and domain validation for canonical radio metric records.
"""

from __future__ import annotations

import math
from typing import Any, Mapping

from app.domain.radio_metrics import ValidationResult
from app.mappers.field_resolver import resolve

DEFAULT_TSL_WARNING_HOURS = 8.0

_MISSING = object()

_FIELD_LABELS: dict[str, str] = {"cume": "CUME", "tlh": "TLH"}
_MISSING_MESSAGES: dict[str, str] = {
    "cume": "Missing CUME value",
    "tlh": "Missing TLH (Total Listening Hours) value",
}


def _lookup(record: Any, field_name: str) -> Any:
    if isinstance(record, Mapping):
        value = resolve(record, (field_name,))
        return _MISSING if value is None else value
    value = getattr(record, field_name, None)
    return _MISSING if value is None else value


def _to_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


class MetricsValidator:
    """
    Validates one metric record and reports errors and warnings.

    Errors exclude the record from downstream use; warnings do not.
    Accepts canonical record objects or plain metric mappings.
    """

    def __init__(self, *, tsl_warning_hours: float = DEFAULT_TSL_WARNING_HOURS) -> None:
        self._tsl_warning_hours = tsl_warning_hours

    @property
    def tsl_warning_hours(self) -> float:
        return self._tsl_warning_hours

    def validate(
        self,
        record: Any,
        *,
        require_cume: bool = True,
        require_tlh: bool = True,
    ) -> ValidationResult:
        errors: list[str] = []
        warnings: list[str] = []

        cume = self._check_metric(record, "cume", required=require_cume, errors=errors)
        tlh = self._check_metric(record, "tlh", required=require_tlh, errors=errors)

        if cume is not None and tlh is not None and cume > 0 and tlh > 0:
            tsl = tlh / cume
            if tsl > self._tsl_warning_hours:
                warnings.append(f"Unusually high TSL: {tsl:.2f} hours - verify data accuracy")

        return ValidationResult(
            is_valid=not errors,
            errors=tuple(errors),
            warnings=tuple(warnings),
        )

    @staticmethod
    def _check_metric(
        record: Any,
        field_name: str,
        *,
        required: bool,
        errors: list[str],
    ) -> float | None:
        label = _FIELD_LABELS[field_name]
        raw = _lookup(record, field_name)
        if raw is _MISSING:
            if required:
                errors.append(_MISSING_MESSAGES[field_name])
            return None

        value = _to_number(raw)
        if value is None:
            errors.append(f"{label} must be numeric")
            return None
        if value < 0:
            errors.append(f"{label} cannot be negative")
        return value


def validate(
    record: Any,
    *,
    require_tlh: bool = True,
    tsl_warning_hours: float = DEFAULT_TSL_WARNING_HOURS,
) -> ValidationResult:
    """
    Validate *record* with a default-configured :class:`MetricsValidator`.
    """

    return MetricsValidator(tsl_warning_hours=tsl_warning_hours).validate(
        record, require_tlh=require_tlh
    )
