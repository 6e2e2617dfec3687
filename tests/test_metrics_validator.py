"""
tests/test_metrics_validator.py

Unit tests for record-level metric validation.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app.domain.radio_metrics import CanonicalMetricRecord, NielsenRecord
from app.validators.metrics_validator import MetricsValidator, validate


def _record(cume: float, tlh: float) -> CanonicalMetricRecord:
    return CanonicalMetricRecord(
        cume=cume,
        tlh=tlh,
        tsl=0.0,
        active_sessions=0.0,
        date=datetime(2024, 1, 8, tzinfo=timezone.utc),
    )


class TestMetricsValidator:
    def test_valid_record(self) -> None:
        result = validate(_record(100, 50))

        assert result.is_valid is True
        assert result.errors == ()
        assert result.warnings == ()

    def test_negative_cume_is_error(self) -> None:
        result = validate(_record(-1, 50))

        assert result.is_valid is False
        assert "CUME cannot be negative" in result.errors

    def test_negative_tlh_is_error(self) -> None:
        result = validate(_record(100, -5))

        assert result.is_valid is False
        assert result.errors == ("TLH cannot be negative",)

    def test_zero_values_are_valid(self) -> None:
        assert validate(_record(0, 0)).is_valid is True

    def test_high_tsl_is_warning_not_error(self) -> None:
        result = validate(_record(10, 100))

        assert result.is_valid is True
        assert result.warnings == ("Unusually high TSL: 10.00 hours - verify data accuracy",)

    def test_threshold_is_configurable(self) -> None:
        validator = MetricsValidator(tsl_warning_hours=1.0)

        assert validator.validate(_record(100, 150)).warnings
        assert not MetricsValidator().validate(_record(100, 150)).warnings

    def test_tsl_exactly_at_threshold_is_not_flagged(self) -> None:
        assert validate(_record(10, 80)).warnings == ()


class TestMappingInput:
    def test_missing_tlh(self) -> None:
        result = validate({"cume": 100})

        assert result.is_valid is False
        assert result.errors == ("Missing TLH (Total Listening Hours) value",)

    def test_blank_cume_counts_as_missing(self) -> None:
        result = validate({"cume": "", "tlh": 5})

        assert result.errors == ("Missing CUME value",)

    def test_non_numeric_value(self) -> None:
        result = validate({"cume": "abc", "tlh": 1})

        assert result.errors == ("CUME must be numeric",)

    def test_keys_matched_case_insensitively(self) -> None:
        assert validate({"CUME": 100, "TLH": 50}).is_valid is True

    @pytest.mark.parametrize("raw", ["250", 250, 250.0])
    def test_numeric_strings_accepted(self, raw: object) -> None:
        assert validate({"cume": raw, "tlh": "10"}).is_valid is True

    def test_tlh_optional_when_not_required(self) -> None:
        assert validate({"cume": 100}, require_tlh=False).is_valid is True


class TestNielsenRecords:
    def test_nielsen_record_without_tlh(self) -> None:
        record = NielsenRecord(
            aqh_share=2.5,
            aqh_persons=1200,
            cume=15000,
            tsl=3.5,
            date=datetime(2024, 3, 1, tzinfo=timezone.utc),
        )

        assert validate(record, require_tlh=False).is_valid is True
        assert validate(record).errors == ("Missing TLH (Total Listening Hours) value",)
