"""
tests/test_config.py

Environment-driven settings and startup validation.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from app.config import get_csv_ingestion_settings, get_metrics_settings
from app.main import _validate_env


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
    get_metrics_settings.cache_clear()
    get_csv_ingestion_settings.cache_clear()
    yield
    get_metrics_settings.cache_clear()
    get_csv_ingestion_settings.cache_clear()


def test_metric_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TSL_WARNING_HOURS", raising=False)
    monkeypatch.delenv("DEVICE_FALLS_BACK_TO_STATION", raising=False)

    settings = get_metrics_settings()

    assert settings.tsl_warning_hours == 8.0
    assert settings.device_falls_back_to_station is True


def test_metric_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TSL_WARNING_HOURS", "6.5")
    monkeypatch.setenv("DEVICE_FALLS_BACK_TO_STATION", "false")

    settings = get_metrics_settings()

    assert settings.tsl_warning_hours == 6.5
    assert settings.device_falls_back_to_station is False


def test_ingestion_limits_clamped(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CSV_INGEST_MAX_VALIDATION_ERRORS", "0")
    monkeypatch.setenv("CSV_INGEST_MAX_PREVIEW_RECORDS", "25")
    monkeypatch.setenv("CSV_INGEST_LOG_VALIDATION_ERRORS", "no")

    settings = get_csv_ingestion_settings()

    assert settings.max_validation_errors == 1
    assert settings.max_preview_records == 25
    assert settings.log_validation_errors is False


def test_startup_rejects_bad_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TSL_WARNING_HOURS", "-2")
    monkeypatch.setenv("CSV_INGEST_MAX_PREVIEW_RECORDS", "lots")

    with pytest.raises(RuntimeError) as exc_info:
        _validate_env()

    message = str(exc_info.value)
    assert "TSL_WARNING_HOURS='-2' must be greater than zero." in message
    assert "CSV_INGEST_MAX_PREVIEW_RECORDS='lots' is not an integer." in message
