from __future__ import annotations

import logging
import os

from fastapi import FastAPI


def _validate_env() -> None:
    """
    Validate metric-related environment variables at startup.

    Raises RuntimeError listing every invalid variable so the operator can
    fix all problems in one restart cycle. Unset variables use defaults.
    """

    from app.config import load_env_files

    load_env_files()

    errors: list[str] = []

    # --- TSL warning threshold -------------------------------------------
    raw_tsl = os.getenv("TSL_WARNING_HOURS")
    if raw_tsl is not None:
        try:
            tsl_hours = float(raw_tsl)
        except ValueError:
            errors.append(f"TSL_WARNING_HOURS='{raw_tsl}' is not a number.")
        else:
            if tsl_hours <= 0:
                errors.append(f"TSL_WARNING_HOURS='{raw_tsl}' must be greater than zero.")

    # --- Ingestion limits -------------------------------------------------
    for name in ("CSV_INGEST_MAX_VALIDATION_ERRORS", "CSV_INGEST_MAX_PREVIEW_RECORDS"):
        raw_value = os.getenv(name)
        if raw_value is None:
            continue
        try:
            int(raw_value)
        except ValueError:
            errors.append(f"{name}='{raw_value}' is not an integer.")

    if errors:
        raise RuntimeError(
            "Startup validation failed - invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Radio Metrics API",
        version="1.0.0",
    )

    from app.api.routers import csv_ingestion_router, metrics_router

    application.include_router(csv_ingestion_router)
    application.include_router(metrics_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "healthy", "service": "radio-metrics"}

    logging.getLogger(__name__).info("Radio Metrics API configured")
    return application


app = create_app()
