"""
app/api/dependencies.py

Upload gate for vendor CSV exports.
"""

from __future__ import annotations

from fastapi import File, HTTPException, UploadFile, status

CSV_CONTENT_TYPES = frozenset(
    {
        "text/csv",
        "application/csv",
        "application/vnd.ms-excel",
    }
)


def is_csv_upload(filename: str | None, content_type: str | None) -> bool:
    """
    An upload counts as CSV when its extension or its MIME type says so.

    MIME parameters such as ``; charset=utf-8`` are ignored.
    """

    if (filename or "").strip().lower().endswith(".csv"):
        return True
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    return media_type in CSV_CONTENT_TYPES


def require_csv_upload(file: UploadFile = File(...)) -> UploadFile:
    if not is_csv_upload(file.filename, file.content_type):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only CSV files are supported.",
        )
    return file
