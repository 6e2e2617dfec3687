"""
app/mappers/field_resolver.py

Alias-table lookup of canonical fields in vendor rows.

Vendor exports name the same column differently ("CUME", "Cume",
"Cumulative Audience"). Each canonical field owns an ordered alias tuple;
the first alias with a non-empty value wins, so alias order is priority.
Adding a vendor format means adding an alias table here.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

TRITON_ALIASES: dict[str, tuple[str, ...]] = {
    "cume": ("CUME", "Cume", "cume", "Cumulative Audience"),
    "tlh": ("TLH", "Tlh", "tlh", "Total Listening Hours"),
    "active_sessions": ("AAS", "Active Sessions", "ActiveSessions", "Sessions", "SS"),
    "date": ("Week", "Date", "date", "DATE"),
    "station": ("Station", "station", "STATION", "Stream"),
    "daypart": ("Daypart", "daypart", "DAYPART", "Day Part"),
    "device": ("Device", "device", "DEVICE", "Device Family", "Platform"),
    "hour": ("Hour", "Hour of Day", "hour"),
}

NIELSEN_ALIASES: dict[str, tuple[str, ...]] = {
    "aqh_share": ("AQH Share", "AQHShare", "Share"),
    "aqh_persons": ("AQH Persons", "AQHPersons", "AQH"),
    "cume": ("CUME", "Cume", "Cumulative Persons"),
    "tsl": ("TSL", "Time Spent Listening"),
    "date": ("Date", "date", "Survey Period"),
    "daypart": ("Daypart", "daypart"),
}


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and value.strip() == ""


def resolve(row: Mapping[str, Any], aliases: Sequence[str]) -> Any | None:
    """
    Return the value of the first alias present in *row* with a non-empty value.

    Each alias is tried as an exact key first, then case-insensitively.
    Blank strings and ``None`` count as absent. Never raises.
    """

    lowered: dict[str, str] | None = None
    for alias in aliases:
        value = row.get(alias)
        if not _is_blank(value):
            return value

        if lowered is None:
            lowered = {}
            for key in row:
                if isinstance(key, str):
                    lowered.setdefault(key.lower(), key)
        key = lowered.get(alias.lower())
        if key is not None and not _is_blank(row[key]):
            return row[key]
    return None


class FieldResolver:
    """
    Resolves canonical fields of one vendor format through its alias table.
    """

    def __init__(self, aliases: Mapping[str, Sequence[str]]) -> None:
        self._aliases: dict[str, tuple[str, ...]] = {
            canonical: tuple(values) for canonical, values in aliases.items()
        }

    @property
    def canonical_fields(self) -> tuple[str, ...]:
        return tuple(self._aliases)

    def aliases_for(self, canonical_field: str) -> tuple[str, ...]:
        return self._aliases.get(canonical_field, ())

    def resolve(self, row: Mapping[str, Any], canonical_field: str) -> Any | None:
        return resolve(row, self.aliases_for(canonical_field))
