"""
kpi/radio.py

Radio audience KPI formulas.

Expected inputs
---------------
cume_values : list[float]
    CUME per record. Only positive values contribute to the average.
tlh_values : list[float]
    Total listening hours per record.
session_values : list[float]
    Active sessions per record.

Formulas
--------
Average CUME = round(sum(positive cume) / count(positive cume))
Total TLH    = sum(tlh_values)
TSL          = Total TLH / Average CUME, rounded to 2 decimals

CUME is a de-duplicated head count. Summing it across records counts the
same listeners several times, so every combination of CUME goes through
``compute_average_cume`` and every TSL goes through ``compute_tsl``.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any, Iterable, Sequence

from kpi.base import BaseKPIFormula, is_finite_number

# Enough significant digits for any finite float plus the rounding places.
_ROUNDING_PRECISION = 400


def _round_half_up(value: float, places: int) -> float:
    if not math.isfinite(value):
        return 0.0
    quantum = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        ctx.prec = _ROUNDING_PRECISION
        return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def compute_average_cume(values: Iterable[float]) -> float:
    """
    Average CUME over the positive values in *values*.

    Zero, negative and non-numeric entries are excluded from both the sum
    and the count. Returns ``0.0`` when nothing positive remains.
    """

    positive = [float(v) for v in values if is_finite_number(v) and v > 0]
    if not positive:
        return 0.0
    count = len(positive)
    return _round_half_up(math.fsum(v / count for v in positive), 0)


def compute_tsl(tlh: float, cume: float) -> float:
    """
    Time spent listening: ``tlh / cume`` rounded to 2 decimals.

    Returns ``0.0`` when cume is zero, either input is not a finite number,
    or the ratio itself overflows.
    """

    if not is_finite_number(tlh) or not is_finite_number(cume) or cume == 0:
        return 0.0
    return _round_half_up(tlh / cume, 2)


class RadioKPIFormula(BaseKPIFormula):
    """
    Headline KPIs for a set of radio metric records.

    All arithmetic is self-contained. No I/O, no logging, no side effects.
    """

    input_keys = ("cume_values", "tlh_values", "session_values")

    def calculate(self, inputs: dict[str, Any]) -> dict[str, float | int]:
        """
        Compute average CUME, total TLH, TSL and average sessions.

        Parameters
        ----------
        inputs:
            Dictionary containing the keys listed in the module docstring.
            Missing keys are treated as empty sequences.

        Returns
        -------
        dict
            Keys: ``average_cume``, ``total_tlh``, ``tsl``,
            ``average_sessions``, ``record_count``.
        """

        cume_values: Sequence[float] = inputs.get("cume_values") or []
        tlh_values: Sequence[float] = inputs.get("tlh_values") or []

        average_cume = compute_average_cume(cume_values)
        total_tlh = float(sum(self.numeric_values(inputs, "tlh_values")))
        sessions = self.numeric_values(inputs, "session_values")
        average_sessions = sum(sessions) / len(sessions) if sessions else 0.0

        return {
            "average_cume": average_cume,
            "total_tlh": total_tlh,
            "tsl": compute_tsl(total_tlh, average_cume),
            "average_sessions": round(average_sessions, 2),
            "record_count": max(len(cume_values), len(tlh_values)),
        }
