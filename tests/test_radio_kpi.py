"""
tests/test_radio_kpi.py

Pytest unit tests for the radio KPI formulas.

All tests are pure Python: no I/O, deterministic inputs only.
"""

from __future__ import annotations

import math

import pytest

from kpi.radio import RadioKPIFormula, compute_average_cume, compute_tsl


# ---------------------------------------------------------------------------
# Average CUME
# ---------------------------------------------------------------------------


class TestAverageCume:
    @pytest.mark.parametrize(
        "values, expected",
        [
            ([1000.0, 3000.0], 2000.0),
            ([1000.0, 2000.0, 4000.0], 2333.0),
            ([1.0, 2.0], 2.0),
            ([500.0], 500.0),
        ],
    )
    def test_mean_of_positive_values(self, values: list[float], expected: float) -> None:
        assert compute_average_cume(values) == expected

    def test_zero_values_excluded_from_count(self) -> None:
        """A zero-CUME row must not drag the average toward zero."""
        assert compute_average_cume([1000.0, 0.0, 3000.0, 0.0]) == 2000.0

    def test_only_zeros_and_negatives_returns_zero(self) -> None:
        assert compute_average_cume([0.0, -10.0, 0.0]) == 0.0

    def test_empty_returns_zero(self) -> None:
        assert compute_average_cume([]) == 0.0

    def test_nan_ignored(self) -> None:
        assert compute_average_cume([math.nan, 400.0]) == 400.0

    def test_never_equals_sum(self) -> None:
        assert compute_average_cume([1000.0, 3000.0]) != 4000.0


# ---------------------------------------------------------------------------
# TSL
# ---------------------------------------------------------------------------


class TestTSL:
    def test_basic_ratio(self) -> None:
        assert compute_tsl(100, 50) == 2.0

    def test_rounded_to_two_decimals(self) -> None:
        assert compute_tsl(10, 3) == 3.33
        assert compute_tsl(2, 3) == 0.67

    @pytest.mark.parametrize("tlh", [0.0, 10.0, 12345.0, -5.0])
    def test_zero_cume_returns_zero(self, tlh: float) -> None:
        assert compute_tsl(tlh, 0) == 0.0

    def test_zero_tlh_returns_zero(self) -> None:
        assert compute_tsl(0, 250) == 0.0

    def test_nan_inputs_return_zero(self) -> None:
        assert compute_tsl(math.nan, 10) == 0.0
        assert compute_tsl(10, math.nan) == 0.0


# ---------------------------------------------------------------------------
# RadioKPIFormula
# ---------------------------------------------------------------------------


class TestRadioKPIFormula:
    def test_summary_values(self) -> None:
        result = RadioKPIFormula().calculate(
            {
                "cume_values": [1000.0, 3000.0],
                "tlh_values": [2000.0, 4500.0],
                "session_values": [50.0, 70.0],
            }
        )

        assert result["average_cume"] == 2000.0
        assert result["total_tlh"] == 6500.0
        assert result["tsl"] == 3.25
        assert result["average_sessions"] == 60.0
        assert result["record_count"] == 2

    def test_empty_inputs(self) -> None:
        result = RadioKPIFormula().calculate({})

        assert result == {
            "average_cume": 0.0,
            "total_tlh": 0.0,
            "tsl": 0.0,
            "average_sessions": 0.0,
            "record_count": 0,
        }


# ---------------------------------------------------------------------------
# Extreme magnitudes
# ---------------------------------------------------------------------------


class TestLargeValues:
    def test_tsl_beyond_default_decimal_precision(self) -> None:
        assert compute_tsl(1e27, 1) == 1e27

    def test_average_cume_beyond_default_decimal_precision(self) -> None:
        assert compute_average_cume([1e29]) == 1e29

    def test_average_of_near_max_floats_does_not_overflow(self) -> None:
        assert compute_average_cume([1e308, 1e308]) == 1e308

    def test_overflowing_ratio_returns_zero(self) -> None:
        assert compute_tsl(1e308, 1e-10) == 0.0
