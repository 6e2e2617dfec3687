"""
kpi/base.py

Shared contract and input handling for radio KPI formulas.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Iterable


def is_finite_number(value: Any) -> bool:
    """
    True for finite ints and floats. Booleans are not metric values.
    """

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


class BaseKPIFormula(ABC):
    """
    A formula reads named metric sequences and returns named KPI values.

    ``input_keys`` lists the sequences a formula reads; a key absent from
    the inputs is treated as an empty sequence. Formulas stay pure: no
    I/O and no logging inside :meth:`calculate`.
    """

    input_keys: ClassVar[tuple[str, ...]] = ()

    @staticmethod
    def numeric_values(inputs: dict[str, Any], key: str) -> list[float]:
        """
        Finite numeric entries of ``inputs[key]`` as floats, others dropped.
        """

        raw: Iterable[Any] = inputs.get(key) or []
        return [float(value) for value in raw if is_finite_number(value)]

    @abstractmethod
    def calculate(self, inputs: dict[str, Any]) -> dict[str, Any]:
        """
        Compute KPI values from the sequences named in ``input_keys``.
        """
