"""Charge totals and two-decimal display rounding."""

import math
from collections.abc import Mapping
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable

from tenant_billing.models.tenant import ChargeField


def _amount(record: Any, field: ChargeField) -> float:
    if isinstance(record, Mapping):
        return float(record[field.value])
    return float(getattr(record, field.value))


def total_charge(record: Any) -> float:
    """
    Water + electricity + rent for one record, at full precision.

    Accepts a model or a mapping with the three amount keys.
    """
    return sum(_amount(record, field) for field in ChargeField)


def grand_total(records: Iterable[Any]) -> float:
    """Sum of total_charge over many records."""
    return sum(total_charge(record) for record in records)


def round_amount(value: float) -> float:
    """Round to 2 decimal places (ROUND_HALF_UP) for display."""
    if not math.isfinite(value):
        return value
    return float(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_amount(value: float) -> str:
    """Two-decimal text, e.g. 2130 -> '2130.00'."""
    if not math.isfinite(value):
        return str(value)
    return f"{round_amount(value):.2f}"
