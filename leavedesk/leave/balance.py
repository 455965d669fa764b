"""Leave balance arithmetic.

Figures are half-day granular decimals. ``available`` is never stored; it
is derived from the four balance columns every time it is read.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Number = Union[Decimal, int, float, str, None]

_ZERO = Decimal("0")


def to_decimal(value: Number) -> Decimal:
    """Coerce a column value or JSON number to ``Decimal`` (``None`` is 0)."""
    if value is None:
        return _ZERO
    if isinstance(value, Decimal):
        return value
    # str() keeps 0.1 as Decimal("0.1") instead of its binary expansion
    return Decimal(str(value))


def compute_available(
    *,
    entitled: Number,
    used: Number,
    carried_forward: Number,
    adjusted: Number,
) -> Decimal:
    """``entitled + carried_forward + adjusted - used``; may be negative."""
    return (
        to_decimal(entitled)
        + to_decimal(carried_forward)
        + to_decimal(adjusted)
        - to_decimal(used)
    )


def clamped_available(
    *,
    entitled: Number,
    used: Number,
    carried_forward: Number,
    adjusted: Number,
) -> Decimal:
    """Available days floored at zero, as shown in team balance views."""
    return max(
        _ZERO,
        compute_available(
            entitled=entitled,
            used=used,
            carried_forward=carried_forward,
            adjusted=adjusted,
        ),
    )


def total_entitlement(
    *,
    entitled: Number,
    carried_forward: Number,
    adjusted: Number,
) -> Decimal:
    """Everything granted for the year, before usage."""
    return to_decimal(entitled) + to_decimal(carried_forward) + to_decimal(adjusted)


def lop_shortfall(requested: Number, available: Number) -> Decimal:
    """Days of a request not covered by the available balance."""
    covered = max(_ZERO, to_decimal(available))
    return max(_ZERO, to_decimal(requested) - covered)


def round_half_up(value: Number) -> int:
    """Nearest integer with halves rounded away from zero (2.5 -> 3)."""
    return int(to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
