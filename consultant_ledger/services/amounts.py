"""Decimal helpers shared by the registry and the work ledger."""

from __future__ import annotations

from decimal import Decimal

ZERO = Decimal("0.00")
Q2 = Decimal("0.01")


def q2(value: Decimal) -> Decimal:
    return value.quantize(Q2)


def money(value: Decimal) -> str:
    """Render an amount at cent precision unless that would drop digits."""

    cents = q2(value)
    return str(cents if cents == value else value)


def has_cents_precision(value: Decimal) -> bool:
    """True when a finite value has no non-zero digits past the hundredths.

    Reads the digit tuple instead of quantizing, so arbitrarily large inputs
    cannot overflow the decimal context.
    """

    _, digits, exponent = value.as_tuple()
    if exponent >= -2:
        return True
    return not any(digits[-(-2 - exponent):])
