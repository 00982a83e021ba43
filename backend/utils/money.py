"""
Money helpers - arithmétique en centimes entiers

Les montants sont toujours des int (centimes). Arrondi:
demi-unité arrondie vers +inf (floor(x + 0.5)), jamais l'arrondi bancaire de round().
"""
import math
from typing import Optional


def round_cents(value: float) -> int:
    """Arrondi half-up vers +inf: 2.5 → 3, -2.5 → -2."""
    return int(math.floor(value + 0.5))


def percent_of(amount_cents: int, percent: float) -> int:
    """round(amount * percent / 100)"""
    return round_cents(amount_cents * percent / 100)


def cents_to_percent(cents: Optional[int], balance_cents: int) -> Optional[float]:
    """
    Convertit un montant en % du solde (cents / balance * 100).

    Returns:
        None si le montant est None ou si le solde est ≤ 0
    """
    if cents is None or balance_cents <= 0:
        return None
    return cents / balance_cents * 100


def format_cents(cents: int) -> str:
    """-7500000 → '-75,000.00'"""
    sign = '-' if cents < 0 else ''
    return f"{sign}{abs(cents) / 100:,.2f}"
