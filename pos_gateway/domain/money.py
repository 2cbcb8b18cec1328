"""Fixed-point money helpers: integer cents and basis-point rates"""

from decimal import Decimal, ROUND_HALF_UP

BP_PER_UNIT = 10_000  # 100% == 10_000 basis points
MAX_RATE_BP = BP_PER_UNIT


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_cents(amount: Decimal | int | float | str) -> int:
    """
    Convert a currency amount in major units to integer cents.

    Example:
        to_cents("108.9") → 10890
    """
    return _round_half_up(Decimal(str(amount)) * 100)


def from_cents(cents: int) -> Decimal:
    """Convert integer cents back to a two-place Decimal amount"""
    return (Decimal(cents) / 100).quantize(Decimal("0.01"))


def percent_to_bp(percent: Decimal | int | float | str) -> int:
    """Convert a percentage (e.g. 21 or 10.5) to basis points"""
    return _round_half_up(Decimal(str(percent)) * 100)


def clamp_rate(rate_bp: int) -> int:
    """Clamp a rate to [0%, 100%]"""
    return max(0, min(rate_bp, MAX_RATE_BP))


def apply_rate(amount_cents: int, rate_bp: int) -> int:
    """
    Apply a basis-point rate to an amount, rounding half-up to the cent.

    Rounding is symmetric around zero so that a negative base produces the
    mirror of the positive result.

    Example:
        apply_rate(5890, 1500) → 884   (58.90 × 15% = 8.835)
    """
    return _round_half_up(Decimal(amount_cents) * Decimal(rate_bp) / BP_PER_UNIT)
