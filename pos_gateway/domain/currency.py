"""Currency conversion for tenders paid in a foreign currency"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Mapping


def convert(
    amount_cents: int,
    from_currency: str,
    to_currency: str,
    rates: Mapping[str, float],
    base_currency: str = "ARS",
) -> int:
    """
    Convert an amount between currencies through the base currency.

    Rates are quoted as base-currency units per one foreign unit
    (e.g. {"USD": 1000.0} means 1 USD = 1000 ARS). A currency without a
    rate is treated as already being in the base currency.

    Example:
        convert(1000, "USD", "ARS", {"USD": 950.5}) → 950500
    """
    if from_currency == to_currency:
        return amount_cents

    amount = Decimal(amount_cents)

    if from_currency != base_currency:
        from_rate = rates.get(from_currency)
        if from_rate:
            amount = amount * Decimal(str(from_rate))

    if to_currency != base_currency:
        to_rate = rates.get(to_currency)
        if to_rate and to_rate > 0:
            amount = amount / Decimal(str(to_rate))

    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
