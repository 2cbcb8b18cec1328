"""Multi-tender payment: confirming and removing tender entries"""

import uuid
from typing import List, Optional
from pos_gateway.domain.models import CheckoutTotals, PricingContext, TenderEntry, TenderMethod
from pos_gateway.domain.exceptions import AlreadyPaidError, InvalidTenderAmountError, TenderNotFoundError
from pos_gateway.domain.pricing import card_surcharge
from pos_gateway.domain.currency import convert


def add_tender(
    tenders: List[TenderEntry],
    totals: CheckoutTotals,
    context: PricingContext,
    method: TenderMethod,
    amount_cents: int,
    installments: int = 1,
    currency: Optional[str] = None,
) -> List[TenderEntry]:
    """
    Confirm a tender entry against the current totals.

    The amount is taken in `currency` (base currency by default) and
    converted before validation. The surcharge uses the entry's own
    installment count; non-card methods are always single-installment.

    Returns a new tender list; the input list is left untouched.

    Raises:
        InvalidTenderAmountError: amount ≤ 0 or above the remaining base
    """
    currency = currency or context.base_currency

    if amount_cents <= 0:
        raise InvalidTenderAmountError("Enter a valid amount")

    base_amount = convert(
        amount_cents,
        currency,
        context.base_currency,
        context.exchange_rates,
        context.base_currency,
    )
    if base_amount <= 0:
        raise InvalidTenderAmountError("Enter a valid amount")

    if base_amount > totals.remaining_cents:
        raise InvalidTenderAmountError("Base amount exceeds the remaining balance")

    installments = installments if method == TenderMethod.CARD else 1
    if installments < 1:
        raise InvalidTenderAmountError("Installments must be at least 1")

    entry = TenderEntry(
        id=uuid.uuid4().hex,
        method=method,
        base_amount_cents=base_amount,
        surcharge_cents=card_surcharge(method, base_amount, installments, context.card_surcharge_rate_bp),
        installments=installments,
        currency=currency,
        foreign_amount_cents=amount_cents if currency != context.base_currency else None,
    )
    return [*tenders, entry]


def pay_remaining(
    tenders: List[TenderEntry],
    totals: CheckoutTotals,
    context: PricingContext,
    method: TenderMethod,
    installments: int = 1,
) -> List[TenderEntry]:
    """
    Confirm a tender for exactly the remaining base amount.

    Any card surcharge is computed on top by `add_tender`.

    Raises:
        AlreadyPaidError: nothing is left to pay
    """
    if totals.remaining_cents <= 0:
        raise AlreadyPaidError("The total is already paid")

    return add_tender(tenders, totals, context, method, totals.remaining_cents, installments)


def remove_tender(tenders: List[TenderEntry], tender_id: str) -> List[TenderEntry]:
    """Return a new tender list without the given entry"""
    if not any(t.id == tender_id for t in tenders):
        raise TenderNotFoundError(f"Tender {tender_id} not found")
    return [t for t in tenders if t.id != tender_id]
