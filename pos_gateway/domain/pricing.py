"""Checkout pricing calculator - core business logic for amounts due and paid"""

from typing import Iterable, List, Optional
from pos_gateway.domain.models import (
    CartLine,
    CheckoutTotals,
    DiscountInputs,
    PendingTender,
    PricingContext,
    TenderEntry,
    TenderMethod,
)
from pos_gateway.domain.money import MAX_RATE_BP, apply_rate, clamp_rate


def cart_subtotal(cart: Iterable[CartLine]) -> int:
    """Sum of quantity × unit price over all lines"""
    return sum(line.subtotal_cents for line in cart)


def card_surcharge(
    method: TenderMethod,
    base_amount_cents: int,
    installments: int,
    surcharge_rate_bp: int,
) -> int:
    """
    Financing surcharge for a tender.

    Only card payments split into more than one installment carry a
    surcharge; the rate is multiplied by the number of installments.

    Example:
        rate 8%, 3 installments, base $1000.00
        100000 × (800 × 3) / 10000 = 24000 → $240.00
    """
    if method != TenderMethod.CARD or installments <= 1 or surcharge_rate_bp <= 0:
        return 0
    return apply_rate(base_amount_cents, surcharge_rate_bp * installments)


def calculate_totals(
    cart: List[CartLine],
    discounts: DiscountInputs,
    context: PricingContext,
    tenders: Optional[List[TenderEntry]] = None,
    pending: Optional[PendingTender] = None,
) -> CheckoutTotals:
    """
    Recompute every checkout amount from the current cart and tender list.

    Steps:
    1. Subtotal over cart lines
    2. Manual and loyalty-tier discounts (each rate clamped to 0-100%)
    3. Redeemed points value
    4. Tax on the discounted subtotal
    5. Fold confirmed tenders into paid base, surcharge and collected amounts
    6. Remaining base and the surcharge a pending multi-installment card
       tender would add if it paid the remainder

    Nothing is cached between calls, so removing a tender restores the
    previous totals exactly.
    """
    tenders = tenders or []

    if not cart:
        return CheckoutTotals()

    subtotal = cart_subtotal(cart)

    manual_bp = clamp_rate(discounts.manual_discount_bp)
    loyalty_bp = clamp_rate(discounts.loyalty_discount_bp)
    if context.cap_discounts and manual_bp + loyalty_bp > MAX_RATE_BP:
        # Combined rate capped at 100%; manual discount keeps precedence
        loyalty_bp = MAX_RATE_BP - manual_bp

    manual_discount = apply_rate(subtotal, manual_bp)
    loyalty_discount = apply_rate(subtotal, loyalty_bp)

    points_value = max(discounts.loyalty_points_redeemed, 0) * max(discounts.point_value_cents, 0)
    if context.cap_discounts:
        points_value = min(points_value, subtotal - manual_discount - loyalty_discount)

    total_discount = manual_discount + loyalty_discount + points_value
    tax = apply_rate(subtotal - total_discount, max(context.tax_rate_bp, 0))
    total_base = subtotal - total_discount + tax

    base_paid = sum(t.base_amount_cents for t in tenders)
    surcharge_paid = sum(t.surcharge_cents for t in tenders)
    collected = sum(t.total_amount_cents for t in tenders)

    remaining = total_base - base_paid

    potential = 0
    if pending is not None and remaining > 0:
        potential = card_surcharge(
            pending.method,
            remaining,
            pending.installments,
            context.card_surcharge_rate_bp,
        )

    return CheckoutTotals(
        subtotal_cents=subtotal,
        manual_discount_cents=manual_discount,
        loyalty_discount_cents=loyalty_discount,
        loyalty_points_value_cents=points_value,
        total_discount_cents=total_discount,
        tax_cents=tax,
        total_base_cents=total_base,
        total_base_paid_cents=base_paid,
        surcharge_paid_cents=surcharge_paid,
        total_collected_cents=collected,
        total_cents=total_base + surcharge_paid,
        remaining_cents=remaining,
        potential_card_surcharge_cents=potential,
        applied_manual_discount_bp=manual_bp,
        applied_loyalty_discount_bp=loyalty_bp,
    )


def can_complete(totals: CheckoutTotals) -> bool:
    """Checkout may only complete once the base total is fully covered"""
    return totals.remaining_cents <= 0
