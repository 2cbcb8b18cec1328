"""Sale record assembly and the checkout completion gate"""

from typing import List, Optional
from pos_gateway.domain.models import (
    CartLine,
    CheckoutTotals,
    CustomerSnapshot,
    DiscountInputs,
    PricingContext,
    SaleItemRecord,
    SalePaymentRecord,
    SaleRecord,
    TenderEntry,
    TenderMethod,
)
from pos_gateway.domain.exceptions import EmptyCartError, OutstandingBalanceError
from pos_gateway.domain.loyalty import points_earned, validate_points_redemption
from pos_gateway.domain.money import from_cents
from pos_gateway.domain.pricing import can_complete


def primary_payment_method(tenders: List[TenderEntry]) -> str:
    """Method of the tender with the largest total amount (cash when none)"""
    if not tenders:
        return TenderMethod.CASH.value
    largest = max(tenders, key=lambda t: t.total_amount_cents)
    return largest.method.value


def build_sale(
    cart: List[CartLine],
    totals: CheckoutTotals,
    tenders: List[TenderEntry],
    discounts: DiscountInputs,
    context: PricingContext,
    customer: Optional[CustomerSnapshot] = None,
    warehouse_id: Optional[str] = None,
) -> SaleRecord:
    """
    Validate a checkout and build the sale record to persist.

    Validation order:
    1. Outstanding balance (nothing is written while anything is unpaid)
    2. Empty cart
    3. Loyalty points against the customer's live balance

    Raises:
        OutstandingBalanceError, EmptyCartError, InsufficientLoyaltyPointsError
    """
    if not can_complete(totals):
        raise OutstandingBalanceError("Complete the payment before processing the sale")

    if not cart:
        raise EmptyCartError("Cart is empty")

    redeemed = discounts.loyalty_points_redeemed if customer is not None else 0
    if redeemed > 0:
        validate_points_redemption(redeemed, customer.loyalty_points)

    installments = max((t.installments for t in tenders), default=1)
    installment_amount = totals.total_cents // installments if installments > 1 else 0

    return SaleRecord(
        company_id=context.company_id,
        user_id=context.user_id,
        customer_id=customer.customer_id if customer else None,
        subtotal_cents=totals.subtotal_cents,
        discount_cents=totals.total_discount_cents,
        discount_rate_bp=totals.applied_manual_discount_bp + totals.applied_loyalty_discount_bp,
        tax_cents=totals.tax_cents,
        tax_rate_bp=context.tax_rate_bp,
        total_cents=totals.total_cents,
        payment_method=primary_payment_method(tenders),
        installments=installments,
        installment_amount_cents=installment_amount,
        items=[
            SaleItemRecord(
                product_id=line.product_id,
                product_name=line.product_name,
                quantity=line.quantity,
                unit_price_cents=line.unit_price_cents,
                subtotal_cents=line.subtotal_cents,
            )
            for line in cart
        ],
        payments=[
            SalePaymentRecord(
                payment_method=t.method.value,
                amount_cents=t.total_amount_cents,
                card_surcharge_cents=t.surcharge_cents,
                installments=t.installments,
                currency=t.currency,
            )
            for t in tenders
        ],
        loyalty_points_redeemed=redeemed,
        loyalty_points_earned=points_earned(totals.total_base_cents, context.loyalty) if customer else 0,
        warehouse_id=warehouse_id,
    )


def cash_payments(record: SaleRecord) -> List[SalePaymentRecord]:
    """Payment rows that go into the cash drawer"""
    return [p for p in record.payments if p.payment_method == TenderMethod.CASH.value]


def cash_movement_description(sale_number: str, items: List[SaleItemRecord]) -> str:
    """
    Drawer income description listing every product sold.

    Example:
        "Sale S-1 - Products: Yerba 1kg (2x$50.00)"
    """
    details = ", ".join(
        f"{item.product_name} ({item.quantity}x${from_cents(item.unit_price_cents)})" for item in items
    )
    return f"Sale {sale_number} - Products: {details}"
