"""Conversion between posted checkout state and domain objects"""

import uuid
from dataclasses import dataclass
from typing import List, Optional
from sqlalchemy.orm import Session

from pos_gateway.api.dependencies import CheckoutIdentity
from pos_gateway.api.v1.schemas import CartLineSchema, CheckoutState, TenderSchema, TotalsSchema
from pos_gateway.config import settings
from pos_gateway.domain.exceptions import NotFoundError
from pos_gateway.domain.loyalty import tier_discount_bp
from pos_gateway.domain.models import (
    CartLine,
    CheckoutTotals,
    CustomerSnapshot,
    DiscountInputs,
    PendingTender,
    PricingContext,
    TenderEntry,
    TenderMethod,
)
from pos_gateway.domain.pricing import can_complete, card_surcharge
from pos_gateway.infrastructure.database.models import Customer
from pos_gateway.infrastructure.database.repositories import CompanyRepository, CustomerRepository, ProductRepository


@dataclass
class LoadedCheckout:
    """Everything the pricing calculator needs for one request"""

    context: PricingContext
    cart: List[CartLine]
    discounts: DiscountInputs
    tenders: List[TenderEntry]
    pending: Optional[PendingTender]
    customer: Optional[Customer]
    customer_snapshot: Optional[CustomerSnapshot]
    loyalty_active: bool = False


def load_context(db: Session, identity: CheckoutIdentity) -> PricingContext:
    """
    Build the pricing context for the requesting company.

    Raises:
        NotFoundError: unknown company
    """
    company_repo = CompanyRepository(db)
    company = company_repo.get_company(identity.company_id)
    if company is None:
        raise NotFoundError("Company not found")

    return company_repo.build_pricing_context(
        company,
        user_id=identity.user_id,
        base_currency=settings.base_currency,
        cap_discounts=settings.cap_combined_discounts,
    )


def cart_from_schema(lines: List[CartLineSchema]) -> List[CartLine]:
    return [
        CartLine(
            product_id=str(line.product_id),
            product_name=line.product_name,
            quantity=line.quantity,
            unit_price_cents=line.unit_price_cents,
        )
        for line in lines
    ]


def price_cart(db: Session, company_id: uuid.UUID, cart: List[CartLine]) -> List[CartLine]:
    """
    Replace posted prices and names with the catalog values.

    Raises:
        NotFoundError: unknown or inactive product
    """
    product_repo = ProductRepository(db)
    priced = []
    for line in cart:
        product = product_repo.get_product(company_id, uuid.UUID(line.product_id))
        if product is None:
            raise NotFoundError(f"Product {line.product_id} not found")
        priced.append(
            CartLine(
                product_id=str(product.id),
                product_name=product.name,
                quantity=line.quantity,
                unit_price_cents=product.price_cents,
            )
        )
    return priced


def cart_to_schema(cart: List[CartLine]) -> List[CartLineSchema]:
    return [
        CartLineSchema(
            product_id=line.product_id,
            product_name=line.product_name,
            quantity=line.quantity,
            unit_price_cents=line.unit_price_cents,
        )
        for line in cart
    ]


def tenders_from_schema(tenders: List[TenderSchema], context: PricingContext) -> List[TenderEntry]:
    """
    Rebuild confirmed tenders from client state.

    The surcharge is recomputed from method, base amount and installments
    with the company rate; any posted surcharge is ignored. Installments
    are forced to 1 for methods other than card.
    """
    entries = []
    for t in tenders:
        installments = t.installments if t.method == TenderMethod.CARD else 1
        entries.append(
            TenderEntry(
                id=t.id,
                method=t.method,
                base_amount_cents=t.base_amount_cents,
                surcharge_cents=card_surcharge(
                    t.method, t.base_amount_cents, installments, context.card_surcharge_rate_bp
                ),
                installments=installments,
                currency=t.currency or context.base_currency,
                foreign_amount_cents=t.foreign_amount_cents,
            )
        )
    return entries


def tenders_to_schema(tenders: List[TenderEntry]) -> List[TenderSchema]:
    return [
        TenderSchema(
            id=t.id,
            method=t.method,
            base_amount_cents=t.base_amount_cents,
            surcharge_cents=t.surcharge_cents,
            installments=t.installments,
            currency=t.currency,
            foreign_amount_cents=t.foreign_amount_cents,
            total_amount_cents=t.total_amount_cents,
        )
        for t in tenders
    ]


def totals_to_schema(totals: CheckoutTotals) -> TotalsSchema:
    return TotalsSchema(
        subtotal_cents=totals.subtotal_cents,
        manual_discount_cents=totals.manual_discount_cents,
        loyalty_discount_cents=totals.loyalty_discount_cents,
        loyalty_points_value_cents=totals.loyalty_points_value_cents,
        total_discount_cents=totals.total_discount_cents,
        tax_cents=totals.tax_cents,
        total_base_cents=totals.total_base_cents,
        total_base_paid_cents=totals.total_base_paid_cents,
        surcharge_paid_cents=totals.surcharge_paid_cents,
        total_collected_cents=totals.total_collected_cents,
        total_cents=totals.total_cents,
        remaining_cents=totals.remaining_cents,
        potential_card_surcharge_cents=totals.potential_card_surcharge_cents,
        can_complete=can_complete(totals),
    )


def load_checkout(db: Session, identity: CheckoutIdentity, state: CheckoutState) -> LoadedCheckout:
    """
    Resolve company settings and customer loyalty state for a posted checkout.

    Redeemed points only count when the company runs a loyalty program and
    a customer is attached to the sale.

    Raises:
        NotFoundError: unknown company or customer
    """
    context = load_context(db, identity)

    customer = None
    snapshot = None
    if state.customer_id is not None:
        customer = CustomerRepository(db).get_customer(identity.company_id, state.customer_id)
        if customer is None:
            raise NotFoundError("Customer not found")
        snapshot = CustomerRepository.to_snapshot(customer)

    loyalty_active = snapshot is not None and context.loyalty.enabled
    discounts = DiscountInputs(
        manual_discount_bp=state.manual_discount_bp,
        loyalty_discount_bp=tier_discount_bp(snapshot, context.loyalty),
        loyalty_points_redeemed=state.loyalty_points_redeemed if loyalty_active else 0,
        point_value_cents=context.loyalty.point_value_cents if loyalty_active else 0,
    )

    pending = None
    if state.pending is not None:
        pending = PendingTender(method=state.pending.method, installments=state.pending.installments)

    return LoadedCheckout(
        context=context,
        cart=cart_from_schema(state.cart),
        discounts=discounts,
        tenders=tenders_from_schema(state.tenders, context),
        pending=pending,
        customer=customer,
        customer_snapshot=snapshot,
        loyalty_active=loyalty_active,
    )
