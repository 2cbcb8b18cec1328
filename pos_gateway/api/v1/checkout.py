"""Checkout endpoints - live totals and multi-tender payment"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from pos_gateway.api.v1.schemas import (
    AddTenderRequest,
    CheckoutState,
    QuoteResponse,
    RemoveTenderRequest,
    TenderListResponse,
)
from pos_gateway.api.v1.state import load_checkout, tenders_to_schema, totals_to_schema
from pos_gateway.api.dependencies import CheckoutIdentity, get_checkout_identity, get_request_id
from pos_gateway.infrastructure.database.session import get_db
from pos_gateway.domain.pricing import calculate_totals
from pos_gateway.domain.tenders import add_tender, pay_remaining, remove_tender
from pos_gateway.domain.loyalty import validate_points_redemption
from pos_gateway.domain.exceptions import (
    AlreadyPaidError,
    InsufficientLoyaltyPointsError,
    InvalidTenderAmountError,
    NotFoundError,
    TenderNotFoundError,
)
from pos_gateway.infrastructure.observability.metrics import record_rejection, tender_counter
from pos_gateway.infrastructure.observability.logging import log_checkout_rejected

router = APIRouter()


@router.post("/checkout/quote", response_model=QuoteResponse)
def quote_checkout(
    state: CheckoutState,
    db: Session = Depends(get_db),
    identity: CheckoutIdentity = Depends(get_checkout_identity),
):
    """
    Recompute every checkout amount for the posted state.

    Loyalty redemption is validated here too so the register can flag an
    over-redemption while the operator is still editing; the sale
    submission repeats the same check authoritatively.
    """
    try:
        loaded = load_checkout(db, identity, state)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    totals = calculate_totals(loaded.cart, loaded.discounts, loaded.context, loaded.tenders, loaded.pending)

    points_error = None
    points_available = None
    if loaded.loyalty_active:
        points_available = loaded.customer_snapshot.loyalty_points
        try:
            validate_points_redemption(state.loyalty_points_redeemed, points_available)
        except InsufficientLoyaltyPointsError as e:
            points_error = str(e)

    return QuoteResponse(
        totals=totals_to_schema(totals),
        tax_rate_bp=loaded.context.tax_rate_bp,
        loyalty_discount_bp=loaded.discounts.loyalty_discount_bp,
        loyalty_points_available=points_available,
        loyalty_points_error=points_error,
    )


@router.post("/checkout/tenders", response_model=TenderListResponse)
def confirm_tender(
    body: AddTenderRequest,
    request: Request,
    db: Session = Depends(get_db),
    identity: CheckoutIdentity = Depends(get_checkout_identity),
):
    """
    Confirm a tender entry against the posted state.

    With pay_remaining=true the entry covers exactly the remaining base;
    otherwise amount_cents is required. A rejected tender leaves the
    posted state as it was.
    """
    request_id = get_request_id(request)

    try:
        loaded = load_checkout(db, identity, body.state)
        totals = calculate_totals(loaded.cart, loaded.discounts, loaded.context, loaded.tenders)

        if body.pay_remaining:
            tenders = pay_remaining(loaded.tenders, totals, loaded.context, body.method, body.installments)
        else:
            tenders = add_tender(
                loaded.tenders,
                totals,
                loaded.context,
                body.method,
                body.amount_cents or 0,
                body.installments,
                body.currency,
            )

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    except (InvalidTenderAmountError, AlreadyPaidError) as e:
        reason = "already_paid" if isinstance(e, AlreadyPaidError) else "invalid_tender_amount"
        record_rejection(reason)
        log_checkout_rejected(request_id, str(identity.company_id), reason, str(e))
        raise HTTPException(status_code=422, detail=str(e))

    tender_counter.labels(method=body.method.value).inc()
    new_totals = calculate_totals(loaded.cart, loaded.discounts, loaded.context, tenders, loaded.pending)
    logging.info(
        "Tender confirmed",
        extra={"request_id": request_id, "method": body.method.value, "remaining_cents": new_totals.remaining_cents},
    )

    return TenderListResponse(tenders=tenders_to_schema(tenders), totals=totals_to_schema(new_totals))


@router.post("/checkout/tenders/{tender_id}/remove", response_model=TenderListResponse)
def delete_tender(
    tender_id: str,
    body: RemoveTenderRequest,
    db: Session = Depends(get_db),
    identity: CheckoutIdentity = Depends(get_checkout_identity),
):
    """Remove a tender entry; totals are recomputed from the remaining list"""
    try:
        loaded = load_checkout(db, identity, body.state)
        tenders = remove_tender(loaded.tenders, tender_id)
    except (NotFoundError, TenderNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))

    totals = calculate_totals(loaded.cart, loaded.discounts, loaded.context, tenders, loaded.pending)
    return TenderListResponse(tenders=tenders_to_schema(tenders), totals=totals_to_schema(totals))
