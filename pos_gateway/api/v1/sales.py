"""Sale endpoints - submit a completed checkout and read sales back"""

import time
import uuid
import logging
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from pos_gateway.api.v1.schemas import (
    CheckoutState,
    SaleDetailResponse,
    SaleItemSchema,
    SaleListResponse,
    SalePaymentSchema,
    SaleResponse,
    SaleSummary,
)
from pos_gateway.api.v1.state import load_checkout, price_cart
from pos_gateway.api.dependencies import CheckoutIdentity, get_checkout_identity, get_ledger_client, get_request_id
from pos_gateway.infrastructure.database.session import get_db
from pos_gateway.infrastructure.database.repositories import (
    CashRegisterRepository,
    ProductRepository,
    SaleRepository,
    WarehouseRepository,
)
from pos_gateway.infrastructure.clients.ledger import LedgerClient
from pos_gateway.domain.pricing import calculate_totals
from pos_gateway.domain.sale import build_sale
from pos_gateway.domain.exceptions import (
    EmptyCartError,
    InsufficientLoyaltyPointsError,
    NotFoundError,
    OutstandingBalanceError,
)
from pos_gateway.infrastructure.observability.metrics import record_rejection, record_sale
from pos_gateway.infrastructure.observability.logging import log_checkout_rejected, log_sale

router = APIRouter()

_REJECTION_REASONS = {
    OutstandingBalanceError: "outstanding_balance",
    EmptyCartError: "empty_cart",
    InsufficientLoyaltyPointsError: "insufficient_points",
}


@router.post("/sales", response_model=SaleResponse, status_code=201)
def create_sale(
    state: CheckoutState,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    identity: CheckoutIdentity = Depends(get_checkout_identity),
    ledger_client: LedgerClient = Depends(get_ledger_client),
):
    """
    Submit a checkout as a completed sale.

    Flow:
    1. Re-price the cart from the catalog and recompute totals; tender
       surcharges are always derived server-side
    2. Gate: fully paid, non-empty cart, points within the live balance
    3. Persist sale + items + payments
    4. Decrement product stock, and warehouse stock when one is given
    5. Apply loyalty redemption and accrual
    6. Record cash tenders as income on the open cash register
    7. Commit and schedule the ledger webhook
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        # 1. Re-price and recompute totals
        loaded = load_checkout(db, identity, state)
        cart = price_cart(db, identity.company_id, loaded.cart)
        totals = calculate_totals(cart, loaded.discounts, loaded.context, loaded.tenders)

        warehouse = None
        if state.warehouse_id is not None:
            warehouse = WarehouseRepository(db).get_warehouse(identity.company_id, state.warehouse_id)
            if warehouse is None:
                raise NotFoundError("Warehouse not found")

        # 2. Validate before any write
        record = build_sale(
            cart,
            totals,
            loaded.tenders,
            loaded.discounts,
            loaded.context,
            loaded.customer_snapshot,
            warehouse_id=str(warehouse.id) if warehouse else None,
        )

        # 3. Persist sale
        sale_repo = SaleRepository(db)
        db_sale = sale_repo.create_sale(record)

        # 4. Stock
        product_repo = ProductRepository(db)
        for item in record.items:
            product_repo.decrement_stock(identity.company_id, uuid.UUID(item.product_id), item.quantity)
        if warehouse is not None:
            warehouse_repo = WarehouseRepository(db)
            for item in record.items:
                warehouse_repo.decrement_stock(warehouse.id, uuid.UUID(item.product_id), item.quantity)

        # 5. Loyalty
        if loaded.customer is not None:
            sale_repo.apply_loyalty(loaded.customer, db_sale, record, loaded.context.loyalty)

        # 6. Cash drawer
        register_repo = CashRegisterRepository(db)
        register = register_repo.get_open_register(identity.company_id)
        if register is not None:
            register_repo.record_sale_income(register, db_sale, record)

        db.commit()

    except NotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except (OutstandingBalanceError, EmptyCartError, InsufficientLoyaltyPointsError) as e:
        db.rollback()
        reason = _REJECTION_REASONS[type(e)]
        record_rejection(reason)
        log_checkout_rejected(request_id, str(identity.company_id), reason, str(e))
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    # 7. Notify ledger after commit
    background_tasks.add_task(
        ledger_client.send_sale_event,
        {
            "event": "SALE_COMPLETED",
            "sale_id": str(db_sale.id),
            "sale_number": db_sale.sale_number,
            "company_id": str(identity.company_id),
            "total_cents": record.total_cents,
            "payments": [
                {"method": p.payment_method, "amount_cents": p.amount_cents, "currency": p.currency}
                for p in record.payments
            ],
        },
    )

    duration_ms = (time.time() - start_time) * 1000
    record_sale(record.payment_method, record.total_cents)
    log_sale(request_id, str(identity.company_id), str(db_sale.id), record.total_cents, record.payment_method, duration_ms)

    return SaleResponse(
        sale_id=str(db_sale.id),
        sale_number=db_sale.sale_number,
        total_cents=record.total_cents,
        payment_method=record.payment_method,
        installments=record.installments,
        installment_amount_cents=record.installment_amount_cents,
        loyalty_points_redeemed=record.loyalty_points_redeemed,
        loyalty_points_earned=record.loyalty_points_earned,
    )


@router.get("/sales/{sale_id}", response_model=SaleDetailResponse)
def get_sale(
    sale_id: str,
    db: Session = Depends(get_db),
    identity: CheckoutIdentity = Depends(get_checkout_identity),
):
    """Retrieve a sale with its item and payment rows"""
    try:
        sale_uuid = uuid.UUID(sale_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid sale ID format")

    sale = SaleRepository(db).get_sale(identity.company_id, sale_uuid)
    if not sale:
        raise HTTPException(status_code=404, detail="Sale not found")

    return SaleDetailResponse(
        sale_id=str(sale.id),
        sale_number=sale.sale_number,
        customer_id=str(sale.customer_id) if sale.customer_id else None,
        warehouse_id=str(sale.warehouse_id) if sale.warehouse_id else None,
        subtotal_cents=sale.subtotal_cents,
        discount_cents=sale.discount_cents,
        discount_rate_bp=sale.discount_rate_bp,
        tax_cents=sale.tax_cents,
        tax_rate_bp=sale.tax_rate_bp,
        total_cents=sale.total_cents,
        payment_method=sale.payment_method,
        installments=sale.installments,
        installment_amount_cents=sale.installment_amount_cents,
        status=sale.status,
        items=[
            SaleItemSchema(
                product_id=str(item.product_id),
                product_name=item.product_name,
                quantity=item.quantity,
                unit_price_cents=item.unit_price_cents,
                subtotal_cents=item.subtotal_cents,
            )
            for item in sale.items
        ],
        payments=[
            SalePaymentSchema(
                payment_method=p.payment_method,
                amount_cents=p.amount_cents,
                card_surcharge_cents=p.card_surcharge_cents,
                installments=p.installments,
                currency=p.currency,
            )
            for p in sale.payments
        ],
        created_at=sale.created_at.isoformat(),
    )


@router.get("/sales", response_model=SaleListResponse)
def list_sales(
    limit: int = Query(20, ge=1, le=200, description="Maximum number of sales"),
    db: Session = Depends(get_db),
    identity: CheckoutIdentity = Depends(get_checkout_identity),
):
    """Most recent sales for the requesting company"""
    sales = SaleRepository(db).get_sales_by_company(identity.company_id, limit=limit)

    return SaleListResponse(
        company_id=str(identity.company_id),
        sales=[
            SaleSummary(
                sale_id=str(s.id),
                sale_number=s.sale_number,
                total_cents=s.total_cents,
                payment_method=s.payment_method,
                created_at=s.created_at.isoformat(),
            )
            for s in sales
        ],
    )
