"""Pydantic schemas for API request/response validation"""

import uuid
from pydantic import BaseModel, Field
from typing import List, Optional

from pos_gateway.domain.models import TenderMethod


class CartLineSchema(BaseModel):
    """Single cart line"""

    product_id: uuid.UUID
    product_name: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    unit_price_cents: int = Field(..., ge=0, description="Unit price in cents")


class TenderSchema(BaseModel):
    """Confirmed tender entry as held by the client"""

    id: str
    method: TenderMethod
    base_amount_cents: int = Field(..., gt=0)
    surcharge_cents: int = Field(0, ge=0)
    installments: int = Field(1, ge=1)
    currency: Optional[str] = None
    foreign_amount_cents: Optional[int] = None
    total_amount_cents: Optional[int] = None  # Derived; ignored on input


class PendingTenderSchema(BaseModel):
    """Tender currently being configured at the register"""

    method: TenderMethod = TenderMethod.CASH
    installments: int = Field(1, ge=1)


class CheckoutState(BaseModel):
    """Full transient checkout state posted by the register"""

    cart: List[CartLineSchema] = []
    manual_discount_bp: int = Field(0, description="Manual discount in basis points (clamped to 0-10000)")
    customer_id: Optional[uuid.UUID] = None
    loyalty_points_redeemed: int = Field(0, ge=0)
    tenders: List[TenderSchema] = []
    pending: Optional[PendingTenderSchema] = None
    warehouse_id: Optional[uuid.UUID] = Field(None, description="Warehouse the sale is fulfilled from")


class TotalsSchema(BaseModel):
    subtotal_cents: int
    manual_discount_cents: int
    loyalty_discount_cents: int
    loyalty_points_value_cents: int
    total_discount_cents: int
    tax_cents: int
    total_base_cents: int
    total_base_paid_cents: int
    surcharge_paid_cents: int
    total_collected_cents: int
    total_cents: int
    remaining_cents: int
    potential_card_surcharge_cents: int
    can_complete: bool


class QuoteResponse(BaseModel):
    """Response for POST /v1/checkout/quote"""

    totals: TotalsSchema
    tax_rate_bp: int
    loyalty_discount_bp: int
    loyalty_points_available: Optional[int] = None
    loyalty_points_error: Optional[str] = None


class AddTenderRequest(BaseModel):
    """Request body for POST /v1/checkout/tenders"""

    state: CheckoutState
    method: TenderMethod
    amount_cents: Optional[int] = Field(None, description="Omit together with pay_remaining=true")
    installments: int = Field(1, ge=1)
    currency: Optional[str] = None
    pay_remaining: bool = False


class RemoveTenderRequest(BaseModel):
    state: CheckoutState


class TenderListResponse(BaseModel):
    """Updated tender list together with recomputed totals"""

    tenders: List[TenderSchema]
    totals: TotalsSchema


class CartAddRequest(BaseModel):
    """Request body for POST /v1/cart/items"""

    cart: List[CartLineSchema] = []
    product_id: uuid.UUID


class CartQuantityRequest(BaseModel):
    cart: List[CartLineSchema]
    change: int


class CartRemoveRequest(BaseModel):
    cart: List[CartLineSchema]


class CartResponse(BaseModel):
    cart: List[CartLineSchema]
    subtotal_cents: int


class SaleResponse(BaseModel):
    """Response for POST /v1/sales"""

    sale_id: str
    sale_number: str
    total_cents: int
    payment_method: str
    installments: int
    installment_amount_cents: int
    loyalty_points_redeemed: int
    loyalty_points_earned: int


class SaleItemSchema(BaseModel):
    product_id: str
    product_name: str
    quantity: int
    unit_price_cents: int
    subtotal_cents: int


class SalePaymentSchema(BaseModel):
    payment_method: str
    amount_cents: int
    card_surcharge_cents: int
    installments: int
    currency: str


class SaleDetailResponse(BaseModel):
    """Response for GET /v1/sales/{sale_id}"""

    sale_id: str
    sale_number: str
    customer_id: Optional[str] = None
    warehouse_id: Optional[str] = None
    subtotal_cents: int
    discount_cents: int
    discount_rate_bp: int
    tax_cents: int
    tax_rate_bp: int
    total_cents: int
    payment_method: str
    installments: int
    installment_amount_cents: int
    status: str
    items: List[SaleItemSchema]
    payments: List[SalePaymentSchema]
    created_at: str


class SaleSummary(BaseModel):
    sale_id: str
    sale_number: str
    total_cents: int
    payment_method: str
    created_at: str


class SaleListResponse(BaseModel):
    """Response for GET /v1/sales"""

    company_id: str
    sales: List[SaleSummary]
