"""Domain models - pure Python dataclasses representing checkout entities"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class TenderMethod(str, Enum):
    """Payment method of a tender entry"""

    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"
    CREDIT = "credit"


class LoyaltyTier(str, Enum):
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"


@dataclass
class CartLine:
    """Single product line in a cart"""

    product_id: str
    product_name: str
    quantity: int
    unit_price_cents: int

    @property
    def subtotal_cents(self) -> int:
        return self.quantity * self.unit_price_cents


@dataclass
class Product:
    """Sellable product snapshot used when adding to a cart"""

    product_id: str
    name: str
    price_cents: int
    stock: int


@dataclass
class DiscountInputs:
    """Discount state entered at the register"""

    manual_discount_bp: int = 0
    loyalty_discount_bp: int = 0
    loyalty_points_redeemed: int = 0
    point_value_cents: int = 0


@dataclass
class LoyaltySettings:
    """Company loyalty program configuration"""

    enabled: bool = False
    points_per_currency: int = 1
    point_value_cents: int = 1
    bronze_threshold: int = 0
    silver_threshold: int = 10_000
    gold_threshold: int = 50_000
    bronze_discount_bp: int = 0
    silver_discount_bp: int = 500
    gold_discount_bp: int = 1_000


@dataclass
class PricingContext:
    """
    Company and session context for a checkout.

    Passed explicitly into every calculation instead of being read from
    a current-company or current-user global.
    """

    company_id: str
    user_id: str = "anonymous"
    tax_rate_bp: int = 0
    card_surcharge_rate_bp: int = 0
    base_currency: str = "ARS"
    exchange_rates: Dict[str, float] = field(default_factory=dict)
    loyalty: LoyaltySettings = field(default_factory=LoyaltySettings)
    cap_discounts: bool = True


@dataclass
class CustomerSnapshot:
    """Customer loyalty state at checkout time"""

    customer_id: str
    loyalty_points: int
    loyalty_tier: str = LoyaltyTier.BRONZE.value


@dataclass
class TenderEntry:
    """Confirmed payment-method contribution toward a sale"""

    id: str
    method: TenderMethod
    base_amount_cents: int
    surcharge_cents: int = 0
    installments: int = 1
    currency: str = "ARS"
    foreign_amount_cents: Optional[int] = None  # Amount as entered, when not in base currency

    @property
    def total_amount_cents(self) -> int:
        return self.base_amount_cents + self.surcharge_cents


@dataclass
class PendingTender:
    """Tender being configured but not yet confirmed"""

    method: TenderMethod = TenderMethod.CASH
    installments: int = 1


@dataclass
class CheckoutTotals:
    """Every derived amount of a checkout, recomputed from scratch on each call"""

    subtotal_cents: int = 0
    manual_discount_cents: int = 0
    loyalty_discount_cents: int = 0
    loyalty_points_value_cents: int = 0
    total_discount_cents: int = 0
    tax_cents: int = 0
    total_base_cents: int = 0
    total_base_paid_cents: int = 0
    surcharge_paid_cents: int = 0
    total_collected_cents: int = 0
    total_cents: int = 0
    remaining_cents: int = 0
    potential_card_surcharge_cents: int = 0
    # Rates actually applied, after clamping and the combined cap
    applied_manual_discount_bp: int = 0
    applied_loyalty_discount_bp: int = 0


@dataclass
class SaleItemRecord:
    product_id: str
    product_name: str
    quantity: int
    unit_price_cents: int
    subtotal_cents: int


@dataclass
class SalePaymentRecord:
    payment_method: str
    amount_cents: int
    card_surcharge_cents: int
    installments: int
    currency: str


@dataclass
class SaleRecord:
    """Sale ready for persistence, with its child item and payment rows"""

    company_id: str
    user_id: str
    customer_id: Optional[str]
    subtotal_cents: int
    discount_cents: int
    discount_rate_bp: int
    tax_cents: int
    tax_rate_bp: int
    total_cents: int
    payment_method: str
    installments: int
    installment_amount_cents: int
    items: List[SaleItemRecord]
    payments: List[SalePaymentRecord]
    loyalty_points_redeemed: int = 0
    loyalty_points_earned: int = 0
    warehouse_id: Optional[str] = None
