"""Data access layer for checkout entities"""

import time
import uuid
from typing import List, Optional
from sqlalchemy.orm import Session
from pos_gateway.infrastructure.database.models import (
    CashMovement,
    CashRegister,
    Company,
    Customer,
    LoyaltyTransaction,
    Product,
    Sale,
    SaleItem,
    SalePayment,
    Warehouse,
    WarehouseStock,
)
from pos_gateway.domain.models import (
    CustomerSnapshot,
    LoyaltySettings,
    PricingContext,
    Product as ProductSnapshot,
    SaleRecord,
)
from pos_gateway.domain.loyalty import tier_for_points
from pos_gateway.domain.sale import cash_movement_description, cash_payments


class CompanyRepository:
    """Repository for companies and their checkout settings"""

    def __init__(self, db: Session):
        self.db = db

    def get_company(self, company_id: uuid.UUID) -> Optional[Company]:
        return self.db.query(Company).filter(Company.id == company_id).first()

    def build_pricing_context(
        self,
        company: Company,
        user_id: str,
        base_currency: str,
        cap_discounts: bool,
    ) -> PricingContext:
        """Translate stored company settings into an explicit pricing context"""
        return PricingContext(
            company_id=str(company.id),
            user_id=user_id,
            tax_rate_bp=company.default_tax_rate_bp,
            card_surcharge_rate_bp=company.card_surcharge_rate_bp,
            base_currency=base_currency,
            exchange_rates={r.currency: r.rate for r in company.exchange_rates},
            loyalty=LoyaltySettings(
                enabled=company.loyalty_enabled,
                points_per_currency=company.loyalty_points_per_currency,
                point_value_cents=company.loyalty_point_value_cents,
                bronze_threshold=company.loyalty_bronze_threshold,
                silver_threshold=company.loyalty_silver_threshold,
                gold_threshold=company.loyalty_gold_threshold,
                bronze_discount_bp=company.loyalty_bronze_discount_bp,
                silver_discount_bp=company.loyalty_silver_discount_bp,
                gold_discount_bp=company.loyalty_gold_discount_bp,
            ),
            cap_discounts=cap_discounts,
        )


class CustomerRepository:
    """Repository for customers and loyalty balances"""

    def __init__(self, db: Session):
        self.db = db

    def get_customer(self, company_id: uuid.UUID, customer_id: uuid.UUID) -> Optional[Customer]:
        return (
            self.db.query(Customer)
            .filter(Customer.id == customer_id, Customer.company_id == company_id)
            .first()
        )

    @staticmethod
    def to_snapshot(customer: Customer) -> CustomerSnapshot:
        return CustomerSnapshot(
            customer_id=str(customer.id),
            loyalty_points=customer.loyalty_points,
            loyalty_tier=customer.loyalty_tier,
        )


class ProductRepository:
    """Repository for catalog products"""

    def __init__(self, db: Session):
        self.db = db

    def get_product(self, company_id: uuid.UUID, product_id: uuid.UUID) -> Optional[Product]:
        return (
            self.db.query(Product)
            .filter(Product.id == product_id, Product.company_id == company_id, Product.active.is_(True))
            .first()
        )

    @staticmethod
    def to_snapshot(product: Product) -> ProductSnapshot:
        return ProductSnapshot(
            product_id=str(product.id),
            name=product.name,
            price_cents=product.price_cents,
            stock=product.stock,
        )

    def decrement_stock(self, company_id: uuid.UUID, product_id: uuid.UUID, quantity: int) -> None:
        """Subtract sold units; unknown products are left alone"""
        product = (
            self.db.query(Product)
            .filter(Product.id == product_id, Product.company_id == company_id)
            .first()
        )
        if product:
            product.stock = product.stock - quantity


class WarehouseRepository:
    """Repository for warehouses and per-warehouse stock"""

    def __init__(self, db: Session):
        self.db = db

    def get_warehouse(self, company_id: uuid.UUID, warehouse_id: uuid.UUID) -> Optional[Warehouse]:
        return (
            self.db.query(Warehouse)
            .filter(Warehouse.id == warehouse_id, Warehouse.company_id == company_id, Warehouse.active.is_(True))
            .first()
        )

    def decrement_stock(self, warehouse_id: uuid.UUID, product_id: uuid.UUID, quantity: int) -> None:
        """Subtract sold units from one warehouse; products it does not stock are left alone"""
        row = (
            self.db.query(WarehouseStock)
            .filter(WarehouseStock.warehouse_id == warehouse_id, WarehouseStock.product_id == product_id)
            .first()
        )
        if row:
            row.stock = row.stock - quantity


class SaleRepository:
    """Repository for sales with their items and payments"""

    def __init__(self, db: Session):
        self.db = db

    def create_sale(self, record: SaleRecord) -> Sale:
        """Persist sale header, item rows and payment rows"""
        db_sale = Sale(
            sale_number=f"S-{time.time_ns()}",
            company_id=uuid.UUID(record.company_id),
            user_id=record.user_id,
            customer_id=uuid.UUID(record.customer_id) if record.customer_id else None,
            warehouse_id=uuid.UUID(record.warehouse_id) if record.warehouse_id else None,
            subtotal_cents=record.subtotal_cents,
            discount_cents=record.discount_cents,
            discount_rate_bp=record.discount_rate_bp,
            tax_cents=record.tax_cents,
            tax_rate_bp=record.tax_rate_bp,
            total_cents=record.total_cents,
            payment_method=record.payment_method,
            installments=record.installments,
            installment_amount_cents=record.installment_amount_cents,
        )
        self.db.add(db_sale)
        self.db.flush()  # Get ID without committing

        for item in record.items:
            self.db.add(
                SaleItem(
                    sale_id=db_sale.id,
                    product_id=uuid.UUID(item.product_id),
                    product_name=item.product_name,
                    quantity=item.quantity,
                    unit_price_cents=item.unit_price_cents,
                    subtotal_cents=item.subtotal_cents,
                )
            )

        for payment in record.payments:
            self.db.add(
                SalePayment(
                    sale_id=db_sale.id,
                    payment_method=payment.payment_method,
                    amount_cents=payment.amount_cents,
                    card_surcharge_cents=payment.card_surcharge_cents,
                    installments=payment.installments,
                    currency=payment.currency,
                )
            )

        return db_sale

    def apply_loyalty(self, customer: Customer, sale: Sale, record: SaleRecord, settings: LoyaltySettings) -> None:
        """Deduct redeemed points, credit earned points, log both movements, and re-tier"""
        if record.loyalty_points_redeemed > 0:
            customer.loyalty_points = customer.loyalty_points - record.loyalty_points_redeemed
            self.db.add(
                LoyaltyTransaction(
                    company_id=sale.company_id,
                    customer_id=customer.id,
                    points=-record.loyalty_points_redeemed,
                    type="redeemed",
                    reference_id=sale.id,
                    description=f"Points redeemed on sale {sale.sale_number}",
                    user_id=record.user_id,
                )
            )

        if record.loyalty_points_earned > 0:
            customer.loyalty_points = customer.loyalty_points + record.loyalty_points_earned
            self.db.add(
                LoyaltyTransaction(
                    company_id=sale.company_id,
                    customer_id=customer.id,
                    points=record.loyalty_points_earned,
                    type="earned",
                    reference_id=sale.id,
                    description=f"Points earned on sale {sale.sale_number}",
                    user_id=record.user_id,
                )
            )

        if settings.enabled:
            customer.loyalty_tier = tier_for_points(customer.loyalty_points, settings).value

    def get_sale(self, company_id: uuid.UUID, sale_id: uuid.UUID) -> Optional[Sale]:
        """Fetch sale with items and payments"""
        return (
            self.db.query(Sale)
            .filter(Sale.id == sale_id, Sale.company_id == company_id)
            .first()
        )

    def get_sales_by_company(self, company_id: uuid.UUID, limit: int = 20) -> List[Sale]:
        """Fetch most recent sales for a company"""
        return (
            self.db.query(Sale)
            .filter(Sale.company_id == company_id)
            .order_by(Sale.created_at.desc())
            .limit(limit)
            .all()
        )


class CashRegisterRepository:
    """Repository for cash drawer sessions and their movements"""

    def __init__(self, db: Session):
        self.db = db

    def get_open_register(self, company_id: uuid.UUID) -> Optional[CashRegister]:
        """Most recently opened register still open for the company"""
        return (
            self.db.query(CashRegister)
            .filter(CashRegister.company_id == company_id, CashRegister.status == "open")
            .order_by(CashRegister.opening_date.desc())
            .first()
        )

    def record_sale_income(self, register: CashRegister, sale: Sale, record: SaleRecord) -> List[CashMovement]:
        """One income movement per cash tender of the sale"""
        description = cash_movement_description(sale.sale_number, record.items)
        movements = []
        for payment in cash_payments(record):
            movement = CashMovement(
                cash_register_id=register.id,
                company_id=sale.company_id,
                user_id=record.user_id,
                type="income",
                amount_cents=payment.amount_cents,
                category="Sale",
                description=description,
                reference=sale.sale_number,
            )
            self.db.add(movement)
            movements.append(movement)
        return movements
