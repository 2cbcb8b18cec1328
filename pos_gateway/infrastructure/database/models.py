"""SQLAlchemy ORM models for companies, catalog, customers, and sales"""

import uuid
from sqlalchemy import Column, String, BigInteger, Boolean, Float, DateTime, Integer, ForeignKey, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class Company(Base):
    """Tenant with its checkout and loyalty settings"""

    __tablename__ = "companies"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    default_tax_rate_bp = Column(Integer, nullable=False, default=0)
    card_surcharge_rate_bp = Column(Integer, nullable=False, default=0)
    loyalty_enabled = Column(Boolean, nullable=False, default=False)
    loyalty_points_per_currency = Column(Integer, nullable=False, default=1)
    loyalty_point_value_cents = Column(Integer, nullable=False, default=1)
    loyalty_bronze_threshold = Column(Integer, nullable=False, default=0)
    loyalty_silver_threshold = Column(Integer, nullable=False, default=10_000)
    loyalty_gold_threshold = Column(Integer, nullable=False, default=50_000)
    loyalty_bronze_discount_bp = Column(Integer, nullable=False, default=0)
    loyalty_silver_discount_bp = Column(Integer, nullable=False, default=500)
    loyalty_gold_discount_bp = Column(Integer, nullable=False, default=1_000)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    exchange_rates = relationship("ExchangeRate", back_populates="company", cascade="all, delete-orphan")


class ExchangeRate(Base):
    """Base-currency units per one unit of a foreign currency"""

    __tablename__ = "exchange_rates"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(UUID(as_uuid=True), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    currency = Column(String(3), nullable=False)
    rate = Column(Float, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    company = relationship("Company", back_populates="exchange_rates")


class Product(Base):
    __tablename__ = "products"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(UUID(as_uuid=True), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    price_cents = Column(BigInteger, nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    active = Column(Boolean, nullable=False, default=True)


class Warehouse(Base):
    """Stock location a sale can be fulfilled from"""

    __tablename__ = "warehouses"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(UUID(as_uuid=True), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    code = Column(Text, nullable=False)
    name = Column(Text, nullable=False)
    is_main = Column(Boolean, nullable=False, default=False)
    active = Column(Boolean, nullable=False, default=True)


class WarehouseStock(Base):
    __tablename__ = "warehouse_stock"
    __table_args__ = (UniqueConstraint("warehouse_id", "product_id", name="uq_warehouse_product"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    warehouse_id = Column(UUID(as_uuid=True), ForeignKey("warehouses.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(UUID(as_uuid=True), ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    stock = Column(Integer, nullable=False, default=0)


class Customer(Base):
    """Customer with loyalty balance"""

    __tablename__ = "customers"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(UUID(as_uuid=True), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    loyalty_points = Column(Integer, nullable=False, default=0)
    loyalty_tier = Column(Text, nullable=False, default="bronze")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Sale(Base):
    """Completed sale header"""

    __tablename__ = "sales"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    sale_number = Column(Text, nullable=False, unique=True)
    company_id = Column(UUID(as_uuid=True), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Text, nullable=False)
    customer_id = Column(UUID(as_uuid=True), ForeignKey("customers.id"), nullable=True)
    warehouse_id = Column(UUID(as_uuid=True), ForeignKey("warehouses.id"), nullable=True)
    subtotal_cents = Column(BigInteger, nullable=False)
    discount_cents = Column(BigInteger, nullable=False)
    discount_rate_bp = Column(Integer, nullable=False)
    tax_cents = Column(BigInteger, nullable=False)
    tax_rate_bp = Column(Integer, nullable=False)
    total_cents = Column(BigInteger, nullable=False)
    payment_method = Column(Text, nullable=False)
    installments = Column(Integer, nullable=False, default=1)
    installment_amount_cents = Column(BigInteger, nullable=False, default=0)
    status = Column(Text, nullable=False, default="completed")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    items = relationship("SaleItem", back_populates="sale", cascade="all, delete-orphan")
    payments = relationship("SalePayment", back_populates="sale", cascade="all, delete-orphan")


class SaleItem(Base):
    __tablename__ = "sale_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    sale_id = Column(UUID(as_uuid=True), ForeignKey("sales.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(UUID(as_uuid=True), nullable=False)
    product_name = Column(Text, nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price_cents = Column(BigInteger, nullable=False)
    subtotal_cents = Column(BigInteger, nullable=False)

    sale = relationship("Sale", back_populates="items")


class SalePayment(Base):
    """One row per tender entry of a sale"""

    __tablename__ = "sale_payments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    sale_id = Column(UUID(as_uuid=True), ForeignKey("sales.id", ondelete="CASCADE"), nullable=False)
    payment_method = Column(Text, nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    card_surcharge_cents = Column(BigInteger, nullable=False, default=0)
    installments = Column(Integer, nullable=False, default=1)
    currency = Column(String(3), nullable=False)

    sale = relationship("Sale", back_populates="payments")


class LoyaltyTransaction(Base):
    """Point movement (earned or redeemed) tied to a sale"""

    __tablename__ = "loyalty_transactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(UUID(as_uuid=True), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    customer_id = Column(UUID(as_uuid=True), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    points = Column(Integer, nullable=False)
    type = Column(Text, nullable=False)  # earned | redeemed
    reference_id = Column(UUID(as_uuid=True), nullable=True)
    description = Column(Text, nullable=True)
    user_id = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class CashRegister(Base):
    """Cash drawer session; at most one is expected open per company"""

    __tablename__ = "cash_registers"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(UUID(as_uuid=True), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(Text, nullable=False, default="open")  # open | closed
    opening_amount_cents = Column(BigInteger, nullable=False, default=0)
    opening_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    closing_date = Column(DateTime(timezone=True), nullable=True)

    movements = relationship("CashMovement", back_populates="cash_register", cascade="all, delete-orphan")


class CashMovement(Base):
    __tablename__ = "cash_movements"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    cash_register_id = Column(UUID(as_uuid=True), ForeignKey("cash_registers.id", ondelete="CASCADE"), nullable=False, index=True)
    company_id = Column(UUID(as_uuid=True), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Text, nullable=False)
    type = Column(Text, nullable=False)  # income | expense
    amount_cents = Column(BigInteger, nullable=False)
    category = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    reference = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    cash_register = relationship("CashRegister", back_populates="movements")
