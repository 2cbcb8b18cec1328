"""Pytest fixtures for testing"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from pos_gateway.api.main import create_app
from pos_gateway.infrastructure.database.models import Base, Company, Customer, Product
from pos_gateway.infrastructure.database.session import get_db
from pos_gateway.domain.models import CartLine, LoyaltySettings, PricingContext


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def company(db: Session) -> Company:
    """Company with 21% tax, 5% card surcharge per installment, and loyalty enabled"""
    company = Company(
        name="Almacen Central",
        default_tax_rate_bp=2100,
        card_surcharge_rate_bp=500,
        loyalty_enabled=True,
        loyalty_points_per_currency=1,
        loyalty_point_value_cents=1,
    )
    db.add(company)
    db.commit()
    return company


@pytest.fixture
def customer(db: Session, company: Company) -> Customer:
    """Gold-tier customer holding 1000 points"""
    customer = Customer(company_id=company.id, name="Lucia", loyalty_points=1000, loyalty_tier="gold")
    db.add(customer)
    db.commit()
    return customer


@pytest.fixture
def product(db: Session, company: Company) -> Product:
    product = Product(company_id=company.id, name="Yerba 1kg", price_cents=5000, stock=10)
    db.add(product)
    db.commit()
    return product


@pytest.fixture
def pricing_context() -> PricingContext:
    """Context matching the scenario: 21% tax, no surcharge, loyalty disabled"""
    return PricingContext(company_id="company-1", tax_rate_bp=2100)


@pytest.fixture
def loyalty_settings() -> LoyaltySettings:
    return LoyaltySettings(enabled=True)


@pytest.fixture
def sample_cart() -> list[CartLine]:
    """Two units at $50.00 (subtotal $100.00)"""
    return [CartLine(product_id="p1", product_name="Yerba 1kg", quantity=2, unit_price_cents=5000)]
