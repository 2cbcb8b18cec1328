"""Integration tests for API endpoints"""

import uuid
import pytest
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from pos_gateway.infrastructure.database.models import (
    CashMovement,
    CashRegister,
    Company,
    Customer,
    Product,
    Sale,
    SaleItem,
    SalePayment,
    Warehouse,
    WarehouseStock,
)


def _headers(company: Company) -> dict:
    return {"X-Company-ID": str(company.id), "X-User-ID": "cashier-1"}


def _cart(product: Product, quantity: int = 2) -> list:
    return [
        {
            "product_id": str(product.id),
            "product_name": product.name,
            "quantity": quantity,
            "unit_price_cents": product.price_cents,
        }
    ]


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "X-Request-ID" in response.headers


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "pos_sales" in response.text


@pytest.mark.integration
def test_quote_scenario(client: TestClient, company: Company, product: Product):
    """2 × $50 with 10% discount and 21% tax → $108.90"""
    response = client.post(
        "/v1/checkout/quote",
        headers=_headers(company),
        json={"cart": _cart(product), "manual_discount_bp": 1000},
    )

    assert response.status_code == 200
    totals = response.json()["totals"]
    assert totals["subtotal_cents"] == 10000
    assert totals["manual_discount_cents"] == 1000
    assert totals["tax_cents"] == 1890
    assert totals["total_base_cents"] == 10890
    assert totals["remaining_cents"] == 10890
    assert totals["can_complete"] is False


@pytest.mark.integration
def test_quote_pending_card_surcharge(client: TestClient, company: Company, product: Product):
    response = client.post(
        "/v1/checkout/quote",
        headers=_headers(company),
        json={
            "cart": _cart(product),
            "manual_discount_bp": 1000,
            "pending": {"method": "card", "installments": 3},
        },
    )

    assert response.status_code == 200
    assert response.json()["totals"]["potential_card_surcharge_cents"] == 1634


@pytest.mark.integration
def test_quote_unknown_company(client: TestClient, db: Session):
    response = client.post(
        "/v1/checkout/quote",
        headers={"X-Company-ID": str(uuid.uuid4())},
        json={"cart": []},
    )
    assert response.status_code == 404


def test_quote_requires_company_header(client: TestClient):
    response = client.post("/v1/checkout/quote", json={"cart": []})
    assert response.status_code == 422


@pytest.mark.integration
def test_quote_with_loyalty_customer(client: TestClient, company: Company, customer: Customer, product: Product):
    """Gold tier (10%) plus 500 points at 1 cent each"""
    response = client.post(
        "/v1/checkout/quote",
        headers=_headers(company),
        json={"cart": _cart(product), "customer_id": str(customer.id), "loyalty_points_redeemed": 500},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["loyalty_discount_bp"] == 1000
    assert data["loyalty_points_available"] == 1000
    assert data["loyalty_points_error"] is None
    assert data["totals"]["loyalty_discount_cents"] == 1000
    assert data["totals"]["loyalty_points_value_cents"] == 500
    assert data["totals"]["tax_cents"] == 1785  # 8500 × 21%
    assert data["totals"]["total_base_cents"] == 10285


@pytest.mark.integration
def test_quote_flags_points_over_redemption(client: TestClient, company: Company, customer: Customer, product: Product):
    response = client.post(
        "/v1/checkout/quote",
        headers=_headers(company),
        json={"cart": _cart(product), "customer_id": str(customer.id), "loyalty_points_redeemed": 1500},
    )

    assert response.status_code == 200
    assert "Insufficient points" in response.json()["loyalty_points_error"]


@pytest.mark.integration
def test_confirm_split_tenders(client: TestClient, company: Company, product: Product):
    """$50 cash, then pay the remaining $58.90 on card in 3 installments"""
    state = {"cart": _cart(product), "manual_discount_bp": 1000}

    first = client.post(
        "/v1/checkout/tenders",
        headers=_headers(company),
        json={"state": state, "method": "cash", "amount_cents": 5000},
    )
    assert first.status_code == 200
    state["tenders"] = first.json()["tenders"]
    assert first.json()["totals"]["remaining_cents"] == 5890

    second = client.post(
        "/v1/checkout/tenders",
        headers=_headers(company),
        json={"state": state, "method": "card", "installments": 3, "pay_remaining": True},
    )

    assert second.status_code == 200
    data = second.json()
    assert data["tenders"][1]["surcharge_cents"] == 884
    assert data["tenders"][1]["total_amount_cents"] == 6774
    assert data["totals"]["total_collected_cents"] == 11774
    assert data["totals"]["remaining_cents"] == 0
    assert data["totals"]["can_complete"] is True


@pytest.mark.integration
def test_confirm_tender_exceeding_remaining(client: TestClient, company: Company, product: Product):
    response = client.post(
        "/v1/checkout/tenders",
        headers=_headers(company),
        json={"state": {"cart": _cart(product)}, "method": "cash", "amount_cents": 999_999},
    )

    assert response.status_code == 422
    assert "exceeds" in response.json()["detail"]


@pytest.mark.integration
def test_pay_remaining_when_paid(client: TestClient, company: Company, product: Product):
    state = {
        "cart": _cart(product, quantity=1),
        "tenders": [{"id": "t1", "method": "cash", "base_amount_cents": 6050}],
    }

    response = client.post(
        "/v1/checkout/tenders",
        headers=_headers(company),
        json={"state": state, "method": "cash", "pay_remaining": True},
    )

    assert response.status_code == 422


@pytest.mark.integration
def test_remove_tender_restores_totals(client: TestClient, company: Company, product: Product):
    state = {"cart": _cart(product), "manual_discount_bp": 1000}
    before = client.post("/v1/checkout/quote", headers=_headers(company), json=state).json()["totals"]

    added = client.post(
        "/v1/checkout/tenders",
        headers=_headers(company),
        json={"state": state, "method": "card", "amount_cents": 4000, "installments": 6},
    ).json()
    state["tenders"] = added["tenders"]
    tender_id = added["tenders"][0]["id"]

    removed = client.post(
        f"/v1/checkout/tenders/{tender_id}/remove",
        headers=_headers(company),
        json={"state": state},
    )

    assert removed.status_code == 200
    assert removed.json()["tenders"] == []
    assert removed.json()["totals"] == before


@pytest.mark.integration
def test_remove_unknown_tender(client: TestClient, company: Company, product: Product):
    response = client.post(
        "/v1/checkout/tenders/missing/remove",
        headers=_headers(company),
        json={"state": {"cart": _cart(product)}},
    )
    assert response.status_code == 404


@pytest.mark.integration
def test_cart_add_and_stock_limit(client: TestClient, db: Session, company: Company):
    product = Product(company_id=company.id, name="Alfajor", price_cents=800, stock=2)
    db.add(product)
    db.commit()

    cart = []
    for _ in range(2):
        response = client.post(
            "/v1/cart/items",
            headers=_headers(company),
            json={"cart": cart, "product_id": str(product.id)},
        )
        assert response.status_code == 200
        cart = response.json()["cart"]

    assert cart[0]["quantity"] == 2
    assert response.json()["subtotal_cents"] == 1600

    response = client.post(
        "/v1/cart/items",
        headers=_headers(company),
        json={"cart": cart, "product_id": str(product.id)},
    )
    assert response.status_code == 409


@pytest.mark.integration
def test_cart_add_out_of_stock(client: TestClient, db: Session, company: Company):
    product = Product(company_id=company.id, name="Alfajor", price_cents=800, stock=0)
    db.add(product)
    db.commit()

    response = client.post(
        "/v1/cart/items",
        headers=_headers(company),
        json={"cart": [], "product_id": str(product.id)},
    )
    assert response.status_code == 409


@pytest.mark.integration
def test_cart_quantity_and_remove(client: TestClient, company: Company, product: Product):
    response = client.post(
        f"/v1/cart/items/{product.id}/quantity",
        json={"cart": _cart(product), "change": -1},
    )
    assert response.json()["cart"][0]["quantity"] == 1

    response = client.post(f"/v1/cart/items/{product.id}/remove", json={"cart": _cart(product)})
    assert response.json()["cart"] == []
    assert response.json()["subtotal_cents"] == 0


@pytest.mark.integration
@patch("pos_gateway.infrastructure.clients.ledger.LedgerClient.send_sale_event")
def test_create_sale(
    mock_ledger: AsyncMock,
    client: TestClient,
    db: Session,
    company: Company,
    product: Product,
):
    """Submit a split-tender sale, then read it back"""
    mock_ledger.return_value = None

    response = client.post(
        "/v1/sales",
        headers=_headers(company),
        json={
            "cart": _cart(product),
            "manual_discount_bp": 1000,
            "tenders": [
                {"id": "t1", "method": "cash", "base_amount_cents": 5000},
                {"id": "t2", "method": "card", "base_amount_cents": 5890, "installments": 3},
            ],
        },
    )

    assert response.status_code == 201
    data = response.json()
    assert data["total_cents"] == 11774
    assert data["payment_method"] == "card"
    assert data["installments"] == 3
    assert data["installment_amount_cents"] == 3924
    mock_ledger.assert_called_once()
    assert mock_ledger.call_args.args[0]["event"] == "SALE_COMPLETED"

    db.refresh(product)
    assert product.stock == 8

    detail = client.get(f"/v1/sales/{data['sale_id']}", headers=_headers(company))
    assert detail.status_code == 200
    sale = detail.json()
    assert sale["tax_cents"] == 1890
    assert len(sale["items"]) == 1
    assert sorted(p["amount_cents"] for p in sale["payments"]) == [5000, 6774]

    listing = client.get("/v1/sales", headers=_headers(company))
    assert listing.status_code == 200
    assert [s["sale_id"] for s in listing.json()["sales"]] == [data["sale_id"]]


@pytest.mark.integration
def test_create_sale_with_outstanding_balance(client: TestClient, db: Session, company: Company, product: Product):
    response = client.post(
        "/v1/sales",
        headers=_headers(company),
        json={
            "cart": _cart(product),
            "tenders": [{"id": "t1", "method": "cash", "base_amount_cents": 5000}],
        },
    )

    assert response.status_code == 422
    assert db.query(Sale).count() == 0
    db.refresh(product)
    assert product.stock == 10


@pytest.mark.integration
@patch("pos_gateway.infrastructure.clients.ledger.LedgerClient.send_sale_event")
def test_create_sale_with_loyalty(
    mock_ledger: AsyncMock,
    client: TestClient,
    db: Session,
    company: Company,
    customer: Customer,
    product: Product,
):
    """Redeemed points are deducted and earned points credited"""
    mock_ledger.return_value = None

    response = client.post(
        "/v1/sales",
        headers=_headers(company),
        json={
            "cart": _cart(product),
            "customer_id": str(customer.id),
            "loyalty_points_redeemed": 500,
            "tenders": [{"id": "t1", "method": "cash", "base_amount_cents": 10285}],
        },
    )

    assert response.status_code == 201
    data = response.json()
    assert data["loyalty_points_redeemed"] == 500
    assert data["loyalty_points_earned"] == 102

    db.refresh(customer)
    assert customer.loyalty_points == 1000 - 500 + 102


@pytest.mark.integration
def test_create_sale_points_over_redemption(
    client: TestClient,
    db: Session,
    company: Company,
    customer: Customer,
    product: Product,
):
    response = client.post(
        "/v1/sales",
        headers=_headers(company),
        json={
            "cart": _cart(product),
            "customer_id": str(customer.id),
            "loyalty_points_redeemed": 1500,
            "tenders": [{"id": "t1", "method": "cash", "base_amount_cents": 9075}],
        },
    )

    assert response.status_code == 422
    assert db.query(Sale).count() == 0


def test_get_sale_invalid_id(client: TestClient, company: Company):
    response = client.get("/v1/sales/not-a-uuid", headers=_headers(company))
    assert response.status_code == 400


@pytest.mark.integration
def test_quote_ignores_points_when_loyalty_disabled(
    client: TestClient,
    db: Session,
    company: Company,
    customer: Customer,
    product: Product,
):
    company.loyalty_enabled = False
    db.commit()

    response = client.post(
        "/v1/checkout/quote",
        headers=_headers(company),
        json={"cart": _cart(product), "customer_id": str(customer.id), "loyalty_points_redeemed": 1500},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["loyalty_points_error"] is None
    assert data["loyalty_points_available"] is None
    assert data["totals"]["loyalty_points_value_cents"] == 0
    assert data["totals"]["total_base_cents"] == 12100


@pytest.mark.integration
@patch("pos_gateway.infrastructure.clients.ledger.LedgerClient.send_sale_event")
def test_create_sale_recomputes_tender_surcharges(
    mock_ledger: AsyncMock,
    client: TestClient,
    db: Session,
    company: Company,
    product: Product,
):
    """Posted surcharges are replaced by the ones the company rate yields"""
    mock_ledger.return_value = None

    response = client.post(
        "/v1/sales",
        headers=_headers(company),
        json={
            "cart": _cart(product),
            "manual_discount_bp": 1000,
            "tenders": [
                {"id": "t1", "method": "cash", "base_amount_cents": 5000, "surcharge_cents": 700, "installments": 6},
                {"id": "t2", "method": "card", "base_amount_cents": 5890, "surcharge_cents": 0, "installments": 3},
            ],
        },
    )

    assert response.status_code == 201
    assert response.json()["total_cents"] == 11774
    assert response.json()["installments"] == 3

    payments = {p.payment_method: p for p in db.query(SalePayment).all()}
    assert payments["cash"].card_surcharge_cents == 0
    assert payments["cash"].amount_cents == 5000
    assert payments["cash"].installments == 1
    assert payments["card"].card_surcharge_cents == 884
    assert payments["card"].amount_cents == 6774


@pytest.mark.integration
@patch("pos_gateway.infrastructure.clients.ledger.LedgerClient.send_sale_event")
def test_create_sale_uses_catalog_prices(
    mock_ledger: AsyncMock,
    client: TestClient,
    db: Session,
    company: Company,
    product: Product,
):
    mock_ledger.return_value = None
    cart = [{"product_id": str(product.id), "product_name": "Renamed", "quantity": 2, "unit_price_cents": 1}]

    underpaid = client.post(
        "/v1/sales",
        headers=_headers(company),
        json={"cart": cart, "tenders": [{"id": "t1", "method": "cash", "base_amount_cents": 2}]},
    )
    assert underpaid.status_code == 422
    assert db.query(Sale).count() == 0

    response = client.post(
        "/v1/sales",
        headers=_headers(company),
        json={"cart": cart, "tenders": [{"id": "t1", "method": "cash", "base_amount_cents": 12100}]},
    )

    assert response.status_code == 201
    item = db.query(SaleItem).one()
    assert item.unit_price_cents == 5000
    assert item.subtotal_cents == 10000
    assert item.product_name == "Yerba 1kg"


@pytest.mark.integration
def test_create_sale_unknown_product(client: TestClient, db: Session, company: Company):
    cart = [{"product_id": str(uuid.uuid4()), "product_name": "Ghost", "quantity": 1, "unit_price_cents": 100}]

    response = client.post(
        "/v1/sales",
        headers=_headers(company),
        json={"cart": cart, "tenders": [{"id": "t1", "method": "cash", "base_amount_cents": 121}]},
    )

    assert response.status_code == 404
    assert db.query(Sale).count() == 0


@pytest.mark.integration
def test_create_sale_inactive_product(client: TestClient, db: Session, company: Company, product: Product):
    product.active = False
    db.commit()

    response = client.post(
        "/v1/sales",
        headers=_headers(company),
        json={"cart": _cart(product), "tenders": [{"id": "t1", "method": "cash", "base_amount_cents": 12100}]},
    )

    assert response.status_code == 404


@pytest.mark.integration
@patch("pos_gateway.infrastructure.clients.ledger.LedgerClient.send_sale_event")
def test_create_sale_decrements_warehouse_stock(
    mock_ledger: AsyncMock,
    client: TestClient,
    db: Session,
    company: Company,
    product: Product,
):
    mock_ledger.return_value = None
    warehouse = Warehouse(company_id=company.id, code="DEP-01", name="Deposito central", is_main=True)
    db.add(warehouse)
    db.commit()
    stock = WarehouseStock(warehouse_id=warehouse.id, product_id=product.id, stock=6)
    db.add(stock)
    db.commit()

    response = client.post(
        "/v1/sales",
        headers=_headers(company),
        json={
            "cart": _cart(product),
            "warehouse_id": str(warehouse.id),
            "tenders": [{"id": "t1", "method": "transfer", "base_amount_cents": 12100}],
        },
    )

    assert response.status_code == 201
    db.refresh(stock)
    db.refresh(product)
    assert stock.stock == 4
    assert product.stock == 8

    detail = client.get(f"/v1/sales/{response.json()['sale_id']}", headers=_headers(company))
    assert detail.json()["warehouse_id"] == str(warehouse.id)


@pytest.mark.integration
def test_create_sale_unknown_warehouse(client: TestClient, db: Session, company: Company, product: Product):
    response = client.post(
        "/v1/sales",
        headers=_headers(company),
        json={
            "cart": _cart(product),
            "warehouse_id": str(uuid.uuid4()),
            "tenders": [{"id": "t1", "method": "cash", "base_amount_cents": 12100}],
        },
    )

    assert response.status_code == 404
    assert db.query(Sale).count() == 0
    db.refresh(product)
    assert product.stock == 10


@pytest.mark.integration
@patch("pos_gateway.infrastructure.clients.ledger.LedgerClient.send_sale_event")
def test_create_sale_records_cash_income(
    mock_ledger: AsyncMock,
    client: TestClient,
    db: Session,
    company: Company,
    product: Product,
):
    """Only the cash tender lands in the open drawer"""
    mock_ledger.return_value = None
    register = CashRegister(company_id=company.id, status="open", opening_amount_cents=10000)
    db.add(register)
    db.commit()

    response = client.post(
        "/v1/sales",
        headers=_headers(company),
        json={
            "cart": _cart(product),
            "manual_discount_bp": 1000,
            "tenders": [
                {"id": "t1", "method": "cash", "base_amount_cents": 5000},
                {"id": "t2", "method": "card", "base_amount_cents": 5890, "installments": 3},
            ],
        },
    )

    assert response.status_code == 201
    movement = db.query(CashMovement).one()
    assert movement.cash_register_id == register.id
    assert movement.type == "income"
    assert movement.amount_cents == 5000
    assert movement.user_id == "cashier-1"
    assert movement.reference == response.json()["sale_number"]
    assert "Yerba 1kg (2x$50.00)" in movement.description


@pytest.mark.integration
@patch("pos_gateway.infrastructure.clients.ledger.LedgerClient.send_sale_event")
def test_create_sale_without_open_register(
    mock_ledger: AsyncMock,
    client: TestClient,
    db: Session,
    company: Company,
    product: Product,
):
    mock_ledger.return_value = None
    db.add(CashRegister(company_id=company.id, status="closed"))
    db.commit()

    response = client.post(
        "/v1/sales",
        headers=_headers(company),
        json={"cart": _cart(product), "tenders": [{"id": "t1", "method": "cash", "base_amount_cents": 12100}]},
    )

    assert response.status_code == 201
    assert db.query(CashMovement).count() == 0
