"""Cart endpoints - add, adjust and remove lines with stock checks"""

import uuid
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from pos_gateway.api.v1.schemas import CartAddRequest, CartQuantityRequest, CartRemoveRequest, CartResponse
from pos_gateway.api.v1.state import cart_from_schema, cart_to_schema
from pos_gateway.api.dependencies import CheckoutIdentity, get_checkout_identity
from pos_gateway.infrastructure.database.session import get_db
from pos_gateway.infrastructure.database.repositories import ProductRepository
from pos_gateway.domain.cart import add_product, remove_line, update_quantity
from pos_gateway.domain.pricing import cart_subtotal
from pos_gateway.domain.exceptions import InsufficientStockError, OutOfStockError
from pos_gateway.infrastructure.observability.metrics import record_rejection

router = APIRouter()


def _cart_response(cart) -> CartResponse:
    return CartResponse(cart=cart_to_schema(cart), subtotal_cents=cart_subtotal(cart))


@router.post("/cart/items", response_model=CartResponse)
def add_cart_item(
    body: CartAddRequest,
    db: Session = Depends(get_db),
    identity: CheckoutIdentity = Depends(get_checkout_identity),
):
    """Add one unit of a catalog product to the posted cart"""
    product_repo = ProductRepository(db)
    product = product_repo.get_product(identity.company_id, body.product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    try:
        cart = add_product(cart_from_schema(body.cart), ProductRepository.to_snapshot(product))
    except OutOfStockError as e:
        record_rejection("out_of_stock")
        raise HTTPException(status_code=409, detail=str(e))
    except InsufficientStockError as e:
        record_rejection("insufficient_stock")
        raise HTTPException(status_code=409, detail=str(e))

    return _cart_response(cart)


@router.post("/cart/items/{product_id}/quantity", response_model=CartResponse)
def change_cart_quantity(product_id: uuid.UUID, body: CartQuantityRequest):
    """Shift a line's quantity by `change`; quantities never drop below 1"""
    cart = update_quantity(cart_from_schema(body.cart), str(product_id), body.change)
    return _cart_response(cart)


@router.post("/cart/items/{product_id}/remove", response_model=CartResponse)
def remove_cart_item(product_id: uuid.UUID, body: CartRemoveRequest):
    cart = remove_line(cart_from_schema(body.cart), str(product_id))
    return _cart_response(cart)
