"""Cart editing with stock checks"""

from typing import List
from pos_gateway.domain.models import CartLine, Product
from pos_gateway.domain.exceptions import InsufficientStockError, OutOfStockError


def add_product(cart: List[CartLine], product: Product) -> List[CartLine]:
    """
    Add one unit of a product, merging with an existing line.

    Raises:
        OutOfStockError: product stock is zero
        InsufficientStockError: line already holds all available stock
    """
    if product.stock <= 0:
        raise OutOfStockError(f"{product.name} is out of stock")

    for line in cart:
        if line.product_id == product.product_id:
            if line.quantity >= product.stock:
                raise InsufficientStockError(f"Insufficient stock for {product.name}")
            return [
                CartLine(
                    product_id=l.product_id,
                    product_name=l.product_name,
                    quantity=l.quantity + 1,
                    unit_price_cents=l.unit_price_cents,
                )
                if l.product_id == product.product_id
                else l
                for l in cart
            ]

    return [
        *cart,
        CartLine(
            product_id=product.product_id,
            product_name=product.name,
            quantity=1,
            unit_price_cents=product.price_cents,
        ),
    ]


def update_quantity(cart: List[CartLine], product_id: str, change: int) -> List[CartLine]:
    """Shift a line's quantity; a change that would drop it below 1 is ignored"""
    updated = []
    for line in cart:
        new_quantity = line.quantity + change
        if line.product_id == product_id and new_quantity > 0:
            line = CartLine(line.product_id, line.product_name, new_quantity, line.unit_price_cents)
        updated.append(line)
    return updated


def remove_line(cart: List[CartLine], product_id: str) -> List[CartLine]:
    return [line for line in cart if line.product_id != product_id]
