"""Cart Rules — pure helpers shared by the cart service.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Items are matched by product identity, never by list position
    - Cart total uses the unit cost stored on each item, not a fresh catalog read
"""

from typing import Iterable, Protocol
from uuid import UUID

from app.core.errors import InvalidRequestError


class PricedItem(Protocol):
    """Structural contract for cart items the rules operate on."""
    product_id: UUID
    quantity: int
    unit_cost: float


def check_quantity(quantity: object) -> int:
    """Reject anything that is not a positive int (bool included)."""
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidRequestError("Quantity must be a positive integer")
    return quantity


def find_item(items: Iterable[PricedItem], product_id: UUID) -> PricedItem | None:
    for item in items:
        if item.product_id == product_id:
            return item
    return None


def compute_cart_total(items: Iterable[PricedItem]) -> float:
    """Sum of unit_cost * quantity over the cart."""
    return sum(item.unit_cost * item.quantity for item in items)
