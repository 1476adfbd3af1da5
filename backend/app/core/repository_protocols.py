"""Boundary Protocols — contracts between the cart service and persistence.

Invariants:
    - All IO operations accessed through Protocol types
    - Conditional writes report whether a row matched (bool), never raise for "no match"
    - add_item raises the persistence layer's integrity error on a duplicate product
    - Implementations provided by infrastructure/repositories.py via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, tests can pass plain fakes
    - Async in Protocol: every method does IO
"""

from typing import Protocol

from app.core.domain_types import CartId, ProductId, UserId


class ProductLookup(Protocol):
    """Read-only catalog access."""
    async def get_by_id(self, product_id: ProductId): ...


class CartRepository(Protocol):
    """Contract for cart aggregate persistence."""
    async def find_by_user(self, user_id: UserId): ...
    async def create(self, user_id: UserId, product, quantity: int): ...
    async def add_item(self, cart, product, quantity: int) -> None: ...
    async def update_item_quantity(
        self, cart_id: CartId, product_id: ProductId, quantity: int,
    ) -> bool: ...
    async def remove_item(self, cart_id: CartId, product_id: ProductId) -> bool: ...
    async def clear(self, cart_id: CartId) -> None: ...


class UserRepository(Protocol):
    """Contract for the wallet side of checkout."""
    async def debit_wallet(self, user_id: UserId, amount: float) -> bool: ...
