"""SQL Repositories — AsyncSession-backed implementations of the boundary protocols.

Invariants:
    - Repositories flush but never commit or roll back: the caller owns the transaction
    - Item mutations are single conditional statements keyed by (cart_id, product_id);
      the returned bool says whether a row matched
    - debit_wallet only matches when the balance covers the amount, so a concurrent
      debit can never drive the wallet negative
    - find_by_user always reloads from the database (populate_existing) so callers
      see the effect of bulk statements issued earlier in the same session

Design Decisions:
    - synchronize_session=False on bulk statements: callers re-read via find_by_user
      instead of relying on in-session evaluation
    - IntegrityError from the unique constraints propagates; the service maps it
"""

import logging

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import CartId, ProductId, UserId
from app.models.cart import Cart, CartItem
from app.models.product import Product
from app.models.user import User

logger = logging.getLogger(__name__)


class SqlProductLookup:
    """Catalog lookup by primary key."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, product_id: ProductId) -> Product | None:
        return await self.db.get(Product, product_id)


class SqlCartRepository:
    """Cart aggregate persistence."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_user(self, user_id: UserId) -> Cart | None:
        result = await self.db.execute(
            select(Cart)
            .where(Cart.user_id == user_id)
            .execution_options(populate_existing=True),
        )
        return result.scalar_one_or_none()

    async def create(self, user_id: UserId, product: Product, quantity: int) -> Cart:
        """Create the user's cart holding exactly one item."""
        cart = Cart(
            user_id=user_id,
            items=[_new_item(product, quantity)],
        )
        self.db.add(cart)
        await self.db.flush()
        logger.info("Cart created", extra={"user_id": user_id, "cart_id": cart.id})
        return cart

    async def add_item(self, cart: Cart, product: Product, quantity: int) -> None:
        """Insert an item; raises IntegrityError if the product is already present."""
        item = _new_item(product, quantity)
        item.cart_id = cart.id
        self.db.add(item)
        await self.db.flush()

    async def update_item_quantity(
        self, cart_id: CartId, product_id: ProductId, quantity: int,
    ) -> bool:
        result = await self.db.execute(
            update(CartItem)
            .where(CartItem.cart_id == cart_id)
            .where(CartItem.product_id == product_id)
            .values(quantity=quantity)
            .execution_options(synchronize_session=False),
        )
        return result.rowcount > 0

    async def remove_item(self, cart_id: CartId, product_id: ProductId) -> bool:
        result = await self.db.execute(
            delete(CartItem)
            .where(CartItem.cart_id == cart_id)
            .where(CartItem.product_id == product_id)
            .execution_options(synchronize_session=False),
        )
        return result.rowcount > 0

    async def clear(self, cart_id: CartId) -> None:
        await self.db.execute(
            delete(CartItem)
            .where(CartItem.cart_id == cart_id)
            .execution_options(synchronize_session=False),
        )


class SqlUserRepository:
    """Wallet writes for checkout."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def debit_wallet(self, user_id: UserId, amount: float) -> bool:
        """Subtract amount if the balance covers it. False when it does not."""
        result = await self.db.execute(
            update(User)
            .where(User.id == user_id)
            .where(User.wallet_money >= amount)
            .values(wallet_money=User.wallet_money - amount)
            .execution_options(synchronize_session=False),
        )
        return result.rowcount > 0


def _new_item(product: Product, quantity: int) -> CartItem:
    return CartItem(
        product_id=product.id,
        product=product,
        quantity=quantity,
        unit_cost=product.cost,
    )
