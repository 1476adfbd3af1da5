"""Cart Service — cart lifecycle from first add through checkout.

Invariants:
    - Preconditions are checked in a fixed order; the first failure wins and nothing is written
    - Every failure is raised to the caller as a KartError with a fixed message
    - Item writes are single conditional statements (see infrastructure/repositories.py);
      the in-memory duplicate check in add_product_to_cart is a fast path, the unique
      constraint is what actually guarantees one item per product
    - A first add that loses the cart-creation race falls through to adding the
      item to the cart the winner created
    - Checkout debits the wallet and clears the cart in ONE transaction: both commit or neither
    - The cart row is never deleted here, only emptied

Design Decisions:
    - Service owns commit/rollback; repositories only flush
    - Repositories injectable for tests, defaulting to the SQL implementations on self.db
    - Errors carry user and product ids in ErrorContext for the request log
"""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cart_rules import check_quantity, compute_cart_total, find_item
from app.core.domain_types import ProductId
from app.core.errors import (
    ErrorContext, InternalError, InvalidRequestError, NotFoundError,
)
from app.core.repository_protocols import (
    CartRepository, ProductLookup, UserRepository,
)
from app.infrastructure.repositories import (
    SqlCartRepository, SqlProductLookup, SqlUserRepository,
)
from app.models.cart import Cart
from app.models.user import User

logger = logging.getLogger(__name__)

USER_HAS_NO_CART = "User does not have a cart"
USER_HAS_NO_CART_FOR_UPDATE = (
    "User does not have a cart. Use POST to create cart and add a product"
)
PRODUCT_NOT_IN_CATALOG = "Product doesn't exist in database"
PRODUCT_ALREADY_IN_CART = (
    "Product already in cart. Use the cart sidebar to update or remove product from cart"
)
PRODUCT_NOT_IN_CART = "Product not in cart"
CART_CREATION_FAILED = "Failed to add product to cart"
CART_NOT_FOUND = "Cart not found"
CART_IS_EMPTY = "Cart is Empty"
ADDRESS_NOT_SET = "Please set the default address"
INSUFFICIENT_BALANCE = "Insufficient balance"


def _context(user_id, product_id=None) -> ErrorContext:
    return ErrorContext(
        user_id=str(user_id),
        product_id=str(product_id) if product_id is not None else None,
    )


class CartService:
    """Cart operations for a single user per call."""

    def __init__(
        self,
        db: AsyncSession,
        carts: CartRepository | None = None,
        products: ProductLookup | None = None,
        users: UserRepository | None = None,
    ):
        self.db = db
        self.carts = carts or SqlCartRepository(db)
        self.products = products or SqlProductLookup(db)
        self.users = users or SqlUserRepository(db)

    async def get_cart_by_user(self, user: User) -> Cart:
        cart = await self.carts.find_by_user(user.id)
        if cart is None:
            raise NotFoundError(USER_HAS_NO_CART, _context(user.id))
        return cart

    async def add_product_to_cart(
        self, user: User, product_id: ProductId, quantity: int,
    ) -> Cart:
        """Add a new product line. Never merges quantities with an existing line."""
        check_quantity(quantity)
        user_id = user.id
        product = await self.products.get_by_id(product_id)
        if product is None:
            raise InvalidRequestError(
                PRODUCT_NOT_IN_CATALOG, _context(user_id, product_id),
            )

        cart = await self.carts.find_by_user(user_id)
        if cart is None:
            created = await self._create_cart(user_id, product, quantity)
            if created is not None:
                return created
            # another request created the cart first; add to theirs
            cart = await self.carts.find_by_user(user_id)
            product = await self.products.get_by_id(product_id)
            if cart is None or product is None:
                raise InternalError(CART_CREATION_FAILED, _context(user_id, product_id))

        if find_item(cart.items, product_id) is not None:
            raise InvalidRequestError(
                PRODUCT_ALREADY_IN_CART, _context(user_id, product_id),
            )

        cart_id = cart.id
        try:
            await self.carts.add_item(cart, product, quantity)
            await self.db.commit()
        except IntegrityError as e:
            # lost a race with a concurrent add of the same product
            await self.db.rollback()
            raise InvalidRequestError(
                PRODUCT_ALREADY_IN_CART, _context(user_id, product_id),
            ) from e

        logger.info(
            "Product added to cart",
            extra={"user_id": user_id, "cart_id": cart_id, "product_id": product_id},
        )
        return await self.carts.find_by_user(user_id)

    async def _create_cart(self, user_id, product, quantity: int) -> Cart | None:
        """Create the cart with its first item. None when the user already has one."""
        product_id = product.id
        try:
            cart = await self.carts.create(user_id, product, quantity)
            await self.db.commit()
        except IntegrityError:
            # carts.user_id is unique: a concurrent first add won
            await self.db.rollback()
            logger.info(
                "Cart already created concurrently",
                extra={"user_id": user_id, "product_id": product_id},
            )
            return None
        except SQLAlchemyError as e:
            # rollback expires every loaded object; only log captured ids
            await self.db.rollback()
            logger.error(
                f"Cart creation failed: {e}",
                extra={"user_id": user_id, "product_id": product_id},
            )
            raise InternalError(
                CART_CREATION_FAILED, _context(user_id, product_id),
            ) from e
        if cart is None:
            raise InternalError(CART_CREATION_FAILED, _context(user_id, product_id))
        return cart

    async def update_product_in_cart(
        self, user: User, product_id: ProductId, quantity: int,
    ) -> Cart:
        """Overwrite the quantity of a product already in the cart."""
        check_quantity(quantity)
        user_id = user.id
        cart = await self.carts.find_by_user(user_id)
        if cart is None:
            raise InvalidRequestError(
                USER_HAS_NO_CART_FOR_UPDATE, _context(user_id, product_id),
            )

        product = await self.products.get_by_id(product_id)
        if product is None:
            raise InvalidRequestError(
                PRODUCT_NOT_IN_CATALOG, _context(user_id, product_id),
            )

        if not await self.carts.update_item_quantity(cart.id, product.id, quantity):
            raise InvalidRequestError(
                PRODUCT_NOT_IN_CART, _context(user_id, product_id),
            )
        await self.db.commit()
        return await self.carts.find_by_user(user_id)

    async def delete_product_from_cart(
        self, user: User, product_id: ProductId,
    ) -> Cart:
        """Remove one product line. The cart itself stays, possibly empty."""
        user_id = user.id
        cart = await self.carts.find_by_user(user_id)
        if cart is None:
            raise InvalidRequestError(USER_HAS_NO_CART, _context(user_id, product_id))

        if not await self.carts.remove_item(cart.id, product_id):
            raise InvalidRequestError(
                PRODUCT_NOT_IN_CART, _context(user_id, product_id),
            )
        await self.db.commit()
        return await self.carts.find_by_user(user_id)

    async def checkout(self, user: User) -> None:
        """Debit the cart total from the wallet and empty the cart."""
        user_id = user.id
        cart = await self.carts.find_by_user(user_id)
        if cart is None:
            raise NotFoundError(CART_NOT_FOUND, _context(user_id))
        if not cart.items:
            raise InvalidRequestError(CART_IS_EMPTY, _context(user_id))
        if not await user.has_set_non_default_address():
            raise InvalidRequestError(ADDRESS_NOT_SET, _context(user_id))

        total = compute_cart_total(cart.items)
        if total > user.wallet_money:
            raise InvalidRequestError(INSUFFICIENT_BALANCE, _context(user_id))

        try:
            if not await self.users.debit_wallet(user_id, total):
                raise InvalidRequestError(INSUFFICIENT_BALANCE, _context(user_id))
            await self.carts.clear(cart.id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        if user in self.db:
            await self.db.refresh(user, ["wallet_money"])
        else:
            user.wallet_money -= total
        logger.info(
            "Checkout complete",
            extra={"user_id": user_id, "cart_id": cart.id, "total": total},
        )
