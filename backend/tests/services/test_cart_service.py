"""Cart Service — add, update, delete and get against a real (SQLite) database.

Invariants:
    - Catalog-missing product fails the same way whether or not a cart exists
    - Adding the same product twice: first succeeds, second fails, cart keeps one line
    - Update/delete of a product absent from the cart leave the cart unchanged
    - Deleting the last item empties the cart but keeps the cart row
    - A lost add race (unique constraint fires) surfaces as the duplicate-product error
    - A first add that loses the cart-creation race lands in the existing cart
"""

from types import SimpleNamespace
from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.errors import InternalError, InvalidRequestError, NotFoundError
from app.infrastructure.repositories import SqlCartRepository
from app.models.cart import Cart
from app.services.cart_service import CartService


async def _cart_row(test_db, user_id):
    result = await test_db.execute(
        select(Cart)
        .where(Cart.user_id == user_id)
        .execution_options(populate_existing=True),
    )
    return result.scalar_one_or_none()


# ─── get_cart_by_user ────────────────────────────────────────────

async def test_get_cart_without_cart_is_not_found(cart_service, user):
    with pytest.raises(NotFoundError) as exc:
        await cart_service.get_cart_by_user(user)
    assert exc.value.message == "User does not have a cart"


async def test_get_cart_returns_existing_cart(cart_service, user, products):
    p1, _ = products
    await cart_service.add_product_to_cart(user, p1.id, 2)
    cart = await cart_service.get_cart_by_user(user)
    assert cart.user_id == user.id
    assert [i.product_id for i in cart.items] == [p1.id]


# ─── add_product_to_cart ─────────────────────────────────────────

async def test_add_creates_cart_with_single_item(cart_service, user, products):
    p1, _ = products
    cart = await cart_service.add_product_to_cart(user, p1.id, 3)
    assert len(cart.items) == 1
    assert cart.items[0].product_id == p1.id
    assert cart.items[0].quantity == 3
    assert cart.items[0].unit_cost == 10.0


async def test_add_unknown_product_without_cart(cart_service, user):
    with pytest.raises(InvalidRequestError) as exc:
        await cart_service.add_product_to_cart(user, uuid4(), 1)
    assert exc.value.message == "Product doesn't exist in database"


async def test_add_unknown_product_with_cart(cart_service, user, products, test_db):
    p1, _ = products
    await cart_service.add_product_to_cart(user, p1.id, 1)
    with pytest.raises(InvalidRequestError) as exc:
        await cart_service.add_product_to_cart(user, uuid4(), 1)
    assert exc.value.message == "Product doesn't exist in database"
    cart = await _cart_row(test_db, user.id)
    assert len(cart.items) == 1


async def test_add_second_product_appends(cart_service, user, products):
    p1, p2 = products
    await cart_service.add_product_to_cart(user, p1.id, 2)
    cart = await cart_service.add_product_to_cart(user, p2.id, 1)
    assert [i.product_id for i in cart.items] == [p1.id, p2.id]


async def test_add_same_product_twice_fails_second_time(
    cart_service, user, products, test_db,
):
    p1, _ = products
    await cart_service.add_product_to_cart(user, p1.id, 2)
    with pytest.raises(InvalidRequestError) as exc:
        await cart_service.add_product_to_cart(user, p1.id, 5)
    assert exc.value.message.startswith("Product already in cart")

    cart = await _cart_row(test_db, user.id)
    assert len(cart.items) == 1
    assert cart.items[0].quantity == 2


@pytest.mark.parametrize("quantity", [0, -3])
async def test_add_rejects_non_positive_quantity(cart_service, user, products, quantity):
    p1, _ = products
    with pytest.raises(InvalidRequestError) as exc:
        await cart_service.add_product_to_cart(user, p1.id, quantity)
    assert exc.value.message == "Quantity must be a positive integer"


async def test_add_maps_creation_failure_to_internal_error(test_db, user, products):
    class _FailingCartRepository(SqlCartRepository):
        async def create(self, user_id, product, quantity):
            raise SQLAlchemyError("insert failed")

    p1, _ = products
    service = CartService(test_db, carts=_FailingCartRepository(test_db))
    with pytest.raises(InternalError) as exc:
        await service.add_product_to_cart(user, p1.id, 1)
    assert exc.value.message == "Failed to add product to cart"


async def test_add_lost_race_maps_to_duplicate_error(test_db, user, products):
    """A stale read lets the insert through; the unique constraint rejects it."""
    class _StaleCartRepository(SqlCartRepository):
        async def find_by_user(self, user_id):
            cart = await super().find_by_user(user_id)
            return SimpleNamespace(id=cart.id, items=[]) if cart else None

    p1, _ = products
    await CartService(test_db).add_product_to_cart(user, p1.id, 1)

    service = CartService(test_db, carts=_StaleCartRepository(test_db))
    with pytest.raises(InvalidRequestError) as exc:
        await service.add_product_to_cart(user, p1.id, 4)
    assert exc.value.message.startswith("Product already in cart")


class _StaleFirstReadRepository(SqlCartRepository):
    """Misses the cart on the first read, as a request racing another first add would."""

    def __init__(self, db):
        super().__init__(db)
        self.reads = 0

    async def find_by_user(self, user_id):
        self.reads += 1
        if self.reads == 1:
            return None
        return await super().find_by_user(user_id)


async def test_lost_cart_creation_race_adds_to_existing_cart(test_db, user, products):
    p1, p2 = products
    user_id, p1_id, p2_id = user.id, p1.id, p2.id
    await CartService(test_db).add_product_to_cart(user, p1_id, 1)

    service = CartService(test_db, carts=_StaleFirstReadRepository(test_db))
    cart = await service.add_product_to_cart(user, p2_id, 3)

    assert [(i.product_id, i.quantity) for i in cart.items] == [(p1_id, 1), (p2_id, 3)]
    carts = (await test_db.execute(select(Cart).where(Cart.user_id == user_id))).scalars().all()
    assert len(carts) == 1


async def test_lost_cart_creation_race_with_same_product_is_duplicate(
    test_db, user, products,
):
    p1, _ = products
    user_id, p1_id = user.id, p1.id
    await CartService(test_db).add_product_to_cart(user, p1_id, 1)

    service = CartService(test_db, carts=_StaleFirstReadRepository(test_db))
    with pytest.raises(InvalidRequestError) as exc:
        await service.add_product_to_cart(user, p1_id, 2)
    assert exc.value.message.startswith("Product already in cart")

    cart = await _cart_row(test_db, user_id)
    assert [(i.product_id, i.quantity) for i in cart.items] == [(p1_id, 1)]


async def test_errors_carry_user_and_product_ids(cart_service, user, products):
    p1, _ = products
    with pytest.raises(InvalidRequestError) as exc:
        await cart_service.delete_product_from_cart(user, p1.id)
    assert exc.value.context.user_id == str(user.id)
    assert exc.value.context.product_id == str(p1.id)


async def test_repository_rejects_duplicate_line(cart_service, user, products, test_db):
    p1, _ = products
    cart = await cart_service.add_product_to_cart(user, p1.id, 1)
    repo = SqlCartRepository(test_db)
    with pytest.raises(IntegrityError):
        await repo.add_item(cart, p1, 2)
    await test_db.rollback()


# ─── update_product_in_cart ──────────────────────────────────────

async def test_update_without_cart(cart_service, user, products):
    p1, _ = products
    with pytest.raises(InvalidRequestError) as exc:
        await cart_service.update_product_in_cart(user, p1.id, 2)
    assert exc.value.message == (
        "User does not have a cart. Use POST to create cart and add a product"
    )


async def test_update_unknown_product(cart_service, user, products):
    p1, _ = products
    await cart_service.add_product_to_cart(user, p1.id, 1)
    with pytest.raises(InvalidRequestError) as exc:
        await cart_service.update_product_in_cart(user, uuid4(), 2)
    assert exc.value.message == "Product doesn't exist in database"


async def test_update_product_not_in_cart_leaves_cart_unchanged(
    cart_service, user, products, test_db,
):
    p1, p2 = products
    await cart_service.add_product_to_cart(user, p1.id, 1)
    with pytest.raises(InvalidRequestError) as exc:
        await cart_service.update_product_in_cart(user, p2.id, 7)
    assert exc.value.message == "Product not in cart"

    cart = await _cart_row(test_db, user.id)
    assert [(i.product_id, i.quantity) for i in cart.items] == [(p1.id, 1)]


async def test_update_overwrites_quantity(cart_service, user, products):
    p1, p2 = products
    await cart_service.add_product_to_cart(user, p1.id, 1)
    await cart_service.add_product_to_cart(user, p2.id, 1)
    cart = await cart_service.update_product_in_cart(user, p2.id, 6)
    quantities = {i.product_id: i.quantity for i in cart.items}
    assert quantities == {p1.id: 1, p2.id: 6}


async def test_update_rejects_zero_quantity(cart_service, user, products):
    p1, _ = products
    await cart_service.add_product_to_cart(user, p1.id, 1)
    with pytest.raises(InvalidRequestError):
        await cart_service.update_product_in_cart(user, p1.id, 0)


# ─── delete_product_from_cart ────────────────────────────────────

async def test_delete_without_cart(cart_service, user, products):
    p1, _ = products
    with pytest.raises(InvalidRequestError) as exc:
        await cart_service.delete_product_from_cart(user, p1.id)
    assert exc.value.message == "User does not have a cart"


async def test_delete_product_not_in_cart(cart_service, user, products):
    p1, p2 = products
    await cart_service.add_product_to_cart(user, p1.id, 1)
    with pytest.raises(InvalidRequestError) as exc:
        await cart_service.delete_product_from_cart(user, p2.id)
    assert exc.value.message == "Product not in cart"


async def test_delete_removes_only_that_item(cart_service, user, products):
    p1, p2 = products
    await cart_service.add_product_to_cart(user, p1.id, 1)
    await cart_service.add_product_to_cart(user, p2.id, 2)
    cart = await cart_service.delete_product_from_cart(user, p1.id)
    assert [i.product_id for i in cart.items] == [p2.id]


async def test_delete_last_item_keeps_empty_cart(cart_service, user, products, test_db):
    p1, _ = products
    await cart_service.add_product_to_cart(user, p1.id, 1)
    cart = await cart_service.delete_product_from_cart(user, p1.id)
    assert cart.items == []

    row = await _cart_row(test_db, user.id)
    assert row is not None
    assert row.items == []


async def test_delete_twice_fails_second_time(cart_service, user, products):
    p1, p2 = products
    await cart_service.add_product_to_cart(user, p1.id, 1)
    await cart_service.add_product_to_cart(user, p2.id, 1)
    await cart_service.delete_product_from_cart(user, p1.id)
    with pytest.raises(InvalidRequestError) as exc:
        await cart_service.delete_product_from_cart(user, p1.id)
    assert exc.value.message == "Product not in cart"
