"""Cart Routes — thin HTTP adapters over CartService.

Invariants:
    - Routes never contain business logic (delegate to CartService)
    - Errors propagate as KartError and are mapped by the global handlers
    - Bodies validated by Pydantic before reaching the handler (quantity > 0, strict int)
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.api.deps import get_cart_service, get_current_user
from app.models.user import User
from app.schemas.cart import CartItemCreate, CartItemUpdate, CartResponse
from app.services.cart_service import CartService

router = APIRouter(prefix="/api/v1/cart", tags=["cart"])


@router.get("", response_model=CartResponse)
async def get_cart(
    user: User = Depends(get_current_user),
    service: CartService = Depends(get_cart_service),
):
    cart = await service.get_cart_by_user(user)
    return CartResponse.model_validate(cart)


@router.post(
    "", response_model=CartResponse, status_code=status.HTTP_201_CREATED,
)
async def add_product(
    body: CartItemCreate,
    user: User = Depends(get_current_user),
    service: CartService = Depends(get_cart_service),
):
    """Add a product line. 400 if the product is already in the cart."""
    cart = await service.add_product_to_cart(user, body.product_id, body.quantity)
    return CartResponse.model_validate(cart)


@router.put("/items/{product_id}", response_model=CartResponse)
async def update_product(
    product_id: UUID,
    body: CartItemUpdate,
    user: User = Depends(get_current_user),
    service: CartService = Depends(get_cart_service),
):
    cart = await service.update_product_in_cart(user, product_id, body.quantity)
    return CartResponse.model_validate(cart)


@router.delete(
    "/items/{product_id}", status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_product(
    product_id: UUID,
    user: User = Depends(get_current_user),
    service: CartService = Depends(get_cart_service),
):
    await service.delete_product_from_cart(user, product_id)


@router.post("/checkout", status_code=status.HTTP_204_NO_CONTENT)
async def checkout(
    user: User = Depends(get_current_user),
    service: CartService = Depends(get_cart_service),
):
    """Debit the cart total from the wallet and empty the cart."""
    await service.checkout(user)
