"""Cart Schemas — Pydantic models for the cart API boundary.

Invariants:
    - quantity is a strict positive int on every write body
    - CartResponse lists items in insertion order with the stored unit cost

Design Decisions:
    - from_attributes on responses: built straight from ORM objects
    - strict int for quantity: "2" or 2.0 are rejected instead of coerced
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StrictInt


class CartItemCreate(BaseModel):
    """Body of POST /cart."""
    product_id: UUID
    quantity: StrictInt = Field(gt=0)


class CartItemUpdate(BaseModel):
    """Body of PUT /cart/items/{product_id}."""
    quantity: StrictInt = Field(gt=0)


class CartProduct(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    category: str
    cost: float
    rating: float
    image: str


class CartItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: UUID
    quantity: int
    unit_cost: float
    product: CartProduct


class CartResponse(BaseModel):
    """Cart as returned to clients."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    items: list[CartItemResponse]
