"""Cart ORM — the per-user cart aggregate and its line items.

Invariants:
    - At most one cart per user (unique user_id)
    - At most one item per product within a cart (unique cart_id + product_id)
    - quantity > 0 (check constraint, also validated by the service)
    - unit_cost is the product cost captured when the item was added; checkout prices from it

Design Decisions:
    - Keyed by user id, not email: an email change must not orphan the cart
    - Unique constraints make "insert only if absent" atomic in the database, so
      concurrent adds of the same product cannot both succeed
    - items ordered by added_at: preserves insertion order for display
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Integer, Float, DateTime, ForeignKey, UniqueConstraint, CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class Cart(Base):
    """Cart aggregate root — owns the user's in-progress items."""
    __tablename__ = "carts"
    __table_args__ = (
        UniqueConstraint("user_id", name="uq_carts_user_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    items: Mapped[list["CartItem"]] = relationship(
        "CartItem", back_populates="cart",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="CartItem.added_at",
    )


class CartItem(Base):
    """One product line in a cart."""
    __tablename__ = "cart_items"
    __table_args__ = (
        UniqueConstraint("cart_id", "product_id", name="uq_cart_items_cart_product"),
        CheckConstraint("quantity > 0", name="ck_cart_items_quantity_positive"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    cart_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("carts.id", ondelete="CASCADE"),
        nullable=False,
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("products.id"), nullable=False,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_cost: Mapped[float] = mapped_column(Float, nullable=False)
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    cart: Mapped["Cart"] = relationship("Cart", back_populates="items")
    product: Mapped["Product"] = relationship("Product", lazy="selectin")
