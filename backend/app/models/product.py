"""Product ORM — catalog entry, read-only to the cart core.

Invariants:
    - cost is non-negative
"""

import uuid

from sqlalchemy import String, Float, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class Product(Base):
    """Catalog product."""
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("cost >= 0", name="ck_products_cost_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    cost: Mapped[float] = mapped_column(Float, nullable=False)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    image: Mapped[str] = mapped_column(String(500), nullable=False, default="")
