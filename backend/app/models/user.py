"""User ORM — account holder whose wallet pays for checkout.

Invariants:
    - email is unique
    - wallet_money is never negative after a successful checkout (debit is conditional)
    - address equal to settings.default_address means "not set"

Design Decisions:
    - has_set_non_default_address is async: callers await it the same way whether the
      answer comes from a column or from a profile service later
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, Float, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.config import get_settings
from app.db.base import Base


class User(Base):
    """User entity — identity, contact and wallet."""
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True,
    )
    wallet_money: Mapped[float] = mapped_column(
        Float, nullable=False,
        default=lambda: get_settings().default_wallet_money,
    )
    address: Mapped[str] = mapped_column(
        Text, nullable=False,
        default=lambda: get_settings().default_address,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    async def has_set_non_default_address(self) -> bool:
        return self.address != get_settings().default_address
