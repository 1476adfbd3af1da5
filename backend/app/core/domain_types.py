"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, ProductId, CartId wrap UUIDs — never use bare UUID in domain logic
    - Token kinds encoded as an Enum — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize into JWT claims without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
ProductId = NewType("ProductId", UUID)
CartId = NewType("CartId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class TokenType(str, Enum):
    """Kinds of signed credential, embedded as the `type` claim."""
    ACCESS = "access"
    REFRESH = "refresh"
    RESET_PASSWORD = "resetPassword"
    VERIFY_EMAIL = "verifyEmail"
