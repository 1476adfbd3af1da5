"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Cart is the aggregate root for cart items; users and products live outside it

Design Decisions:
    - One file per entity for locality (Cart and CartItem share a file: items never exist alone)
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from app.models.user import User  # noqa: F401
from app.models.product import Product  # noqa: F401
from app.models.cart import Cart, CartItem  # noqa: F401
