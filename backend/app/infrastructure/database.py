"""Database Session Manager — one async session per request, translated database failures.

Invariants:
    - CartService commits and rolls back its own writes; anything that still escapes
      the request is rolled back here before the session closes
    - SQLAlchemy exceptions escaping a request become DatabaseError (core/errors.py),
      naming the violated cart constraint when one is recognised
    - Connection pool uses pool_pre_ping for stale connection detection

Design Decisions:
    - Constraint recognition matches both the PostgreSQL constraint name and the
      SQLite "table.column" form used by the test database
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle
    - expire_on_commit=False: services read committed carts without lazy loads
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

from app.core.errors import DatabaseError

logger = logging.getLogger(__name__)

# constraint name -> (markers found in driver messages, client-facing reason)
CART_CONSTRAINTS = {
    "uq_carts_user_id": (
        ("uq_carts_user_id", "carts.user_id"),
        "user already has a cart",
    ),
    "uq_cart_items_cart_product": (
        ("uq_cart_items_cart_product", "cart_items.cart_id, cart_items.product_id"),
        "product already in cart",
    ),
    "ck_cart_items_quantity_positive": (
        ("ck_cart_items_quantity_positive",),
        "cart item quantity must be positive",
    ),
    "ck_products_cost_non_negative": (
        ("ck_products_cost_non_negative",),
        "product cost must not be negative",
    ),
}


def violated_constraint(error: IntegrityError) -> str | None:
    """Name of the cart constraint an IntegrityError reports, if recognised."""
    detail = str(error.orig)
    for name, (markers, _) in CART_CONSTRAINTS.items():
        if any(marker in detail for marker in markers):
            return name
    return None


def to_database_error(error: SQLAlchemyError) -> DatabaseError:
    if isinstance(error, IntegrityError):
        name = violated_constraint(error)
        if name is None:
            return DatabaseError("Integrity constraint violated", "commit")
        return DatabaseError(f"{CART_CONSTRAINTS[name][1]} ({name})", "commit")
    if isinstance(error, OperationalError):
        return DatabaseError("Connection or operational error", "execute")
    return DatabaseError("Database operation failed", "query")


class DatabaseSessionManager:
    """Owns the engine and hands out request-scoped sessions."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        self.engine = create_async_engine(
            database_url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            error = to_database_error(e)
            logger.error(f"DB error escaped request: {e}", extra={"error_code": error.code})
            raise error from e
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs):
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
