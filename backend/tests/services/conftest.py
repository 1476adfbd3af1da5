"""Service test fixtures — async DB, seeded users/products, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test engine
    - db_manager patched so the readiness probe hits the test engine

Design Decisions:
    - SQLite in-memory: fast, no external dependency; unique and check constraints
      behave the same as on PostgreSQL for what these tests exercise
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from app.core.domain_types import TokenType
from app.core.tokens import RelativeExpiry, issue_token
from app.db.base import Base
from app.infrastructure.database import get_db, DatabaseSessionManager
import app.infrastructure.database as db_module
import app.models  # noqa: F401
from app.models.product import Product
from app.models.user import User
from app.main import app
from app.services.cart_service import CartService


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def user(test_db):
    """User with an address set and 100 in the wallet."""
    u = User(
        name="Crio User", email="crio-user@example.com",
        wallet_money=100.0, address="221B Baker Street, London",
    )
    test_db.add(u)
    await test_db.commit()
    return u


@pytest.fixture
async def products(test_db):
    """Two catalog products: P1 costs 10, P2 costs 5."""
    p1 = Product(name="UNIFACTOR Mens Running Shoes", category="Fashion", cost=10.0)
    p2 = Product(name="YONEX Smash Badminton Racquet", category="Sports", cost=5.0)
    test_db.add_all([p1, p2])
    await test_db.commit()
    return p1, p2


@pytest.fixture
def cart_service(test_db):
    return CartService(test_db)


@pytest.fixture
def auth_headers(user):
    token = issue_token(user.id, RelativeExpiry(30), TokenType.ACCESS)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
