"""Request Dependencies — current user from a bearer access token, cart service per request.

Invariants:
    - Only tokens signed with settings.jwt_secret, unexpired, and of type "access" are accepted
    - Every rejection is the same AuthenticationError (401): callers learn nothing about why
    - The cart service shares the request's AsyncSession with get_current_user

Design Decisions:
    - HTTPBearer(auto_error=False): missing header handled here so it maps to our error envelope
    - No revocation or refresh handling: a signed, unexpired access token is sufficient
"""

import logging
from uuid import UUID

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.domain_types import TokenType
from app.core.errors import AuthenticationError
from app.infrastructure.database import get_db
from app.models.user import User
from app.services.cart_service import CartService

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _read_access_subject(token: str) -> UUID:
    settings = get_settings()
    if not settings.jwt_secret:
        raise AuthenticationError()
    try:
        claims = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm],
        )
    except jwt.PyJWTError as e:
        logger.info(f"Rejected bearer token: {e}")
        raise AuthenticationError() from e

    if claims.get("type") != TokenType.ACCESS.value:
        raise AuthenticationError()
    try:
        return UUID(claims["sub"])
    except (KeyError, ValueError) as e:
        raise AuthenticationError() from e


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    if not credentials or not credentials.credentials:
        raise AuthenticationError()
    user = await db.get(User, _read_access_subject(credentials.credentials))
    if user is None:
        raise AuthenticationError()
    return user


def get_cart_service(db: AsyncSession = Depends(get_db)) -> CartService:
    return CartService(db)
