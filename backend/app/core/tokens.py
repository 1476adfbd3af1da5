"""Token Issuer — signs bounded-lifetime JWT credentials.

Invariants:
    - Payload always carries `sub` (stringified subject id), `type`, `iat`, `exp`
    - RelativeExpiry(m) signs a lifetime of exactly m * 60 seconds
    - AbsoluteExpiry(t) signs a lifetime of t - now seconds, which may be <= 0:
      the token is still signed but is already expired for any verifier
    - A missing secret or a key rejected by PyJWT raises SigningError, never returns

Design Decisions:
    - Tagged expiry values at the API boundary: the caller states which kind it means
    - generate_token keeps the numeric entry point for existing callers.
      Values above LEGACY_TIMESTAMP_THRESHOLD are read as epoch seconds, anything
      else as minutes. HAZARD: a minute count above ~19 years is misread as a timestamp.
    - `now` is injectable so lifetimes are deterministic under test
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

import jwt

from app.config import get_settings
from app.core.domain_types import TokenType
from app.core.errors import SigningError

logger = logging.getLogger(__name__)

LEGACY_TIMESTAMP_THRESHOLD = 1_000_000_000


@dataclass(frozen=True)
class AbsoluteExpiry:
    """Expiry at a fixed instant, in Unix epoch seconds."""
    epoch_seconds: int


@dataclass(frozen=True)
class RelativeExpiry:
    """Expiry a number of minutes after issuance."""
    minutes: float


Expiry = AbsoluteExpiry | RelativeExpiry


def expiry_from_legacy(expires: float) -> Expiry:
    """Map the overloaded numeric expiry into its tagged form."""
    if expires > LEGACY_TIMESTAMP_THRESHOLD:
        return AbsoluteExpiry(int(expires))
    return RelativeExpiry(expires)


def lifetime_seconds(expiry: Expiry, now_seconds: int) -> int:
    """Signed lifetime for the given expiry, measured from now_seconds."""
    if isinstance(expiry, AbsoluteExpiry):
        return expiry.epoch_seconds - now_seconds
    return int(expiry.minutes * 60)


def _epoch_seconds(now: datetime | None) -> int:
    moment = now or datetime.now(timezone.utc)
    return int(moment.timestamp())


def issue_token(
    subject_id: object,
    expiry: Expiry,
    token_type: TokenType,
    secret: str | None = None,
    now: datetime | None = None,
) -> str:
    """Sign a JWT for subject_id with the `type` claim set to token_type."""
    settings = get_settings()
    key = settings.jwt_secret if secret is None else secret
    if not key:
        raise SigningError("Token signing secret is not configured")

    issued_at = _epoch_seconds(now)
    lifetime = lifetime_seconds(expiry, issued_at)
    if lifetime <= 0:
        logger.warning(
            f"Issuing {token_type.value} token that is already expired "
            f"(lifetime {lifetime}s)",
        )

    payload = {
        "sub": str(subject_id),
        "type": token_type.value,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    try:
        return jwt.encode(payload, key, algorithm=settings.jwt_algorithm)
    except (jwt.PyJWTError, TypeError, ValueError) as e:
        raise SigningError(f"Failed to sign token: {e}") from e


def generate_token(
    user_id: object,
    expires: float,
    token_type: TokenType,
    secret: str | None = None,
    now: datetime | None = None,
) -> str:
    """Numeric-expiry entry point. See module docstring for the threshold hazard."""
    return issue_token(
        user_id, expiry_from_legacy(expires), token_type, secret, now,
    )
