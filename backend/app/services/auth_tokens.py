"""Auth Token Assembler — builds the access-token envelope returned after login/registration.

Invariants:
    - The issuance instant is read once; the envelope's `expires` and the token's
      `exp` claim are both derived from it with the same configured lifetime
    - The instant is truncated to whole seconds, the resolution of JWT time claims
    - Token kind is always TokenType.ACCESS
"""

from datetime import datetime, timedelta, timezone

from app.config import Settings, get_settings
from app.core.domain_types import TokenType
from app.core.tokens import RelativeExpiry, issue_token
from app.models.user import User
from app.schemas.auth import AuthTokens, TokenEnvelope


def generate_auth_tokens(
    user: User,
    settings: Settings | None = None,
    now: datetime | None = None,
) -> AuthTokens:
    settings = settings or get_settings()
    issued_at = (now or datetime.now(timezone.utc)).replace(microsecond=0)
    minutes = settings.jwt_access_expiration_minutes

    token = issue_token(
        user.id,
        RelativeExpiry(minutes),
        TokenType.ACCESS,
        secret=settings.jwt_secret,
        now=issued_at,
    )
    return AuthTokens(
        access=TokenEnvelope(
            token=token,
            expires=issued_at + timedelta(minutes=minutes),
        ),
    )
