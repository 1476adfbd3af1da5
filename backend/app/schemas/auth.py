"""Auth Schemas — the access-token envelope handed to the request layer.

Wire shape: {"access": {"token": "<jwt>", "expires": "<ISO-8601>"}}
"""

from datetime import datetime

from pydantic import BaseModel


class TokenEnvelope(BaseModel):
    """Signed token plus its absolute expiry, for client display."""
    token: str
    expires: datetime


class AuthTokens(BaseModel):
    access: TokenEnvelope
