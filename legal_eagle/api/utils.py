"""
JWT utilities for issuing and verifying session tokens.

Functions
---------
create_access_token(data: dict, expires_at: datetime) -> str
    Creates a signed JWT carrying the given claims, a unique `jti` and an `exp` claim.
verify_token(token: str) -> dict | None
    Verify a JWT's signature & expiration and return its claims if valid.
bearer_token(authorization: str | None) -> str | None
    Extract the token from an `Authorization: Bearer <token>` header value.

A valid signature is necessary but not sufficient: the identity layer also
requires a live `auth_session` row for the token, so logout and server-side
expiry take effect immediately.

Environment contract (from `settings`)
--------------------------------------
SECRET_KEY : str
    HMAC signing key for JWTs.
ALGORITHM : str
    JWT signing algorithm (e.g., "HS256").
"""

import logging
import uuid
from datetime import datetime
from typing import Optional

from jose import jwt, JWTError
from legal_eagle.database.config.config import settings

logger = logging.getLogger(__name__)


def create_access_token(data: dict, expires_at: datetime) -> str:
    """
    Create a signed JWT access token.

    Parameters
    ----------
    data : dict
        Claims to embed in the token (e.g. `sub`, `kind`).
    expires_at : datetime
        Aware expiry instant, written as the `exp` NumericDate claim.

    Returns
    -------
    str
        Encoded JWT string. Each call yields a distinct token thanks to `jti`,
        so concurrent logins of the same principal get separate sessions.
    """
    encoding = data.copy()
    encoding.update({"exp": int(expires_at.timestamp()), "jti": uuid.uuid4().hex})
    return jwt.encode(encoding, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str) -> Optional[dict]:
    """
    Verify a JWT and return its claims.

    Returns
    ----------
    dict | None
        The decoded claims if the signature and `exp` are valid, otherwise None.
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.info(f"Rejected session token: {e}")
        return None


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
