"""Bearer token verification (HS256, signed with SECRET_KEY).

Identity is issued elsewhere; this service only needs the tenant the caller
acts for, carried in the ``tenant_id`` claim.
"""

import time
import uuid

from jose import JWTError, jwt

from storefront.core.config import settings

ALGORITHM = "HS256"


def decode_access_token(token: str) -> dict:
    """Decode and verify an access token. Returns the claims dict."""
    claims = jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[ALGORITHM],
        options={"verify_aud": False, "verify_iss": False},
    )
    if claims.get("token_use", "access") != "access":
        raise JWTError("Not an access token")
    return claims


def tenant_id_from_claims(claims: dict) -> uuid.UUID:
    raw = claims.get("tenant_id")
    if not raw:
        raise JWTError("Token missing tenant_id claim")
    try:
        return uuid.UUID(str(raw))
    except ValueError as exc:
        raise JWTError("Invalid tenant_id claim") from exc


def create_access_token(
    sub: str,
    tenant_id: uuid.UUID,
    expires_in: int = 900,
) -> str:
    """Create a signed access token (local dev and tests)."""
    payload = {
        "sub": sub,
        "tenant_id": str(tenant_id),
        "token_use": "access",
        "iat": int(time.time()),
        "exp": int(time.time()) + expires_in,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)
