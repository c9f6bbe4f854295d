"""FastAPI dependency chain: bearer token -> tenant id, plus the settings service."""

import uuid
from functools import lru_cache

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from storefront.core.cache import SettingsCache
from storefront.core.config import settings
from storefront.core.security import decode_access_token, tenant_id_from_claims
from storefront.db.session import async_session_factory
from storefront.services.settings_service import StoreSettingsService

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_tenant_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> uuid.UUID:
    """Verify the Bearer token and return the tenant it was issued for."""
    if credentials is None:
        raise HTTPException(status_code=401, detail="Missing authorization header")

    try:
        claims = decode_access_token(credentials.credentials)
        return tenant_id_from_claims(claims)
    except JWTError as e:
        raise HTTPException(status_code=401, detail=f"Invalid token: {e}") from e


@lru_cache
def get_settings_service() -> StoreSettingsService:
    """One service (and so one read cache) per process."""
    return StoreSettingsService(
        async_session_factory,
        cache=SettingsCache(settings.SETTINGS_CACHE_TTL_SECONDS),
    )
