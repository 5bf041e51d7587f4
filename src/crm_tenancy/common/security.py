"""Admin API key authentication dependency."""

import hmac

from fastapi import Header, HTTPException


async def require_super_admin(
    x_tenancy_api_key: str = Header(..., alias="X-Tenancy-Api-Key"),
) -> str:
    """FastAPI dependency that validates the super-admin key from header."""
    from crm_tenancy.common.config import get_settings

    settings = get_settings()
    if not hmac.compare_digest(x_tenancy_api_key, settings.super_admin_key):
        raise HTTPException(status_code=403, detail="Invalid super-admin key")
    return x_tenancy_api_key
