"""Request gates — FastAPI dependencies for tenant, feature and permission checks.

Each gate maps its own failures onto a ``GateError`` with the HTTP status
to return; the app's exception handler renders it as
``{"error": ..., "message": ...}``.
"""

import logging
from datetime import datetime, timezone

from fastapi import Depends, Request

from crm_tenancy.common.exceptions import GateError
from crm_tenancy.tenants.middleware import request_user_id
from crm_tenancy.tenants.models import TenantModel

logger = logging.getLogger(__name__)


def _get_db():
    from crm_tenancy.deps import get_db
    return get_db()


def _get_feature_service():
    from crm_tenancy.deps import get_feature_service
    return get_feature_service()


def _get_permission_service():
    from crm_tenancy.deps import get_permission_service
    return get_permission_service()


# ── Tenant presence / activity ──


async def require_tenant(request: Request) -> TenantModel:
    tenant = getattr(request.state, "tenant", None)
    if tenant is None:
        raise GateError(
            400,
            "Tenant identification required",
            "Please provide tenant information via subdomain, header, or query parameter",
        )
    return tenant


async def require_active_tenant(
    tenant: TenantModel = Depends(require_tenant),
) -> TenantModel:
    if tenant.status != "active":
        raise GateError(
            403,
            "Tenant inactive",
            f"Tenant status is '{tenant.status}'",
        )
    return tenant


# ── Features ──


async def enforce_feature(request: Request, feature: str) -> int:
    """Check and record use of ``feature`` by the request's tenant.

    Returns the tenant's usage count for the current period.
    """
    tenant_id = getattr(request.state, "tenant_id", None)
    if not tenant_id:
        raise GateError(
            400,
            "Tenant identification required",
            f"Feature '{feature}' requires a tenant",
        )

    at = getattr(request.state, "received_at", None) or datetime.now(timezone.utc)
    svc = _get_feature_service()
    try:
        async with _get_db().get_session() as session:
            allowed = await svc.has_feature_access(session, tenant_id, feature)
            if allowed:
                count = await svc.track_feature_usage(session, tenant_id, feature, at=at)
    except Exception:
        logger.exception(
            "Feature check failed",
            extra={"tenant_id": tenant_id, "feature": feature},
        )
        raise GateError(500, "Feature check failed", f"Could not verify feature '{feature}'")

    if not allowed:
        raise GateError(
            403,
            "Feature access denied",
            f"Feature '{feature}' is not available for this tenant",
        )
    return count


def require_feature(feature: str):
    """Dependency factory: ``Depends(require_feature("aiTools"))``."""

    async def dependency(request: Request) -> int:
        return await enforce_feature(request, feature)

    return dependency


# ── Permissions ──


async def get_current_user_id(request: Request) -> str:
    user_id = request_user_id(request)
    if not user_id:
        raise GateError(401, "Authentication required", "No authenticated user on request")
    return user_id


def require_permission(permission: str):
    """Dependency factory: ``Depends(require_permission("user_read"))``."""

    async def dependency(user_id: str = Depends(get_current_user_id)) -> str:
        svc = _get_permission_service()
        try:
            async with _get_db().get_session() as session:
                allowed = await svc.has_permission(session, user_id, permission)
        except Exception:
            logger.exception(
                "Permission check failed",
                extra={"user_id": user_id, "permission": permission},
            )
            raise GateError(
                500, "Permission check failed", f"Could not verify permission '{permission}'"
            )
        if not allowed:
            raise GateError(
                403,
                "Permission denied",
                f"Missing required permission '{permission}'",
            )
        return user_id

    return dependency
