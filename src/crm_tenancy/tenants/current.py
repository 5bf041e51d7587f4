"""Tenant-scoped API router — the resolved tenant, guarded by the request gates."""

from fastapi import APIRouter, Depends, Request

from crm_tenancy.features.catalog import ADVANCED_ANALYTICS
from crm_tenancy.gates import (
    enforce_feature,
    require_active_tenant,
    require_feature,
    require_permission,
    require_tenant,
)
from crm_tenancy.roles.permissions import USER_READ
from crm_tenancy.roles.schemas import UserResponse
from crm_tenancy.tenants.models import TenantModel
from crm_tenancy.tenants.schemas import (
    CurrentTenantResponse,
    FeatureUsageEntry,
    FeatureUseResponse,
    TenantAnalytics,
    TenantResponse,
)

router = APIRouter(prefix="/tenant", tags=["tenant"])


def _get_feature_service():
    from crm_tenancy.deps import get_feature_service
    return get_feature_service()


def _get_permission_service():
    from crm_tenancy.deps import get_permission_service
    return get_permission_service()


def _get_db():
    from crm_tenancy.deps import get_db
    return get_db()


@router.get("/current", response_model=CurrentTenantResponse)
async def current_tenant(request: Request, tenant: TenantModel = Depends(require_tenant)):
    return CurrentTenantResponse(
        tenant=TenantResponse.model_validate(tenant),
        source=request.state.tenant_source,
        branding=tenant.branding_config or {},
    )


@router.get("/features", response_model=list[FeatureUsageEntry])
async def feature_usage(tenant: TenantModel = Depends(require_active_tenant)):
    svc = _get_feature_service()
    db = _get_db()
    async with db.get_session() as session:
        records = await svc.list_usage(session, tenant.id)
        return [
            FeatureUsageEntry(feature=r.feature_name, usage_count=r.usage_count)
            for r in records
        ]


@router.post(
    "/features/{feature}/use",
    response_model=FeatureUseResponse,
    dependencies=[Depends(require_active_tenant)],
)
async def use_feature(feature: str, request: Request):
    count = await enforce_feature(request, feature)
    return FeatureUseResponse(feature=feature, usage_count=count)


@router.get(
    "/analytics",
    response_model=TenantAnalytics,
    dependencies=[
        Depends(require_active_tenant),
        Depends(require_feature(ADVANCED_ANALYTICS)),
    ],
)
async def tenant_analytics(
    request: Request, tenant: TenantModel = Depends(require_active_tenant)
):
    from crm_tenancy.deps import get_tenant_service

    db = _get_db()
    async with db.get_session() as session:
        return await get_tenant_service().get_tenant_analytics(
            session, tenant.id, at=request.state.received_at
        )


@router.get("/users", response_model=list[UserResponse])
async def tenant_users(
    tenant: TenantModel = Depends(require_active_tenant),
    _user_id: str = Depends(require_permission(USER_READ)),
):
    svc = _get_permission_service()
    db = _get_db()
    async with db.get_session() as session:
        users = await svc.list_users(session, tenant.id)
        return [UserResponse.model_validate(u) for u in users]
