"""Tenant admin API router — requires super-admin authentication."""

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException

from crm_tenancy.common.security import require_super_admin
from crm_tenancy.tenants.schemas import (
    BrandingUpdate,
    FeatureFlagsUpdate,
    FeatureUsageEntry,
    TenantAnalytics,
    TenantCreate,
    TenantResponse,
    TenantType,
    TenantUpdate,
)

router = APIRouter(prefix="/tenants", tags=["tenants"])


def _get_service():
    from crm_tenancy.deps import get_tenant_service
    return get_tenant_service()


def _get_feature_service():
    from crm_tenancy.deps import get_feature_service
    return get_feature_service()


def _get_db():
    from crm_tenancy.deps import get_db
    return get_db()


@router.post("", response_model=TenantResponse, status_code=201)
async def create_tenant(body: TenantCreate, _=Depends(require_super_admin)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        tenant = await svc.create_tenant(
            session,
            name=body.name,
            type=body.type,
            subdomain=body.subdomain,
            custom_domain=body.custom_domain,
            status=body.status,
            parent_tenant_id=body.parent_tenant_id,
            feature_flags=body.feature_flags,
            branding_config=body.branding_config,
            metadata=body.metadata,
            tenant_id=body.id,
        )
        return TenantResponse.model_validate(tenant)


@router.get("", response_model=list[TenantResponse])
async def list_tenants(
    type: Optional[TenantType] = None,
    parent_tenant_id: Optional[str] = None,
    _=Depends(require_super_admin),
):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        tenants = await svc.list_tenants(session, type=type, parent_tenant_id=parent_tenant_id)
        return [TenantResponse.model_validate(t) for t in tenants]


@router.get("/{tenant_id}", response_model=TenantResponse)
async def get_tenant(tenant_id: str, _=Depends(require_super_admin)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        tenant = await svc.get_by_id(session, tenant_id)
        if tenant is None:
            raise HTTPException(status_code=404, detail="Tenant not found")
        return TenantResponse.model_validate(tenant)


@router.patch("/{tenant_id}", response_model=TenantResponse)
async def update_tenant(
    tenant_id: str, body: TenantUpdate, _=Depends(require_super_admin)
):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        tenant = await svc.update_tenant(
            session, tenant_id, **body.model_dump(exclude_none=True)
        )
        if tenant is None:
            raise HTTPException(status_code=404, detail="Tenant not found")
        return TenantResponse.model_validate(tenant)


@router.post("/{tenant_id}/suspend", response_model=TenantResponse)
async def suspend_tenant(tenant_id: str, _=Depends(require_super_admin)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        tenant = await svc.suspend_tenant(session, tenant_id)
        return TenantResponse.model_validate(tenant)


@router.post("/{tenant_id}/activate", response_model=TenantResponse)
async def activate_tenant(tenant_id: str, _=Depends(require_super_admin)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        tenant = await svc.activate_tenant(session, tenant_id)
        return TenantResponse.model_validate(tenant)


@router.put("/{tenant_id}/features", response_model=TenantResponse)
async def update_feature_flags(
    tenant_id: str, body: FeatureFlagsUpdate, _=Depends(require_super_admin)
):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        tenant = await svc.update_feature_flags(session, tenant_id, body.feature_flags)
        return TenantResponse.model_validate(tenant)


@router.get("/{tenant_id}/branding", response_model=dict[str, Any])
async def get_branding(tenant_id: str, _=Depends(require_super_admin)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        await svc.require(session, tenant_id)
        return await svc.get_branding(session, tenant_id)


@router.put("/{tenant_id}/branding", response_model=dict[str, Any])
async def update_branding(
    tenant_id: str, body: BrandingUpdate, _=Depends(require_super_admin)
):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        tenant = await svc.update_branding(session, tenant_id, body.branding_config)
        return tenant.branding_config


@router.get("/{tenant_id}/analytics", response_model=TenantAnalytics)
async def get_analytics(tenant_id: str, _=Depends(require_super_admin)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        return await svc.get_tenant_analytics(session, tenant_id)


@router.get("/{tenant_id}/usage", response_model=list[FeatureUsageEntry])
async def get_usage(tenant_id: str, _=Depends(require_super_admin)):
    svc = _get_feature_service()
    db = _get_db()
    async with db.get_session() as session:
        records = await svc.list_usage(session, tenant_id)
        return [
            FeatureUsageEntry(feature=r.feature_name, usage_count=r.usage_count)
            for r in records
        ]
