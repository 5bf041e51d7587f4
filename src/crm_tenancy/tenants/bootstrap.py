"""Default tenant bootstrap — the tenant the resolver falls back to."""

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from crm_tenancy.common.config import TenancySettings
from crm_tenancy.features.catalog import DEFAULT_TENANT_FLAGS
from crm_tenancy.roles.service import PermissionService
from crm_tenancy.subscriptions.models import SubscriptionPlanModel
from crm_tenancy.subscriptions.service import SubscriptionService
from crm_tenancy.tenants.models import TenantModel
from crm_tenancy.tenants.service import TenantService

logger = logging.getLogger(__name__)

DEFAULT_SUBDOMAIN = "default"
DEFAULT_BRANDING = {
    "logo": None,
    "primaryColor": "#3b82f6",
    "secondaryColor": "#1e40af",
    "companyName": "Smart CRM",
}


async def ensure_default_tenant(
    session: AsyncSession,
    settings: TenancySettings,
    tenant_service: TenantService | None = None,
    subscription_service: SubscriptionService | None = None,
    permission_service: PermissionService | None = None,
) -> TenantModel:
    """Create (or re-activate) the default tenant. Safe to run repeatedly."""
    if not settings.default_tenant_id:
        raise ValueError("Default tenant is disabled (TENANCY_DEFAULT_TENANT_ID is empty)")

    permissions = permission_service or PermissionService()
    tenants = tenant_service or TenantService(permission_service=permissions)
    subscriptions = subscription_service or SubscriptionService(
        settings.default_subscription_days
    )

    result = await session.execute(
        select(SubscriptionPlanModel).where(
            SubscriptionPlanModel.tenant_id.is_(None),
            SubscriptionPlanModel.plan_type == "default",
        )
    )
    plan = result.scalars().first()
    if plan is None:
        plan = await subscriptions.create_plan_from_tier(session, "default")
        logger.info("Created default subscription plan %s", plan.id)

    tenant = await tenants.get_by_id(session, settings.default_tenant_id)
    if tenant is None:
        tenant = await tenants.create_tenant(
            session,
            name="Default Tenant",
            type="customer",
            subdomain=DEFAULT_SUBDOMAIN,
            status="active",
            feature_flags=DEFAULT_TENANT_FLAGS,
            branding_config=DEFAULT_BRANDING,
            metadata={
                "bootstrap": True,
                "bootstrapDate": datetime.now(timezone.utc).isoformat(),
            },
            tenant_id=settings.default_tenant_id,
        )
        logger.info("Created default tenant", extra={"tenant_id": tenant.id})
    elif tenant.status != "active":
        tenant.status = "active"
        await session.flush()
        logger.info("Re-activated default tenant", extra={"tenant_id": tenant.id})

    if await subscriptions.get_current_subscription(session, tenant.id) is None:
        await subscriptions.subscribe(session, tenant.id, plan.id, days=365)

    return tenant
