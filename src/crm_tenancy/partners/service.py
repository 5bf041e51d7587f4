"""Partner service — white-label partner onboarding and customer provisioning."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from crm_tenancy.common.exceptions import PartnerNotFoundError
from crm_tenancy.features.catalog import CUSTOMER_FLAGS, PARTNER_FLAGS
from crm_tenancy.roles.permissions import CUSTOMER_ADMIN_ROLE, PARTNER_ADMIN_ROLE
from crm_tenancy.roles.service import PermissionService
from crm_tenancy.subscriptions.models import SubscriptionPlanModel
from crm_tenancy.subscriptions.plans import CUSTOMER_TIERS
from crm_tenancy.subscriptions.service import SubscriptionService
from crm_tenancy.tenants.models import TenantModel
from crm_tenancy.tenants.service import TenantService

logger = logging.getLogger(__name__)

GROWTH_WINDOW_DAYS = 30


@dataclass
class PartnerOnboarding:
    company_name: str
    contact_email: str
    contact_name: str
    subdomain: str
    expected_customers: int = 0
    business_type: str = ""
    phone: Optional[str] = None
    website: Optional[str] = None
    custom_domain: Optional[str] = None
    branding: dict[str, Any] = field(default_factory=dict)
    admin_email: Optional[str] = None
    admin_name: str = ""


@dataclass
class CustomerProvisioning:
    name: str
    subdomain: str
    contact_email: str
    plan_type: str = "basic"
    custom_domain: Optional[str] = None
    branding: Optional[dict[str, Any]] = None


@dataclass
class PartnerStats:
    total_customers: int
    active_customers: int
    total_revenue: Decimal
    monthly_revenue: Decimal
    customer_growth_rate: float


class PartnerService:
    """White-label partner operations."""

    def __init__(
        self,
        tenant_service: TenantService,
        subscription_service: SubscriptionService,
        permission_service: PermissionService,
    ):
        self.tenants = tenant_service
        self.subscriptions = subscription_service
        self.permissions = permission_service

    async def _require_partner(self, session: AsyncSession, partner_id: str) -> TenantModel:
        partner = await self.tenants.get_by_id(session, partner_id)
        if partner is None or partner.type != "partner":
            raise PartnerNotFoundError(f"Partner '{partner_id}' not found")
        return partner

    async def create_partner(
        self, session: AsyncSession, onboarding: PartnerOnboarding
    ) -> TenantModel:
        """Onboard a partner tenant; it stays pending until approved."""
        branding = {
            "logo": onboarding.branding.get("logo"),
            "companyName": onboarding.company_name,
            "primaryColor": onboarding.branding.get("primaryColor", "#3b82f6"),
            "secondaryColor": onboarding.branding.get("secondaryColor", "#1e40af"),
        }
        partner = await self.tenants.create_tenant(
            session,
            name=onboarding.company_name,
            type="partner",
            subdomain=onboarding.subdomain,
            custom_domain=onboarding.custom_domain,
            status="pending_approval",
            feature_flags=PARTNER_FLAGS,
            branding_config=branding,
            metadata={
                "contactEmail": onboarding.contact_email,
                "contactName": onboarding.contact_name,
                "phone": onboarding.phone,
                "website": onboarding.website,
                "expectedCustomers": onboarding.expected_customers,
                "businessType": onboarding.business_type,
                "onboardingDate": datetime.now(timezone.utc).isoformat(),
            },
            create_default_roles=False,
        )

        plan = await self.subscriptions.create_plan_from_tier(
            session, "partner", tenant_id=partner.id,
            usage_limits={"maxCustomers": onboarding.expected_customers},
        )
        await self.subscriptions.subscribe(session, partner.id, plan.id)

        role = await self.permissions.create_from_template(
            session, partner.id, PARTNER_ADMIN_ROLE
        )
        if onboarding.admin_email:
            await self.permissions.create_user(
                session,
                email=onboarding.admin_email,
                full_name=onboarding.admin_name or onboarding.contact_name,
                tenant_id=partner.id,
                role_id=role.id,
            )

        logger.info("Partner onboarded", extra={"tenant_id": partner.id})
        return partner

    async def approve_partner(self, session: AsyncSession, partner_id: str) -> TenantModel:
        await self._require_partner(session, partner_id)
        return await self.tenants.set_status(session, partner_id, "active")

    async def update_partner(
        self,
        session: AsyncSession,
        partner_id: str,
        name: str | None = None,
        subdomain: str | None = None,
        custom_domain: str | None = None,
        metadata: dict[str, Any] | None = None,
        branding: dict[str, Any] | None = None,
    ) -> TenantModel:
        """Apply a partial update; metadata and branding keys are merged."""
        partner = await self._require_partner(session, partner_id)
        if metadata is not None:
            metadata = {**(partner.metadata_ or {}), **metadata}
        partner = await self.tenants.update_tenant(
            session, partner_id,
            name=name, subdomain=subdomain, custom_domain=custom_domain, metadata=metadata,
        )
        if branding is not None or name is not None:
            merged = {**(partner.branding_config or {}), **(branding or {})}
            if name is not None:
                merged["companyName"] = name
            partner = await self.tenants.update_branding(session, partner_id, merged)
        return partner

    async def list_partners(
        self, session: AsyncSession, status: str | None = None
    ) -> list[TenantModel]:
        query = select(TenantModel).where(TenantModel.type == "partner")
        if status is not None:
            query = query.where(TenantModel.status == status)
        result = await session.execute(query.order_by(TenantModel.created_at))
        return list(result.scalars().all())

    async def list_pending_partners(self, session: AsyncSession) -> list[TenantModel]:
        """The approval queue."""
        return await self.list_partners(session, status="pending_approval")

    async def list_active_partners(self, session: AsyncSession) -> list[TenantModel]:
        return await self.list_partners(session, status="active")

    async def create_customer_for_partner(
        self,
        session: AsyncSession,
        partner_id: str,
        customer: CustomerProvisioning,
    ) -> TenantModel:
        """Provision a customer tenant under a partner, on a tier plan."""
        if customer.plan_type not in CUSTOMER_TIERS:
            raise ValueError(f"Unknown customer plan type: {customer.plan_type!r}")
        partner = await self._require_partner(session, partner_id)

        branding = customer.branding or {
            **(partner.branding_config or {}),
            "companyName": customer.name,
        }
        tenant = await self.tenants.create_tenant(
            session,
            name=customer.name,
            type="customer",
            parent_tenant_id=partner.id,
            subdomain=customer.subdomain,
            custom_domain=customer.custom_domain,
            status="active",
            feature_flags=CUSTOMER_FLAGS,
            branding_config=branding,
            metadata={
                "contactEmail": customer.contact_email,
                "partnerId": partner.id,
                "planType": customer.plan_type,
                "createdBy": "partner",
                "createdDate": datetime.now(timezone.utc).isoformat(),
            },
            create_default_roles=False,
        )

        plan = await self.subscriptions.create_plan_from_tier(
            session, customer.plan_type, tenant_id=tenant.id
        )
        await self.subscriptions.subscribe(session, tenant.id, plan.id)
        await self.permissions.create_from_template(session, tenant.id, CUSTOMER_ADMIN_ROLE)

        logger.info("Customer provisioned for partner %s", partner.id, extra={"tenant_id": tenant.id})
        return tenant

    async def list_customers(
        self, session: AsyncSession, partner_id: str
    ) -> list[TenantModel]:
        await self._require_partner(session, partner_id)
        return await self.tenants.list_partner_customers(session, partner_id)

    async def get_partner_stats(
        self, session: AsyncSession, partner_id: str, now: datetime | None = None
    ) -> PartnerStats:
        await self._require_partner(session, partner_id)
        now = now or datetime.now(timezone.utc)

        customers = (
            TenantModel.parent_tenant_id == partner_id,
            TenantModel.type == "customer",
        )
        total = await session.scalar(select(func.count(TenantModel.id)).where(*customers)) or 0
        active = await session.scalar(
            select(func.count(TenantModel.id)).where(*customers, TenantModel.status == "active")
        ) or 0
        recent = await session.scalar(
            select(func.count(TenantModel.id)).where(
                *customers,
                TenantModel.created_at >= now - timedelta(days=GROWTH_WINDOW_DAYS),
            )
        ) or 0

        plans = await session.execute(
            select(SubscriptionPlanModel.price, SubscriptionPlanModel.billing_cycle)
            .join(TenantModel, SubscriptionPlanModel.tenant_id == TenantModel.id)
            .where(*customers, SubscriptionPlanModel.is_active.is_(True))
        )
        total_revenue = Decimal("0")
        monthly_revenue = Decimal("0")
        for price, billing_cycle in plans:
            total_revenue += price or Decimal("0")
            if billing_cycle == "monthly":
                monthly_revenue += price or Decimal("0")

        growth_rate = (recent / total) * 100 if total else 0.0
        return PartnerStats(
            total_customers=total,
            active_customers=active,
            total_revenue=total_revenue,
            monthly_revenue=monthly_revenue,
            customer_growth_rate=growth_rate,
        )
