"""Subscription service — plans and each tenant's current subscription."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from crm_tenancy.common.exceptions import PlanNotFoundError, TenantNotFoundError
from crm_tenancy.subscriptions.models import SubscriptionPlanModel, TenantSubscriptionModel
from crm_tenancy.subscriptions.plans import get_tier
from crm_tenancy.tenants.models import TenantModel


class SubscriptionService:
    """Plan catalogue and subscription lifecycle."""

    def __init__(self, default_days: int = 30):
        self.default_days = default_days

    # ── Plans ──

    async def create_plan(
        self,
        session: AsyncSession,
        name: str,
        features: dict[str, Any] | None = None,
        usage_limits: dict[str, Any] | None = None,
        tenant_id: str | None = None,
        plan_type: str = "default",
        price: Decimal | str | int = Decimal("0"),
        billing_cycle: str = "monthly",
        is_active: bool = True,
    ) -> SubscriptionPlanModel:
        plan = SubscriptionPlanModel(
            name=name,
            tenant_id=tenant_id,
            plan_type=plan_type,
            price=Decimal(str(price)),
            billing_cycle=billing_cycle,
            features=dict(features or {}),
            usage_limits=dict(usage_limits or {}),
            is_active=is_active,
        )
        session.add(plan)
        await session.flush()
        return plan

    async def create_plan_from_tier(
        self,
        session: AsyncSession,
        plan_type: str,
        tenant_id: str | None = None,
        **overrides: Any,
    ) -> SubscriptionPlanModel:
        """Create a plan from a tier template, with optional field overrides."""
        tier = get_tier(plan_type)
        if "usage_limits" in overrides:
            tier["usage_limits"].update(overrides.pop("usage_limits"))
        tier.update(overrides)
        return await self.create_plan(
            session, tenant_id=tenant_id, plan_type=plan_type, **tier
        )

    async def get_plan(
        self, session: AsyncSession, plan_id: str
    ) -> SubscriptionPlanModel | None:
        return await session.get(SubscriptionPlanModel, plan_id)

    async def list_plans(
        self,
        session: AsyncSession,
        tenant_id: str | None = None,
        templates_only: bool = False,
    ) -> list[SubscriptionPlanModel]:
        query = select(SubscriptionPlanModel).order_by(SubscriptionPlanModel.created_at)
        if templates_only:
            query = query.where(SubscriptionPlanModel.tenant_id.is_(None))
        elif tenant_id is not None:
            query = query.where(SubscriptionPlanModel.tenant_id == tenant_id)
        result = await session.execute(query)
        return list(result.scalars().all())

    # ── Subscriptions ──

    async def subscribe(
        self,
        session: AsyncSession,
        tenant_id: str,
        plan_id: str,
        days: int | None = None,
        now: datetime | None = None,
    ) -> TenantSubscriptionModel:
        """Make ``plan_id`` the tenant's current plan.

        Any previously active subscription is cancelled in the same
        transaction so a tenant never has two current subscriptions.
        """
        if await session.get(TenantModel, tenant_id) is None:
            raise TenantNotFoundError(f"Tenant '{tenant_id}' not found")
        if await self.get_plan(session, plan_id) is None:
            raise PlanNotFoundError(f"Plan '{plan_id}' not found")

        await session.execute(
            update(TenantSubscriptionModel)
            .where(
                TenantSubscriptionModel.tenant_id == tenant_id,
                TenantSubscriptionModel.status == "active",
            )
            .values(status="canceled")
        )

        start = now or datetime.now(timezone.utc)
        subscription = TenantSubscriptionModel(
            tenant_id=tenant_id,
            plan_id=plan_id,
            status="active",
            current_period_start=start,
            current_period_end=start + timedelta(days=days or self.default_days),
        )
        session.add(subscription)
        await session.flush()
        return subscription

    async def get_current_subscription(
        self, session: AsyncSession, tenant_id: str
    ) -> TenantSubscriptionModel | None:
        result = await session.execute(
            select(TenantSubscriptionModel)
            .where(
                TenantSubscriptionModel.tenant_id == tenant_id,
                TenantSubscriptionModel.status == "active",
            )
            .order_by(TenantSubscriptionModel.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_current_plan(
        self, session: AsyncSession, tenant_id: str
    ) -> SubscriptionPlanModel | None:
        subscription = await self.get_current_subscription(session, tenant_id)
        if subscription is None:
            return None
        return await self.get_plan(session, subscription.plan_id)

    async def cancel_subscription(
        self, session: AsyncSession, tenant_id: str
    ) -> TenantSubscriptionModel | None:
        subscription = await self.get_current_subscription(session, tenant_id)
        if subscription is None:
            return None
        subscription.status = "canceled"
        await session.flush()
        return subscription
