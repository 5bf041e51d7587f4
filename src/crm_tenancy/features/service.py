"""Feature service — plan-ceiling/tenant-override access checks and usage counters."""

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from crm_tenancy.common.exceptions import UnsupportedDialectError
from crm_tenancy.common.models import utcnow
from crm_tenancy.features.models import FeatureUsageModel
from crm_tenancy.features.periods import usage_period
from crm_tenancy.subscriptions.service import SubscriptionService
from crm_tenancy.tenants.service import TenantService

logger = logging.getLogger(__name__)

_UPSERT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}

_USAGE_KEY = ("tenant_id", "feature_name", "period_start")


def plan_allows(plan_features: dict[str, Any] | None, feature: str) -> bool:
    """The plan is the ceiling: only an explicit True enables a feature."""
    return (plan_features or {}).get(feature) is True


def tenant_denies(tenant_flags: dict[str, Any] | None, feature: str) -> bool:
    """A tenant flag can only narrow access, and only with an explicit False."""
    return (tenant_flags or {}).get(feature) is False


class FeatureService:
    """Feature entitlement and monthly usage tracking."""

    def __init__(self, tenant_service: TenantService, subscription_service: SubscriptionService):
        self.tenants = tenant_service
        self.subscriptions = subscription_service

    async def has_feature_access(
        self, session: AsyncSession, tenant_id: str, feature: str
    ) -> bool:
        tenant = await self.tenants.get_by_id(session, tenant_id)
        if tenant is None or tenant.status != "active":
            return False

        subscription = await self.subscriptions.get_current_subscription(session, tenant_id)
        if subscription is None:
            return False

        plan = await self.subscriptions.get_plan(session, subscription.plan_id)
        if plan is None:
            return False

        if not plan_allows(plan.features, feature):
            return False

        if tenant_denies(tenant.feature_flags, feature):
            return False

        return True

    async def track_feature_usage(
        self,
        session: AsyncSession,
        tenant_id: str,
        feature: str,
        data: dict[str, Any] | None = None,
        at: datetime | None = None,
    ) -> int:
        """Increment the tenant's usage counter for ``feature`` in the month of ``at``.

        Runs as a single INSERT ... ON CONFLICT DO UPDATE so concurrent
        requests for the same tenant, feature and month never lose an
        increment. Returns the counter value after this use.
        """
        dialect = session.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise UnsupportedDialectError(
                f"No atomic usage upsert available for dialect '{dialect}'"
            )

        period_start, period_end = usage_period(at or datetime.now(timezone.utc))
        now = utcnow()
        stmt = insert(FeatureUsageModel).values(
            tenant_id=tenant_id,
            feature_name=feature,
            period_start=period_start,
            period_end=period_end,
            usage_count=1,
            usage_data=data or {},
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=list(_USAGE_KEY),
            set_={
                "usage_count": FeatureUsageModel.usage_count + 1,
                "usage_data": stmt.excluded.usage_data,
                "updated_at": now,
            },
        ).returning(FeatureUsageModel.usage_count)

        result = await session.execute(stmt)
        count = result.scalar_one()
        logger.debug(
            "Feature usage recorded",
            extra={"tenant_id": tenant_id, "feature": feature},
        )
        return count

    async def get_feature_usage(
        self,
        session: AsyncSession,
        tenant_id: str,
        feature: str,
        at: datetime | None = None,
    ) -> int:
        period_start, _ = usage_period(at or datetime.now(timezone.utc))
        count = await session.scalar(
            select(FeatureUsageModel.usage_count).where(
                FeatureUsageModel.tenant_id == tenant_id,
                FeatureUsageModel.feature_name == feature,
                FeatureUsageModel.period_start == period_start,
            )
        )
        return count or 0

    async def list_usage(
        self,
        session: AsyncSession,
        tenant_id: str,
        at: datetime | None = None,
    ) -> list[FeatureUsageModel]:
        period_start, _ = usage_period(at or datetime.now(timezone.utc))
        result = await session.execute(
            select(FeatureUsageModel)
            .where(
                FeatureUsageModel.tenant_id == tenant_id,
                FeatureUsageModel.period_start == period_start,
            )
            .order_by(FeatureUsageModel.feature_name)
        )
        return list(result.scalars().all())
