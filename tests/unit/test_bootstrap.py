"""Tests for default tenant bootstrap."""

import pytest

from crm_tenancy.common.config import TenancySettings
from crm_tenancy.common.database import DatabaseManager
from crm_tenancy.features.service import FeatureService
from crm_tenancy.roles.service import PermissionService
from crm_tenancy.subscriptions.service import SubscriptionService
from crm_tenancy.tenants.bootstrap import ensure_default_tenant
from crm_tenancy.tenants.service import TenantService


def make_settings(**overrides) -> TenancySettings:
    defaults = {"db_url": "sqlite+aiosqlite://"}
    defaults.update(overrides)
    return TenancySettings(**defaults)


@pytest.fixture
async def db():
    manager = DatabaseManager(make_settings())
    await manager.init()
    await manager.create_all()
    yield manager
    await manager.close()


class TestEnsureDefaultTenant:
    async def test_creates_tenant_plan_and_subscription(self, db):
        settings = make_settings()
        subscriptions = SubscriptionService()
        async with db.get_session() as session:
            tenant = await ensure_default_tenant(
                session, settings, subscription_service=subscriptions
            )
            assert tenant.id == "default"
            assert tenant.subdomain == "default"
            assert tenant.status == "active"
        async with db.get_session() as session:
            plan = await subscriptions.get_current_plan(session, "default")
            assert plan.plan_type == "default"
            assert plan.tenant_id is None

    async def test_idempotent(self, db):
        settings = make_settings()
        subscriptions = SubscriptionService()
        async with db.get_session() as session:
            await ensure_default_tenant(session, settings)
        async with db.get_session() as session:
            await ensure_default_tenant(session, settings)
        async with db.get_session() as session:
            assert len(await TenantService().list_tenants(session)) == 1
            assert len(await subscriptions.list_plans(session, templates_only=True)) == 1
            roles = await PermissionService().list_roles(session, "default")
            assert len(roles) == 3

    async def test_reactivates_suspended_default(self, db):
        settings = make_settings()
        tenants = TenantService()
        async with db.get_session() as session:
            await ensure_default_tenant(session, settings)
        async with db.get_session() as session:
            await tenants.suspend_tenant(session, "default")
        async with db.get_session() as session:
            tenant = await ensure_default_tenant(session, settings)
            assert tenant.status == "active"

    async def test_default_features(self, db):
        settings = make_settings()
        tenants = TenantService()
        subscriptions = SubscriptionService()
        features = FeatureService(tenants, subscriptions)
        async with db.get_session() as session:
            await ensure_default_tenant(
                session, settings, tenant_service=tenants, subscription_service=subscriptions
            )
        async with db.get_session() as session:
            assert await features.has_feature_access(session, "default", "aiTools") is True
            assert await features.has_feature_access(session, "default", "whiteLabel") is False

    async def test_custom_default_id(self, db):
        settings = make_settings(default_tenant_id="house")
        async with db.get_session() as session:
            tenant = await ensure_default_tenant(session, settings)
            assert tenant.id == "house"

    async def test_disabled(self, db):
        settings = make_settings(default_tenant_id="")
        with pytest.raises(ValueError, match="disabled"):
            async with db.get_session() as session:
                await ensure_default_tenant(session, settings)
