"""Tenant store — CRUD, addressing lookups, status lifecycle, branding."""

import re
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from crm_tenancy.common.exceptions import (
    InvalidParentTenantError,
    InvalidStatusTransitionError,
    ReservedSubdomainError,
    TenantAddressConflictError,
    TenantExistsError,
    TenantNotFoundError,
)
from crm_tenancy.features.models import FeatureUsageModel
from crm_tenancy.features.periods import usage_period
from crm_tenancy.roles.models import UserModel
from crm_tenancy.tenants.models import TENANT_STATUSES, TENANT_TYPES, TenantModel

SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?$")
DEFAULT_RESERVED_SUBDOMAINS = ("www", "api", "localhost")

# Allowed status transitions; re-setting the current status is a no-op.
STATUS_TRANSITIONS: dict[str, frozenset[str]] = {
    "pending_approval": frozenset({"active"}),
    "active": frozenset({"suspended"}),
    "suspended": frozenset({"active"}),
    "trial": frozenset({"active", "suspended"}),
}


def normalize_host(host: str | None) -> str:
    """Lower-case a host header value and strip any port."""
    if not host:
        return ""
    host = host.strip().lower()
    if host.startswith("["):
        # IPv6 literal, e.g. [::1]:8080
        return host.split("]")[0] + "]"
    return host.split(":")[0].rstrip(".")


class TenantService:
    """Tenant management operations."""

    def __init__(self, permission_service=None, reserved_subdomains=DEFAULT_RESERVED_SUBDOMAINS):
        self.permission_service = permission_service
        self.reserved_subdomains = frozenset(s.lower() for s in reserved_subdomains)

    # ── Create ──

    async def create_tenant(
        self,
        session: AsyncSession,
        name: str,
        type: str = "customer",
        subdomain: str | None = None,
        custom_domain: str | None = None,
        status: str = "active",
        parent_tenant_id: str | None = None,
        feature_flags: dict[str, bool] | None = None,
        branding_config: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
        tenant_id: str | None = None,
        create_default_roles: bool = True,
    ) -> TenantModel:
        """Create a tenant after checking addressing and parent invariants."""
        if type not in TENANT_TYPES:
            raise ValueError(f"Unknown tenant type: {type!r}")
        if status not in TENANT_STATUSES:
            raise ValueError(f"Unknown tenant status: {status!r}")
        if tenant_id and await self.get_by_id(session, tenant_id) is not None:
            raise TenantExistsError(f"Tenant '{tenant_id}' already exists")

        subdomain = await self._check_subdomain(session, subdomain)
        custom_domain = await self._check_custom_domain(session, custom_domain)
        await self._check_parent(session, type, parent_tenant_id)

        tenant = TenantModel(
            name=name,
            type=type,
            subdomain=subdomain,
            custom_domain=custom_domain,
            status=status,
            parent_tenant_id=parent_tenant_id,
            feature_flags=dict(feature_flags or {}),
            branding_config=dict(branding_config or {}),
            metadata_=dict(metadata or {}),
        )
        if tenant_id:
            tenant.id = tenant_id
        session.add(tenant)
        try:
            await session.flush()
        except IntegrityError as exc:
            # Lost a race with a concurrent create for the same id or address.
            raise TenantAddressConflictError(
                "Tenant id, subdomain or custom domain is already in use"
            ) from exc

        if create_default_roles and self.permission_service:
            await self.permission_service.create_default_roles(session, tenant.id)

        return tenant

    async def _check_subdomain(
        self, session: AsyncSession, subdomain: str | None, exclude_id: str | None = None
    ) -> str | None:
        if not subdomain:
            return None
        subdomain = subdomain.strip().lower()
        if not SUBDOMAIN_PATTERN.match(subdomain):
            raise ValueError(f"Invalid subdomain: {subdomain!r}")
        if subdomain in self.reserved_subdomains:
            raise ReservedSubdomainError(f"Subdomain '{subdomain}' is reserved")
        existing = await self.get_by_subdomain(session, subdomain)
        if existing is not None and existing.id != exclude_id:
            raise TenantAddressConflictError(f"Subdomain '{subdomain}' is already in use")
        return subdomain

    async def _check_custom_domain(
        self, session: AsyncSession, custom_domain: str | None, exclude_id: str | None = None
    ) -> str | None:
        if not custom_domain:
            return None
        custom_domain = normalize_host(custom_domain)
        existing = await self.get_by_domain(session, custom_domain)
        if existing is not None and existing.id != exclude_id:
            raise TenantAddressConflictError(
                f"Custom domain '{custom_domain}' is already in use"
            )
        return custom_domain

    async def _check_parent(
        self, session: AsyncSession, type: str, parent_tenant_id: str | None
    ) -> None:
        if parent_tenant_id is None:
            return
        if type == "partner":
            raise InvalidParentTenantError("Partner tenants cannot have a parent tenant")
        parent = await self.get_by_id(session, parent_tenant_id)
        if parent is None or parent.type != "partner":
            raise InvalidParentTenantError(
                f"Parent tenant '{parent_tenant_id}' is not an existing partner"
            )

    # ── Lookup ──

    async def get_by_id(
        self, session: AsyncSession, tenant_id: str
    ) -> TenantModel | None:
        return await session.get(TenantModel, tenant_id)

    async def get_by_subdomain(
        self, session: AsyncSession, subdomain: str
    ) -> TenantModel | None:
        result = await session.execute(
            select(TenantModel).where(TenantModel.subdomain == subdomain.lower())
        )
        return result.scalar_one_or_none()

    async def get_by_domain(
        self, session: AsyncSession, domain: str
    ) -> TenantModel | None:
        result = await session.execute(
            select(TenantModel).where(TenantModel.custom_domain == normalize_host(domain))
        )
        return result.scalar_one_or_none()

    async def require(self, session: AsyncSession, tenant_id: str) -> TenantModel:
        tenant = await self.get_by_id(session, tenant_id)
        if tenant is None:
            raise TenantNotFoundError(f"Tenant '{tenant_id}' not found")
        return tenant

    async def list_tenants(
        self,
        session: AsyncSession,
        type: str | None = None,
        parent_tenant_id: str | None = None,
    ) -> list[TenantModel]:
        query = select(TenantModel).order_by(TenantModel.created_at)
        if type is not None:
            query = query.where(TenantModel.type == type)
        if parent_tenant_id is not None:
            query = query.where(TenantModel.parent_tenant_id == parent_tenant_id)
        result = await session.execute(query)
        return list(result.scalars().all())

    async def list_partner_customers(
        self, session: AsyncSession, partner_id: str
    ) -> list[TenantModel]:
        return await self.list_tenants(
            session, type="customer", parent_tenant_id=partner_id
        )

    # ── Update ──

    async def update_tenant(
        self, session: AsyncSession, tenant_id: str, **updates
    ) -> TenantModel | None:
        tenant = await self.get_by_id(session, tenant_id)
        if tenant is None:
            return None
        if updates.get("subdomain") is not None:
            tenant.subdomain = await self._check_subdomain(
                session, updates["subdomain"], exclude_id=tenant.id
            )
        if updates.get("custom_domain") is not None:
            tenant.custom_domain = await self._check_custom_domain(
                session, updates["custom_domain"], exclude_id=tenant.id
            )
        if updates.get("name") is not None:
            tenant.name = updates["name"]
        if updates.get("metadata") is not None:
            tenant.metadata_ = dict(updates["metadata"])
        try:
            await session.flush()
        except IntegrityError as exc:
            raise TenantAddressConflictError() from exc
        return tenant

    async def set_status(
        self, session: AsyncSession, tenant_id: str, status: str
    ) -> TenantModel:
        tenant = await self.require(session, tenant_id)
        if status == tenant.status:
            return tenant
        if status not in STATUS_TRANSITIONS.get(tenant.status, frozenset()):
            raise InvalidStatusTransitionError(
                f"Cannot move tenant from '{tenant.status}' to '{status}'"
            )
        tenant.status = status
        await session.flush()
        return tenant

    async def suspend_tenant(self, session: AsyncSession, tenant_id: str) -> TenantModel:
        return await self.set_status(session, tenant_id, "suspended")

    async def activate_tenant(self, session: AsyncSession, tenant_id: str) -> TenantModel:
        return await self.set_status(session, tenant_id, "active")

    async def update_feature_flags(
        self, session: AsyncSession, tenant_id: str, flags: dict[str, bool]
    ) -> TenantModel:
        """Replace the tenant's feature-flag override layer."""
        tenant = await self.require(session, tenant_id)
        tenant.feature_flags = dict(flags)
        await session.flush()
        return tenant

    # ── Branding ──

    async def update_branding(
        self, session: AsyncSession, tenant_id: str, branding: dict[str, Any]
    ) -> TenantModel:
        tenant = await self.require(session, tenant_id)
        tenant.branding_config = dict(branding)
        await session.flush()
        return tenant

    async def get_branding(self, session: AsyncSession, tenant_id: str) -> dict[str, Any]:
        tenant = await self.get_by_id(session, tenant_id)
        return (tenant.branding_config or {}) if tenant else {}

    # ── Analytics ──

    async def get_tenant_analytics(
        self, session: AsyncSession, tenant_id: str, at: datetime | None = None
    ) -> dict[str, Any]:
        """User count and this month's feature usage for a tenant."""
        await self.require(session, tenant_id)
        period_start, _ = usage_period(at or datetime.now(timezone.utc))

        user_count = await session.scalar(
            select(func.count(UserModel.id)).where(UserModel.tenant_id == tenant_id)
        )
        usage = await session.execute(
            select(FeatureUsageModel.feature_name, FeatureUsageModel.usage_count)
            .where(
                FeatureUsageModel.tenant_id == tenant_id,
                FeatureUsageModel.period_start == period_start,
            )
            .order_by(FeatureUsageModel.feature_name)
        )
        return {
            "tenant_id": tenant_id,
            "user_count": user_count or 0,
            "period_start": period_start,
            "feature_usage": [
                {"feature": row.feature_name, "usage_count": row.usage_count}
                for row in usage
            ],
        }
