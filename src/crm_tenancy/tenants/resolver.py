"""Tenant resolution — map an inbound request to a tenant.

Resolution walks a fixed, ordered list of strategies and stops at the
first one that finds a tenant:

1. ``subdomain``     first label of the Host header, unless reserved
2. ``custom_domain`` the whole Host header
3. ``header``        the ``X-Tenant-ID`` header, as a tenant id
4. ``query``         the ``tenant`` query parameter, as a tenant id
5. ``user``          authenticated-user context (reserved, finds nothing)

When every strategy comes up empty the configured default tenant id is
looked up. Store errors never escape: a failing strategy is logged and
skipped, and a failing default lookup yields no tenant.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from crm_tenancy.tenants.models import TenantModel
from crm_tenancy.tenants.service import DEFAULT_RESERVED_SUBDOMAINS, TenantService, normalize_host

logger = logging.getLogger(__name__)

TENANT_HEADER = "X-Tenant-ID"
TENANT_QUERY_PARAM = "tenant"
DEFAULT_SOURCE = "default"


@dataclass(frozen=True)
class RequestHints:
    """The request facts tenant resolution looks at."""
    host: str = ""
    tenant_header: Optional[str] = None
    tenant_query: Optional[str] = None
    user_id: Optional[str] = None


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one request."""
    tenant: Optional[TenantModel] = None
    source: Optional[str] = None

    @property
    def tenant_id(self) -> Optional[str]:
        return self.tenant.id if self.tenant else None

    @property
    def features(self) -> Optional[dict[str, Any]]:
        if self.tenant is None:
            return None
        return dict(self.tenant.feature_flags or {})


Strategy = Callable[[AsyncSession, RequestHints], Awaitable[Optional[TenantModel]]]


class TenantResolver:
    """Ordered strategy chain with a default-tenant fallback."""

    def __init__(
        self,
        tenant_service: TenantService,
        default_tenant_id: str | None = None,
        reserved_subdomains=DEFAULT_RESERVED_SUBDOMAINS,
    ):
        self.tenants = tenant_service
        self.default_tenant_id = default_tenant_id
        self.reserved_subdomains = frozenset(s.lower() for s in reserved_subdomains)
        self.strategies: list[tuple[str, Strategy]] = [
            ("subdomain", self.by_subdomain),
            ("custom_domain", self.by_custom_domain),
            ("header", self.by_header),
            ("query", self.by_query),
            ("user", self.by_user),
        ]

    # ── Strategies ──

    async def by_subdomain(
        self, session: AsyncSession, hints: RequestHints
    ) -> TenantModel | None:
        host = normalize_host(hints.host)
        if not host:
            return None
        subdomain = host.split(".")[0]
        if not subdomain or subdomain in self.reserved_subdomains:
            return None
        return await self.tenants.get_by_subdomain(session, subdomain)

    async def by_custom_domain(
        self, session: AsyncSession, hints: RequestHints
    ) -> TenantModel | None:
        host = normalize_host(hints.host)
        if not host:
            return None
        return await self.tenants.get_by_domain(session, host)

    async def by_header(
        self, session: AsyncSession, hints: RequestHints
    ) -> TenantModel | None:
        if not hints.tenant_header:
            return None
        return await self.tenants.get_by_id(session, hints.tenant_header)

    async def by_query(
        self, session: AsyncSession, hints: RequestHints
    ) -> TenantModel | None:
        if not hints.tenant_query:
            return None
        return await self.tenants.get_by_id(session, hints.tenant_query)

    async def by_user(
        self, session: AsyncSession, hints: RequestHints
    ) -> TenantModel | None:
        # Reserved: user -> tenant mapping is not defined yet.
        return None

    # ── Resolution ──

    async def resolve(self, session: AsyncSession, hints: RequestHints) -> Resolution:
        for name, strategy in self.strategies:
            try:
                tenant = await strategy(session, hints)
            except Exception:
                logger.warning(
                    "Tenant lookup by %s failed", name,
                    exc_info=True,
                    extra={"strategy": name, "host": hints.host},
                )
                continue
            if tenant is not None:
                return Resolution(tenant=tenant, source=name)

        return await self._fallback(session)

    async def _fallback(self, session: AsyncSession) -> Resolution:
        if not self.default_tenant_id:
            return Resolution()
        try:
            tenant = await self.tenants.get_by_id(session, self.default_tenant_id)
        except Exception:
            logger.warning(
                "Default tenant lookup failed", exc_info=True,
                extra={"tenant_id": self.default_tenant_id, "strategy": DEFAULT_SOURCE},
            )
            return Resolution()
        if tenant is None:
            return Resolution()
        return Resolution(tenant=tenant, source=DEFAULT_SOURCE)
