"""Request middleware that attaches the resolved tenant to ``request.state``."""

import logging
from datetime import datetime, timezone

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from crm_tenancy.tenants.resolver import (
    TENANT_HEADER,
    TENANT_QUERY_PARAM,
    RequestHints,
    Resolution,
)

logger = logging.getLogger(__name__)


def _get_db():
    from crm_tenancy.deps import get_db
    return get_db()


def _get_resolver():
    from crm_tenancy.deps import get_tenant_resolver
    return get_tenant_resolver()


def request_user_id(request: Request) -> str | None:
    """Authenticated user id set upstream, or the trusted user-id header."""
    user_id = getattr(request.state, "user_id", None)
    if user_id:
        return user_id
    from crm_tenancy.common.config import get_settings
    return request.headers.get(get_settings().user_id_header) or None


def hints_from_request(request: Request) -> RequestHints:
    return RequestHints(
        host=request.headers.get("host", ""),
        tenant_header=request.headers.get(TENANT_HEADER) or None,
        tenant_query=request.query_params.get(TENANT_QUERY_PARAM) or None,
        user_id=request_user_id(request),
    )


def attach_resolution(request: Request, resolution: Resolution) -> None:
    request.state.tenant_id = resolution.tenant_id
    request.state.tenant = resolution.tenant
    request.state.tenant_features = resolution.features
    request.state.tenant_source = resolution.source


class TenantResolutionMiddleware(BaseHTTPMiddleware):
    """Resolve every request's tenant before route handlers run.

    Never rejects a request: when resolution cannot run the request simply
    carries no tenant, and tenant-scoped routes reject it in their gates.
    """

    async def dispatch(self, request, call_next):
        request.state.received_at = datetime.now(timezone.utc)
        resolution = Resolution()
        hints = hints_from_request(request)
        try:
            async with _get_db().get_session() as session:
                resolution = await _get_resolver().resolve(session, hints)
        except Exception:
            logger.exception(
                "Tenant resolution failed; continuing without tenant",
                extra={"host": hints.host},
            )
        attach_resolution(request, resolution)
        return await call_next(request)
