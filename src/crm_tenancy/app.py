"""FastAPI application factory for crm-tenancy."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from crm_tenancy.common.config import get_settings
from crm_tenancy.common.exceptions import GateError, TenancyError
from crm_tenancy.common.logging import setup_logging
from crm_tenancy.common.schemas import ErrorResponse, HealthResponse
from crm_tenancy.tenants.middleware import TenantResolutionMiddleware


async def _tenancy_error_handler(request: Request, exc: TenancyError) -> JSONResponse:
    if isinstance(exc, GateError):
        body = ErrorResponse(error=exc.error, message=exc.message or None)
    else:
        body = ErrorResponse(error=exc.code, message=exc.message or None)
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
    )


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        from crm_tenancy.deps import get_db
        db = get_db()
        await db.init()
        await db.create_all()
        if settings.seed_default_tenant and settings.fallback_tenant_id:
            from crm_tenancy.deps import (
                get_permission_service,
                get_subscription_service,
                get_tenant_service,
            )
            from crm_tenancy.tenants.bootstrap import ensure_default_tenant
            async with db.get_session() as session:
                await ensure_default_tenant(
                    session, settings,
                    tenant_service=get_tenant_service(),
                    subscription_service=get_subscription_service(),
                    permission_service=get_permission_service(),
                )
        yield
        # Shutdown
        await db.close()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
    )

    app.add_exception_handler(TenancyError, _tenancy_error_handler)

    # Starlette runs the last-added middleware first: CORS wraps tenant resolution.
    app.add_middleware(TenantResolutionMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", response_model=HealthResponse)
    async def health():
        from crm_tenancy.deps import get_db
        db = get_db()
        reachable = await db.ping()
        return HealthResponse(
            status="ok" if reachable else "degraded",
            version=settings.api_version,
            database=db.dialect,
        )

    # Mount routers
    from crm_tenancy.tenants.router import router as tenant_router
    from crm_tenancy.tenants.current import router as current_tenant_router
    from crm_tenancy.subscriptions.router import router as subscription_router
    from crm_tenancy.roles.router import router as roles_router
    from crm_tenancy.partners.router import router as partner_router

    prefix = settings.api_prefix
    app.include_router(tenant_router, prefix=prefix, tags=["tenants"])
    app.include_router(current_tenant_router, prefix=prefix, tags=["tenant"])
    app.include_router(subscription_router, prefix=prefix, tags=["subscriptions"])
    app.include_router(roles_router, prefix=prefix, tags=["roles"])
    app.include_router(partner_router, prefix=prefix, tags=["partners"])

    return app
