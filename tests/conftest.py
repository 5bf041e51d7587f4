"""Shared test fixtures for crm-tenancy."""

import os
import pytest
from httpx import ASGITransport, AsyncClient


SUPER_ADMIN_KEY = "test-super-admin-key"


@pytest.fixture
def app():
    """Create a test app with in-memory DB."""
    os.environ["TENANCY_DB_URL"] = "sqlite+aiosqlite://"
    os.environ["TENANCY_SUPER_ADMIN_KEY"] = SUPER_ADMIN_KEY
    os.environ["TENANCY_DEFAULT_TENANT_ID"] = "default"
    os.environ["TENANCY_LOG_LEVEL"] = "WARNING"

    # Clear caches and singletons so new env vars take effect
    from crm_tenancy.common.config import get_settings
    get_settings.cache_clear()

    from crm_tenancy.deps import reset_singletons
    reset_singletons()

    from crm_tenancy.app import create_app
    return create_app()


@pytest.fixture
async def client(app):
    # Manually init DB since ASGITransport doesn't run lifespan
    from crm_tenancy.deps import get_db
    db = get_db()
    await db.init()
    await db.create_all()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await db.close()


@pytest.fixture
def super_admin_headers():
    return {"X-Tenancy-Api-Key": SUPER_ADMIN_KEY}
