"""Integration tests for tenant resolution and the request gates."""

import pytest


async def _create_tenant(client, headers, **body):
    resp = await client.post("/tenants", json=body, headers=headers)
    assert resp.status_code == 201
    return resp.json()


async def _subscribe(client, headers, tenant_id, features):
    plan = await client.post(
        "/plans",
        json={"name": "Test Plan", "tenant_id": tenant_id, "features": features},
        headers=headers,
    )
    assert plan.status_code == 201
    resp = await client.post(
        f"/tenants/{tenant_id}/subscription",
        json={"plan_id": plan.json()["id"]},
        headers=headers,
    )
    assert resp.status_code == 201


@pytest.fixture
async def acme(client, super_admin_headers):
    tenant = await _create_tenant(
        client, super_admin_headers, name="Acme", subdomain="acme", id="t-acme"
    )
    await _subscribe(
        client, super_admin_headers, tenant["id"],
        {"aiTools": True, "advancedAnalytics": True, "voiceAnalysis": False},
    )
    return tenant


@pytest.fixture
async def beta(client, super_admin_headers):
    return await _create_tenant(
        client, super_admin_headers, name="Beta", subdomain="beta", id="t-beta"
    )


class TestResolution:
    async def test_subdomain(self, client, acme):
        resp = await client.get("/tenant/current", headers={"Host": "acme.example.com"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["tenant"]["id"] == "t-acme"
        assert data["source"] == "subdomain"

    async def test_subdomain_wins_over_header_and_query(self, client, acme, beta):
        resp = await client.get(
            "/tenant/current",
            params={"tenant": "t-beta"},
            headers={"Host": "acme.example.com", "X-Tenant-ID": "t-beta"},
        )
        assert resp.json()["tenant"]["id"] == "t-acme"

    async def test_header_beats_query(self, client, acme, beta):
        resp = await client.get(
            "/tenant/current", params={"tenant": "t-acme"}, headers={"X-Tenant-ID": "t-beta"}
        )
        assert resp.json()["tenant"]["id"] == "t-beta"
        assert resp.json()["source"] == "header"

    async def test_query(self, client, acme):
        resp = await client.get("/tenant/current", params={"tenant": "t-acme"})
        assert resp.json()["source"] == "query"

    async def test_custom_domain(self, client, super_admin_headers):
        await _create_tenant(
            client, super_admin_headers, name="Client", custom_domain="crm.client.com"
        )
        resp = await client.get("/tenant/current", headers={"Host": "crm.client.com"})
        assert resp.json()["tenant"]["name"] == "Client"
        assert resp.json()["source"] == "custom_domain"

    async def test_default_fallback(self, client, super_admin_headers):
        await _create_tenant(client, super_admin_headers, name="Default", id="default")
        resp = await client.get("/tenant/current", headers={"Host": "www.example.com"})
        assert resp.status_code == 200
        assert resp.json()["tenant"]["id"] == "default"
        assert resp.json()["source"] == "default"

    async def test_no_tenant(self, client):
        resp = await client.get("/tenant/current")
        assert resp.status_code == 400
        assert resp.json()["error"] == "Tenant identification required"

    async def test_unscoped_routes_unaffected(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
        assert resp.json()["database"] == "sqlite"


class TestActivityGate:
    async def test_suspended_tenant(self, client, super_admin_headers, acme):
        await client.post("/tenants/t-acme/suspend", headers=super_admin_headers)
        resp = await client.get("/tenant/features", headers={"X-Tenant-ID": "t-acme"})
        assert resp.status_code == 403
        body = resp.json()
        assert body["error"] == "Tenant inactive"
        assert "suspended" in body["message"]

    async def test_suspended_tenant_still_resolves(self, client, super_admin_headers, acme):
        await client.post("/tenants/t-acme/suspend", headers=super_admin_headers)
        resp = await client.get("/tenant/current", headers={"X-Tenant-ID": "t-acme"})
        assert resp.status_code == 200
        assert resp.json()["tenant"]["status"] == "suspended"


class TestFeatureGate:
    async def test_use_counts(self, client, acme):
        headers = {"X-Tenant-ID": "t-acme"}
        first = await client.post("/tenant/features/aiTools/use", headers=headers)
        second = await client.post("/tenant/features/aiTools/use", headers=headers)
        assert first.status_code == 200
        assert first.json()["usage_count"] == 1
        assert second.json()["usage_count"] == 2

        resp = await client.get("/tenant/features", headers=headers)
        assert resp.json() == [{"feature": "aiTools", "usage_count": 2}]

    async def test_plan_disables_feature(self, client, acme):
        resp = await client.post(
            "/tenant/features/voiceAnalysis/use", headers={"X-Tenant-ID": "t-acme"}
        )
        assert resp.status_code == 403
        assert resp.json()["error"] == "Feature access denied"

    async def test_tenant_flag_narrows(self, client, super_admin_headers, acme):
        await client.put(
            "/tenants/t-acme/features",
            json={"feature_flags": {"aiTools": False}},
            headers=super_admin_headers,
        )
        resp = await client.post("/tenant/features/aiTools/use", headers={"X-Tenant-ID": "t-acme"})
        assert resp.status_code == 403

    async def test_denied_use_not_counted(self, client, super_admin_headers, acme):
        headers = {"X-Tenant-ID": "t-acme"}
        await client.post("/tenant/features/voiceAnalysis/use", headers=headers)
        resp = await client.get("/tenants/t-acme/usage", headers=super_admin_headers)
        assert resp.json() == []

    async def test_no_subscription(self, client, beta):
        resp = await client.post("/tenant/features/aiTools/use", headers={"X-Tenant-ID": "t-beta"})
        assert resp.status_code == 403

    async def test_no_tenant(self, client):
        resp = await client.post("/tenant/features/aiTools/use")
        assert resp.status_code == 400

    async def test_analytics_route_gated(self, client, acme, beta):
        resp = await client.get("/tenant/analytics", headers={"X-Tenant-ID": "t-acme"})
        assert resp.status_code == 200
        assert resp.json()["feature_usage"] == [{"feature": "advancedAnalytics", "usage_count": 1}]

        resp = await client.get("/tenant/analytics", headers={"X-Tenant-ID": "t-beta"})
        assert resp.status_code == 403
        assert resp.json()["error"] == "Feature access denied"

    async def test_analytics_inactive_short_circuits(self, client, super_admin_headers, acme):
        await client.post("/tenants/t-acme/suspend", headers=super_admin_headers)
        resp = await client.get("/tenant/analytics", headers={"X-Tenant-ID": "t-acme"})
        assert resp.status_code == 403
        assert resp.json()["error"] == "Tenant inactive"


class TestPermissionGate:
    async def _user(self, client, headers, **body):
        resp = await client.post("/users", json=body, headers=headers)
        assert resp.status_code == 201
        return resp.json()

    async def test_no_user(self, client, acme):
        resp = await client.get("/tenant/users", headers={"X-Tenant-ID": "t-acme"})
        assert resp.status_code == 401
        assert resp.json()["error"] == "Authentication required"

    async def test_unknown_user(self, client, acme):
        resp = await client.get(
            "/tenant/users", headers={"X-Tenant-ID": "t-acme", "X-User-ID": "ghost"}
        )
        assert resp.status_code == 403
        assert resp.json()["error"] == "Permission denied"

    async def test_user_without_permission(self, client, super_admin_headers, acme):
        user = await self._user(client, super_admin_headers, email="n@acme.com", tenant_id="t-acme")
        resp = await client.get(
            "/tenant/users", headers={"X-Tenant-ID": "t-acme", "X-User-ID": user["id"]}
        )
        assert resp.status_code == 403

    async def test_viewer_role_allowed(self, client, super_admin_headers, acme):
        roles = await client.get("/tenants/t-acme/roles", headers=super_admin_headers)
        viewer = next(r for r in roles.json() if r["name"] == "Viewer")
        user = await self._user(
            client, super_admin_headers,
            email="v@acme.com", tenant_id="t-acme", role_id=viewer["id"],
        )
        resp = await client.get(
            "/tenant/users", headers={"X-Tenant-ID": "t-acme", "X-User-ID": user["id"]}
        )
        assert resp.status_code == 200
        assert [u["email"] for u in resp.json()] == ["v@acme.com"]

    async def test_admin_allowed(self, client, super_admin_headers, acme):
        user = await self._user(
            client, super_admin_headers, email="root@acme.com", tenant_id="t-acme", is_admin=True
        )
        resp = await client.get(
            "/tenant/users", headers={"X-Tenant-ID": "t-acme", "X-User-ID": user["id"]}
        )
        assert resp.status_code == 200
