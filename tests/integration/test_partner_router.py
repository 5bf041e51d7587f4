"""Integration tests for partner endpoints."""

import pytest


def partner_body(**overrides):
    body = {
        "company_name": "Resell Co",
        "contact_email": "owner@resell.co",
        "contact_name": "Owner",
        "subdomain": "resell",
        "expected_customers": 10,
        "admin_email": "admin@resell.co",
    }
    body.update(overrides)
    return body


class TestPartnerRouter:
    async def _partner(self, client, headers, approve=True):
        resp = await client.post("/partners", json=partner_body(), headers=headers)
        assert resp.status_code == 201
        partner = resp.json()
        if approve:
            resp = await client.post(f"/partners/{partner['id']}/approve", headers=headers)
            assert resp.status_code == 200
            partner = resp.json()
        return partner

    async def test_create_partner_pending(self, client, super_admin_headers):
        partner = await self._partner(client, super_admin_headers, approve=False)
        assert partner["type"] == "partner"
        assert partner["status"] == "pending_approval"
        assert partner["branding_config"]["companyName"] == "Resell Co"

    async def test_approve(self, client, super_admin_headers):
        partner = await self._partner(client, super_admin_headers)
        assert partner["status"] == "active"

    async def test_approve_unknown(self, client, super_admin_headers):
        resp = await client.post("/partners/missing/approve", headers=super_admin_headers)
        assert resp.status_code == 404
        assert resp.json()["error"] == "PARTNER_NOT_FOUND"

    async def test_create_and_list_customers(self, client, super_admin_headers):
        partner = await self._partner(client, super_admin_headers)
        resp = await client.post(
            f"/partners/{partner['id']}/customers",
            json={"name": "Shop", "subdomain": "shop", "contact_email": "s@shop.com",
                  "plan_type": "professional"},
            headers=super_admin_headers,
        )
        assert resp.status_code == 201
        customer = resp.json()
        assert customer["parent_tenant_id"] == partner["id"]
        assert customer["metadata"]["planType"] == "professional"

        resp = await client.get(f"/partners/{partner['id']}/customers", headers=super_admin_headers)
        assert [c["subdomain"] for c in resp.json()] == ["shop"]

    async def test_customer_rejects_partner_tier(self, client, super_admin_headers):
        partner = await self._partner(client, super_admin_headers)
        resp = await client.post(
            f"/partners/{partner['id']}/customers",
            json={"name": "X", "subdomain": "x", "contact_email": "x@x.com", "plan_type": "partner"},
            headers=super_admin_headers,
        )
        assert resp.status_code == 422

    async def test_customer_can_use_plan_feature(self, client, super_admin_headers):
        partner = await self._partner(client, super_admin_headers)
        await client.post(
            f"/partners/{partner['id']}/customers",
            json={"name": "Shop", "subdomain": "shop", "contact_email": "s@shop.com"},
            headers=super_admin_headers,
        )
        host = {"Host": "shop.example.com"}
        resp = await client.post("/tenant/features/aiTools/use", headers=host)
        assert resp.status_code == 200
        resp = await client.post("/tenant/features/voiceAnalysis/use", headers=host)
        assert resp.status_code == 403

    async def test_stats(self, client, super_admin_headers):
        partner = await self._partner(client, super_admin_headers)
        for sub, tier in (("a1", "basic"), ("b1", "enterprise")):
            await client.post(
                f"/partners/{partner['id']}/customers",
                json={"name": sub, "subdomain": sub, "contact_email": f"{sub}@x.com",
                      "plan_type": tier},
                headers=super_admin_headers,
            )
        resp = await client.get(f"/partners/{partner['id']}/stats", headers=super_admin_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["total_customers"] == 2
        assert data["active_customers"] == 2
        assert float(data["monthly_revenue"]) == 248.0
        assert data["customer_growth_rate"] == 100.0

    async def test_list_by_status(self, client, super_admin_headers):
        active = await self._partner(client, super_admin_headers)
        resp = await client.post(
            "/partners", json=partner_body(company_name="New Co", subdomain="newco"),
            headers=super_admin_headers,
        )
        pending = resp.json()

        resp = await client.get(
            "/partners", params={"status": "pending_approval"}, headers=super_admin_headers
        )
        assert resp.status_code == 200
        assert [p["id"] for p in resp.json()] == [pending["id"]]

        resp = await client.get("/partners", params={"status": "active"}, headers=super_admin_headers)
        assert [p["id"] for p in resp.json()] == [active["id"]]

        resp = await client.get("/partners", headers=super_admin_headers)
        assert len(resp.json()) == 2

    async def test_list_rejects_unknown_status(self, client, super_admin_headers):
        resp = await client.get("/partners", params={"status": "gone"}, headers=super_admin_headers)
        assert resp.status_code == 422

    async def test_update(self, client, super_admin_headers):
        partner = await self._partner(client, super_admin_headers)
        resp = await client.patch(
            f"/partners/{partner['id']}",
            json={"name": "Resell Group", "subdomain": "group",
                  "branding": {"primaryColor": "#00ff00"}},
            headers=super_admin_headers,
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["name"] == "Resell Group"
        assert data["subdomain"] == "group"
        assert data["status"] == "active"
        assert data["branding_config"]["primaryColor"] == "#00ff00"
        assert data["branding_config"]["companyName"] == "Resell Group"
        assert data["metadata"]["contactEmail"] == "owner@resell.co"

        resp = await client.get("/tenant/current", headers={"Host": "group.example.com"})
        assert resp.json()["tenant"]["id"] == partner["id"]

    async def test_update_unknown(self, client, super_admin_headers):
        resp = await client.patch(
            "/partners/missing", json={"name": "X"}, headers=super_admin_headers
        )
        assert resp.status_code == 404
        assert resp.json()["error"] == "PARTNER_NOT_FOUND"

    async def test_update_address_conflict(self, client, super_admin_headers):
        partner = await self._partner(client, super_admin_headers)
        await client.post(
            "/tenants", json={"name": "Taken", "subdomain": "taken"}, headers=super_admin_headers
        )
        resp = await client.patch(
            f"/partners/{partner['id']}", json={"subdomain": "taken"},
            headers=super_admin_headers,
        )
        assert resp.status_code == 409

    @pytest.mark.parametrize("method,path", [
        ("post", "/partners"),
        ("get", "/partners/x/customers"),
        ("get", "/partners/x/stats"),
        ("get", "/partners"),
        ("patch", "/partners/x"),
    ])
    async def test_requires_key(self, client, method, path):
        resp = await getattr(client, method)(path, headers={"X-Tenancy-Api-Key": "wrong"})
        assert resp.status_code == 403
