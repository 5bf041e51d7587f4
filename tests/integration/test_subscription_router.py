"""Integration tests for plan and subscription endpoints."""


class TestSubscriptionRouter:
    async def _tenant(self, client, headers):
        resp = await client.post("/tenants", json={"name": "Acme"}, headers=headers)
        return resp.json()["id"]

    async def _plan(self, client, headers, **body):
        payload = {"name": "Pro", "price": "99.00", "features": {"aiTools": True}}
        payload.update(body)
        resp = await client.post("/plans", json=payload, headers=headers)
        assert resp.status_code == 201
        return resp.json()

    async def test_create_plan(self, client, super_admin_headers):
        plan = await self._plan(client, super_admin_headers)
        assert plan["name"] == "Pro"
        assert plan["features"] == {"aiTools": True}
        assert plan["is_active"] is True

    async def test_negative_price_rejected(self, client, super_admin_headers):
        resp = await client.post(
            "/plans", json={"name": "Bad", "price": "-1"}, headers=super_admin_headers
        )
        assert resp.status_code == 422

    async def test_list_plans(self, client, super_admin_headers):
        tid = await self._tenant(client, super_admin_headers)
        await self._plan(client, super_admin_headers)
        await self._plan(client, super_admin_headers, name="Own", tenant_id=tid)
        resp = await client.get("/plans", params={"templates_only": True}, headers=super_admin_headers)
        assert [p["name"] for p in resp.json()] == ["Pro"]
        resp = await client.get("/plans", params={"tenant_id": tid}, headers=super_admin_headers)
        assert [p["name"] for p in resp.json()] == ["Own"]

    async def test_subscribe_and_get(self, client, super_admin_headers):
        tid = await self._tenant(client, super_admin_headers)
        plan = await self._plan(client, super_admin_headers)
        resp = await client.post(
            f"/tenants/{tid}/subscription", json={"plan_id": plan["id"]}, headers=super_admin_headers
        )
        assert resp.status_code == 201
        assert resp.json()["status"] == "active"

        resp = await client.get(f"/tenants/{tid}/subscription", headers=super_admin_headers)
        assert resp.json()["plan_id"] == plan["id"]

    async def test_subscribe_unknown_plan(self, client, super_admin_headers):
        tid = await self._tenant(client, super_admin_headers)
        resp = await client.post(
            f"/tenants/{tid}/subscription", json={"plan_id": "missing"}, headers=super_admin_headers
        )
        assert resp.status_code == 404
        assert resp.json()["error"] == "PLAN_NOT_FOUND"

    async def test_subscribe_unknown_tenant(self, client, super_admin_headers):
        plan = await self._plan(client, super_admin_headers)
        resp = await client.post(
            "/tenants/missing/subscription", json={"plan_id": plan["id"]}, headers=super_admin_headers
        )
        assert resp.status_code == 404

    async def test_cancel(self, client, super_admin_headers):
        tid = await self._tenant(client, super_admin_headers)
        plan = await self._plan(client, super_admin_headers)
        await client.post(
            f"/tenants/{tid}/subscription", json={"plan_id": plan["id"]}, headers=super_admin_headers
        )
        resp = await client.delete(f"/tenants/{tid}/subscription", headers=super_admin_headers)
        assert resp.json()["status"] == "canceled"
        resp = await client.get(f"/tenants/{tid}/subscription", headers=super_admin_headers)
        assert resp.status_code == 404

    async def test_requires_key(self, client):
        resp = await client.get("/plans")
        assert resp.status_code == 422
