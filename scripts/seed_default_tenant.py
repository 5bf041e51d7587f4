#!/usr/bin/env python3
"""Seed the database with the default tenant and the plan tier templates.

Usage:
    python -m scripts.seed_default_tenant
    # or from project root:
    python scripts/seed_default_tenant.py
"""

import asyncio
import sys
from pathlib import Path

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from crm_tenancy.common.config import get_settings
from crm_tenancy.common.database import DatabaseManager
from crm_tenancy.subscriptions.plans import CUSTOMER_TIERS
from crm_tenancy.subscriptions.service import SubscriptionService
from crm_tenancy.tenants.bootstrap import ensure_default_tenant


async def seed() -> None:
    settings = get_settings()
    db = DatabaseManager(settings)
    await db.init()
    try:
        await db.create_all()

        svc = SubscriptionService(settings.default_subscription_days)

        async with db.get_session() as session:
            tenant = await ensure_default_tenant(session, settings, subscription_service=svc)
            print(f"  [ready] default tenant {tenant.id} (subdomain={tenant.subdomain})")

            existing = {p.plan_type for p in await svc.list_plans(session, templates_only=True)}
            for tier in CUSTOMER_TIERS:
                if tier in existing:
                    print(f"  [skip] {tier} plan template already exists")
                    continue
                plan = await svc.create_plan_from_tier(session, tier)
                print(f"  [created] {tier} plan template ({plan.name}, {plan.price}/month)")
    finally:
        await db.close()
    print("\nDone.")


if __name__ == "__main__":
    asyncio.run(seed())
