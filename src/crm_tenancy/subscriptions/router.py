"""Plan and subscription admin API router."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from crm_tenancy.common.security import require_super_admin
from crm_tenancy.subscriptions.schemas import (
    PlanCreate,
    PlanResponse,
    SubscribeRequest,
    SubscriptionResponse,
)

router = APIRouter(dependencies=[Depends(require_super_admin)])


def _get_service():
    from crm_tenancy.deps import get_subscription_service
    return get_subscription_service()


def _get_db():
    from crm_tenancy.deps import get_db
    return get_db()


@router.post("/plans", response_model=PlanResponse, status_code=201)
async def create_plan(body: PlanCreate):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        plan = await svc.create_plan(session, **body.model_dump())
        return PlanResponse.model_validate(plan)


@router.get("/plans", response_model=list[PlanResponse])
async def list_plans(tenant_id: Optional[str] = None, templates_only: bool = False):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        plans = await svc.list_plans(
            session, tenant_id=tenant_id, templates_only=templates_only
        )
        return [PlanResponse.model_validate(p) for p in plans]


@router.post(
    "/tenants/{tenant_id}/subscription",
    response_model=SubscriptionResponse,
    status_code=201,
)
async def subscribe(tenant_id: str, body: SubscribeRequest):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        subscription = await svc.subscribe(session, tenant_id, body.plan_id, days=body.days)
        return SubscriptionResponse.model_validate(subscription)


@router.get("/tenants/{tenant_id}/subscription", response_model=SubscriptionResponse)
async def current_subscription(tenant_id: str):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        subscription = await svc.get_current_subscription(session, tenant_id)
        if subscription is None:
            raise HTTPException(status_code=404, detail="No active subscription")
        return SubscriptionResponse.model_validate(subscription)


@router.delete("/tenants/{tenant_id}/subscription", response_model=SubscriptionResponse)
async def cancel_subscription(tenant_id: str):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        subscription = await svc.cancel_subscription(session, tenant_id)
        if subscription is None:
            raise HTTPException(status_code=404, detail="No active subscription")
        return SubscriptionResponse.model_validate(subscription)
