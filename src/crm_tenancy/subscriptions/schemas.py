"""Pydantic schemas for plan and subscription endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


class PlanCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    tenant_id: Optional[str] = None
    plan_type: str = "default"
    price: Decimal = Field(default=Decimal("0"), ge=0)
    billing_cycle: Literal["monthly", "yearly"] = "monthly"
    features: dict[str, Any] = {}
    usage_limits: dict[str, Any] = {}


class PlanResponse(BaseModel):
    id: str
    tenant_id: Optional[str] = None
    name: str
    plan_type: str
    price: Decimal
    billing_cycle: str
    features: dict[str, Any]
    usage_limits: dict[str, Any]
    is_active: bool

    model_config = {"from_attributes": True}


class SubscribeRequest(BaseModel):
    plan_id: str
    days: Optional[int] = Field(default=None, ge=1)


class SubscriptionResponse(BaseModel):
    id: str
    tenant_id: str
    plan_id: str
    status: str
    current_period_start: datetime
    current_period_end: Optional[datetime] = None
    cancel_at_period_end: bool

    model_config = {"from_attributes": True}
