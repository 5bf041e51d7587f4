"""Pydantic schemas for tenant endpoints."""

from datetime import date, datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

TenantType = Literal["partner", "customer"]
TenantStatus = Literal["active", "suspended", "trial", "pending_approval"]

SUBDOMAIN_REGEX = r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?$"


class TenantCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    id: Optional[str] = Field(default=None, min_length=1, max_length=36)
    type: TenantType = "customer"
    parent_tenant_id: Optional[str] = None
    subdomain: Optional[str] = Field(default=None, max_length=63, pattern=SUBDOMAIN_REGEX)
    custom_domain: Optional[str] = Field(default=None, max_length=255)
    status: TenantStatus = "active"
    feature_flags: dict[str, bool] = {}
    branding_config: dict[str, Any] = {}
    metadata: dict[str, Any] = {}


class TenantUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    subdomain: Optional[str] = Field(default=None, max_length=63, pattern=SUBDOMAIN_REGEX)
    custom_domain: Optional[str] = Field(default=None, max_length=255)
    metadata: Optional[dict[str, Any]] = None


class TenantResponse(BaseModel):
    id: str
    name: str
    type: str
    parent_tenant_id: Optional[str] = None
    subdomain: Optional[str] = None
    custom_domain: Optional[str] = None
    status: str
    feature_flags: dict[str, Any]
    branding_config: dict[str, Any]
    metadata: dict[str, Any] = Field(default_factory=dict, validation_alias="metadata_")
    created_at: datetime

    model_config = {"from_attributes": True, "populate_by_name": True}


class FeatureFlagsUpdate(BaseModel):
    feature_flags: dict[str, bool]


class BrandingUpdate(BaseModel):
    branding_config: dict[str, Any]


class FeatureUsageEntry(BaseModel):
    feature: str
    usage_count: int


class TenantAnalytics(BaseModel):
    tenant_id: str
    user_count: int
    period_start: date
    feature_usage: list[FeatureUsageEntry]


class CurrentTenantResponse(BaseModel):
    tenant: TenantResponse
    source: Optional[str] = None
    branding: dict[str, Any]


class FeatureUseResponse(BaseModel):
    feature: str
    usage_count: int
