"""Pydantic schemas for partner endpoints."""

from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from crm_tenancy.tenants.schemas import SUBDOMAIN_REGEX


class PartnerBranding(BaseModel):
    logo: Optional[str] = None
    primaryColor: str = "#3b82f6"
    secondaryColor: str = "#1e40af"


class PartnerCreate(BaseModel):
    company_name: str = Field(..., min_length=1, max_length=255)
    contact_email: str = Field(..., min_length=3, max_length=255)
    contact_name: str = Field(..., min_length=1, max_length=255)
    subdomain: str = Field(..., max_length=63, pattern=SUBDOMAIN_REGEX)
    expected_customers: int = Field(default=0, ge=0)
    business_type: str = ""
    phone: Optional[str] = None
    website: Optional[str] = None
    custom_domain: Optional[str] = None
    branding: PartnerBranding = Field(default_factory=PartnerBranding)
    admin_email: Optional[str] = None
    admin_name: str = ""


class PartnerBrandingUpdate(BaseModel):
    logo: Optional[str] = None
    primaryColor: Optional[str] = None
    secondaryColor: Optional[str] = None


class PartnerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    subdomain: Optional[str] = Field(None, max_length=63, pattern=SUBDOMAIN_REGEX)
    custom_domain: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None
    branding: Optional[PartnerBrandingUpdate] = None


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    subdomain: str = Field(..., max_length=63, pattern=SUBDOMAIN_REGEX)
    contact_email: str = Field(..., min_length=3, max_length=255)
    plan_type: Literal["basic", "professional", "enterprise"] = "basic"
    custom_domain: Optional[str] = None
    branding: Optional[dict[str, Any]] = None


class PartnerStatsResponse(BaseModel):
    total_customers: int
    active_customers: int
    total_revenue: Decimal
    monthly_revenue: Decimal
    customer_growth_rate: float

    model_config = {"from_attributes": True}
