"""Partner (white-label reseller) admin API router."""

from typing import Optional

from fastapi import APIRouter, Depends

from crm_tenancy.common.security import require_super_admin
from crm_tenancy.partners.schemas import (
    CustomerCreate,
    PartnerCreate,
    PartnerStatsResponse,
    PartnerUpdate,
)
from crm_tenancy.partners.service import CustomerProvisioning, PartnerOnboarding
from crm_tenancy.tenants.schemas import TenantResponse, TenantStatus

router = APIRouter(prefix="/partners", tags=["partners"], dependencies=[Depends(require_super_admin)])


def _get_service():
    from crm_tenancy.deps import get_partner_service
    return get_partner_service()


def _get_db():
    from crm_tenancy.deps import get_db
    return get_db()


@router.post("", response_model=TenantResponse, status_code=201)
async def create_partner(body: PartnerCreate):
    svc = _get_service()
    db = _get_db()
    onboarding = PartnerOnboarding(
        **body.model_dump(exclude={"branding"}),
        branding=body.branding.model_dump(),
    )
    async with db.get_session() as session:
        partner = await svc.create_partner(session, onboarding)
        return TenantResponse.model_validate(partner)


@router.get("", response_model=list[TenantResponse])
async def list_partners(status: Optional[TenantStatus] = None):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        partners = await svc.list_partners(session, status=status)
        return [TenantResponse.model_validate(p) for p in partners]


@router.patch("/{partner_id}", response_model=TenantResponse)
async def update_partner(partner_id: str, body: PartnerUpdate):
    svc = _get_service()
    db = _get_db()
    branding = body.branding.model_dump(exclude_none=True) if body.branding else None
    async with db.get_session() as session:
        partner = await svc.update_partner(
            session, partner_id,
            **body.model_dump(exclude={"branding"}),
            branding=branding,
        )
        return TenantResponse.model_validate(partner)


@router.post("/{partner_id}/approve", response_model=TenantResponse)
async def approve_partner(partner_id: str):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        partner = await svc.approve_partner(session, partner_id)
        return TenantResponse.model_validate(partner)


@router.get("/{partner_id}/customers", response_model=list[TenantResponse])
async def list_customers(partner_id: str):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        customers = await svc.list_customers(session, partner_id)
        return [TenantResponse.model_validate(c) for c in customers]


@router.post("/{partner_id}/customers", response_model=TenantResponse, status_code=201)
async def create_customer(partner_id: str, body: CustomerCreate):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        customer = await svc.create_customer_for_partner(
            session, partner_id, CustomerProvisioning(**body.model_dump())
        )
        return TenantResponse.model_validate(customer)


@router.get("/{partner_id}/stats", response_model=PartnerStatsResponse)
async def partner_stats(partner_id: str):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        stats = await svc.get_partner_stats(session, partner_id)
        return PartnerStatsResponse.model_validate(stats)
