"""Role and user admin API router — requires super-admin authentication."""

from fastapi import APIRouter, Depends, HTTPException

from crm_tenancy.common.security import require_super_admin
from crm_tenancy.roles.schemas import (
    PermissionCheckResponse,
    PermissionGrant,
    RoleAssignment,
    RoleCreate,
    RoleResponse,
    UserCreate,
    UserResponse,
)

router = APIRouter(dependencies=[Depends(require_super_admin)])


def _get_service():
    from crm_tenancy.deps import get_permission_service
    return get_permission_service()


def _get_tenant_service():
    from crm_tenancy.deps import get_tenant_service
    return get_tenant_service()


def _get_db():
    from crm_tenancy.deps import get_db
    return get_db()


@router.post("/tenants/{tenant_id}/roles", response_model=RoleResponse, status_code=201)
async def create_role(tenant_id: str, body: RoleCreate):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        await _get_tenant_service().require(session, tenant_id)
        role = await svc.create_role(
            session, tenant_id,
            name=body.name,
            permissions=body.permissions,
            description=body.description,
        )
        return RoleResponse.model_validate(role)


@router.get("/tenants/{tenant_id}/roles", response_model=list[RoleResponse])
async def list_roles(tenant_id: str):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        roles = await svc.list_roles(session, tenant_id)
        return [RoleResponse.model_validate(r) for r in roles]


@router.post("/users", response_model=UserResponse, status_code=201)
async def create_user(body: UserCreate):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        if body.tenant_id is not None:
            await _get_tenant_service().require(session, body.tenant_id)
        user = await svc.create_user(session, **body.model_dump())
        return UserResponse.model_validate(user)


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(user_id: str):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        user = await svc.get_user(session, user_id)
        if user is None:
            raise HTTPException(status_code=404, detail="User not found")
        return UserResponse.model_validate(user)


@router.put("/users/{user_id}/role", response_model=UserResponse)
async def assign_role(user_id: str, body: RoleAssignment):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        user = await svc.assign_role(session, user_id, body.role_id)
        return UserResponse.model_validate(user)


@router.post("/users/{user_id}/permissions", response_model=UserResponse)
async def grant_permissions(user_id: str, body: PermissionGrant):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        user = await svc.grant_permissions(session, user_id, body.permissions)
        return UserResponse.model_validate(user)


@router.get("/users/{user_id}/permissions/{permission}", response_model=PermissionCheckResponse)
async def check_permission(user_id: str, permission: str):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        allowed = await svc.has_permission(session, user_id, permission)
        return PermissionCheckResponse(user_id=user_id, permission=permission, allowed=allowed)
