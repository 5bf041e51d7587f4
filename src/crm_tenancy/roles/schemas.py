"""Pydantic schemas for role and user endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = ""
    permissions: list[str] = []


class RoleResponse(BaseModel):
    id: str
    tenant_id: str
    name: str
    description: str
    permissions: list[str]
    is_system: bool

    model_config = {"from_attributes": True}


class UserCreate(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    tenant_id: Optional[str] = None
    full_name: str = ""
    role_id: Optional[str] = None
    permissions: list[str] = []
    is_admin: bool = False


class UserResponse(BaseModel):
    id: str
    email: str
    tenant_id: Optional[str] = None
    full_name: str
    role_id: Optional[str] = None
    permissions: list[str]
    is_admin: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class RoleAssignment(BaseModel):
    role_id: Optional[str] = None


class PermissionGrant(BaseModel):
    permissions: list[str] = Field(..., min_length=1)


class PermissionCheckResponse(BaseModel):
    user_id: str
    permission: str
    allowed: bool
