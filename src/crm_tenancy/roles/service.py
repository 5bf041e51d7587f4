"""Role and permission service — RBAC with a super-admin override."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from crm_tenancy.common.exceptions import (
    RoleConflictError,
    RoleNotFoundError,
    RoleTenantMismatchError,
    UserConflictError,
    UserNotFoundError,
)
from crm_tenancy.roles.models import UserModel, UserRoleModel
from crm_tenancy.roles.permissions import DEFAULT_ROLES


class PermissionService:
    """User, role and permission operations."""

    # ── Roles ──

    async def create_role(
        self,
        session: AsyncSession,
        tenant_id: str,
        name: str,
        permissions: list[str] | None = None,
        description: str = "",
        is_system: bool = False,
    ) -> UserRoleModel:
        if await self.get_role_by_name(session, tenant_id, name) is not None:
            raise RoleConflictError(f"Role '{name}' already exists for this tenant")
        role = UserRoleModel(
            tenant_id=tenant_id,
            name=name,
            description=description,
            permissions=list(permissions or []),
            is_system=is_system,
        )
        session.add(role)
        try:
            await session.flush()
        except IntegrityError as exc:
            raise RoleConflictError(f"Role '{name}' already exists for this tenant") from exc
        return role

    async def create_from_template(
        self, session: AsyncSession, tenant_id: str, template: dict[str, Any],
        is_system: bool = False,
    ) -> UserRoleModel:
        return await self.create_role(
            session,
            tenant_id,
            name=template["name"],
            permissions=template["permissions"],
            description=template.get("description", ""),
            is_system=is_system,
        )

    async def create_default_roles(
        self, session: AsyncSession, tenant_id: str
    ) -> list[UserRoleModel]:
        """Create the Admin/User/Viewer system roles for a new tenant."""
        return [
            await self.create_from_template(session, tenant_id, template, is_system=True)
            for template in DEFAULT_ROLES
        ]

    async def get_role(
        self, session: AsyncSession, role_id: str
    ) -> UserRoleModel | None:
        return await session.get(UserRoleModel, role_id)

    async def get_role_by_name(
        self, session: AsyncSession, tenant_id: str, name: str
    ) -> UserRoleModel | None:
        result = await session.execute(
            select(UserRoleModel).where(
                UserRoleModel.tenant_id == tenant_id,
                UserRoleModel.name == name,
            )
        )
        return result.scalar_one_or_none()

    async def list_roles(
        self, session: AsyncSession, tenant_id: str
    ) -> list[UserRoleModel]:
        result = await session.execute(
            select(UserRoleModel)
            .where(UserRoleModel.tenant_id == tenant_id)
            .order_by(UserRoleModel.name)
        )
        return list(result.scalars().all())

    # ── Users ──

    async def create_user(
        self,
        session: AsyncSession,
        email: str,
        tenant_id: str | None = None,
        full_name: str = "",
        role_id: str | None = None,
        permissions: list[str] | None = None,
        is_admin: bool = False,
    ) -> UserModel:
        if role_id is not None:
            await self._require_role_for(session, role_id, tenant_id)
        if await self.get_user_by_email(session, email) is not None:
            raise UserConflictError(f"Email '{email}' is already registered")
        user = UserModel(
            email=email,
            tenant_id=tenant_id,
            full_name=full_name,
            role_id=role_id,
            permissions=list(permissions or []),
            is_admin=is_admin,
        )
        session.add(user)
        try:
            await session.flush()
        except IntegrityError as exc:
            raise UserConflictError(f"Email '{email}' is already registered") from exc
        return user

    async def _require_role_for(
        self, session: AsyncSession, role_id: str, tenant_id: str | None
    ) -> UserRoleModel:
        """Load a role and check it may be held by a user of ``tenant_id``."""
        role = await self.get_role(session, role_id)
        if role is None:
            raise RoleNotFoundError()
        if tenant_id is not None and role.tenant_id != tenant_id:
            raise RoleTenantMismatchError(
                f"Role '{role.name}' belongs to tenant '{role.tenant_id}'"
            )
        return role

    async def get_user(
        self, session: AsyncSession, user_id: str
    ) -> UserModel | None:
        return await session.get(UserModel, user_id)

    async def get_user_by_email(
        self, session: AsyncSession, email: str
    ) -> UserModel | None:
        result = await session.execute(
            select(UserModel).where(UserModel.email == email)
        )
        return result.scalar_one_or_none()

    async def list_users(
        self, session: AsyncSession, tenant_id: str
    ) -> list[UserModel]:
        result = await session.execute(
            select(UserModel)
            .where(UserModel.tenant_id == tenant_id)
            .order_by(UserModel.email)
        )
        return list(result.scalars().all())

    async def assign_role(
        self, session: AsyncSession, user_id: str, role_id: str | None
    ) -> UserModel:
        user = await self.get_user(session, user_id)
        if user is None:
            raise UserNotFoundError()
        if role_id is not None:
            await self._require_role_for(session, role_id, user.tenant_id)
        user.role_id = role_id
        await session.flush()
        return user

    async def grant_permissions(
        self, session: AsyncSession, user_id: str, permissions: list[str]
    ) -> UserModel:
        """Add ad-hoc permissions to a user, keeping existing grants."""
        user = await self.get_user(session, user_id)
        if user is None:
            raise UserNotFoundError()
        merged = list(user.permissions or [])
        for permission in permissions:
            if permission not in merged:
                merged.append(permission)
        # Reassign so the JSON column is flagged dirty.
        user.permissions = merged
        await session.flush()
        return user

    # ── Checks ──

    async def has_permission(
        self, session: AsyncSession, user_id: str, permission: str
    ) -> bool:
        """Decide whether a user holds a permission.

        Evaluated in order, stopping at the first grant:
        super-admin flag, the user's ad-hoc permissions, then the
        permissions of the user's role. Anything else is denied.
        """
        result = await session.execute(
            select(
                UserModel.is_admin,
                UserModel.permissions,
                UserRoleModel.permissions.label("role_permissions"),
            )
            .outerjoin(UserRoleModel, UserModel.role_id == UserRoleModel.id)
            .where(UserModel.id == user_id)
        )
        row = result.one_or_none()
        if row is None:
            return False

        if row.is_admin:
            return True

        if permission in (row.permissions or []):
            return True

        return permission in (row.role_permissions or [])
