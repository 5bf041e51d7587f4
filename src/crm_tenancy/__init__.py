"""crm-tenancy: multi-tenant resolution, feature gating and permissions for the CRM backend."""

from crm_tenancy.features.service import FeatureService
from crm_tenancy.gates import (
    require_active_tenant,
    require_feature,
    require_permission,
    require_tenant,
)
from crm_tenancy.roles.service import PermissionService
from crm_tenancy.tenants.resolver import RequestHints, Resolution, TenantResolver

__all__ = [
    "FeatureService",
    "PermissionService",
    "RequestHints",
    "Resolution",
    "TenantResolver",
    "require_active_tenant",
    "require_feature",
    "require_permission",
    "require_tenant",
]
__version__ = "0.1.0"
