"""Permission identifiers and role templates."""

from typing import Any

# Tenant-level administration
CUSTOMER_ADMIN = "customer_admin"
MANAGE_USERS = "manage_users"
MANAGE_BILLING = "manage_billing"
TENANT_SETTINGS = "tenant_settings"

# User records
USER_CREATE = "user_create"
USER_READ = "user_read"
USER_WRITE = "user_write"
USER_UPDATE = "user_update"
USER_DELETE = "user_delete"

# CRM records
CONTACT_CREATE = "contact_create"
CONTACT_READ = "contact_read"
CONTACT_UPDATE = "contact_update"
CONTACT_DELETE = "contact_delete"
DEAL_CREATE = "deal_create"
DEAL_READ = "deal_read"
DEAL_UPDATE = "deal_update"
DEAL_DELETE = "deal_delete"
ANALYTICS_READ = "analytics_read"

# Partner (white-label reseller) operations
CUSTOMER_CREATE = "customer_create"
CUSTOMER_READ = "customer_read"
CUSTOMER_UPDATE = "customer_update"
CUSTOMER_DELETE = "customer_delete"
BILLING_READ = "billing_read"
BILLING_WRITE = "billing_write"
BRANDING_READ = "branding_read"
BRANDING_WRITE = "branding_write"
SUPPORT_READ = "support_read"
SUPPORT_WRITE = "support_write"


DEFAULT_ROLES: list[dict[str, Any]] = [
    {
        "name": "Admin",
        "description": "Full access to tenant features",
        "permissions": [
            CUSTOMER_ADMIN, MANAGE_USERS, MANAGE_BILLING, TENANT_SETTINGS,
            USER_READ, USER_WRITE, USER_DELETE,
        ],
    },
    {
        "name": "User",
        "description": "Standard user access",
        "permissions": [USER_READ, USER_WRITE],
    },
    {
        "name": "Viewer",
        "description": "Read-only access",
        "permissions": [USER_READ],
    },
]

PARTNER_ADMIN_ROLE: dict[str, Any] = {
    "name": "Partner Admin",
    "description": "Manages the partner's customers, billing and branding",
    "permissions": [
        CUSTOMER_CREATE, CUSTOMER_READ, CUSTOMER_UPDATE, CUSTOMER_DELETE,
        BILLING_READ, BILLING_WRITE, BRANDING_READ, BRANDING_WRITE,
        ANALYTICS_READ, SUPPORT_READ, SUPPORT_WRITE,
    ],
}

CUSTOMER_ADMIN_ROLE: dict[str, Any] = {
    "name": "Customer Admin",
    "description": "Manages users and CRM records of a customer tenant",
    "permissions": [
        USER_CREATE, USER_READ, USER_UPDATE, USER_DELETE,
        CONTACT_CREATE, CONTACT_READ, CONTACT_UPDATE, CONTACT_DELETE,
        DEAL_CREATE, DEAL_READ, DEAL_UPDATE, DEAL_DELETE,
        ANALYTICS_READ,
    ],
}
