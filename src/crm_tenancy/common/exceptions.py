"""crm-tenancy exception hierarchy."""


class TenancyError(Exception):
    """Base exception for all tenancy errors."""

    status_code = 400

    def __init__(self, message: str = "", code: str = "TENANCY_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class TenantNotFoundError(TenancyError):
    """Raised when a tenant cannot be found."""

    status_code = 404

    def __init__(self, message: str = "Tenant not found"):
        super().__init__(message, code="TENANT_NOT_FOUND")


class PartnerNotFoundError(TenancyError):
    """Raised when a partner tenant is referenced but does not exist."""

    status_code = 404

    def __init__(self, message: str = "Partner not found"):
        super().__init__(message, code="PARTNER_NOT_FOUND")


class PlanNotFoundError(TenancyError):
    """Raised when a subscription plan cannot be found."""

    status_code = 404

    def __init__(self, message: str = "Subscription plan not found"):
        super().__init__(message, code="PLAN_NOT_FOUND")


class UserNotFoundError(TenancyError):
    """Raised when a user cannot be found."""

    status_code = 404

    def __init__(self, message: str = "User not found"):
        super().__init__(message, code="USER_NOT_FOUND")


class RoleNotFoundError(TenancyError):
    """Raised when a role cannot be found."""

    status_code = 404

    def __init__(self, message: str = "Role not found"):
        super().__init__(message, code="ROLE_NOT_FOUND")


class TenantAddressConflictError(TenancyError):
    """Raised when a subdomain or custom domain is already taken."""

    status_code = 409

    def __init__(self, message: str = "Tenant address already in use"):
        super().__init__(message, code="ADDRESS_CONFLICT")


class TenantExistsError(TenancyError):
    """Raised when a tenant id is already taken."""

    status_code = 409

    def __init__(self, message: str = "Tenant already exists"):
        super().__init__(message, code="TENANT_EXISTS")


class RoleConflictError(TenancyError):
    """Raised when a tenant already has a role with the same name."""

    status_code = 409

    def __init__(self, message: str = "Role name already in use"):
        super().__init__(message, code="ROLE_CONFLICT")


class UserConflictError(TenancyError):
    """Raised when a user email is already registered."""

    status_code = 409

    def __init__(self, message: str = "Email already registered"):
        super().__init__(message, code="USER_CONFLICT")


class RoleTenantMismatchError(TenancyError):
    """Raised when a user is given a role owned by another tenant."""

    status_code = 422

    def __init__(self, message: str = "Role belongs to a different tenant"):
        super().__init__(message, code="ROLE_TENANT_MISMATCH")


class ReservedSubdomainError(TenancyError):
    """Raised when a tenant tries to claim a reserved subdomain."""

    status_code = 422

    def __init__(self, message: str = "Subdomain is reserved"):
        super().__init__(message, code="RESERVED_SUBDOMAIN")


class InvalidParentTenantError(TenancyError):
    """Raised when a customer's parent is missing or is not a partner."""

    status_code = 422

    def __init__(self, message: str = "Parent tenant must be an existing partner"):
        super().__init__(message, code="INVALID_PARENT")


class InvalidStatusTransitionError(TenancyError):
    """Raised when a tenant status change is not an allowed transition."""

    status_code = 409

    def __init__(self, message: str = "Status transition not allowed"):
        super().__init__(message, code="INVALID_TRANSITION")


class UnsupportedDialectError(TenancyError):
    """Raised when the database has no native upsert we know how to use."""

    status_code = 500

    def __init__(self, message: str = "Database dialect does not support upsert"):
        super().__init__(message, code="UNSUPPORTED_DIALECT")


class GateError(TenancyError):
    """Raised by request gates; rendered as {"error", "message"}."""

    def __init__(self, status_code: int, error: str, message: str = ""):
        self.status_code = status_code
        self.error = error
        super().__init__(message, code="GATE_DENIED")
