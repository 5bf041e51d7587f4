"""Dependency injection singletons for crm-tenancy."""

from crm_tenancy.common.config import get_settings
from crm_tenancy.common.database import DatabaseManager
from crm_tenancy.features.service import FeatureService
from crm_tenancy.partners.service import PartnerService
from crm_tenancy.roles.service import PermissionService
from crm_tenancy.subscriptions.service import SubscriptionService
from crm_tenancy.tenants.resolver import TenantResolver
from crm_tenancy.tenants.service import TenantService

_db: DatabaseManager | None = None
_tenants: TenantService | None = None
_resolver: TenantResolver | None = None
_subscriptions: SubscriptionService | None = None
_features: FeatureService | None = None
_permissions: PermissionService | None = None
_partners: PartnerService | None = None


def get_db() -> DatabaseManager:
    global _db
    if _db is None:
        _db = DatabaseManager(get_settings())
    return _db


def get_permission_service() -> PermissionService:
    global _permissions
    if _permissions is None:
        _permissions = PermissionService()
    return _permissions


def get_tenant_service() -> TenantService:
    global _tenants
    if _tenants is None:
        _tenants = TenantService(
            permission_service=get_permission_service(),
            reserved_subdomains=get_settings().reserved_subdomains,
        )
    return _tenants


def get_tenant_resolver() -> TenantResolver:
    global _resolver
    if _resolver is None:
        settings = get_settings()
        _resolver = TenantResolver(
            get_tenant_service(),
            default_tenant_id=settings.fallback_tenant_id,
            reserved_subdomains=settings.reserved_subdomains,
        )
    return _resolver


def get_subscription_service() -> SubscriptionService:
    global _subscriptions
    if _subscriptions is None:
        _subscriptions = SubscriptionService(get_settings().default_subscription_days)
    return _subscriptions


def get_feature_service() -> FeatureService:
    global _features
    if _features is None:
        _features = FeatureService(get_tenant_service(), get_subscription_service())
    return _features


def get_partner_service() -> PartnerService:
    global _partners
    if _partners is None:
        _partners = PartnerService(
            get_tenant_service(),
            get_subscription_service(),
            get_permission_service(),
        )
    return _partners


def reset_singletons() -> None:
    """Reset all singletons (for testing)."""
    global _db, _tenants, _resolver, _subscriptions, _features, _permissions, _partners
    _db = None
    _tenants = None
    _resolver = None
    _subscriptions = None
    _features = None
    _permissions = None
    _partners = None
