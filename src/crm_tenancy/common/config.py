"""crm-tenancy configuration via pydantic-settings."""

import warnings
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

_INSECURE_DEFAULTS = {
    "super_admin_key": "insecure-super-admin-key-change-me",
}


class TenancySettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TENANCY_")

    environment: str = "development"

    # Database
    db_url: str = "sqlite+aiosqlite:///./data/tenancy.db"

    # API
    api_title: str = "crm-tenancy"
    api_version: str = "0.1.0"
    super_admin_key: str = "insecure-super-admin-key-change-me"
    host: str = "0.0.0.0"
    port: int = 8080
    api_prefix: str = ""
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    log_level: str = "INFO"

    # Tenant resolution
    default_tenant_id: str = "default"  # empty string disables the fallback
    reserved_subdomains: list[str] = ["www", "api", "localhost"]
    user_id_header: str = "X-User-ID"

    # Provisioning
    seed_default_tenant: bool = False
    default_subscription_days: int = 30

    @property
    def fallback_tenant_id(self) -> str | None:
        """Default tenant id for the resolver, or None when disabled."""
        return self.default_tenant_id or None

    def validate_for_production(self) -> None:
        """Raise if insecure defaults are used in non-development environments."""
        insecure_fields = [
            field
            for field, default in _INSECURE_DEFAULTS.items()
            if getattr(self, field) == default
        ]

        if self.environment != "development" and insecure_fields:
            env_vars = ", ".join(f"TENANCY_{f.upper()}" for f in insecure_fields)
            raise RuntimeError(
                f"Insecure default values detected in '{self.environment}' environment. "
                f"Set these environment variables to secure values: {env_vars}. "
                "Generate secrets with: python -c \"import secrets; print(secrets.token_urlsafe(48))\""
            )

        if insecure_fields:
            warnings.warn(
                "Using insecure default keys — set TENANCY_SUPER_ADMIN_KEY for production",
                UserWarning,
                stacklevel=2,
            )


@lru_cache
def get_settings() -> TenancySettings:
    settings = TenancySettings()
    settings.validate_for_production()
    return settings
