"""SQLAlchemy model for tenants."""

from sqlalchemy import JSON, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from crm_tenancy.common.models import Base, TimestampMixin, generate_uuid

TENANT_TYPES = ("partner", "customer")
TENANT_STATUSES = ("active", "suspended", "trial", "pending_approval")


class TenantModel(Base, TimestampMixin):
    __tablename__ = "tenants"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(20), default="customer", nullable=False)
    parent_tenant_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("tenants.id"), nullable=True, index=True
    )
    subdomain: Mapped[str | None] = mapped_column(
        String(63), unique=True, nullable=True, index=True
    )
    custom_domain: Mapped[str | None] = mapped_column(
        String(255), unique=True, nullable=True, index=True
    )
    status: Mapped[str] = mapped_column(String(20), default="active", index=True)
    feature_flags: Mapped[dict] = mapped_column(JSON, default=dict)
    branding_config: Mapped[dict] = mapped_column(JSON, default=dict)
    metadata_: Mapped[dict] = mapped_column("metadata", JSON, default=dict)
