"""SQLAlchemy model for monthly feature usage counters."""

from datetime import date

from sqlalchemy import JSON, Date, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from crm_tenancy.common.models import Base, TimestampMixin, generate_uuid


class FeatureUsageModel(Base, TimestampMixin):
    __tablename__ = "feature_usage"
    __table_args__ = (
        # Conflict target of the usage upsert.
        UniqueConstraint(
            "tenant_id", "feature_name", "period_start",
            name="uq_feature_usage_period",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    tenant_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tenants.id"), nullable=False, index=True
    )
    feature_name: Mapped[str] = mapped_column(String(100), nullable=False)
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    usage_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    usage_data: Mapped[dict] = mapped_column(JSON, default=dict)
