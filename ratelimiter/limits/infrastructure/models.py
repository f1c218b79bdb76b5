from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, Enum, ForeignKey, Index, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ratelimiter.limits.domain.entities import MAX_API_PATTERN_LENGTH, RuleType
from ratelimiter.shared.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --- Enums (mirror DB) -------------------------------------------------------

RuleTypeEnum = Enum(
    RuleType,
    name="rule_type_enum",
    values_callable=lambda e: [m.value for m in e],
)


# --- Tables ------------------------------------------------------------------

class TenantORM(Base):
    """
    Mirrors public.tenants 1:1.

    - id uuid PK
    - name varchar(255) NOT NULL, unique
    - created_at timestamptz NOT NULL DEFAULT now()
    """
    __tablename__ = "tenants"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )

    rules: Mapped[list["RateLimitRuleORM"]] = relationship(
        back_populates="tenant", cascade="all, delete-orphan", passive_deletes=True
    )


class RateLimitRuleORM(Base):
    """
    Mirrors public.rate_limit_rules 1:1.

    - id uuid PK
    - tenant_id uuid NOT NULL -> tenants(id) ON DELETE CASCADE
    - rule_type rule_type_enum NOT NULL
    - "limit" int NOT NULL CHECK > 0
    - window_seconds int NOT NULL CHECK > 0
    - api_pattern varchar(500) NULL
    - created_at timestamptz NOT NULL DEFAULT now()
    """
    __tablename__ = "rate_limit_rules"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False
    )
    rule_type: Mapped[RuleType] = mapped_column(RuleTypeEnum, nullable=False)
    limit: Mapped[int] = mapped_column("limit", Integer, nullable=False)
    window_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    api_pattern: Mapped[str | None] = mapped_column(String(MAX_API_PATTERN_LENGTH), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )

    tenant: Mapped[TenantORM] = relationship(back_populates="rules")

    __table_args__ = (
        CheckConstraint('"limit" > 0', name="ck_rate_limit_rules__limit_positive"),
        CheckConstraint("window_seconds > 0", name="ck_rate_limit_rules__window_positive"),
        Index("idx_rules_tenant_id", "tenant_id"),
        Index("idx_rules_rule_type", "rule_type"),
        Index("idx_rules_tenant_rule_type", "tenant_id", "rule_type"),
    )
