"""Tenants and rate limit rules.

- rule_type_enum (GENERAL, IP, API)
- tenants (unique name)
- rate_limit_rules with positive limit/window checks, cascade on tenant delete
- lookup indexes on tenant_id, rule_type, (tenant_id, rule_type)
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "20260101_0001"
down_revision = None
branch_labels = None
depends_on = None


rule_type_enum = sa.Enum("GENERAL", "IP", "API", name="rule_type_enum")


def upgrade():
    op.create_table(
        "tenants",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "rate_limit_rules",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("tenant_id", sa.Uuid(), sa.ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False),
        sa.Column("rule_type", rule_type_enum, nullable=False),
        sa.Column("limit", sa.Integer(), nullable=False),
        sa.Column("window_seconds", sa.Integer(), nullable=False),
        sa.Column("api_pattern", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('"limit" > 0', name="ck_rate_limit_rules__limit_positive"),
        sa.CheckConstraint("window_seconds > 0", name="ck_rate_limit_rules__window_positive"),
    )
    op.create_index("idx_rules_tenant_id", "rate_limit_rules", ["tenant_id"])
    op.create_index("idx_rules_rule_type", "rate_limit_rules", ["rule_type"])
    op.create_index("idx_rules_tenant_rule_type", "rate_limit_rules", ["tenant_id", "rule_type"])


def downgrade():
    op.drop_index("idx_rules_tenant_rule_type", table_name="rate_limit_rules")
    op.drop_index("idx_rules_rule_type", table_name="rate_limit_rules")
    op.drop_index("idx_rules_tenant_id", table_name="rate_limit_rules")
    op.drop_table("rate_limit_rules")
    op.drop_table("tenants")
    rule_type_enum.drop(op.get_bind(), checkfirst=True)
