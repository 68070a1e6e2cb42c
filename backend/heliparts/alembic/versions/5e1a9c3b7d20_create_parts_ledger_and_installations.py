"""Create users, helicopters, parts, stock ledger, alerts and installations.

Revision ID: 5e1a9c3b7d20
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision = "5e1a9c3b7d20"
down_revision = None
branch_labels = None
depends_on = None


def _table_exists(table_name: str) -> bool:
    bind = op.get_bind()
    insp = inspect(bind)
    return bool(insp.has_table(table_name))


def upgrade() -> None:
    account_role_enum = sa.Enum("ADMIN", "MECHANIC", "USER", "VIEW_ONLY", name="account_role_enum")

    # -------------------------
    # users
    # -------------------------
    if not _table_exists("users"):
        op.create_table(
            "users",
            sa.Column("id", sa.String(length=36), primary_key=True),
            sa.Column("username", sa.String(length=64), nullable=False),
            sa.Column("email", sa.String(length=255), nullable=False),
            sa.Column("full_name", sa.String(length=255), nullable=True),
            sa.Column("role", account_role_enum, nullable=False),
            sa.Column("is_active", sa.Boolean(), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index("ix_users_username", "users", ["username"], unique=True)
        op.create_index("ix_users_email", "users", ["email"], unique=True)
        op.create_index("ix_users_role", "users", ["role"])
        op.create_index("ix_users_is_active", "users", ["is_active"])
        op.create_index("idx_users_role_active", "users", ["role", "is_active"])

    # -------------------------
    # helicopters
    # -------------------------
    if not _table_exists("helicopters"):
        op.create_table(
            "helicopters",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("tail_number", sa.String(length=20), nullable=False),
            sa.Column("model", sa.String(length=64), nullable=True),
            sa.Column("manufacturer", sa.String(length=64), nullable=True),
            sa.Column("year", sa.Integer(), nullable=True),
            sa.Column("status", sa.String(length=20), nullable=False),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index("ix_helicopters_id", "helicopters", ["id"])
        op.create_index("ix_helicopters_tail_number", "helicopters", ["tail_number"], unique=True)
        op.create_index("ix_helicopters_status", "helicopters", ["status"])

    # -------------------------
    # parts
    # -------------------------
    if not _table_exists("parts"):
        op.create_table(
            "parts",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("part_number", sa.String(length=64), nullable=False),
            sa.Column("description", sa.String(length=255), nullable=True),
            sa.Column("manufacturer", sa.String(length=128), nullable=True),
            sa.Column("category", sa.String(length=64), nullable=True),
            sa.Column("location", sa.String(length=64), nullable=True),
            sa.Column("unit_price", sa.Float(), nullable=True),
            sa.Column("is_life_limited", sa.Boolean(), nullable=False),
            sa.Column("quantity_in_stock", sa.Integer(), nullable=False),
            sa.Column("minimum_quantity", sa.Integer(), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
            sa.CheckConstraint("quantity_in_stock >= 0", name="ck_parts_quantity_in_stock_nonneg"),
            sa.CheckConstraint("minimum_quantity >= 0", name="ck_parts_minimum_quantity_nonneg"),
        )
        op.create_index("ix_parts_id", "parts", ["id"])
        op.create_index("ix_parts_part_number", "parts", ["part_number"], unique=True)
        op.create_index("ix_parts_category", "parts", ["category"])
        op.create_index("ix_parts_stock_minimum", "parts", ["quantity_in_stock", "minimum_quantity"])

    # -------------------------
    # inventory_transactions (append-only ledger)
    # -------------------------
    if not _table_exists("inventory_transactions"):
        op.create_table(
            "inventory_transactions",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("part_id", sa.Integer(), sa.ForeignKey("parts.id", ondelete="RESTRICT"), nullable=False),
            sa.Column("transaction_type", sa.String(length=7), nullable=False),
            sa.Column("quantity_change", sa.Integer(), nullable=False),
            sa.Column("quantity_after", sa.Integer(), nullable=False),
            sa.Column("reference_type", sa.String(length=32), nullable=True),
            sa.Column("reference_id", sa.Integer(), nullable=True),
            sa.Column(
                "performed_by_user_id",
                sa.String(length=36),
                sa.ForeignKey("users.id", ondelete="SET NULL"),
                nullable=True,
            ),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.CheckConstraint("quantity_change <> 0", name="ck_inventory_transactions_change_nonzero"),
            sa.CheckConstraint("quantity_after >= 0", name="ck_inventory_transactions_after_nonneg"),
        )
        op.create_index("ix_inventory_transactions_id", "inventory_transactions", ["id"])
        op.create_index("ix_inventory_transactions_part_id", "inventory_transactions", ["part_id"])
        op.create_index("ix_inventory_transactions_transaction_type", "inventory_transactions", ["transaction_type"])
        op.create_index(
            "ix_inventory_transactions_part_created", "inventory_transactions", ["part_id", "created_at"]
        )
        op.create_index(
            "ix_inventory_transactions_reference", "inventory_transactions", ["reference_type", "reference_id"]
        )

    # -------------------------
    # inventory_alerts
    # -------------------------
    if not _table_exists("inventory_alerts"):
        op.create_table(
            "inventory_alerts",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("part_id", sa.Integer(), sa.ForeignKey("parts.id", ondelete="CASCADE"), nullable=False),
            sa.Column("alert_type", sa.String(length=32), nullable=False),
            sa.Column("threshold_quantity", sa.Integer(), nullable=False),
            sa.Column("is_active", sa.Boolean(), nullable=False),
            sa.Column("email_notification", sa.Boolean(), nullable=False),
            sa.Column(
                "created_by_user_id",
                sa.String(length=36),
                sa.ForeignKey("users.id", ondelete="SET NULL"),
                nullable=True,
            ),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.CheckConstraint("threshold_quantity >= 0", name="ck_inventory_alerts_threshold_nonneg"),
        )
        op.create_index("ix_inventory_alerts_id", "inventory_alerts", ["id"])
        op.create_index("ix_inventory_alerts_part_id", "inventory_alerts", ["part_id"])
        op.create_index("ix_inventory_alerts_part_active", "inventory_alerts", ["part_id", "is_active"])

    # -------------------------
    # part_installations
    # -------------------------
    if not _table_exists("part_installations"):
        op.create_table(
            "part_installations",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("part_id", sa.Integer(), sa.ForeignKey("parts.id", ondelete="RESTRICT"), nullable=False),
            sa.Column(
                "helicopter_id",
                sa.Integer(),
                sa.ForeignKey("helicopters.id", ondelete="RESTRICT"),
                nullable=False,
            ),
            sa.Column("quantity_installed", sa.Integer(), nullable=False),
            sa.Column("status", sa.String(length=7), nullable=False),
            sa.Column(
                "installed_by_user_id",
                sa.String(length=36),
                sa.ForeignKey("users.id", ondelete="SET NULL"),
                nullable=True,
            ),
            sa.Column(
                "removed_by_user_id",
                sa.String(length=36),
                sa.ForeignKey("users.id", ondelete="SET NULL"),
                nullable=True,
            ),
            sa.Column("installation_date", sa.DateTime(timezone=True), nullable=False),
            sa.Column("removed_date", sa.DateTime(timezone=True), nullable=True),
            sa.Column("serial_number", sa.String(length=64), nullable=True),
            sa.Column("hours_at_installation", sa.Float(), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.CheckConstraint("quantity_installed > 0", name="ck_part_installations_quantity_positive"),
        )
        op.create_index("ix_part_installations_id", "part_installations", ["id"])
        op.create_index("ix_part_installations_part_id", "part_installations", ["part_id"])
        op.create_index("ix_part_installations_helicopter_id", "part_installations", ["helicopter_id"])
        op.create_index("ix_part_installations_status", "part_installations", ["status"])
        op.create_index(
            "ix_part_installations_helicopter_status", "part_installations", ["helicopter_id", "status"]
        )
        op.create_index("ix_part_installations_part_status", "part_installations", ["part_id", "status"])


def downgrade() -> None:
    # Children first; indexes go with their tables.
    for table_name in (
        "part_installations",
        "inventory_alerts",
        "inventory_transactions",
        "parts",
        "helicopters",
        "users",
    ):
        if _table_exists(table_name):
            op.drop_table(table_name)

    if op.get_bind().dialect.name == "postgresql":
        op.execute("DROP TYPE IF EXISTS account_role_enum")
