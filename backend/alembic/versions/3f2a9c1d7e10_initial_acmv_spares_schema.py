"""initial acmv spares schema

Revision ID: 3f2a9c1d7e10
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f2a9c1d7e10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PK = sa.BigInteger().with_variant(sa.Integer(), "sqlite")

PART_STATUS = sa.Enum("Spare", "Installed", "Faulty", "Obsolete", name="part_status")
CRITICALITY = sa.Enum("High", "Medium", "Low", name="criticality")
TXN_TYPE = sa.Enum("ISSUE", "RETURN", "RECEIVE", "ADJUSTMENT", name="txn_type")
PR_STATUS = sa.Enum("DRAFT", "SUBMITTED", "APPROVED", "REJECTED", "CANCELLED", name="pr_status")
PO_STATUS = sa.Enum("DRAFT", "SENT", "PARTIALLY_RECEIVED", "CLOSED", "CANCELLED", name="po_status")
SCHEDULE_STATUS = sa.Enum("SCHEDULED", "COMPLETED", "CANCELLED", name="schedule_status")


def upgrade() -> None:
    # --- master data
    op.create_table(
        "suppliers",
        sa.Column("id", PK, primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=False, server_default=""),
        sa.Column("phone", sa.String(64), nullable=False, server_default=""),
        sa.Column("address", sa.String(500), nullable=False, server_default=""),
        sa.Column("remark", sa.Text(), nullable=False, server_default=""),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    op.create_table(
        "inventory_items",
        sa.Column("id", PK, primary_key=True),
        sa.Column("building", sa.String(128), nullable=False),
        sa.Column("room", sa.String(128), nullable=False, server_default=""),
        sa.Column("location_bin", sa.String(64), nullable=False, server_default=""),
        sa.Column("tag_no", sa.String(64), nullable=False, server_default=""),
        sa.Column("installation_type", sa.String(128), nullable=False, server_default=""),
        sa.Column("system_type", sa.String(128), nullable=False, server_default=""),
        sa.Column("brand", sa.String(128), nullable=False, server_default=""),
        sa.Column("equipment_model", sa.String(128), nullable=False, server_default=""),
        sa.Column("part_category", sa.String(128), nullable=False, server_default=""),
        sa.Column("part_name", sa.String(255), nullable=False),
        sa.Column("part_model", sa.String(128), nullable=False, server_default=""),
        sa.Column("unit", sa.String(32), nullable=False, server_default="pcs"),
        sa.Column("status", PART_STATUS, nullable=False, server_default="Spare"),
        sa.Column("criticality", CRITICALITY, nullable=True),
        sa.Column("specs", sa.Text(), nullable=False, server_default=""),
        sa.Column("warranty_expiry", sa.Date(), nullable=True),
        sa.Column("remark", sa.Text(), nullable=False, server_default=""),
        sa.Column("min_stock", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("reorder_point", sa.Integer(), nullable=True),
        sa.Column("reorder_qty", sa.Integer(), nullable=True),
        sa.Column(
            "preferred_supplier_id",
            PK,
            sa.ForeignKey("suppliers.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("quantity_on_hand", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("row_version", sa.String(32), nullable=False, server_default="1"),
        sa.CheckConstraint("quantity_on_hand >= 0", name="ck_inventory_on_hand_nonneg"),
        sa.CheckConstraint("min_stock >= 0", name="ck_inventory_min_stock_nonneg"),
    )
    op.create_index("ix_inventory_items_building", "inventory_items", ["building"])
    op.create_index("ix_inventory_items_part_category", "inventory_items", ["part_category"])

    # --- ledger
    op.create_table(
        "stock_txns",
        sa.Column("id", PK, primary_key=True),
        sa.Column("txn_type", TXN_TYPE, nullable=False),
        sa.Column("txn_time", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("performed_by", sa.String(200), nullable=False),
        sa.Column("counterparty", sa.String(200), nullable=False, server_default="Internal"),
        sa.Column("reference", sa.String(200), nullable=False, server_default="N/A"),
        sa.Column("remark", sa.Text(), nullable=False, server_default=""),
        sa.Column("reason_code", sa.String(64), nullable=True),
        sa.Column("source_location", sa.String(128), nullable=True),
        sa.Column("destination_location", sa.String(128), nullable=True),
        sa.Column("document_type", sa.String(64), nullable=True),
        sa.Column("document_no", sa.String(64), nullable=True),
        sa.Column("approved_by", sa.String(200), nullable=True),
    )
    op.create_index("ix_stock_txns_type_time", "stock_txns", ["txn_type", "txn_time"])

    op.create_table(
        "stock_txn_lines",
        sa.Column("id", PK, primary_key=True),
        sa.Column("txn_id", PK, sa.ForeignKey("stock_txns.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "inventory_id",
            PK,
            sa.ForeignKey("inventory_items.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("part_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("qty", sa.Integer(), nullable=False),
        sa.Column("unit_cost", sa.Numeric(14, 2), nullable=True),
        sa.Column("before_qty", sa.Integer(), nullable=False),
        sa.Column("after_qty", sa.Integer(), nullable=False),
        sa.CheckConstraint("qty > 0", name="ck_stock_txn_line_qty_pos"),
    )
    op.create_index("ix_stock_txn_lines_txn_id", "stock_txn_lines", ["txn_id"])
    op.create_index("ix_stock_txn_lines_inventory_id", "stock_txn_lines", ["inventory_id"])

    # --- procurement
    op.create_table(
        "purchase_requests",
        sa.Column("id", PK, primary_key=True),
        sa.Column("pr_no", sa.String(32), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("created_by", sa.String(200), nullable=False),
        sa.Column("status", PR_STATUS, nullable=False, server_default="DRAFT"),
        sa.Column("approved_by", sa.String(200), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "purchase_request_lines",
        sa.Column("id", PK, primary_key=True),
        sa.Column("pr_id", PK, sa.ForeignKey("purchase_requests.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "inventory_id",
            PK,
            sa.ForeignKey("inventory_items.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("requested_qty", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "suggested_supplier_id",
            PK,
            sa.ForeignKey("suppliers.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.CheckConstraint("requested_qty > 0", name="ck_pr_line_qty_pos"),
    )
    op.create_index("ix_purchase_request_lines_pr_id", "purchase_request_lines", ["pr_id"])

    op.create_table(
        "purchase_orders",
        sa.Column("id", PK, primary_key=True),
        sa.Column("po_no", sa.String(32), nullable=False, unique=True),
        sa.Column("supplier_id", PK, sa.ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("pr_id", PK, sa.ForeignKey("purchase_requests.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("created_by", sa.String(200), nullable=False),
        sa.Column("status", PO_STATUS, nullable=False, server_default="DRAFT"),
    )

    op.create_table(
        "purchase_order_lines",
        sa.Column("id", PK, primary_key=True),
        sa.Column("po_id", PK, sa.ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "inventory_id",
            PK,
            sa.ForeignKey("inventory_items.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("ordered_qty", sa.Integer(), nullable=False),
        sa.Column("received_qty", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("unit_cost", sa.Numeric(14, 2), nullable=True),
        sa.Column("eta", sa.Date(), nullable=True),
        sa.CheckConstraint("ordered_qty > 0", name="ck_po_line_qty_pos"),
        sa.CheckConstraint(
            "received_qty >= 0 AND received_qty <= ordered_qty",
            name="ck_po_line_received_in_range",
        ),
        sa.CheckConstraint("unit_cost IS NULL OR unit_cost >= 0", name="ck_po_line_unit_cost_nonneg"),
    )
    op.create_index("ix_purchase_order_lines_po_id", "purchase_order_lines", ["po_id"])

    # --- order schedules
    op.create_table(
        "order_schedules",
        sa.Column("id", PK, primary_key=True),
        sa.Column("scheduled_date", sa.Date(), nullable=False),
        sa.Column("created_by", sa.String(200), nullable=False),
        sa.Column("supplier_id", PK, sa.ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("remark", sa.Text(), nullable=False, server_default=""),
        sa.Column("status", SCHEDULE_STATUS, nullable=False, server_default="SCHEDULED"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_order_schedules_scheduled_date", "order_schedules", ["scheduled_date"])

    op.create_table(
        "order_schedule_lines",
        sa.Column("id", PK, primary_key=True),
        sa.Column(
            "schedule_id",
            PK,
            sa.ForeignKey("order_schedules.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "inventory_id",
            PK,
            sa.ForeignKey("inventory_items.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("qty", sa.Integer(), nullable=False),
        sa.Column("received_qty", sa.Integer(), nullable=False, server_default="0"),
        sa.CheckConstraint("qty > 0", name="ck_schedule_line_qty_pos"),
        sa.CheckConstraint(
            "received_qty >= 0 AND received_qty <= qty",
            name="ck_schedule_line_received_in_range",
        ),
    )
    op.create_index("ix_order_schedule_lines_schedule_id", "order_schedule_lines", ["schedule_id"])


def downgrade() -> None:
    op.drop_table("order_schedule_lines")
    op.drop_table("order_schedules")
    op.drop_table("purchase_order_lines")
    op.drop_table("purchase_orders")
    op.drop_table("purchase_request_lines")
    op.drop_table("purchase_requests")
    op.drop_table("stock_txn_lines")
    op.drop_table("stock_txns")
    op.drop_table("inventory_items")
    op.drop_table("suppliers")

    bind = op.get_bind()
    for enum_type in (SCHEDULE_STATUS, PO_STATUS, PR_STATUS, TXN_TYPE, CRITICALITY, PART_STATUS):
        enum_type.drop(bind, checkfirst=True)
