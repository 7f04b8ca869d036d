from __future__ import annotations

import enum
from datetime import datetime, date, timezone
from decimal import Decimal

from sqlalchemy import (
    String,
    Integer,
    BigInteger,
    DateTime,
    Date,
    Boolean,
    ForeignKey,
    Numeric,
    Text,
    Enum,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.app.db.base import Base
from backend.app.db.models.core_types import (
    PartStatus,
    Criticality,
    TxnType,
    PRStatus,
    POStatus,
    ScheduleStatus,
)
from backend.services import reorder


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum(enum_cls: type[enum.Enum], name: str) -> Enum:
    # store the display values ("ISSUE", "Spare"), not the member names
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )


# ---------- MASTER DATA ----------
class Supplier(Base):
    __tablename__ = "suppliers"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    phone: Mapped[str] = mapped_column(String(64), default="", nullable=False)
    address: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    remark: Mapped[str] = mapped_column(Text, default="", nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class InventoryItem(Base):
    __tablename__ = "inventory_items"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)

    # location
    building: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    room: Mapped[str] = mapped_column(String(128), default="", nullable=False)
    location_bin: Mapped[str] = mapped_column(String(64), default="", nullable=False)

    # classification
    tag_no: Mapped[str] = mapped_column(String(64), default="", nullable=False)
    installation_type: Mapped[str] = mapped_column(String(128), default="", nullable=False)
    system_type: Mapped[str] = mapped_column(String(128), default="", nullable=False)
    brand: Mapped[str] = mapped_column(String(128), default="", nullable=False)
    equipment_model: Mapped[str] = mapped_column(String(128), default="", nullable=False)
    part_category: Mapped[str] = mapped_column(String(128), default="", nullable=False, index=True)
    part_name: Mapped[str] = mapped_column(String(255), nullable=False)
    part_model: Mapped[str] = mapped_column(String(128), default="", nullable=False)
    unit: Mapped[str] = mapped_column(String(32), default="pcs", nullable=False)
    status: Mapped[PartStatus] = mapped_column(
        _enum(PartStatus, "part_status"), default=PartStatus.spare, nullable=False
    )
    criticality: Mapped[Criticality | None] = mapped_column(_enum(Criticality, "criticality"))
    specs: Mapped[str] = mapped_column(Text, default="", nullable=False)
    warranty_expiry: Mapped[date | None] = mapped_column(Date)
    remark: Mapped[str] = mapped_column(Text, default="", nullable=False)

    # stock control
    min_stock: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    reorder_point: Mapped[int | None] = mapped_column(Integer)
    reorder_qty: Mapped[int | None] = mapped_column(Integer)
    preferred_supplier_id: Mapped[int | None] = mapped_column(
        ForeignKey("suppliers.id", ondelete="SET NULL")
    )
    quantity_on_hand: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    # carried for clients, not enforced
    row_version: Mapped[str] = mapped_column(String(32), default="1", nullable=False)

    preferred_supplier: Mapped[Supplier | None] = relationship()

    @property
    def effective_reorder_point(self) -> int:
        return reorder.effective_reorder_point(self)

    @property
    def is_low_stock(self) -> bool:
        return reorder.is_low_stock(self)

    __table_args__ = (
        CheckConstraint("quantity_on_hand >= 0", name="ck_inventory_on_hand_nonneg"),
        CheckConstraint("min_stock >= 0", name="ck_inventory_min_stock_nonneg"),
    )


# ---------- LEDGER ----------
class StockTxn(Base):
    __tablename__ = "stock_txns"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    txn_type: Mapped[TxnType] = mapped_column(_enum(TxnType, "txn_type"), nullable=False)
    txn_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    performed_by: Mapped[str] = mapped_column(String(200), nullable=False)
    counterparty: Mapped[str] = mapped_column(String(200), default="Internal", nullable=False)
    reference: Mapped[str] = mapped_column(String(200), default="N/A", nullable=False)
    remark: Mapped[str] = mapped_column(Text, default="", nullable=False)
    reason_code: Mapped[str | None] = mapped_column(String(64))
    source_location: Mapped[str | None] = mapped_column(String(128))
    destination_location: Mapped[str | None] = mapped_column(String(128))
    document_type: Mapped[str | None] = mapped_column(String(64))
    document_no: Mapped[str | None] = mapped_column(String(64))
    approved_by: Mapped[str | None] = mapped_column(String(200))

    lines: Mapped[list["StockTxnLine"]] = relationship(
        back_populates="txn",
        cascade="all, delete-orphan",
        order_by="StockTxnLine.id",
    )

    __table_args__ = (Index("ix_stock_txns_type_time", "txn_type", "txn_time"),)


class StockTxnLine(Base):
    __tablename__ = "stock_txn_lines"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    txn_id: Mapped[int] = mapped_column(
        ForeignKey("stock_txns.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # history survives deletion of the part
    inventory_id: Mapped[int | None] = mapped_column(
        ForeignKey("inventory_items.id", ondelete="SET NULL"), index=True
    )
    part_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    qty: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_cost: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))
    before_qty: Mapped[int] = mapped_column(Integer, nullable=False)
    after_qty: Mapped[int] = mapped_column(Integer, nullable=False)

    txn: Mapped[StockTxn] = relationship(back_populates="lines")

    __table_args__ = (CheckConstraint("qty > 0", name="ck_stock_txn_line_qty_pos"),)


# ---------- PROCUREMENT ----------
class PurchaseRequest(Base):
    __tablename__ = "purchase_requests"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    pr_no: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    created_by: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[PRStatus] = mapped_column(
        _enum(PRStatus, "pr_status"), default=PRStatus.draft, nullable=False
    )
    approved_by: Mapped[str | None] = mapped_column(String(200))
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    lines: Mapped[list["PurchaseRequestLine"]] = relationship(
        back_populates="pr",
        cascade="all, delete-orphan",
        order_by="PurchaseRequestLine.id",
    )
    purchase_orders: Mapped[list["PurchaseOrder"]] = relationship(back_populates="pr")


class PurchaseRequestLine(Base):
    __tablename__ = "purchase_request_lines"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    pr_id: Mapped[int] = mapped_column(
        ForeignKey("purchase_requests.id", ondelete="CASCADE"), nullable=False, index=True
    )
    inventory_id: Mapped[int] = mapped_column(
        ForeignKey("inventory_items.id", ondelete="RESTRICT"), nullable=False
    )
    requested_qty: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)
    suggested_supplier_id: Mapped[int | None] = mapped_column(
        ForeignKey("suppliers.id", ondelete="SET NULL")
    )

    pr: Mapped[PurchaseRequest] = relationship(back_populates="lines")
    item: Mapped[InventoryItem] = relationship()

    @property
    def part_name(self) -> str | None:
        return self.item.part_name if self.item else None

    __table_args__ = (CheckConstraint("requested_qty > 0", name="ck_pr_line_qty_pos"),)


class PurchaseOrder(Base):
    __tablename__ = "purchase_orders"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    po_no: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    supplier_id: Mapped[int] = mapped_column(ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False)
    pr_id: Mapped[int | None] = mapped_column(ForeignKey("purchase_requests.id", ondelete="SET NULL"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    created_by: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[POStatus] = mapped_column(
        _enum(POStatus, "po_status"), default=POStatus.draft, nullable=False
    )

    supplier: Mapped[Supplier] = relationship()
    pr: Mapped[PurchaseRequest | None] = relationship(back_populates="purchase_orders")
    lines: Mapped[list["PurchaseOrderLine"]] = relationship(
        back_populates="po",
        cascade="all, delete-orphan",
        order_by="PurchaseOrderLine.id",
    )

    @property
    def supplier_name(self) -> str | None:
        return self.supplier.name if self.supplier else None


class PurchaseOrderLine(Base):
    __tablename__ = "purchase_order_lines"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    po_id: Mapped[int] = mapped_column(
        ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    inventory_id: Mapped[int] = mapped_column(
        ForeignKey("inventory_items.id", ondelete="RESTRICT"), nullable=False
    )
    ordered_qty: Mapped[int] = mapped_column(Integer, nullable=False)
    received_qty: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    unit_cost: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))
    eta: Mapped[date | None] = mapped_column(Date)

    po: Mapped[PurchaseOrder] = relationship(back_populates="lines")
    item: Mapped[InventoryItem] = relationship()

    @property
    def part_name(self) -> str | None:
        return self.item.part_name if self.item else None

    @property
    def outstanding_qty(self) -> int:
        return self.ordered_qty - self.received_qty

    __table_args__ = (
        CheckConstraint("ordered_qty > 0", name="ck_po_line_qty_pos"),
        CheckConstraint(
            "received_qty >= 0 AND received_qty <= ordered_qty",
            name="ck_po_line_received_in_range",
        ),
        CheckConstraint("unit_cost IS NULL OR unit_cost >= 0", name="ck_po_line_unit_cost_nonneg"),
    )


# ---------- ORDER SCHEDULES ----------
class OrderSchedule(Base):
    __tablename__ = "order_schedules"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    scheduled_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    created_by: Mapped[str] = mapped_column(String(200), nullable=False)
    supplier_id: Mapped[int] = mapped_column(ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False)
    remark: Mapped[str] = mapped_column(Text, default="", nullable=False)
    status: Mapped[ScheduleStatus] = mapped_column(
        _enum(ScheduleStatus, "schedule_status"), default=ScheduleStatus.scheduled, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    supplier: Mapped[Supplier] = relationship()
    lines: Mapped[list["OrderScheduleLine"]] = relationship(
        back_populates="schedule",
        cascade="all, delete-orphan",
        order_by="OrderScheduleLine.id",
    )


class OrderScheduleLine(Base):
    __tablename__ = "order_schedule_lines"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    schedule_id: Mapped[int] = mapped_column(
        ForeignKey("order_schedules.id", ondelete="CASCADE"), nullable=False, index=True
    )
    inventory_id: Mapped[int] = mapped_column(
        ForeignKey("inventory_items.id", ondelete="RESTRICT"), nullable=False
    )
    qty: Mapped[int] = mapped_column(Integer, nullable=False)
    received_qty: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    schedule: Mapped[OrderSchedule] = relationship(back_populates="lines")
    item: Mapped[InventoryItem] = relationship()

    @property
    def part_name(self) -> str | None:
        return self.item.part_name if self.item else None

    @property
    def outstanding_qty(self) -> int:
        return self.qty - self.received_qty

    __table_args__ = (
        CheckConstraint("qty > 0", name="ck_schedule_line_qty_pos"),
        CheckConstraint(
            "received_qty >= 0 AND received_qty <= qty",
            name="ck_schedule_line_received_in_range",
        ),
    )
