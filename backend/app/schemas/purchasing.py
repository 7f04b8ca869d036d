from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from backend.app.db.models.core_types import POStatus, PRStatus
from backend.services.reorder import Severity


class Receipt(BaseModel):
    inventory_id: int
    qty_received: int = Field(ge=0)
    unit_cost: Decimal | None = Field(default=None, ge=0)


class ReceiptBatch(BaseModel):
    receipts: list[Receipt] = Field(default_factory=list)
    remark: str = ""


# ---------- PR ----------
class PRLineCreate(BaseModel):
    inventory_id: int
    requested_qty: int = Field(gt=0)
    notes: str | None = None
    suggested_supplier_id: int | None = None


class PRCreate(BaseModel):
    created_by: str | None = Field(default=None, max_length=200)
    lines: list[PRLineCreate] = Field(min_length=1)


class PRFromSuggestions(BaseModel):
    created_by: str | None = Field(default=None, max_length=200)
    inventory_ids: list[int] = Field(min_length=1)


class PRLineRead(BaseModel):
    inventory_id: int
    part_name: str | None = None
    requested_qty: int
    notes: str | None
    suggested_supplier_id: int | None

    class Config:
        from_attributes = True


class PRRead(BaseModel):
    id: int
    pr_no: str
    created_at: datetime
    created_by: str
    status: PRStatus
    approved_by: str | None
    approved_at: datetime | None
    lines: list[PRLineRead]

    class Config:
        from_attributes = True


# ---------- PO ----------
class ConvertToPO(BaseModel):
    fallback_supplier_id: int | None = None


class POLineRead(BaseModel):
    inventory_id: int
    part_name: str | None = None
    ordered_qty: int
    received_qty: int
    outstanding_qty: int
    unit_cost: Decimal | None
    eta: date | None

    class Config:
        from_attributes = True


class PORead(BaseModel):
    id: int
    po_no: str
    supplier_id: int
    supplier_name: str | None = None
    pr_id: int | None
    created_at: datetime
    created_by: str
    status: POStatus
    lines: list[POLineRead]

    class Config:
        from_attributes = True


# ---------- SUGGESTIONS ----------
class ReorderSuggestionRead(BaseModel):
    inventory_id: int
    part_name: str
    building: str
    quantity_on_hand: int
    reorder_point: int
    suggested_qty: int
    preferred_supplier_id: int | None
    severity: Severity

    class Config:
        from_attributes = True


class SuggestionGroupRead(BaseModel):
    part_name: str
    total_suggested_qty: int
    suggestions: list[ReorderSuggestionRead]

    class Config:
        from_attributes = True
