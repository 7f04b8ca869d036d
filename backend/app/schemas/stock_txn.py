from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from backend.app.db.models.core_types import TxnType


class StockTxnLineCreate(BaseModel):
    inventory_id: int
    qty: int = Field(gt=0)
    unit_cost: Decimal | None = Field(default=None, ge=0)


class StockTxnCreate(BaseModel):
    txn_type: TxnType
    txn_time: datetime | None = None
    counterparty: str = Field(default="Internal", max_length=200)
    reference: str = Field(default="N/A", max_length=200)
    remark: str = ""
    reason_code: str | None = Field(default=None, max_length=64)
    source_location: str | None = Field(default=None, max_length=128)
    destination_location: str | None = Field(default=None, max_length=128)
    document_type: str | None = Field(default=None, max_length=64)
    document_no: str | None = Field(default=None, max_length=64)
    approved_by: str | None = Field(default=None, max_length=200)
    lines: list[StockTxnLineCreate] = Field(min_length=1)


class StockTxnUpdate(BaseModel):
    """Edit of a committed transaction; unset fields keep their stored value."""

    txn_type: TxnType | None = None
    counterparty: str | None = Field(default=None, max_length=200)
    reference: str | None = Field(default=None, max_length=200)
    remark: str | None = None
    reason_code: str | None = Field(default=None, max_length=64)
    source_location: str | None = Field(default=None, max_length=128)
    destination_location: str | None = Field(default=None, max_length=128)
    document_type: str | None = Field(default=None, max_length=64)
    document_no: str | None = Field(default=None, max_length=64)
    approved_by: str | None = Field(default=None, max_length=200)
    lines: list[StockTxnLineCreate] | None = Field(default=None, min_length=1)

    @field_validator("txn_type", "counterparty", "reference", "remark")
    @classmethod
    def _not_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class StockTxnLineRead(BaseModel):
    inventory_id: int | None
    part_name: str
    qty: int
    unit_cost: Decimal | None
    before_qty: int
    after_qty: int

    class Config:
        from_attributes = True


class StockTxnRead(BaseModel):
    id: int
    txn_type: TxnType
    txn_time: datetime
    performed_by: str
    counterparty: str
    reference: str
    remark: str
    reason_code: str | None
    source_location: str | None
    destination_location: str | None
    document_type: str | None
    document_no: str | None
    approved_by: str | None
    lines: list[StockTxnLineRead]

    class Config:
        from_attributes = True
