from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from backend.app.db.models.core_types import Criticality, PartStatus


class InventoryBase(BaseModel):
    building: str = Field(min_length=1, max_length=128)
    room: str = Field(default="", max_length=128)
    location_bin: str = Field(default="", max_length=64)
    tag_no: str = Field(default="", max_length=64)
    installation_type: str = Field(default="", max_length=128)
    system_type: str = Field(default="", max_length=128)
    brand: str = Field(default="", max_length=128)
    equipment_model: str = Field(default="", max_length=128)
    part_category: str = Field(default="", max_length=128)
    part_name: str = Field(min_length=1, max_length=255)
    part_model: str = Field(default="", max_length=128)
    unit: str = Field(default="pcs", min_length=1, max_length=32)
    status: PartStatus = PartStatus.spare
    criticality: Criticality | None = None
    specs: str = ""
    warranty_expiry: date | None = None
    remark: str = ""
    min_stock: int = Field(default=1, ge=0)
    reorder_point: int | None = Field(default=None, ge=0)
    reorder_qty: int | None = Field(default=None, ge=0)
    preferred_supplier_id: int | None = None


class InventoryCreate(InventoryBase):
    # opening balance only; afterwards quantities move through the ledger
    quantity_on_hand: int = Field(default=0, ge=0)


class InventoryUpdate(BaseModel):
    """Metadata edit. Fields left out of the request are not touched."""

    building: str | None = Field(default=None, min_length=1, max_length=128)
    room: str | None = Field(default=None, max_length=128)
    location_bin: str | None = Field(default=None, max_length=64)
    tag_no: str | None = Field(default=None, max_length=64)
    installation_type: str | None = Field(default=None, max_length=128)
    system_type: str | None = Field(default=None, max_length=128)
    brand: str | None = Field(default=None, max_length=128)
    equipment_model: str | None = Field(default=None, max_length=128)
    part_category: str | None = Field(default=None, max_length=128)
    part_name: str | None = Field(default=None, min_length=1, max_length=255)
    part_model: str | None = Field(default=None, max_length=128)
    unit: str | None = Field(default=None, min_length=1, max_length=32)
    status: PartStatus | None = None
    criticality: Criticality | None = None
    specs: str | None = None
    warranty_expiry: date | None = None
    remark: str | None = None
    min_stock: int | None = Field(default=None, ge=0)
    reorder_point: int | None = Field(default=None, ge=0)
    reorder_qty: int | None = Field(default=None, ge=0)
    preferred_supplier_id: int | None = None

    @field_validator(
        "building", "room", "location_bin", "tag_no", "installation_type", "system_type", "brand",
        "equipment_model", "part_category", "part_name", "part_model", "unit", "status", "specs",
        "remark", "min_stock",
    )
    @classmethod
    def _not_null(cls, value, info):
        # omit the field to leave it unchanged; null would blank a NOT NULL column
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


InventoryBulkField = Literal["status", "min_stock", "reorder_point", "preferred_supplier_id", "criticality"]
# enabled with no value would blank a NOT NULL column
BULK_REQUIRED_FIELDS = {"status", "min_stock"}


class InventoryBulkPatch(BaseModel):
    ids: list[int] = Field(min_length=1)
    fields: set[InventoryBulkField] = Field(default_factory=set)
    status: PartStatus | None = None
    min_stock: int | None = None
    reorder_point: int | None = Field(default=None, ge=0)
    preferred_supplier_id: int | None = None
    criticality: Criticality | None = None

    @model_validator(mode="after")
    def _enabled_fields_have_values(self):
        missing = sorted(name for name in self.fields & BULK_REQUIRED_FIELDS if getattr(self, name) is None)
        if missing:
            raise ValueError(f"no value given for enabled field(s): {', '.join(missing)}")
        return self


class InventoryFilter(BaseModel):
    search: str | None = None
    building: str | None = None
    category: str | None = None
    status: str | None = None


class InventoryRead(InventoryBase):
    id: int
    quantity_on_hand: int
    last_updated: datetime
    row_version: str
    effective_reorder_point: int
    is_low_stock: bool

    class Config:
        from_attributes = True


class BulkIds(BaseModel):
    ids: list[int] = Field(min_length=1)


class BulkFailure(BaseModel):
    id: int
    error: str


class BulkResultRead(BaseModel):
    succeeded: list[int] = Field(default_factory=list)
    failed: list[BulkFailure] = Field(default_factory=list)

    class Config:
        from_attributes = True
