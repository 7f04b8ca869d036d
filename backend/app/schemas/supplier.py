from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator


class SupplierCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(default="", max_length=255)
    phone: str = Field(default="", max_length=64)
    address: str = Field(default="", max_length=500)
    remark: str = ""
    active: bool = True


class SupplierUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=64)
    address: str | None = Field(default=None, max_length=500)
    remark: str | None = None
    active: bool | None = None


SupplierBulkField = Literal["active", "remark"]


class SupplierBulkPatch(BaseModel):
    """Only the names listed in ``fields`` are written, whatever else is sent."""

    ids: list[int] = Field(min_length=1)
    fields: set[SupplierBulkField] = Field(default_factory=set)
    active: bool | None = None
    remark: str | None = None

    @model_validator(mode="after")
    def _enabled_fields_have_values(self):
        missing = sorted(name for name in self.fields if getattr(self, name) is None)
        if missing:
            raise ValueError(f"no value given for enabled field(s): {', '.join(missing)}")
        return self


class SupplierRead(BaseModel):
    id: int
    name: str
    email: str
    phone: str
    address: str
    remark: str
    active: bool

    class Config:
        from_attributes = True
