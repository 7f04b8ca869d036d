from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field

from backend.app.db.models.core_types import ScheduleDisplayState, ScheduleStatus


class ScheduleLineCreate(BaseModel):
    inventory_id: int
    qty: int = Field(gt=0)


class ScheduleCreate(BaseModel):
    scheduled_date: date
    supplier_id: int
    remark: str = ""
    lines: list[ScheduleLineCreate] = Field(min_length=1)


class Reschedule(BaseModel):
    scheduled_date: date


class ScheduleLineRead(BaseModel):
    inventory_id: int
    part_name: str | None = None
    qty: int
    received_qty: int

    class Config:
        from_attributes = True


class ScheduleRead(BaseModel):
    id: int
    scheduled_date: date
    created_by: str
    supplier_id: int
    remark: str
    status: ScheduleStatus
    display_state: ScheduleDisplayState
    outstanding_qty: int
    created_at: datetime
    last_updated: datetime
    lines: list[ScheduleLineRead]
