from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.api.deps import get_actor, get_db
from backend.app.db.models.core_types import ScheduleDisplayState
from backend.app.db.models.models_v1 import OrderSchedule
from backend.app.schemas.purchasing import ReceiptBatch
from backend.app.schemas.schedule import Reschedule, ScheduleCreate, ScheduleLineRead, ScheduleRead
from backend.services import schedules
from backend.services.auth import Actor

router = APIRouter(prefix="/order-schedules")


def _to_read(s: OrderSchedule, state: ScheduleDisplayState | None = None) -> ScheduleRead:
    return ScheduleRead(
        id=s.id,
        scheduled_date=s.scheduled_date,
        created_by=s.created_by,
        supplier_id=s.supplier_id,
        remark=s.remark,
        status=s.status,
        display_state=state or schedules.display_state(s),
        outstanding_qty=schedules.outstanding_qty(s),
        created_at=s.created_at,
        last_updated=s.last_updated,
        lines=[ScheduleLineRead.model_validate(ln) for ln in s.lines],
    )


@router.get("", response_model=list[ScheduleRead])
def list_schedules(
    state: ScheduleDisplayState | None = None,
    today: date | None = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    return [_to_read(s, st) for s, st in schedules.list_schedules(db, today=today, state=state)]


@router.get("/{schedule_id}", response_model=ScheduleRead)
def get_schedule(schedule_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return _to_read(schedules.get_schedule(db, schedule_id))


@router.post("", response_model=ScheduleRead, status_code=201)
def create_schedule(payload: ScheduleCreate, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    s = schedules.create_schedule(db, actor, payload)
    db.commit()
    db.refresh(s)
    return _to_read(s)


@router.post("/{schedule_id}/reschedule", response_model=ScheduleRead)
def reschedule(
    schedule_id: int,
    payload: Reschedule,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    s = schedules.reschedule(db, actor, schedule_id, payload.scheduled_date)
    db.commit()
    return _to_read(s)


@router.post("/{schedule_id}/cancel", response_model=ScheduleRead)
def cancel(schedule_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    s = schedules.cancel(db, actor, schedule_id)
    db.commit()
    return _to_read(s)


@router.post("/{schedule_id}/complete", response_model=ScheduleRead)
def complete(schedule_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    s = schedules.complete(db, actor, schedule_id)
    db.commit()
    return _to_read(s)


@router.post("/{schedule_id}/receive", response_model=ScheduleRead)
def receive(
    schedule_id: int,
    payload: ReceiptBatch,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    s = schedules.receive_schedule(db, actor, schedule_id, payload.receipts, remark=payload.remark)
    db.commit()
    return _to_read(s)


@router.delete("/{schedule_id}", status_code=204)
def delete_schedule(schedule_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    schedules.delete_schedule(db, actor, schedule_id)
    db.commit()
