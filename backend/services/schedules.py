"""
Order schedules: planned, calendar-anchored orders outside the PR/PO flow.

Stored status: SCHEDULED -> COMPLETED | CANCELLED.
The display state shown to users is derived, never stored:

    Cancelled        status == CANCELLED
    Completed        status == COMPLETED or nothing outstanding
    Partial Receive  something received, something outstanding
    Delayed          scheduled_date < today
    Due Soon         today <= scheduled_date <= today + DUE_SOON_DAYS
    Scheduled        otherwise
"""
from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.db.models.core_types import ScheduleDisplayState, ScheduleStatus
from backend.app.db.models.models_v1 import InventoryItem, OrderSchedule, OrderScheduleLine
from backend.app.schemas.purchasing import Receipt
from backend.app.schemas.schedule import ScheduleCreate
from backend.app.utils.logger import setup_logger
from backend.services import ledger
from backend.services.auth import Actor, Capability, require_capability
from backend.services.errors import InvalidStateTransitionError, NotFoundError, OverReceiptError
from backend.services.procurement import allocate_receipt, normalize_receipts
from backend.services.suppliers import require_active_supplier

logger = setup_logger(__name__)

DUE_SOON_DAYS = 3


def outstanding_qty(schedule: OrderSchedule) -> int:
    return sum(ln.qty for ln in schedule.lines) - sum(ln.received_qty for ln in schedule.lines)


def received_qty(schedule: OrderSchedule) -> int:
    return sum(ln.received_qty for ln in schedule.lines)


def display_state(schedule: OrderSchedule, today: date | None = None) -> ScheduleDisplayState:
    today = today or date.today()

    if schedule.status == ScheduleStatus.cancelled:
        return ScheduleDisplayState.cancelled
    outstanding = outstanding_qty(schedule)
    if schedule.status == ScheduleStatus.completed or outstanding == 0:
        return ScheduleDisplayState.completed
    if received_qty(schedule) > 0:
        return ScheduleDisplayState.partial_receive
    if schedule.scheduled_date < today:
        return ScheduleDisplayState.delayed
    if schedule.scheduled_date <= today + timedelta(days=DUE_SOON_DAYS):
        return ScheduleDisplayState.due_soon
    return ScheduleDisplayState.scheduled


def get_schedule(db: Session, schedule_id: int) -> OrderSchedule:
    schedule = db.get(OrderSchedule, schedule_id)
    if not schedule:
        raise NotFoundError("Order schedule", schedule_id)
    return schedule


def list_schedules(
    db: Session,
    today: date | None = None,
    state: ScheduleDisplayState | None = None,
) -> list[tuple[OrderSchedule, ScheduleDisplayState]]:
    """Schedules by date, each paired with its display state for ``today``."""
    today = today or date.today()
    rows = db.execute(
        select(OrderSchedule).order_by(OrderSchedule.scheduled_date, OrderSchedule.id)
    ).scalars().all()

    result = [(s, display_state(s, today)) for s in rows]
    if state is not None:
        result = [(s, st) for s, st in result if st == state]
    return result


def create_schedule(db: Session, actor: Actor, payload: ScheduleCreate) -> OrderSchedule:
    require_capability(actor, Capability.edit, "order schedules")
    require_active_supplier(db, payload.supplier_id)
    for ln in payload.lines:
        if not db.get(InventoryItem, ln.inventory_id):
            raise NotFoundError("Inventory item", ln.inventory_id)

    schedule = OrderSchedule(
        scheduled_date=payload.scheduled_date,
        created_by=actor.name,
        supplier_id=payload.supplier_id,
        remark=payload.remark,
        status=ScheduleStatus.scheduled,
    )
    schedule.lines = [
        OrderScheduleLine(inventory_id=ln.inventory_id, qty=ln.qty, received_qty=0)
        for ln in payload.lines
    ]
    db.add(schedule)
    db.flush()
    logger.info(f"Order schedule #{schedule.id} for {schedule.scheduled_date} created by {actor.name}")
    return schedule


def _require_scheduled(schedule: OrderSchedule, action: str) -> None:
    if schedule.status != ScheduleStatus.scheduled:
        raise InvalidStateTransitionError(
            f"Order schedule #{schedule.id} is {schedule.status.value}; only SCHEDULED orders can be {action}"
        )


def reschedule(db: Session, actor: Actor, schedule_id: int, new_date: date) -> OrderSchedule:
    require_capability(actor, Capability.edit, "order schedules")
    schedule = get_schedule(db, schedule_id)
    _require_scheduled(schedule, "rescheduled")

    old_date = schedule.scheduled_date
    schedule.scheduled_date = new_date
    db.flush()
    logger.info(f"Order schedule #{schedule.id} moved {old_date} -> {new_date} by {actor.name}")
    return schedule


def _set_status(db: Session, actor: Actor, schedule_id: int, status: ScheduleStatus, action: str) -> OrderSchedule:
    require_capability(actor, Capability.edit, "order schedules")
    schedule = get_schedule(db, schedule_id)
    _require_scheduled(schedule, action)

    schedule.status = status
    db.flush()
    logger.info(f"Order schedule #{schedule.id} {status.value} by {actor.name}")
    return schedule


def cancel(db: Session, actor: Actor, schedule_id: int) -> OrderSchedule:
    return _set_status(db, actor, schedule_id, ScheduleStatus.cancelled, "cancelled")


def complete(db: Session, actor: Actor, schedule_id: int) -> OrderSchedule:
    return _set_status(db, actor, schedule_id, ScheduleStatus.completed, "completed")


def receive_schedule(
    db: Session,
    actor: Actor,
    schedule_id: int,
    receipts: Iterable[Receipt],
    remark: str = "",
) -> OrderSchedule:
    """
    Same checks as PO receiving, then additive stock update and a RECEIVE
    ledger entry. A fully received schedule becomes COMPLETED.
    """
    require_capability(actor, Capability.edit, "order schedules")
    schedule = get_schedule(db, schedule_id)
    _require_scheduled(schedule, "received")

    totals = normalize_receipts(receipts)

    plan = []
    for inv_id, (qty, unit_cost) in totals.items():
        item = db.get(InventoryItem, inv_id)
        part_name = item.part_name if item else str(inv_id)
        try:
            allocation = allocate_receipt(schedule.lines, inv_id, qty, part_name)
        except OverReceiptError as exc:
            logger.warning(f"Order schedule #{schedule.id} receipt rejected: {exc.message}")
            raise
        plan.extend((ln, take, unit_cost) for ln, take in allocation)

    for ln, take, _ in plan:
        ln.received_qty += take

    ledger.receive_stock(
        db,
        [(ln.item, take, unit_cost) for ln, take, unit_cost in plan],
        performed_by=actor.name,
        counterparty=schedule.supplier.name if schedule.supplier else "Supplier",
        reference=f"SCHEDULE-{schedule.id}",
        remark=remark or f"Received against order schedule for {schedule.scheduled_date}",
    )

    if outstanding_qty(schedule) == 0:
        schedule.status = ScheduleStatus.completed
    db.flush()
    logger.info(
        f"Order schedule #{schedule.id} received by {actor.name}: "
        + ", ".join(f"{ln.part_name} +{take}" for ln, take, _ in plan)
        + f" -> {schedule.status.value}"
    )
    return schedule


def delete_schedule(db: Session, actor: Actor, schedule_id: int) -> None:
    require_capability(actor, Capability.edit, "order schedules")
    schedule = get_schedule(db, schedule_id)
    db.delete(schedule)
    db.flush()
    logger.info(f"Order schedule #{schedule_id} deleted by {actor.name}")
