from __future__ import annotations

from collections import Counter
from datetime import date, timedelta

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from backend.app.db.models.core_types import (
    Criticality,
    PartStatus,
    POStatus,
    PRStatus,
    ScheduleDisplayState,
    TxnType,
)
from backend.app.db.models.models_v1 import (
    InventoryItem,
    PurchaseOrder,
    PurchaseRequest,
    StockTxn,
    utcnow,
)
from backend.app.schemas.dashboard import DashboardSummary
from backend.services import reorder
from backend.services.schedules import list_schedules

MOVEMENT_WINDOW_DAYS = 7


def _count(db: Session, stmt) -> int:
    return db.execute(stmt).scalar_one() or 0


def summary(db: Session, today: date | None = None) -> DashboardSummary:
    """Headline numbers for the home screen. Read-only."""
    today = today or date.today()
    items = db.execute(select(InventoryItem)).scalars().all()

    open_prs = _count(
        db,
        select(func.count(PurchaseRequest.id)).where(
            PurchaseRequest.status.in_([PRStatus.draft, PRStatus.submitted])
        ),
    )
    pending_pos = _count(
        db,
        select(func.count(PurchaseOrder.id)).where(
            PurchaseOrder.status.not_in([POStatus.closed, POStatus.cancelled])
        ),
    )

    states = Counter(state for _, state in list_schedules(db, today=today))

    # compared in SQL so naive / aware storage of txn_time does not matter
    cutoff = utcnow() - timedelta(days=MOVEMENT_WINDOW_DAYS)
    movements_7d = _count(db, select(func.count(StockTxn.id)).where(StockTxn.txn_time >= cutoff))

    txn_type_mix = {t.value: 0 for t in TxnType}
    for txn_type, n in db.execute(select(StockTxn.txn_type, func.count(StockTxn.id)).group_by(StockTxn.txn_type)):
        txn_type_mix[txn_type.value] = n

    criticality_mix = {c.value: 0 for c in Criticality}
    for item in items:
        criticality_mix[(item.criticality or Criticality.medium).value] += 1

    return DashboardSummary(
        total_items=len(items),
        low_stock_count=len(reorder.low_stock_items(items)),
        zero_stock_count=len(reorder.zero_stock_items(items)),
        open_prs=open_prs,
        pending_pos=pending_pos,
        schedules_due_soon=states[ScheduleDisplayState.due_soon],
        schedules_delayed=states[ScheduleDisplayState.delayed],
        serviceable_items=sum(1 for i in items if i.status in (PartStatus.spare, PartStatus.installed)),
        active_buildings=len({i.building for i in items if i.building}),
        movements_7d=movements_7d,
        criticality_mix=criticality_mix,
        txn_type_mix=txn_type_mix,
    )
