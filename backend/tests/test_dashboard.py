from datetime import date, timedelta

from backend.app.db.models.core_types import Criticality, PartStatus, TxnType
from backend.app.schemas.purchasing import PRLineCreate
from backend.app.schemas.schedule import ScheduleCreate, ScheduleLineCreate
from backend.app.schemas.stock_txn import StockTxnCreate, StockTxnLineCreate
from backend.services import dashboard, ledger, procurement, schedules


def test_empty_database(db_session):
    s = dashboard.summary(db_session, today=date(2026, 3, 10))

    assert s.total_items == 0
    assert s.movements_7d == 0
    assert s.criticality_mix == {"High": 0, "Medium": 0, "Low": 0}
    assert s.txn_type_mix == {"ISSUE": 0, "RETURN": 0, "RECEIVE": 0, "ADJUSTMENT": 0}


def test_summary_counts(db_session, admin, storekeeper, make_item, make_supplier):
    today = date(2026, 3, 10)
    supplier = make_supplier()
    zero = make_item("Zero", qty=0, building="Block A", criticality=Criticality.high)
    low = make_item("Low", qty=2, min_stock=5, building="Block B", status=PartStatus.installed)
    make_item("Fine", qty=50, building="Block B", status=PartStatus.faulty)

    ledger.apply_transaction(
        db_session,
        storekeeper,
        StockTxnCreate(txn_type=TxnType.issue, lines=[StockTxnLineCreate(inventory_id=low.id, qty=1)]),
    )

    open_pr = procurement.create_pr(db_session, storekeeper, [PRLineCreate(inventory_id=zero.id, requested_qty=5)])
    converted = procurement.create_pr(
        db_session,
        storekeeper,
        [PRLineCreate(inventory_id=low.id, requested_qty=5, suggested_supplier_id=supplier.id)],
    )
    procurement.convert_to_po(db_session, storekeeper, converted.id)

    for offset in (-1, 2, 10):
        schedules.create_schedule(
            db_session,
            storekeeper,
            ScheduleCreate(
                scheduled_date=today + timedelta(days=offset),
                supplier_id=supplier.id,
                lines=[ScheduleLineCreate(inventory_id=zero.id, qty=1)],
            ),
        )

    s = dashboard.summary(db_session, today=today)

    assert s.total_items == 3
    assert s.low_stock_count == 2
    assert s.zero_stock_count == 1
    assert s.open_prs == 1
    assert open_pr.pr_no == "PR-000001"
    assert s.pending_pos == 1
    assert s.schedules_delayed == 1
    assert s.schedules_due_soon == 1
    assert s.serviceable_items == 2
    assert s.active_buildings == 2
    assert s.movements_7d == 1
    assert s.criticality_mix == {"High": 1, "Medium": 2, "Low": 0}
    assert s.txn_type_mix["ISSUE"] == 1
