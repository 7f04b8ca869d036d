from dataclasses import replace
from decimal import Decimal

import pytest
from sqlalchemy import select

from backend.app.db.models.core_types import POStatus, PRStatus, TxnType
from backend.app.db.models.models_v1 import StockTxn
from backend.app.schemas.purchasing import PRLineCreate, Receipt
from backend.services import procurement
from backend.services.errors import (
    AuthorizationError,
    EmptyReceiptError,
    InactiveSupplierError,
    InvalidStateTransitionError,
    NotFoundError,
    OverReceiptError,
)


@pytest.fixture
def supplier(make_supplier):
    return make_supplier("Cooling Systems Inc.")


def _pr(db, actor, item, qty, supplier_id=None):
    return procurement.create_pr(
        db, actor, [PRLineCreate(inventory_id=item.id, requested_qty=qty, suggested_supplier_id=supplier_id)]
    )


def test_reorder_to_closed_po_scenario(db_session, admin, storekeeper, make_item, supplier):
    """
    GIVEN un article qoh=2, reorder_point=10, fournisseur préféré actif
    WHEN suggestion -> PR -> approbation -> PO -> réception complète
    THEN PO CLOSED, stock 15, une transaction RECEIVE 2 -> 15
    """
    item = make_item("Chilled Water Sensor", qty=2, reorder_point=10, preferred_supplier_id=supplier.id)

    pr = procurement.create_pr_from_suggestions(db_session, storekeeper, [item.id])
    [pr_line] = pr.lines
    assert pr_line.requested_qty == 13
    assert pr_line.suggested_supplier_id == supplier.id
    assert pr.status == PRStatus.draft
    assert pr.pr_no == "PR-000001"

    procurement.approve_pr(db_session, admin, pr.id)
    assert pr.status == PRStatus.approved
    assert pr.approved_by == "alice"

    po = procurement.convert_to_po(db_session, storekeeper, pr.id)
    assert po.status == POStatus.draft
    assert po.supplier_id == supplier.id
    assert po.pr_id == pr.id
    assert po.po_no == "PO-000001"
    assert [(ln.ordered_qty, ln.received_qty, ln.unit_cost) for ln in po.lines] == [(13, 0, Decimal("0"))]

    procurement.receive_po(db_session, storekeeper, po.id, [Receipt(inventory_id=item.id, qty_received=13)])

    assert po.status == POStatus.closed
    assert item.quantity_on_hand == 15
    [txn] = db_session.execute(select(StockTxn)).scalars().all()
    assert txn.txn_type == TxnType.receive
    assert txn.reference == "PO-000001"
    assert txn.counterparty == "Cooling Systems Inc."
    assert [(ln.before_qty, ln.after_qty) for ln in txn.lines] == [(2, 15)]


def test_partial_receive_then_close(db_session, storekeeper, make_item, supplier):
    item = make_item(qty=0)
    pr = _pr(db_session, storekeeper, item, 10, supplier.id)
    po = procurement.convert_to_po(db_session, storekeeper, pr.id)

    procurement.receive_po(db_session, storekeeper, po.id, [Receipt(inventory_id=item.id, qty_received=4)])
    assert po.status == POStatus.partially_received
    assert po.lines[0].outstanding_qty == 6

    procurement.receive_po(
        db_session,
        storekeeper,
        po.id,
        [Receipt(inventory_id=item.id, qty_received=6, unit_cost=Decimal("12.50"))],
    )
    assert po.status == POStatus.closed
    assert po.lines[0].unit_cost == Decimal("12.50")
    assert item.quantity_on_hand == 10


def test_over_receipt_is_rejected_without_side_effects(db_session, storekeeper, make_item, supplier):
    item = make_item(qty=1)
    pr = _pr(db_session, storekeeper, item, 5, supplier.id)
    po = procurement.convert_to_po(db_session, storekeeper, pr.id)

    with pytest.raises(OverReceiptError) as exc:
        procurement.receive_po(db_session, storekeeper, po.id, [Receipt(inventory_id=item.id, qty_received=6)])

    assert exc.value.outstanding == 5
    assert po.lines[0].received_qty == 0
    assert item.quantity_on_hand == 1
    assert po.status == POStatus.draft
    assert db_session.execute(select(StockTxn)).scalars().all() == []


def test_over_receipt_counts_repeated_lines_in_one_call(db_session, storekeeper, make_item, supplier):
    item = make_item(qty=0)
    pr = _pr(db_session, storekeeper, item, 5, supplier.id)
    po = procurement.convert_to_po(db_session, storekeeper, pr.id)

    with pytest.raises(OverReceiptError):
        procurement.receive_po(
            db_session,
            storekeeper,
            po.id,
            [Receipt(inventory_id=item.id, qty_received=3), Receipt(inventory_id=item.id, qty_received=3)],
        )
    assert item.quantity_on_hand == 0


def test_zero_quantity_receipts_are_dropped(db_session, storekeeper, make_item, supplier):
    a = make_item("A", qty=0)
    b = make_item("B", qty=0)
    pr = procurement.create_pr(
        db_session,
        storekeeper,
        [
            PRLineCreate(inventory_id=a.id, requested_qty=2, suggested_supplier_id=supplier.id),
            PRLineCreate(inventory_id=b.id, requested_qty=2),
        ],
    )
    po = procurement.convert_to_po(db_session, storekeeper, pr.id)

    procurement.receive_po(
        db_session,
        storekeeper,
        po.id,
        [Receipt(inventory_id=a.id, qty_received=2), Receipt(inventory_id=b.id, qty_received=0)],
    )
    assert (a.quantity_on_hand, b.quantity_on_hand) == (2, 0)
    assert po.status == POStatus.partially_received

    with pytest.raises(EmptyReceiptError):
        procurement.receive_po(db_session, storekeeper, po.id, [Receipt(inventory_id=b.id, qty_received=0)])


def test_receiving_a_part_not_on_the_po(db_session, storekeeper, make_item, supplier):
    item = make_item("On PO", qty=0)
    other = make_item("Not on PO", qty=0)
    po = procurement.convert_to_po(db_session, storekeeper, _pr(db_session, storekeeper, item, 2, supplier.id).id)

    with pytest.raises(NotFoundError):
        procurement.receive_po(db_session, storekeeper, po.id, [Receipt(inventory_id=other.id, qty_received=1)])


def test_closed_or_cancelled_po_cannot_be_received(db_session, storekeeper, make_item, supplier):
    item = make_item(qty=0)
    po = procurement.convert_to_po(db_session, storekeeper, _pr(db_session, storekeeper, item, 2, supplier.id).id)
    procurement.cancel_po(db_session, storekeeper, po.id)

    with pytest.raises(InvalidStateTransitionError):
        procurement.receive_po(db_session, storekeeper, po.id, [Receipt(inventory_id=item.id, qty_received=1)])


# ---------- PR transitions ----------
def test_approve_requires_admin(db_session, storekeeper, make_item):
    pr = _pr(db_session, storekeeper, make_item(), 1)

    with pytest.raises(AuthorizationError):
        procurement.approve_pr(db_session, storekeeper, pr.id)
    assert pr.status == PRStatus.draft


def test_approve_only_from_draft(db_session, admin, storekeeper, make_item):
    pr = _pr(db_session, storekeeper, make_item(), 1)
    procurement.approve_pr(db_session, admin, pr.id)

    with pytest.raises(InvalidStateTransitionError):
        procurement.approve_pr(db_session, admin, pr.id)

    with pytest.raises(NotFoundError):
        procurement.approve_pr(db_session, admin, 404)


def test_reject_and_cancel(db_session, admin, storekeeper, make_item):
    item = make_item()
    rejected = _pr(db_session, storekeeper, item, 1)
    cancelled = _pr(db_session, storekeeper, item, 1)

    procurement.reject_pr(db_session, admin, rejected.id)
    procurement.cancel_pr(db_session, storekeeper, cancelled.id)

    assert rejected.status == PRStatus.rejected
    assert cancelled.status == PRStatus.cancelled
    with pytest.raises(InvalidStateTransitionError):
        procurement.convert_to_po(db_session, storekeeper, rejected.id)
    with pytest.raises(InvalidStateTransitionError):
        procurement.cancel_pr(db_session, storekeeper, rejected.id)


def test_pr_numbers_are_sequential(db_session, storekeeper, make_item):
    item = make_item()
    assert [_pr(db_session, storekeeper, item, 1).pr_no for _ in range(3)] == ["PR-000001", "PR-000002", "PR-000003"]


def test_pr_rejects_inactive_suggested_supplier(db_session, storekeeper, make_item, make_supplier):
    dormant = make_supplier("Dormant", active=False)

    with pytest.raises(InactiveSupplierError):
        _pr(db_session, storekeeper, make_item(), 1, dormant.id)


def test_from_suggestions_rejects_items_not_low(db_session, storekeeper, make_item):
    healthy = make_item(qty=50, min_stock=2)

    with pytest.raises(NotFoundError):
        procurement.create_pr_from_suggestions(db_session, storekeeper, [healthy.id])


# ---------- conversion ----------
def test_convert_draft_pr_stamps_it_approved(db_session, storekeeper, make_item, supplier):
    pr = _pr(db_session, storekeeper, make_item(), 3, supplier.id)

    procurement.convert_to_po(db_session, storekeeper, pr.id)

    assert pr.status == PRStatus.approved
    assert pr.approved_by == "sam"


def test_convert_twice_is_rejected(db_session, storekeeper, make_item, supplier):
    pr = _pr(db_session, storekeeper, make_item(), 3, supplier.id)
    procurement.convert_to_po(db_session, storekeeper, pr.id)

    with pytest.raises(InvalidStateTransitionError):
        procurement.convert_to_po(db_session, storekeeper, pr.id)


def test_convert_supplier_fallbacks(db_session, storekeeper, make_item, make_supplier, monkeypatch):
    item = make_item()
    fallback = make_supplier("Fallback")
    configured = make_supplier("Configured")

    po = procurement.convert_to_po(
        db_session, storekeeper, _pr(db_session, storekeeper, item, 1).id, fallback_supplier_id=fallback.id
    )
    assert po.supplier_id == fallback.id

    monkeypatch.setattr(procurement, "settings", replace(procurement.settings, default_supplier_id=configured.id))
    po = procurement.convert_to_po(db_session, storekeeper, _pr(db_session, storekeeper, item, 1).id)
    assert po.supplier_id == configured.id

    monkeypatch.setattr(procurement, "settings", replace(procurement.settings, default_supplier_id=None))
    with pytest.raises(NotFoundError):
        procurement.convert_to_po(db_session, storekeeper, _pr(db_session, storekeeper, item, 1).id)


def test_convert_rejects_inactive_supplier(db_session, storekeeper, make_item, make_supplier):
    supplier = make_supplier("Soon dormant")
    pr = _pr(db_session, storekeeper, make_item(), 1, supplier.id)
    supplier.active = False
    db_session.flush()

    with pytest.raises(InactiveSupplierError):
        procurement.convert_to_po(db_session, storekeeper, pr.id)
    assert pr.status == PRStatus.draft


# ---------- PO transitions ----------
def test_send_and_cancel_po(db_session, storekeeper, make_item, supplier):
    item = make_item()
    po = procurement.convert_to_po(db_session, storekeeper, _pr(db_session, storekeeper, item, 1, supplier.id).id)

    procurement.send_po(db_session, storekeeper, po.id)
    assert po.status == POStatus.sent
    with pytest.raises(InvalidStateTransitionError):
        procurement.send_po(db_session, storekeeper, po.id)

    procurement.cancel_po(db_session, storekeeper, po.id)
    assert po.status == POStatus.cancelled
    with pytest.raises(InvalidStateTransitionError):
        procurement.cancel_po(db_session, storekeeper, po.id)


def test_list_filters_by_status(db_session, admin, storekeeper, make_item):
    item = make_item()
    a = _pr(db_session, storekeeper, item, 1)
    b = _pr(db_session, storekeeper, item, 1)
    procurement.approve_pr(db_session, admin, b.id)

    assert [p.id for p in procurement.list_prs(db_session)] == [b.id, a.id]
    assert [p.id for p in procurement.list_prs(db_session, PRStatus.draft)] == [a.id]
