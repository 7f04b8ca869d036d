"""
Procurement service: purchase requests, purchase orders, PO receiving.

Ce module orchestre les flux d'achat (PR, PO, réception) ; les mouvements de
stock passent par backend.services.ledger.

PR:  DRAFT -> APPROVED -> converted (one PO)
     DRAFT / SUBMITTED -> REJECTED | CANCELLED
PO:  DRAFT -> SENT -> PARTIALLY_RECEIVED -> CLOSED
     DRAFT / SENT -> CANCELLED
"""
from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Sequence

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from backend.app.core.config import settings
from backend.app.db.models.core_types import POStatus, PRStatus
from backend.app.db.models.models_v1 import (
    InventoryItem,
    PurchaseOrder,
    PurchaseOrderLine,
    PurchaseRequest,
    PurchaseRequestLine,
    utcnow,
)
from backend.app.schemas.purchasing import PRLineCreate, Receipt
from backend.app.utils.logger import setup_logger
from backend.services import ledger, reorder
from backend.services.auth import Actor, Capability, require_capability
from backend.services.errors import (
    EmptyReceiptError,
    InvalidStateTransitionError,
    NotFoundError,
    OverReceiptError,
)
from backend.services.suppliers import require_active_supplier

logger = setup_logger(__name__)

CONVERTIBLE_PR_STATUSES = {PRStatus.draft, PRStatus.submitted, PRStatus.approved}
RECEIVABLE_PO_STATUSES = {POStatus.draft, POStatus.sent, POStatus.partially_received}


def _next_number(db: Session, model, prefix: str) -> str:
    # single writer: max(id) + 1 stays ahead of every number already issued
    last_id = db.execute(select(func.max(model.id))).scalar_one() or 0
    return f"{prefix}-{last_id + 1:06d}"


# ---------- RECEIPTS (shared with order schedules) ----------
def normalize_receipts(receipts: Iterable[Receipt]) -> dict[int, tuple[int, Decimal | None]]:
    """
    Sum positive quantities per inventory id; zero / negative lines are dropped.

    Raises EmptyReceiptError when nothing positive is left.
    """
    totals: dict[int, int] = defaultdict(int)
    costs: dict[int, Decimal | None] = {}
    for r in receipts:
        if r.qty_received <= 0:
            continue
        totals[r.inventory_id] += r.qty_received
        if r.unit_cost is not None:
            costs[r.inventory_id] = r.unit_cost
        else:
            costs.setdefault(r.inventory_id, None)

    if not totals:
        raise EmptyReceiptError()
    return {inv_id: (qty, costs[inv_id]) for inv_id, qty in totals.items()}


def allocate_receipt(lines: Sequence, inventory_id: int, qty: int, part_name: str) -> list[tuple[object, int]]:
    """
    Spread ``qty`` over the document lines of one part, first line first.

    ``lines`` expose ``inventory_id`` and ``outstanding_qty``; raises
    OverReceiptError if the part's total outstanding quantity is smaller.
    """
    matching = [ln for ln in lines if ln.inventory_id == inventory_id]
    if not matching:
        raise NotFoundError("Line for inventory item", inventory_id)

    outstanding = sum(ln.outstanding_qty for ln in matching)
    if qty > outstanding:
        raise OverReceiptError(part_name, outstanding, qty)

    plan = []
    remaining = qty
    for ln in matching:
        if remaining == 0:
            break
        take = min(remaining, ln.outstanding_qty)
        if take > 0:
            plan.append((ln, take))
            remaining -= take
    return plan


# ---------- PR ----------
def list_prs(db: Session, status: PRStatus | None = None) -> list[PurchaseRequest]:
    stmt = select(PurchaseRequest).order_by(PurchaseRequest.id.desc())
    if status is not None:
        stmt = stmt.where(PurchaseRequest.status == status)
    return list(db.execute(stmt).scalars().all())


def get_pr(db: Session, pr_id: int) -> PurchaseRequest:
    pr = db.get(PurchaseRequest, pr_id)
    if not pr:
        raise NotFoundError("Purchase request", pr_id)
    return pr


def create_pr(
    db: Session,
    actor: Actor,
    lines: Sequence[PRLineCreate],
    created_by: str | None = None,
) -> PurchaseRequest:
    require_capability(actor, Capability.edit, "purchase requests")

    for ln in lines:
        if not db.get(InventoryItem, ln.inventory_id):
            raise NotFoundError("Inventory item", ln.inventory_id)
        if ln.suggested_supplier_id is not None:
            require_active_supplier(db, ln.suggested_supplier_id)

    pr = PurchaseRequest(
        pr_no=_next_number(db, PurchaseRequest, "PR"),
        created_by=created_by or actor.name,
        status=PRStatus.draft,
    )
    pr.lines = [
        PurchaseRequestLine(
            inventory_id=ln.inventory_id,
            requested_qty=ln.requested_qty,
            notes=ln.notes,
            suggested_supplier_id=ln.suggested_supplier_id,
        )
        for ln in lines
    ]
    db.add(pr)
    db.flush()
    logger.info(f"{pr.pr_no} created by {pr.created_by} ({len(pr.lines)} lines)")
    return pr


def create_pr_from_suggestions(
    db: Session,
    actor: Actor,
    inventory_ids: Sequence[int],
    created_by: str | None = None,
) -> PurchaseRequest:
    """One PR line per selected suggestion: suggested qty, preferred supplier."""
    require_capability(actor, Capability.edit, "purchase requests")
    items = []
    for inv_id in dict.fromkeys(inventory_ids):
        item = db.get(InventoryItem, inv_id)
        if item is None:
            raise NotFoundError("Inventory item", inv_id)
        items.append(item)

    suggestions = {s.inventory_id: s for s in reorder.reorder_suggestions(items)}
    lines = []
    for item in items:
        s = suggestions.get(item.id)
        if s is None:
            raise NotFoundError("Reorder suggestion for inventory item", item.id)
        lines.append(
            PRLineCreate(
                inventory_id=s.inventory_id,
                requested_qty=s.suggested_qty,
                suggested_supplier_id=s.preferred_supplier_id,
            )
        )
    return create_pr(db, actor, lines, created_by=created_by)


def approve_pr(db: Session, actor: Actor, pr_id: int) -> PurchaseRequest:
    require_capability(actor, Capability.admin, "purchase request approval")
    pr = get_pr(db, pr_id)
    if pr.status != PRStatus.draft:
        raise InvalidStateTransitionError(f"{pr.pr_no} is {pr.status.value}; only DRAFT requests can be approved")

    pr.status = PRStatus.approved
    pr.approved_by = actor.name
    pr.approved_at = utcnow()
    db.flush()
    logger.info(f"{pr.pr_no} approved by {actor.name}")
    return pr


def _close_pr(db: Session, pr: PurchaseRequest, status: PRStatus, actor: Actor) -> PurchaseRequest:
    if pr.status not in {PRStatus.draft, PRStatus.submitted}:
        raise InvalidStateTransitionError(
            f"{pr.pr_no} is {pr.status.value}; only DRAFT or SUBMITTED requests can be {status.value.lower()}"
        )
    pr.status = status
    db.flush()
    logger.info(f"{pr.pr_no} {status.value} by {actor.name}")
    return pr


def reject_pr(db: Session, actor: Actor, pr_id: int) -> PurchaseRequest:
    require_capability(actor, Capability.admin, "purchase request rejection")
    return _close_pr(db, get_pr(db, pr_id), PRStatus.rejected, actor)


def cancel_pr(db: Session, actor: Actor, pr_id: int) -> PurchaseRequest:
    require_capability(actor, Capability.edit, "purchase request cancellation")
    return _close_pr(db, get_pr(db, pr_id), PRStatus.cancelled, actor)


# ---------- PO ----------
def list_pos(db: Session, status: POStatus | None = None) -> list[PurchaseOrder]:
    stmt = select(PurchaseOrder).order_by(PurchaseOrder.id.desc())
    if status is not None:
        stmt = stmt.where(PurchaseOrder.status == status)
    return list(db.execute(stmt).scalars().all())


def get_po(db: Session, po_id: int) -> PurchaseOrder:
    po = db.get(PurchaseOrder, po_id)
    if not po:
        raise NotFoundError("Purchase order", po_id)
    return po


def convert_to_po(
    db: Session,
    actor: Actor,
    pr_id: int,
    fallback_supplier_id: int | None = None,
) -> PurchaseOrder:
    """
    PR -> PO.

    Not-yet-approved requests are accepted and stamped APPROVED here. One
    supplier per PO, taken from the first PR line.
    """
    require_capability(actor, Capability.edit, "purchase order creation")
    pr = get_pr(db, pr_id)

    if pr.status not in CONVERTIBLE_PR_STATUSES:
        raise InvalidStateTransitionError(f"{pr.pr_no} is {pr.status.value} and cannot be converted")
    if pr.purchase_orders:
        raise InvalidStateTransitionError(
            f"{pr.pr_no} was already converted to {pr.purchase_orders[0].po_no}"
        )

    supplier_id = (
        (pr.lines[0].suggested_supplier_id if pr.lines else None)
        or fallback_supplier_id
        or settings.default_supplier_id
    )
    if supplier_id is None:
        raise NotFoundError("Supplier for", pr.pr_no)
    supplier = require_active_supplier(db, supplier_id)

    po = PurchaseOrder(
        po_no=_next_number(db, PurchaseOrder, "PO"),
        supplier=supplier,
        pr=pr,
        created_by=pr.created_by,
        status=POStatus.draft,
    )
    po.lines = [
        PurchaseOrderLine(
            inventory_id=ln.inventory_id,
            ordered_qty=ln.requested_qty,
            received_qty=0,
            unit_cost=Decimal("0"),
        )
        for ln in pr.lines
    ]
    db.add(po)

    if pr.status != PRStatus.approved:
        pr.status = PRStatus.approved
        pr.approved_by = pr.approved_by or actor.name
        pr.approved_at = pr.approved_at or utcnow()

    db.flush()
    logger.info(f"{pr.pr_no} converted to {po.po_no} (supplier {supplier.name}) by {actor.name}")
    return po


def send_po(db: Session, actor: Actor, po_id: int) -> PurchaseOrder:
    require_capability(actor, Capability.edit, "purchase orders")
    po = get_po(db, po_id)
    if po.status != POStatus.draft:
        raise InvalidStateTransitionError(f"{po.po_no} is {po.status.value}; only DRAFT orders can be sent")
    po.status = POStatus.sent
    db.flush()
    logger.info(f"{po.po_no} sent by {actor.name}")
    return po


def cancel_po(db: Session, actor: Actor, po_id: int) -> PurchaseOrder:
    require_capability(actor, Capability.edit, "purchase orders")
    po = get_po(db, po_id)
    if po.status not in {POStatus.draft, POStatus.sent}:
        raise InvalidStateTransitionError(
            f"{po.po_no} is {po.status.value}; only DRAFT or SENT orders can be cancelled"
        )
    po.status = POStatus.cancelled
    db.flush()
    logger.info(f"{po.po_no} cancelled by {actor.name}")
    return po


def recompute_po_status(po: PurchaseOrder) -> POStatus:
    if all(ln.received_qty >= ln.ordered_qty for ln in po.lines):
        return POStatus.closed
    return POStatus.partially_received


def receive_po(
    db: Session,
    actor: Actor,
    po_id: int,
    receipts: Iterable[Receipt],
    remark: str = "",
) -> PurchaseOrder:
    """
    Receive goods against a PO.

    Validation first (state, empty set, unknown part, over-receipt), then in
    one go: PO line quantities, on-hand stock, a RECEIVE ledger entry and the
    PO status.
    """
    require_capability(actor, Capability.edit, "purchase order receiving")
    po = get_po(db, po_id)
    if po.status not in RECEIVABLE_PO_STATUSES:
        raise InvalidStateTransitionError(f"{po.po_no} is {po.status.value} and cannot be received")

    totals = normalize_receipts(receipts)

    plan: list[tuple[PurchaseOrderLine, int, Decimal | None]] = []
    for inv_id, (qty, unit_cost) in totals.items():
        item = db.get(InventoryItem, inv_id)
        part_name = item.part_name if item else str(inv_id)
        try:
            allocation = allocate_receipt(po.lines, inv_id, qty, part_name)
        except OverReceiptError as exc:
            logger.warning(f"{po.po_no} receipt rejected: {exc.message}")
            raise
        plan.extend((ln, take, unit_cost) for ln, take in allocation)

    for ln, take, unit_cost in plan:
        ln.received_qty += take
        if unit_cost is not None:
            ln.unit_cost = unit_cost

    ledger.receive_stock(
        db,
        [(ln.item, take, unit_cost) for ln, take, unit_cost in plan],
        performed_by=actor.name,
        counterparty=po.supplier.name if po.supplier else "Supplier",
        reference=po.po_no,
        remark=remark or "Auto-recorded from PO receipt",
    )

    po.status = recompute_po_status(po)
    db.flush()
    logger.info(
        f"{po.po_no} received by {actor.name}: "
        + ", ".join(f"{ln.part_name} +{take}" for ln, take, _ in plan)
        + f" -> {po.status.value}"
    )
    return po
