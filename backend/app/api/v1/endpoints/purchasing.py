from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.api.deps import get_actor, get_db
from backend.app.db.models.core_types import POStatus, PRStatus
from backend.app.schemas.purchasing import (
    ConvertToPO,
    PORead,
    PRCreate,
    PRFromSuggestions,
    PRRead,
    ReceiptBatch,
    ReorderSuggestionRead,
    SuggestionGroupRead,
)
from backend.services import inventory, procurement, reorder
from backend.services.auth import Actor

router = APIRouter(prefix="/purchasing")


# ---------- SUGGESTIONS ----------
@router.get("/suggestions")
def list_suggestions(grouped: bool = False, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    suggestions = reorder.reorder_suggestions(inventory.list_inventory(db))
    if grouped:
        return [SuggestionGroupRead.model_validate(g) for g in reorder.group_suggestions(suggestions)]
    return [ReorderSuggestionRead.model_validate(s) for s in suggestions]


# ---------- PR ----------
@router.get("/pr", response_model=list[PRRead])
def list_prs(status: PRStatus | None = None, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return procurement.list_prs(db, status)


@router.get("/pr/{pr_id}", response_model=PRRead)
def get_pr(pr_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return procurement.get_pr(db, pr_id)


@router.post("/pr", response_model=PRRead, status_code=201)
def create_pr(payload: PRCreate, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    pr = procurement.create_pr(db, actor, payload.lines, created_by=payload.created_by)
    db.commit()
    db.refresh(pr)
    return pr


@router.post("/pr/from-suggestions", response_model=PRRead, status_code=201)
def create_pr_from_suggestions(
    payload: PRFromSuggestions,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    pr = procurement.create_pr_from_suggestions(db, actor, payload.inventory_ids, created_by=payload.created_by)
    db.commit()
    db.refresh(pr)
    return pr


@router.post("/pr/{pr_id}/approve", response_model=PRRead)
def approve_pr(pr_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    pr = procurement.approve_pr(db, actor, pr_id)
    db.commit()
    return pr


@router.post("/pr/{pr_id}/reject", response_model=PRRead)
def reject_pr(pr_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    pr = procurement.reject_pr(db, actor, pr_id)
    db.commit()
    return pr


@router.post("/pr/{pr_id}/cancel", response_model=PRRead)
def cancel_pr(pr_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    pr = procurement.cancel_pr(db, actor, pr_id)
    db.commit()
    return pr


@router.post("/pr/{pr_id}/convert-to-po", response_model=PORead, status_code=201)
def convert_to_po(
    pr_id: int,
    payload: ConvertToPO | None = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    fallback = payload.fallback_supplier_id if payload else None
    po = procurement.convert_to_po(db, actor, pr_id, fallback_supplier_id=fallback)
    db.commit()
    db.refresh(po)
    return po


# ---------- PO ----------
@router.get("/po", response_model=list[PORead])
def list_pos(status: POStatus | None = None, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return procurement.list_pos(db, status)


@router.get("/po/{po_id}", response_model=PORead)
def get_po(po_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return procurement.get_po(db, po_id)


@router.post("/po/{po_id}/send", response_model=PORead)
def send_po(po_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    po = procurement.send_po(db, actor, po_id)
    db.commit()
    return po


@router.post("/po/{po_id}/cancel", response_model=PORead)
def cancel_po(po_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    po = procurement.cancel_po(db, actor, po_id)
    db.commit()
    return po


@router.post("/po/{po_id}/receive", response_model=PORead)
def receive_po(
    po_id: int,
    payload: ReceiptBatch,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    po = procurement.receive_po(db, actor, po_id, payload.receipts, remark=payload.remark)
    db.commit()
    return po
