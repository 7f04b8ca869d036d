from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backend.app.api.deps import get_actor, get_db
from backend.app.db.models.core_types import TxnType
from backend.app.schemas.stock_txn import StockTxnCreate, StockTxnRead, StockTxnUpdate
from backend.services import ledger
from backend.services.auth import Actor

router = APIRouter(prefix="/transactions")


@router.get("", response_model=list[StockTxnRead])
def list_transactions(
    txn_type: TxnType | None = None,
    inventory_id: int | None = None,
    limit: int | None = Query(default=None, ge=1, le=1000),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    return ledger.list_transactions(db, txn_type=txn_type, inventory_id=inventory_id, limit=limit)


@router.get("/{txn_id}", response_model=StockTxnRead)
def get_transaction(txn_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return ledger.get_transaction(db, txn_id)


@router.post("", response_model=StockTxnRead, status_code=201)
def create_transaction(payload: StockTxnCreate, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    txn = ledger.apply_transaction(db, actor, payload)
    db.commit()
    db.refresh(txn)
    return txn


@router.put("/{txn_id}", response_model=StockTxnRead)
def edit_transaction(
    txn_id: int,
    payload: StockTxnUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    txn = ledger.reverse_and_reapply(db, actor, txn_id, payload)
    db.commit()
    db.refresh(txn)
    return txn


@router.delete("/{txn_id}", status_code=204)
def delete_transaction(txn_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    ledger.reverse(db, actor, txn_id)
    db.commit()
