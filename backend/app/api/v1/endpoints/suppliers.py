from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.api.deps import get_actor, get_db
from backend.app.schemas.inventory import BulkResultRead
from backend.app.schemas.supplier import SupplierBulkPatch, SupplierCreate, SupplierRead, SupplierUpdate
from backend.services import suppliers
from backend.services.auth import Actor

router = APIRouter(prefix="/suppliers")


@router.get("", response_model=list[SupplierRead])
def list_suppliers(active: bool | None = None, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return suppliers.list_suppliers(db, active)


@router.get("/{supplier_id}", response_model=SupplierRead)
def get_supplier(supplier_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return suppliers.get_supplier(db, supplier_id)


@router.post("", response_model=SupplierRead, status_code=201)
def create_supplier(payload: SupplierCreate, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    s = suppliers.create_supplier(db, actor, payload)
    db.commit()
    db.refresh(s)
    return s


@router.put("/{supplier_id}", response_model=SupplierRead)
def update_supplier(
    supplier_id: int,
    payload: SupplierUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    s = suppliers.update_supplier(db, actor, supplier_id, payload)
    db.commit()
    db.refresh(s)
    return s


@router.post("/bulk-update", response_model=BulkResultRead)
def bulk_update(payload: SupplierBulkPatch, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    result = suppliers.bulk_update_suppliers(db, actor, payload)
    db.commit()
    return result


@router.delete("/{supplier_id}", status_code=204)
def delete_supplier(supplier_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    suppliers.delete_supplier(db, actor, supplier_id)
    db.commit()
