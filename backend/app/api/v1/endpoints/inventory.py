from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.api.deps import get_actor, get_db
from backend.app.schemas.inventory import (
    BulkIds,
    BulkResultRead,
    InventoryBulkPatch,
    InventoryCreate,
    InventoryFilter,
    InventoryRead,
    InventoryUpdate,
)
from backend.services import inventory, reorder
from backend.services.auth import Actor

router = APIRouter(prefix="/inventory")


@router.get("", response_model=list[InventoryRead])
def list_inventory(
    search: str | None = None,
    building: str | None = None,
    category: str | None = None,
    status: str | None = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    filters = InventoryFilter(search=search, building=building, category=category, status=status)
    return inventory.list_inventory(db, filters)


@router.get("/low-stock", response_model=list[InventoryRead])
def list_low_stock(db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return reorder.low_stock_items(inventory.list_inventory(db))


@router.get("/{item_id}", response_model=InventoryRead)
def get_item(item_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return inventory.get_item(db, item_id)


@router.post("", response_model=InventoryRead, status_code=201)
def create_item(payload: InventoryCreate, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    item = inventory.create_item(db, actor, payload)
    db.commit()
    db.refresh(item)
    return item


@router.put("/{item_id}", response_model=InventoryRead)
def update_item(
    item_id: int,
    payload: InventoryUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    item = inventory.update_item(db, actor, item_id, payload)
    db.commit()
    db.refresh(item)
    return item


@router.post("/bulk-update", response_model=BulkResultRead)
def bulk_update(payload: InventoryBulkPatch, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    result = inventory.bulk_update_items(db, actor, payload)
    db.commit()
    return result


@router.delete("/{item_id}", status_code=204)
def delete_item(item_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    inventory.delete_item(db, actor, item_id)
    db.commit()


@router.post("/bulk-delete", response_model=BulkResultRead)
def bulk_delete(payload: BulkIds, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    result = inventory.bulk_delete_items(db, actor, payload.ids)
    db.commit()
    return result
