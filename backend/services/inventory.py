from __future__ import annotations

from typing import Iterable

from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session

from backend.app.db.models.core_types import PartStatus
from backend.app.db.models.models_v1 import (
    InventoryItem,
    PurchaseRequestLine,
    PurchaseOrderLine,
    OrderScheduleLine,
    utcnow,
)
from backend.app.schemas.inventory import (
    InventoryBulkPatch,
    InventoryCreate,
    InventoryFilter,
    InventoryUpdate,
)
from backend.app.utils.logger import setup_logger
from backend.services.auth import Actor, Capability, require_capability
from backend.services.bulk import BulkResult
from backend.services.errors import ConflictError, DomainError, NotFoundError
from backend.services.suppliers import get_supplier

logger = setup_logger(__name__)

# Filter values the UI sends for "no filter"
ALL_SENTINELS = {"", "All Buildings", "All Categories", "All Statuses"}


def _active_filter(value: str | None) -> str | None:
    if value is None or value.strip() in ALL_SENTINELS:
        return None
    return value.strip()


def list_inventory(db: Session, filters: InventoryFilter | None = None) -> list[InventoryItem]:
    filters = filters or InventoryFilter()
    stmt = select(InventoryItem).order_by(InventoryItem.id)

    search = _active_filter(filters.search)
    if search:
        pattern = f"%{search.lower()}%"
        stmt = stmt.where(
            or_(
                func.lower(InventoryItem.part_name).like(pattern),
                func.lower(InventoryItem.tag_no).like(pattern),
            )
        )

    building = _active_filter(filters.building)
    if building:
        stmt = stmt.where(InventoryItem.building == building)

    category = _active_filter(filters.category)
    if category:
        stmt = stmt.where(InventoryItem.part_category == category)

    status = _active_filter(filters.status)
    if status:
        try:
            stmt = stmt.where(InventoryItem.status == PartStatus(status))
        except ValueError:
            return []

    return list(db.execute(stmt).scalars().all())


def get_item(db: Session, item_id: int) -> InventoryItem:
    item = db.get(InventoryItem, item_id)
    if not item:
        raise NotFoundError("Inventory item", item_id)
    return item


def _check_supplier(db: Session, supplier_id: int | None) -> None:
    if supplier_id is not None:
        get_supplier(db, supplier_id)


def create_item(db: Session, actor: Actor, payload: InventoryCreate) -> InventoryItem:
    require_capability(actor, Capability.edit, "inventory changes")
    _check_supplier(db, payload.preferred_supplier_id)

    item = InventoryItem(**payload.model_dump(), last_updated=utcnow(), row_version="1")
    db.add(item)
    db.flush()
    logger.info(f"Inventory item #{item.id} '{item.part_name}' created by {actor.name} (qty {item.quantity_on_hand})")
    return item


def _bump_version(item: InventoryItem) -> None:
    try:
        item.row_version = str(int(item.row_version) + 1)
    except ValueError:
        item.row_version = "1"
    item.last_updated = utcnow()


def update_item(db: Session, actor: Actor, item_id: int, payload: InventoryUpdate) -> InventoryItem:
    """Metadata only: quantity_on_hand is owned by the ledger."""
    require_capability(actor, Capability.edit, "inventory changes")
    item = get_item(db, item_id)

    changes = payload.model_dump(exclude_unset=True)
    changes.pop("quantity_on_hand", None)
    if "preferred_supplier_id" in changes:
        _check_supplier(db, changes["preferred_supplier_id"])

    for name, value in changes.items():
        setattr(item, name, value)
    _bump_version(item)
    db.flush()
    return item


def bulk_update_items(db: Session, actor: Actor, patch: InventoryBulkPatch) -> BulkResult:
    require_capability(actor, Capability.edit, "inventory changes")

    changes = {name: getattr(patch, name) for name in patch.fields}
    if "min_stock" in changes:
        changes["min_stock"] = max(0, changes["min_stock"])

    result = BulkResult()
    if "preferred_supplier_id" in changes:
        try:
            _check_supplier(db, changes["preferred_supplier_id"])
        except NotFoundError as exc:
            for item_id in patch.ids:
                result.fail(item_id, exc.message)
            return result

    for item_id in patch.ids:
        item = db.get(InventoryItem, item_id)
        if item is None:
            result.fail(item_id, f"Inventory item {item_id} not found")
            continue
        for name, value in changes.items():
            setattr(item, name, value)
        _bump_version(item)
        result.ok(item_id)

    db.flush()
    logger.info(
        f"Bulk update by {actor.name}: fields={sorted(patch.fields)} "
        f"ok={len(result.succeeded)} failed={len(result.failed)}"
    )
    return result


def _referencing_documents(db: Session, item_id: int) -> list[str]:
    refs = []
    for label, model in (
        ("purchase requests", PurchaseRequestLine),
        ("purchase orders", PurchaseOrderLine),
        ("order schedules", OrderScheduleLine),
    ):
        count = db.execute(
            select(func.count()).select_from(model).where(model.inventory_id == item_id)
        ).scalar_one()
        if count:
            refs.append(label)
    return refs


def delete_item(db: Session, actor: Actor, item_id: int) -> None:
    require_capability(actor, Capability.admin, "inventory deletion")
    item = get_item(db, item_id)

    refs = _referencing_documents(db, item_id)
    if refs:
        raise ConflictError(f"'{item.part_name}' is referenced by {', '.join(refs)} and cannot be deleted")

    db.delete(item)
    db.flush()
    logger.info(f"Inventory item #{item_id} '{item.part_name}' deleted by {actor.name}")


def bulk_delete_items(db: Session, actor: Actor, ids: Iterable[int]) -> BulkResult:
    require_capability(actor, Capability.admin, "inventory deletion")

    result = BulkResult()
    for item_id in ids:
        try:
            delete_item(db, actor, item_id)
        except DomainError as exc:
            result.fail(item_id, exc.message)
        else:
            result.ok(item_id)
    return result
