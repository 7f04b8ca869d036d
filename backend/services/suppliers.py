from __future__ import annotations

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from backend.app.db.models.models_v1 import (
    Supplier,
    PurchaseOrder,
    OrderSchedule,
)
from backend.app.schemas.supplier import SupplierBulkPatch, SupplierCreate, SupplierUpdate
from backend.app.utils.logger import setup_logger
from backend.services.auth import Actor, Capability, require_capability
from backend.services.bulk import BulkResult
from backend.services.errors import (
    ConflictError,
    DuplicateError,
    InactiveSupplierError,
    NotFoundError,
)

logger = setup_logger(__name__)


def list_suppliers(db: Session, active: bool | None = None) -> list[Supplier]:
    stmt = select(Supplier).order_by(Supplier.name)
    if active is not None:
        stmt = stmt.where(Supplier.active == active)
    return list(db.execute(stmt).scalars().all())


def get_supplier(db: Session, supplier_id: int) -> Supplier:
    s = db.get(Supplier, supplier_id)
    if not s:
        raise NotFoundError("Supplier", supplier_id)
    return s


def require_active_supplier(db: Session, supplier_id: int) -> Supplier:
    """Only active suppliers can be attached to new PRs, POs and schedules."""
    s = get_supplier(db, supplier_id)
    if not s.active:
        raise InactiveSupplierError(s.name)
    return s


def _ensure_unique_name(db: Session, name: str, exclude_id: int | None = None) -> None:
    stmt = select(Supplier).where(Supplier.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Supplier.id != exclude_id)
    if db.execute(stmt).scalar_one_or_none():
        raise DuplicateError(f"Supplier '{name}' already exists")


def create_supplier(db: Session, actor: Actor, payload: SupplierCreate) -> Supplier:
    require_capability(actor, Capability.edit, "supplier changes")
    _ensure_unique_name(db, payload.name)

    s = Supplier(**payload.model_dump())
    db.add(s)
    db.flush()
    logger.info(f"Supplier #{s.id} '{s.name}' created by {actor.name}")
    return s


def update_supplier(db: Session, actor: Actor, supplier_id: int, payload: SupplierUpdate) -> Supplier:
    """Partial update: only fields present in the request are written."""
    require_capability(actor, Capability.edit, "supplier changes")
    s = get_supplier(db, supplier_id)

    changes = payload.model_dump(exclude_unset=True)
    if changes.get("name") is not None:
        _ensure_unique_name(db, changes["name"], exclude_id=s.id)
    for name, value in changes.items():
        if value is None:
            # columns are NOT NULL: an explicit null means "leave as is"
            continue
        setattr(s, name, value)
    db.flush()
    return s


def bulk_update_suppliers(db: Session, actor: Actor, patch: SupplierBulkPatch) -> BulkResult:
    """
    Field-level bulk patch.

    Only fields named in ``patch.fields`` overwrite existing values; a value
    sent for a field that is not enabled is ignored. Ids that do not exist are
    reported back, the others are still updated.
    """
    require_capability(actor, Capability.edit, "supplier changes")

    changes = {name: getattr(patch, name) for name in patch.fields}

    result = BulkResult()
    for supplier_id in patch.ids:
        s = db.get(Supplier, supplier_id)
        if s is None:
            result.fail(supplier_id, f"Supplier {supplier_id} not found")
            continue
        for name, value in changes.items():
            setattr(s, name, value)
        result.ok(supplier_id)

    db.flush()
    logger.info(f"Bulk supplier update by {actor.name}: fields={sorted(changes)} ok={len(result.succeeded)} failed={len(result.failed)}")
    return result


def delete_supplier(db: Session, actor: Actor, supplier_id: int) -> None:
    require_capability(actor, Capability.edit, "supplier changes")
    s = get_supplier(db, supplier_id)

    for label, model in (("purchase orders", PurchaseOrder), ("order schedules", OrderSchedule)):
        count = db.execute(
            select(func.count()).select_from(model).where(model.supplier_id == supplier_id)
        ).scalar_one()
        if count:
            raise ConflictError(f"Supplier '{s.name}' is used by {label}; deactivate it instead")

    db.delete(s)
    db.flush()
    logger.info(f"Supplier #{supplier_id} '{s.name}' deleted by {actor.name}")
