"""
Stock ledger.

Seul point d'écriture de quantity_on_hand (with PO / schedule receiving going
through receive_stock below).

Règle métier :
    after_qty = before_qty + direction(txn_type) * qty
    direction = -1 for ISSUE, +1 for RETURN / RECEIVE / ADJUSTMENT

Propriétés :
- atomic per call: every line is evaluated on a working copy first, rows are
  only written once the whole call is known to be valid
- edit = exact inverse of the stored lines + the new lines, evaluated as one
  unit, so a failed reapply leaves no half-reverted stock behind
- quantity_on_hand never ends below zero

Nothing here commits; the caller owns the transaction.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.db.models.core_types import TxnType
from backend.app.db.models.models_v1 import (
    InventoryItem,
    StockTxn,
    StockTxnLine,
    utcnow,
)
from backend.app.schemas.stock_txn import StockTxnCreate, StockTxnLineCreate, StockTxnUpdate
from backend.app.utils.logger import setup_logger
from backend.services.auth import Actor, Capability, require_capability
from backend.services.errors import InsufficientStockError, NotFoundError

logger = setup_logger(__name__)

TXN_HEADER_FIELDS = (
    "counterparty",
    "reference",
    "remark",
    "reason_code",
    "source_location",
    "destination_location",
    "document_type",
    "document_no",
    "approved_by",
)


def direction(txn_type: TxnType) -> int:
    # ADJUSTMENT is additive: downward corrections are not representable yet
    return -1 if txn_type == TxnType.issue else 1


class StockBook:
    """
    Working copy of on-hand quantities for one service call.

    Items are loaded (and locked) on first use; moves only change the copy
    until commit() writes the final quantities back to the rows.
    """

    def __init__(self, db: Session):
        self.db = db
        self._items: dict[int, InventoryItem] = {}
        self._qty: dict[int, int] = {}

    def find(self, inventory_id: int | None) -> InventoryItem | None:
        if inventory_id is None:
            return None
        if inventory_id not in self._items:
            item = (
                self.db.execute(
                    select(InventoryItem)
                    .where(InventoryItem.id == inventory_id)
                    .with_for_update()
                )
                .scalar_one_or_none()
            )
            if item is None:
                return None
            self._items[inventory_id] = item
            self._qty[inventory_id] = item.quantity_on_hand
        return self._items[inventory_id]

    def get(self, inventory_id: int) -> InventoryItem:
        item = self.find(inventory_id)
        if item is None:
            raise NotFoundError("Inventory item", inventory_id)
        return item

    def quantity(self, item: InventoryItem) -> int:
        return self._qty[item.id]

    def move(self, item: InventoryItem, delta: int, *, check: bool = True) -> tuple[int, int]:
        """Apply ``delta`` to the copy; returns (before, after)."""
        before = self._qty[item.id]
        if check and delta < 0 and abs(delta) > before:
            raise InsufficientStockError(item.part_name, before)
        after = before + delta
        self._qty[item.id] = after
        return before, after

    def ensure_non_negative(self) -> None:
        for inventory_id, qty in self._qty.items():
            if qty < 0:
                item = self._items[inventory_id]
                raise InsufficientStockError(item.part_name, item.quantity_on_hand)

    def commit(self, now: datetime | None = None) -> None:
        self.ensure_non_negative()
        now = now or utcnow()
        for inventory_id, qty in self._qty.items():
            item = self._items[inventory_id]
            item.quantity_on_hand = qty
            item.last_updated = now


def _apply_lines(
    book: StockBook,
    txn_type: TxnType,
    lines: Iterable[StockTxnLineCreate],
) -> list[StockTxnLine]:
    sign = direction(txn_type)
    rows: list[StockTxnLine] = []
    for ln in lines:
        item = book.get(ln.inventory_id)
        before, after = book.move(item, sign * ln.qty)
        rows.append(
            StockTxnLine(
                inventory_id=item.id,
                part_name=item.part_name,
                qty=ln.qty,
                unit_cost=ln.unit_cost,
                before_qty=before,
                after_qty=after,
            )
        )
    return rows


def _revert_lines(book: StockBook, txn: StockTxn) -> None:
    sign = direction(txn.txn_type)
    for line in txn.lines:
        item = book.find(line.inventory_id)
        if item is None:
            # part deleted since; nothing left to restore
            continue
        book.move(item, -sign * line.qty, check=False)


def get_transaction(db: Session, txn_id: int) -> StockTxn:
    txn = db.get(StockTxn, txn_id)
    if not txn:
        raise NotFoundError("Transaction", txn_id)
    return txn


def list_transactions(
    db: Session,
    *,
    txn_type: TxnType | None = None,
    inventory_id: int | None = None,
    limit: int | None = None,
) -> list[StockTxn]:
    stmt = select(StockTxn).order_by(StockTxn.txn_time.desc(), StockTxn.id.desc())
    if txn_type is not None:
        stmt = stmt.where(StockTxn.txn_type == txn_type)
    if inventory_id is not None:
        stmt = stmt.where(
            StockTxn.id.in_(
                select(StockTxnLine.txn_id).where(StockTxnLine.inventory_id == inventory_id)
            )
        )
    if limit is not None:
        stmt = stmt.limit(limit)
    return list(db.execute(stmt).scalars().all())


def apply_transaction(db: Session, actor: Actor, payload: StockTxnCreate) -> StockTxn:
    require_capability(actor, Capability.edit, "stock transactions")

    book = StockBook(db)
    try:
        lines = _apply_lines(book, payload.txn_type, payload.lines)
    except InsufficientStockError as exc:
        logger.warning(f"{payload.txn_type.value} rejected for {actor.name}: {exc.message}")
        raise

    now = utcnow()
    book.commit(now)

    txn = StockTxn(
        txn_type=payload.txn_type,
        txn_time=payload.txn_time or now,
        performed_by=actor.name,
        **{name: getattr(payload, name) for name in TXN_HEADER_FIELDS},
    )
    txn.lines = lines
    db.add(txn)
    db.flush()

    logger.info(
        f"{txn.txn_type.value} #{txn.id} by {actor.name}: "
        + ", ".join(f"{ln.part_name} {ln.before_qty}->{ln.after_qty}" for ln in lines)
    )
    return txn


def reverse_and_reapply(
    db: Session,
    actor: Actor,
    txn_id: int,
    payload: StockTxnUpdate,
) -> StockTxn:
    """
    Edit a committed transaction.

    The inverse of the stored lines and the new lines are evaluated on one
    working copy; the inverse step may dip below zero on its own as long as
    the reapplied lines bring every item back to a valid quantity.
    """
    require_capability(actor, Capability.admin, "transaction edits")
    txn = get_transaction(db, txn_id)

    new_type = payload.txn_type or txn.txn_type
    if payload.lines is not None:
        new_lines = payload.lines
    else:
        new_lines = [
            StockTxnLineCreate(inventory_id=ln.inventory_id, qty=ln.qty, unit_cost=ln.unit_cost)
            for ln in txn.lines
            if ln.inventory_id is not None
        ]

    book = StockBook(db)
    _revert_lines(book, txn)
    try:
        lines = _apply_lines(book, new_type, new_lines)
        book.ensure_non_negative()
    except InsufficientStockError as exc:
        logger.warning(f"Edit of transaction #{txn.id} rejected: {exc.message}")
        raise
    book.commit()

    txn.txn_type = new_type
    for name, value in payload.model_dump(exclude_unset=True, exclude={"txn_type", "lines"}).items():
        setattr(txn, name, value)
    txn.lines = lines
    db.flush()

    logger.info(f"Transaction #{txn.id} edited by {actor.name} ({new_type.value})")
    return txn


def reverse(db: Session, actor: Actor, txn_id: int) -> None:
    require_capability(actor, Capability.admin, "transaction deletion")
    txn = get_transaction(db, txn_id)

    book = StockBook(db)
    _revert_lines(book, txn)
    try:
        book.commit()
    except InsufficientStockError as exc:
        logger.warning(f"Deletion of transaction #{txn.id} rejected: {exc.message}")
        raise

    db.delete(txn)
    db.flush()
    logger.info(f"Transaction #{txn_id} reversed and deleted by {actor.name}")


def receive_stock(
    db: Session,
    receipts: Iterable[tuple[InventoryItem, int, Decimal | None]],
    *,
    performed_by: str,
    counterparty: str,
    reference: str,
    remark: str,
) -> StockTxn:
    """
    Additive receipt used by PO and schedule receiving.

    Callers validate quantities against their own documents first; receiving
    can never drive stock negative so no stock check applies. The synthetic
    RECEIVE transaction carries real before/after snapshots.
    """
    book = StockBook(db)
    lines: list[StockTxnLine] = []
    for item, qty, unit_cost in receipts:
        book.get(item.id)
        before, after = book.move(item, qty, check=False)
        lines.append(
            StockTxnLine(
                inventory_id=item.id,
                part_name=item.part_name,
                qty=qty,
                unit_cost=unit_cost,
                before_qty=before,
                after_qty=after,
            )
        )

    now = utcnow()
    book.commit(now)

    txn = StockTxn(
        txn_type=TxnType.receive,
        txn_time=now,
        performed_by=performed_by,
        counterparty=counterparty,
        reference=reference,
        remark=remark,
    )
    txn.lines = lines
    db.add(txn)
    db.flush()
    return txn
