"""
Reorder advisory.

Pure functions over inventory rows: no session, no writes. Anything exposing
the InventoryItem stock attributes works, which keeps the rules testable
without a database.

Règle métier :
    effective reorder point = reorder_point if reorder_point > 0 else min_stock
    low stock              = quantity_on_hand <= effective reorder point
    suggested qty          = reorder_qty, or the deficit plus REORDER_BUFFER
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterable, Protocol


REORDER_BUFFER = 5


class StockItem(Protocol):
    id: int
    part_name: str
    building: str
    min_stock: int
    reorder_point: int | None
    reorder_qty: int | None
    preferred_supplier_id: int | None
    quantity_on_hand: int


class Severity(str, enum.Enum):
    zero = "ZERO"
    low = "LOW"


@dataclass
class ReorderSuggestion:
    inventory_id: int
    part_name: str
    building: str
    quantity_on_hand: int
    reorder_point: int
    suggested_qty: int
    preferred_supplier_id: int | None
    severity: Severity


@dataclass
class SuggestionGroup:
    part_name: str
    total_suggested_qty: int
    suggestions: list[ReorderSuggestion] = field(default_factory=list)


def effective_reorder_point(item: StockItem) -> int:
    if item.reorder_point is not None and item.reorder_point > 0:
        return item.reorder_point
    return item.min_stock or 0


def is_low_stock(item: StockItem) -> bool:
    return item.quantity_on_hand <= effective_reorder_point(item)


def is_zero_stock(item: StockItem) -> bool:
    return item.quantity_on_hand == 0


def low_stock_items(items: Iterable[StockItem]) -> list[StockItem]:
    return [i for i in items if is_low_stock(i)]


def zero_stock_items(items: Iterable[StockItem]) -> list[StockItem]:
    # zero stock is always low stock: the effective reorder point is never negative
    return [i for i in items if is_zero_stock(i)]


def suggested_qty(item: StockItem) -> int:
    if item.reorder_qty:
        return item.reorder_qty
    return effective_reorder_point(item) - item.quantity_on_hand + REORDER_BUFFER


def reorder_suggestions(items: Iterable[StockItem]) -> list[ReorderSuggestion]:
    """One suggestion per low-stock item, in input order."""
    return [
        ReorderSuggestion(
            inventory_id=item.id,
            part_name=item.part_name,
            building=item.building,
            quantity_on_hand=item.quantity_on_hand,
            reorder_point=effective_reorder_point(item),
            suggested_qty=suggested_qty(item),
            preferred_supplier_id=item.preferred_supplier_id,
            severity=Severity.zero if is_zero_stock(item) else Severity.low,
        )
        for item in items
        if is_low_stock(item)
    ]


def group_suggestions(suggestions: Iterable[ReorderSuggestion]) -> list[SuggestionGroup]:
    """
    Group by part name, largest total suggested quantity first.

    sorted() is stable, so groups with equal totals keep the order in which
    their part name first appeared.
    """
    groups: dict[str, SuggestionGroup] = {}
    for s in suggestions:
        group = groups.get(s.part_name)
        if group is None:
            group = groups[s.part_name] = SuggestionGroup(part_name=s.part_name, total_suggested_qty=0)
        group.suggestions.append(s)
        group.total_suggested_qty += s.suggested_qty

    return sorted(groups.values(), key=lambda g: g.total_suggested_qty, reverse=True)
