from types import SimpleNamespace

from backend.services import reorder
from backend.services.reorder import Severity


def _item(id=1, part_name="Belt", qty=0, min_stock=1, reorder_point=None, reorder_qty=None, supplier=None):
    return SimpleNamespace(
        id=id,
        part_name=part_name,
        building="Block A",
        quantity_on_hand=qty,
        min_stock=min_stock,
        reorder_point=reorder_point,
        reorder_qty=reorder_qty,
        preferred_supplier_id=supplier,
    )


def test_effective_reorder_point_falls_back_to_min_stock():
    assert reorder.effective_reorder_point(_item(min_stock=4)) == 4
    assert reorder.effective_reorder_point(_item(min_stock=4, reorder_point=0)) == 4
    assert reorder.effective_reorder_point(_item(min_stock=4, reorder_point=9)) == 9


def test_low_stock_is_inclusive():
    assert reorder.is_low_stock(_item(qty=5, min_stock=5))
    assert not reorder.is_low_stock(_item(qty=6, min_stock=5))


def test_zero_stock_is_low_stock():
    item = _item(qty=0, min_stock=0)
    assert reorder.is_zero_stock(item)
    assert reorder.is_low_stock(item)
    assert reorder.zero_stock_items([item, _item(qty=1)]) == [item]


def test_suggested_qty_uses_reorder_qty_when_set():
    assert reorder.suggested_qty(_item(qty=2, reorder_point=10, reorder_qty=25)) == 25


def test_suggested_qty_fills_deficit_plus_buffer():
    # 10 - 2 + 5
    assert reorder.suggested_qty(_item(qty=2, reorder_point=10)) == 13
    assert reorder.suggested_qty(_item(qty=2, reorder_point=10, reorder_qty=0)) == 13


def test_suggestions_only_for_low_stock_items():
    low = _item(id=1, qty=0, min_stock=2, supplier=7)
    ok = _item(id=2, qty=10, min_stock=2)
    edge = _item(id=3, qty=2, min_stock=2)

    suggestions = reorder.reorder_suggestions([low, ok, edge])

    assert [s.inventory_id for s in suggestions] == [1, 3]
    assert suggestions[0].severity == Severity.zero
    assert suggestions[0].preferred_supplier_id == 7
    assert suggestions[0].suggested_qty == 7
    assert suggestions[1].severity == Severity.low


def test_group_suggestions_sums_and_sorts_descending():
    items = [
        _item(id=1, part_name="Belt", qty=0, reorder_qty=3),
        _item(id=2, part_name="Filter", qty=0, reorder_qty=10),
        _item(id=3, part_name="Belt", qty=0, reorder_qty=4),
        _item(id=4, part_name="Valve", qty=0, reorder_qty=7),
    ]

    groups = reorder.group_suggestions(reorder.reorder_suggestions(items))

    assert [(g.part_name, g.total_suggested_qty) for g in groups] == [
        ("Filter", 10),
        ("Belt", 7),
        ("Valve", 7),
    ]
    assert [s.inventory_id for s in groups[1].suggestions] == [1, 3]
