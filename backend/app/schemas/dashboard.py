from __future__ import annotations

from pydantic import BaseModel


class DashboardSummary(BaseModel):
    total_items: int
    low_stock_count: int
    zero_stock_count: int
    open_prs: int
    pending_pos: int
    schedules_due_soon: int
    schedules_delayed: int
    serviceable_items: int
    active_buildings: int
    movements_7d: int
    criticality_mix: dict[str, int]
    txn_type_mix: dict[str, int]
