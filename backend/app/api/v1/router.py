from fastapi import APIRouter

from backend.app.api.v1.endpoints.health import router as health_router
from backend.app.api.v1.endpoints.inventory import router as inventory_router
from backend.app.api.v1.endpoints.transactions import router as transactions_router
from backend.app.api.v1.endpoints.purchasing import router as purchasing_router
from backend.app.api.v1.endpoints.suppliers import router as suppliers_router
from backend.app.api.v1.endpoints.order_schedules import router as order_schedules_router
from backend.app.api.v1.endpoints.dashboard import router as dashboard_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(inventory_router, tags=["inventory"])
router.include_router(transactions_router, tags=["transactions"])
router.include_router(purchasing_router, tags=["purchasing"])
router.include_router(suppliers_router, tags=["suppliers"])
router.include_router(order_schedules_router, tags=["order_schedules"])
router.include_router(dashboard_router, tags=["dashboard"])
