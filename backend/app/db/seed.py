from __future__ import annotations

from sqlalchemy import select, func

from backend.app.db.session import SessionLocal
from backend.app.db.models.models_v1 import InventoryItem, Supplier
from backend.app.db.models.core_types import Criticality, PartStatus
from backend.app.schemas.inventory import InventoryCreate
from backend.app.schemas.supplier import SupplierCreate
from backend.app.utils.logger import setup_logger
from backend.services import inventory, suppliers
from backend.services.auth import SYSTEM_ACTOR

logger = setup_logger(__name__)

SUPPLIERS = [
    SupplierCreate(
        name="Cooling Systems Inc.",
        email="sales@coolingsys.com",
        phone="+65 6777 1234",
        address="12 Tech Park, Singapore",
        remark="Primary compressor vendor",
    ),
    SupplierCreate(
        name="Global HVAC Parts",
        email="orders@globalhvac.com",
        phone="+65 6888 5678",
        address="45 Industry Way, Singapore",
        remark="Specialist in thermostats",
    ),
]

# (building, room, part_category, part_name, brand, qty, min_stock, criticality, supplier index)
PARTS = [
    ("Block A", "Plant Room 1", "Compressor", "Scroll Compressor 10HP", "Daikin", 2, 1, Criticality.high, 0),
    ("Block A", "Plant Room 1", "Filter", "Pleated Air Filter 24x24", "Camfil", 12, 10, Criticality.low, 1),
    ("Block A", "AHU Room 2", "Belt", "V-Belt B52", "Gates", 3, 4, Criticality.medium, 1),
    ("Block B", "Chiller Plant", "Sensor", "Chilled Water Temp Sensor", "Siemens", 0, 2, Criticality.high, 1),
    ("Block B", "Chiller Plant", "Valve", "Motorised Ball Valve DN25", "Belimo", 5, 2, None, 0),
    ("Block B", "FCU Level 3", "Thermostat", "Digital Room Thermostat", "Honeywell", 8, 5, Criticality.medium, 1),
]


def run_seed():
    db = SessionLocal()
    try:
        # 1) Suppliers
        by_name = {}
        for payload in SUPPLIERS:
            s = db.scalar(select(Supplier).where(Supplier.name == payload.name))
            if not s:
                s = suppliers.create_supplier(db, SYSTEM_ACTOR, payload)
            by_name[s.name] = s
        db.commit()

        # 2) Parts, only into an empty inventory
        if db.scalar(select(func.count(InventoryItem.id))):
            logger.info("Inventory not empty, parts seed skipped")
            return

        supplier_rows = [by_name[p.name] for p in SUPPLIERS]
        for building, room, category, name, brand, qty, min_stock, criticality, supp in PARTS:
            inventory.create_item(
                db,
                SYSTEM_ACTOR,
                InventoryCreate(
                    building=building,
                    room=room,
                    part_category=category,
                    part_name=name,
                    brand=brand,
                    status=PartStatus.spare,
                    criticality=criticality,
                    min_stock=min_stock,
                    preferred_supplier_id=supplier_rows[supp].id,
                    quantity_on_hand=qty,
                ),
            )
        db.commit()
        logger.info(f"SEED OK: {len(SUPPLIERS)} suppliers, {len(PARTS)} parts")
    finally:
        db.close()


if __name__ == "__main__":
    run_seed()
