from backend.app.db.models.core_types import Role
from backend.services.auth import Actor


def test_health(client):
    r = client.get("/v1/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_missing_identity_headers_is_401(client):
    assert client.get("/v1/inventory").status_code == 401
    assert client.get("/v1/inventory", headers={"X-User-Name": "x", "X-User-Role": "Janitor"}).status_code == 401


def test_inventory_crud_and_low_stock(client, auth, storekeeper, admin, viewer):
    r = client.post(
        "/v1/inventory",
        json={"building": "Block A", "part_name": "Fan Belt", "min_stock": 3, "quantity_on_hand": 1},
        headers=auth(storekeeper),
    )
    assert r.status_code == 201, r.text
    item = r.json()
    assert item["is_low_stock"] is True
    assert item["effective_reorder_point"] == 3

    low = client.get("/v1/inventory/low-stock", headers=auth(viewer)).json()
    assert [i["id"] for i in low] == [item["id"]]

    r = client.put(f"/v1/inventory/{item['id']}", json={"room": "AHU 2"}, headers=auth(storekeeper))
    assert r.json()["room"] == "AHU 2"

    r = client.delete(f"/v1/inventory/{item['id']}", headers=auth(storekeeper))
    assert r.status_code == 403
    assert r.json()["error"] == "AuthorizationError"

    assert client.delete(f"/v1/inventory/{item['id']}", headers=auth(admin)).status_code == 204
    assert client.get(f"/v1/inventory/{item['id']}", headers=auth(viewer)).status_code == 404


def test_transaction_errors_map_to_http(client, auth, storekeeper, technician, make_item, db_session):
    item = make_item("Compressor", qty=2)
    db_session.commit()

    body = {"txn_type": "ISSUE", "lines": [{"inventory_id": item.id, "qty": 5}]}
    r = client.post("/v1/transactions", json=body, headers=auth(storekeeper))
    assert r.status_code == 400
    assert r.json() == {"detail": "Insufficient stock for Compressor. Available: 2", "error": "InsufficientStockError"}

    r = client.post("/v1/transactions", json=body, headers=auth(technician))
    assert r.status_code == 403

    body["lines"][0]["qty"] = 2
    r = client.post("/v1/transactions", json=body, headers=auth(storekeeper))
    assert r.status_code == 201
    assert r.json()["lines"][0]["after_qty"] == 0

    body["lines"] = []
    assert client.post("/v1/transactions", json=body, headers=auth(storekeeper)).status_code == 422


def test_null_for_required_fields_is_422(client, auth, admin, storekeeper, make_item, db_session):
    item = make_item("Compressor", qty=10)
    db_session.commit()

    body = {"txn_type": "ISSUE", "lines": [{"inventory_id": item.id, "qty": 2}]}
    txn = client.post("/v1/transactions", json=body, headers=auth(storekeeper)).json()

    r = client.put(f"/v1/transactions/{txn['id']}", json={"remark": None}, headers=auth(admin))
    assert r.status_code == 422

    r = client.put(f"/v1/inventory/{item.id}", json={"part_name": None}, headers=auth(storekeeper))
    assert r.status_code == 422

    r = client.post(
        "/v1/inventory/bulk-update", json={"ids": [item.id], "fields": ["status"]}, headers=auth(storekeeper)
    )
    assert r.status_code == 422

    row = client.get(f"/v1/inventory/{item.id}", headers=auth(storekeeper)).json()
    assert (row["part_name"], row["status"], row["quantity_on_hand"]) == ("Compressor", "Spare", 8)


def test_purchasing_flow_over_http(client, auth, admin, storekeeper, make_item, make_supplier, db_session):
    supplier = make_supplier("Cooling Systems Inc.")
    item = make_item("Sensor", qty=2, reorder_point=10, preferred_supplier_id=supplier.id)
    db_session.commit()

    suggestions = client.get("/v1/purchasing/suggestions", headers=auth(storekeeper)).json()
    assert [(s["inventory_id"], s["suggested_qty"]) for s in suggestions] == [(item.id, 13)]

    grouped = client.get("/v1/purchasing/suggestions?grouped=true", headers=auth(storekeeper)).json()
    assert grouped[0]["total_suggested_qty"] == 13

    pr = client.post(
        "/v1/purchasing/pr/from-suggestions", json={"inventory_ids": [item.id]}, headers=auth(storekeeper)
    ).json()

    r = client.post(f"/v1/purchasing/pr/{pr['id']}/approve", headers=auth(storekeeper))
    assert r.status_code == 403
    r = client.post(f"/v1/purchasing/pr/{pr['id']}/approve", headers=auth(admin))
    assert r.json()["status"] == "APPROVED"
    r = client.post(f"/v1/purchasing/pr/{pr['id']}/approve", headers=auth(admin))
    assert r.status_code == 409

    po = client.post(f"/v1/purchasing/pr/{pr['id']}/convert-to-po", headers=auth(storekeeper)).json()
    assert po["supplier_name"] == "Cooling Systems Inc."

    r = client.post(
        f"/v1/purchasing/po/{po['id']}/receive",
        json={"receipts": [{"inventory_id": item.id, "qty_received": 14}]},
        headers=auth(storekeeper),
    )
    assert r.status_code == 400
    assert r.json()["error"] == "OverReceiptError"

    r = client.post(f"/v1/purchasing/po/{po['id']}/receive", json={"receipts": []}, headers=auth(storekeeper))
    assert r.json()["error"] == "EmptyReceiptError"

    r = client.post(
        f"/v1/purchasing/po/{po['id']}/receive",
        json={"receipts": [{"inventory_id": item.id, "qty_received": 13}]},
        headers=auth(storekeeper),
    )
    assert r.json()["status"] == "CLOSED"
    assert client.get(f"/v1/inventory/{item.id}", headers=auth(storekeeper)).json()["quantity_on_hand"] == 15


def test_order_schedule_endpoints(client, auth, storekeeper, make_item, make_supplier, db_session):
    supplier = make_supplier()
    item = make_item(qty=0)
    db_session.commit()

    r = client.post(
        "/v1/order-schedules",
        json={
            "scheduled_date": "2026-03-12",
            "supplier_id": supplier.id,
            "lines": [{"inventory_id": item.id, "qty": 4}],
        },
        headers=auth(storekeeper),
    )
    assert r.status_code == 201, r.text
    schedule_id = r.json()["id"]

    rows = client.get("/v1/order-schedules?today=2026-03-10", headers=auth(storekeeper)).json()
    assert rows[0]["display_state"] == "Due Soon"

    r = client.post(f"/v1/order-schedules/{schedule_id}/cancel", headers=auth(storekeeper))
    assert r.json()["display_state"] == "Cancelled"
    r = client.post(
        f"/v1/order-schedules/{schedule_id}/reschedule",
        json={"scheduled_date": "2026-04-01"},
        headers=auth(storekeeper),
    )
    assert r.status_code == 409


def test_supplier_endpoints(client, auth, storekeeper):
    r = client.post("/v1/suppliers", json={"name": "Global HVAC Parts"}, headers=auth(storekeeper))
    assert r.status_code == 201
    assert client.post("/v1/suppliers", json={"name": "Global HVAC Parts"}, headers=auth(storekeeper)).status_code == 409

    r = client.post(
        "/v1/suppliers/bulk-update",
        json={"ids": [r.json()["id"], 999], "fields": ["active"], "active": False},
        headers=auth(storekeeper),
    )
    assert r.json()["failed"] == [{"id": 999, "error": "Supplier 999 not found"}]

    r = client.post("/v1/suppliers/bulk-update", json={"ids": [999], "fields": ["active"]}, headers=auth(storekeeper))
    assert r.status_code == 422


def test_dashboard_summary(client, auth):
    viewer = Actor(name="board", role=Role.viewer)
    r = client.get("/v1/dashboard/summary", headers=auth(viewer))
    assert r.status_code == 200
    assert r.json()["total_items"] == 0
