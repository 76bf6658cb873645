from datetime import date


def seed(client):
    assert client.post("/parts", json={"part_id": 1, "part_name": "Membrane", "stock_quantity": 50,
                                       "unit_price": "300.00"}).status_code == 201
    assert client.post("/parts", json={"part_id": 2, "part_name": "1st stage", "stock_quantity": 3,
                                       "unit_price": "50.00"}).status_code == 201
    assert client.post("/customers", json={"customer_code": 1, "customer_name": "Ahmed", "address": "Tanta",
                                           "install_date": "2023-01-15",
                                           "mobile_numbers": ["01000000001"]}).status_code == 201
    assert client.post("/employees", json={"employee_mobile": "01100000001",
                                           "name": "Technician One"}).status_code == 201


def test_root(client):
    assert client.get("/").json()["service"] == "aquamisk"


def test_add_maintenance_and_fetch(client):
    seed(client)

    resp = client.post("/maintenance", json={
        "customer_code": 1, "recent_date": "2026-10-01", "upcoming_date": "2027-04-01",
        "comment": "Regular service", "employee_mobile": "01100000001",
    })
    assert resp.status_code == 201
    maintenance_id = resp.json()["maintenance_id"]

    body = client.get(f"/maintenance/{maintenance_id}").json()
    assert body["customer_code"] == 1
    assert body["upcoming_maintenance"] == "2027-04-01"
    assert body["part_usages"] == []


def test_add_maintenance_with_bad_dates(client):
    seed(client)

    resp = client.post("/maintenance", json={
        "customer_code": 1, "recent_date": "2026-10-01", "upcoming_date": "2026-10-01",
    })

    assert resp.status_code == 422
    assert resp.json()["error"] == "CheckViolation"


def test_add_maintenance_for_unknown_customer(client):
    resp = client.post("/maintenance", json={
        "customer_code": 9, "recent_date": "2026-10-01", "upcoming_date": "2027-04-01",
    })

    assert resp.status_code == 409
    assert resp.json()["error"] == "ForeignKeyViolation"


def test_unknown_maintenance_is_404(client):
    resp = client.get("/maintenance/999")

    assert resp.status_code == 404
    assert resp.json()["error"] == "NotFound"


def test_record_parts_and_average_cost(client):
    seed(client)
    maintenance_id = client.post("/maintenance", json={
        "customer_code": 1, "recent_date": "2026-10-01", "upcoming_date": "2027-04-01",
    }).json()["maintenance_id"]

    resp = client.get("/customers/1/average-maintenance-cost")
    assert resp.json() == {"customer_code": 1, "average_cost": None, "has_data": False}

    resp = client.post(f"/maintenance/{maintenance_id}/parts", json={"items": [{"part_id": 1, "quantity": 2}]})
    assert resp.status_code == 201
    assert resp.json()["usages"][0]["part_name"] == "Membrane"
    assert resp.json()["alerts"] == []
    assert client.get("/parts/1").json()["stock_quantity"] == 48

    resp = client.get("/customers/1/average-maintenance-cost")
    assert resp.json() == {"customer_code": 1, "average_cost": 600.0, "has_data": True}


def test_oversell_is_rejected(client):
    seed(client)
    maintenance_id = client.post("/maintenance", json={
        "customer_code": 1, "recent_date": "2026-10-01", "upcoming_date": "2027-04-01",
    }).json()["maintenance_id"]

    resp = client.post(f"/maintenance/{maintenance_id}/parts", json={"items": [{"part_id": 2, "quantity": 10}]})

    assert resp.status_code == 409
    assert resp.json()["error"] == "InsufficientStock"
    assert client.get("/parts/2").json()["stock_quantity"] == 3
    assert client.get(f"/maintenance/{maintenance_id}").json()["part_usages"] == []


def test_average_cost_for_unknown_customer(client):
    assert client.get("/customers/77/average-maintenance-cost").status_code == 404


def test_stock_update_returns_alert(client):
    seed(client)

    resp = client.patch("/parts/1/stock", json={"mode": "adjust", "quantity": -47})

    assert resp.status_code == 200
    body = resp.json()
    assert body["part"]["stock_quantity"] == 3
    assert [a["part_id"] for a in body["alerts"]] == [1]


def test_stock_update_cannot_go_negative(client):
    seed(client)

    resp = client.patch("/parts/2/stock", json={"mode": "set", "quantity": -1})

    assert resp.status_code == 409
    assert client.get("/parts/2").json()["stock_quantity"] == 3


def test_customers_and_mobile_numbers(client):
    seed(client)

    resp = client.post("/customers/1/mobile-numbers", json={"mobile_number": "01000000009"})
    assert resp.status_code == 201
    assert resp.json()["mobile_numbers"] == ["01000000001", "01000000009"]

    resp = client.post("/customers/1/mobile-numbers", json={"mobile_number": "01000000009"})
    assert resp.status_code == 409
    assert resp.json()["error"] == "UniquenessConflict"

    assert client.post("/customers/55/mobile-numbers", json={"mobile_number": "1"}).status_code == 409


def test_delete_customer(client):
    seed(client)
    client.post("/customers", json={"customer_code": 2, "customer_name": "Mona"})
    client.post("/maintenance", json={
        "customer_code": 1, "recent_date": "2026-10-01", "upcoming_date": "2027-04-01",
    })

    assert client.delete("/customers/1").status_code == 409
    assert client.delete("/customers/2").status_code == 204
    assert client.get("/customers/2").status_code == 404


def test_delete_employee(client):
    seed(client)

    assert client.delete("/employees/01100000001").status_code == 204
    assert client.delete("/employees/01100000001").status_code == 404


def test_customers_with_maintenance_this_month(client):
    seed(client)
    client.post("/customers", json={"customer_code": 2, "customer_name": "Mona", "address": "Cairo"})
    for customer_code, recent, upcoming in [(1, "2026-04-03", "2026-10-03"), (1, "2026-04-20", "2026-10-20"),
                                            (2, "2026-05-01", "2026-11-01")]:
        client.post("/maintenance", json={
            "customer_code": customer_code, "recent_date": recent, "upcoming_date": upcoming,
        })

    resp = client.get("/customers/maintenance-this-month", params={"today": "2026-10-18"})

    assert resp.status_code == 200
    assert resp.json() == [{"customer_code": 1, "customer_name": "Ahmed", "address": "Tanta"}]


def test_reports(client):
    seed(client)
    maintenance_id = client.post("/maintenance", json={
        "customer_code": 1, "recent_date": "2026-10-01", "upcoming_date": "2027-04-01", "comment": "Filters",
    }).json()["maintenance_id"]
    client.post(f"/maintenance/{maintenance_id}/parts", json={"items": [{"part_id": 1, "quantity": 2}]})

    low = client.get("/reports/low-stock").json()
    assert low["threshold"] == 10
    assert [p["part_id"] for p in low["parts"]] == [2]

    # 48 * 300 + 3 * 50
    assert client.get("/reports/inventory-value").json() == {"total_inventory_value": 14550.0}
    assert client.get("/reports/part-usage").json() == [{"part_id": 1, "part_name": "Membrane", "total_used": 2}]
    assert client.get("/reports/most-used-parts").json() == [
        {"part_id": 1, "part_name": "Membrane", "usage_count": 1},
    ]

    upcoming = client.get("/reports/upcoming-maintenance",
                          params={"customer_name": "Ahmed", "today": date(2026, 10, 18).isoformat()}).json()
    assert upcoming == [{"maintenance_id": maintenance_id, "customer_name": "Ahmed",
                         "upcoming_maintenance": "2027-04-01", "comment": "Filters"}]

    summary = client.get("/reports/summary").json()
    assert summary["parts"] == 2
    assert summary["critical_stock_parts"] == 1

    alerts = client.get("/reports/stock-alerts").json()
    assert [a["part_id"] for a in alerts["alerts"]] == [2]
