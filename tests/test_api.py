from fastapi.testclient import TestClient

from src.app.app import app


def test_health():
    r = TestClient(app).get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_dashboard_requires_admin():
    r = TestClient(app).get("/dashboard/api/restaurants/r1/menu")
    assert r.status_code == 401
    r = TestClient(app).get("/dashboard/api/restaurants/r1/menu", auth=("admin", "wrong"))
    assert r.status_code == 401


def test_empty_menu_loads_as_empty_catalog(client):
    r = client.get("/dashboard/api/restaurants/r1/menu")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["categories"] == []
    assert data["rows"] == []


def test_save_rows_then_load(client):
    rows = [
        {"category": "Burgers", "name": "Classic", "price": "450"},
        {"category": " burgers ", "name": "Double", "price": 600, "description": "two patties"},
        {"name": "Tea", "price": "PKR 80"},
    ]
    r = client.post("/dashboard/api/restaurants/r1/menu", json={"rows": rows})
    assert r.status_code == 200, r.text
    cats = r.json()["data"]["categories"]
    assert cats == [
        {"name": "Burgers", "items": [
            {"id": "burgers-classic-1", "name": "Classic", "price": 450},
            {"id": "burgers-double-2", "name": "Double", "price": 600, "description": "two patties"},
        ]},
        {"name": "Uncategorized", "items": [{"id": "uncategorized-tea-1", "name": "Tea", "price": 80}]},
    ]

    loaded = client.get("/dashboard/api/restaurants/r1/menu").json()["data"]
    assert loaded["categories"] == cats
    assert [row["id"] for row in loaded["rows"]] == ["burgers-classic-1", "burgers-double-2", "uncategorized-tea-1"]
    assert loaded["updated_at"]


def test_save_blocked_by_invalid_row(client):
    rows = [{"name": "Tea", "price": "80"}, {"name": "", "price": "10"}]
    r = client.post("/dashboard/api/restaurants/r1/menu", json={"rows": rows})
    assert r.status_code == 422
    body = r.json()
    assert body["ok"] is False
    assert body["issues"] == ["row 2: name is required"]


def test_save_nothing(client):
    r = client.post("/dashboard/api/restaurants/r1/menu", json={"rows": []})
    assert r.status_code == 422
    assert r.json()["error"] == "No items to save yet."


def test_save_legacy_flat_json_is_stored_grouped(client, store):
    legacy = [{"id": "1", "name": "Tea", "price": 50}, {"id": "2", "name": "Coffee", "price": 120}]
    r = client.post("/dashboard/api/restaurants/r1/menu", json={"menu_items_json": legacy})
    assert r.status_code == 200, r.text
    assert store.load_menu("r1")["menu_items_json"] == [
        {"name": "Uncategorized", "items": [
            {"id": "1", "name": "Tea", "price": 50},
            {"id": "2", "name": "Coffee", "price": 120},
        ]},
    ]


def test_save_rejects_malformed_canonical_json(client):
    bad = [{"name": "Pizza", "items": [{"id": "", "name": "Fajita", "price": 1}]}]
    r = client.post("/dashboard/api/restaurants/r1/menu", json={"menu_items_json": bad})
    assert r.status_code == 422


def test_legacy_stored_menu_loads_as_uncategorized(client, store):
    store.save_menu("r9", [{"id": "a", "name": "Samosa", "price": 40}])
    data = client.get("/dashboard/api/restaurants/r9/menu").json()["data"]
    assert data["categories"] == [{"name": "Uncategorized", "items": [{"id": "a", "name": "Samosa", "price": 40}]}]


def test_import_preview_does_not_save(client, store):
    raw = b"category,item_name,price\nBurgers,Classic,450\nBurgers,,100\n"
    r = client.post(
        "/dashboard/api/restaurants/r1/menu/import",
        files={"file": ("menu.csv", raw, "text/csv")},
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["count"] == 1
    assert body["saved"] is False
    assert body["rows"][0]["id"] == "burgers-classic-1"
    assert store.load_menu("r1") is None


def test_import_and_save(client, store, make_xlsx):
    raw = make_xlsx([["Item Name", "Price"], ["Chai", 80], ["Lassi", "150"]])
    r = client.post(
        "/dashboard/api/restaurants/r1/menu/import?save=true",
        files={"file": ("menu.xlsx", raw, "application/octet-stream")},
    )
    assert r.status_code == 200, r.text
    stored = store.load_menu("r1")["menu_items_json"]
    assert [it["name"] for it in stored[0]["items"]] == ["Chai", "Lassi"]


def test_import_errors_are_reported(client):
    r = client.post(
        "/dashboard/api/restaurants/r1/menu/import",
        files={"file": ("menu.pdf", b"%PDF", "application/pdf")},
    )
    assert r.status_code == 400
    assert r.json() == {"ok": False, "error": "Only .csv and .xlsx files are supported."}

    r = client.post(
        "/dashboard/api/restaurants/r1/menu/import",
        files={"file": ("menu.csv", b"item_name,price\n", "text/csv")},
    )
    assert r.status_code == 400
    assert "no valid rows found" in r.json()["error"].lower()


def test_templates(client):
    r = client.get("/dashboard/api/menu-template.csv")
    assert r.status_code == 200
    assert r.text.splitlines()[0] == "category,item_name,price,description"
    assert "menu-template.csv" in r.headers["content-disposition"]
    r = client.get("/dashboard/api/zone-template.csv")
    assert r.text.startswith("city,zone_name,delivery_fee")


def test_zones_save_and_list(client):
    r = client.post("/dashboard/api/restaurants/r1/delivery-zones", json={
        "city": "Karachi",
        "zones": [
            {"zone_name": "Gulshan", "delivery_fee": 150},
            {"area": "DHA", "deliveryFee": "200", "minOrder": "1000"},
        ],
    })
    assert r.status_code == 200, r.text
    assert r.json() == {"ok": True, "count": 2, "cities": ["Karachi"]}

    r = client.post("/dashboard/api/restaurants/r1/delivery-zones", json={
        "city": "Islamabad", "zone_name": "F-6", "delivery_fee": 100,
    })
    assert r.status_code == 200, r.text

    zones = client.get("/dashboard/api/restaurants/r1/delivery-zones").json()["data"]
    assert [(z["city"], z["zone_name"], z["delivery_fee"], z["min_order_amount"]) for z in zones] == [
        ("Islamabad", "F-6", 100, 0),
        ("Karachi", "DHA", 200, 1000),
        ("Karachi", "Gulshan", 150, 0),
    ]


def test_zones_invalid_payload(client):
    r = client.post("/dashboard/api/restaurants/r1/delivery-zones", json={
        "city": "Karachi", "zones": [{"zone_name": "Gulshan", "delivery_fee": "free"}],
    })
    assert r.status_code == 422
    assert r.json()["ok"] is False


def test_zone_failure_names_city(client):
    from src.app.dashboard.base import get_store

    class BrokenStore:
        def replace_city_zones(self, restaurant_id, city, zone_names, zones):
            raise RuntimeError("db down")

    app.dependency_overrides[get_store] = lambda: BrokenStore()
    r = client.post("/dashboard/api/restaurants/r1/delivery-zones", json={
        "city": "Karachi", "zones": [{"zone_name": "Gulshan", "delivery_fee": 1}],
    })
    assert r.status_code == 500
    assert r.json()["city"] == "Karachi"
    assert r.json()["replaced"] == []


def test_zone_import(client):
    r = client.post(
        "/dashboard/api/restaurants/r1/delivery-zones/import?save=true",
        files={"file": ("zones.csv", b"zone_name,delivery_fee\nGulshan,150\nJohar,120\n", "text/csv")},
        data={"city": "Karachi"},
    )
    assert r.status_code == 200, r.text
    assert r.json()["count"] == 2
    names = [z["zone_name"] for z in client.get("/dashboard/api/restaurants/r1/delivery-zones").json()["data"]]
    assert names == ["Gulshan", "Johar"]


def test_area_picker(client):
    r = client.post("/dashboard/api/delivery-zones/areas", json={
        "city": "Karachi", "pending": [], "selected": ["Gulshan", "DHA"],
    })
    assert r.status_code == 200
    pending = r.json()["pending"]
    r = client.post("/dashboard/api/delivery-zones/areas", json={
        "city": "Karachi", "pending": pending, "custom": "Bahria Town",
    })
    assert r.json()["selected"] == ["Gulshan", "DHA", "Bahria Town"]
    r = client.post("/dashboard/api/delivery-zones/areas", json={
        "city": "Karachi", "pending": pending, "custom": "dha",
    })
    assert r.status_code == 422
    assert r.json()["error"] == "Area already exists."


def test_cities(client):
    data = client.get("/dashboard/api/delivery-zones/cities").json()["data"]
    assert "Gulshan" in data["Karachi"]


def test_logs_endpoint(client):
    client.post("/dashboard/api/restaurants/r1/menu", json={"rows": [{"name": "Tea", "price": 50}]})
    r = client.get("/dashboard/api/logs", params={"q": "menu saved"})
    assert r.status_code == 200
    assert r.json()["ok"] is True


def test_save_grouped_json_with_empty_first_category(client, store):
    menu = [
        {"name": "Deals", "items": []},
        {"name": "Burgers", "items": [{"id": "b1", "name": "Classic", "price": 450}]},
    ]
    r = client.post("/dashboard/api/restaurants/r1/menu", json={"menu_items_json": menu})
    assert r.status_code == 200, r.text
    assert store.load_menu("r1")["menu_items_json"] == [
        {"name": "Burgers", "items": [{"id": "b1", "name": "Classic", "price": 450}]},
    ]


def test_save_legacy_flat_json_without_ids(client, store):
    legacy = [{"name": "Tea", "price": 50}, {"name": "Coffee", "price": 120}]
    r = client.post("/dashboard/api/restaurants/r1/menu", json={"menu_items_json": legacy})
    assert r.status_code == 200, r.text
    items = store.load_menu("r1")["menu_items_json"][0]["items"]
    assert [(it["id"], it["name"]) for it in items] == [("1", "Tea"), ("2", "Coffee")]


def test_area_picker_ignores_unusable_selection(client):
    r = client.post("/dashboard/api/delivery-zones/areas", json={
        "city": "Karachi", "pending": [], "selected": 5,
    })
    assert r.status_code == 200
    assert r.json() == {"ok": True, "pending": [], "selected": []}
