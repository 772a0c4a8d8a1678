import json
import threading
from datetime import date, timedelta

from editor import app as flask_app


def test_products_lists_seeded_inventory(client, configure_test_env):
    response = client.get("/products")
    assert response.status_code == 200
    products = response.get_json()
    assert len(products) == 10
    assert products[0]["index"] == 0
    assert products[0]["name"] == "Apples"
    assert products[0]["type"] == "perishable"
    assert configure_test_env.exists()


def test_create_product_writes_through(client, empty_inventory):
    response = client.post(
        "/products",
        json={"name": "Widget", "price": 10.0, "quantity": 5, "discount": 0.1},
    )
    assert response.status_code == 201
    payload = response.get_json()
    assert payload == {"index": 0, "save": "saved"}

    saved = json.loads(empty_inventory.read_text(encoding="utf-8"))
    assert saved == [{"type": "non-perishable", "name": "Widget", "price": 10.0, "quantity": 5, "discount": 0.1}]

    item = client.get("/products/0").get_json()
    assert item["total_value"] == "45.00"


def test_create_perishable_requires_expiration(client, empty_inventory):
    response = client.post(
        "/products",
        json={"type": "perishable", "name": "Milk", "price": 3.0, "quantity": 4},
    )
    assert response.status_code == 400
    assert "error" in response.get_json()


def test_create_product_rejects_invalid_values(client, empty_inventory):
    for body in (
        {"name": "", "price": 1, "quantity": 1},
        {"name": "Widget", "price": -1, "quantity": 1},
        {"name": "Widget", "price": 1, "quantity": -3},
        {"name": "Widget", "price": 1, "quantity": 1, "discount": 1.5},
        {"name": "Widget", "price": 1, "quantity": 1, "type": "product"},
    ):
        response = client.post("/products", json=body)
        assert response.status_code == 400, body
    assert json.loads(empty_inventory.read_text(encoding="utf-8")) == []


def test_summary_matches_widget_and_milk_scenario(client, empty_inventory):
    tomorrow = (date.today() + timedelta(days=1)).isoformat()
    client.post("/products", json={"name": "Widget", "price": 10.0, "quantity": 5, "discount": 0.1})
    client.post(
        "/products",
        json={"type": "perishable", "name": "Milk", "price": 3.0, "quantity": 4, "discount": 0, "expirationDate": tomorrow},
    )

    summary = client.get("/summary").get_json()
    assert summary == {
        "total_quantity": 9,
        "total_gross": "62.00",
        "total_with_discount": "51.00",
        "total_net": "43.35",
    }
    milk = client.get("/products/search", query_string={"name": "MILK"}).get_json()
    assert milk["index"] == 1
    assert milk["total_value"] == "6.00"


def test_search_missing_product(client):
    assert client.get("/products/search", query_string={"name": "Durian"}).status_code == 404
    assert client.get("/products/search").status_code == 400


def test_delete_product_and_out_of_range(client):
    response = client.delete("/products/0")
    assert response.status_code == 200
    assert response.get_json() == {"ok": True}
    assert len(client.get("/products").get_json()) == 9

    response = client.delete("/products/9")
    assert response.status_code == 404
    assert len(client.get("/products").get_json()) == 9


def test_get_product_out_of_range(client):
    assert client.get("/products/42").status_code == 404


def test_corrupt_store_recovers_from_backup(client, configure_test_env):
    client.get("/products")
    client.delete("/products/0")
    flask_app._STORE.create_backup()
    configure_test_env.write_text("{corrupt", encoding="utf-8")

    flask_app._STORE.reload()

    products = client.get("/products").get_json()
    assert len(products) == 9
    assert products[0]["name"] == "Bananas"
    assert json.loads(configure_test_env.read_text(encoding="utf-8"))[0]["name"] == "Bananas"


def test_refresh_endpoint_resets_to_template(client, empty_inventory):
    response = client.post("/refresh")
    assert response.status_code == 200
    assert response.get_json() == {"ok": True, "count": 10}
    assert list(empty_inventory.parent.glob("inventory.json.before-refresh-*.bak"))


def test_store_is_built_once_under_concurrent_first_access():
    results = []

    def worker():
        results.append(flask_app.get_store())

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 8
    assert all(store is results[0] for store in results)


def test_security_headers(client):
    response = client.get("/products")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_form_post_adds_product_with_percent_discount(client, empty_inventory):
    response = client.post(
        "/products/form",
        data={"name": "Widget", "price": "10", "quantity": "5", "discount": "25", "type": "non-perishable"},
    )
    assert response.status_code == 302
    saved = json.loads(empty_inventory.read_text(encoding="utf-8"))
    assert saved[0]["discount"] == 0.25

    page = client.get("/")
    assert b"Product added" in page.data
    assert b"Widget" in page.data


def test_form_post_with_bad_discount_flashes_error(client, empty_inventory):
    client.post("/products/form", data={"name": "Widget", "price": "10", "quantity": "5", "discount": "lots"})
    page = client.get("/")
    assert b"Unable to add product" in page.data
    assert json.loads(empty_inventory.read_text(encoding="utf-8")) == []


def test_form_delete_redirects_with_flash(client):
    response = client.post("/products/0/delete")
    assert response.status_code == 302
    page = client.get("/")
    assert b"Product removed" in page.data
    assert b"Apples" not in page.data


def test_create_returns_index_of_appended_product(client):
    response = client.post("/products", json={"name": "Widget", "price": 1, "quantity": 1})
    assert response.status_code == 201
    index = response.get_json()["index"]
    assert index == 10
    assert client.get(f"/products/{index}").get_json()["name"] == "Widget"
