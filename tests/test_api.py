"""End-to-end scenarios against an in-memory SQLite database."""

PRODUCTS_URL = "/api/v1/products/"

MILK = {"name": "Milk", "category": "Dairy", "unit": "Liter", "price": 2.5, "quantity": 10}


def test_create_product(client):
    response = client.post(PRODUCTS_URL, json=MILK)

    assert response.status_code == 201
    body = response.json()
    assert isinstance(body["id"], int)
    assert body["id"] > 0
    for key, value in MILK.items():
        assert body[key] == value
    assert body["created_at"]
    assert body["updated_at"]
    assert "expiry_date" not in body


def test_created_product_is_readable(client):
    product_id = client.post(PRODUCTS_URL, json=MILK).json()["id"]

    response = client.get(f"{PRODUCTS_URL}{product_id}")

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == product_id
    assert body["name"] == "Milk"
    assert body["created_at"]
    assert body["updated_at"]
    assert "expiry_date" not in body


def test_expiry_date_round_trip(client):
    product_id = client.post(
        PRODUCTS_URL, json={**MILK, "expiry_date": "2025-12-31T00:00:00Z"}).json()["id"]

    body = client.get(f"{PRODUCTS_URL}{product_id}").json()

    assert body["expiry_date"].startswith("2025-12-31T00:00:00")


def test_expiry_offset_is_kept_on_read(client):
    product_id = client.post(
        PRODUCTS_URL, json={**MILK, "expiry_date": "2025-12-31T00:00:00+05:00"}).json()["id"]

    body = client.get(f"{PRODUCTS_URL}{product_id}").json()

    assert body["expiry_date"] == "2025-12-30T19:00:00Z"


def test_list_empty(client):
    response = client.get(PRODUCTS_URL)

    assert response.status_code == 200
    assert response.json() == []


def test_list_products(client):
    client.post(PRODUCTS_URL, json=MILK)
    client.post(PRODUCTS_URL, json={**MILK, "name": "Cheese", "unit": "kg"})

    names = [p["name"] for p in client.get(PRODUCTS_URL).json()]

    assert names == ["Milk", "Cheese"]


def test_invalid_json_creates_nothing(client):
    response = client.post(
        PRODUCTS_URL, content="not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert client.get(PRODUCTS_URL).json() == []


def test_get_missing_product(client):
    assert client.get(f"{PRODUCTS_URL}424242").status_code == 404


def test_replace_product(client):
    product_id = client.post(PRODUCTS_URL, json=MILK).json()["id"]

    response = client.put(f"{PRODUCTS_URL}{product_id}", json={**MILK, "quantity": 3})

    assert response.status_code == 200
    assert response.json()["id"] == product_id
    assert response.json()["created_at"]
    assert response.json()["updated_at"]
    assert client.get(f"{PRODUCTS_URL}{product_id}").json()["quantity"] == 3


def test_replace_missing_product_succeeds(client):
    response = client.put(f"{PRODUCTS_URL}424242", json=MILK)

    assert response.status_code == 200
    assert response.json()["id"] == 424242
    assert client.get(f"{PRODUCTS_URL}424242").status_code == 404


def test_delete_then_get(client):
    product_id = client.post(PRODUCTS_URL, json=MILK).json()["id"]

    response = client.delete(f"{PRODUCTS_URL}{product_id}")

    assert response.status_code == 204
    assert client.get(f"{PRODUCTS_URL}{product_id}").status_code == 404


def test_delete_missing_product_succeeds(client):
    assert client.delete(f"{PRODUCTS_URL}424242").status_code == 204


def test_health(client):
    response = client.get("/health", params={"echo": "ping"})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == 200
    assert body["status_message"] == "OK"
    assert body["echo"] == "ping"
    assert body["path_echo"] is None


def test_health_path_echo(client):
    assert client.get("/health/hello").json()["path_echo"] == "hello"


def test_importing_main_builds_no_app():
    import main

    assert not hasattr(main, "app")
