"""Tests for Product API endpoints."""

PRODUCT = {
    "name": "Beras Premium 5kg",
    "category": "Sembako",
    "sku": "BRS001",
    "cost_price": 65000,
    "sell_price": 75000,
    "stock": 25,
    "min_stock": 5,
}


def create(client, **overrides):
    return client.post("/api/v1/products/", json={**PRODUCT, **overrides})


def test_create_product(client):
    """Test creating a new product."""
    response = create(client)

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Beras Premium 5kg"
    assert data["sell_price"] == 75000
    assert data["stock"] == 25
    assert data["is_low_stock"] is False
    assert data["stock_status"] == "in_stock"
    assert "id" in data
    assert "created_at" in data


def test_create_then_read_back_preserves_fields(client):
    """Every submitted field comes back unchanged; only id and timestamps are added."""
    product_id = create(client).json()["id"]

    data = client.get(f"/api/v1/products/{product_id}").json()

    for field, value in PRODUCT.items():
        assert data[field] == value


def test_create_product_negative_price(client):
    """Test creating product with negative price fails."""
    response = create(client, sell_price=-10)

    assert response.status_code == 422


def test_create_product_negative_stock(client):
    """Test creating product with negative stock fails."""
    response = create(client, stock=-5)

    assert response.status_code == 422


def test_create_product_blank_fields(client):
    """Name, SKU and category must not be empty or whitespace."""
    assert create(client, name="").status_code == 422
    assert create(client, sku="   ").status_code == 422
    assert create(client, category="").status_code == 422


def test_sku_is_not_unique(client):
    """Two products may share a SKU."""
    assert create(client).status_code == 201
    assert create(client, name="Beras Premium 10kg").status_code == 201


def test_get_product_not_found(client):
    """Test getting non-existent product returns 404."""
    response = client.get("/api/v1/products/9999")

    assert response.status_code == 404


def test_list_products(client):
    """Test listing products with pagination."""
    for i in range(15):
        create(client, name=f"Product {i}", sku=f"P{i:03d}")

    response = client.get("/api/v1/products/?page=1&page_size=10")

    assert response.status_code == 200
    data = response.json()
    assert len(data["items"]) == 10
    assert data["total"] == 15
    assert data["total_pages"] == 2


def test_search_products_by_name_sku_and_category(client):
    """Search matches name, SKU or category, case-insensitively."""
    create(client, name="Marlboro Red", category="Rokok", sku="MRL001")
    create(client, name="Aqua 600ml", category="Minuman", sku="AQU001")
    create(client, name="Minyak Goreng 1L", category="Sembako", sku="MIG001")

    by_name = client.get("/api/v1/products/?search=marlboro").json()
    by_sku = client.get("/api/v1/products/?search=aqu0").json()
    by_category = client.get("/api/v1/products/?search=SEMBAKO").json()

    assert [p["sku"] for p in by_name["items"]] == ["MRL001"]
    assert [p["sku"] for p in by_sku["items"]] == ["AQU001"]
    assert [p["sku"] for p in by_category["items"]] == ["MIG001"]


def test_filter_by_category_and_stock(client):
    """The POS grid shows only products with stock, optionally per category."""
    create(client, name="Aqua", category="Minuman", sku="A1", stock=0)
    create(client, name="Teh", category="Minuman", sku="T1", stock=3)
    create(client, name="Gula", category="Sembako", sku="G1", stock=3)

    data = client.get("/api/v1/products/?category=Minuman&in_stock_only=true").json()

    assert data["total"] == 1
    assert data["items"][0]["name"] == "Teh"


def test_list_categories(client):
    create(client, category="Sembako", sku="S1")
    create(client, category="Minuman", sku="M1")
    create(client, category="Sembako", sku="S2")

    response = client.get("/api/v1/products/categories")

    assert response.json() == ["Minuman", "Sembako"]


def test_low_stock_products(client):
    """Products at or below min_stock are listed, lowest stock first."""
    create(client, name="Plenty", sku="P1", stock=50, min_stock=10)
    create(client, name="At threshold", sku="P2", stock=10, min_stock=10)
    create(client, name="Empty", sku="P3", stock=0, min_stock=5)

    data = client.get("/api/v1/products/low-stock").json()

    assert [p["name"] for p in data] == ["Empty", "At threshold"]
    assert data[0]["stock_status"] == "out_of_stock"
    assert data[1]["stock_status"] == "low_stock"


def test_update_product(client):
    """Test updating a product."""
    product_id = create(client).json()["id"]

    response = client.put(
        f"/api/v1/products/{product_id}",
        json={"name": "Beras Super 5kg", "sell_price": 80000}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Beras Super 5kg"
    assert data["sell_price"] == 80000
    assert data["stock"] == 25  # Stock should remain unchanged


def test_update_rejects_negative_stock(client):
    product_id = create(client).json()["id"]

    response = client.put(f"/api/v1/products/{product_id}", json={"stock": -1})

    assert response.status_code == 422
    assert client.get(f"/api/v1/products/{product_id}").json()["stock"] == 25


def test_update_product_not_found(client):
    response = client.put("/api/v1/products/9999", json={"name": "Ghost"})

    assert response.status_code == 404


def test_delete_product(client):
    """Test deleting a product."""
    product_id = create(client).json()["id"]

    response = client.delete(f"/api/v1/products/{product_id}")
    assert response.status_code == 204

    get_response = client.get(f"/api/v1/products/{product_id}")
    assert get_response.status_code == 404


def test_delete_product_not_found(client):
    assert client.delete("/api/v1/products/9999").status_code == 404


def test_get_product_cached_falls_back_to_database(client):
    """With the cache disabled the cached endpoint still answers from the database."""
    product_id = create(client).json()["id"]

    response = client.get(f"/api/v1/products/{product_id}/cached")

    assert response.status_code == 200
    assert response.json()["sku"] == "BRS001"
    assert client.get("/api/v1/products/9999/cached").status_code == 404


def test_values_beyond_integer_columns_rejected(client):
    """Prices and stock must fit the 32-bit columns; oversized values never reach the database."""
    too_big = 2_147_483_648

    assert create(client, sell_price=too_big).status_code == 422
    assert create(client, cost_price=too_big).status_code == 422
    assert create(client, stock=too_big).status_code == 422

    product_id = create(client).json()["id"]
    assert client.put(f"/api/v1/products/{product_id}", json={"sell_price": too_big}).status_code == 422
