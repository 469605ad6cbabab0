"""
HTTP tests for the ledger routes: products, purchases, sales and the
dashboard.
"""


def _create(client, headers, **body):
    return client.post("/api/products", json=body, headers=headers)


def _receive(client, headers, product_id, quantity, **extra):
    return client.post(
        "/api/purchases",
        json={"productId": product_id, "quantity": quantity, **extra},
        headers=headers,
    )


class TestProductRoutes:

    def test_insert_product(self, client, admin_headers):
        resp = _create(client, admin_headers, productId="P1", name="Paracetamol", salePrice=10)

        assert resp.status_code == 201
        assert resp.json["success"] is True
        assert resp.json["message"] == "Product inserted successfully"
        assert resp.json["productId"] == "P1"

        resp = client.get("/api/products/P1", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["quantity"] == 0
        assert resp.json["salePrice"] == 10

        resp = client.get("/api/stock/P1", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["quantityAvailable"] == 0

    def test_insert_generates_id(self, client, admin_headers):
        resp = _create(client, admin_headers, name="Cotton")
        assert resp.status_code == 201
        assert resp.json["productId"] == "1"

    def test_numeric_product_id_accepted(self, client, admin_headers):
        resp = _create(client, admin_headers, productId=42, name="Gauze")
        assert resp.status_code == 201
        assert resp.json["productId"] == "42"

    def test_insert_duplicate_conflicts(self, client, admin_headers):
        _create(client, admin_headers, productId="P1", name="A")
        resp = _create(client, admin_headers, productId="P1", name="B")

        assert resp.status_code == 409
        assert resp.json == {"success": False, "message": "Product P1 already exists"}

    def test_insert_requires_name(self, client, admin_headers):
        resp = _create(client, admin_headers, productId="P1", salePrice=3)
        assert resp.status_code == 400
        assert resp.json["success"] is False
        assert "name" in resp.json["message"]

    def test_insert_rejects_negative_price(self, client, admin_headers):
        resp = _create(client, admin_headers, productId="P1", name="A", salePrice=-1)
        assert resp.status_code == 400

    def test_insert_rejects_unknown_field(self, client, admin_headers):
        resp = _create(client, admin_headers, productId="P1", name="A", quantity=5)
        assert resp.status_code == 400
        assert resp.json["message"] == "Field not allowed: quantity"

    def test_update_product(self, client, admin_headers):
        _create(client, admin_headers, productId="P1", name="A", salePrice=1)

        resp = client.put("/api/products/P1", json={"name": "B", "salePrice": 2.5}, headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json["product"]["name"] == "B"
        assert resp.json["product"]["salePrice"] == 2.5

    def test_update_accepts_matching_body_id(self, client, admin_headers):
        _create(client, admin_headers, productId="P1", name="A")
        resp = client.put("/api/products/P1", json={"productId": "P1", "name": "B"}, headers=admin_headers)
        assert resp.status_code == 200

    def test_update_missing_product(self, client, admin_headers):
        resp = client.put("/api/products/nope", json={"name": "B"}, headers=admin_headers)
        assert resp.status_code == 404
        assert resp.json["success"] is False

    def test_delete_product(self, client, admin_headers):
        _create(client, admin_headers, productId="P1", name="A")

        resp = client.delete("/api/products/P1", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json == {"success": True, "message": "Product deleted successfully"}

        assert client.get("/api/products/P1", headers=admin_headers).status_code == 404
        assert client.get("/api/stock/P1", headers=admin_headers).status_code == 404

    def test_delete_missing_product(self, client, admin_headers):
        assert client.delete("/api/products/nope", headers=admin_headers).status_code == 404

    def test_list_and_search(self, client, admin_headers):
        _create(client, admin_headers, productId="P1", name="Paracetamol")
        _create(client, admin_headers, productId="P2", name="Aspirin")

        resp = client.get("/api/products", headers=admin_headers)
        assert resp.json["count"] == 2

        resp = client.get("/api/products/search?name=aspi", headers=admin_headers)
        assert [item["productId"] for item in resp.json["items"]] == ["P2"]


class TestPurchaseRoutes:

    def test_receive_stock(self, client, admin_headers):
        _create(client, admin_headers, productId="P1", name="A", salePrice=5)

        resp = _receive(client, admin_headers, "P1", 12, purchasePrice=3)

        assert resp.status_code == 201
        assert resp.json["quantityAvailable"] == 12
        assert client.get("/api/stock/P1", headers=admin_headers).json["quantityAvailable"] == 12

    def test_receive_requires_positive_quantity(self, client, admin_headers):
        _create(client, admin_headers, productId="P1", name="A")
        assert _receive(client, admin_headers, "P1", 0).status_code == 400

    def test_receive_unknown_product(self, client, admin_headers):
        assert _receive(client, admin_headers, "ghost", 1).status_code == 404

    def test_receive_rejects_digits_the_ledger_cannot_store(self, client, admin_headers):
        _create(client, admin_headers, productId="P1", name="A")

        assert _receive(client, admin_headers, "P1", 1, purchasePrice=1.234).status_code == 400
        assert _receive(client, admin_headers, "P1", 0.0005).status_code == 400
        assert client.get("/api/stock/P1", headers=admin_headers).json["quantityAvailable"] == 0


class TestSaleRoutes:

    def _stock(self, client, admin_headers):
        _create(client, admin_headers, productId="P1", name="P1", salePrice=10)
        _create(client, admin_headers, productId="P2", name="P2", salePrice=20)
        _receive(client, admin_headers, "P1", 10)
        _receive(client, admin_headers, "P2", 10)

    def test_record_sale(self, client, admin_headers, pharmacist_headers):
        self._stock(client, admin_headers)

        resp = client.post(
            "/api/sales",
            json={"saleId": "S1", "items": [{"productId": "P1", "quantity": 3}, {"productId": "P2", "quantity": 2}]},
            headers=pharmacist_headers,
        )

        assert resp.status_code == 201
        assert resp.json["success"] is True
        assert resp.json["message"] == "Sale recorded successfully"
        assert resp.json["totalAmount"] == 70

        stats = client.get("/api/dashboard/stats", headers=pharmacist_headers).json
        assert stats["totalSalesAmount"] == 70

        lines = client.get("/api/sales/S1", headers=pharmacist_headers).json
        assert lines["count"] == 2

        assert client.get("/api/stock/P1", headers=pharmacist_headers).json["quantityAvailable"] == 7

    def test_oversell_is_rejected(self, client, admin_headers, pharmacist_headers):
        _create(client, admin_headers, productId="P1", name="P1", salePrice=10)

        resp = client.post(
            "/api/sales",
            json={"saleId": "S1", "items": [{"productId": "P1", "quantity": 5}]},
            headers=pharmacist_headers,
        )

        assert resp.status_code == 409
        assert resp.json["success"] is False
        assert resp.json["details"]["items"][0]["quantityAvailable"] == 0
        assert client.get("/api/stock/P1", headers=pharmacist_headers).json["quantityAvailable"] == 0

    def test_sale_with_unknown_product(self, client, pharmacist_headers):
        resp = client.post(
            "/api/sales",
            json={"saleId": "S1", "items": [{"productId": "ghost", "quantity": 1}]},
            headers=pharmacist_headers,
        )
        assert resp.status_code == 404

    def test_sale_rejects_bad_body(self, client, pharmacist_headers):
        resp = client.post("/api/sales", data="not json", headers=pharmacist_headers)
        assert resp.status_code == 400

    def test_unknown_sale_id(self, client, pharmacist_headers):
        assert client.get("/api/sales/none", headers=pharmacist_headers).status_code == 404


class TestDashboardRoute:

    def test_stats_shape(self, client, admin_headers):
        resp = client.get("/api/dashboard/stats", headers=admin_headers)

        assert resp.status_code == 200
        assert set(resp.json) == {
            "totalProducts",
            "totalUsers",
            "totalSuppliers",
            "lowStockItems",
            "totalSalesAmount",
            "inventoryValue",
            "topProducts",
            "stockDistribution",
        }
        assert resp.json["totalUsers"] == 1
