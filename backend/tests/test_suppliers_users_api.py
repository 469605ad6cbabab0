"""
Supplier and user management routes.
"""

from pharmacy.models import PurchaseRecord
from pharmacy.services import inventory_service


class TestSuppliers:

    def test_add_list_search_delete(self, client, admin_headers):
        resp = client.post("/api/suppliers", json={"name": "MediSupply"}, headers=admin_headers)
        assert resp.status_code == 201
        assert resp.json["supplierId"] == "1"

        resp = client.post("/api/suppliers", json={"supplierId": "ACME", "name": "Acme Pharma"}, headers=admin_headers)
        assert resp.status_code == 201

        resp = client.get("/api/suppliers", headers=admin_headers)
        assert resp.json["count"] == 2

        resp = client.get("/api/suppliers/search?q=acme", headers=admin_headers)
        assert [s["supplierId"] for s in resp.json["items"]] == ["ACME"]

        resp = client.delete("/api/suppliers/ACME", headers=admin_headers)
        assert resp.status_code == 200
        assert client.get("/api/suppliers", headers=admin_headers).json["count"] == 1

    def test_duplicate_supplier(self, client, admin_headers):
        client.post("/api/suppliers", json={"supplierId": "S1", "name": "A"}, headers=admin_headers)
        resp = client.post("/api/suppliers", json={"supplierId": "S1", "name": "B"}, headers=admin_headers)
        assert resp.status_code == 409

    def test_search_requires_query(self, client, admin_headers):
        assert client.get("/api/suppliers/search", headers=admin_headers).status_code == 400

    def test_delete_missing_supplier(self, client, admin_headers):
        assert client.delete("/api/suppliers/nope", headers=admin_headers).status_code == 404

    def test_delete_keeps_purchase_history(self, client, admin_headers, db_session, make_product):
        make_product("Syrup", 5, product_id="P1")
        client.post("/api/suppliers", json={"supplierId": "S1", "name": "A"}, headers=admin_headers)
        inventory_service.record_purchase(product_id="P1", quantity=3, supplier_id="S1")

        assert client.delete("/api/suppliers/S1", headers=admin_headers).status_code == 200

        db_session.expire_all()
        purchase = db_session.query(PurchaseRecord).one()
        assert purchase.supplier_id is None


class TestUsers:

    def test_add_list_delete(self, client, admin_headers):
        resp = client.post(
            "/api/users",
            json={"username": "alice", "password": "Password123!", "role": "pharmacist"},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        assert resp.json["user"]["role"] == "pharmacist"
        assert "password_hash" not in resp.json["user"]

        names = [u["username"] for u in client.get("/api/users", headers=admin_headers).json["items"]]
        assert names == ["admin", "alice"]

        assert client.delete("/api/users/alice", headers=admin_headers).status_code == 200
        assert client.get("/api/users", headers=admin_headers).json["count"] == 1

    def test_duplicate_username(self, client, admin_headers):
        resp = client.post(
            "/api/users",
            json={"username": "admin", "password": "Password123!", "role": "admin"},
            headers=admin_headers,
        )
        assert resp.status_code == 409
        assert resp.json["message"] == "Username already exists"

    def test_invalid_role(self, client, admin_headers):
        resp = client.post(
            "/api/users",
            json={"username": "bob", "password": "Password123!", "role": "manager"},
            headers=admin_headers,
        )
        assert resp.status_code == 400

    def test_weak_password(self, client, admin_headers):
        resp = client.post(
            "/api/users",
            json={"username": "bob", "password": "short", "role": "pharmacist"},
            headers=admin_headers,
        )
        assert resp.status_code == 400
        assert "8 characters" in resp.json["message"]

    def test_cannot_delete_self(self, client, admin_headers):
        resp = client.delete("/api/users/admin", headers=admin_headers)
        assert resp.status_code == 409

    def test_delete_missing_user(self, client, admin_headers):
        assert client.delete("/api/users/ghost", headers=admin_headers).status_code == 404

    def test_deleted_user_token_stops_working(self, client, admin_headers, pharmacist_headers):
        assert client.get("/api/auth/me", headers=pharmacist_headers).status_code == 200

        client.delete("/api/users/pharmacist", headers=admin_headers)

        assert client.get("/api/auth/me", headers=pharmacist_headers).status_code == 401
