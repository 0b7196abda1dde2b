"""
POS API tests: product lookup, recording sales over HTTP, sale history and receipts.
"""

from conftest import auth_headers
from doctorplanet.extensions import db
from doctorplanet.models import POSSale, Product
from doctorplanet.services import discount_service


class TestProductLookup:
    def test_list_products_with_display_price(self, client, salesman_headers, flat_product, db_session):
        discount_service.update_global_discount({"is_active": True, "percentage": 20})

        resp = client.get("/api/pos/products", headers=salesman_headers)
        assert resp.status_code == 200
        products = resp.get_json()["products"]
        assert len(products) == 1
        assert products[0]["unit_price_cents"] == 100000
        assert products[0]["display_price_cents"] == 80000

    def test_inactive_products_hidden(self, client, salesman_headers, flat_product, db_session):
        flat_product.is_active = False
        db_session.commit()
        resp = client.get("/api/pos/products", headers=salesman_headers)
        assert resp.get_json()["products"] == []

    def test_lookup_by_barcode(self, client, salesman_headers, flat_product):
        resp = client.get("/api/pos/products/barcode/8901234567890", headers=salesman_headers)
        assert resp.status_code == 200
        assert resp.get_json()["product"]["id"] == flat_product.id

    def test_lookup_falls_back_to_sku(self, client, salesman_headers, flat_product):
        resp = client.get("/api/pos/products/barcode/STH-001", headers=salesman_headers)
        assert resp.status_code == 200
        assert resp.get_json()["product"]["sku"] == "STH-001"

    def test_lookup_unknown_code(self, client, salesman_headers, flat_product):
        resp = client.get("/api/pos/products/barcode/000", headers=salesman_headers)
        assert resp.status_code == 404


class TestCreateSale:
    def test_create_sale(self, client, salesman, salesman_headers, variant_product):
        resp = client.post(
            "/api/pos/sales",
            json={
                "items": [{"product_id": variant_product.id, "quantity": 2, "size": "L", "color": "Navy"}],
                "discount": 10,
                "discount_type": "PERCENTAGE",
                "payment_method": "CASH",
                "amount_received_cents": 600000,
                "customer_name": "Dr. Ayesha",
            },
            headers=salesman_headers,
        )
        assert resp.status_code == 201
        sale = resp.get_json()["sale"]
        assert sale["salesman_id"] == salesman[0].id
        assert sale["subtotal_cents"] == 600000
        assert sale["discount_cents"] == 60000
        assert sale["total_cents"] == 540000
        assert sale["change_given_cents"] == 60000
        assert sale["receipt_number"].startswith("POS-")
        assert sale["items"][0]["color"] == "Navy"

        product = db.session.get(Product, variant_product.id)
        assert product.color_size_stock["Navy"]["L"] == 1
        assert product.stock == 8

    def test_missing_items_returns_400(self, client, salesman_headers):
        resp = client.post("/api/pos/sales", json={"items": []}, headers=salesman_headers)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "No items in sale"

    def test_infinite_discount_returns_400(self, client, salesman_headers, flat_product):
        body = '{"items": [{"product_id": %d, "quantity": 1}], "discount": Infinity}' % flat_product.id
        resp = client.post("/api/pos/sales", data=body, content_type="application/json", headers=salesman_headers)
        assert resp.status_code == 400
        assert "finite" in resp.get_json()["error"]
        assert db.session.query(POSSale).count() == 0

    def test_non_object_body_returns_400(self, client, salesman_headers):
        resp = client.post("/api/pos/sales", json=[1, 2], headers=salesman_headers)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Invalid JSON payload"

    def test_unknown_product_returns_400(self, client, salesman_headers, flat_product):
        resp = client.post(
            "/api/pos/sales",
            json={"items": [{"product_id": flat_product.id, "quantity": 1}, {"product_id": 424242, "quantity": 1}]},
            headers=salesman_headers,
        )
        assert resp.status_code == 400
        assert resp.get_json()["details"] == {"product_id": 424242}
        assert db.session.query(POSSale).count() == 0
        assert db.session.get(Product, flat_product.id).stock == 10

    def test_insufficient_stock_returns_400_when_oversell_disabled(self, app, client, salesman_headers, flat_product):
        app.config["POS_ALLOW_OVERSELL"] = False
        resp = client.post(
            "/api/pos/sales",
            json={"items": [{"product_id": flat_product.id, "quantity": 50}]},
            headers=salesman_headers,
        )
        assert resp.status_code == 400
        assert resp.get_json()["details"]["requested_quantity"] == 50

    def test_admin_can_sell(self, client, admin, admin_headers, flat_product):
        resp = client.post(
            "/api/pos/sales",
            json={"items": [{"product_id": flat_product.id, "quantity": 1}]},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        assert resp.get_json()["sale"]["salesman_id"] == admin[0].id


def _record_sale(client, headers, product_id):
    resp = client.post(
        "/api/pos/sales",
        json={"items": [{"product_id": product_id, "quantity": 1}]},
        headers=headers,
    )
    assert resp.status_code == 201
    return resp.get_json()["sale"]


class TestSaleHistory:
    def test_salesman_history_is_own_only(self, client, salesman_headers, other_salesman, flat_product):
        other_headers = auth_headers(other_salesman[1])

        _record_sale(client, salesman_headers, flat_product.id)
        _record_sale(client, other_headers, flat_product.id)

        resp = client.get("/api/pos/sales", headers=salesman_headers)
        assert resp.status_code == 200
        assert resp.get_json()["pagination"]["total"] == 1

    def test_admin_sees_all_sales(self, client, admin_headers, salesman_headers, flat_product):
        _record_sale(client, salesman_headers, flat_product.id)
        _record_sale(client, admin_headers, flat_product.id)

        resp = client.get("/api/pos/sales", headers=admin_headers)
        assert resp.get_json()["pagination"]["total"] == 2

    def test_other_salesman_sale_forbidden(self, client, salesman_headers, other_salesman, flat_product):
        sale = _record_sale(client, auth_headers(other_salesman[1]), flat_product.id)

        resp = client.get(f"/api/pos/sales/{sale['id']}", headers=salesman_headers)
        assert resp.status_code == 403
        resp = client.get(f"/api/pos/sales/{sale['id']}/receipt", headers=salesman_headers)
        assert resp.status_code == 403

    def test_unknown_sale(self, client, admin_headers):
        assert client.get("/api/pos/sales/9999", headers=admin_headers).status_code == 404


class TestReceipt:
    def test_plain_text_receipt(self, client, salesman_headers, flat_product):
        resp = client.post(
            "/api/pos/sales",
            json={
                "items": [{"product_id": flat_product.id, "quantity": 2}],
                "discount": 20000,
                "amount_received_cents": 200000,
                "customer_name": "Dr. Usman",
            },
            headers=salesman_headers,
        )
        sale = resp.get_json()["sale"]

        resp = client.get(f"/api/pos/sales/{sale['id']}/receipt", headers=salesman_headers)
        assert resp.status_code == 200
        assert resp.mimetype == "text/plain"
        text = resp.get_data(as_text=True)
        assert "Doctor Planet" in text
        assert sale["receipt_number"] in text
        assert "Stethoscope" in text
        assert "Rs. 2,000.00" in text
        assert "-Rs. 200.00" in text
        assert "Rs. 1,800.00" in text
        assert "Change" in text
        assert "Dr. Usman" in text
