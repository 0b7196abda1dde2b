"""
Web order administration: listing, status updates and order receipts.
"""

import pytest

from conftest import make_order
from doctorplanet.services import order_service
from doctorplanet.services.order_service import OrderError, OrderNotFoundError
from doctorplanet.validation import ValidationError


class TestUpdateOrder:
    def test_status_and_payment_status(self, db_session, customer):
        order = make_order(db_session, customer[0], total_cents=5000)
        updated = order_service.update_order(order.id, status="shipped", payment_status="paid")
        assert updated.status == "SHIPPED"
        assert updated.payment_status == "PAID"

    def test_cancelled_is_terminal(self, db_session, customer):
        order = make_order(db_session, customer[0], total_cents=5000, status="CANCELLED")
        with pytest.raises(OrderError, match="cannot be reopened"):
            order_service.update_order(order.id, status="PENDING")

    def test_cancelled_payment_status_still_editable(self, db_session, customer):
        order = make_order(db_session, customer[0], total_cents=5000, status="CANCELLED")
        updated = order_service.update_order(order.id, payment_status="REFUNDED")
        assert updated.status == "CANCELLED"
        assert updated.payment_status == "REFUNDED"

    def test_unknown_status(self, db_session, customer):
        order = make_order(db_session, customer[0], total_cents=5000)
        with pytest.raises(ValidationError):
            order_service.update_order(order.id, status="LOST")

    def test_empty_update(self, db_session, customer):
        order = make_order(db_session, customer[0], total_cents=5000)
        with pytest.raises(ValidationError):
            order_service.update_order(order.id)

    def test_missing_order(self, db_session):
        with pytest.raises(OrderNotFoundError):
            order_service.update_order(12345, status="DELIVERED")


class TestListOrders:
    def test_filter_by_status(self, db_session, customer):
        make_order(db_session, customer[0], total_cents=1000, status="PENDING")
        make_order(db_session, customer[0], total_cents=2000, status="DELIVERED")

        result = order_service.list_orders(status="delivered")
        assert result["pagination"]["total"] == 1
        assert result["orders"][0]["total_cents"] == 2000

    def test_customer_sees_only_own_orders(self, client, db_session, customer, customer_headers, salesman):
        make_order(db_session, customer[0], total_cents=1000)
        make_order(db_session, salesman[0], total_cents=2000)

        resp = client.get("/api/orders", headers=customer_headers)
        assert resp.status_code == 200
        orders = resp.get_json()["orders"]
        assert [o["total_cents"] for o in orders] == [1000]


class TestOrderRoutes:
    def test_patch_order(self, client, db_session, admin_headers, customer):
        order = make_order(db_session, customer[0], total_cents=5000)
        resp = client.patch(f"/api/admin/orders/{order.id}", json={"status": "DELIVERED"}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.get_json()["order"]["status"] == "DELIVERED"

    def test_patch_cancelled_order_returns_400(self, client, db_session, admin_headers, customer):
        order = make_order(db_session, customer[0], total_cents=5000, status="CANCELLED")
        resp = client.patch(f"/api/admin/orders/{order.id}", json={"status": "SHIPPED"}, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.get_json()["details"]["status"] == "CANCELLED"

    def test_patch_missing_order_returns_404(self, client, admin_headers):
        resp = client.patch("/api/admin/orders/999", json={"status": "SHIPPED"}, headers=admin_headers)
        assert resp.status_code == 404

    def test_list_orders_bad_status(self, client, admin_headers):
        resp = client.get("/api/admin/orders?status=LOST", headers=admin_headers)
        assert resp.status_code == 400

    def test_order_receipt(self, client, db_session, admin_headers, customer, flat_product):
        order = make_order(db_session, customer[0], total_cents=100000, product=flat_product)
        resp = client.get(f"/api/admin/orders/{order.id}/receipt", headers=admin_headers)
        assert resp.status_code == 200
        text = resp.get_data(as_text=True)
        assert order.order_number in text
        assert "Stethoscope" in text
        assert "Rs. 1,000.00" in text
        assert "Sara" in text
