"""
Authorization tests for the Doctor Planet API.

Verifies:
- Unauthenticated requests return 401
- Customers are denied POS and back-office routes (403)
- Salesmen are denied admin-only routes (403)
- Revoked tokens and deactivated users are rejected
"""

import pytest

from conftest import auth_headers
from doctorplanet.extensions import db
from doctorplanet.models import ApiToken
from doctorplanet.services import session_service


# =============================================================================
# UNAUTHENTICATED ACCESS (401)
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/pos/products"),
            ("GET", "/api/pos/products/barcode/123"),
            ("POST", "/api/pos/sales"),
            ("GET", "/api/pos/sales"),
            ("GET", "/api/pos/sales/1"),
            ("GET", "/api/pos/sales/1/receipt"),
            ("GET", "/api/admin/dashboard"),
            ("GET", "/api/admin/revenue"),
            ("GET", "/api/admin/global-discount"),
            ("PUT", "/api/admin/global-discount"),
            ("GET", "/api/admin/orders"),
            ("PATCH", "/api/admin/orders/1"),
            ("GET", "/api/orders"),
            ("GET", "/api/shops"),
            ("POST", "/api/udhar"),
            ("GET", "/api/udhar/payments"),
        ],
    )
    def test_requires_auth(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"
        assert resp.get_json()["error"] == "Authentication required"

    def test_unknown_token_rejected(self, client, db_session):
        resp = client.get("/api/pos/sales", headers=auth_headers("not-a-real-token"))
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid or expired token"

    def test_public_endpoints_open(self, client, db_session):
        assert client.get("/api/health").status_code == 200
        assert client.get("/api/global-discount").status_code == 200


# =============================================================================
# CUSTOMER DENIED STAFF OPERATIONS (403)
# =============================================================================


class TestCustomerDenied:
    """Storefront customers cannot reach POS, udhar or admin routes."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/pos/products"),
            ("POST", "/api/pos/sales"),
            ("GET", "/api/pos/sales"),
            ("GET", "/api/admin/dashboard"),
            ("GET", "/api/admin/revenue"),
            ("PUT", "/api/admin/global-discount"),
            ("GET", "/api/shops"),
            ("GET", "/api/udhar"),
        ],
    )
    def test_denied(self, client, customer_headers, method, path):
        resp = getattr(client, method.lower())(path, headers=customer_headers)
        assert resp.status_code == 403
        assert resp.get_json()["error"] == "Permission denied"

    def test_can_list_own_orders(self, client, customer_headers):
        resp = client.get("/api/orders", headers=customer_headers)
        assert resp.status_code == 200
        assert resp.get_json()["orders"] == []


# =============================================================================
# SALESMAN DENIED ADMIN OPERATIONS (403)
# =============================================================================


class TestSalesmanDeniedAdmin:
    def test_cannot_view_dashboard(self, client, salesman_headers):
        resp = client.get("/api/admin/dashboard", headers=salesman_headers)
        assert resp.status_code == 403
        assert resp.get_json()["required_roles"] == ["ADMIN"]

    def test_cannot_view_revenue(self, client, salesman_headers):
        assert client.get("/api/admin/revenue", headers=salesman_headers).status_code == 403

    def test_cannot_update_global_discount(self, client, salesman_headers):
        resp = client.put(
            "/api/admin/global-discount",
            json={"is_active": True, "percentage": 50},
            headers=salesman_headers,
        )
        assert resp.status_code == 403

    def test_cannot_manage_orders(self, client, salesman_headers):
        assert client.get("/api/admin/orders", headers=salesman_headers).status_code == 403
        resp = client.patch("/api/admin/orders/1", json={"status": "DELIVERED"}, headers=salesman_headers)
        assert resp.status_code == 403

    def test_can_read_global_discount(self, client, salesman_headers):
        resp = client.get("/api/admin/global-discount", headers=salesman_headers)
        assert resp.status_code == 200

    def test_can_use_pos(self, client, salesman_headers):
        assert client.get("/api/pos/products", headers=salesman_headers).status_code == 200
        assert client.get("/api/pos/sales", headers=salesman_headers).status_code == 200


# =============================================================================
# TOKEN LIFECYCLE
# =============================================================================


class TestTokenLifecycle:
    def test_revoked_token_rejected(self, client, salesman):
        user, token = salesman
        assert client.get("/api/pos/sales", headers=auth_headers(token)).status_code == 200

        assert session_service.revoke_tokens(user.id) == 1

        resp = client.get("/api/pos/sales", headers=auth_headers(token))
        assert resp.status_code == 401

    def test_deactivated_user_rejected(self, client, salesman):
        user, token = salesman
        user.is_active = False
        db.session.commit()

        resp = client.get("/api/pos/sales", headers=auth_headers(token))
        assert resp.status_code == 401

    def test_token_stored_hashed(self, salesman):
        user, token = salesman
        record = db.session.query(ApiToken).filter_by(user_id=user.id).one()
        assert record.token_hash != token
        assert record.token_hash == session_service.hash_token(token)

    def test_validate_token_updates_last_used(self, salesman):
        user, token = salesman
        assert session_service.validate_token(token).id == user.id
        record = db.session.query(ApiToken).filter_by(user_id=user.id).one()
        assert record.last_used_at is not None
