# Overview: Flask API routes for shops and their udhar (credit) ledgers.

from flask import Blueprint, request, jsonify, g, current_app

from ..models.auth import ROLE_ADMIN, ROLE_SALESMAN
from ..services import udhar_service
from ..services.udhar_service import UdharError, UdharNotFoundError
from ..validation import ValidationError, require_json_object
from ..decorators import require_auth, require_role


udhar_bp = Blueprint("udhar", __name__, url_prefix="/api")


@udhar_bp.get("/shops")
@require_auth
@require_role(ROLE_ADMIN, ROLE_SALESMAN)
def list_shops_route():
    return jsonify({"shops": udhar_service.list_shops()}), 200


@udhar_bp.post("/shops")
@require_auth
@require_role(ROLE_ADMIN, ROLE_SALESMAN)
def create_shop_route():
    try:
        data = require_json_object(request.get_json(silent=True))
        shop = udhar_service.create_shop(data, user_id=g.current_user.id)
        return jsonify({"shop": shop.to_dict()}), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400


@udhar_bp.get("/udhar")
@require_auth
@require_role(ROLE_ADMIN, ROLE_SALESMAN)
def list_transactions_route():
    shop_id = request.args.get("shop_id", type=int)
    return jsonify({"transactions": udhar_service.list_transactions(shop_id)}), 200


@udhar_bp.post("/udhar")
@require_auth
@require_role(ROLE_ADMIN, ROLE_SALESMAN)
def create_transaction_route():
    """Body: {shop_id, items, total_amount_cents, due_date?, notes?}"""
    try:
        data = require_json_object(request.get_json(silent=True))
        txn = udhar_service.create_transaction(data, user_id=g.current_user.id)
        return jsonify({"transaction": txn.to_dict()}), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except UdharNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to create udhar transaction")
        return jsonify({"error": "Internal server error"}), 500


@udhar_bp.post("/udhar/<int:transaction_id>/payment")
@require_auth
@require_role(ROLE_ADMIN, ROLE_SALESMAN)
def add_payment_route(transaction_id: int):
    """Body: {amount_cents, payment_method?, notes?}"""
    try:
        data = require_json_object(request.get_json(silent=True))
        payment, txn = udhar_service.record_payment(
            transaction_id,
            amount_cents=data.get("amount_cents"),
            payment_method=data.get("payment_method"),
            notes=data.get("notes"),
            user_id=g.current_user.id,
        )
        return jsonify({"payment": payment.to_dict(), "transaction": txn.to_dict()}), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except UdharNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except UdharError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to add udhar payment")
        return jsonify({"error": "Internal server error"}), 500


@udhar_bp.get("/udhar/payments")
@require_auth
@require_role(ROLE_ADMIN, ROLE_SALESMAN)
def list_payments_route():
    return jsonify({"payments": udhar_service.list_payments()}), 200
