# Overview: Flask API routes for the admin back office; dashboard, revenue, global discount, orders.

from flask import Blueprint, request, jsonify, g, current_app, Response

from ..models.auth import ROLE_ADMIN
from ..services import discount_service, order_service, receipt_service, reporting_service
from ..services.order_service import OrderError, OrderNotFoundError
from ..validation import ValidationError, require_json_object
from ..decorators import require_auth, require_role


admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.get("/dashboard")
@require_auth
@require_role(ROLE_ADMIN)
def dashboard_route():
    """Revenue for today / this month / all time across web, POS and udhar."""
    try:
        return jsonify(reporting_service.dashboard_stats()), 200
    except Exception:
        current_app.logger.exception("Failed to build dashboard stats")
        return jsonify({"error": "Internal server error"}), 500


@admin_bp.get("/revenue")
@require_auth
@require_role(ROLE_ADMIN)
def revenue_route():
    """
    Revenue for one period.

    Query params:
    - period: today | week | month | year | all (default all)
    """
    try:
        return jsonify(reporting_service.revenue_report(request.args.get("period", "all"))), 200
    except Exception:
        current_app.logger.exception("Failed to fetch revenue")
        return jsonify({"error": "Internal server error"}), 500


@admin_bp.get("/global-discount")
@require_auth
def get_global_discount_route():
    discount = discount_service.get_global_discount()
    return jsonify(discount.to_dict()), 200


@admin_bp.put("/global-discount")
@require_auth
@require_role(ROLE_ADMIN)
def update_global_discount_route():
    try:
        data = require_json_object(request.get_json(silent=True))
        discount = discount_service.update_global_discount(data, updated_by=g.current_user.email)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to update global discount")
        return jsonify({"error": "Internal server error"}), 500

    current_app.logger.info(
        "Admin %s updated global discount: %s%% active=%s",
        g.current_user.email, discount.percentage, discount.is_active,
    )
    return jsonify(discount.to_dict()), 200


@admin_bp.get("/orders")
@require_auth
@require_role(ROLE_ADMIN)
def list_orders_route():
    try:
        result = order_service.list_orders(
            status=request.args.get("status"),
            page=request.args.get("page", 1, type=int),
            limit=request.args.get("limit", 20, type=int),
        )
        return jsonify(result), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400


@admin_bp.patch("/orders/<int:order_id>")
@require_auth
@require_role(ROLE_ADMIN)
def update_order_route(order_id: int):
    """Body: {status?, payment_status?}"""
    try:
        data = require_json_object(request.get_json(silent=True))
        order = order_service.update_order(
            order_id,
            status=data.get("status"),
            payment_status=data.get("payment_status"),
        )
        return jsonify({"order": order.to_dict()}), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except OrderNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except OrderError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to update order")
        return jsonify({"error": "Internal server error"}), 500


@admin_bp.get("/orders/<int:order_id>/receipt")
@require_auth
@require_role(ROLE_ADMIN)
def order_receipt_route(order_id: int):
    order = order_service.get_order(order_id)
    if not order:
        return jsonify({"error": "Order not found"}), 404
    return Response(receipt_service.render_order_receipt(order), mimetype="text/plain")
