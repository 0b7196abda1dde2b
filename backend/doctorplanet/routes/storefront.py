# Overview: Flask API routes used by the storefront and customer account area.

from flask import Blueprint, request, jsonify, g, current_app

from ..services import discount_service, order_service
from ..decorators import require_auth


storefront_bp = Blueprint("storefront", __name__, url_prefix="/api")


@storefront_bp.get("/global-discount")
def active_global_discount_route():
    """Public: the store-wide discount currently in effect, if any."""
    try:
        return jsonify(discount_service.get_active_discount()), 200
    except Exception:
        current_app.logger.exception("Failed to fetch global discount")
        return jsonify({"is_active": False, "percentage": 0}), 500


@storefront_bp.get("/orders")
@require_auth
def my_orders_route():
    """Orders placed by the authenticated customer."""
    result = order_service.list_user_orders(
        g.current_user.id,
        page=request.args.get("page", 1, type=int),
        limit=request.args.get("limit", 20, type=int),
    )
    return jsonify(result), 200
