# Overview: Flask API routes for the point of sale; parses input and returns JSON responses.

"""POS API routes: product lookup, sale recording, sale history, receipts"""

from flask import Blueprint, request, jsonify, g, current_app, Response

from ..models.auth import ROLE_ADMIN, ROLE_SALESMAN
from ..services import catalog_service, receipt_service, sales_service
from ..services.inventory_service import InsufficientStockError
from ..services.sales_service import SaleError, SaleAccessError
from ..validation import ValidationError, require_json_object
from ..decorators import require_auth, require_role


pos_bp = Blueprint("pos", __name__, url_prefix="/api/pos")


@pos_bp.get("/products")
@require_auth
@require_role(ROLE_ADMIN, ROLE_SALESMAN)
def list_products_route():
    """Active products for the POS grid, with display prices."""
    try:
        return jsonify({"products": catalog_service.list_pos_products()}), 200
    except Exception:
        current_app.logger.exception("Failed to fetch POS products")
        return jsonify({"error": "Internal server error"}), 500


@pos_bp.get("/products/barcode/<code>")
@require_auth
@require_role(ROLE_ADMIN, ROLE_SALESMAN)
def find_by_barcode_route(code: str):
    """Scanner lookup by barcode or SKU."""
    product = catalog_service.find_by_code(code)
    if not product:
        return jsonify({"error": "Product not found"}), 404
    data = product.to_dict()
    data["unit_price_cents"] = product.unit_price_cents
    return jsonify({"product": data}), 200


@pos_bp.post("/sales")
@require_auth
@require_role(ROLE_ADMIN, ROLE_SALESMAN)
def create_sale_route():
    """
    Record a sale.

    Body: items [{product_id, quantity, size?, color?}], discount,
    discount_type (FLAT | PERCENTAGE), payment_method, amount_received_cents,
    customer_name, customer_phone, notes
    """
    try:
        data = require_json_object(request.get_json(silent=True))

        sale = sales_service.create_sale(
            data.get("items"),
            salesman_id=g.current_user.id,
            discount=data.get("discount"),
            discount_type=data.get("discount_type"),
            payment_method=data.get("payment_method"),
            amount_received_cents=data.get("amount_received_cents"),
            customer_name=data.get("customer_name"),
            customer_phone=data.get("customer_phone"),
            notes=data.get("notes"),
        )

        return jsonify({"sale": sale.to_dict()}), 201

    except ValidationError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except (SaleError, InsufficientStockError) as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to create POS sale")
        return jsonify({"error": "Internal server error"}), 500


@pos_bp.get("/sales")
@require_auth
@require_role(ROLE_ADMIN, ROLE_SALESMAN)
def list_sales_route():
    """Sale history. Admins see all sales, salesmen their own."""
    page = request.args.get("page", 1, type=int)
    limit = request.args.get("limit", 20, type=int)
    return jsonify(sales_service.list_sales(g.current_user, page=page, limit=limit)), 200


def _load_sale(sale_id: int):
    try:
        sale = sales_service.get_sale(sale_id, g.current_user)
    except SaleAccessError as e:
        return None, (jsonify({"error": str(e)}), 403)
    if not sale:
        return None, (jsonify({"error": "Sale not found"}), 404)
    return sale, None


@pos_bp.get("/sales/<int:sale_id>")
@require_auth
@require_role(ROLE_ADMIN, ROLE_SALESMAN)
def get_sale_route(sale_id: int):
    sale, error = _load_sale(sale_id)
    if error:
        return error
    return jsonify({"sale": sale.to_dict()}), 200


@pos_bp.get("/sales/<int:sale_id>/receipt")
@require_auth
@require_role(ROLE_ADMIN, ROLE_SALESMAN)
def sale_receipt_route(sale_id: int):
    """Printable plain-text receipt."""
    sale, error = _load_sale(sale_id)
    if error:
        return error
    return Response(receipt_service.render_sale_receipt(sale), mimetype="text/plain")
