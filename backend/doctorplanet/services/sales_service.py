"""
POS Sales Service - recording in-store sales

A sale is written in one transaction: receipt number, stock decrements,
the sale row and its items all commit together or not at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from flask import current_app

from ..extensions import db
from ..models import POSSale, POSSaleItem, Product, User
from ..models.auth import ROLE_SALESMAN
from ..models.sales import DISCOUNT_PERCENTAGE, DISCOUNT_FLAT, PAYMENT_METHODS
from ..time_utils import utcnow, local_business_date
from ..validation import (
    ValidationError,
    coerce_int,
    coerce_positive_int,
    coerce_number,
    coerce_cents,
    clean_str,
)
from .concurrency import begin_write, lock_for_update, run_with_retry
from .inventory_service import decrement_stock, ensure_available, InsufficientStockError
from .sequence_service import next_daily_number, format_receipt_number


RECEIPT_PREFIX = "POS"


class SaleError(Exception):
    """Raised for sale operation errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class ProductNotFoundError(SaleError):
    """A line references a product that does not exist."""


class SaleAccessError(SaleError):
    """A salesman asked for someone else's sale."""


@dataclass(frozen=True)
class SaleLineRequest:
    product_id: int
    quantity: int
    size: str | None = None
    color: str | None = None


def parse_items(raw_items) -> list[SaleLineRequest]:
    if not raw_items or not isinstance(raw_items, list):
        raise ValidationError("No items in sale")

    lines = []
    for index, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            raise ValidationError(f"items[{index}] must be an object")
        if raw.get("product_id") is None or raw.get("quantity") is None:
            raise ValidationError(f"items[{index}] requires product_id and quantity")
        lines.append(
            SaleLineRequest(
                product_id=coerce_int(f"items[{index}].product_id", raw["product_id"]),
                quantity=coerce_positive_int(f"items[{index}].quantity", raw["quantity"]),
                size=clean_str(raw.get("size"), max_length=32, field="size"),
                color=clean_str(raw.get("color"), max_length=64, field="color"),
            )
        )
    return lines


def compute_discount_cents(subtotal_cents: int, discount, discount_type: str | None) -> int:
    """
    PERCENTAGE: `discount` percent of the subtotal, rounded to the cent.
    Anything else: `discount` is a flat amount in cents.

    The result is not capped at the subtotal.
    """
    if not discount:
        return 0
    if discount_type == DISCOUNT_PERCENTAGE:
        return int(round(subtotal_cents * discount / 100))
    return int(discount)


def _normalize_discount(discount, discount_type) -> tuple[float | None, str | None]:
    if discount is None or discount == "":
        return None, None
    value = coerce_number("discount", discount)
    if value < 0:
        raise ValidationError("discount must be >= 0")
    if not value:
        return None, None

    discount_type = (discount_type or DISCOUNT_FLAT).strip().upper()
    if discount_type not in (DISCOUNT_FLAT, DISCOUNT_PERCENTAGE):
        raise ValidationError("discount_type must be FLAT or PERCENTAGE")
    if discount_type == DISCOUNT_FLAT and value != int(value):
        raise ValidationError("Flat discount must be a whole number of cents")
    return value, discount_type


def _normalize_payment_method(payment_method: str | None) -> str:
    method = (payment_method or "CASH").strip().upper()
    if method not in PAYMENT_METHODS:
        raise ValidationError(f"payment_method must be one of: {', '.join(PAYMENT_METHODS)}")
    return method


def _load_products(lines: list[SaleLineRequest]) -> dict[int, Product]:
    products: dict[int, Product] = {}
    for line in lines:
        if line.product_id in products:
            continue
        product = lock_for_update(db.session.query(Product).filter_by(id=line.product_id)).first()
        if not product:
            raise ProductNotFoundError(
                f"Product not found: {line.product_id}",
                details={"product_id": line.product_id},
            )
        products[line.product_id] = product
    return products


def create_sale(
    items,
    *,
    salesman_id: int,
    discount=None,
    discount_type: str | None = None,
    payment_method: str | None = None,
    amount_received_cents=None,
    customer_name: str | None = None,
    customer_phone: str | None = None,
    notes: str | None = None,
    now: datetime | None = None,
) -> POSSale:
    """
    Record a POS sale.

    Every product is resolved before anything is written; a missing product
    fails the whole sale. Stock is decremented per line (see
    inventory_service.decrement_stock) and, unless POS_ALLOW_OVERSELL is off,
    clamps at zero instead of failing.
    """
    lines = parse_items(items)
    discount_value, discount_type = _normalize_discount(discount, discount_type)
    method = _normalize_payment_method(payment_method)
    amount_received = coerce_cents("amount_received_cents", amount_received_cents, allow_none=True)
    customer_name = clean_str(customer_name, max_length=255, field="customer_name")
    customer_phone = clean_str(customer_phone, max_length=32, field="customer_phone")
    notes = clean_str(notes)

    allow_oversell = current_app.config.get("POS_ALLOW_OVERSELL", True)
    tz_name = current_app.config.get("STORE_TIMEZONE")

    def _op() -> POSSale:
        created_at = now or utcnow()
        begin_write()

        business_date = local_business_date(created_at, tz_name)
        number = next_daily_number(sequence_key=RECEIPT_PREFIX, sequence_date=business_date)
        receipt_number = format_receipt_number(RECEIPT_PREFIX, business_date, number)

        products = _load_products(lines)

        subtotal = 0
        sale_items = []
        for line in lines:
            product = products[line.product_id]
            unit_price = product.unit_price_cents
            line_total = unit_price * line.quantity
            subtotal += line_total

            if not allow_oversell:
                ensure_available(product, line.quantity, line.size, line.color)
            decrement_stock(product, line.quantity, line.size, line.color)

            sale_items.append(
                POSSaleItem(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=line.quantity,
                    unit_price_cents=unit_price,
                    line_total_cents=line_total,
                    size=line.size,
                    color=line.color,
                )
            )

        discount_cents = compute_discount_cents(subtotal, discount_value, discount_type)
        total = subtotal - discount_cents

        sale = POSSale(
            receipt_number=receipt_number,
            salesman_id=salesman_id,
            subtotal_cents=subtotal,
            discount_cents=discount_cents,
            discount_type=discount_type,
            discount_value=discount_value,
            total_cents=total,
            payment_method=method,
            amount_received_cents=amount_received,
            change_given_cents=(amount_received - total) if amount_received else None,
            customer_name=customer_name,
            customer_phone=customer_phone,
            notes=notes,
            created_at=created_at,
            items=sale_items,
        )
        db.session.add(sale)
        db.session.commit()
        return sale

    try:
        sale = run_with_retry(_op)
    except (SaleError, InsufficientStockError):
        db.session.rollback()
        raise

    current_app.logger.info(
        "POS sale %s recorded by user %s: %s lines, total %s",
        sale.receipt_number, salesman_id, len(lines), sale.total_cents,
    )
    return sale


def _is_restricted(viewer: User) -> bool:
    return viewer.role == ROLE_SALESMAN


def list_sales(viewer: User, page: int = 1, limit: int = 20) -> dict:
    """Newest first. Salesmen only see their own sales."""
    page = max(page or 1, 1)
    limit = min(max(limit or 20, 1), 100)

    query = db.session.query(POSSale)
    if _is_restricted(viewer):
        query = query.filter(POSSale.salesman_id == viewer.id)

    total = query.count()
    sales = (
        query.order_by(POSSale.created_at.desc(), POSSale.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "sales": [s.to_dict() for s in sales],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": (total + limit - 1) // limit,
        },
    }


def get_sale(sale_id: int, viewer: User) -> POSSale | None:
    sale = db.session.get(POSSale, sale_id)
    if sale is None:
        return None
    if _is_restricted(viewer) and sale.salesman_id != viewer.id:
        raise SaleAccessError("Cannot view another salesman's sale")
    return sale
