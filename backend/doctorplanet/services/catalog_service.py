# Overview: Service-layer operations for the product catalog as seen by the POS.

from __future__ import annotations

from sqlalchemy import or_

from ..extensions import db
from ..models import Product
from ..validation import ValidationError, coerce_cents, clean_str
from . import discount_service
from .inventory_service import set_stock


class CatalogError(Exception):
    """Raised for catalog operation errors."""
    pass


def _with_display_price(product: Product, percentage: float) -> dict:
    data = product.to_dict()
    data["unit_price_cents"] = product.unit_price_cents
    data["display_price_cents"] = discount_service.discounted_price_cents(product.unit_price_cents, percentage)
    return data


def list_pos_products(now=None) -> list[dict]:
    """Active products by name, with the storefront discount applied for display."""
    active = discount_service.get_active_discount(now=now)
    products = (
        db.session.query(Product)
        .filter(Product.is_active.is_(True))
        .order_by(Product.name.asc(), Product.id.asc())
        .all()
    )
    return [_with_display_price(p, active["percentage"]) for p in products]


def find_by_code(code: str) -> Product | None:
    """Scanner lookup: barcode first-class, SKU as fallback. Active products only."""
    code = (code or "").strip()
    if not code:
        return None
    return (
        db.session.query(Product)
        .filter(
            or_(Product.barcode == code, Product.sku == code),
            Product.is_active.is_(True),
        )
        .order_by(Product.id.asc())
        .first()
    )


def low_stock_products(threshold: int, limit: int = 5) -> list[Product]:
    return (
        db.session.query(Product)
        .filter(Product.stock < threshold)
        .order_by(Product.stock.asc(), Product.id.asc())
        .limit(limit)
        .all()
    )


def create_product(
    *,
    sku: str,
    name: str,
    price_cents,
    sale_price_cents=None,
    barcode: str | None = None,
    category: str | None = None,
    stock=None,
    color_size_stock=None,
) -> Product:
    sku = clean_str(sku, max_length=64, field="sku")
    name = clean_str(name, max_length=255, field="name")
    if not sku or not name:
        raise ValidationError("sku and name are required")

    if db.session.query(Product).filter_by(sku=sku).first():
        raise CatalogError(f"SKU {sku} already exists")
    barcode = clean_str(barcode, max_length=64, field="barcode")
    if barcode and db.session.query(Product).filter_by(barcode=barcode).first():
        raise CatalogError(f"Barcode {barcode} already exists")

    product = Product(
        sku=sku,
        name=name,
        barcode=barcode,
        category=clean_str(category, max_length=128, field="category"),
        price_cents=coerce_cents("price_cents", price_cents),
        sale_price_cents=coerce_cents("sale_price_cents", sale_price_cents, allow_none=True),
    )
    set_stock(product, stock=stock, color_size_stock=color_size_stock)

    db.session.add(product)
    db.session.commit()
    return product
