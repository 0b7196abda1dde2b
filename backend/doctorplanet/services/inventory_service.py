# Overview: Service-layer operations for product stock; keeps variant and flat counts consistent.

from __future__ import annotations

import copy
from dataclasses import dataclass

from flask import current_app

from ..models import Product
from ..validation import ValidationError


class InsufficientStockError(Exception):
    """Raised when oversell is disabled and a line asks for more than is on hand."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


@dataclass(frozen=True)
class StockChange:
    product_id: int
    mode: str  # VARIANT, FLAT, SKIPPED
    previous: int
    current: int
    requested: int

    @property
    def clamped(self) -> bool:
        return self.previous - self.requested < 0


def normalize_color_size_stock(raw) -> dict[str, dict[str, int]] | None:
    """
    Validate a {color: {size: count}} map coming from the API or CLI.

    Empty maps collapse to None. Counts must be non-negative integers.
    """
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ValidationError("color_size_stock must be an object of {color: {size: count}}")

    cleaned: dict[str, dict[str, int]] = {}
    for color, sizes in raw.items():
        if not isinstance(sizes, dict):
            raise ValidationError(f"color_size_stock[{color}] must be an object of {{size: count}}")
        cleaned[str(color)] = {}
        for size, count in sizes.items():
            if isinstance(count, bool) or not isinstance(count, int) or count < 0:
                raise ValidationError(f"color_size_stock[{color}][{size}] must be a non-negative integer")
            cleaned[str(color)][str(size)] = count
    return cleaned or None


def total_variant_stock(color_size_stock: dict | None) -> int:
    if not color_size_stock:
        return 0
    return sum(int(count) for sizes in color_size_stock.values() for count in sizes.values())


def _has_variant_cell(product: Product, size: str | None, color: str | None) -> bool:
    if not (size and color and product.color_size_stock):
        return False
    sizes = product.color_size_stock.get(color)
    return isinstance(sizes, dict) and size in sizes


def _uses_variant_stock(product: Product, size: str | None, color: str | None) -> bool:
    return bool(size and color and product.color_size_stock)


def available_quantity(product: Product, size: str | None = None, color: str | None = None) -> int | None:
    """
    Quantity a line would draw from: the variant cell for size+color lines on
    variant products, the flat stock otherwise. None when the variant cell
    does not exist (such lines do not touch stock).
    """
    if _uses_variant_stock(product, size, color):
        if not _has_variant_cell(product, size, color):
            return None
        return int(product.color_size_stock[color][size])
    return product.stock


def ensure_available(product: Product, quantity: int, size: str | None = None, color: str | None = None) -> None:
    on_hand = available_quantity(product, size, color)
    if on_hand is not None and on_hand < quantity:
        raise InsufficientStockError(
            f"Insufficient stock for {product.name}",
            details={
                "product_id": product.id,
                "size": size,
                "color": color,
                "requested_quantity": quantity,
                "on_hand": on_hand,
            },
        )


def decrement_stock(product: Product, quantity: int, size: str | None = None, color: str | None = None) -> StockChange:
    """
    Take `quantity` units out of stock, floored at zero.

    - size + color on a variant product: decrement that cell, then recompute
      `stock` as the sum of the whole map.
    - anything else: decrement the flat `stock`.

    The caller holds the product row (lock_for_update) and commits.
    """
    if _uses_variant_stock(product, size, color):
        if not _has_variant_cell(product, size, color):
            current_app.logger.warning(
                "No stock cell for product %s color=%s size=%s; stock left unchanged",
                product.id, color, size,
            )
            return StockChange(product.id, "SKIPPED", product.stock, product.stock, quantity)

        # JSON columns only see reassignment, not in-place edits
        matrix = copy.deepcopy(product.color_size_stock)
        previous = int(matrix[color][size])
        matrix[color][size] = max(0, previous - quantity)
        product.color_size_stock = matrix
        product.stock = total_variant_stock(matrix)
        change = StockChange(product.id, "VARIANT", previous, matrix[color][size], quantity)
    else:
        previous = product.stock
        product.stock = max(0, previous - quantity)
        change = StockChange(product.id, "FLAT", previous, product.stock, quantity)

    if change.clamped:
        current_app.logger.warning(
            "Oversold product %s (%s): requested %s, had %s; clamped to 0",
            product.id, change.mode, quantity, previous,
        )
    return change


def set_stock(product: Product, *, stock: int | None = None, color_size_stock=None) -> None:
    """
    Replace a product's stock. A variant map, when given, wins and `stock`
    becomes its sum.
    """
    matrix = normalize_color_size_stock(color_size_stock)
    if matrix is not None:
        product.color_size_stock = matrix
        product.stock = total_variant_stock(matrix)
        return

    product.color_size_stock = None
    if stock is None:
        stock = 0
    if isinstance(stock, bool) or not isinstance(stock, int) or stock < 0:
        raise ValidationError("stock must be a non-negative integer")
    product.stock = stock
