# Overview: Plain-text printable receipts for POS sales and web orders.

from __future__ import annotations

from flask import current_app

from ..models import POSSale, Order
from ..time_utils import to_local


RECEIPT_WIDTH = 40


def format_money(cents: int | None, symbol: str | None = None) -> str:
    if symbol is None:
        symbol = current_app.config.get("CURRENCY_SYMBOL", "Rs.")
    cents = cents or 0
    sign = "-" if cents < 0 else ""
    return f"{sign}{symbol} {abs(cents) / 100:,.2f}"


def _row(left: str, right: str, width: int = RECEIPT_WIDTH) -> str:
    space = max(width - len(left) - len(right), 1)
    return f"{left}{' ' * space}{right}"


def _rule(char: str = "-") -> str:
    return char * RECEIPT_WIDTH


def _header() -> list[str]:
    cfg = current_app.config
    lines = [cfg.get("RECEIPT_SHOP_NAME", "").center(RECEIPT_WIDTH).rstrip()]
    for key in ("RECEIPT_SHOP_ADDRESS", "RECEIPT_SHOP_PHONE"):
        if cfg.get(key):
            lines.append(cfg[key].center(RECEIPT_WIDTH).rstrip())
    lines.append(_rule("="))
    return lines


def _footer() -> list[str]:
    footer = current_app.config.get("RECEIPT_FOOTER")
    lines = [_rule("=")]
    if footer:
        lines.append(footer.center(RECEIPT_WIDTH).rstrip())
    return lines


def _item_lines(name: str, quantity: int, unit_cents: int, size: str | None, color: str | None) -> list[str]:
    variant = " / ".join(v for v in (color, size) if v)
    label = f"{name} ({variant})" if variant else name
    return [
        label[:RECEIPT_WIDTH],
        _row(f"  {quantity} x {format_money(unit_cents)}", format_money(unit_cents * quantity)),
    ]


def _timestamp(dt) -> str:
    local = to_local(dt, current_app.config.get("STORE_TIMEZONE"))
    return local.strftime("%d/%m/%Y %I:%M %p")


def render_sale_receipt(sale: POSSale) -> str:
    lines = _header()
    lines.append(_row("Receipt:", sale.receipt_number))
    lines.append(_row("Date:", _timestamp(sale.created_at)))
    if sale.salesman:
        lines.append(_row("Salesman:", sale.salesman.display_name))
    if sale.customer_name:
        lines.append(_row("Customer:", sale.customer_name))
    if sale.customer_phone:
        lines.append(_row("Phone:", sale.customer_phone))
    lines.append(_rule())

    for item in sale.items:
        lines.extend(_item_lines(item.product_name, item.quantity, item.unit_price_cents, item.size, item.color))

    lines.append(_rule())
    lines.append(_row("Subtotal", format_money(sale.subtotal_cents)))
    if sale.discount_cents:
        label = "Discount"
        if sale.discount_type == "PERCENTAGE" and sale.discount_value is not None:
            label = f"Discount ({sale.discount_value:g}%)"
        lines.append(_row(label, f"-{format_money(sale.discount_cents)}"))
    lines.append(_row("TOTAL", format_money(sale.total_cents)))
    lines.append(_row("Payment", sale.payment_method))
    if sale.amount_received_cents is not None:
        lines.append(_row("Received", format_money(sale.amount_received_cents)))
    if sale.change_given_cents is not None:
        lines.append(_row("Change", format_money(sale.change_given_cents)))
    if sale.notes:
        lines.append(_rule())
        lines.append(sale.notes)

    lines.extend(_footer())
    return "\n".join(lines) + "\n"


def render_order_receipt(order: Order) -> str:
    lines = _header()
    lines.append(_row("Order:", order.order_number))
    lines.append(_row("Date:", _timestamp(order.created_at)))
    lines.append(_row("Status:", order.status))

    address = order.shipping_address or {}
    name = address.get("full_name") or address.get("name") or (order.user.display_name if order.user else "")
    if name:
        lines.append(_row("Ship to:", name))
    for key in ("address", "city", "phone"):
        if address.get(key):
            lines.append(f"  {address[key]}"[:RECEIPT_WIDTH])
    lines.append(_rule())

    for item in order.items:
        lines.extend(_item_lines(item.product_name, item.quantity, item.price_cents, item.size, item.color))

    lines.append(_rule())
    lines.append(_row("Subtotal", format_money(order.subtotal_cents)))
    lines.append(_row("Shipping", format_money(order.shipping_fee_cents)))
    lines.append(_row("TOTAL", format_money(order.total_cents)))
    lines.append(_row("Payment", f"{order.payment_method} ({order.payment_status})"))

    lines.extend(_footer())
    return "\n".join(lines) + "\n"
