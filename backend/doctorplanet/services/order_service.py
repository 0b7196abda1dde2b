# Overview: Service-layer operations for web orders; listing and admin status changes.

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Order
from ..models.orders import ORDER_STATUSES, PAYMENT_STATUSES
from ..validation import ValidationError


class OrderError(Exception):
    """Raised for order operation errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class OrderNotFoundError(OrderError):
    pass


def _paginate(query, page: int, limit: int) -> dict:
    page = max(page or 1, 1)
    limit = min(max(limit or 20, 1), 100)
    total = query.count()
    orders = query.offset((page - 1) * limit).limit(limit).all()
    return {
        "orders": [o.to_dict() for o in orders],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": (total + limit - 1) // limit,
        },
    }


def list_orders(status: str | None = None, page: int = 1, limit: int = 20) -> dict:
    query = db.session.query(Order)
    if status:
        status = status.upper()
        if status not in ORDER_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(ORDER_STATUSES)}")
        query = query.filter(Order.status == status)
    query = query.order_by(Order.created_at.desc(), Order.id.desc())
    return _paginate(query, page, limit)


def list_user_orders(user_id: int, page: int = 1, limit: int = 20) -> dict:
    query = (
        db.session.query(Order)
        .filter(Order.user_id == user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    return _paginate(query, page, limit)


def get_order(order_id: int) -> Order | None:
    return db.session.get(Order, order_id)


def update_order(order_id: int, *, status: str | None = None, payment_status: str | None = None) -> Order:
    """
    Admin update of order status and/or payment status.

    CANCELLED is terminal: a cancelled order cannot move to another status.
    """
    if not status and not payment_status:
        raise ValidationError("status or payment_status required")

    order = db.session.get(Order, order_id)
    if order is None:
        raise OrderNotFoundError("Order not found")

    previous_status = order.status

    if status:
        status = status.strip().upper()
        if status not in ORDER_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(ORDER_STATUSES)}")
        if previous_status == "CANCELLED" and status != "CANCELLED":
            raise OrderError(
                "Cancelled orders cannot be reopened",
                details={"order_id": order.id, "status": previous_status},
            )
        order.status = status

    if payment_status:
        payment_status = payment_status.strip().upper()
        if payment_status not in PAYMENT_STATUSES:
            raise ValidationError(f"payment_status must be one of: {', '.join(PAYMENT_STATUSES)}")
        order.payment_status = payment_status

    db.session.commit()

    if status and status != previous_status:
        current_app.logger.info(
            "Order %s status %s -> %s", order.order_number, previous_status, status,
        )
    return order
