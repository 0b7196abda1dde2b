# Overview: Service-layer operations for udhar (credit) ledgers kept per shop.

from __future__ import annotations

from datetime import datetime

from flask import current_app

from ..extensions import db
from ..models import Shop, UdharTransaction, UdharPayment
from ..models.sales import PAYMENT_METHODS
from ..time_utils import utcnow
from ..validation import ValidationError, coerce_cents, coerce_datetime, coerce_int, clean_str
from .concurrency import lock_for_update, run_with_retry


class UdharError(Exception):
    """Raised for udhar operation errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class UdharNotFoundError(UdharError):
    pass


def create_shop(data: dict, user_id: int | None = None) -> Shop:
    name = clean_str(data.get("name"), max_length=255, field="name")
    if not name:
        raise ValidationError("name is required")
    shop = Shop(
        name=name,
        owner_name=clean_str(data.get("owner_name"), max_length=255, field="owner_name"),
        phone=clean_str(data.get("phone"), max_length=32, field="phone"),
        address=clean_str(data.get("address")),
        created_by_user_id=user_id,
    )
    db.session.add(shop)
    db.session.commit()
    return shop


def list_shops() -> list[dict]:
    return [s.to_dict() for s in db.session.query(Shop).order_by(Shop.name.asc(), Shop.id.asc()).all()]


def create_transaction(data: dict, user_id: int | None = None, now: datetime | None = None) -> UdharTransaction:
    missing = [f for f in ("shop_id", "items", "total_amount_cents") if not data.get(f)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    shop_id = coerce_int("shop_id", data["shop_id"])
    if db.session.get(Shop, shop_id) is None:
        raise UdharNotFoundError("Shop not found", details={"shop_id": shop_id})

    items = data["items"]
    if not isinstance(items, list):
        raise ValidationError("items must be a list")

    total = coerce_cents("total_amount_cents", data["total_amount_cents"])
    if total <= 0:
        raise ValidationError("total_amount_cents must be > 0")

    txn = UdharTransaction(
        shop_id=shop_id,
        items=items,
        total_amount_cents=total,
        paid_amount_cents=0,
        remaining_amount_cents=total,
        status="UNPAID",
        due_date=coerce_datetime("due_date", data.get("due_date")),
        notes=clean_str(data.get("notes")),
        created_by_user_id=user_id,
        created_at=now or utcnow(),
    )
    db.session.add(txn)
    db.session.commit()
    return txn


def list_transactions(shop_id: int | None = None) -> list[dict]:
    query = db.session.query(UdharTransaction)
    if shop_id:
        query = query.filter(UdharTransaction.shop_id == shop_id)
    return [t.to_dict() for t in query.order_by(UdharTransaction.created_at.desc(), UdharTransaction.id.desc()).all()]


def resolve_status(txn: UdharTransaction, now: datetime) -> str:
    """
    PAID when nothing remains, PARTIAL when something was paid, otherwise
    unchanged; unpaid balances past the due date are OVERDUE.
    """
    status = txn.status
    if txn.remaining_amount_cents == 0:
        return "PAID"
    if txn.paid_amount_cents > 0:
        status = "PARTIAL"
    if txn.due_date and now > txn.due_date:
        status = "OVERDUE"
    return status


def record_payment(
    transaction_id: int,
    *,
    amount_cents,
    payment_method: str | None = None,
    notes: str | None = None,
    user_id: int | None = None,
    now: datetime | None = None,
) -> tuple[UdharPayment, UdharTransaction]:
    amount = coerce_cents("amount_cents", amount_cents)
    if amount <= 0:
        raise ValidationError("Invalid payment amount")
    method = (payment_method or "CASH").strip().upper()
    if method not in PAYMENT_METHODS:
        raise ValidationError(f"payment_method must be one of: {', '.join(PAYMENT_METHODS)}")

    def _op():
        paid_at = now or utcnow()
        txn = lock_for_update(db.session.query(UdharTransaction).filter_by(id=transaction_id)).first()
        if txn is None:
            raise UdharNotFoundError("Transaction not found")
        if amount > txn.remaining_amount_cents:
            raise UdharError(
                "Payment amount exceeds remaining balance",
                details={"remaining_amount_cents": txn.remaining_amount_cents},
            )

        payment = UdharPayment(
            transaction_id=txn.id,
            shop_id=txn.shop_id,
            amount_cents=amount,
            payment_method=method,
            notes=clean_str(notes),
            created_by_user_id=user_id,
            created_at=paid_at,
        )
        db.session.add(payment)

        txn.paid_amount_cents += amount
        txn.remaining_amount_cents = txn.total_amount_cents - txn.paid_amount_cents
        txn.status = resolve_status(txn, paid_at)

        db.session.commit()
        return payment, txn

    try:
        payment, txn = run_with_retry(_op)
    except UdharError:
        db.session.rollback()
        raise

    current_app.logger.info(
        "Udhar payment %s on transaction %s: %s (remaining %s)",
        payment.id, txn.id, amount, txn.remaining_amount_cents,
    )
    return payment, txn


def list_payments() -> list[dict]:
    payments = db.session.query(UdharPayment).order_by(UdharPayment.created_at.desc(), UdharPayment.id.desc()).all()
    return [p.to_dict() for p in payments]
