# Overview: Service-layer operations for the store-wide (global) discount.

from __future__ import annotations

from datetime import datetime

from ..extensions import db
from ..models import GlobalDiscount
from ..models.discounts import GLOBAL_DISCOUNT_ID
from ..time_utils import utcnow
from ..validation import ValidationError, coerce_number, coerce_datetime


def get_global_discount() -> GlobalDiscount:
    """Return the singleton row, creating an inactive 0% one on first read."""
    discount = db.session.get(GlobalDiscount, GLOBAL_DISCOUNT_ID)
    if discount is None:
        discount = GlobalDiscount(id=GLOBAL_DISCOUNT_ID, is_active=False, percentage=0)
        db.session.add(discount)
        db.session.commit()
    return discount


def validate_discount_payload(data: dict) -> dict:
    """
    Normalize a PUT body into column values.

    Omitted fields fall back to their defaults (inactive, 0%, no dates);
    the row is replaced as a whole, not patched.
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")

    raw_pct = data.get("percentage")
    percentage = 0.0 if raw_pct is None else coerce_number("percentage", raw_pct)
    if percentage < 0 or percentage > 100:
        raise ValidationError("Percentage must be between 0 and 100")

    is_active = data.get("is_active")
    if is_active is None:
        is_active = False
    elif not isinstance(is_active, bool):
        raise ValidationError("is_active must be a boolean")

    start_date = coerce_datetime("start_date", data.get("start_date"))
    end_date = coerce_datetime("end_date", data.get("end_date"))
    if start_date and end_date and start_date > end_date:
        raise ValidationError("start_date must be on or before end_date")

    return {
        "is_active": is_active,
        "percentage": percentage,
        "start_date": start_date,
        "end_date": end_date,
    }


def update_global_discount(data: dict, updated_by: str | None = None) -> GlobalDiscount:
    values = validate_discount_payload(data)

    discount = db.session.get(GlobalDiscount, GLOBAL_DISCOUNT_ID)
    if discount is None:
        discount = GlobalDiscount(id=GLOBAL_DISCOUNT_ID)
        db.session.add(discount)

    for key, value in values.items():
        setattr(discount, key, value)
    discount.updated_by = updated_by

    db.session.commit()
    return discount


def is_in_effect(discount: GlobalDiscount | None, now: datetime | None = None) -> bool:
    if discount is None or not discount.is_active:
        return False
    now = now or utcnow()
    if discount.start_date and now < discount.start_date:
        return False
    if discount.end_date and now > discount.end_date:
        return False
    return True


def get_active_discount(now: datetime | None = None) -> dict:
    """Public view: what the storefront should apply right now."""
    discount = db.session.get(GlobalDiscount, GLOBAL_DISCOUNT_ID)
    if not is_in_effect(discount, now):
        return {"is_active": False, "percentage": 0}
    return {"is_active": True, "percentage": discount.percentage}


def discounted_price_cents(price_cents: int, percentage: float) -> int:
    if not percentage:
        return price_cents
    return int(round(price_cents * (100 - percentage) / 100))
