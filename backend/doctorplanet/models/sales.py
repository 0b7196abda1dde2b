from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


DISCOUNT_FLAT = "FLAT"
DISCOUNT_PERCENTAGE = "PERCENTAGE"

PAYMENT_METHODS = ("CASH", "CARD", "BANK_TRANSFER", "EASYPAISA", "JAZZCASH")


class POSSale(db.Model):
    """
    In-store sale recorded by a salesman.

    Created together with its items in one transaction and never edited after.
    All amounts are in cents.
    """
    __tablename__ = "pos_sales"
    __table_args__ = (
        db.Index("ix_pos_sales_salesman_created", "salesman_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Human-readable receipt number (e.g., "POS-20261018-0001")
    receipt_number = db.Column(db.String(32), nullable=False, unique=True)

    salesman_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    subtotal_cents = db.Column(db.Integer, nullable=False)
    discount_cents = db.Column(db.Integer, nullable=False, default=0)
    discount_type = db.Column(db.String(16), nullable=True)  # FLAT, PERCENTAGE
    # As entered: percent for PERCENTAGE, cents for FLAT
    discount_value = db.Column(db.Float, nullable=True)
    total_cents = db.Column(db.Integer, nullable=False)

    payment_method = db.Column(db.String(32), nullable=False, default="CASH")
    amount_received_cents = db.Column(db.Integer, nullable=True)
    change_given_cents = db.Column(db.Integer, nullable=True)

    customer_name = db.Column(db.String(255), nullable=True)
    customer_phone = db.Column(db.String(32), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    salesman = db.relationship("User", backref=db.backref("pos_sales", lazy=True))

    def to_dict(self, include_items: bool = True) -> dict:
        data = {
            "id": self.id,
            "receipt_number": self.receipt_number,
            "salesman_id": self.salesman_id,
            "salesman_name": self.salesman.display_name if self.salesman else None,
            "subtotal_cents": self.subtotal_cents,
            "discount_cents": self.discount_cents,
            "discount_type": self.discount_type,
            "discount_value": self.discount_value,
            "total_cents": self.total_cents,
            "payment_method": self.payment_method,
            "amount_received_cents": self.amount_received_cents,
            "change_given_cents": self.change_given_cents,
            "customer_name": self.customer_name,
            "customer_phone": self.customer_phone,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class POSSaleItem(db.Model):
    """Line item on a POS sale; product name and price are snapshots at sale time."""
    __tablename__ = "pos_sale_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("pos_sales.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    product_name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    line_total_cents = db.Column(db.Integer, nullable=False)

    size = db.Column(db.String(32), nullable=True)
    color = db.Column(db.String(64), nullable=True)

    sale = db.relationship(
        "POSSale",
        backref=db.backref("items", lazy=True, order_by="POSSaleItem.id"),
    )
    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_id": self.sale_id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "line_total_cents": self.line_total_cents,
            "size": self.size,
            "color": self.color,
        }
