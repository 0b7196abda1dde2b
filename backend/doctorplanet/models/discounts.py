from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


GLOBAL_DISCOUNT_ID = "main"


class GlobalDiscount(db.Model):
    """
    Store-wide percentage discount shown on the storefront.

    Singleton: there is exactly one row, id "main". Admins overwrite it in place.
    """
    __tablename__ = "global_discounts"

    id = db.Column(db.String(16), primary_key=True, default=GLOBAL_DISCOUNT_ID)
    is_active = db.Column(db.Boolean, nullable=False, default=False)
    percentage = db.Column(db.Float, nullable=False, default=0)

    start_date = db.Column(db.DateTime(timezone=True), nullable=True)
    end_date = db.Column(db.DateTime(timezone=True), nullable=True)

    updated_by = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "is_active": self.is_active,
            "percentage": self.percentage,
            "start_date": to_utc_z(self.start_date) if self.start_date else None,
            "end_date": to_utc_z(self.end_date) if self.end_date else None,
            "updated_by": self.updated_by,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
