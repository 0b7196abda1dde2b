from __future__ import annotations

from ..extensions import db


class DailySequence(db.Model):
    """
    Atomic per-day counters for human-readable numbers.

    One row per (sequence_key, sequence_date). Numbers are handed out by an
    UPDATE ... SET next_number = next_number + 1, never by counting rows.
    """
    __tablename__ = "daily_sequences"
    __table_args__ = (
        db.UniqueConstraint("sequence_key", "sequence_date", name="uq_daily_sequences_key_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sequence_key = db.Column(db.String(32), nullable=False, index=True)
    sequence_date = db.Column(db.Date, nullable=False)
    next_number = db.Column(db.Integer, nullable=False, default=1)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
