# Overview: Service-layer operations for daily number sequences.

from __future__ import annotations

from datetime import date

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import DailySequence


class SequenceError(Exception):
    """Raised when sequence operations fail."""
    pass


def _current_next_number(sequence_key: str, sequence_date: date) -> int:
    return (
        db.session.query(DailySequence.next_number)
        .filter_by(sequence_key=sequence_key, sequence_date=sequence_date)
        .scalar()
    )


def next_daily_number(*, sequence_key: str, sequence_date: date) -> int:
    """
    Atomically allocate the next number for (sequence_key, sequence_date).

    The first caller of the day gets 1. Runs inside the caller's transaction
    and must be its first write: losing the race to create the day's row
    rolls the session back.
    """
    if not sequence_key:
        raise SequenceError("sequence_key is required")
    if sequence_date is None:
        raise SequenceError("sequence_date is required")

    stmt = (
        update(DailySequence)
        .where(
            DailySequence.sequence_key == sequence_key,
            DailySequence.sequence_date == sequence_date,
        )
        .values(next_number=DailySequence.next_number + 1)
        .execution_options(synchronize_session=False)
    )

    result = db.session.execute(stmt)
    if result.rowcount:
        return _current_next_number(sequence_key, sequence_date) - 1

    seq = DailySequence(sequence_key=sequence_key, sequence_date=sequence_date, next_number=2)
    db.session.add(seq)
    try:
        db.session.flush()
    except IntegrityError:
        # Another writer created today's row first
        db.session.rollback()
        result = db.session.execute(stmt)
        if not result.rowcount:
            raise
        return _current_next_number(sequence_key, sequence_date) - 1
    return 1


def format_receipt_number(prefix: str, sequence_date: date, number: int, pad: int = 4) -> str:
    return f"{prefix}-{sequence_date.strftime('%Y%m%d')}-{number:0{pad}d}"
