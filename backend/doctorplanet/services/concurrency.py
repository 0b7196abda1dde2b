# Overview: Row locking, SQLite write locks and retry of conflicting sale/payment transactions.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


RETRYABLE_ERRORS = (OperationalError, StaleDataError)


def lock_for_update(query):
    """
    SELECT ... FOR UPDATE on the rows a sale or payment is about to change.

    SQLite drops the clause; begin_write() covers it there.
    """
    return query.with_for_update()


def begin_write():
    """
    Take the database write lock up front on SQLite.

    SQLite has no row locks; BEGIN IMMEDIATE serializes writers so a
    read-then-write on stock cannot interleave with another sale.
    """
    if db.engine.dialect.name != "sqlite":
        return
    raw = db.session.connection().connection.dbapi_connection
    if not raw.in_transaction:
        db.session.execute(text("BEGIN IMMEDIATE"))


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Call `func` (which opens and commits its own unit of work) and replay it
    when the database reports a lock timeout or a stale version_id.

    The session is rolled back before every replay; the last error is
    re-raised once attempts run out.
    """
    for attempt in range(1, attempts + 1):
        try:
            return func()
        except RETRYABLE_ERRORS as exc:
            db.session.rollback()
            if attempt == attempts:
                raise
            delay = backoff_base * (2 ** (attempt - 1))
            current_app.logger.warning(
                "Write conflict (%s), retry %s/%s in %.2fs", type(exc).__name__, attempt, attempts - 1, delay,
            )
            time.sleep(delay)
