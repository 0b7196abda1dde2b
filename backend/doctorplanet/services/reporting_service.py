# Overview: Service-layer operations for dashboard revenue; read-only aggregates over orders, POS sales and udhar payments.

from __future__ import annotations

from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy import func

from ..extensions import db
from ..models import Order, POSSale, UdharPayment, Product, User
from ..models.auth import ROLE_USER
from ..models.orders import OPEN_ORDER_STATUSES
from ..time_utils import utcnow, to_utc_z, local_day_start, local_month_start, local_year_start
from .catalog_service import low_stock_products


PERIODS = ("today", "week", "month", "year", "all")


def _sum_and_count(column, count_column, *filters) -> tuple[int, int]:
    row = db.session.query(
        func.coalesce(func.sum(column), 0),
        func.count(count_column),
    ).filter(*filters).one()
    return int(row[0] or 0), int(row[1] or 0)


def web_revenue(start: datetime | None = None, end: datetime | None = None) -> tuple[int, int]:
    """Sum/count of web order totals, cancelled orders excluded."""
    filters = [Order.status != "CANCELLED"]
    if start:
        filters.append(Order.created_at >= start)
    if end:
        filters.append(Order.created_at <= end)
    return _sum_and_count(Order.total_cents, Order.id, *filters)


def pos_revenue(start: datetime | None = None, end: datetime | None = None) -> tuple[int, int]:
    filters = []
    if start:
        filters.append(POSSale.created_at >= start)
    if end:
        filters.append(POSSale.created_at <= end)
    return _sum_and_count(POSSale.total_cents, POSSale.id, *filters)


def udhar_revenue(start: datetime | None = None, end: datetime | None = None) -> tuple[int, int]:
    filters = []
    if start:
        filters.append(UdharPayment.created_at >= start)
    if end:
        filters.append(UdharPayment.created_at <= end)
    return _sum_and_count(UdharPayment.amount_cents, UdharPayment.id, *filters)


def revenue_window(start: datetime | None, end: datetime | None) -> dict:
    """
    Revenue across all three channels for one window.

    total_cents == web + pos + udhar, always.
    """
    web_cents, web_count = web_revenue(start, end)
    pos_cents, pos_count = pos_revenue(start, end)
    udhar_cents, udhar_count = udhar_revenue(start, end)
    return {
        "start": to_utc_z(start) if start else None,
        "end": to_utc_z(end) if end else None,
        "web": {"revenue_cents": web_cents, "count": web_count},
        "pos": {"revenue_cents": pos_cents, "count": pos_count},
        "udhar": {"revenue_cents": udhar_cents, "count": udhar_count},
        "total_cents": web_cents + pos_cents + udhar_cents,
    }


def dashboard_stats(now: datetime | None = None) -> dict:
    """Admin dashboard: revenue for today / this month / all time, plus headline counts."""
    now = now or utcnow()
    tz_name = current_app.config.get("STORE_TIMEZONE")
    threshold = current_app.config.get("LOW_STOCK_THRESHOLD", 10)

    today_start = local_day_start(now, tz_name)
    month_start = local_month_start(now, tz_name)

    return {
        "generated_at": to_utc_z(now),
        "revenue": {
            "today": revenue_window(today_start, now),
            "month": revenue_window(month_start, now),
            "all_time": revenue_window(None, None),
        },
        "counts": {
            "products": db.session.query(func.count(Product.id)).scalar() or 0,
            "orders": db.session.query(func.count(Order.id)).scalar() or 0,
            "pos_sales": db.session.query(func.count(POSSale.id)).scalar() or 0,
            "customers": db.session.query(func.count(User.id)).filter(User.role == ROLE_USER).scalar() or 0,
        },
        "low_stock_products": [p.to_dict() for p in low_stock_products(threshold, limit=5)],
        "recent_orders": [
            o.to_dict(include_items=False)
            for o in db.session.query(Order).order_by(Order.created_at.desc(), Order.id.desc()).limit(5).all()
        ],
        "recent_pos_sales": [
            s.to_dict(include_items=False)
            for s in db.session.query(POSSale).order_by(POSSale.created_at.desc(), POSSale.id.desc()).limit(5).all()
        ],
    }


def period_start(period: str, now: datetime, tz_name: str | None) -> datetime | None:
    if period == "today":
        return local_day_start(now, tz_name)
    if period == "week":
        return now - timedelta(days=7)
    if period == "month":
        return local_month_start(now, tz_name)
    if period == "year":
        return local_year_start(now, tz_name)
    return None


def revenue_report(period: str | None = "all", now: datetime | None = None) -> dict:
    """
    Revenue for one period (today, week, month, year, all).

    Unknown periods fall back to all-time.
    """
    period = (period or "all").lower()
    if period not in PERIODS:
        period = "all"
    now = now or utcnow()
    tz_name = current_app.config.get("STORE_TIMEZONE")

    start = period_start(period, now, tz_name)
    window = revenue_window(start, None)

    delivered_filters = [Order.status == "DELIVERED"]
    pending_filters = [Order.status.in_(OPEN_ORDER_STATUSES)]
    if start:
        delivered_filters.append(Order.created_at >= start)
        pending_filters.append(Order.created_at >= start)
    delivered_cents, delivered_count = _sum_and_count(Order.total_cents, Order.id, *delivered_filters)
    pending_count = db.session.query(func.count(Order.id)).filter(*pending_filters).scalar() or 0

    today = revenue_window(local_day_start(now, tz_name), None)

    return {
        "period": period,
        "start": window["start"],
        "web_orders": {
            "revenue_cents": window["web"]["revenue_cents"],
            "count": window["web"]["count"],
            "delivered": {"revenue_cents": delivered_cents, "count": delivered_count},
            "pending": pending_count,
        },
        "pos_sales": window["pos"],
        "udhar_payments": window["udhar"],
        "combined": {
            "revenue_cents": window["total_cents"],
            "transactions": window["web"]["count"] + window["pos"]["count"] + window["udhar"]["count"],
        },
        "today": {
            "web_orders": today["web"],
            "pos_sales": today["pos"],
            "udhar_payments": today["udhar"],
            "total_cents": today["total_cents"],
        },
    }
