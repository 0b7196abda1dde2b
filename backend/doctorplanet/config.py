# backend/doctorplanet/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/doctorplanet.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///doctorplanet.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Business day / month boundaries (receipt dates, dashboard windows)
    STORE_TIMEZONE = os.environ.get("STORE_TIMEZONE", "UTC")

    # Clamp oversold stock at zero instead of rejecting the sale
    POS_ALLOW_OVERSELL = _env_flag("POS_ALLOW_OVERSELL", True)

    LOW_STOCK_THRESHOLD = int(os.environ.get("LOW_STOCK_THRESHOLD", "10"))

    # Printed receipt header/footer
    RECEIPT_SHOP_NAME = os.environ.get("RECEIPT_SHOP_NAME", "Doctor Planet")
    RECEIPT_SHOP_ADDRESS = os.environ.get("RECEIPT_SHOP_ADDRESS", "")
    RECEIPT_SHOP_PHONE = os.environ.get("RECEIPT_SHOP_PHONE", "")
    RECEIPT_FOOTER = os.environ.get("RECEIPT_FOOTER", "Thank you for shopping with us!")
    CURRENCY_SYMBOL = os.environ.get("CURRENCY_SYMBOL", "Rs.")

    CORS_ALLOWED_ORIGINS = {
        origin.strip()
        for origin in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000",
        ).split(",")
        if origin.strip()
    }
