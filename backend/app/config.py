# backend/app/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/backoffice.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///backoffice.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Products at or below this quantity count as "low stock" on the dashboard
    LOW_STOCK_THRESHOLD = int(os.environ.get("LOW_STOCK_THRESHOLD", "10"))

    # List endpoints
    DEFAULT_PER_PAGE = int(os.environ.get("DEFAULT_PER_PAGE", "15"))
    MAX_PER_PAGE = int(os.environ.get("MAX_PER_PAGE", "100"))

    # Dashboard widgets
    RECENT_SALES_LIMIT = 5
    TOP_PRODUCTS_LIMIT = 5
