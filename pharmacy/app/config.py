#!/usr/bin/env python3
"""
Configuration management for the pharmacy assistant backend.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

DEFAULT_DB_PATH = os.path.join(os.path.dirname(__file__), "..", "data", "pharmacy.db")


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Config:
    """Configuration class for the application."""

    # Database Configuration
    DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{os.path.abspath(DEFAULT_DB_PATH)}")

    # HTTP Configuration
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # Inventory / loyalty thresholds used by the assistant and reports
    LOW_STOCK_THRESHOLD = int(os.getenv("LOW_STOCK_THRESHOLD", 10))
    EXPIRY_WINDOW_DAYS = int(os.getenv("EXPIRY_WINDOW_DAYS", 30))
    HIGH_LOYALTY_POINTS = int(os.getenv("HIGH_LOYALTY_POINTS", 50))
    NEAR_EXPIRY_DISCOUNT_MONTHS = 3
    NEAR_EXPIRY_DISCOUNT_PERCENT = 20
    MIN_REDEEM_POINTS = 50

    # External lookup (medical reference scraping)
    EXTERNAL_LOOKUP_ENABLED = _env_bool("EXTERNAL_LOOKUP_ENABLED", "true")
    EXTERNAL_LOOKUP_TIMEOUT = float(os.getenv("EXTERNAL_LOOKUP_TIMEOUT", 10))
    EXTERNAL_LOOKUP_MAX_WORKERS = int(os.getenv("EXTERNAL_LOOKUP_MAX_WORKERS", 10))

    @classmethod
    def debug_print(cls):
        print(f"[CONFIG] DATABASE_URL={cls.DATABASE_URL}")
        print(f"[CONFIG] LOW_STOCK_THRESHOLD={cls.LOW_STOCK_THRESHOLD} EXPIRY_WINDOW_DAYS={cls.EXPIRY_WINDOW_DAYS}")
        print(f"[CONFIG] EXTERNAL_LOOKUP enabled={cls.EXTERNAL_LOOKUP_ENABLED} timeout={cls.EXTERNAL_LOOKUP_TIMEOUT}s")

    @classmethod
    def validate(cls):
        """Validate that all required configuration is present."""
        missing = []
        invalid = []

        if not cls.DATABASE_URL:
            missing.append("DATABASE_URL")

        for name in ("LOW_STOCK_THRESHOLD", "EXPIRY_WINDOW_DAYS", "HIGH_LOYALTY_POINTS",
                     "EXTERNAL_LOOKUP_TIMEOUT", "EXTERNAL_LOOKUP_MAX_WORKERS"):
            if getattr(cls, name) <= 0:
                invalid.append(name)

        if missing:
            raise ValueError(f"Missing required configuration: {', '.join(missing)}")
        if invalid:
            raise ValueError(f"Configuration values must be positive: {', '.join(invalid)}")

        return True

# Validate configuration on import
Config.validate()
