"""
SHOPSEED — E-commerce Catalog Seeder
Configuration Module

Reads settings from (highest priority first):
  1. Command-line flags        (see run_seed.py)
  2. Environment variables     (DB_HOST, DB_PASSWORD, ...)
  3. Built-in defaults
"""
import os
from pathlib import Path


def _env(key: str, fallback: str = "") -> str:
    """Read a value from the environment, or fallback."""
    value = os.getenv(key)
    return fallback if value is None or value == "" else value


def _flag(key: str, fallback: str = "false") -> bool:
    return _env(key, fallback).lower() in ("true", "1", "yes")


# ─── Database ────────────────────────────────────────────────────────
DB_DRIVER = _env("DB_DRIVER", "mysql+pymysql")
DB_HOST = _env("DB_HOST", "localhost")
DB_PORT = int(_env("DB_PORT", "3306"))
DB_USER = _env("DB_USER", "root")
DB_PASSWORD = _env("DB_PASSWORD", "")
DB_NAME = _env("DB_NAME", "shop")

_base_url = f"{DB_DRIVER}://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"

DATABASE_URL = _env("DATABASE_URL", _base_url)


def masked_url(url: str | None = None) -> str:
    """Return the host/database part of a URL, without credentials."""
    url = url or DATABASE_URL
    return url.split("@")[-1] if "@" in url else url


# ─── Readiness Probe ────────────────────────────────────────────────
READINESS_MAX_ATTEMPTS = int(_env("READINESS_MAX_ATTEMPTS", "10"))
READINESS_DELAY_SECONDS = float(_env("READINESS_DELAY_SECONDS", "2.0"))

# ─── Money ──────────────────────────────────────────────────────────
TAX_RATE = float(_env("TAX_RATE", "0.10"))
CURRENCY = _env("CURRENCY", "USD")

# ─── Record Counts ──────────────────────────────────────────────────
# int          → fixed number of records for the phase
# (low, high)  → inclusive range, drawn once per parent record
SEED_COUNTS = {
    "brand": 5,
    "category": 5,
    "supplier": 5,
    "warehouse": 3,
    "warranty": 5,
    "coupon": 5,
    "customer": 10,
    "address": (1, 2),
    "product": 10,
    "product_variant": (1, 3),
    "inventory": (1, 3),
    "product_supplier": (1, 2),
    "order": (1, 3),
    "order_item": (1, 3),
    "review": 20,
    "cart_item": (0, 2),
    "wishlist": (0, 1),
    "customer_coupon": (1, 1),
    "order_coupon": (0, 2),
    "product_related": (1, 1),
    "wishlist_product": (1, 4),
    "warehouse_product": (2, 6),
}

# Share of orders that get no address / order items without a warranty
NULL_ADDRESS_PROBABILITY = 0.1
NULL_WARRANTY_PROBABILITY = 0.5

# ─── Data Generation Seed ───────────────────────────────────────────
RANDOM_SEED = int(_env("RANDOM_SEED", "42"))

# ─── Run Behaviour ──────────────────────────────────────────────────
# False: each phase commits on completion, an abort keeps earlier phases.
# True:  the whole run is one transaction, an abort leaves nothing behind.
SEED_ATOMIC = _flag("SEED_ATOMIC")

# ─── Logging ────────────────────────────────────────────────────────
LOG_DIR = Path(_env("LOG_DIR", str(Path(__file__).resolve().parent / "logs")))
