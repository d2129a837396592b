"""
SHOPSEED — Shared test fixtures.
An in-memory SQLite store carrying the e-commerce schema, with unique keys
on the junction tables and a trigger that rejects coupons whose minimum
purchase is above the order subtotal.
"""

import datetime as dt
import os
import sqlite3
import sys
from decimal import Decimal

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.pool import StaticPool

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

sqlite3.register_adapter(Decimal, str)
sqlite3.register_adapter(dt.date, lambda d: d.isoformat())
sqlite3.register_adapter(dt.datetime, lambda d: d.isoformat(" "))


SCHEMA = [
    """CREATE TABLE brand (
        brand_id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL, description TEXT, logo_url TEXT, website TEXT,
        is_active BOOLEAN NOT NULL DEFAULT 1)""",
    """CREATE TABLE category (
        category_id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL, description TEXT, display_order INTEGER,
        is_active BOOLEAN NOT NULL DEFAULT 1)""",
    """CREATE TABLE supplier (
        supplier_id INTEGER PRIMARY KEY AUTOINCREMENT,
        company_name TEXT NOT NULL, contact_name TEXT, email TEXT, phone TEXT,
        address TEXT, city TEXT, postal_code TEXT, country TEXT,
        payment_terms TEXT, is_active BOOLEAN)""",
    """CREATE TABLE warehouse (
        warehouse_id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL, code TEXT, address TEXT, city TEXT,
        postal_code TEXT, country TEXT, manager_name TEXT, phone TEXT,
        is_active BOOLEAN)""",
    """CREATE TABLE warranty (
        warranty_id INTEGER PRIMARY KEY AUTOINCREMENT,
        warranty_type TEXT NOT NULL,
        duration_months INTEGER CHECK (duration_months BETWEEN 6 AND 36),
        terms_conditions TEXT, price NUMERIC(10,2))""",
    """CREATE TABLE coupon (
        coupon_id INTEGER PRIMARY KEY AUTOINCREMENT,
        code TEXT NOT NULL, description TEXT, discount_type TEXT,
        discount_value INTEGER, minimum_purchase NUMERIC(10,2),
        valid_from TIMESTAMP, valid_until TIMESTAMP, usage_limit INTEGER,
        times_used INTEGER, is_active BOOLEAN)""",
    """CREATE TABLE customer (
        customer_id INTEGER PRIMARY KEY AUTOINCREMENT,
        email TEXT NOT NULL UNIQUE, password TEXT, first_name TEXT,
        last_name TEXT, phone_number TEXT, date_of_birth DATE)""",
    """CREATE TABLE address (
        address_id INTEGER PRIMARY KEY AUTOINCREMENT,
        customer_id INTEGER NOT NULL REFERENCES customer(customer_id),
        address_type TEXT, recipient_name TEXT, street_address TEXT,
        city TEXT, state_province TEXT, postal_code TEXT, country TEXT,
        phone TEXT, is_default BOOLEAN)""",
    """CREATE TABLE product (
        product_id INTEGER PRIMARY KEY AUTOINCREMENT,
        sku TEXT NOT NULL, name TEXT NOT NULL, description TEXT,
        brand_id INTEGER NOT NULL REFERENCES brand(brand_id),
        category_id INTEGER NOT NULL REFERENCES category(category_id),
        base_price NUMERIC(10,2), weight INTEGER, dimensions_length INTEGER,
        dimensions_width INTEGER, dimensions_height INTEGER,
        is_active BOOLEAN, created_at TIMESTAMP, updated_at TIMESTAMP)""",
    """CREATE TABLE productvariant (
        variant_id INTEGER PRIMARY KEY AUTOINCREMENT,
        product_id INTEGER NOT NULL REFERENCES product(product_id),
        sku_variant TEXT, variant_name TEXT, additional_price NUMERIC(10,2),
        stock_quantity INTEGER CHECK (stock_quantity BETWEEN 0 AND 100),
        reserved_quantity INTEGER CHECK (reserved_quantity BETWEEN 0 AND 20),
        color TEXT, size TEXT, other_attributes TEXT)""",
    """CREATE TABLE inventory (
        inventory_id INTEGER PRIMARY KEY AUTOINCREMENT,
        product_variant_id INTEGER NOT NULL REFERENCES productvariant(variant_id),
        warehouse_id INTEGER NOT NULL REFERENCES warehouse(warehouse_id),
        quantity_available INTEGER, quantity_reserved INTEGER,
        reorder_level INTEGER, reorder_quantity INTEGER,
        last_restock_date TIMESTAMP,
        UNIQUE (product_variant_id, warehouse_id))""",
    """CREATE TABLE productsupplier (
        product_id INTEGER NOT NULL REFERENCES product(product_id),
        supplier_id INTEGER NOT NULL REFERENCES supplier(supplier_id),
        supplier_sku TEXT, cost_price NUMERIC(10,2), lead_time_days INTEGER,
        minimum_order_quantity INTEGER,
        PRIMARY KEY (product_id, supplier_id))""",
    """CREATE TABLE "order" (
        order_id INTEGER PRIMARY KEY AUTOINCREMENT,
        customer_id INTEGER NOT NULL REFERENCES customer(customer_id),
        order_number TEXT NOT NULL, order_date TIMESTAMP, status TEXT,
        shipping_address_id INTEGER REFERENCES address(address_id),
        billing_address_id INTEGER REFERENCES address(address_id),
        subtotal NUMERIC(10,2) NOT NULL, tax_amount NUMERIC(10,2) NOT NULL,
        shipping_cost NUMERIC(10,2) NOT NULL, discount_amount NUMERIC(10,2) NOT NULL,
        total_amount NUMERIC(10,2) NOT NULL CHECK (total_amount >= 0),
        notes TEXT)""",
    """CREATE TABLE orderitem (
        order_item_id INTEGER PRIMARY KEY AUTOINCREMENT,
        order_id INTEGER NOT NULL REFERENCES "order"(order_id),
        product_variant_id INTEGER NOT NULL REFERENCES productvariant(variant_id),
        quantity INTEGER CHECK (quantity BETWEEN 1 AND 5),
        unit_price NUMERIC(10,2), discount_amount NUMERIC(10,2),
        tax_amount NUMERIC(10,2), total_price NUMERIC(10,2) CHECK (total_price >= 0),
        warranty_id INTEGER REFERENCES warranty(warranty_id))""",
    """CREATE TABLE payment (
        payment_id INTEGER PRIMARY KEY AUTOINCREMENT,
        order_id INTEGER NOT NULL REFERENCES "order"(order_id),
        payment_method TEXT, transaction_id TEXT, amount NUMERIC(10,2),
        currency TEXT, status TEXT, payment_date TIMESTAMP,
        gateway_response TEXT)""",
    """CREATE TABLE review (
        review_id INTEGER PRIMARY KEY AUTOINCREMENT,
        product_id INTEGER NOT NULL REFERENCES product(product_id),
        customer_id INTEGER NOT NULL REFERENCES customer(customer_id),
        order_item_id INTEGER REFERENCES orderitem(order_item_id),
        rating INTEGER CHECK (rating BETWEEN 1 AND 5), title TEXT,
        comment TEXT, is_verified_purchase BOOLEAN, helpful_count INTEGER,
        created_at TIMESTAMP, updated_at TIMESTAMP)""",
    """CREATE TABLE cartitem (
        cart_item_id INTEGER PRIMARY KEY AUTOINCREMENT,
        customer_id INTEGER NOT NULL REFERENCES customer(customer_id),
        product_variant_id INTEGER NOT NULL REFERENCES productvariant(variant_id),
        quantity INTEGER, added_date TIMESTAMP,
        UNIQUE (customer_id, product_variant_id))""",
    """CREATE TABLE wishlist (
        wishlist_id INTEGER PRIMARY KEY AUTOINCREMENT,
        customer_id INTEGER NOT NULL REFERENCES customer(customer_id),
        name TEXT, is_public BOOLEAN, created_at TIMESTAMP)""",
    """CREATE TABLE customercoupon (
        customer_id INTEGER NOT NULL REFERENCES customer(customer_id),
        coupon_id INTEGER NOT NULL REFERENCES coupon(coupon_id),
        used_date TIMESTAMP, order_id INTEGER REFERENCES "order"(order_id),
        PRIMARY KEY (customer_id, coupon_id))""",
    """CREATE TABLE ordercoupon (
        order_id INTEGER NOT NULL REFERENCES "order"(order_id),
        coupon_id INTEGER NOT NULL REFERENCES coupon(coupon_id),
        applied_date TIMESTAMP,
        PRIMARY KEY (order_id, coupon_id))""",
    """CREATE TRIGGER ordercoupon_minimum_purchase
        BEFORE INSERT ON ordercoupon
        WHEN (SELECT subtotal FROM "order" WHERE order_id = NEW.order_id)
           < (SELECT minimum_purchase FROM coupon WHERE coupon_id = NEW.coupon_id)
        BEGIN
            SELECT RAISE(ABORT, 'coupon minimum purchase not met');
        END""",
    """CREATE TABLE productrelated (
        product_id INTEGER NOT NULL REFERENCES product(product_id),
        related_product_id INTEGER NOT NULL REFERENCES product(product_id),
        relation_type TEXT,
        PRIMARY KEY (product_id, related_product_id),
        CHECK (product_id <> related_product_id))""",
    """CREATE TABLE wishlistproduct (
        wishlist_id INTEGER NOT NULL REFERENCES wishlist(wishlist_id),
        product_id INTEGER NOT NULL REFERENCES product(product_id),
        added_date TIMESTAMP,
        PRIMARY KEY (wishlist_id, product_id))""",
    """CREATE TABLE warehouseproduct (
        warehouse_id INTEGER NOT NULL REFERENCES warehouse(warehouse_id),
        product_id INTEGER NOT NULL REFERENCES product(product_id),
        bin_location TEXT, stocked_since TIMESTAMP,
        PRIMARY KEY (warehouse_id, product_id))""",
]


def make_sqlite_engine(url: str = "sqlite://"):
    """SQLite engine with foreign keys on and working SAVEPOINTs."""
    kwargs = {}
    if url == "sqlite://":
        kwargs = {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    engine = create_engine(url, **kwargs)

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # let SQLAlchemy, not the sqlite3 module, emit BEGIN
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def create_schema(engine) -> None:
    with engine.begin() as conn:
        for statement in SCHEMA:
            conn.exec_driver_sql(statement)


@pytest.fixture
def engine():
    eng = make_sqlite_engine()
    create_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def settings():
    """Small store: 5 brands, 5 categories, 10 customers; no probe delay."""
    from seeding.settings import SeedSettings
    return SeedSettings(seed=7, max_attempts=3, delay=0.0).with_counts({
        "brand": 5,
        "category": 5,
        "customer": 10,
        "address": (1, 2),
        "product": 10,
        "product_variant": (1, 3),
    })
