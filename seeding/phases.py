"""
SHOPSEED — Phase definitions
One entry per entity type: target table, generated-id column,
prerequisite phases, tolerable conflict kinds and a row builder.

Builders are generators yielding one dict of column values per record.
They may only read the pools of the phases they list in ``requires``.
"""

import datetime as dt
import json
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from seeding.aggregates import line_totals, order_totals
from seeding.errors import ErrorKind
from seeding.fake_values import FakeValueProvider
from seeding.identifier_pool import IdentifierPool, PoolView
from seeding.settings import SeedSettings
from seeding.store import InsertionEngine


class PhaseContext:
    """What a builder sees while its phase runs."""

    def __init__(
        self,
        phase: "Phase",
        pools: IdentifierPool,
        fake: FakeValueProvider,
        store: InsertionEngine,
        settings: SeedSettings,
    ):
        self.phase = phase
        self.pools = PoolView(pools, phase.entity, phase.requires)
        self.fake = fake
        self.store = store
        self.settings = settings
        self.now = dt.datetime.now().replace(microsecond=0)
        self._rng_pool = pools

    def _count(self) -> int | tuple[int, int]:
        try:
            return self.settings.counts[self.phase.entity]
        except KeyError:
            raise ValueError(
                f"no record count configured for phase '{self.phase.entity}'"
            ) from None

    def total(self) -> int:
        """Record count for a phase that is not driven by a parent pool."""
        count = self._count()
        if isinstance(count, tuple):
            return self._rng_pool.draw_count(*count)
        return count

    def per_parent(self) -> int:
        """Number of children to create for the current parent record."""
        return self.total()

    def optional(self, entity: str, null_probability: float):
        """A reference that may be null; null when the pool is empty."""
        if self.pools.size(entity) == 0:
            return None
        return self.pools.pick_one_or_null(entity, null_probability)


@dataclass(frozen=True)
class Phase:
    entity: str
    table: str
    build: Callable[[PhaseContext], Iterator[dict]]
    id_column: str | None = None
    requires: tuple[str, ...] = ()
    tolerable: frozenset[ErrorKind] = frozenset()

    @property
    def is_junction(self) -> bool:
        return self.id_column is None


DUPLICATES = frozenset({ErrorKind.UNIQUE_VIOLATION})
DUPLICATES_OR_RULE = frozenset({ErrorKind.UNIQUE_VIOLATION, ErrorKind.BUSINESS_RULE})


# ═════════════════════════════════════════════════════════════════════
#  INDEPENDENT ENTITIES
# ═════════════════════════════════════════════════════════════════════
def build_brands(ctx: PhaseContext):
    f = ctx.fake
    for _ in range(ctx.total()):
        yield {
            "name": f.company_name(),
            "description": f.catch_phrase(),
            "logo_url": f.image_url(),
            "website": f.url(),
            "is_active": True,
        }


def build_categories(ctx: PhaseContext):
    f = ctx.fake
    for i in range(ctx.total()):
        yield {
            "name": f.department(),
            "description": f.sentence(),
            "display_order": i + 1,
            "is_active": True,
        }


def build_suppliers(ctx: PhaseContext):
    f = ctx.fake
    for _ in range(ctx.total()):
        yield {
            "company_name": f.company_name(),
            "contact_name": f.person_name(),
            "email": f.email(),
            "phone": f.phone(),
            "address": f.street_address(),
            "city": f.city(),
            "postal_code": f.postal_code(),
            "country": f.country(),
            "payment_terms": f.one_of(["Net 15", "Net 30", "Net 60"]),
            "is_active": True,
        }


def build_warehouses(ctx: PhaseContext):
    f = ctx.fake
    for _ in range(ctx.total()):
        yield {
            "name": f.company_name(),
            "code": f.token(5),
            "address": f.street_address(),
            "city": f.city(),
            "postal_code": f.postal_code(),
            "country": f.country(),
            "manager_name": f.person_name(),
            "phone": f.phone(),
            "is_active": True,
        }


WARRANTY_TYPES = ["Standard", "Extended", "Premium", "Accidental Damage"]


def build_warranties(ctx: PhaseContext):
    f = ctx.fake
    for _ in range(ctx.total()):
        yield {
            "warranty_type": f.one_of(WARRANTY_TYPES),
            "duration_months": f.integer(6, 36),
            "terms_conditions": f.sentence(),
            "price": f.amount(10, 100),
        }


def build_coupons(ctx: PhaseContext):
    f = ctx.fake
    for _ in range(ctx.total()):
        yield {
            "code": f.token(6),
            "description": f.sentence(),
            "discount_type": f.one_of(["percentage", "fixed_amount"]),
            "discount_value": f.integer(5, 50),
            "minimum_purchase": f.amount(20, 200),
            "valid_from": f.date_past(),
            "valid_until": f.date_future(),
            "usage_limit": f.integer(10, 100),
            "times_used": 0,
            "is_active": True,
        }


def build_customers(ctx: PhaseContext):
    f = ctx.fake
    for _ in range(ctx.total()):
        yield {
            "email": f.unique_email(),
            "password": f.password(),
            "first_name": f.first_name(),
            "last_name": f.last_name(),
            "phone_number": f.phone(),
            "date_of_birth": f.birthdate(18, 70),
        }


# ═════════════════════════════════════════════════════════════════════
#  CATALOG
# ═════════════════════════════════════════════════════════════════════
def build_addresses(ctx: PhaseContext):
    f = ctx.fake
    for customer_id in ctx.pools.ids("customer"):
        for i in range(ctx.per_parent()):
            yield {
                "customer_id": customer_id,
                "address_type": f.one_of(["billing", "shipping", "both"]),
                "recipient_name": f.person_name(),
                "street_address": f.street_address(),
                "city": f.city(),
                "state_province": f.state(),
                "postal_code": f.postal_code(),
                "country": f.country(),
                "phone": f.phone(),
                "is_default": i == 0,
            }


def build_products(ctx: PhaseContext):
    f = ctx.fake
    for _ in range(ctx.total()):
        yield {
            "sku": f.token(8),
            "name": f.product_name(),
            "description": f.paragraph(),
            "brand_id": ctx.pools.pick_one("brand"),
            "category_id": ctx.pools.pick_one("category"),
            "base_price": f.amount(10, 500),
            "weight": f.integer(1, 20),
            "dimensions_length": f.integer(10, 100),
            "dimensions_width": f.integer(10, 100),
            "dimensions_height": f.integer(10, 100),
            "is_active": True,
            "created_at": ctx.now,
            "updated_at": ctx.now,
        }


def build_variants(ctx: PhaseContext):
    f = ctx.fake
    for product_id in ctx.pools.ids("product"):
        for _ in range(ctx.per_parent()):
            stock = f.integer(0, 100)
            yield {
                "product_id": product_id,
                "sku_variant": f"VAR-{f.token(5)}",
                "variant_name": f.material(),
                "additional_price": f.amount(5, 50),
                "stock_quantity": stock,
                "reserved_quantity": f.integer(0, min(20, stock)),
                "color": f.color(),
                "size": f.one_of(["S", "M", "L", "XL"]),
                "other_attributes": json.dumps(
                    {"warranty": f"{f.integer(6, 24)} months"}
                ),
            }


def build_inventory(ctx: PhaseContext):
    f = ctx.fake
    for variant_id in ctx.pools.ids("product_variant"):
        for warehouse_id in ctx.pools.pick_distinct("warehouse", ctx.per_parent()):
            yield {
                "product_variant_id": variant_id,
                "warehouse_id": warehouse_id,
                "quantity_available": f.integer(0, 100),
                "quantity_reserved": f.integer(0, 20),
                "reorder_level": f.integer(5, 20),
                "reorder_quantity": f.integer(10, 50),
                "last_restock_date": f.date_past(),
            }


def build_product_suppliers(ctx: PhaseContext):
    f = ctx.fake
    for product_id in ctx.pools.ids("product"):
        for supplier_id in ctx.pools.pick_distinct("supplier", ctx.per_parent()):
            yield {
                "product_id": product_id,
                "supplier_id": supplier_id,
                "supplier_sku": f.token(6),
                "cost_price": f.amount(10, 100),
                "lead_time_days": f.integer(3, 20),
                "minimum_order_quantity": f.integer(1, 50),
            }


# ═════════════════════════════════════════════════════════════════════
#  ORDERS
# ═════════════════════════════════════════════════════════════════════
ORDER_STATUSES = [
    "pending", "confirmed", "processing", "shipped",
    "delivered", "cancelled", "returned",
]
PAYMENT_METHODS = ["credit_card", "paypal", "bank_transfer", "invoice"]
PAYMENT_STATUSES = ["pending", "completed", "failed", "refunded"]


def build_orders(ctx: PhaseContext):
    f = ctx.fake
    p_null = ctx.settings.null_address_probability
    for customer_id in ctx.pools.ids("customer"):
        for _ in range(ctx.per_parent()):
            subtotal = f.amount(50, 500)
            totals = order_totals(
                subtotal=subtotal,
                shipping=f.amount(5, 20),
                discount=f.amount(0, min(50, subtotal)),
                tax_rate=ctx.settings.tax_rate,
            )
            yield {
                "customer_id": customer_id,
                "order_number": f.token(8),
                "order_date": f.date_recent(30),
                "status": f.one_of(ORDER_STATUSES),
                "shipping_address_id": ctx.optional("address", p_null),
                "billing_address_id": ctx.optional("address", p_null),
                "subtotal": totals.subtotal,
                "tax_amount": totals.tax,
                "shipping_cost": totals.shipping,
                "discount_amount": totals.discount,
                "total_amount": totals.total,
                "notes": f.sentence(),
            }


def build_order_items(ctx: PhaseContext):
    f = ctx.fake
    p_null = ctx.settings.null_warranty_probability
    for order_id in ctx.pools.ids("order"):
        for _ in range(ctx.per_parent()):
            quantity = f.integer(1, 5)
            unit_price = f.amount(10, 200)
            line = line_totals(
                unit_price=unit_price,
                quantity=quantity,
                discount=f.amount(0, min(20, unit_price * quantity)),
                tax_rate=ctx.settings.tax_rate,
            )
            yield {
                "order_id": order_id,
                "product_variant_id": ctx.pools.pick_one("product_variant"),
                "quantity": line.quantity,
                "unit_price": line.unit_price,
                "discount_amount": line.discount,
                "tax_amount": line.tax,
                "total_price": line.total,
                "warranty_id": ctx.optional("warranty", p_null),
            }


def build_payments(ctx: PhaseContext):
    f = ctx.fake
    totals = ctx.store.lookup("order", "order_id", "total_amount")
    dates = ctx.store.lookup("order", "order_id", "order_date")
    for order_id in ctx.pools.ids("order"):
        status = f.one_of(PAYMENT_STATUSES)
        yield {
            "order_id": order_id,
            "payment_method": f.one_of(PAYMENT_METHODS),
            "transaction_id": f.token(10),
            "amount": totals[order_id],
            "currency": ctx.settings.currency,
            "status": status,
            "payment_date": dates[order_id],
            "gateway_response": json.dumps({"success": status != "failed"}),
        }


# ═════════════════════════════════════════════════════════════════════
#  ENGAGEMENT
# ═════════════════════════════════════════════════════════════════════
def build_reviews(ctx: PhaseContext):
    f = ctx.fake
    for _ in range(ctx.total()):
        yield {
            "product_id": ctx.pools.pick_one("product"),
            "customer_id": ctx.pools.pick_one("customer"),
            "order_item_id": None,
            "rating": f.integer(1, 5),
            "title": f.sentence(),
            "comment": f.paragraph(),
            "is_verified_purchase": f.boolean(),
            "helpful_count": f.integer(0, 50),
            "created_at": ctx.now,
            "updated_at": ctx.now,
        }


def build_cart_items(ctx: PhaseContext):
    f = ctx.fake
    for customer_id in ctx.pools.ids("customer"):
        for _ in range(ctx.per_parent()):
            yield {
                "customer_id": customer_id,
                "product_variant_id": ctx.pools.pick_one("product_variant"),
                "quantity": f.integer(1, 5),
                "added_date": f.date_recent(30),
            }


def build_wishlists(ctx: PhaseContext):
    f = ctx.fake
    for customer_id in ctx.pools.ids("customer"):
        for _ in range(ctx.per_parent()):
            yield {
                "customer_id": customer_id,
                "name": f.one_of(["Favorites", "Birthday", "Holiday", "Someday"]),
                "is_public": f.boolean(0.3),
                "created_at": f.date_recent(30),
            }


# ═════════════════════════════════════════════════════════════════════
#  JUNCTIONS
# ═════════════════════════════════════════════════════════════════════
def build_customer_coupons(ctx: PhaseContext):
    f = ctx.fake
    for customer_id in ctx.pools.ids("customer"):
        for _ in range(ctx.per_parent()):
            yield {
                "customer_id": customer_id,
                "coupon_id": ctx.pools.pick_one("coupon"),
                "used_date": f.date_past(),
                "order_id": None,
            }


def build_order_coupons(ctx: PhaseContext):
    f = ctx.fake
    for order_id in ctx.pools.ids("order"):
        for _ in range(ctx.per_parent()):
            yield {
                "order_id": order_id,
                "coupon_id": ctx.pools.pick_one("coupon"),
                "applied_date": f.date_recent(30),
            }


def build_related_products(ctx: PhaseContext):
    f = ctx.fake
    for product_id in ctx.pools.ids("product"):
        want = ctx.per_parent()
        # one spare draw so the product itself can be dropped
        draw = min(want + 1, ctx.pools.size("product"))
        others = [p for p in ctx.pools.pick_distinct("product", draw) if p != product_id]
        for related_id in others[:want]:
            yield {
                "product_id": product_id,
                "related_product_id": related_id,
                "relation_type": f.one_of(["accessory", "alternative", "bundle"]),
            }


def build_wishlist_products(ctx: PhaseContext):
    f = ctx.fake
    for wishlist_id in ctx.pools.ids("wishlist"):
        for _ in range(ctx.per_parent()):
            yield {
                "wishlist_id": wishlist_id,
                "product_id": ctx.pools.pick_one("product"),
                "added_date": f.date_recent(30),
            }


def build_warehouse_products(ctx: PhaseContext):
    f = ctx.fake
    for warehouse_id in ctx.pools.ids("warehouse"):
        for _ in range(ctx.per_parent()):
            yield {
                "warehouse_id": warehouse_id,
                "product_id": ctx.pools.pick_one("product"),
                "bin_location": f"{f.token(1)}{f.integer(1, 40):02d}-{f.integer(1, 9)}",
                "stocked_since": f.date_past(),
            }


# ═════════════════════════════════════════════════════════════════════
#  PHASE TABLE
# ═════════════════════════════════════════════════════════════════════
PHASES = [
    Phase("brand", "brand", build_brands, id_column="brand_id"),
    Phase("category", "category", build_categories, id_column="category_id"),
    Phase("supplier", "supplier", build_suppliers, id_column="supplier_id"),
    Phase("warehouse", "warehouse", build_warehouses, id_column="warehouse_id"),
    Phase("warranty", "warranty", build_warranties, id_column="warranty_id"),
    Phase("coupon", "coupon", build_coupons, id_column="coupon_id"),
    Phase("customer", "customer", build_customers, id_column="customer_id"),
    Phase("address", "address", build_addresses, id_column="address_id",
          requires=("customer",)),
    Phase("product", "product", build_products, id_column="product_id",
          requires=("brand", "category")),
    Phase("product_variant", "productvariant", build_variants, id_column="variant_id",
          requires=("product",)),
    Phase("inventory", "inventory", build_inventory, id_column="inventory_id",
          requires=("product_variant", "warehouse")),
    Phase("product_supplier", "productsupplier", build_product_suppliers,
          requires=("product", "supplier")),
    Phase("order", "order", build_orders, id_column="order_id",
          requires=("customer", "address")),
    Phase("order_item", "orderitem", build_order_items, id_column="order_item_id",
          requires=("order", "product_variant", "warranty")),
    Phase("payment", "payment", build_payments, id_column="payment_id",
          requires=("order",)),
    Phase("review", "review", build_reviews, id_column="review_id",
          requires=("product", "customer")),
    Phase("cart_item", "cartitem", build_cart_items, id_column="cart_item_id",
          requires=("customer", "product_variant"), tolerable=DUPLICATES),
    Phase("wishlist", "wishlist", build_wishlists, id_column="wishlist_id",
          requires=("customer",)),
    Phase("customer_coupon", "customercoupon", build_customer_coupons,
          requires=("customer", "coupon"), tolerable=DUPLICATES),
    Phase("order_coupon", "ordercoupon", build_order_coupons,
          requires=("order", "coupon"), tolerable=DUPLICATES_OR_RULE),
    Phase("product_related", "productrelated", build_related_products,
          requires=("product",)),
    Phase("wishlist_product", "wishlistproduct", build_wishlist_products,
          requires=("wishlist", "product"), tolerable=DUPLICATES),
    Phase("warehouse_product", "warehouseproduct", build_warehouse_products,
          requires=("warehouse", "product"), tolerable=DUPLICATES),
]
