"""
SHOPSEED — Order and line-item money aggregates.

Derived amounts are never drawn at random; they are computed from the
drawn inputs so that

    total     = subtotal + tax + shipping - discount
    lineTotal = unit_price * quantity + line_tax - line_discount

hold exactly, with tax floored to the cent in both places.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_FLOOR

CENT = Decimal("0.01")


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def floor_to_cents(amount) -> Decimal:
    return to_decimal(amount).quantize(CENT, rounding=ROUND_FLOOR)


def tax_for(base, tax_rate) -> Decimal:
    rate = to_decimal(tax_rate)
    if not Decimal(0) <= rate < Decimal(1):
        raise ValueError(f"tax rate must be in [0, 1), got {tax_rate}")
    return floor_to_cents(to_decimal(base) * rate)


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    discount: Decimal
    total: Decimal


@dataclass(frozen=True)
class LineTotals:
    unit_price: Decimal
    quantity: int
    gross: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal


def _non_negative(name: str, value: Decimal) -> Decimal:
    if value < 0:
        raise ValueError(f"{name} cannot be negative, got {value}")
    return value


def order_totals(subtotal, shipping, discount, tax_rate) -> OrderTotals:
    subtotal = _non_negative("subtotal", to_decimal(subtotal))
    shipping = _non_negative("shipping", to_decimal(shipping))
    discount = _non_negative("discount", to_decimal(discount))
    tax = tax_for(subtotal, tax_rate)
    return OrderTotals(
        subtotal=subtotal,
        tax=tax,
        shipping=shipping,
        discount=discount,
        total=subtotal + tax + shipping - discount,
    )


def line_totals(unit_price, quantity: int, discount, tax_rate) -> LineTotals:
    """Totals for one order line.

    Tax is floored on the line gross (``unit_price * quantity``), the same
    base orders use for their subtotal. The earlier JavaScript generator
    taxed a single unit (``floor(unit_price * 0.1)``) regardless of quantity.
    """
    unit_price = _non_negative("unit_price", to_decimal(unit_price))
    if quantity < 1:
        raise ValueError(f"quantity must be >= 1, got {quantity}")
    discount = _non_negative("discount", to_decimal(discount))
    gross = unit_price * quantity
    tax = tax_for(gross, tax_rate)
    return LineTotals(
        unit_price=unit_price,
        quantity=quantity,
        gross=gross,
        tax=tax,
        discount=discount,
        total=gross + tax - discount,
    )


def satisfies_order_identity(subtotal, tax, shipping, discount, total, tax_rate) -> bool:
    """True if a stored order row obeys the aggregate identity."""
    subtotal, tax, shipping, discount, total = (
        to_decimal(v) for v in (subtotal, tax, shipping, discount, total)
    )
    return (
        tax == tax_for(subtotal, tax_rate)
        and total == subtotal + tax + shipping - discount
    )
