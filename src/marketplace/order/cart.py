"""Cart parsing and partitioning for order placement.

A cart arrives as a JSON array of ``{product_id, supplier_id, quantity}``.
Every shape problem in the cart and in the pickup/payment fields is
collected and reported together in one ValidationError, before any
catalogue lookup happens.
"""

import json
import math
from dataclasses import dataclass
from datetime import date, datetime

from marketplace.order.order import PaymentMethod
from marketplace.shared.choices import PICKUP_SLOT_LABELS
from marketplace.shared.errors import MarketplaceValidationError

MIN_QUANTITY = 0.1


@dataclass(frozen=True)
class CartLine:
    position: int
    product_id: str
    supplier_id: str
    quantity: float


@dataclass(frozen=True)
class Cart:
    lines: tuple
    pickup_slot: str
    pickup_date: date
    payment_method: str


def parse_pickup_date(value):
    """Accept an ISO-8601 date or datetime string, returning the date part."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        return datetime.fromisoformat(value).date()


def _parse_quantity(raw):
    if isinstance(raw, bool):
        raise ValueError("boolean quantity")
    quantity = float(raw)
    if not math.isfinite(quantity):
        raise ValueError("non-finite quantity")
    return quantity


def parse_cart(items, pickup_slot, pickup_date, payment_method) -> Cart:
    """Validate the raw placement input, raising one error that lists every violated field."""
    errors = {}

    if isinstance(items, str):
        try:
            items = json.loads(items)
        except json.JSONDecodeError:
            items = None

    lines = []
    if not isinstance(items, list) or not items:
        errors.setdefault("items", []).append("Cart must contain at least one item")
    else:
        for position, item in enumerate(items):
            if not isinstance(item, dict):
                errors.setdefault(f"items[{position}]", []).append("Item must be an object")
                continue
            product_id = item.get("product_id")
            supplier_id = item.get("supplier_id")
            if not product_id:
                errors.setdefault(f"items[{position}].product_id", []).append("Product id is required")
            if not supplier_id:
                errors.setdefault(f"items[{position}].supplier_id", []).append("Supplier id is required")
            try:
                quantity = _parse_quantity(item.get("quantity"))
            except (TypeError, ValueError):
                quantity = None
            if quantity is None or quantity < MIN_QUANTITY:
                errors.setdefault(f"items[{position}].quantity", []).append(
                    f"Quantity must be a number of at least {MIN_QUANTITY}"
                )
            if product_id and supplier_id and quantity is not None and quantity >= MIN_QUANTITY:
                lines.append(CartLine(position, str(product_id), str(supplier_id), quantity))

    if pickup_slot not in PICKUP_SLOT_LABELS:
        errors.setdefault("pickup_slot", []).append(f"Pickup slot must be one of: {', '.join(PICKUP_SLOT_LABELS)}")

    parsed_date = None
    try:
        parsed_date = parse_pickup_date(pickup_date)
    except (TypeError, ValueError):
        errors.setdefault("pickup_date", []).append("Pickup date must be an ISO-8601 date")

    if payment_method not in {method.value for method in PaymentMethod}:
        errors.setdefault("payment_method", []).append("Payment method must be one of: UPI, Cash, Card")

    if errors:
        raise MarketplaceValidationError(errors)

    return Cart(
        lines=tuple(lines),
        pickup_slot=pickup_slot,
        pickup_date=parsed_date,
        payment_method=payment_method,
    )


def partition_by_supplier(lines) -> dict:
    """Group lines by supplier, keeping first-seen supplier order and line order."""
    partitions = {}
    for line in lines:
        partitions.setdefault(line.supplier_id, []).append(line)
    return partitions
