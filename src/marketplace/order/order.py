"""Order aggregate — one supplier's share of a vendor's cart.

State Machine:
    PENDING → CONFIRMED → READY → COMPLETED
    PENDING/CONFIRMED/READY → CANCELLED

Suppliers drive the order forward along the table below. Vendors may only
cancel, and only while the order is neither Completed nor Cancelled.

Each OrderLine snapshots the unit price at placement, so later offer price
changes never alter an existing order. ``total_amount`` always equals the
sum of the line totals.
"""

import math
from datetime import datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, Date, DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

from marketplace.domain import marketplace
from marketplace.shared.choices import ActorRole, PickupSlot
from marketplace.shared.errors import InvalidStatusTransition, OrderNotRatable


class OrderStatus(Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    READY = "Ready"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class PaymentMethod(Enum):
    UPI = "UPI"
    CASH = "Cash"
    CARD = "Card"


# Transitions a supplier may make
_SUPPLIER_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.READY, OrderStatus.CANCELLED},
    OrderStatus.READY: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# States a vendor may still cancel from
_VENDOR_CANCELLABLE = {OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.READY}

# Statuses still in flight, counted as pending in analytics
OPEN_STATUSES = (OrderStatus.PENDING.value, OrderStatus.CONFIRMED.value, OrderStatus.READY.value)


def line_total(price, quantity) -> float:
    return price * quantity


def order_total(lines) -> float:
    return sum(line.total_price or 0.0 for line in lines)


@marketplace.value_object(part_of="Order")
class OrderRating:
    """The vendor's one-time rating of a completed order."""

    value: Integer(required=True, min_value=1, max_value=5)
    review: Text()
    rated_at: DateTime()


@marketplace.entity(part_of="Order")
class OrderLine:
    product_id: Identifier(required=True)
    supplier_id: Identifier(required=True)
    quantity: Float(required=True, min_value=0.1)
    price: Float(required=True, min_value=0.0)
    unit: String(max_length=10, default="kg")
    total_price: Float(default=0.0)


@marketplace.aggregate
class Order:
    """A pickup order placed by one vendor with exactly one supplier."""

    vendor_id: Identifier(required=True)
    supplier_id: Identifier(required=True)
    lines: HasMany(OrderLine)
    pickup_slot: String(required=True, choices=PickupSlot)
    pickup_date: Date(required=True)
    payment_method: String(required=True, choices=PaymentMethod)
    status: String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    total_amount: Float(default=0.0)
    order_number: String(required=True, max_length=20, unique=True)
    notes: Text()
    rating: ValueObject(OrderRating)
    cancelled_by: String(choices=ActorRole)
    stock_restored: Boolean(default=False)
    created_at: DateTime(default=datetime.now)
    updated_at: DateTime(default=datetime.now)

    @invariant.post
    def lines_belong_to_order_supplier(self):
        for line in self.lines:
            if str(line.supplier_id) != str(self.supplier_id):
                raise ValidationError({"lines": ["Every line must come from the order's supplier"]})

    @invariant.post
    def total_matches_lines(self):
        if not math.isclose(self.total_amount or 0.0, order_total(self.lines), abs_tol=1e-6):
            raise ValidationError({"total_amount": ["Order total must equal the sum of its lines"]})

    @classmethod
    def place(
        cls,
        vendor_id,
        supplier_id,
        order_number,
        pickup_slot,
        pickup_date,
        payment_method,
        lines,
        notes=None,
    ):
        """Create a Pending order from priced lines.

        `lines` is an iterable of dicts with product_id, quantity, price and unit.
        """
        from marketplace.order.events import OrderPlaced

        now = datetime.now()
        order = cls(
            vendor_id=vendor_id,
            supplier_id=supplier_id,
            order_number=order_number,
            pickup_slot=pickup_slot,
            pickup_date=pickup_date,
            payment_method=payment_method,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        for line in lines:
            order.add_line(**line)

        order.raise_(
            OrderPlaced(
                order_id=order.id,
                order_number=order.order_number,
                vendor_id=vendor_id,
                supplier_id=supplier_id,
                line_count=len(order.lines),
                total_amount=order.total_amount,
                pickup_slot=pickup_slot,
                pickup_date=order.pickup_date,
                placed_at=now,
            )
        )
        return order

    def add_line(self, product_id, quantity, price, unit="kg"):
        line = OrderLine(
            product_id=product_id,
            supplier_id=self.supplier_id,
            quantity=quantity,
            price=price,
            unit=unit or "kg",
            total_price=line_total(price, quantity),
        )
        with atomic_change(self):
            self.add_lines(line)
            self.total_amount = order_total(self.lines)
        return line

    @property
    def status_enum(self):
        return OrderStatus(self.status)

    @property
    def is_rated(self):
        return self.rating is not None and (self.rating.value or 0) > 0

    @property
    def needs_stock_restoration(self):
        return self.status == OrderStatus.CANCELLED.value and not self.stock_restored

    def change_status(self, target, actor_role):
        """Move to `target` on behalf of `actor_role`, enforcing that role's transitions."""
        from marketplace.order.events import OrderCancelled, OrderStatusChanged

        current = self.status_enum
        target = OrderStatus(target)
        role = ActorRole(actor_role)

        if role is ActorRole.SUPPLIER:
            allowed = target in _SUPPLIER_TRANSITIONS[current]
        else:
            allowed = target is OrderStatus.CANCELLED and current in _VENDOR_CANCELLABLE
        if not allowed:
            raise InvalidStatusTransition(current.value, target.value)

        now = datetime.now()
        self.status = target.value
        self.updated_at = now

        if target is OrderStatus.CANCELLED:
            self.cancelled_by = role.value
            self.raise_(
                OrderCancelled(
                    order_id=self.id,
                    previous_status=current.value,
                    cancelled_by=role.value,
                    cancelled_at=now,
                )
            )
        else:
            self.raise_(
                OrderStatusChanged(
                    order_id=self.id,
                    previous_status=current.value,
                    new_status=target.value,
                    changed_at=now,
                )
            )

    def mark_stock_restored(self):
        self.stock_restored = True

    def rate(self, value, review=None):
        from marketplace.order.events import OrderRated

        if self.status != OrderStatus.COMPLETED.value:
            raise OrderNotRatable("Only completed orders can be rated")
        if self.is_rated:
            raise OrderNotRatable("Order already rated")

        now = datetime.now()
        self.rating = OrderRating(value=value, review=review, rated_at=now)
        self.updated_at = now

        self.raise_(
            OrderRated(
                order_id=self.id,
                vendor_id=self.vendor_id,
                supplier_id=self.supplier_id,
                rating=value,
                rated_at=now,
            )
        )
