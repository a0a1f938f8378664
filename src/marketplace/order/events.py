"""Domain events for the Order aggregate."""

from protean.fields import Date, DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderPlaced:
    """A vendor's cart produced an order for one supplier."""

    __version__ = 1

    order_id: Identifier(required=True)
    order_number: String(required=True)
    vendor_id: Identifier(required=True)
    supplier_id: Identifier(required=True)
    line_count: Integer(required=True)
    total_amount: Float(required=True)
    pickup_slot: String(required=True)
    pickup_date: Date(required=True)
    placed_at: DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderStatusChanged:
    """The supplier moved the order forward."""

    __version__ = 1

    order_id: Identifier(required=True)
    previous_status: String(required=True)
    new_status: String(required=True)
    changed_at: DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id: Identifier(required=True)
    previous_status: String(required=True)
    cancelled_by: String(required=True)
    cancelled_at: DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderRated:
    __version__ = 1

    order_id: Identifier(required=True)
    vendor_id: Identifier(required=True)
    supplier_id: Identifier(required=True)
    rating: Integer(required=True)
    rated_at: DateTime(required=True)
