"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Product")
class ProductListed:
    """A (name, category) pair appeared in the catalogue for the first time."""

    __version__ = 1

    product_id: Identifier(required=True)
    name: String(required=True)
    category: String(required=True)
    unit: String(required=True)
    listed_at: DateTime(required=True)


@marketplace.event(part_of="Product")
class OfferAdded:
    """A supplier started selling an existing or newly listed product."""

    __version__ = 1

    product_id: Identifier(required=True)
    supplier_id: Identifier(required=True)
    price_per_kg: Float(required=True)
    stock: Float(required=True)
    added_at: DateTime(required=True)


@marketplace.event(part_of="Product")
class OfferUpdated:
    __version__ = 1

    product_id: Identifier(required=True)
    supplier_id: Identifier(required=True)
    price_per_kg: Float(required=True)
    stock: Float(required=True)
    is_available: String(required=True)
    updated_at: DateTime(required=True)


@marketplace.event(part_of="Product")
class OfferWithdrawn:
    __version__ = 1

    product_id: Identifier(required=True)
    supplier_id: Identifier(required=True)
    remaining_offers: Integer(required=True)
    withdrawn_at: DateTime(required=True)


@marketplace.event(part_of="Product")
class StockAdjusted:
    """An offer's stock moved because of order placement or cancellation."""

    __version__ = 1

    product_id: Identifier(required=True)
    supplier_id: Identifier(required=True)
    previous_stock: Float(required=True)
    new_stock: Float(required=True)
    delta: Float(required=True)
