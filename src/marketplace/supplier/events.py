"""Domain events for the Supplier aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Supplier")
class SupplierRegistered:
    """A supplier completed onboarding and can start listing products."""

    __version__ = 1

    supplier_id: Identifier(required=True)
    business_name: String(required=True)
    business_type: String(required=True)
    registered_at: DateTime(required=True)


@marketplace.event(part_of="Supplier")
class SupplierRated:
    """A vendor rated a completed order fulfilled by this supplier."""

    __version__ = 1

    supplier_id: Identifier(required=True)
    order_id: Identifier()
    vendor_id: Identifier(required=True)
    rating: Integer(required=True)
    average_rating: Float(required=True)
    total_ratings: Integer(required=True)
    rated_at: DateTime(required=True)
