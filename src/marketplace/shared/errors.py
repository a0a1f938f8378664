"""Failure kinds raised by the marketplace domain.

Every error carries a stable ``kind`` and the HTTP status the API maps it
to. Validation-family errors extend Protean's ``ValidationError`` so they
abort the unit of work the same way field validation does; lookups extend
``ObjectNotFoundError``.
"""

from protean.exceptions import ObjectNotFoundError, ProteanException, ValidationError


def first_message(messages) -> str:
    """Flatten a Protean ``messages`` payload into one human-readable line."""
    if isinstance(messages, dict):
        for field_messages in messages.values():
            if isinstance(field_messages, list | tuple) and field_messages:
                return str(field_messages[0])
            if field_messages:
                return str(field_messages)
        return ""
    return str(messages)


class MarketplaceValidationError(ValidationError):
    """Malformed input shape. Reports every violated field."""

    kind = "ValidationError"
    status_code = 400


class InsufficientStock(MarketplaceValidationError):
    kind = "InsufficientStock"

    def __init__(self, product_name, supplier_id, available, requested):
        super().__init__(
            {
                "quantity": [
                    f"Insufficient stock for {product_name} from supplier {supplier_id}: "
                    f"{available} available, {requested} requested"
                ]
            }
        )
        self.supplier_id = supplier_id
        self.available = available
        self.requested = requested


class PickupSlotUnavailable(MarketplaceValidationError):
    kind = "PickupSlotUnavailable"

    def __init__(self, product_name, pickup_slot):
        super().__init__({"pickup_slot": [f"Pickup slot {pickup_slot} not available for {product_name}"]})
        self.pickup_slot = pickup_slot


class InvalidStatusTransition(MarketplaceValidationError):
    kind = "InvalidStatusTransition"

    def __init__(self, current, requested):
        super().__init__({"status": [f"Cannot change status from {current} to {requested}"]})
        self.current = current
        self.requested = requested


class OrderNotRatable(MarketplaceValidationError):
    kind = "OrderNotRatable"

    def __init__(self, reason):
        super().__init__({"rating": [reason]})


class NotFound(ObjectNotFoundError):
    kind = "NotFound"
    status_code = 404
    subject = "Object"

    def __init__(self, identifier, detail=None):
        messages = {self.subject.lower(): [detail or f"{self.subject} {identifier} not found"]}
        super().__init__(messages)
        self.messages = messages
        self.identifier = identifier


class ProductNotFound(NotFound):
    subject = "Product"


class OfferNotFound(NotFound):
    subject = "Offer"

    def __init__(self, product_name, supplier_id):
        super().__init__(
            supplier_id,
            detail=f"Supplier {supplier_id} has no offer for product {product_name}",
        )


class VendorNotFound(NotFound):
    subject = "Vendor"


class SupplierNotFound(NotFound):
    subject = "Supplier"


class OrderNotFound(NotFound):
    subject = "Order"


class Forbidden(ProteanException):
    """Role mismatch, or the caller is not a party to the resource."""

    kind = "Forbidden"
    status_code = 403

    def __init__(self, reason):
        super().__init__(reason)
        self.messages = {"actor": [reason]}
