"""Order read views enriched with vendor, supplier and product display fields."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.order.lifecycle import ensure_party
from marketplace.order.order import Order, OrderStatus
from marketplace.product.product import Product
from marketplace.shared.choices import ActorRole
from marketplace.shared.errors import MarketplaceValidationError, OrderNotFound
from marketplace.shared.lookup import fetch
from marketplace.supplier.display import address_dict
from marketplace.supplier.supplier import Supplier
from marketplace.vendor.vendor import Vendor

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class _Lookups:
    """Per-request memo of the parties and products referenced by orders."""

    def __init__(self):
        self._vendors = {}
        self._suppliers = {}
        self._products = {}

    def vendor(self, vendor_id):
        key = str(vendor_id)
        if key not in self._vendors:
            try:
                self._vendors[key] = current_domain.repository_for(Vendor).get(key)
            except ObjectNotFoundError:
                self._vendors[key] = None
        return self._vendors[key]

    def supplier(self, supplier_id):
        key = str(supplier_id)
        if key not in self._suppliers:
            try:
                self._suppliers[key] = current_domain.repository_for(Supplier).get(key)
            except ObjectNotFoundError:
                self._suppliers[key] = None
        return self._suppliers[key]

    def product(self, product_id):
        key = str(product_id)
        if key not in self._products:
            try:
                self._products[key] = current_domain.repository_for(Product).get(key)
            except ObjectNotFoundError:
                self._products[key] = None
        return self._products[key]


def _vendor_fields(vendor):
    if vendor is None:
        return None
    return {
        "vendor_id": str(vendor.id),
        "name": vendor.name,
        "business_name": vendor.business_name,
        "phone": vendor.phone,
    }


def _supplier_fields(supplier):
    if supplier is None:
        return None
    return {
        "supplier_id": str(supplier.id),
        "business_name": supplier.business_name,
        "phone": supplier.phone,
        "address": address_dict(supplier.address),
        "average_rating": supplier.average_rating,
        "total_ratings": len(supplier.ratings),
    }


def _line_fields(line, product):
    return {
        "line_id": str(line.id),
        "product_id": str(line.product_id),
        "product_name": product.name if product else None,
        "product_image": product.image if product else None,
        "quantity": line.quantity,
        "unit": line.unit,
        "price": line.price,
        "total_price": line.total_price,
    }


def order_detail(order, lookups=None) -> dict:
    lookups = lookups or _Lookups()
    rating = None
    if order.rating is not None:
        rating = {
            "value": order.rating.value,
            "review": order.rating.review,
            "rated_at": order.rating.rated_at.isoformat() if order.rating.rated_at else None,
        }
    return {
        "order_id": str(order.id),
        "order_number": order.order_number,
        "vendor_id": str(order.vendor_id),
        "vendor": _vendor_fields(lookups.vendor(order.vendor_id)),
        "supplier": _supplier_fields(lookups.supplier(order.supplier_id)),
        "supplier_id": str(order.supplier_id),
        "lines": [_line_fields(line, lookups.product(line.product_id)) for line in order.lines],
        "pickup_slot": order.pickup_slot,
        "pickup_date": order.pickup_date.isoformat() if order.pickup_date else None,
        "payment_method": order.payment_method,
        "status": order.status,
        "total_amount": order.total_amount,
        "notes": order.notes,
        "rating": rating,
        "cancelled_by": order.cancelled_by,
        "created_at": order.created_at.isoformat() if order.created_at else None,
    }


def get_order_detail(order_id, actor_id, role) -> dict:
    """Detail view of one order, visible only to its vendor or supplier."""
    order = fetch(Order, order_id, OrderNotFound)
    ensure_party(order, actor_id, role)
    return order_detail(order)


def orders_detail(order_ids) -> list[dict]:
    lookups = _Lookups()
    return [order_detail(fetch(Order, order_id, OrderNotFound), lookups) for order_id in order_ids]


def list_orders(actor_id, role, status=None, page=1, limit=DEFAULT_PAGE_SIZE) -> dict:
    """The caller's orders, newest first, optionally filtered by status."""
    if status is not None and status not in {s.value for s in OrderStatus}:
        raise MarketplaceValidationError({"status": [f"Unknown order status: {status}"]})

    role = ActorRole(role)
    orders = current_domain.repository_for(Order).for_party(role.value, actor_id)
    if status is not None:
        orders = [order for order in orders if order.status == status]

    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)
    start = (page - 1) * limit
    lookups = _Lookups()
    return {
        "orders": [order_detail(order, lookups) for order in orders[start : start + limit]],
        "total": len(orders),
        "page": page,
        "limit": limit,
    }
