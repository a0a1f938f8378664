"""PlaceOrder — turn a vendor's multi-supplier cart into one order per supplier.

The cart is split by supplier, every line is checked against the live
catalogue, and only then are orders, vendor history and stock written. All
writes happen inside the handler's unit of work, so a failed placement
leaves no order and no stock change behind.

Lines for the same product and supplier are not merged. Each line claims
its quantity against the stock left over by earlier lines of the same cart.
"""

from dataclasses import dataclass, field
from enum import Enum

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.cart import parse_cart, partition_by_supplier
from marketplace.order.numbering import generate_order_number
from marketplace.order.order import Order
from marketplace.product.product import Product
from marketplace.shared.errors import (
    InsufficientStock,
    MarketplaceValidationError,
    NotFound,
    PickupSlotUnavailable,
    ProductNotFound,
    VendorNotFound,
)
from marketplace.shared.lookup import fetch
from marketplace.shared.settings import custom_setting
from marketplace.vendor.vendor import Vendor

logger = structlog.get_logger(__name__)


class PlacementPolicy(Enum):
    """How a failing line affects the rest of the cart."""

    ALL_OR_NOTHING = "all_or_nothing"  # Any failing line aborts the whole cart
    PER_SUPPLIER = "per_supplier"  # Failing supplier partitions are dropped


DEFAULT_POLICY = PlacementPolicy.ALL_OR_NOTHING


def configured_policy():
    return PlacementPolicy(custom_setting("placement_policy", DEFAULT_POLICY.value))


@dataclass
class PartitionPlan:
    """Validated, priced lines for one supplier, ready to be committed."""

    supplier_id: str
    lines: list = field(default_factory=list)
    stock_moves: list = field(default_factory=list)


class _ProductCache:
    """Loads each product once so every partition sees the same instance."""

    def __init__(self):
        self._products = {}

    def get(self, product_id):
        if product_id not in self._products:
            self._products[product_id] = fetch(Product, product_id, ProductNotFound)
        return self._products[product_id]

    def touched(self, product_ids):
        return [self._products[pid] for pid in dict.fromkeys(product_ids)]


def plan_partition(supplier_id, cart_lines, pickup_slot, products) -> PartitionPlan:
    """Check every line of one supplier's partition, in cart order.

    Raises the first failure: ProductNotFound, OfferNotFound,
    InsufficientStock or PickupSlotUnavailable.
    """
    plan = PartitionPlan(supplier_id=supplier_id)
    claimed = {}

    for line in cart_lines:
        product = products.get(line.product_id)
        offer = product.require_offer(supplier_id)

        already_claimed = claimed.get(line.product_id, 0.0)
        remaining = (offer.stock or 0.0) - already_claimed
        if not offer.is_available or remaining < line.quantity:
            available = max(remaining, 0.0) if offer.is_available else 0.0
            raise InsufficientStock(product.name, supplier_id, available, line.quantity)

        if pickup_slot not in (offer.pickup_slots or []):
            raise PickupSlotUnavailable(product.name, pickup_slot)

        claimed[line.product_id] = already_claimed + line.quantity
        plan.lines.append(
            {
                "product_id": line.product_id,
                "quantity": line.quantity,
                "price": offer.price_per_kg,
                "unit": product.unit,
            }
        )
        plan.stock_moves.append((line.product_id, line.quantity))

    return plan


@marketplace.command(part_of="Order")
class PlaceOrder:
    """Place a vendor's cart, producing one order per supplier in it."""

    vendor_id: Identifier(required=True)
    items: Text(required=True)  # JSON array of {product_id, supplier_id, quantity}
    pickup_slot: String(max_length=20)
    pickup_date: String(max_length=40)
    payment_method: String(max_length=10)
    notes: Text()
    policy: String(max_length=20)


@marketplace.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart = parse_cart(command.items, command.pickup_slot, command.pickup_date, command.payment_method)
        vendor = fetch(Vendor, command.vendor_id, VendorNotFound)
        policy = PlacementPolicy(command.policy) if command.policy else configured_policy()

        products = _ProductCache()
        plans = []
        first_failure = None
        for supplier_id, cart_lines in partition_by_supplier(cart.lines).items():
            try:
                plans.append(plan_partition(supplier_id, cart_lines, cart.pickup_slot, products))
            except (NotFound, MarketplaceValidationError) as exc:
                if policy is PlacementPolicy.ALL_OR_NOTHING:
                    raise
                logger.warning(
                    "Dropping supplier partition",
                    vendor_id=str(vendor.id),
                    supplier_id=supplier_id,
                    reason=getattr(exc, "kind", type(exc).__name__),
                )
                first_failure = first_failure or exc

        if not plans:
            raise first_failure

        order_repo = current_domain.repository_for(Order)
        product_repo = current_domain.repository_for(Product)

        order_ids = []
        order_numbers = set()
        moved_product_ids = []
        for plan in plans:
            order_number = generate_order_number(reserved=order_numbers)
            order_numbers.add(order_number)

            order = Order.place(
                vendor_id=vendor.id,
                supplier_id=plan.supplier_id,
                order_number=order_number,
                pickup_slot=cart.pickup_slot,
                pickup_date=cart.pickup_date,
                payment_method=cart.payment_method,
                lines=plan.lines,
                notes=command.notes,
            )
            order_repo.add(order)
            vendor.record_order(order.id)

            for product_id, quantity in plan.stock_moves:
                products.get(product_id).adjust_stock(plan.supplier_id, -quantity)
                moved_product_ids.append(product_id)

            order_ids.append(str(order.id))

        current_domain.repository_for(Vendor).add(vendor)
        for product in products.touched(moved_product_ids):
            product_repo.add(product)

        logger.info(
            "Orders placed",
            vendor_id=str(vendor.id),
            order_ids=order_ids,
            order_numbers=sorted(order_numbers),
            policy=policy.value,
        )
        return order_ids
