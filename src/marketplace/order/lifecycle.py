"""Order status changes by suppliers and vendors.

Suppliers move orders through Confirmed → Ready → Completed and may cancel
while the order is open. Vendors may only cancel. Whoever cancels, the
stock taken at placement is returned to the supplier's offers exactly once.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.order import Order, OrderStatus
from marketplace.product.product import Product
from marketplace.shared.choices import ActorRole
from marketplace.shared.errors import Forbidden, MarketplaceValidationError, OrderNotFound
from marketplace.shared.lookup import fetch

logger = structlog.get_logger(__name__)

# Targets each role may request
ROLE_TARGETS = {
    ActorRole.SUPPLIER: (
        OrderStatus.CONFIRMED.value,
        OrderStatus.READY.value,
        OrderStatus.COMPLETED.value,
        OrderStatus.CANCELLED.value,
    ),
    ActorRole.VENDOR: (OrderStatus.CANCELLED.value,),
}


def ensure_party(order, actor_id, role):
    """Raise Forbidden unless the actor is the order's vendor or supplier for `role`."""
    role = ActorRole(role)
    party_id = order.vendor_id if role is ActorRole.VENDOR else order.supplier_id
    if str(party_id) != str(actor_id):
        raise Forbidden(f"This order does not belong to the {role.value}")


def restore_stock(order):
    """Return every line's quantity to its offer. Withdrawn products or offers are skipped."""
    repo = current_domain.repository_for(Product)
    products = {}
    for line in order.lines:
        product_id = str(line.product_id)
        if product_id not in products:
            try:
                products[product_id] = repo.get(product_id)
            except ObjectNotFoundError:
                products[product_id] = None
        product = products[product_id]

        if product is None or product.offer_for(order.supplier_id) is None:
            logger.warning(
                "Skipping stock restoration for withdrawn offer",
                order_id=str(order.id),
                product_id=product_id,
                supplier_id=str(order.supplier_id),
                quantity=line.quantity,
            )
            continue
        product.adjust_stock(order.supplier_id, line.quantity)

    for product in products.values():
        if product is not None:
            repo.add(product)

    order.mark_stock_restored()


@marketplace.command(part_of="Order")
class UpdateOrderStatus:
    order_id: Identifier(required=True)
    actor_id: Identifier(required=True)
    actor_role: String(required=True, choices=ActorRole)
    status: String(required=True, max_length=20)


@marketplace.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        role = ActorRole(command.actor_role)
        if command.status not in ROLE_TARGETS[role]:
            raise MarketplaceValidationError(
                {"status": [f"Status must be one of: {', '.join(ROLE_TARGETS[role])}"]}
            )

        order = fetch(Order, command.order_id, OrderNotFound)
        ensure_party(order, command.actor_id, role)

        previous = order.status
        order.change_status(command.status, role)

        if order.needs_stock_restoration:
            restore_stock(order)
            logger.info("Stock restored", order_id=str(order.id), cancelled_by=order.cancelled_by)

        current_domain.repository_for(Order).add(order)
        logger.info(
            "Order status changed",
            order_id=str(order.id),
            previous_status=previous,
            new_status=order.status,
            actor_role=role.value,
        )
        return str(order.id)
