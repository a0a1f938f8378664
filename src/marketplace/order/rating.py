"""RateOrder — a vendor rates a completed order and the supplier's average moves."""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.lifecycle import ensure_party
from marketplace.order.order import Order
from marketplace.shared.choices import ActorRole
from marketplace.shared.errors import OrderNotFound, SupplierNotFound
from marketplace.shared.lookup import fetch
from marketplace.supplier.supplier import Supplier

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class RateOrder:
    order_id: Identifier(required=True)
    vendor_id: Identifier(required=True)
    rating: Integer(required=True, min_value=1, max_value=5)
    review: Text()


@marketplace.command_handler(part_of=Order)
class RateOrderHandler:
    @handle(RateOrder)
    def rate_order(self, command):
        order = fetch(Order, command.order_id, OrderNotFound)
        ensure_party(order, command.vendor_id, ActorRole.VENDOR)

        order.rate(command.rating, command.review)
        supplier = fetch(Supplier, order.supplier_id, SupplierNotFound)
        supplier.record_rating(
            command.rating,
            vendor_id=command.vendor_id,
            review=command.review,
            order_id=order.id,
        )

        current_domain.repository_for(Order).add(order)
        current_domain.repository_for(Supplier).add(supplier)

        logger.info(
            "Order rated",
            order_id=str(order.id),
            supplier_id=str(supplier.id),
            rating=command.rating,
            average_rating=supplier.average_rating,
        )
        return str(order.id)
