"""Order analytics for a vendor's or supplier's dashboard."""

from datetime import date, datetime

from protean.utils.globals import current_domain

from marketplace.order.order import OPEN_STATUSES, Order, OrderStatus
from marketplace.shared.choices import ActorRole


def _within(order, start, end):
    created = order.created_at.date() if isinstance(order.created_at, datetime) else order.created_at
    if start is not None and created < start:
        return False
    return not (end is not None and created > end)


def summarize(orders) -> dict:
    """Counts and revenue over a set of orders. Revenue only counts Completed orders."""
    completed = [o for o in orders if o.status == OrderStatus.COMPLETED.value]
    total_orders = len(orders)
    total_revenue = round(sum(o.total_amount or 0.0 for o in completed), 2)

    return {
        "total_orders": total_orders,
        "pending_orders": sum(1 for o in orders if o.status in OPEN_STATUSES),
        "completed_orders": len(completed),
        "cancelled_orders": sum(1 for o in orders if o.status == OrderStatus.CANCELLED.value),
        "total_revenue": total_revenue,
        "average_order_value": round(total_revenue / len(completed), 2) if completed else 0.0,
        "completion_rate": round(len(completed) / total_orders * 100, 2) if total_orders else 0.0,
    }


def order_analytics(actor_id, role, start: date | None = None, end: date | None = None) -> dict:
    orders = current_domain.repository_for(Order).for_party(ActorRole(role).value, actor_id)
    orders = [o for o in orders if _within(o, start, end)]
    return summarize(orders)
