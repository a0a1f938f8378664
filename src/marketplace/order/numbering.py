"""Human-readable order numbers.

Format: prefix + last six digits of the millisecond clock + a three-digit
sequence. The sequence comes from a process-wide counter so two orders
created in the same millisecond by one process never collide; collisions
across processes are caught by the repository check and the unique
constraint on ``Order.order_number``.
"""

import itertools
import threading
import time

from protean.exceptions import ProteanException
from protean.utils.globals import current_domain

from marketplace.order.order import Order
from marketplace.shared.settings import custom_setting

DEFAULT_PREFIX = "VY"
MAX_ATTEMPTS = 10

_sequence = itertools.count()
_sequence_lock = threading.Lock()


def _next_sequence() -> int:
    with _sequence_lock:
        return next(_sequence) % 1000


def candidate_order_number(prefix: str = DEFAULT_PREFIX) -> str:
    millis = str(int(time.time() * 1000))[-6:]
    return f"{prefix}{millis}{_next_sequence():03d}"


def generate_order_number(reserved=()) -> str:
    """Return an order number unused by stored orders and by `reserved`."""
    prefix = custom_setting("order_number_prefix", DEFAULT_PREFIX)
    repo = current_domain.repository_for(Order)

    for _ in range(MAX_ATTEMPTS):
        candidate = candidate_order_number(prefix)
        if candidate in reserved:
            continue
        if repo.find_by_order_number(candidate) is None:
            return candidate

    raise ProteanException({"order_number": ["Could not allocate a unique order number"]})
