"""Marketplace domain — pickup ordering between food-cart vendors and ingredient suppliers.

Handles supplier catalogue offers, vendor/supplier identity records, and the
order engine: cart placement, the pickup status lifecycle, and supplier
rating aggregation.
"""

from protean.domain import Domain

from marketplace.utils.logging import configure_logging, get_logger

configure_logging(level="INFO", log_dir="logs", log_file_prefix="marketplace")

logger = get_logger(__name__)

marketplace = Domain(name="marketplace")
