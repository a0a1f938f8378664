"""Repository lookups that translate a missing record into a domain NotFound."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain


def fetch(aggregate_cls, identifier, not_found_cls):
    """Load an aggregate by id, raising `not_found_cls(identifier)` when absent."""
    try:
        return current_domain.repository_for(aggregate_cls).get(identifier)
    except ObjectNotFoundError:
        raise not_found_cls(identifier) from None
