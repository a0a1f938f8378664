"""Supplier rating arithmetic."""


def average_rating(ratings) -> float:
    """Arithmetic mean of the raw ratings, 0 when there are none."""
    if not ratings:
        return 0.0
    return sum(ratings) / len(ratings)
