"""Price summary derived from a product's supplier offers."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PriceSummary:
    average_price: float
    min_price: float
    max_price: float


def price_summary(offers) -> PriceSummary:
    """Summarise the prices of available offers; all zeros when none are available."""
    prices = [offer.price_per_kg for offer in offers if offer.is_available]
    if not prices:
        return PriceSummary(0.0, 0.0, 0.0)
    return PriceSummary(
        average_price=sum(prices) / len(prices),
        min_price=min(prices),
        max_price=max(prices),
    )
