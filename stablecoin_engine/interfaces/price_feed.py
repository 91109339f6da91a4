"""Price feed protocol — external price source abstraction."""
from typing import Protocol

from ..models import PriceData


class PriceFeed(Protocol):
    """Abstract interface for reading the latest price of a feed."""

    def latest_price(self, feed_id: str) -> PriceData: ...
