"""In-memory price feed for simulation and tests."""
from __future__ import annotations

import time

from ..errors import PriceUnavailable
from ..models import PriceData


class StaticPriceFeed:
    """Holds prices set by hand, keyed by feed id."""

    def __init__(self, prices: dict[str, PriceData] | None = None) -> None:
        self._prices: dict[str, PriceData] = dict(prices or {})

    def set_price(
        self,
        feed_id: str,
        price: int,
        expo: int = -8,
        publish_time: int | None = None,
    ) -> None:
        if publish_time is None:
            publish_time = int(time.time())
        self._prices[feed_id] = PriceData(price=price, expo=expo, publish_time=publish_time)

    def latest_price(self, feed_id: str) -> PriceData:
        try:
            return self._prices[feed_id]
        except KeyError:
            raise PriceUnavailable(feed_id) from None
