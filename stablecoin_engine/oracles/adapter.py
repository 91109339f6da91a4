"""Oracle adapter — converts collateral quantities to and from unit-of-account value."""
from __future__ import annotations

import logging

from ..errors import InvalidPrice
from ..interfaces.price_feed import PriceFeed
from ..models import PriceData
from ..registry import AssetRegistry
from ..units import PRECISION

logger = logging.getLogger(__name__)

PRECISION_DECIMALS = 18


def additional_feed_precision(decimals: int) -> int:
    """Scale-up lifting a feed price to 18 decimals (``10**10`` for 8-decimal feeds).

    Positive exponents (negative ``decimals``) scale up further.
    """
    if decimals > PRECISION_DECIMALS:
        raise InvalidPrice(f"Feed precision of {decimals} decimals exceeds {PRECISION_DECIMALS}")
    return 10 ** (PRECISION_DECIMALS - decimals)


class OracleAdapter:
    """Read-through valuation against the registered feed of each asset.

    All arithmetic is integer and truncating. ``value_of`` and ``amount_of``
    are exact inverses whenever no truncation occurs.
    """

    def __init__(self, registry: AssetRegistry, feed: PriceFeed) -> None:
        self._registry = registry
        self._feed = feed

    def price_of(self, asset_id: str) -> PriceData:
        """Latest price for a registered asset, taken as-is from its feed."""
        return self._feed.latest_price(self._registry.price_feed_for(asset_id))

    def _scaled_price(self, asset_id: str) -> int:
        data = self.price_of(asset_id)
        return data.price * additional_feed_precision(data.decimals)

    def value_of(self, asset_id: str, amount: int) -> int:
        return self._scaled_price(asset_id) * amount // PRECISION

    def amount_of(self, asset_id: str, value: int) -> int:
        scaled = self._scaled_price(asset_id)
        if scaled == 0:
            raise InvalidPrice(f"Zero price for {asset_id}")
        return value * PRECISION // scaled
