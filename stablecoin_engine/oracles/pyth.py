"""Pyth Network price feed (Hermes HTTP API)."""
from __future__ import annotations

import asyncio
import logging
import ssl
from typing import Any, Iterable

import aiohttp
import certifi

from ..config import PythConfig
from ..errors import PriceUnavailable
from ..models import PriceData

logger = logging.getLogger(__name__)


def normalize_feed_id(feed_id: str) -> str:
    """Hermes reports ids lowercase without ``0x``; config may carry either."""
    feed_id = feed_id.strip().lower()
    return feed_id[2:] if feed_id.startswith("0x") else feed_id


def _parse_item(item: Any) -> tuple[str, PriceData] | None:
    """One Hermes ``parsed`` entry, or None when it carries no usable price."""
    price_data = item.get("price") if isinstance(item, dict) else None
    if (
        not isinstance(price_data, dict)
        or not item.get("id")
        or price_data.get("price") is None
        or price_data.get("expo") is None
    ):
        logger.warning("Skipping malformed Pyth price entry: %r", item)
        return None
    return normalize_feed_id(item["id"]), PriceData(
        price=int(price_data["price"]),
        expo=int(price_data["expo"]),
        publish_time=int(price_data.get("publish_time") or 0),
    )


class PythPriceFeed:
    """Snapshot of Pyth prices, refreshed on demand from Hermes.

    ``latest_price`` is synchronous and reads the last refreshed snapshot, so
    an engine operation always sees one consistent set of prices.
    """

    def __init__(self, config: PythConfig, feed_ids: Iterable[str] = ()) -> None:
        self.hermes_url = config.hermes_url
        self.timeout = config.timeout
        self.feed_ids = [normalize_feed_id(f) for f in feed_ids]
        self._prices: dict[str, PriceData] = {}

    async def refresh(self, feed_ids: Iterable[str] | None = None) -> dict[str, PriceData]:
        """Fetch the latest prices and merge them into the snapshot.

        Args:
            feed_ids: Optional subset to fetch. If None, fetches every feed the
                      instance was built with.

        Returns the prices updated by this call; on failure the previous
        snapshot is left in place and an empty dict is returned.
        """
        ids = sorted({normalize_feed_id(f) for f in (feed_ids or self.feed_ids)})
        updated: dict[str, PriceData] = {}
        if not ids:
            return updated

        query_params = "&".join([f"ids[]={fid}" for fid in ids])
        url = f"{self.hermes_url}?{query_params}"

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(
                    url, timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    if response.status != 200:
                        logger.error(
                            "Error fetching prices from Pyth: HTTP %s", response.status
                        )
                        return updated

                    data = await response.json()
                    if not isinstance(data, dict):
                        logger.error("Unexpected Pyth response body: %r", data)
                        return updated
                    for item in data.get("parsed") or []:
                        parsed = _parse_item(item)
                        if parsed is not None:
                            updated[parsed[0]] = parsed[1]
        except (
            aiohttp.ClientError, OSError, asyncio.TimeoutError,
            ValueError, TypeError, KeyError,
        ) as e:
            logger.error("Error fetching prices from Pyth: %s", e)
            return {}

        self._prices.update(updated)
        logger.info("Fetched %d price(s) from Pyth Network", len(updated))
        for feed_id, price in sorted(updated.items()):
            logger.debug("  %s: %d e%d @ %d", feed_id, price.price, price.expo, price.publish_time)
        return updated

    def latest_price(self, feed_id: str) -> PriceData:
        try:
            return self._prices[normalize_feed_id(feed_id)]
        except KeyError:
            raise PriceUnavailable(feed_id) from None
