"""Price feeds and the unit-of-account valuation adapter."""
from .adapter import OracleAdapter, additional_feed_precision
from .pyth import PythPriceFeed
from .static import StaticPriceFeed

__all__ = ["OracleAdapter", "PythPriceFeed", "StaticPriceFeed", "additional_feed_precision"]
