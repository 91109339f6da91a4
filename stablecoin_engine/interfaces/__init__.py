"""Collaborator interfaces consumed by the engine."""
from .price_feed import PriceFeed
from .snapshot import Snapshotable
from .token import FungibleToken, StablecoinIssuer

__all__ = ["FungibleToken", "PriceFeed", "Snapshotable", "StablecoinIssuer"]
