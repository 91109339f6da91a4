"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AssetRegistration:
    """Collateral asset onboarded at construction, with the feed that prices it."""

    asset_id: str
    price_feed_id: str
    symbol: str = ""


@dataclass(frozen=True)
class PriceData:
    """Timestamped price as returned by a feed.

    ``expo`` is a power-of-ten exponent: a price of ``300000000000`` with
    ``expo=-8`` reads as 3000.00000000.
    """

    price: int
    expo: int
    publish_time: int = 0

    @property
    def decimals(self) -> int:
        return -self.expo


@dataclass(frozen=True)
class AccountSummary:
    collateral_value: int
    debt_minted: int


@dataclass(frozen=True)
class CollateralDeposited:
    account: str
    asset_id: str
    amount: int


@dataclass(frozen=True)
class CollateralRedeemed:
    redeemed_from: str
    redeemed_to: str
    asset_id: str
    amount: int


@dataclass(frozen=True)
class LiquidationResult:
    """Outcome of a committed liquidation."""

    target: str
    liquidator: str
    asset_id: str
    debt_covered: int
    collateral_seized: int
    bonus_collateral: int
    starting_health: int
    ending_health: int
