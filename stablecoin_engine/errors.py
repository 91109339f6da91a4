"""Engine error taxonomy.

Every failure aborts the whole operation; nothing here is retried internally.
"""
from __future__ import annotations


class EngineError(Exception):
    """Base class for every failure raised by the engine."""


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


class NonPositiveAmount(EngineError):
    def __init__(self, amount: int) -> None:
        super().__init__(f"Amount must be more than zero, got {amount}")
        self.amount = amount


class AssetNotAllowed(EngineError):
    def __init__(self, asset_id: str) -> None:
        super().__init__(f"Asset {asset_id!r} is not an allowed collateral")
        self.asset_id = asset_id


class ConfigurationError(EngineError):
    """Malformed construction parameters."""


class RegistryLengthMismatch(ConfigurationError):
    def __init__(self, assets: int, feeds: int) -> None:
        super().__init__(
            f"Asset and price feed lists must be the same length ({assets} != {feeds})"
        )


class ZeroAddress(ConfigurationError):
    def __init__(self, what: str) -> None:
        super().__init__(f"{what} must not be the zero address")
        self.what = what


class DuplicateAsset(ConfigurationError):
    def __init__(self, asset_id: str) -> None:
        super().__init__(f"Asset {asset_id!r} is registered more than once")
        self.asset_id = asset_id


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


class InsufficientBalance(EngineError):
    """A debit would drive a collateral or debt balance below zero."""

    def __init__(self, what: str, balance: int, amount: int) -> None:
        super().__init__(f"Cannot debit {amount} from {what} (balance {balance})")
        self.balance = balance
        self.amount = amount


# ---------------------------------------------------------------------------
# Solvency and liquidation
# ---------------------------------------------------------------------------


class HealthFactorBroken(EngineError):
    def __init__(self, account: str, health_factor: int) -> None:
        super().__init__(f"Health factor broken for {account}: {health_factor}")
        self.account = account
        self.health_factor = health_factor


class HealthFactorOk(EngineError):
    def __init__(self, account: str, health_factor: int) -> None:
        super().__init__(f"Account {account} is healthy ({health_factor}), cannot liquidate")
        self.account = account
        self.health_factor = health_factor


class HealthFactorNotImproved(EngineError):
    def __init__(self, starting: int, ending: int) -> None:
        super().__init__(
            f"Liquidation did not improve health factor ({starting} -> {ending})"
        )
        self.starting = starting
        self.ending = ending


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------


class TransferFailed(EngineError):
    pass


class MintFailed(EngineError):
    pass


class OracleError(EngineError):
    pass


class PriceUnavailable(OracleError):
    def __init__(self, feed_id: str) -> None:
        super().__init__(f"No price available for feed {feed_id!r}")
        self.feed_id = feed_id


class InvalidPrice(OracleError):
    pass


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------


class ReentrantCall(EngineError):
    def __init__(self, operation: str) -> None:
        super().__init__(f"Re-entrant call into {operation} rejected")
        self.operation = operation
