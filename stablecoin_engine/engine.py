"""Stablecoin engine: position operations and liquidation.

Every public mutating entry point runs as one transaction under a
per-instance re-entrancy guard: the ledger and every snapshot-capable
collaborator are restored if anything inside the call raises, and events are
published only once the call has fully succeeded.
"""
from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Mapping, TypeVar

from .config import AppConfig, RiskConfig
from .errors import (
    ConfigurationError,
    EngineError,
    HealthFactorNotImproved,
    HealthFactorOk,
    MintFailed,
    ReentrantCall,
    TransferFailed,
    ZeroAddress,
)
from .health import HealthFactorEngine
from .interfaces.price_feed import PriceFeed
from .interfaces.snapshot import Snapshotable
from .interfaces.token import FungibleToken, StablecoinIssuer
from .ledger import Ledger, require_positive
from .models import (
    AccountSummary,
    CollateralDeposited,
    CollateralRedeemed,
    LiquidationResult,
)
from .oracles.adapter import OracleAdapter
from .registry import AssetRegistry, is_zero_address
from .transaction import Transaction

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def nonreentrant(method: F) -> F:
    """Reject any call into a guarded entry point while another one is running."""

    @functools.wraps(method)
    def wrapper(self: StablecoinEngine, *args: Any, **kwargs: Any) -> Any:
        if self._entered:
            raise ReentrantCall(method.__name__)
        self._entered = True
        try:
            return method(self, *args, **kwargs)
        finally:
            self._entered = False

    return wrapper  # type: ignore[return-value]


class StablecoinEngine:
    """Over-collateralized issuer of the pegged unit of account."""

    def __init__(
        self,
        registry: AssetRegistry,
        collateral_tokens: Mapping[str, FungibleToken],
        stablecoin: StablecoinIssuer,
        price_feed: PriceFeed,
        address: str,
        stablecoin_address: str,
        risk: RiskConfig | None = None,
    ) -> None:
        if is_zero_address(address):
            raise ZeroAddress("Engine address")
        if is_zero_address(stablecoin_address):
            raise ZeroAddress("Stablecoin")
        missing = [a for a in registry.asset_ids if a not in collateral_tokens]
        if missing:
            raise ConfigurationError(f"No token client for collateral {missing}")

        self.address = address
        self.stablecoin_address = stablecoin_address
        self.registry = registry
        self.risk = risk or RiskConfig()
        self._tokens = {a: collateral_tokens[a] for a in registry.asset_ids}
        self._stablecoin = stablecoin

        self.oracle = OracleAdapter(registry, price_feed)
        self.ledger = Ledger(registry, self.oracle)
        self.health = HealthFactorEngine(self.ledger, self.risk)

        self.events: list[Any] = []
        self._entered = False

        self._resources: list[Snapshotable] = [self.ledger]
        for name, collaborator in [("stablecoin", stablecoin), *self._tokens.items()]:
            if isinstance(collaborator, Snapshotable):
                self._resources.append(collaborator)
            else:
                logger.warning(
                    "Collaborator %s does not support snapshots; its effects "
                    "are not rolled back by the engine",
                    name,
                )

        logger.info(
            "Engine %s initialised with %d collateral asset(s)", address, len(registry)
        )

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        collateral_tokens: Mapping[str, FungibleToken],
        stablecoin: StablecoinIssuer,
        price_feed: PriceFeed,
    ) -> StablecoinEngine:
        return cls(
            registry=config.build_registry(),
            collateral_tokens=collateral_tokens,
            stablecoin=stablecoin,
            price_feed=price_feed,
            address=config.engine.address,
            stablecoin_address=config.engine.stablecoin,
            risk=config.risk,
        )

    # ------------------------------------------------------------------
    # Transactions and events
    # ------------------------------------------------------------------

    def _transaction(self) -> Transaction:
        return Transaction(self._resources, on_commit=self._publish)

    def _publish(self, events: list[Any]) -> None:
        for event in events:
            self.events.append(event)
            if isinstance(event, CollateralDeposited):
                logger.info(
                    "CollateralDeposited account=%s asset=%s amount=%d",
                    event.account, event.asset_id, event.amount,
                )
            elif isinstance(event, CollateralRedeemed):
                logger.info(
                    "CollateralRedeemed from=%s to=%s asset=%s amount=%d",
                    event.redeemed_from, event.redeemed_to, event.asset_id, event.amount,
                )

    @staticmethod
    def _call_collaborator(
        fn: Callable[..., bool], *args: Any, what: str, error: type[EngineError]
    ) -> None:
        """Treat a False return and a raised failure the same way."""
        try:
            ok = fn(*args)
        except EngineError:
            raise
        except Exception as e:
            raise error(f"{what} raised: {e}") from e
        if not ok:
            raise error(f"{what} returned failure")

    # ------------------------------------------------------------------
    # Internal primitives (no health check)
    # ------------------------------------------------------------------

    def _deposit(self, tx: Transaction, account: str, asset_id: str, amount: int) -> None:
        self.ledger.credit_collateral(account, asset_id, amount)
        tx.emit(CollateralDeposited(account, asset_id, amount))
        self._call_collaborator(
            self._tokens[asset_id].transfer_from, account, self.address, amount,
            what=f"{asset_id} transfer_from {account}", error=TransferFailed,
        )

    def _mint(self, account: str, amount: int) -> None:
        self.ledger.credit_debt(account, amount)
        self.health.assert_healthy(account)
        self._call_collaborator(
            self._stablecoin.mint, account, amount,
            what=f"mint to {account}", error=MintFailed,
        )

    def _redeem(
        self, tx: Transaction, from_: str, to: str, asset_id: str, amount: int
    ) -> None:
        self.ledger.debit_collateral(from_, asset_id, amount)
        tx.emit(CollateralRedeemed(from_, to, asset_id, amount))
        self._call_collaborator(
            self._tokens[asset_id].transfer, to, amount,
            what=f"{asset_id} transfer to {to}", error=TransferFailed,
        )

    def _burn(self, on_behalf_of: str, payer: str, amount: int) -> None:
        self.ledger.debit_debt(on_behalf_of, amount)
        self._call_collaborator(
            self._stablecoin.transfer_from, payer, self.address, amount,
            what=f"stablecoin transfer_from {payer}", error=TransferFailed,
        )
        self._stablecoin.burn(amount)

    # ------------------------------------------------------------------
    # Position operations
    # ------------------------------------------------------------------

    @nonreentrant
    def deposit_collateral(self, account: str, asset_id: str, amount: int) -> None:
        """Lock ``amount`` of ``asset_id`` from ``account`` as collateral."""
        require_positive(amount)
        self.registry.get(asset_id)
        with self._transaction() as tx:
            self._deposit(tx, account, asset_id, amount)

    @nonreentrant
    def mint(self, account: str, amount: int) -> None:
        """Mint ``amount`` of stablecoin against the account's collateral."""
        require_positive(amount)
        with self._transaction():
            self._mint(account, amount)

    @nonreentrant
    def deposit_collateral_and_mint(
        self, account: str, asset_id: str, collateral_amount: int, mint_amount: int
    ) -> None:
        require_positive(collateral_amount)
        require_positive(mint_amount)
        self.registry.get(asset_id)
        with self._transaction() as tx:
            self._deposit(tx, account, asset_id, collateral_amount)
            self._mint(account, mint_amount)

    @nonreentrant
    def redeem_collateral(self, account: str, asset_id: str, amount: int) -> None:
        """Withdraw collateral; the account must stay healthy afterwards."""
        require_positive(amount)
        self.registry.get(asset_id)
        with self._transaction() as tx:
            self._redeem(tx, account, account, asset_id, amount)
            self.health.assert_healthy(account)

    @nonreentrant
    def burn(self, account: str, amount: int) -> None:
        """Repay ``amount`` of the account's debt with its own stablecoin."""
        require_positive(amount)
        with self._transaction():
            self._burn(account, account, amount)
            self.health.assert_healthy(account)

    @nonreentrant
    def redeem_collateral_and_burn(
        self, account: str, asset_id: str, collateral_amount: int, burn_amount: int
    ) -> None:
        """Repay debt, then withdraw collateral, with one health check at the end."""
        require_positive(collateral_amount)
        require_positive(burn_amount)
        self.registry.get(asset_id)
        with self._transaction() as tx:
            self._burn(account, account, burn_amount)
            self._redeem(tx, account, account, asset_id, collateral_amount)
            self.health.assert_healthy(account)

    # ------------------------------------------------------------------
    # Liquidation
    # ------------------------------------------------------------------

    @nonreentrant
    def liquidate(
        self, liquidator: str, asset_id: str, target: str, debt_to_cover: int
    ) -> LiquidationResult:
        """Repay part of an unhealthy account's debt for discounted collateral.

        The liquidator pays ``debt_to_cover`` in stablecoin and receives the
        equivalent amount of ``asset_id`` plus the liquidation bonus. The call
        is rejected unless the target's health factor strictly improves and
        the liquidator is still healthy afterwards.
        """
        require_positive(debt_to_cover)

        starting = self.health.health_factor(target)
        if starting >= self.risk.min_health_factor:
            raise HealthFactorOk(target, starting)

        base = self.oracle.amount_of(asset_id, debt_to_cover)
        bonus = base * self.risk.liquidation_bonus // self.risk.liquidation_precision
        seized = base + bonus

        with self._transaction() as tx:
            self._redeem(tx, target, liquidator, asset_id, seized)
            self._burn(target, liquidator, debt_to_cover)

            ending = self.health.health_factor(target)
            if ending <= starting:
                raise HealthFactorNotImproved(starting, ending)
            self.health.assert_healthy(liquidator)

        logger.warning(
            "Liquidated %s: %s covered %d debt, seized %d of %s (bonus %d), HF %d -> %d",
            target, liquidator, debt_to_cover, seized, asset_id, bonus, starting, ending,
        )
        return LiquidationResult(
            target=target,
            liquidator=liquidator,
            asset_id=asset_id,
            debt_covered=debt_to_cover,
            collateral_seized=seized,
            bonus_collateral=bonus,
            starting_health=starting,
            ending_health=ending,
        )

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def usd_value_of(self, asset_id: str, amount: int) -> int:
        return self.oracle.value_of(asset_id, amount)

    def token_amount_for_value(self, asset_id: str, value: int) -> int:
        return self.oracle.amount_of(asset_id, value)

    def account_summary(self, account: str) -> AccountSummary:
        return AccountSummary(
            collateral_value=self.ledger.total_collateral_value(account),
            debt_minted=self.ledger.debt_of(account),
        )

    def collateral_value_of(self, account: str) -> int:
        return self.ledger.total_collateral_value(account)

    def collateral_balance(self, account: str, asset_id: str) -> int:
        return self.ledger.collateral_balance(account, asset_id)

    def health_factor(self, account: str) -> int:
        return self.health.health_factor(account)

    def calculate_health_factor(self, collateral_value: int, debt: int) -> int:
        return self.health.calculate_health_factor(collateral_value, debt)

    def max_mintable(self, account: str) -> int:
        return self.health.max_mintable(account)

    @property
    def collateral_tokens(self) -> tuple[str, ...]:
        return self.registry.asset_ids
