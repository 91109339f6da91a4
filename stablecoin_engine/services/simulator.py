"""What-if position simulation against current prices."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping

from ..config import AppConfig
from ..engine import StablecoinEngine
from ..errors import HealthFactorBroken
from ..health import MAX_HEALTH_FACTOR
from ..interfaces.price_feed import PriceFeed
from ..models import PriceData
from ..tokens import InMemoryStablecoin, InMemoryToken
from ..units import PRECISION, format_fixed, format_health_factor

logger = logging.getLogger(__name__)

SIMULATED_ACCOUNT = "0x00000000000000000000000000000000005117ed"


@dataclass(frozen=True)
class PositionReport:
    collateral_value: int
    debt: int
    health_factor: int
    max_mintable: int
    accepted: bool


@dataclass(frozen=True)
class LiquidationQuote:
    symbol: str
    debt_to_cover: int
    base_collateral: int
    bonus_collateral: int
    total_collateral: int
    collateral_value: int


class PositionSimulator:
    """Runs hypothetical positions through a throwaway engine wired to in-memory tokens."""

    def __init__(self, config: AppConfig, price_feed: PriceFeed) -> None:
        self._config = config
        self._feed = price_feed
        self._registry = config.build_registry()

    def build_engine(self) -> tuple[StablecoinEngine, dict[str, InMemoryToken], InMemoryStablecoin]:
        """Fresh engine plus the in-memory tokens backing it."""
        engine_address = self._config.engine.address
        tokens = {
            reg.asset_id: InMemoryToken(reg.symbol or reg.asset_id, reg.asset_id)
            for reg in self._registry
        }
        stablecoin = InMemoryStablecoin(
            address=self._config.engine.stablecoin, owner=engine_address
        )
        engine = StablecoinEngine.from_config(
            self._config,
            collateral_tokens={a: t.as_caller(engine_address) for a, t in tokens.items()},
            stablecoin=stablecoin.as_caller(engine_address),
            price_feed=self._feed,
        )
        return engine, tokens, stablecoin

    async def refresh_prices(self) -> None:
        refresh = getattr(self._feed, "refresh", None)
        if refresh is not None:
            await refresh([reg.price_feed_id for reg in self._registry])

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def price_table(self) -> list[tuple[str, PriceData, int]]:
        """``(symbol, price, value of one whole unit)`` per collateral asset."""
        engine, _, _ = self.build_engine()
        rows: list[tuple[str, PriceData, int]] = []
        for reg in self._registry:
            price = engine.oracle.price_of(reg.asset_id)
            rows.append((reg.symbol, price, engine.usd_value_of(reg.asset_id, PRECISION)))
        return rows

    def simulate(self, collateral: Mapping[str, int], debt: int = 0) -> PositionReport:
        """Deposit ``collateral`` (symbol → fixed amount) and try to mint ``debt``."""
        engine, tokens, _ = self.build_engine()
        account = SIMULATED_ACCOUNT

        for symbol, amount in collateral.items():
            reg = self._registry.by_symbol(symbol)
            token = tokens[reg.asset_id]
            token.faucet(account, amount)
            token.as_caller(account).approve(engine.address, amount)
            engine.deposit_collateral(account, reg.asset_id, amount)

        collateral_value = engine.collateral_value_of(account)
        max_mintable = engine.max_mintable(account)
        accepted = True
        if debt > 0:
            try:
                engine.mint(account, debt)
            except HealthFactorBroken as e:
                logger.debug("Simulated mint of %d refused: %s", debt, e)
                accepted = False

        return PositionReport(
            collateral_value=collateral_value,
            debt=debt,
            health_factor=engine.calculate_health_factor(collateral_value, debt),
            max_mintable=max_mintable,
            accepted=accepted,
        )

    def liquidation_quote(self, symbol: str, debt_to_cover: int) -> LiquidationQuote:
        """Collateral a liquidator would receive for covering ``debt_to_cover``."""
        engine, _, _ = self.build_engine()
        reg = self._registry.by_symbol(symbol)
        risk = self._config.risk
        base = engine.token_amount_for_value(reg.asset_id, debt_to_cover)
        bonus = base * risk.liquidation_bonus // risk.liquidation_precision
        total = base + bonus
        return LiquidationQuote(
            symbol=reg.symbol,
            debt_to_cover=debt_to_cover,
            base_collateral=base,
            bonus_collateral=bonus,
            total_collateral=total,
            collateral_value=engine.usd_value_of(reg.asset_id, total),
        )

    # ------------------------------------------------------------------
    # Formatting helpers
    # ------------------------------------------------------------------

    def _status(self, health_factor: int) -> str:
        if health_factor >= MAX_HEALTH_FACTOR:
            return "✅ No debt"
        if health_factor >= self._config.risk.min_health_factor:
            return "✅ Healthy"
        return "🚨 Liquidatable"

    def format_report(self, report: PositionReport) -> str:
        verdict = "accepted" if report.accepted else "REFUSED (health factor broken)"
        return (
            f"{self._status(report.health_factor)}\n"
            f"\n"
            f"Collateral value: ${format_fixed(report.collateral_value, places=2)}\n"
            f"Debt: {format_fixed(report.debt, places=2)}\n"
            f"Health Factor: {format_health_factor(report.health_factor)}\n"
            f"Max mintable: {format_fixed(report.max_mintable, places=2)}\n"
            f"Mint {verdict}"
        )

    @staticmethod
    def format_quote(quote: LiquidationQuote) -> str:
        return (
            f"Cover {format_fixed(quote.debt_to_cover, places=2)} debt → receive "
            f"{format_fixed(quote.total_collateral)} {quote.symbol} "
            f"({format_fixed(quote.base_collateral)} + "
            f"{format_fixed(quote.bonus_collateral)} bonus), "
            f"worth ${format_fixed(quote.collateral_value, places=2)}"
        )
