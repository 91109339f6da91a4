"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from stablecoin_engine.config import (
    AppConfig,
    CollateralConfig,
    EngineConfig,
    OracleConfig,
    PythConfig,
    RiskConfig,
)
from stablecoin_engine.engine import StablecoinEngine
from stablecoin_engine.oracles import StaticPriceFeed
from stablecoin_engine.registry import AssetRegistry
from stablecoin_engine.tokens import InMemoryStablecoin, InMemoryToken

ENGINE = "0x00000000000000000000000000000000000e6e1e"
DSC = "0x0000000000000000000000000000000000000d5c"
WETH = "0x000000000000000000000000000000000000e7e4"
WBTC = "0x000000000000000000000000000000000000b7c0"
ETH_FEED = "ff61491a931112ddf1bd8147cd1b641375f79f5825126d665480874634fd0ace"
BTC_FEED = "e62df6c8b4a85fe1a67db44dc12de5db330f7ac66b72dc658afedf0f4a415b43"

USER = "0x00000000000000000000000000000000000a11ce"
LIQUIDATOR = "0x0000000000000000000000000000000000000b0b"

ONE = 10**18
ETH_USD = 2000 * 10**8
BTC_USD = 1000 * 10**8


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_risk() -> RiskConfig:
    return RiskConfig()


@pytest.fixture()
def sample_app_config(sample_risk: RiskConfig) -> AppConfig:
    return AppConfig(
        engine=EngineConfig(address=ENGINE, stablecoin=DSC),
        risk=sample_risk,
        collateral=(
            CollateralConfig(symbol="WETH", asset=WETH, price_feed=ETH_FEED),
            CollateralConfig(symbol="WBTC", asset=WBTC, price_feed=BTC_FEED),
        ),
        oracle=OracleConfig(provider="pyth", pyth=PythConfig(hermes_url="https://hermes.example.com")),
    )


@pytest.fixture()
def registry(sample_app_config: AppConfig) -> AssetRegistry:
    return sample_app_config.build_registry()


# ---------------------------------------------------------------------------
# Collaborator fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def price_feed() -> StaticPriceFeed:
    feed = StaticPriceFeed()
    feed.set_price(ETH_FEED, ETH_USD)
    feed.set_price(BTC_FEED, BTC_USD)
    return feed


@pytest.fixture()
def weth() -> InMemoryToken:
    return InMemoryToken("WETH", WETH)


@pytest.fixture()
def wbtc() -> InMemoryToken:
    return InMemoryToken("WBTC", WBTC)


@pytest.fixture()
def dsc() -> InMemoryStablecoin:
    return InMemoryStablecoin("DSC", DSC, owner=ENGINE)


@pytest.fixture()
def engine(
    sample_app_config: AppConfig,
    weth: InMemoryToken,
    wbtc: InMemoryToken,
    dsc: InMemoryStablecoin,
    price_feed: StaticPriceFeed,
) -> StablecoinEngine:
    return StablecoinEngine.from_config(
        sample_app_config,
        collateral_tokens={WETH: weth.as_caller(ENGINE), WBTC: wbtc.as_caller(ENGINE)},
        stablecoin=dsc.as_caller(ENGINE),
        price_feed=price_feed,
    )


def fund(token: InMemoryToken, account: str, amount: int) -> None:
    """Give ``account`` tokens and approve the engine to pull them."""
    token.faucet(account, amount)
    token.as_caller(account).approve(ENGINE, token.allowance(account, ENGINE) + amount)


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent(f"""\
    engine:
      address: "{ENGINE}"
      stablecoin: "{DSC}"
    risk:
      liquidation_threshold: 50
      liquidation_precision: 100
      liquidation_bonus: 10
      min_health_factor: 1000000000000000000
    collateral:
      - symbol: WETH
        asset: "{WETH}"
        price_feed: "{ETH_FEED}"
      - symbol: WBTC
        asset: "{WBTC}"
        price_feed: "{BTC_FEED}"
    oracle:
      provider: pyth
      pyth:
        hermes_url: "https://hermes.example.com"
        timeout: 10
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
