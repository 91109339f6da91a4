"""Unit tests for config loading, env interpolation, and validation."""
from __future__ import annotations

from pathlib import Path

import pytest

from stablecoin_engine.config import (
    AppConfig,
    CollateralConfig,
    RiskConfig,
    _interpolate_env,
    load_config,
)
from stablecoin_engine.errors import DuplicateAsset
from stablecoin_engine.units import PRECISION
from tests.conftest import BTC_FEED, DSC, ENGINE, ETH_FEED, WBTC, WETH


class TestInterpolateEnv:
    def test_simple_substitution(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MY_VAR", "hello")
        assert _interpolate_env("${MY_VAR}") == "hello"

    def test_missing_var_becomes_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NONEXISTENT_VAR_XYZ", raising=False)
        assert _interpolate_env("${NONEXISTENT_VAR_XYZ}") == ""

    def test_nested_dict(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TOK", "secret")
        result = _interpolate_env({"key": "${TOK}", "plain": "text"})
        assert result == {"key": "secret", "plain": "text"}

    def test_nested_list(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("A", "x")
        assert _interpolate_env(["${A}", "y"]) == ["x", "y"]

    def test_non_string_passthrough(self) -> None:
        assert _interpolate_env(42) == 42
        assert _interpolate_env(True) is True


def _write(tmp_path: Path, body: str) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(body)
    return cfg_file


def _yaml(risk: str = "", collateral: str | None = None, engine: str | None = None,
          oracle: str = "oracle: {provider: pyth}") -> str:
    if engine is None:
        engine = f'engine: {{address: "{ENGINE}", stablecoin: "{DSC}"}}'
    if collateral is None:
        collateral = (
            "collateral:\n"
            f'  - {{symbol: WETH, asset: "{WETH}", price_feed: "{ETH_FEED}"}}\n'
        )
    return f"{engine}\n{risk}\n{collateral}\n{oracle}\n"


class TestLoadConfig:
    def test_loads_valid_yaml(self, sample_yaml_path: Path) -> None:
        cfg = load_config(sample_yaml_path)
        assert isinstance(cfg, AppConfig)
        assert cfg.engine.address == ENGINE
        assert [c.symbol for c in cfg.collateral] == ["WETH", "WBTC"]
        assert cfg.risk.liquidation_bonus == 10
        assert cfg.risk.min_health_factor == PRECISION
        assert cfg.oracle.pyth.timeout == 10

    def test_registry_from_config(self, sample_yaml_path: Path) -> None:
        reg = load_config(sample_yaml_path).build_registry()
        assert reg.asset_ids == (WETH, WBTC)
        assert reg.price_feed_for(WBTC) == BTC_FEED

    def test_defaults(self, tmp_path: Path) -> None:
        cfg = load_config(_write(tmp_path, _yaml()))
        assert cfg.risk == RiskConfig()
        assert cfg.oracle.pyth.hermes_url.startswith("https://hermes.pyth.network")

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nonexistent.yaml")

    def test_env_interpolation_in_yaml(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TEST_ENGINE_ADDR", "0xABCDEF")
        engine = f'engine: {{address: "${{TEST_ENGINE_ADDR}}", stablecoin: "{DSC}"}}'
        cfg = load_config(_write(tmp_path, _yaml(engine=engine)))
        assert cfg.engine.address == "0xABCDEF"


class TestValidation:
    def test_no_collateral_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="At least one collateral"):
            load_config(_write(tmp_path, _yaml(collateral="collateral: []")))

    def test_zero_stablecoin_raises(self, tmp_path: Path) -> None:
        engine = f'engine: {{address: "{ENGINE}", stablecoin: "0x0000000000000000000000000000000000000000"}}'
        with pytest.raises(ValueError, match="Stablecoin address"):
            load_config(_write(tmp_path, _yaml(engine=engine)))

    def test_threshold_out_of_range(self, tmp_path: Path) -> None:
        risk = "risk: {liquidation_threshold: 150}"
        with pytest.raises(ValueError, match="liquidation_threshold"):
            load_config(_write(tmp_path, _yaml(risk=risk)))

    def test_negative_bonus(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="liquidation_bonus"):
            load_config(_write(tmp_path, _yaml(risk="risk: {liquidation_bonus: -1}")))

    def test_unknown_provider(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="provider"):
            load_config(_write(tmp_path, _yaml(oracle="oracle: {provider: chainlink}")))

    def test_missing_symbol(self, tmp_path: Path) -> None:
        collateral = f'collateral:\n  - {{asset: "{WETH}", price_feed: "{ETH_FEED}"}}\n'
        with pytest.raises(ValueError, match="no symbol"):
            load_config(_write(tmp_path, _yaml(collateral=collateral)))

    def test_duplicate_asset(self, tmp_path: Path) -> None:
        collateral = (
            "collateral:\n"
            f'  - {{symbol: WETH, asset: "{WETH}", price_feed: "{ETH_FEED}"}}\n'
            f'  - {{symbol: WETH2, asset: "{WETH}", price_feed: "{BTC_FEED}"}}\n'
        )
        with pytest.raises(DuplicateAsset):
            load_config(_write(tmp_path, _yaml(collateral=collateral)))


class TestFrozenConfigs:
    def test_risk_immutable(self) -> None:
        r = RiskConfig()
        with pytest.raises(AttributeError):
            r.liquidation_bonus = 99  # type: ignore[misc]

    def test_collateral_immutable(self) -> None:
        c = CollateralConfig(symbol="WETH", asset=WETH, price_feed=ETH_FEED)
        with pytest.raises(AttributeError):
            c.asset = "0x1"  # type: ignore[misc]
