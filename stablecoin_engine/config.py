"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .registry import AssetRegistry, is_zero_address
from .units import PRECISION

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RiskConfig:
    liquidation_threshold: int = 50
    liquidation_precision: int = 100
    liquidation_bonus: int = 10
    min_health_factor: int = PRECISION


@dataclass(frozen=True)
class CollateralConfig:
    symbol: str = ""
    asset: str = ""
    price_feed: str = ""


@dataclass(frozen=True)
class PythConfig:
    hermes_url: str = "https://hermes.pyth.network/v2/updates/price/latest"
    timeout: int = 30


@dataclass(frozen=True)
class OracleConfig:
    provider: str = "pyth"
    pyth: PythConfig = field(default_factory=PythConfig)


@dataclass(frozen=True)
class EngineConfig:
    address: str = "0x00000000000000000000000000000000000e6e1e"
    stablecoin: str = "0x0000000000000000000000000000000000000d5c"


@dataclass(frozen=True)
class AppConfig:
    engine: EngineConfig = field(default_factory=EngineConfig)
    risk: RiskConfig = field(default_factory=RiskConfig)
    collateral: tuple[CollateralConfig, ...] = ()
    oracle: OracleConfig = field(default_factory=OracleConfig)

    def build_registry(self) -> AssetRegistry:
        """Registry from the configured collateral list (validated on build)."""
        return AssetRegistry.from_lists(
            [c.asset for c in self.collateral],
            [c.price_feed for c in self.collateral],
            [c.symbol for c in self.collateral],
        )


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_engine(raw: dict[str, Any]) -> EngineConfig:
    return EngineConfig(
        address=str(raw.get("address", EngineConfig.address)),
        stablecoin=str(raw.get("stablecoin", EngineConfig.stablecoin)),
    )


def _build_risk(raw: dict[str, Any]) -> RiskConfig:
    return RiskConfig(
        liquidation_threshold=int(raw.get("liquidation_threshold", 50)),
        liquidation_precision=int(raw.get("liquidation_precision", 100)),
        liquidation_bonus=int(raw.get("liquidation_bonus", 10)),
        min_health_factor=int(raw.get("min_health_factor", PRECISION)),
    )


def _build_collateral(raw: list[dict[str, Any]]) -> tuple[CollateralConfig, ...]:
    collateral: list[CollateralConfig] = []
    for c in raw:
        collateral.append(
            CollateralConfig(
                symbol=str(c.get("symbol", "")),
                asset=str(c.get("asset", "")),
                price_feed=str(c.get("price_feed", "")),
            )
        )
    return tuple(collateral)


def _build_oracle(raw: dict[str, Any]) -> OracleConfig:
    pyth_raw = raw.get("pyth", {}) or {}
    return OracleConfig(
        provider=raw.get("provider", "pyth"),
        pyth=PythConfig(
            hermes_url=pyth_raw.get("hermes_url", PythConfig.hermes_url),
            timeout=int(pyth_raw.get("timeout", 30)),
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate engine configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (two levels up from this file).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        engine=_build_engine(raw.get("engine", {}) or {}),
        risk=_build_risk(raw.get("risk", {}) or {}),
        collateral=_build_collateral(raw.get("collateral", []) or []),
        oracle=_build_oracle(raw.get("oracle", {}) or {}),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.collateral:
        raise ValueError("At least one collateral asset must be configured")

    if is_zero_address(cfg.engine.address):
        raise ValueError("Engine address must be set")
    if is_zero_address(cfg.engine.stablecoin):
        raise ValueError("Stablecoin address must be set")

    risk = cfg.risk
    if risk.liquidation_precision <= 0:
        raise ValueError("liquidation_precision must be positive")
    if not 0 < risk.liquidation_threshold <= risk.liquidation_precision:
        raise ValueError("liquidation_threshold must be in (0, liquidation_precision]")
    if risk.liquidation_bonus < 0:
        raise ValueError("liquidation_bonus must not be negative")
    if risk.min_health_factor <= 0:
        raise ValueError("min_health_factor must be positive")

    if cfg.oracle.provider != "pyth":
        raise ValueError(f"Unknown price oracle provider '{cfg.oracle.provider}'")

    for c in cfg.collateral:
        if not c.symbol:
            raise ValueError(f"Collateral '{c.asset}' has no symbol")

    cfg.build_registry()
