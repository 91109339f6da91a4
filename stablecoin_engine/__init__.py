"""Over-collateralized stablecoin engine."""
from .engine import StablecoinEngine
from .errors import EngineError
from .registry import AssetRegistry

__all__ = ["AssetRegistry", "EngineError", "StablecoinEngine"]
