"""Service modules"""
from .simulator import LiquidationQuote, PositionReport, PositionSimulator

__all__ = ["LiquidationQuote", "PositionReport", "PositionSimulator"]
