"""Health factor engine — solvency score and the minimum-solvency check."""
from __future__ import annotations

import logging

from .config import RiskConfig
from .errors import HealthFactorBroken
from .ledger import Ledger
from .units import MAX_UINT256, PRECISION

logger = logging.getLogger(__name__)

# Returned for debt-free accounts: they can never be liquidated.
MAX_HEALTH_FACTOR = MAX_UINT256


class HealthFactorEngine:
    def __init__(self, ledger: Ledger, risk: RiskConfig) -> None:
        self._ledger = ledger
        self._risk = risk

    @property
    def min_health_factor(self) -> int:
        return self._risk.min_health_factor

    def calculate_health_factor(self, collateral_value: int, debt: int) -> int:
        """Threshold-adjust the collateral first, then scale and divide.

        The order matters: both divisions truncate.
        """
        if debt == 0:
            return MAX_HEALTH_FACTOR
        adjusted = (
            collateral_value
            * self._risk.liquidation_threshold
            // self._risk.liquidation_precision
        )
        return adjusted * PRECISION // debt

    def health_factor(self, account: str) -> int:
        debt = self._ledger.debt_of(account)
        if debt == 0:
            return MAX_HEALTH_FACTOR
        return self.calculate_health_factor(
            self._ledger.total_collateral_value(account), debt
        )

    def is_healthy(self, account: str) -> bool:
        return self.health_factor(account) >= self._risk.min_health_factor

    def assert_healthy(self, account: str) -> None:
        hf = self.health_factor(account)
        if hf < self._risk.min_health_factor:
            logger.debug("Health factor broken for %s: %d", account, hf)
            raise HealthFactorBroken(account, hf)

    def max_mintable(self, account: str) -> int:
        """Additional debt the account could mint right now and stay healthy.

        Largest ``d`` with ``adjusted * PRECISION // (debt + d) >= minimum``.
        """
        adjusted = (
            self._ledger.total_collateral_value(account)
            * self._risk.liquidation_threshold
            // self._risk.liquidation_precision
        )
        ceiling = adjusted * PRECISION // self._risk.min_health_factor
        return max(ceiling - self._ledger.debt_of(account), 0)
