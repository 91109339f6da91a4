"""Collateral & debt ledger — the single source of truth for positions."""
from __future__ import annotations

import logging
from typing import Any

from .errors import InsufficientBalance, NonPositiveAmount
from .oracles.adapter import OracleAdapter
from .registry import AssetRegistry

logger = logging.getLogger(__name__)


def require_positive(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise TypeError(f"Amount must be an int, got {type(amount).__name__}")
    if amount <= 0:
        raise NonPositiveAmount(amount)


class Ledger:
    """Per-account collateral balances and minted debt.

    Collateral is keyed by ``(account, asset_id)`` and debt by ``account``;
    both are zero until first credited and are never removed.
    """

    def __init__(self, registry: AssetRegistry, oracle: OracleAdapter) -> None:
        self._registry = registry
        self._oracle = oracle
        self._collateral: dict[tuple[str, str], int] = {}
        self._debt: dict[str, int] = {}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def collateral_balance(self, account: str, asset_id: str) -> int:
        return self._collateral.get((account, asset_id), 0)

    def debt_of(self, account: str) -> int:
        return self._debt.get(account, 0)

    def total_collateral_value(self, account: str) -> int:
        """Value of every registered asset the account holds, zero balances included."""
        total = 0
        for reg in self._registry:
            amount = self.collateral_balance(account, reg.asset_id)
            total += self._oracle.value_of(reg.asset_id, amount)
        return total

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def credit_collateral(self, account: str, asset_id: str, amount: int) -> None:
        require_positive(amount)
        self._registry.get(asset_id)
        key = (account, asset_id)
        self._collateral[key] = self._collateral.get(key, 0) + amount

    def debit_collateral(self, account: str, asset_id: str, amount: int) -> None:
        require_positive(amount)
        self._registry.get(asset_id)
        key = (account, asset_id)
        balance = self._collateral.get(key, 0)
        if amount > balance:
            raise InsufficientBalance(f"{account} collateral {asset_id}", balance, amount)
        self._collateral[key] = balance - amount

    def credit_debt(self, account: str, amount: int) -> None:
        require_positive(amount)
        self._debt[account] = self._debt.get(account, 0) + amount

    def debit_debt(self, account: str, amount: int) -> None:
        require_positive(amount)
        balance = self._debt.get(account, 0)
        if amount > balance:
            raise InsufficientBalance(f"{account} debt", balance, amount)
        self._debt[account] = balance - amount

    # ------------------------------------------------------------------
    # Snapshot / restore
    # ------------------------------------------------------------------

    def snapshot(self) -> Any:
        return dict(self._collateral), dict(self._debt)

    def restore(self, state: Any) -> None:
        collateral, debt = state
        self._collateral = dict(collateral)
        self._debt = dict(debt)
