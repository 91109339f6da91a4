"""In-memory token capabilities used for simulation and tests.

Balances and allowances live in plain dicts; callers act through a
``TokenClient`` bound to their address, mirroring how an on-chain call carries
its sender.
"""
from __future__ import annotations

import logging
from typing import Any, Callable

from .registry import is_zero_address

logger = logging.getLogger(__name__)

# Called as hook(token, from_, to, amount) after a balance moves.
TransferHook = Callable[["InMemoryToken", str, str, int], None]


class InMemoryToken:
    """Fungible token with balances, allowances and an optional transfer hook."""

    def __init__(self, symbol: str, address: str = "") -> None:
        self.symbol = symbol
        self.address = address or f"0x{symbol.lower()}"
        self.balances: dict[str, int] = {}
        self.allowances: dict[tuple[str, str], int] = {}
        self.total_supply = 0
        self.on_transfer: TransferHook | None = None

    def as_caller(self, caller: str) -> TokenClient:
        return TokenClient(self, caller)

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def faucet(self, to: str, amount: int) -> None:
        """Create ``amount`` out of thin air for ``to`` (simulation only)."""
        self.balances[to] = self.balance_of(to) + amount
        self.total_supply += amount

    def allowance(self, owner: str, spender: str) -> int:
        return self.allowances.get((owner, spender), 0)

    # ------------------------------------------------------------------
    # Caller-scoped operations (reached through TokenClient)
    # ------------------------------------------------------------------

    def _move(self, from_: str, to: str, amount: int) -> bool:
        if amount < 0 or is_zero_address(to):
            return False
        if self.balance_of(from_) < amount:
            logger.debug(
                "%s transfer of %d from %s refused: balance %d",
                self.symbol, amount, from_, self.balance_of(from_),
            )
            return False
        self.balances[from_] = self.balance_of(from_) - amount
        self.balances[to] = self.balance_of(to) + amount
        if self.on_transfer is not None:
            self.on_transfer(self, from_, to, amount)
        return True

    def _transfer(self, caller: str, to: str, amount: int) -> bool:
        return self._move(caller, to, amount)

    def _transfer_from(self, caller: str, from_: str, to: str, amount: int) -> bool:
        allowed = self.allowance(from_, caller)
        if caller != from_ and allowed < amount:
            logger.debug(
                "%s transfer_from %s by %s refused: allowance %d < %d",
                self.symbol, from_, caller, allowed, amount,
            )
            return False
        if not self._move(from_, to, amount):
            return False
        if caller != from_:
            self.allowances[(from_, caller)] = allowed - amount
        return True

    def _approve(self, caller: str, spender: str, amount: int) -> bool:
        self.allowances[(caller, spender)] = amount
        return True

    def _mint(self, caller: str, to: str, amount: int) -> bool:
        if amount <= 0 or is_zero_address(to):
            return False
        self.balances[to] = self.balance_of(to) + amount
        self.total_supply += amount
        return True

    def _burn(self, caller: str, amount: int) -> None:
        balance = self.balance_of(caller)
        if amount <= 0 or balance < amount:
            raise ValueError(f"{self.symbol}: cannot burn {amount} (balance {balance})")
        self.balances[caller] = balance - amount
        self.total_supply -= amount

    # ------------------------------------------------------------------
    # Snapshot / restore
    # ------------------------------------------------------------------

    def snapshot(self) -> Any:
        return dict(self.balances), dict(self.allowances), self.total_supply

    def restore(self, state: Any) -> None:
        balances, allowances, total_supply = state
        self.balances = dict(balances)
        self.allowances = dict(allowances)
        self.total_supply = total_supply


class InMemoryStablecoin(InMemoryToken):
    """Pegged unit of account: anyone may transfer, only the owner mints and burns."""

    def __init__(self, symbol: str = "DSC", address: str = "", owner: str = "") -> None:
        super().__init__(symbol, address)
        self.owner = owner

    def _mint(self, caller: str, to: str, amount: int) -> bool:
        if caller != self.owner:
            logger.debug("%s mint by non-owner %s refused", self.symbol, caller)
            return False
        return super()._mint(caller, to, amount)

    def _burn(self, caller: str, amount: int) -> None:
        if caller != self.owner:
            raise PermissionError(f"{self.symbol}: only the owner may burn")
        super()._burn(caller, amount)


class TokenClient:
    """A token as seen by one caller."""

    def __init__(self, token: InMemoryToken, caller: str) -> None:
        self.token = token
        self.caller = caller

    def transfer(self, to: str, amount: int) -> bool:
        return self.token._transfer(self.caller, to, amount)

    def transfer_from(self, from_: str, to: str, amount: int) -> bool:
        return self.token._transfer_from(self.caller, from_, to, amount)

    def approve(self, spender: str, amount: int) -> bool:
        return self.token._approve(self.caller, spender, amount)

    def mint(self, to: str, amount: int) -> bool:
        return self.token._mint(self.caller, to, amount)

    def burn(self, amount: int) -> None:
        self.token._burn(self.caller, amount)

    def balance_of(self, account: str) -> int:
        return self.token.balance_of(account)

    def snapshot(self) -> Any:
        return self.token.snapshot()

    def restore(self, state: Any) -> None:
        self.token.restore(state)
