"""Token protocols — collateral assets and the stablecoin issuer.

Implementations are bound to a caller: the engine holds clients bound to its
own address, so allowance and ownership checks see the engine as the caller.
"""
from typing import Protocol


class FungibleToken(Protocol):
    """Abstract interface for a fungible asset held in custody."""

    def transfer(self, to: str, amount: int) -> bool: ...

    def transfer_from(self, from_: str, to: str, amount: int) -> bool: ...


class StablecoinIssuer(FungibleToken, Protocol):
    """Fungible token whose mint/burn are restricted to its owner."""

    def mint(self, to: str, amount: int) -> bool: ...

    def burn(self, amount: int) -> None: ...
