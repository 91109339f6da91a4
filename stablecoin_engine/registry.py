"""Immutable collateral registry built once at engine construction."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Mapping, Sequence

from .errors import AssetNotAllowed, DuplicateAsset, RegistryLengthMismatch, ZeroAddress
from .models import AssetRegistration


def is_zero_address(value: str) -> bool:
    """True for an empty identifier or one that is all zeros (``0x000...``)."""
    if not value:
        return True
    digits = value[2:] if value.lower().startswith("0x") else value
    return digits == "" or set(digits) == {"0"}


@dataclass(frozen=True)
class AssetRegistry:
    """Ordered, read-only asset -> price feed mapping."""

    registrations: tuple[AssetRegistration, ...] = ()
    _by_asset: Mapping[str, AssetRegistration] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        by_asset: dict[str, AssetRegistration] = {}
        for reg in self.registrations:
            if is_zero_address(reg.asset_id):
                raise ZeroAddress("Collateral asset")
            if is_zero_address(reg.price_feed_id):
                raise ZeroAddress(f"Price feed for {reg.asset_id}")
            if reg.asset_id in by_asset:
                raise DuplicateAsset(reg.asset_id)
            by_asset[reg.asset_id] = reg
        object.__setattr__(self, "_by_asset", MappingProxyType(by_asset))

    @classmethod
    def from_lists(
        cls,
        asset_ids: Sequence[str],
        price_feed_ids: Sequence[str],
        symbols: Sequence[str] | None = None,
    ) -> AssetRegistry:
        """Build a registry from parallel asset / feed lists."""
        if len(asset_ids) != len(price_feed_ids):
            raise RegistryLengthMismatch(len(asset_ids), len(price_feed_ids))
        if symbols is None:
            symbols = [""] * len(asset_ids)
        return cls(
            tuple(
                AssetRegistration(asset_id=a, price_feed_id=f, symbol=s)
                for a, f, s in zip(asset_ids, price_feed_ids, symbols)
            )
        )

    @property
    def asset_ids(self) -> tuple[str, ...]:
        return tuple(reg.asset_id for reg in self.registrations)

    def get(self, asset_id: str) -> AssetRegistration:
        try:
            return self._by_asset[asset_id]
        except KeyError:
            raise AssetNotAllowed(asset_id) from None

    def price_feed_for(self, asset_id: str) -> str:
        return self.get(asset_id).price_feed_id

    def by_symbol(self, symbol: str) -> AssetRegistration:
        """Look up a registration by symbol (case-insensitive) or asset id."""
        for reg in self.registrations:
            if reg.symbol.upper() == symbol.upper() or reg.asset_id == symbol:
                return reg
        raise AssetNotAllowed(symbol)

    def __contains__(self, asset_id: object) -> bool:
        return asset_id in self._by_asset

    def __iter__(self) -> Iterator[AssetRegistration]:
        return iter(self.registrations)

    def __len__(self) -> int:
        return len(self.registrations)
