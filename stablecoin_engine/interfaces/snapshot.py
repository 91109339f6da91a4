"""Snapshot protocol — state that can take part in an engine transaction."""
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Snapshotable(Protocol):
    """Anything whose state can be captured and restored wholesale."""

    def snapshot(self) -> Any: ...

    def restore(self, state: Any) -> None: ...
