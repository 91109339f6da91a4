"""Working-copy transactions for engine operations.

Every enlisted resource is snapshotted on entry. If the body raises, each
resource is restored and buffered events are dropped; otherwise the events are
handed to the commit callback in emission order.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from .interfaces.snapshot import Snapshotable

logger = logging.getLogger(__name__)


class Transaction:
    def __init__(
        self,
        resources: Iterable[Snapshotable],
        on_commit: Callable[[list[Any]], None] | None = None,
    ) -> None:
        # Shared tokens may be enlisted through more than one client.
        self._resources: list[Snapshotable] = []
        seen: set[int] = set()
        for res in resources:
            key = id(getattr(res, "token", res))
            if key not in seen:
                seen.add(key)
                self._resources.append(res)
        self._on_commit = on_commit
        self._snapshots: list[tuple[Snapshotable, Any]] = []
        self.events: list[Any] = []

    def emit(self, event: Any) -> None:
        self.events.append(event)

    def __enter__(self) -> Transaction:
        self._snapshots = [(res, res.snapshot()) for res in self._resources]
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            for res, state in reversed(self._snapshots):
                res.restore(state)
            logger.debug(
                "Transaction rolled back (%s); %d event(s) discarded",
                exc_type.__name__, len(self.events),
            )
            self.events = []
            return False
        if self._on_commit is not None:
            self._on_commit(self.events)
        return False
