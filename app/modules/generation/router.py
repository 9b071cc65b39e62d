"""Round-robin selection over the configured provider adapters."""

from __future__ import annotations

import itertools
from typing import Sequence

from app.modules.generation.providers import ProviderAdapter


class ProviderRouter:
    """Deterministic rotation: ``counter += 1; index = counter % len(adapters)``.

    The counter belongs to the router instance. ``next()`` on an
    ``itertools.count`` is a single atomic step, so concurrent callers may
    interleave but never corrupt it. Failed providers are not skipped and
    nothing is retried here.
    """

    def __init__(self, adapters: Sequence[ProviderAdapter]) -> None:
        if not adapters:
            raise ValueError("ProviderRouter needs at least one adapter")
        self.adapters = tuple(adapters)
        self._counter = itertools.count(1)
        self._last = 0

    def select(self) -> ProviderAdapter:
        adapter, _ = self.select_numbered()
        return adapter

    def select_numbered(self) -> tuple[ProviderAdapter, int]:
        """Pick an adapter and return it with the request number that chose it."""
        n = next(self._counter)
        self._last = n
        return self.adapters[n % len(self.adapters)], n

    @property
    def requests_routed(self) -> int:
        return self._last

    def __len__(self) -> int:
        return len(self.adapters)
