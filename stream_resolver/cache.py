"""Short-lived in-process memoization of resolution results."""

from __future__ import annotations

import time
from typing import Callable, Dict, Optional, Tuple

from .schemas import ResolutionResult


class ResponseCache:
    """TTL map; expired entries are dropped when they are next read."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: Dict[str, Tuple[ResolutionResult, float]] = {}

    def get(self, key: str) -> Optional[ResolutionResult]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self.clock() >= expires_at:
            self._entries.pop(key, None)
            return None
        return value

    def put(self, key: str, value: ResolutionResult) -> None:
        self._entries[key] = (value, self.clock() + self.ttl_seconds)

    def __len__(self) -> int:
        return len(self._entries)
