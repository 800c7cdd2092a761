"""
Time-bounded quote cache with stale-on-error fallback.

Entries are never evicted by age: a STALE entry stays in the map and is
served only when a refresh attempt fails. The policy itself lives in the
pure `decide` function so it can be exercised without any network code.

Not thread-safe; concurrent writers for one key are last-writer-wins, which
is harmless because entries are immutable.
"""

import enum
import time
from dataclasses import dataclass
from typing import Callable, Optional

from src.domain.entities.quote import Quote

DEFAULT_TTL_MS = 60_000


class CacheState(str, enum.Enum):
    FRESH = "fresh"
    STALE = "stale"
    ABSENT = "absent"


class CacheAction(str, enum.Enum):
    SERVE_CACHED = "serve_cached"
    FETCH = "fetch"
    SERVE_STALE = "serve_stale"
    RAISE = "raise"


@dataclass(frozen=True)
class CacheEntry:
    data: Quote
    timestamp: int


def entry_state(entry: Optional[CacheEntry], now_ms: int, ttl_ms: int) -> CacheState:
    if entry is None:
        return CacheState.ABSENT
    if now_ms - entry.timestamp < ttl_ms:
        return CacheState.FRESH
    return CacheState.STALE


def decide(state: CacheState, fetch_failed: bool = False) -> CacheAction:
    """What to do for a request, before fetching or after a failed fetch."""
    if not fetch_failed:
        return CacheAction.SERVE_CACHED if state is CacheState.FRESH else CacheAction.FETCH
    if state is CacheState.ABSENT:
        return CacheAction.RAISE
    return CacheAction.SERVE_STALE


def _epoch_ms() -> int:
    return int(time.time() * 1000)


class QuoteCache:
    """Process-wide map of upper-cased symbol to the last good quote."""

    def __init__(
        self,
        ttl_ms: int = DEFAULT_TTL_MS,
        clock: Callable[[], int] = _epoch_ms,
    ) -> None:
        self._ttl_ms = ttl_ms
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    @staticmethod
    def key(symbol: str) -> str:
        return symbol.upper()

    def now(self) -> int:
        return self._clock()

    def get(self, symbol: str) -> Optional[CacheEntry]:
        return self._entries.get(self.key(symbol))

    def state(self, symbol: str) -> CacheState:
        return entry_state(self.get(symbol), self.now(), self._ttl_ms)

    def put(self, symbol: str, quote: Quote) -> CacheEntry:
        entry = CacheEntry(data=quote, timestamp=self.now())
        self._entries[self.key(symbol)] = entry
        return entry

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
