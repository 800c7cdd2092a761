"""
Tests for the quote cache policy and GetMarketDataUseCase.

The provider is a MagicMock and the cache clock is a mutable fake, so every
state transition (absent, fresh, stale) is driven explicitly.
"""

from unittest.mock import MagicMock

import pytest

from src.application.use_cases.get_market_data import GetMarketDataUseCase
from src.domain.entities.quote import Quote
from src.domain.errors import MarketDataError
from src.domain.ports.market_data_port import IMarketDataProvider
from src.domain.services.quote_cache import (
    CacheAction,
    CacheEntry,
    CacheState,
    QuoteCache,
    decide,
    entry_state,
)


def _quote(price: float, symbol: str = "EURUSD") -> Quote:
    return Quote(
        symbol=symbol, yahoo_symbol=f"{symbol}=X", price=price,
        bid=price - 0.00001, ask=price + 0.00001, change=0.0, change_percent=0.0,
        digits=5, spread=0.00002, tick_size=0.00001, timestamp=0,
        currency="USD", market_state="REGULAR",
    )


class FakeClock:
    def __init__(self, now: int = 1_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def provider():
    return MagicMock(spec=IMarketDataProvider)


@pytest.fixture
def use_case(provider, clock):
    return GetMarketDataUseCase(provider, QuoteCache(ttl_ms=60_000, clock=clock))


class TestCachePolicy:
    def test_entry_state(self):
        entry = CacheEntry(data=_quote(1.1), timestamp=1000)
        assert entry_state(None, 5000, 60_000) is CacheState.ABSENT
        assert entry_state(entry, 60_999, 60_000) is CacheState.FRESH
        assert entry_state(entry, 61_000, 60_000) is CacheState.STALE

    @pytest.mark.parametrize(
        "state, failed, action",
        [
            (CacheState.FRESH, False, CacheAction.SERVE_CACHED),
            (CacheState.STALE, False, CacheAction.FETCH),
            (CacheState.ABSENT, False, CacheAction.FETCH),
            (CacheState.STALE, True, CacheAction.SERVE_STALE),
            (CacheState.FRESH, True, CacheAction.SERVE_STALE),
            (CacheState.ABSENT, True, CacheAction.RAISE),
        ],
    )
    def test_decide(self, state, failed, action):
        assert decide(state, fetch_failed=failed) is action

    def test_keys_are_upper_cased(self, clock):
        cache = QuoteCache(clock=clock)
        cache.put("eurusd", _quote(1.1))
        assert cache.get("EURUSD") is not None
        assert cache.state("EurUsd") is CacheState.FRESH


class TestGetMarketData:
    def test_second_call_within_ttl_uses_cache(self, use_case, provider, clock):
        provider.fetch_quote.return_value = _quote(1.1)
        first = use_case.execute("EURUSD")
        clock.now += 59_999
        second = use_case.execute("eurusd")
        assert provider.fetch_quote.call_count == 1
        assert first is second

    def test_refetch_after_ttl(self, use_case, provider, clock):
        provider.fetch_quote.side_effect = [_quote(1.1), _quote(1.2)]
        use_case.execute("EURUSD")
        clock.now += 60_000
        assert use_case.execute("EURUSD").price == 1.2
        assert provider.fetch_quote.call_count == 2

    def test_stale_fallback_after_failure(self, use_case, provider, clock):
        good = _quote(1.1)
        provider.fetch_quote.side_effect = [good, MarketDataError("EURUSD", "HTTP 503")]
        use_case.execute("EURUSD")
        clock.now += 120_000
        assert use_case.execute("EURUSD") == good

    def test_stale_fallback_keeps_original_timestamp(self, use_case, provider, clock):
        cache = use_case._cache
        provider.fetch_quote.side_effect = [_quote(1.1), MarketDataError("EURUSD", "timeout")]
        use_case.execute("EURUSD")
        stored_at = cache.get("EURUSD").timestamp
        clock.now += 120_000
        use_case.execute("EURUSD")
        assert cache.get("EURUSD").timestamp == stored_at
        assert cache.state("EURUSD") is CacheState.STALE

    def test_cold_failure_raises(self, use_case, provider):
        provider.fetch_quote.side_effect = MarketDataError("EURUSD", "HTTP 404")
        with pytest.raises(MarketDataError):
            use_case.execute("EURUSD")

    def test_failures_are_per_symbol(self, use_case, provider):
        provider.fetch_quote.side_effect = [_quote(1.1), MarketDataError("GBPUSD", "HTTP 500")]
        use_case.execute("EURUSD")
        with pytest.raises(MarketDataError):
            use_case.execute("GBPUSD")

    def test_blank_symbol_rejected(self, use_case):
        with pytest.raises(ValueError):
            use_case.execute("  ")

    def test_clear_cache_forces_fetch(self, use_case, provider):
        provider.fetch_quote.return_value = _quote(1.1)
        use_case.execute("EURUSD")
        use_case.clear_cache()
        use_case.execute("EURUSD")
        assert provider.fetch_quote.call_count == 2
