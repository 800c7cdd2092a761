"""
Use-case: retrieve a quote for a symbol, served from cache when fresh.
Depends only on Domain ports, entities and services.

Availability wins over freshness: once a symbol has been fetched
successfully, later upstream failures are answered with the last good quote
and never reach the caller.
"""

import logging

from src.domain.entities.quote import Quote
from src.domain.errors import MarketDataError
from src.domain.ports.market_data_port import IMarketDataProvider
from src.domain.services.quote_cache import CacheAction, QuoteCache, decide

logger = logging.getLogger(__name__)


class GetMarketDataUseCase:
    def __init__(self, provider: IMarketDataProvider, cache: QuoteCache) -> None:
        self._provider = provider
        self._cache = cache

    def execute(self, symbol: str) -> Quote:
        """Return the quote for *symbol* (upper-cased).

        Raises:
            ValueError: if *symbol* is blank.
            MarketDataError: if the fetch fails and nothing was ever cached.
        """
        if not symbol or not symbol.strip():
            raise ValueError("symbol must be a non-empty string")
        symbol = symbol.upper().strip()

        state = self._cache.state(symbol)
        if decide(state) is CacheAction.SERVE_CACHED:
            logger.debug("Using cached quote for %s", symbol)
            return self._cache.get(symbol).data

        try:
            logger.info("Fetching fresh quote for %s", symbol)
            quote = self._provider.fetch_quote(symbol)
        except MarketDataError as exc:
            logger.error("Quote fetch failed for %s: %s", symbol, exc.reason)
            if decide(state, fetch_failed=True) is CacheAction.RAISE:
                raise
            logger.warning("Serving stale quote for %s after upstream error", symbol)
            return self._cache.get(symbol).data

        self._cache.put(symbol, quote)
        return quote

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.info("Quote cache cleared")
