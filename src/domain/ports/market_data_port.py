"""
Ports (interfaces) for market data providers.
Infrastructure adapters (e.g. YahooChartMarketDataProvider,
YFinancePriceHistoryProvider) must implement these interfaces.
"""

from abc import ABC, abstractmethod

from src.domain.entities.quote import HistoricalPrices, Quote


class IMarketDataProvider(ABC):
    @abstractmethod
    def fetch_quote(self, symbol: str) -> Quote:
        """Fetch a fresh quote for a canonical *symbol*.

        Raises:
            MarketDataError: on any upstream, transport or payload failure.
        """
        ...


class IPriceHistoryProvider(ABC):
    @abstractmethod
    def get_historical_prices(
        self,
        symbol: str,
        period: str = "1mo",
        interval: str = "1d",
    ) -> HistoricalPrices:
        """Return OHLCV bars for a canonical *symbol*.

        Raises:
            MarketDataError: if no history is available.
        """
        ...
